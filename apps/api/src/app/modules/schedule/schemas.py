"""Schedule schemas."""

from datetime import datetime

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator


class EventCreate(BaseModel):
    """Request body for POST /schedule."""

    name: str = Field(..., min_length=1, max_length=200)
    start: AwareDatetime
    end: AwareDatetime
    description: str = ""
    type: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)

    @model_validator(mode="after")
    def validate_times(self) -> "EventCreate":
        if self.end < self.start:
            raise ValueError("end cannot be before start")
        return self


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    start: datetime
    end: datetime
    description: str
    type: str
    location: str
