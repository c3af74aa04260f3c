"""
Application submission validation.

Checks a user's saved answers and reports problems keyed by form question.
An empty mapping means the application can be submitted.
"""

from pydantic import AnyUrl, TypeAdapter, ValidationError

from app.modules.users.models import User

_url_adapter = TypeAdapter(AnyUrl)


def _blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def _is_valid_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def validate_application(user: User) -> dict[str, str]:
    """
    Validate the application fields of a user.

    Has no side effects; safe to call on every submission attempt.

    Args:
        user: The user whose saved answers are checked

    Returns:
        Mapping of question key to a human readable error message
    """
    errors: dict[str, str] = {}

    if _blank(user.full_name):
        errors["name"] = "Please enter your full name."
    if _blank(user.preferred_name):
        errors["name"] = "Please enter your preferred name."
    if user.gender is None:
        errors["gender"] = "Please specify your gender."
    if not user.photo_release_agreed:
        errors["photoReleaseAgreed"] = "You must agree to the photo release to participate."
    if not user.liability_waiver_agreed:
        errors["liabilityWaiverAgreed"] = "You must agree to the liability waiver to participate."
    if not user.code_of_conduct_agreed:
        errors["codeOfConductAgreed"] = "You must agree to the code of conduct to participate."
    if _blank(user.major):
        errors["major"] = "Please provide your major."
    if user.classification is None:
        errors["classification"] = "Please specify your classification."
    if user.graduation is None:
        errors["graduationYear"] = "Please specify your graduation year."
    if user.hackathons_attended is None:
        errors["hackathonsAttended"] = "Please specify the number of hackathons you have attended."
    if user.referrer is None:
        errors["referrer"] = "Please specify how you heard about us."
    if _blank(user.excited_about):
        errors["excitedAbout"] = "Please tell us what you are excited about."
    if not _blank(user.website) and not _is_valid_url(user.website.strip()):
        errors["website"] = "Please enter a valid URL."
    if user.dietary_restrictions is None:
        errors["dietaryRestrictions"] = "Please specify your dietary restrictions."

    return errors
