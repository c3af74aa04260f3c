"""
Tests for application submission validation.
"""

import pytest

from app.modules.admissions.validation import validate_application
from app.modules.users.models import User


@pytest.fixture
def complete_user():
    """A user whose application has every required answer."""
    return User(
        email="hacker@utexas.edu",
        magic_link="0" * 64,
        full_name="Ada Lovelace",
        preferred_name="Ada",
        gender="Female",
        photo_release_agreed=True,
        liability_waiver_agreed=True,
        code_of_conduct_agreed=True,
        major="Computer Science",
        classification="Junior",
        graduation="2027",
        hackathons_attended=2,
        referrer="Friend",
        excited_about="Building things",
        website=None,
        dietary_restrictions=[],
    )


class TestValidateApplication:
    def test_complete_application_has_no_errors(self, complete_user):
        assert validate_application(complete_user) == {}

    def test_empty_application_reports_every_question(self):
        errors = validate_application(User(email="x@utexas.edu", magic_link="1" * 64))

        assert set(errors) == {
            "name",
            "gender",
            "photoReleaseAgreed",
            "liabilityWaiverAgreed",
            "codeOfConductAgreed",
            "major",
            "classification",
            "graduationYear",
            "hackathonsAttended",
            "referrer",
            "excitedAbout",
            "dietaryRestrictions",
        }

    def test_blank_full_name(self, complete_user):
        complete_user.full_name = "   "
        assert validate_application(complete_user) == {"name": "Please enter your full name."}

    def test_missing_preferred_name(self, complete_user):
        complete_user.preferred_name = None
        assert validate_application(complete_user) == {
            "name": "Please enter your preferred name."
        }

    def test_agreements_must_be_true(self, complete_user):
        complete_user.photo_release_agreed = False
        errors = validate_application(complete_user)
        assert list(errors) == ["photoReleaseAgreed"]

    def test_zero_hackathons_is_an_answer(self, complete_user):
        complete_user.hackathons_attended = 0
        assert validate_application(complete_user) == {}

    def test_referrer_message(self, complete_user):
        complete_user.referrer = None
        assert validate_application(complete_user) == {
            "referrer": "Please specify how you heard about us."
        }

    def test_valid_website(self, complete_user):
        complete_user.website = "https://example.com/me"
        assert validate_application(complete_user) == {}

    def test_invalid_website(self, complete_user):
        complete_user.website = "not a url"
        assert validate_application(complete_user) == {"website": "Please enter a valid URL."}

    def test_does_not_modify_user(self, complete_user):
        complete_user.major = None
        validate_application(complete_user)
        assert complete_user.major is None
