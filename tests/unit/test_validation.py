"""Unit tests for registration validation."""
import pytest

from cohort_signup.registration.models import Registration
from cohort_signup.registration.validation import valid_email, validate_registration


def make(**fields):
    base = {"name": "Ana", "email": "ana@x.com", "start_date": "2024-03-01"}
    base.update(fields)
    return Registration.from_fields(base)


class TestValidEmail:
    """Test the email shape check."""

    @pytest.mark.parametrize("value", ["a@b.com", "  a@b.com  ", "first.last@sub.example.org"])
    def test_valid(self, value):
        assert valid_email(value) is True

    @pytest.mark.parametrize("value", ["not-an-email", "a@b", "a b@c.com", "a\u00a0b@c.com",
                                       "@b.com", "", None])
    def test_invalid(self, value):
        assert valid_email(value) is False


class TestValidateRegistration:
    """Test that every rule is reported together."""

    def test_valid_registration_has_no_errors(self):
        assert validate_registration(make()) == []

    def test_missing_name(self):
        assert validate_registration(make(name="   ")) == ["name is required"]

    def test_missing_name_and_bad_email_reports_both(self):
        errors = validate_registration(make(name="", email="nope"))
        assert errors == ["name is required", "valid email is required"]

    def test_all_rules_violated(self):
        errors = validate_registration(Registration.from_fields({}))
        assert len(errors) == 3

    def test_bad_date_format(self):
        assert validate_registration(make(start_date="01/03/2024")) == [
            "start_date must be ISO yyyy-mm-dd"]

    def test_date_is_not_calendar_checked(self):
        assert validate_registration(make(start_date="2024-99-99")) == []

    @pytest.mark.parametrize("value", ["٢٠٢٤-٠١-٠١", "２０２４-03-01"])
    def test_non_ascii_digits_are_rejected(self, value):
        assert validate_registration(make(start_date=value)) == [
            "start_date must be ISO yyyy-mm-dd"]


class TestRegistrationFromFields:
    """Test trimming and defaults."""

    def test_defaults(self):
        registration = make()
        assert registration.cohort == "unknown"
        assert registration.goal == "unknown"

    def test_trims_values(self):
        registration = make(name="  Ana ", email=" ana@x.com ", cohort=" spring ")
        assert registration.name == "Ana"
        assert registration.email == "ana@x.com"
        assert registration.cohort == "spring"

    def test_expectation_is_accepted_for_goal(self):
        assert make(expectation="ship an app").goal == "ship an app"

    def test_non_string_values_are_stringified(self):
        assert make(cohort=2024).cohort == "2024"

    def test_properties_start_registered(self):
        properties = make(cohort="spring", goal="learn").to_properties()
        assert properties["status"] == {"select": {"name": "registered"}}
        assert properties["cohort"]["rich_text"][0]["text"]["content"] == "spring"
        assert properties["expectation"]["rich_text"][0]["text"]["content"] == "learn"
        assert properties["start_date"] == {"date": {"start": "2024-03-01"}}
