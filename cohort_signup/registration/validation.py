"""Registration input validation."""
import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# ASCII digits only
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)


def valid_email(value):
    return bool(EMAIL_PATTERN.match((value or "").strip()))


def validate_registration(registration):
    """
    Checks every rule and returns the list of violations, empty when valid.

    start_date is only checked for its shape; 2024-99-99 passes.
    """
    errors = []
    if not registration.name.strip():
        errors.append("name is required")
    if not valid_email(registration.email):
        errors.append("valid email is required")
    if not DATE_PATTERN.match(registration.start_date):
        errors.append("start_date must be ISO yyyy-mm-dd")
    return errors
