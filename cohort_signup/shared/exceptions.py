"""Custom exception classes."""


class CohortSignupError(Exception):
    """Base class for errors raised by the handlers."""
    pass


class ConfigurationError(CohortSignupError):
    """Raised when a required setting is missing or malformed."""
    pass


class StoreError(CohortSignupError):
    """Raised when a call to the Notion API fails."""

    def __init__(self, message, status=None, body=None):
        super().__init__(message)
        self.status = status
        self.body = body


class AvailabilityCheckError(CohortSignupError):
    """Raised when paid registrations for a cohort cannot be counted."""
    pass


class InvalidEventError(CohortSignupError):
    """Raised when a payment event is missing data needed to process it."""
    pass
