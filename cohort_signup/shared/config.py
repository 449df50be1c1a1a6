import os
from dataclasses import dataclass
from typing import Optional

from cohort_signup.shared.exceptions import ConfigurationError

"""
Environment Variables:

NOTION_SECRET
NOTION_DB_ID
COHORT_CAPACITY (optional, default 10)
STRIPE_DASHBOARD_URL (optional)
STRIPE_SECRET_KEY (operator tooling only)
LOG_LEVEL (optional, default INFO)
"""

NOTION_VERSION = "2022-06-28"
DEFAULT_CAPACITY = 10
STRIPE_DASHBOARD_URL = "https://dashboard.stripe.com/payments"


@dataclass(frozen=True)
class Settings:
    notion_secret: str
    notion_db_id: str
    capacity: int = DEFAULT_CAPACITY
    notion_version: str = NOTION_VERSION
    stripe_dashboard_url: str = STRIPE_DASHBOARD_URL
    stripe_secret_key: Optional[str] = None

    @classmethod
    def from_env(cls, environ=None):
        """Builds settings from the Lambda environment."""
        if environ is None:
            environ = os.environ
        return cls.from_mapping({}, environ)

    @classmethod
    def from_mapping(cls, data, environ=None):
        """
        Builds settings from the YAML data file used by the operator tooling.
        Missing keys fall back to the environment variables the handlers use.
        """
        if environ is None:
            environ = os.environ
        notion = data.get('notion') or {}
        stripe_options = data.get('stripe') or {}

        secret = notion.get('secret') or environ.get('NOTION_SECRET')
        db_id = notion.get('database_id') or environ.get('NOTION_DB_ID')
        missing = [name for name, value in (('NOTION_SECRET', secret),
                                            ('NOTION_DB_ID', db_id))
                   if not value]
        if missing:
            raise ConfigurationError(f"Missing settings: {', '.join(missing)}")

        capacity = notion.get('capacity')
        if capacity is None:
            capacity = environ.get('COHORT_CAPACITY') or DEFAULT_CAPACITY
        try:
            capacity = int(capacity)
        except (TypeError, ValueError):
            raise ConfigurationError(f"COHORT_CAPACITY must be an integer, got {capacity!r}")
        if capacity < 0:
            raise ConfigurationError("COHORT_CAPACITY must not be negative")

        return cls(
            notion_secret=secret,
            notion_db_id=db_id,
            capacity=capacity,
            stripe_dashboard_url=(stripe_options.get('dashboard_url')
                                  or environ.get('STRIPE_DASHBOARD_URL')
                                  or STRIPE_DASHBOARD_URL).rstrip('/'),
            stripe_secret_key=(stripe_options.get('secret_key')
                               or environ.get('STRIPE_SECRET_KEY')),
        )

    def stripe_link(self, session_id):
        return f"{self.stripe_dashboard_url}/{session_id}"
