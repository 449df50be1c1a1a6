from dataclasses import dataclass

from cohort_signup.shared import notion

STATUS_REGISTERED = "registered"
STATUS_PAID = "paid"
UNKNOWN = "unknown"

# Notion property names
NAME = "name"
EMAIL = "email"
START_DATE = "start_date"
COHORT = "cohort"
EXPECTATION = "expectation"
STATUS = "status"
STRIPE_SESSION_ID = "stripe_session_id"
STRIPE_LINK = "stripe_link"
AMOUNT_PAID = "amount_paid"
PAYMENT_DATE = "payment_date"


def clean(value, default=""):
    if value is None:
        return default
    value = str(value).strip()
    return value or default


@dataclass
class Registration:
    name: str
    email: str
    start_date: str
    cohort: str = UNKNOWN
    goal: str = UNKNOWN

    @classmethod
    def from_fields(cls, fields):
        goal = fields.get("goal")
        if goal is None:
            goal = fields.get("expectation")
        return cls(
            name=clean(fields.get("name")),
            email=clean(fields.get("email")),
            start_date=clean(fields.get("start_date")),
            cohort=clean(fields.get("cohort"), UNKNOWN),
            goal=clean(goal, UNKNOWN),
        )

    def to_properties(self):
        return {
            NAME: notion.title(self.name),
            EMAIL: notion.email(self.email),
            START_DATE: notion.date(self.start_date),
            COHORT: notion.rich_text(self.cohort),
            EXPECTATION: notion.rich_text(self.goal),
            STATUS: notion.select(STATUS_REGISTERED),
        }
