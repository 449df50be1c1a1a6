import logging
from dataclasses import dataclass

from cohort_signup.registration import models
from cohort_signup.shared import notion
from cohort_signup.shared.config import DEFAULT_CAPACITY
from cohort_signup.shared.exceptions import AvailabilityCheckError, StoreError
from cohort_signup.shared.policy import PROPAGATE, on_dependency_failure

logger = logging.getLogger(__name__)


@dataclass
class Availability:
    cohort: str
    start_date: str
    is_available: bool
    spots_left: int
    paid_count: int

    def to_response(self):
        return {
            "cohort": self.cohort,
            "startDate": self.start_date,
            "isAvailable": self.is_available,
            "spotsLeft": self.spots_left,
            "paidCount": self.paid_count,
        }


def paid_filter(cohort, start_date=None):
    """Paid registrations for a cohort, on one start date if given, otherwise on any."""
    return notion.all_of(
        notion.equals(models.COHORT, "rich_text", cohort),
        notion.equals(models.STATUS, "select", models.STATUS_PAID),
        notion.equals(models.START_DATE, "date", start_date) if start_date else None,
    )


def check_availability(store, cohort, start_date=None,
                       capacity=DEFAULT_CAPACITY, on_failure=PROPAGATE):
    """
    Counts paid registrations against the cohort capacity.

    Store failures become AvailabilityCheckError. Under PROCEED the error is
    logged and None is returned so the caller can carry on without a count.
    """
    try:
        pages = store.query(paid_filter(cohort, start_date))
    except StoreError as e:
        on_dependency_failure(
            on_failure,
            AvailabilityCheckError(f"Availability check failed: {e}"),
            f"Availability check for {cohort} {start_date or '(any date)'}")
        return None

    paid = len(pages)
    logger.info("Cohort %s %s has %d paid of %d",
                cohort, start_date or "(any date)", paid, capacity)
    return Availability(
        cohort=cohort,
        start_date=start_date,
        is_available=paid < capacity,
        spots_left=max(0, capacity - paid),
        paid_count=paid,
    )
