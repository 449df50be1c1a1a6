"""
Create-or-update of a registration keyed on (email, cohort, start_date).

Notion has no unique constraints or transactions, so this is a plain
read-then-write: two concurrent requests for the same triple can both miss
the lookup and both create a page. `cohort-signup reconcile` reports such
duplicates after the fact.
"""
import logging
from dataclasses import dataclass

from cohort_signup.registration import models
from cohort_signup.shared import notion
from cohort_signup.shared.exceptions import StoreError
from cohort_signup.shared.policy import PROCEED, on_dependency_failure

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"


@dataclass
class UpsertResult:
    action: str
    page_id: str

    def to_response(self):
        return {"pageId": self.page_id, self.action: True}


def triple_filter(email, cohort, start_date):
    return notion.all_of(
        notion.equals(models.EMAIL, "email", email),
        notion.equals(models.COHORT, "rich_text", cohort),
        notion.equals(models.START_DATE, "date", start_date),
    )


def find_registration(store, email, cohort, start_date, on_failure=PROCEED):
    """Returns the first page matching the triple, or None."""
    try:
        pages = store.query(triple_filter(email, cohort, start_date))
    except StoreError as e:
        on_dependency_failure(on_failure, e,
                              f"Duplicate lookup for {email} {cohort} {start_date}")
        return None
    if len(pages) > 1:
        logger.warning("%d registrations share %s %s %s, updating the first",
                       len(pages), email, cohort, start_date)
    return pages[0] if pages else None


def upsert_registration(store, registration, lookup_policy=PROCEED):
    """
    Updates the goal on an existing registration, or creates a new one.

    Errors from the final create or update call always propagate.
    """
    existing = find_registration(store, registration.email, registration.cohort,
                                 registration.start_date, on_failure=lookup_policy)
    if existing:
        store.update_page(existing["id"], {
            models.EXPECTATION: notion.rich_text(registration.goal),
        })
        logger.info("Updated registration %s for %s", existing["id"], registration.email)
        return UpsertResult(UPDATED, existing["id"])

    page = store.create_page(registration.to_properties())
    logger.info("Created registration %s for %s", page["id"], registration.email)
    return UpsertResult(CREATED, page["id"])
