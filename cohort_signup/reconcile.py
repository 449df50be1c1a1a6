"""
Read-only reconciliation report.

Registration is check-then-act against a store without transactions, so
concurrent requests can leave two pages for the same (email, cohort,
start_date) or more paid registrations than a cohort date allows. This
pass finds both so an operator can merge or cancel by hand.
"""
from collections import defaultdict

from cohort_signup.registration import models
from cohort_signup.shared.notion import page_value


def registration_key(page):
    return (
        (page_value(page, models.EMAIL) or "").strip().lower(),
        page_value(page, models.COHORT) or models.UNKNOWN,
        page_value(page, models.START_DATE),
    )


def find_duplicates(pages):
    groups = defaultdict(list)
    for page in pages:
        groups[registration_key(page)].append(page["id"])
    return {key: ids for key, ids in groups.items() if len(ids) > 1}


def find_over_capacity(pages, capacity):
    paid = defaultdict(list)
    for page in pages:
        if page_value(page, models.STATUS) == models.STATUS_PAID:
            email, cohort, start_date = registration_key(page)
            paid[(cohort, start_date)].append(page["id"])
    return {key: ids for key, ids in paid.items() if len(ids) > capacity}


def reconcile(store, settings):
    pages = store.query()
    return {
        "registrations": len(pages),
        "duplicates": find_duplicates(pages),
        "over_capacity": find_over_capacity(pages, settings.capacity),
    }
