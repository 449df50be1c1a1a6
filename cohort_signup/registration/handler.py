import logging

from cohort_signup.registration.availability import check_availability
from cohort_signup.registration.models import Registration, clean
from cohort_signup.registration.upsert import upsert_registration
from cohort_signup.registration.validation import validate_registration
from cohort_signup.shared import http
from cohort_signup.shared.config import Settings
from cohort_signup.shared.exceptions import (AvailabilityCheckError,
                                             ConfigurationError, StoreError)
from cohort_signup.shared.logs import configure_logging
from cohort_signup.shared.notion import NotionStore
from cohort_signup.shared.policy import PROCEED, PROPAGATE

logger = logging.getLogger(__name__)


def availability_response(params, settings, store):
    cohort = clean(params.get("check-avail"))
    start_date = clean(params.get("check-date")) or None
    try:
        availability = check_availability(store, cohort, start_date,
                                          capacity=settings.capacity,
                                          on_failure=PROPAGATE)
    except AvailabilityCheckError as e:
        logger.exception("Availability check for %s failed", cohort)
        return http.fail(500, {"error": str(e)})
    return http.ok(availability.to_response())


def registration_response(fields, settings, store):
    registration = Registration.from_fields(fields)
    errors = validate_registration(registration)
    if errors:
        return http.fail(400, {"errors": errors})

    # A failed count lets the registration through.
    availability = check_availability(store, registration.cohort,
                                      registration.start_date,
                                      capacity=settings.capacity,
                                      on_failure=PROCEED)
    if availability is not None and not availability.is_available:
        return http.fail(409, {
            "error": "This cohort is full for the selected start date",
            "cohort": registration.cohort,
            "startDate": registration.start_date,
            "spotsLeft": 0,
        })

    try:
        result = upsert_registration(store, registration, lookup_policy=PROCEED)
    except StoreError as e:
        logger.exception("Saving registration for %s failed", registration.email)
        return http.fail(502, {"error": e.body if e.body is not None else str(e)})
    return http.ok(result.to_response())


def lambda_handler(event, context, settings=None, store=None):
    """
    Registration endpoint.

    GET ?check-avail=<cohort>&check-date=<yyyy-mm-dd> reports availability.
    GET or POST with name, email, start_date, cohort and goal registers.
    """
    configure_logging()
    method = http.request_method(event)
    if method == "options":
        return http.preflight()
    if method not in ("get", "post"):
        return http.fail(405, {"error": "Method not allowed"})

    try:
        if settings is None:
            settings = Settings.from_env()
        if store is None:
            store = NotionStore(settings)
    except ConfigurationError:
        logger.exception("Registration handler is not configured")
        return http.fail(500, {"error": "Configuration error"})

    try:
        params = http.query_params(event)
        if params.get("check-avail") is not None:
            return availability_response(params, settings, store)
        return registration_response(http.normalize(event), settings, store)
    except Exception:
        logger.exception("Unexpected error handling registration")
        return http.fail(500, {"error": "Internal Server Error"})
