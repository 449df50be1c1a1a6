import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from cohort_signup.payments.amounts import format_amount, to_major_units
from cohort_signup.registration import models
from cohort_signup.shared import http, notion
from cohort_signup.shared.config import Settings
from cohort_signup.shared.exceptions import (ConfigurationError,
                                             InvalidEventError, StoreError)
from cohort_signup.shared.logs import configure_logging
from cohort_signup.shared.notion import NotionStore

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"

WEBHOOK_CORS = {"methods": http.WEBHOOK_METHODS,
                "allow_headers": http.WEBHOOK_HEADERS}


def text(value):
    """Stripped string value, or "" for anything that is not a string."""
    return value.strip() if isinstance(value, str) else ""


@dataclass
class Payment:
    email: str
    session_id: Optional[str]
    amount: Optional[Decimal] = None
    payment_date: Optional[str] = None
    currency: str = "usd"
    customer_name: Optional[str] = None

    @classmethod
    def from_session(cls, session):
        details = session.get("customer_details")
        if not isinstance(details, dict):
            details = {}
        email = text(details.get("email")) or text(session.get("customer_email"))
        currency = text(session.get("currency")) or "usd"

        amount = session.get("amount_total")
        if not amount:
            amount = session.get("amount_subtotal")

        payment_date = None
        if session.get("created"):
            created = datetime.fromtimestamp(int(session["created"]), tz=timezone.utc)
            payment_date = created.date().isoformat()

        return cls(
            email=email,
            session_id=text(session.get("id")) or None,
            amount=to_major_units(amount, currency),
            payment_date=payment_date,
            currency=currency,
            customer_name=details.get("name"),
        )

    def to_properties(self, settings):
        properties = {models.STATUS: notion.select(models.STATUS_PAID)}
        if self.session_id:
            properties[models.STRIPE_SESSION_ID] = notion.rich_text(self.session_id)
            properties[models.STRIPE_LINK] = notion.url(settings.stripe_link(self.session_id))
        if self.amount is not None:
            properties[models.AMOUNT_PAID] = notion.number(float(self.amount))
        if self.payment_date:
            properties[models.PAYMENT_DATE] = notion.date(self.payment_date)
        return properties


def ignored(reason):
    return {"ignored": True, "reason": reason}


def process_event(event, store, settings):
    """
    Marks every registration with the paying customer's email as paid.

    Returns the response body for events that were handled or ignored.
    Raises InvalidEventError when the event is not shaped like a Checkout
    Session event or a paid session carries no email, and lets StoreError
    through. Applying the same event twice writes the same values.
    """
    if event.get("type") != CHECKOUT_COMPLETED:
        logger.info("Ignoring Stripe event type %s", event.get("type"))
        return ignored("unhandled_event_type")

    data = event.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("object"), dict):
        raise InvalidEventError("Event has no checkout session")
    session = data["object"]
    if session.get("payment_status") != "paid":
        logger.info("Ignoring unpaid checkout session %s", session.get("id"))
        return ignored("not_paid")

    payment = Payment.from_session(session)
    if not payment.email:
        raise InvalidEventError("No email in event")

    stripe_link = settings.stripe_link(payment.session_id) if payment.session_id else None
    pages = store.query(notion.equals(models.EMAIL, "email", payment.email))
    if not pages:
        logger.warning("No registration matches paid session %s for %s",
                       payment.session_id, payment.email)
        return {
            "updated": 0,
            "note": "no_matching_email",
            "email": payment.email,
            "stripeSessionId": payment.session_id,
        }

    properties = payment.to_properties(settings)
    updated_pages = []
    for page in pages:
        store.update_page(page["id"], properties)
        updated_pages.append({"pageId": page["id"], "stripeLink": stripe_link})
    logger.info("Marked %d registrations paid for %s (session %s)",
                len(updated_pages), payment.email, payment.session_id)

    return {
        "updated": len(updated_pages),
        "email": payment.email,
        "stripeSessionId": payment.session_id,
        "stripeLink": stripe_link,
        "amountPaid": format_amount(payment.amount, payment.currency),
        "pages": updated_pages,
    }


def parse_event(event):
    """Returns the Stripe event carried by the invocation, or None."""
    if http.has_body(event):
        data = http.json_body(event)
        return data if isinstance(data, dict) else None
    # Console test invocations pass the Stripe event itself.
    if event.get("type") and event.get("data"):
        return event
    return None


def lambda_handler(event, context, settings=None, store=None):
    """Stripe webhook endpoint for checkout.session.completed."""
    configure_logging()
    method = http.request_method(event)
    if method == "options":
        return http.preflight(**WEBHOOK_CORS)
    if method != "post":
        return http.fail(405, {"error": "Method not allowed"}, **WEBHOOK_CORS)

    stripe_event = parse_event(event)
    if not stripe_event:
        return http.fail(400, {"error": "Empty or invalid body"}, **WEBHOOK_CORS)

    try:
        if settings is None:
            settings = Settings.from_env()
        if store is None:
            store = NotionStore(settings)
    except ConfigurationError:
        logger.exception("Webhook handler is not configured")
        return http.fail(500, {"error": "Configuration error"}, **WEBHOOK_CORS)

    try:
        body = process_event(stripe_event, store, settings)
    except InvalidEventError as e:
        return http.fail(400, {"error": str(e)}, **WEBHOOK_CORS)
    except StoreError as e:
        logger.exception("Updating registrations for Stripe event %s failed",
                         stripe_event.get("id"))
        return http.fail(502, {"error": str(e)}, **WEBHOOK_CORS)
    except Exception:
        logger.exception("Unexpected error handling Stripe event %s",
                         stripe_event.get("id"))
        return http.fail(500, {"error": "Internal Server Error"}, **WEBHOOK_CORS)
    return http.ok(body, **WEBHOOK_CORS)
