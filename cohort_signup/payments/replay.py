"""
Replays completed Checkout Sessions from Stripe through the webhook processor.

Used to recover registrations whose webhook delivery was missed. Marking a
registration paid is idempotent, so replaying a session that was already
delivered rewrites the same values.
"""
import logging
from datetime import datetime, timezone

import stripe

from cohort_signup.payments.webhook import CHECKOUT_COMPLETED, process_event
from cohort_signup.shared.exceptions import ConfigurationError, InvalidEventError

logger = logging.getLogger(__name__)


def session_payload(session):
    if hasattr(session, "to_dict"):
        return session.to_dict()
    return dict(session)


def list_completed_sessions(settings, since=None, stripe_module=stripe):
    if not settings.stripe_secret_key:
        raise ConfigurationError("STRIPE_SECRET_KEY is required to replay payments")
    stripe_module.api_key = settings.stripe_secret_key

    params = {"status": "complete", "limit": 100}
    if since:
        start = datetime.strptime(since, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        params["created"] = {"gte": int(start.timestamp())}
    sessions = stripe_module.checkout.Session.list(**params)
    for session in sessions.auto_paging_iter():
        yield session_payload(session)


def replay_payments(store, settings, since=None, stripe_module=stripe):
    """
    Returns a list of (session id, result) pairs, one per completed session.
    Sessions that cannot be processed are reported with an ``error`` key.
    StoreError propagates and stops the replay.
    """
    results = []
    for session in list_completed_sessions(settings, since, stripe_module):
        event = {"type": CHECKOUT_COMPLETED, "data": {"object": session}}
        try:
            result = process_event(event, store, settings)
        except InvalidEventError as e:
            logger.warning("Skipping session %s: %s", session.get("id"), e)
            result = {"error": str(e)}
        results.append((session.get("id"), result))
    return results
