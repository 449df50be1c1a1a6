"""Shared fixtures: an in-memory Notion store and request builders."""
import base64
import itertools
import json

import pytest

from cohort_signup.shared.config import Settings
from cohort_signup.shared.exceptions import StoreError
from cohort_signup.shared.notion import plain_value


class FakeStore:
    """Evaluates Notion equality/and filters over pages held in memory."""

    def __init__(self):
        self.pages = {}
        self.calls = []
        self.fail_on = set()
        self._ids = itertools.count(1)

    def _maybe_fail(self, call):
        self.calls.append(call)
        if call in self.fail_on:
            raise StoreError(f"Notion {call} failed: boom", status=500,
                             body={"message": "boom"})

    def _matches(self, page, filter):
        if not filter:
            return True
        if "and" in filter:
            return all(self._matches(page, f) for f in filter["and"])
        prop = page["properties"].get(filter["property"])
        kind = next(k for k in filter if k != "property")
        return plain_value(prop) == filter[kind]["equals"]

    def query(self, filter=None):
        self._maybe_fail("query")
        return [page for page in self.pages.values() if self._matches(page, filter)]

    def create_page(self, properties):
        self._maybe_fail("create")
        page_id = f"page-{next(self._ids)}"
        self.pages[page_id] = {"id": page_id, "properties": dict(properties)}
        return self.pages[page_id]

    def update_page(self, page_id, properties):
        self._maybe_fail("update")
        self.pages[page_id]["properties"].update(properties)
        return self.pages[page_id]

    def value(self, page_id, name):
        return plain_value(self.pages[page_id]["properties"].get(name))

    def add_registration(self, email="ana@x.com", cohort="spring",
                         start_date="2024-03-01", status="registered", name="Ana"):
        return self.create_page({
            "name": {"title": [{"text": {"content": name}}]},
            "email": {"email": email},
            "start_date": {"date": {"start": start_date}},
            "cohort": {"rich_text": [{"text": {"content": cohort}}]},
            "expectation": {"rich_text": [{"text": {"content": "unknown"}}]},
            "status": {"select": {"name": status}},
        })["id"]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def settings():
    return Settings(notion_secret="secret_test", notion_db_id="db123")


def post_event(payload, base64_encoded=False):
    body = payload if isinstance(payload, str) else json.dumps(payload)
    if base64_encoded:
        body = base64.b64encode(body.encode("utf-8")).decode("ascii")
    return {"httpMethod": "POST", "queryStringParameters": None,
            "body": body, "isBase64Encoded": base64_encoded}


def get_event(params):
    return {"httpMethod": "GET", "queryStringParameters": params, "body": None}


def response_body(response):
    return json.loads(response["body"])


def checkout_event(email="ana@x.com", payment_status="paid", session_id="cs_test_123",
                   amount_total=4900, currency="usd", created=1709251200,
                   event_type="checkout.session.completed"):
    return {
        "id": "evt_123",
        "type": event_type,
        "data": {"object": {
            "id": session_id,
            "object": "checkout.session",
            "payment_status": payment_status,
            "customer_details": {"email": email, "name": "Ana"},
            "amount_total": amount_total,
            "currency": currency,
            "created": created,
        }},
    }
