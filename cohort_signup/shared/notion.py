"""
Thin client for the Notion database that holds the registrations.

Only four calls are used: query a database with a filter, create a page,
patch a page, and (through query) read pages back. Property values are
built and read with the helpers below so the handlers never touch the raw
Notion JSON shapes.
"""
import logging

import requests

from cohort_signup.shared.exceptions import StoreError

logger = logging.getLogger(__name__)

NOTION_HOST = "https://api.notion.com/v1"


### Property values

def title(text):
    return {"title": [{"text": {"content": text}}]}


def rich_text(text):
    return {"rich_text": [{"text": {"content": text}}]}


def email(value):
    return {"email": value}


def date(start):
    return {"date": {"start": start}}


def select(name):
    return {"select": {"name": name}}


def url(value):
    return {"url": value}


def number(value):
    return {"number": value}


### Filters

def equals(prop, kind, value):
    """Equality filter on a typed property, e.g. equals('status', 'select', 'paid')."""
    return {"property": prop, kind: {"equals": value}}


def all_of(*filters):
    filters = [f for f in filters if f]
    if not filters:
        return None
    if len(filters) == 1:
        return filters[0]
    return {"and": filters}


### Reading pages

def plain_value(prop):
    """Returns the plain Python value held by a page property."""
    if not prop:
        return None
    kind = prop.get("type") or next((k for k in prop if k != "id"), None)
    value = prop.get(kind)
    if kind in ("title", "rich_text"):
        return "".join(part.get("plain_text")
                       or (part.get("text") or {}).get("content", "")
                       for part in value or [])
    if kind == "select":
        return (value or {}).get("name")
    if kind == "date":
        return (value or {}).get("start")
    return value


def page_value(page, name):
    return plain_value((page.get("properties") or {}).get(name))


class NotionStore:

    def __init__(self, settings, session=None):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {settings.notion_secret}",
            "Content-Type": "application/json",
            "Notion-Version": settings.notion_version,
        })

    def _request(self, method, path, what, payload=None):
        try:
            resp = self.session.request(method, f"{NOTION_HOST}{path}", json=payload)
        except requests.exceptions.RequestException as e:
            raise StoreError(f"Notion {what} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {"message": resp.text}
        if not resp.ok:
            raise StoreError(f"Notion {what} failed: {body}",
                             status=resp.status_code, body=body)
        return body

    def query(self, filter=None):
        """Returns every page in the database matching the filter."""
        pages = []
        payload = {}
        if filter:
            payload["filter"] = filter
        path = f"/databases/{self.settings.notion_db_id}/query"
        while True:
            body = self._request("POST", path, "query", payload)
            pages.extend(body.get("results") or [])
            if not body.get("has_more") or not body.get("next_cursor"):
                break
            payload = dict(payload, start_cursor=body["next_cursor"])
        logger.debug("Notion query %s matched %d pages", filter, len(pages))
        return pages

    def create_page(self, properties):
        payload = {
            "parent": {"database_id": self.settings.notion_db_id},
            "properties": properties,
        }
        return self._request("POST", "/pages", "create", payload)

    def update_page(self, page_id, properties):
        return self._request("PATCH", f"/pages/{page_id}", "update",
                             {"properties": properties})
