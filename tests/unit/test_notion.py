"""Unit tests for the Notion client."""
from unittest.mock import MagicMock

import pytest
import requests

from cohort_signup.shared import notion
from cohort_signup.shared.exceptions import StoreError
from cohort_signup.shared.notion import NotionStore


def response(body, status=200):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return MagicMock()


class TestNotionStore:

    def test_sets_auth_and_version_headers(self, settings, session):
        NotionStore(settings, session=session)
        session.headers.update.assert_called_once_with({
            "Authorization": "Bearer secret_test",
            "Content-Type": "application/json",
            "Notion-Version": "2022-06-28",
        })

    def test_query_posts_filter(self, settings, session):
        session.request.return_value = response({"results": [{"id": "p1"}], "has_more": False})
        filter = notion.equals("email", "email", "a@b.com")
        pages = NotionStore(settings, session=session).query(filter)
        assert pages == [{"id": "p1"}]
        session.request.assert_called_once_with(
            "POST", "https://api.notion.com/v1/databases/db123/query",
            json={"filter": filter})

    def test_query_follows_cursor(self, settings, session):
        session.request.side_effect = [
            response({"results": [{"id": "p1"}], "has_more": True, "next_cursor": "c2"}),
            response({"results": [{"id": "p2"}], "has_more": False, "next_cursor": None}),
        ]
        pages = NotionStore(settings, session=session).query()
        assert [p["id"] for p in pages] == ["p1", "p2"]
        assert session.request.call_args_list[1].kwargs["json"] == {"start_cursor": "c2"}

    def test_create_page(self, settings, session):
        session.request.return_value = response({"id": "new"})
        page = NotionStore(settings, session=session).create_page({"name": notion.title("Ana")})
        assert page["id"] == "new"
        session.request.assert_called_once_with(
            "POST", "https://api.notion.com/v1/pages",
            json={"parent": {"database_id": "db123"},
                  "properties": {"name": {"title": [{"text": {"content": "Ana"}}]}}})

    def test_update_page(self, settings, session):
        session.request.return_value = response({"id": "p1"})
        NotionStore(settings, session=session).update_page("p1", {"status": notion.select("paid")})
        session.request.assert_called_once_with(
            "PATCH", "https://api.notion.com/v1/pages/p1",
            json={"properties": {"status": {"select": {"name": "paid"}}}})

    def test_error_response_raises(self, settings, session):
        session.request.return_value = response({"code": "validation_error"}, status=400)
        with pytest.raises(StoreError) as excinfo:
            NotionStore(settings, session=session).create_page({})
        assert excinfo.value.status == 400
        assert excinfo.value.body == {"code": "validation_error"}

    def test_transport_error_raises(self, settings, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(StoreError, match="refused"):
            NotionStore(settings, session=session).query()

    def test_non_json_error(self, settings, session):
        resp = response(None, status=502)
        resp.json.side_effect = ValueError("no json")
        resp.text = "Bad gateway"
        session.request.return_value = resp
        with pytest.raises(StoreError) as excinfo:
            NotionStore(settings, session=session).query()
        assert excinfo.value.body == {"message": "Bad gateway"}


class TestPropertyHelpers:

    def test_all_of_drops_empty(self):
        only = notion.equals("a", "email", "x")
        assert notion.all_of(only, None) == only
        assert notion.all_of() is None

    def test_plain_value_from_api_shapes(self):
        page = {"properties": {
            "name": {"id": "title", "type": "title", "title": [{"plain_text": "Ana"}]},
            "status": {"id": "s", "type": "select", "select": {"name": "paid"}},
            "start_date": {"id": "d", "type": "date", "date": {"start": "2024-03-01", "end": None}},
            "email": {"id": "e", "type": "email", "email": "a@b.com"},
            "amount_paid": {"id": "n", "type": "number", "number": 49.0},
        }}
        assert notion.page_value(page, "name") == "Ana"
        assert notion.page_value(page, "status") == "paid"
        assert notion.page_value(page, "start_date") == "2024-03-01"
        assert notion.page_value(page, "email") == "a@b.com"
        assert notion.page_value(page, "amount_paid") == 49.0
        assert notion.page_value(page, "missing") is None

    def test_plain_value_from_written_shapes(self):
        assert notion.plain_value(notion.rich_text("spring")) == "spring"
        assert notion.plain_value(notion.select("registered")) == "registered"
        assert notion.plain_value({"select": None}) is None
