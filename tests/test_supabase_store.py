"""Tests for the Supabase row store adapter."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from cadence.adapters.supabase_store import SupabaseStore, _format_filter
from cadence.config import Config
from cadence.ports import DuplicateRowError, RowNotFoundError, StoreError


def response(status_code: int = 200, data=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = json.dumps(data).encode() if data is not None else b""
    resp.text = json.dumps(data) if data is not None else ""
    resp.json.return_value = data
    return resp


@pytest.fixture
def store():
    store = SupabaseStore(Config(supabase_url="https://db.example.co/", supabase_key="secret"))
    store._session = MagicMock()
    return store


class TestFormatFilter:
    def test_equality(self):
        assert _format_filter("active") == "eq.active"

    def test_operator(self):
        assert _format_filter(("lt", "2025-01-19T10:00:00.000Z")) == "lt.2025-01-19T10:00:00.000Z"

    def test_in(self):
        assert _format_filter(("in", ["confirmed", "pending"])) == "in.(confirmed,pending)"

    def test_null_and_bool(self):
        assert _format_filter(None) == "is.null"
        assert _format_filter(True) == "eq.true"


class TestSupabaseStore:
    def test_requires_credentials(self):
        with pytest.raises(StoreError):
            SupabaseStore(Config())

    def test_sets_auth_headers(self):
        store = SupabaseStore(Config(supabase_url="https://db.example.co", supabase_key="secret"))
        assert store._session.headers["apikey"] == "secret"
        assert store._session.headers["Authorization"] == "Bearer secret"
        assert store.base_url == "https://db.example.co/rest/v1"

    def test_select_builds_query(self, store):
        store._session.request.return_value = response(data=[{"id": "1"}])

        rows = store.select(
            "bookings",
            {"recurring_appointment_id": "s1", "start_time": ("gt", "2025-01-01")},
            order="start_time",
            descending=True,
            limit=1,
        )

        assert rows == [{"id": "1"}]
        method, url = store._session.request.call_args.args
        params = store._session.request.call_args.kwargs["params"]
        assert method == "GET"
        assert url == "https://db.example.co/rest/v1/bookings"
        assert params == {
            "select": "*",
            "recurring_appointment_id": "eq.s1",
            "start_time": "gt.2025-01-01",
            "order": "start_time.desc",
            "limit": "1",
        }

    def test_insert_returns_first_row(self, store):
        store._session.request.return_value = response(201, [{"id": "new", "title": "x"}])
        assert store.insert("bookings", {"title": "x"}) == {"id": "new", "title": "x"}
        assert store._session.request.call_args.kwargs["json"] == [{"title": "x"}]

    def test_insert_conflict_is_duplicate(self, store):
        store._session.request.return_value = response(409, {"message": "duplicate key"})
        with pytest.raises(DuplicateRowError):
            store.insert("bookings", {"title": "x"})

    def test_http_error(self, store):
        store._session.request.return_value = response(500, {"message": "boom"})
        with pytest.raises(StoreError, match="500"):
            store.select("bookings")

    def test_transport_error(self, store):
        store._session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(StoreError, match="refused"):
            store.select("bookings")

    def test_update_by_id(self, store):
        store._session.request.return_value = response(data=[{"id": "s1", "status": "completed"}])
        row = store.update("recurring_appointments", "s1", {"status": "completed"})
        assert row["status"] == "completed"
        assert store._session.request.call_args.args[0] == "PATCH"
        assert store._session.request.call_args.kwargs["params"] == {"id": "eq.s1"}

    def test_update_missing_row(self, store):
        store._session.request.return_value = response(data=[])
        with pytest.raises(RowNotFoundError):
            store.update("recurring_appointments", "nope", {"status": "completed"})
