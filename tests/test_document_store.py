import copy

import pytest

from services.document_store import SERVER_TIMESTAMP, Query, resolve_timestamps


def test_server_timestamp_is_a_singleton_marker():
    assert copy.deepcopy(SERVER_TIMESTAMP) is SERVER_TIMESTAMP
    assert repr(SERVER_TIMESTAMP) == "SERVER_TIMESTAMP"


def test_resolve_timestamps_only_replaces_markers():
    data = {"title": "t", "updatedDate": SERVER_TIMESTAMP}
    assert resolve_timestamps(data, "NOW") == {"title": "t", "updatedDate": "NOW"}
    assert data["updatedDate"] is SERVER_TIMESTAMP


def test_query_builder_returns_new_queries():
    base = Query("memo")
    filtered = base.where("createdUser", "==", "u1")
    assert base.filters == ()
    assert filtered.filters == (("createdUser", "==", "u1"),)


def test_query_apply_puts_documents_without_sort_key_last():
    docs = [{"n": 1, "d": None}, {"n": 2, "d": "2024"}, {"n": 3, "d": "2025"}]
    result = Query("memo").order_by("d", "desc").apply(docs)
    assert [d["n"] for d in result] == [3, 2, 1]


def test_query_rejects_unsupported_operators():
    with pytest.raises(ValueError):
        Query("memo").where("n", ">", 1)
    with pytest.raises(ValueError):
        Query("memo").order_by("n", "sideways")
