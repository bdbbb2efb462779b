from unittest import mock

import pytest
import requests

from services.api_service import (
    SERVER_TIMESTAMP_JSON, RemoteDocumentStore, encode_document, encode_query,
)
from services.document_store import SERVER_TIMESTAMP, Query
from services.errors import FetchError, PersistenceError

BASE_URL = "https://api.example.com/v1"


def make_response(status=200, payload=None):
    response = mock.Mock()
    response.status_code = status
    response.content = b"" if payload is None else b"{}"
    response.json.return_value = payload
    if status >= 400:
        error = requests.exceptions.HTTPError(f"{status} error")
        error.response = response
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def remote(qapp):
    store = RemoteDocumentStore(BASE_URL + "/", timeout=3, poll_interval_ms=50)
    yield store
    store._timer.stop()


def test_encode_document_replaces_server_timestamp():
    encoded = encode_document({"title": "t", "updatedDate": SERVER_TIMESTAMP})
    assert encoded == {"title": "t", "updatedDate": SERVER_TIMESTAMP_JSON}


def test_encode_query():
    query = Query("folder").where("createdUser", "==", "u1").order_by("updatedDate", "desc")
    assert encode_query(query) == {
        "where": '[["createdUser", "==", "u1"]]',
        "orderBy": "updatedDate desc",
    }


def test_add_posts_document_and_returns_key(remote):
    with mock.patch("utils.api_utils.requests.request", return_value=make_response(payload={"id": "k1"})) as request:
        ref = remote.add("memo", {"title": "t", "createdDate": SERVER_TIMESTAMP})

    assert ref.id == "k1"
    method, url = request.call_args.args
    assert method == "POST"
    assert url == f"{BASE_URL}/memo"
    assert request.call_args.kwargs["json"]["createdDate"] == SERVER_TIMESTAMP_JSON
    assert request.call_args.kwargs["timeout"] == 3


def test_add_failure_becomes_persistence_error(remote):
    with mock.patch("utils.api_utils.requests.request", side_effect=requests.exceptions.ConnectionError("down")):
        with pytest.raises(PersistenceError) as excinfo:
            remote.add("memo", {"title": "t"})
    assert excinfo.value.operation == "add"


def test_update_patches_document(remote):
    with mock.patch("utils.api_utils.requests.request", return_value=make_response()) as request:
        remote.update("memo", "k1", {"id": "k1"})

    method, url = request.call_args.args
    assert method == "PATCH"
    assert url == f"{BASE_URL}/memo/k1"


def test_update_http_error_becomes_persistence_error(remote):
    with mock.patch("utils.api_utils.requests.request", return_value=make_response(500)):
        with pytest.raises(PersistenceError) as excinfo:
            remote.update("memo", "k1", {"title": "x"})
    assert excinfo.value.doc_id == "k1"


def test_get_missing_document_returns_none(remote):
    with mock.patch("utils.api_utils.requests.request", return_value=make_response(404)):
        assert remote.get("memo", "nope") is None


def test_query_failure_becomes_fetch_error(remote):
    with mock.patch("utils.api_utils.requests.request", side_effect=requests.exceptions.Timeout("slow")):
        with pytest.raises(FetchError):
            remote.query(Query("folder"))


def test_watch_document_emits_only_on_change(remote):
    responses = [
        make_response(payload={"id": "k1", "title": "a"}),
        make_response(payload={"id": "k1", "title": "a"}),
        make_response(payload={"id": "k1", "title": "b"}),
    ]
    seen = []
    with mock.patch("utils.api_utils.requests.request", side_effect=responses):
        sub = remote.watch_document("memo", "k1", seen.append)
        remote.poll()
        remote.poll()
    sub.unsubscribe()

    assert [d["title"] for d in seen] == ["a", "b"]
    assert not remote._timer.isActive()


def test_watch_query_reports_errors(remote):
    errors = []
    with mock.patch("utils.api_utils.requests.request", side_effect=requests.exceptions.ConnectionError("down")):
        remote.watch_query(Query("folder"), lambda docs: None, errors.append)
    assert len(errors) == 1
    assert isinstance(errors[0], FetchError)
