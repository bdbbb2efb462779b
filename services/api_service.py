# services/api_service.py
import json
import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from PyQt6.QtCore import QTimer

from services.document_store import (
    SERVER_TIMESTAMP, DocumentData, DocumentReference, DocumentStore,
    ErrorCallback, Query, Subscription,
)
from services.errors import FetchError, PersistenceError
from utils.api_utils import APIUtils

logger = logging.getLogger(__name__)

# SERVER_TIMESTAMP マーカーのJSON表現
SERVER_TIMESTAMP_JSON = {"__serverTimestamp__": True}

_UNSET = object()


def encode_document(data: DocumentData) -> Dict[str, Any]:
    """SERVER_TIMESTAMP マーカーをJSONで送れる形に置き換える。"""
    return {k: (dict(SERVER_TIMESTAMP_JSON) if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


def encode_query(query: Query) -> Dict[str, str]:
    """Query をクエリ文字列のパラメータに変換する。"""
    params: Dict[str, str] = {}
    if query.filters:
        params["where"] = json.dumps([list(f) for f in query.filters], ensure_ascii=False)
    if query.ordering:
        params["orderBy"] = f"{query.ordering[0]} {query.ordering[1]}"
    return params


class _PollingWatcher:
    def __init__(
        self,
        fetch: Callable[[], Any],
        callback: Callable[[Any], None],
        on_error: Optional[ErrorCallback],
    ) -> None:
        self.fetch = fetch
        self.callback = callback
        self.on_error = on_error
        self.last_value: Any = _UNSET
        self.subscription = Subscription()


class RemoteDocumentStore(DocumentStore):
    """REST APIをバックエンドとするドキュメントストア。

    エンドポイント:
        POST   {base}/{collection}          -> {"id": "..."}
        PATCH  {base}/{collection}/{id}
        GET    {base}/{collection}/{id}     -> ドキュメント（存在しなければ404）
        GET    {base}/{collection}?where=..&orderBy=.. -> {"documents": [...]}

    サーバーはプッシュ通知を持たないため、購読は QTimer によるポーリングで実現し、
    前回と値が変わったときだけコールバックを呼び出します。
    """

    def __init__(self, api_base_url: str, timeout: float = 15, poll_interval_ms: int = 2000) -> None:
        """RemoteDocumentStoreのコンストラクタ。

        Args:
            api_base_url (str): 接続先APIのベースURL。
            timeout (float): HTTPリクエストのタイムアウト秒数。
            poll_interval_ms (int): 購読のポーリング間隔（ミリ秒）。
        """
        self.api_config: Dict[str, Any] = {"base_url": api_base_url.rstrip("/"), "timeout": timeout}
        self._watchers: List[_PollingWatcher] = []
        self._timer = QTimer()
        self._timer.setInterval(poll_interval_ms)
        self._timer.timeout.connect(self.poll)

    def _url(self, collection: str, doc_id: Optional[str] = None) -> str:
        url = f"{self.api_config['base_url']}/{collection}"
        return f"{url}/{doc_id}" if doc_id else url

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        return APIUtils.make_api_request(url, method=method, timeout=self.api_config["timeout"], **kwargs)

    # --- DocumentStore ---

    def add(self, collection: str, data: DocumentData) -> DocumentReference:
        try:
            body = self._request("POST", self._url(collection), data=encode_document(data))
            doc_id = APIUtils.handle_api_response(body, "id")
        except (requests.exceptions.RequestException, ValueError) as e:
            raise PersistenceError(f"Failed to create in {collection}: {e}", operation="add") from e
        if not doc_id:
            raise PersistenceError(f"Server returned no id for {collection}", operation="add")
        self.poll()
        return DocumentReference(collection, str(doc_id))

    def update(self, collection: str, doc_id: str, data: DocumentData) -> None:
        try:
            body = self._request("PATCH", self._url(collection, doc_id), data=encode_document(data))
            APIUtils.handle_api_response(body)
        except (requests.exceptions.RequestException, ValueError) as e:
            raise PersistenceError(
                f"Failed to update {collection}/{doc_id}: {e}", operation="update", doc_id=doc_id
            ) from e
        self.poll()

    def get(self, collection: str, doc_id: str) -> Optional[DocumentData]:
        try:
            return self._request("GET", self._url(collection, doc_id))
        except requests.exceptions.RequestException as e:
            if APIUtils.status_code(e) == 404:
                return None
            raise PersistenceError(
                f"Failed to read {collection}/{doc_id}: {e}", operation="get", doc_id=doc_id
            ) from e

    def query(self, query: Query) -> List[DocumentData]:
        """クエリを1回だけ実行し、結果の一覧を返す。

        Raises:
            FetchError: リクエストに失敗した場合。
        """
        try:
            body = self._request("GET", self._url(query.collection), params=encode_query(query))
            documents = APIUtils.handle_api_response(body, "documents")
        except (requests.exceptions.RequestException, ValueError) as e:
            raise FetchError(f"Failed to query {query.collection}: {e}") from e
        return list(documents or [])

    def watch_document(self, collection, doc_id, on_next, on_error=None) -> Subscription:
        return self._register(_PollingWatcher(lambda: self.get(collection, doc_id), on_next, on_error))

    def watch_query(self, query, on_next, on_error=None) -> Subscription:
        return self._register(_PollingWatcher(lambda: self.query(query), on_next, on_error))

    # --- polling ---

    def poll(self) -> None:
        """すべての購読について最新値を取得し、変化があれば通知する。"""
        for watcher in list(self._watchers):
            if watcher.subscription.active:
                self._poll_one(watcher)

    def _poll_one(self, watcher: _PollingWatcher) -> None:
        try:
            value = watcher.fetch()
        except (PersistenceError, FetchError) as e:
            logger.error("Polling failed: %s", e)
            if watcher.on_error is not None:
                watcher.on_error(e)
            return
        if value == watcher.last_value:
            return
        watcher.last_value = value
        try:
            watcher.callback(value)
        except Exception:
            logger.exception("Subscriber callback raised")

    def _register(self, watcher: _PollingWatcher) -> Subscription:
        self._watchers.append(watcher)

        def release() -> None:
            if watcher in self._watchers:
                self._watchers.remove(watcher)
            if not self._watchers:
                self._timer.stop()

        watcher.subscription._release = release
        self._poll_one(watcher)
        if not self._timer.isActive():
            self._timer.start()
        return watcher.subscription
