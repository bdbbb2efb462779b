# services/storage_service.py
import copy
import datetime
import json
import logging
import os
import uuid
from typing import Any, Callable, Dict, List, Optional, Union

from services.document_store import (
    DocumentData, DocumentReference, DocumentStore, ErrorCallback, Query,
    Subscription, resolve_timestamps,
)
from services.errors import PersistenceError

logger = logging.getLogger(__name__)


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class _Watcher:
    """1件の購読。ドキュメント購読なら doc_id、クエリ購読なら query を持つ。"""

    def __init__(
        self,
        collection: str,
        callback: Callable[[Any], None],
        on_error: Optional[ErrorCallback],
        doc_id: Optional[str] = None,
        query: Optional[Query] = None,
    ) -> None:
        self.collection = collection
        self.callback = callback
        self.on_error = on_error
        self.doc_id = doc_id
        self.query = query
        self.subscription = Subscription()


class LocalDocumentStore(DocumentStore):
    """ローカルファイルシステムにコレクションをJSONで永続化するドキュメントストア。

    コレクションごとに <collection>.json を作成し、ドキュメントIDをキーとした
    辞書として保存します。書き込みが成功すると、同じコレクションの購読者へ
    同期的に変更を通知します。
    """

    def __init__(
        self,
        base_path: str = "data",
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ) -> None:
        """LocalDocumentStoreのコンストラクタ。

        Args:
            base_path (str): データを保存する基準ディレクトリのパス。
                             存在しない場合は自動的に作成されます。
            clock (Optional[Callable[[], datetime]]): サーバータイムスタンプに使う時計。
        """
        self.base_path = base_path
        os.makedirs(self.base_path, exist_ok=True)
        self._clock = clock or utc_now
        self._last_timestamp = ""
        self._collections: Dict[str, Dict[str, DocumentData]] = {}
        self._watchers: List[_Watcher] = []

    def get_path(self, file_name: str) -> str:
        """ベースパスとファイル名を結合して完全なファイルパスを取得する。"""
        return os.path.join(self.base_path, file_name)

    def save_json(self, file_name: str, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> None:
        """データをJSONファイルとしてローカルに保存する。

        Raises:
            PersistenceError: ファイルの書き込みに失敗した場合。
        """
        file_path = self.get_path(file_name)
        tmp_path = file_path + ".tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=4)
            os.replace(tmp_path, file_path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {file_path}: {e}", operation="save") from e
        logger.debug("Saved %s", file_path)

    def load_json(self, file_name: str) -> Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]:
        """ローカルのJSONファイルからデータを読み込む。ファイルが存在しない場合はNone。"""
        file_path = self.get_path(file_name)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read {file_path}: {e}", operation="load") from e

    # --- DocumentStore ---

    def add(self, collection: str, data: DocumentData) -> DocumentReference:
        doc_id = uuid.uuid4().hex
        docs = self._load_collection(collection)
        docs[doc_id] = resolve_timestamps(data, self._server_timestamp())
        self._commit(collection, docs, operation="add", doc_id=doc_id)
        return DocumentReference(collection, doc_id)

    def update(self, collection: str, doc_id: str, data: DocumentData) -> None:
        docs = self._load_collection(collection)
        if doc_id not in docs:
            raise PersistenceError(
                f"No document {collection}/{doc_id}", operation="update", doc_id=doc_id
            )
        merged = dict(docs[doc_id])
        merged.update(resolve_timestamps(data, self._server_timestamp()))
        docs[doc_id] = merged
        self._commit(collection, docs, operation="update", doc_id=doc_id)

    def get(self, collection: str, doc_id: str) -> Optional[DocumentData]:
        doc = self._load_collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def watch_document(self, collection, doc_id, on_next, on_error=None) -> Subscription:
        watcher = _Watcher(collection, on_next, on_error, doc_id=doc_id)
        return self._register(watcher)

    def watch_query(self, query, on_next, on_error=None) -> Subscription:
        watcher = _Watcher(query.collection, on_next, on_error, query=query)
        return self._register(watcher)

    def watcher_count(self) -> int:
        """有効な購読の数を返す。"""
        return len(self._watchers)

    # --- internals ---

    def _server_timestamp(self) -> str:
        # ストアの時刻は単調非減少
        now = self._clock().isoformat(timespec="microseconds")
        if now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    def _load_collection(self, collection: str) -> Dict[str, DocumentData]:
        if collection not in self._collections:
            data = self.load_json(f"{collection}.json")
            self._collections[collection] = dict(data) if isinstance(data, dict) else {}
        return self._collections[collection]

    def _commit(self, collection: str, docs: Dict[str, DocumentData], operation: str, doc_id: str) -> None:
        snapshot = copy.deepcopy(docs)
        try:
            self.save_json(f"{collection}.json", snapshot)
        except PersistenceError as e:
            # メモリ上の状態をファイルの内容に戻す
            self._collections.pop(collection, None)
            e.operation, e.doc_id = operation, doc_id
            raise
        self._collections[collection] = snapshot
        self._notify(collection, doc_id)

    def _register(self, watcher: _Watcher) -> Subscription:
        self._watchers.append(watcher)

        def release() -> None:
            if watcher in self._watchers:
                self._watchers.remove(watcher)

        watcher.subscription._release = release
        self._deliver(watcher)
        return watcher.subscription

    def _notify(self, collection: str, doc_id: str) -> None:
        for watcher in list(self._watchers):
            if watcher.collection != collection or not watcher.subscription.active:
                continue
            if watcher.doc_id is not None and watcher.doc_id != doc_id:
                continue
            self._deliver(watcher)

    def _deliver(self, watcher: _Watcher) -> None:
        try:
            if watcher.doc_id is not None:
                value: Any = self.get(watcher.collection, watcher.doc_id)
            else:
                docs = list(copy.deepcopy(self._load_collection(watcher.collection)).values())
                value = watcher.query.apply(docs)
        except PersistenceError as e:
            logger.error("Failed to read %s for a subscriber: %s", watcher.collection, e)
            if watcher.on_error is not None:
                watcher.on_error(e)
            return
        try:
            watcher.callback(value)
        except Exception:
            logger.exception("Subscriber callback for %s raised", watcher.collection)
