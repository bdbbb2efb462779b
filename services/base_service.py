# services/base_service.py
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from services.document_store import DocumentStore, ErrorCallback, Query, Subscription

# データモデルを表すジェネリック型を定義
T = TypeVar('T')


class BaseService(Generic[T], ABC):
    """
    ドキュメントストアの1コレクションを扱うサービスクラスの基底となる抽象クラス（ABC）。

    具象サービスクラスは COLLECTION を定義し、ストアの辞書を特定のデータモデル
    （例: Memo, Folder）に変換する from_document を実装します。

    Attributes:
        store (DocumentStore): データを永続化するドキュメントストア。
    """

    COLLECTION: str = ""

    def __init__(self, store: DocumentStore) -> None:
        """BaseServiceのコンストラクタ。

        Args:
            store (DocumentStore): ドキュメントストアのインスタンス。
        """
        self.store = store

    @abstractmethod
    def from_document(self, data: Dict[str, Any]) -> T:
        """ストアから取得した辞書をデータモデルに変換する。"""

    def load_data(self, identifier: str) -> Optional[T]:
        """
        指定されたIDのドキュメントを読み込む。

        Args:
            identifier (str): ドキュメントのID。

        Returns:
            Optional[T]: 読み込まれたデータモデルオブジェクト。見つからない場合はNone。
        """
        data = self.store.get(self.COLLECTION, identifier)
        return self.from_document(data) if data is not None else None

    def watch_one(
        self,
        identifier: str,
        on_next: Callable[[Optional[T]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """ドキュメント1件を購読し、データモデルに変換して通知する。"""
        return self.store.watch_document(
            self.COLLECTION,
            identifier,
            lambda data: on_next(self.from_document(data) if data is not None else None),
            on_error,
        )

    def watch_many(
        self,
        query: Query,
        on_next: Callable[[List[T]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """クエリ結果を購読し、データモデルの一覧に変換して通知する。"""
        return self.store.watch_query(
            query,
            lambda docs: on_next([self.from_document(d) for d in docs]),
            on_error,
        )
