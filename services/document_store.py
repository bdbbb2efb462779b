# services/document_store.py
"""
ドキュメントストアの共通インターフェース。

メモやフォルダは、IDをキーとするコレクションに辞書として保存されます。
ストアは以下の操作を提供します。

- add: ストアがキーを採番して新規作成する
- update: キーを指定してフィールドを部分更新する
- watch_document / watch_query: 値が変わるたびにコールバックへ現在値を通知する

タイムスタンプはクライアントの時計ではなく、SERVER_TIMESTAMP マーカーを
書き込むことでストア側の時計から設定されます。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

DocumentData = Dict[str, Any]
ErrorCallback = Callable[[Exception], None]


class _ServerTimestamp:
    """書き込み時にストアの現在時刻へ置き換えられるマーカー。"""

    _instance: Optional["_ServerTimestamp"] = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"

    def __copy__(self) -> "_ServerTimestamp":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_ServerTimestamp":
        return self


SERVER_TIMESTAMP = _ServerTimestamp()


def resolve_timestamps(data: DocumentData, now: str) -> DocumentData:
    """SERVER_TIMESTAMP マーカーを now に置き換えた新しい辞書を返す。"""
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


@dataclass(frozen=True)
class DocumentReference:
    """ストアに保存されたドキュメントの位置。"""
    collection: str
    id: str


@dataclass(frozen=True)
class Query:
    """コレクションに対する絞り込みと並び順の指定。

    where() と order_by() は新しい Query を返すため、ビルダーとして連結できます。
    サポートする比較演算子は "==" のみです。

    Attributes:
        collection (str): 対象コレクション名。
        filters (Tuple[Tuple[str, str, Any], ...]): (フィールド, 演算子, 値) の組。
        ordering (Optional[Tuple[str, str]]): (フィールド, "asc" | "desc")。
    """
    collection: str
    filters: Tuple[Tuple[str, str, Any], ...] = ()
    ordering: Optional[Tuple[str, str]] = None

    def where(self, field_name: str, op: str, value: Any) -> "Query":
        if op != "==":
            raise ValueError(f"Unsupported query operator: {op}")
        return Query(self.collection, self.filters + ((field_name, op, value),), self.ordering)

    def order_by(self, field_name: str, direction: str = "asc") -> "Query":
        if direction not in ("asc", "desc"):
            raise ValueError(f"Unsupported order direction: {direction}")
        return Query(self.collection, self.filters, (field_name, direction))

    def matches(self, doc: DocumentData) -> bool:
        return all(doc.get(name) == value for name, _op, value in self.filters)

    def apply(self, docs: List[DocumentData]) -> List[DocumentData]:
        """絞り込みと並び替えを docs に適用した新しいリストを返す。

        並び替えのキーが欠けているドキュメントは、方向に関わらず末尾に置かれます。
        """
        result = [d for d in docs if self.matches(d)]
        if self.ordering:
            name, direction = self.ordering
            present = [d for d in result if d.get(name) is not None]
            missing = [d for d in result if d.get(name) is None]
            present.sort(key=lambda d: d[name], reverse=(direction == "desc"))
            result = present + missing
        return result


@dataclass
class Subscription:
    """ストアの購読を表すハンドル。

    unsubscribe() は何度呼んでも安全で、解除後はコールバックが呼ばれません。
    """
    _release: Optional[Callable[[], None]] = None
    active: bool = field(default=True)

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        release, self._release = self._release, None
        if release is not None:
            release()


class DocumentStore(ABC):
    """IDをキーとするドキュメントコレクションを扱うストアの抽象基底クラス。"""

    @abstractmethod
    def add(self, collection: str, data: DocumentData) -> DocumentReference:
        """ドキュメントを新規作成し、ストアが採番した参照を返す。

        Raises:
            PersistenceError: 書き込みに失敗した場合。
        """

    @abstractmethod
    def update(self, collection: str, doc_id: str, data: DocumentData) -> None:
        """既存ドキュメントの指定フィールドだけを上書きする。

        Raises:
            PersistenceError: ドキュメントが存在しない、または書き込みに失敗した場合。
        """

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[DocumentData]:
        """ドキュメントを1件取得する。存在しない場合はNone。"""

    @abstractmethod
    def watch_document(
        self,
        collection: str,
        doc_id: str,
        on_next: Callable[[Optional[DocumentData]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """ドキュメントを購読する。

        購読開始時に現在値（存在しなければNone）を通知し、その後は値が
        変わるたびに通知します。
        """

    @abstractmethod
    def watch_query(
        self,
        query: Query,
        on_next: Callable[[List[DocumentData]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """クエリ結果を購読する。

        購読開始時と、結果が変わるたびに、絞り込み・並び替え済みの一覧全体を通知します。
        """
