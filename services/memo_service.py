# services/memo_service.py
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from services.base_service import BaseService
from services.document_store import DocumentReference, ErrorCallback, Query, Subscription
from models.memo_models import Memo

logger = logging.getLogger(__name__)


class MemoService(BaseService[Memo]):
    """メモの作成、更新、取得、購読を管理するサービスクラス。

    データはドキュメントストアの "memo" コレクションに保存されます。
    """

    COLLECTION = "memo"

    def from_document(self, data: Dict[str, Any]) -> Memo:
        return Memo.from_dict(data)

    def register_memo(self, memo: Memo) -> DocumentReference:
        """メモを新規作成する。

        ストアが採番したIDはこの時点ではドキュメントに含まれないため、
        呼び出し側は続けて patch_memo_id() を呼ぶ必要があります。

        Args:
            memo (Memo): 作成するメモ。id は空文字であること。

        Returns:
            DocumentReference: 作成されたドキュメントの参照。

        Raises:
            PersistenceError: 書き込みに失敗した場合。
        """
        ref = self.store.add(self.COLLECTION, memo.to_dict())
        logger.info("Created memo %s", ref.id)
        return ref

    def patch_memo_id(self, memo_id: str) -> None:
        """ドキュメントの id フィールドを保存キーと一致させる。"""
        self.store.update(self.COLLECTION, memo_id, {"id": memo_id})

    def update_memo(self, memo: Memo) -> None:
        """メモの可変フィールド（title, description, folderId, updatedDate）だけを更新する。

        createdUser と createdDate は書き込まれません。

        Raises:
            PersistenceError: 書き込みに失敗した場合。
        """
        self.store.update(self.COLLECTION, memo.id, memo.mutable_fields())
        logger.info("Updated memo %s", memo.id)

    def retrieve_memo(self, memo_id: str) -> Optional[Memo]:
        """指定されたIDのメモを1回だけ取得する。"""
        return self.load_data(memo_id)

    def watch_memo(
        self,
        memo_id: str,
        on_next: Callable[[Optional[Memo]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """指定されたIDのメモを購読する。メモが存在しない場合は None が通知される。"""
        return self.watch_one(memo_id, on_next, on_error)

    def memo_query(self, owner_uid: str, folder_id: Optional[Union[int, str]] = None) -> Query:
        """ユーザーのメモを更新日時の降順で取得するクエリ。folder_id を指定するとそのフォルダに絞る。"""
        query = Query(self.COLLECTION).where("createdUser", "==", owner_uid)
        if folder_id is not None:
            query = query.where("folderId", "==", folder_id)
        return query.order_by("updatedDate", "desc")

    def watch_memos(
        self,
        owner_uid: str,
        on_next: Callable[[List[Memo]], None],
        on_error: Optional[ErrorCallback] = None,
        folder_id: Optional[Union[int, str]] = None,
    ) -> Subscription:
        """ユーザーのメモ一覧を購読する。"""
        return self.watch_many(self.memo_query(owner_uid, folder_id), on_next, on_error)
