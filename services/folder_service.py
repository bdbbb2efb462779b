# services/folder_service.py
from typing import Any, Callable, Dict, List, Optional

from services.base_service import BaseService
from services.document_store import ErrorCallback, Query, Subscription
from models.folder_models import Folder


class FolderService(BaseService[Folder]):
    """ユーザーが作成したフォルダの一覧を取得するサービスクラス。

    このアプリケーションからフォルダは読み取り専用です。
    """

    COLLECTION = "folder"

    def from_document(self, data: Dict[str, Any]) -> Folder:
        return Folder.from_dict(data)

    def folder_query(self, owner_uid: str) -> Query:
        """自分が作成したフォルダを更新日時の降順で取得するクエリ。"""
        return (
            Query(self.COLLECTION)
            .where("createdUser", "==", owner_uid)
            .order_by("updatedDate", "desc")
        )

    def watch_folders(
        self,
        owner_uid: str,
        on_next: Callable[[List[Folder]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """フォルダ一覧を購読する。通知のたびに一覧全体が渡される。"""
        return self.watch_many(self.folder_query(owner_uid), on_next, on_error)
