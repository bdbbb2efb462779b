# models/memo_models.py
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from models.folder_models import FolderCode

# タイトル未入力時に保存されるタイトル
DEFAULT_TITLE = "無題"


def coerce_title(raw_title: Optional[str]) -> str:
    """空白のみのタイトルを既定タイトルに置き換える。

    Args:
        raw_title (Optional[str]): ユーザーが入力したタイトル。

    Returns:
        str: 入力が空であれば DEFAULT_TITLE、そうでなければ入力をそのまま返す。
    """
    if raw_title is None or not raw_title.strip():
        return DEFAULT_TITLE
    return raw_title


@dataclass
class Memo:
    """ユーザーが作成する単一のメモを表現するデータモデル。

    Attributes:
        id (str): ストアが採番したメモのID。未保存の間は空文字。
        title (str): メモのタイトル。
        description (str): メモの本文。
        folder_id (Union[int, str]): 所属フォルダのID。FolderCode.NONE はフォルダなし。
        created_user (str): 作成したユーザーのUID。作成後は変更されない。
        created_date (Any): 作成日時。書き込み前はサーバータイムスタンプマーカー。
        updated_date (Any): 最終更新日時。書き込みのたびに更新される。
    """
    id: str = ""
    title: str = ""
    description: str = ""
    folder_id: Union[int, str] = FolderCode.NONE
    created_user: str = ""
    created_date: Any = None
    updated_date: Any = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Memo":
        folder_id = d.get("folderId")
        if folder_id is None or folder_id == "":
            folder_id = FolderCode.NONE
        return Memo(
            id=d.get("id", "") or "",
            title=d.get("title", "") or "",
            description=d.get("description", "") or "",
            folder_id=folder_id,
            created_user=d.get("createdUser", "") or "",
            created_date=d.get("createdDate"),
            updated_date=d.get("updatedDate"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "folderId": self.folder_id,
            "createdUser": self.created_user,
            "createdDate": self.created_date,
            "updatedDate": self.updated_date,
        }

    def mutable_fields(self) -> Dict[str, Any]:
        """更新時に書き込むフィールドだけを辞書で返す。"""
        return {
            "title": self.title,
            "description": self.description,
            "folderId": self.folder_id,
            "updatedDate": self.updated_date,
        }
