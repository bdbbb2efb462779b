# models/folder_models.py
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict


class FolderCode(IntEnum):
    """フォルダ選択で使う特別なコード。"""
    NONE = 0


@dataclass
class Folder:
    """メモをまとめるユーザー単位のフォルダ。

    Attributes:
        id (str): フォルダのID。
        name (str): フォルダ名。
        created_user (str): フォルダを作成したユーザーのUID。
        created_date (Any): 作成日時。
        updated_date (Any): 最終更新日時。一覧の並び順に使われる。
    """
    id: str
    name: str
    created_user: str
    created_date: Any = None
    updated_date: Any = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Folder":
        return Folder(
            id=d.get("id", "") or "",
            name=d.get("name", "") or "",
            created_user=d.get("createdUser", "") or "",
            created_date=d.get("createdDate"),
            updated_date=d.get("updatedDate"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "createdUser": self.created_user,
            "createdDate": self.created_date,
            "updatedDate": self.updated_date,
        }
