# models/user_models.py
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthUser:
    """認証済みユーザーを表現するデータモデル。

    Attributes:
        uid (str): ユーザーの一意なID。メモやフォルダの所有者として記録される。
        email (str): メールアドレス。
        display_name (str): 表示名。
    """
    uid: str
    email: str = ""
    display_name: str = ""
