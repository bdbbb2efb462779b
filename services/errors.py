# services/errors.py
from typing import Any, Dict, Optional


class MemoAppError(Exception):
    """アプリケーション内で発生するエラーの基底クラス。"""


class ValidationError(MemoAppError):
    """フォーム入力がバリデーションを通過しなかったことを示す。

    Attributes:
        errors (Dict[str, Any]): フォームレベルのエラー（例: {"titleOrDescriptionRequired": True}）。
    """

    def __init__(self, errors: Dict[str, Any]) -> None:
        super().__init__(", ".join(errors) or "validation failed")
        self.errors = errors


class PersistenceError(MemoAppError):
    """ストアへの書き込み・読み込み・購読が失敗したことを示す。

    Attributes:
        operation (str): 失敗した操作名（"add", "update" など）。
        doc_id (Optional[str]): 対象ドキュメントのID。
    """

    def __init__(self, message: str, operation: str = "", doc_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.doc_id = doc_id


class FetchError(MemoAppError):
    """一覧取得のクエリが失敗したことを示す。"""
