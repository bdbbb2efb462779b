# utils/validators.py
from typing import Any, Dict, Optional

TITLE_OR_DESCRIPTION_REQUIRED = "titleOrDescriptionRequired"


class CustomValidator:
    """フォーム全体に対するバリデーションルール。"""

    @staticmethod
    def title_or_description_required(
        title: Optional[str], description: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        """タイトルと本文の少なくとも一方が入力されているか検証する。

        プレースホルダーへの置き換え前の、ユーザーが入力したままの値を検証します。

        Args:
            title (Optional[str]): 入力されたタイトル。
            description (Optional[str]): 入力された本文。

        Returns:
            Optional[Dict[str, Any]]: 有効ならNone。両方とも空なら
            {"titleOrDescriptionRequired": True}。
        """
        if (title or "").strip() or (description or "").strip():
            return None
        return {TITLE_OR_DESCRIPTION_REQUIRED: True}
