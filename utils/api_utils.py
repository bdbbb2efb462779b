# utils/api_utils.py
import logging
from typing import Dict, Any, Optional

import requests

logger = logging.getLogger(__name__)


class APIUtils:
    """API連携に関する共通処理を提供するユーティリティクラス。"""

    @staticmethod
    def make_api_request(
        url: str,
        method: str = "POST",
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: float = 15,
    ) -> Dict[str, Any]:
        """指定されたURLにAPIリクエストを送信し、JSONレスポンスを返す。

        Args:
            url (str): リクエストを送信するAPIエンドポイントのURL。
            method (str): HTTPメソッド（例: "GET", "POST", "PATCH"）。
            data (Optional[Dict[str, Any]]): リクエストボディとして送信するデータ（JSON）。
            params (Optional[Dict[str, Any]]): クエリ文字列のパラメータ。
            timeout (float): タイムアウト秒数。

        Returns:
            Dict[str, Any]: APIからのJSONレスポンス。ボディが空の場合は空の辞書。

        Raises:
            requests.exceptions.RequestException: ネットワークエラーやHTTPエラーステータスの場合。
        """
        try:
            response = requests.request(method, url, json=data, params=params, timeout=timeout)
            response.raise_for_status()  # 2xx以外のステータスコードで例外を発生させる
        except requests.exceptions.RequestException as e:
            logger.warning("API request %s %s failed: %s", method, url, e)
            raise
        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def handle_api_response(response_json: Dict[str, Any], key: str = "data") -> Any:
        """APIレスポンスのJSONからエラーを検出し、key の値を取り出す。

        Raises:
            ValueError: レスポンスに "error" が含まれている場合。
        """
        if "error" in response_json and response_json["error"]:
            raise ValueError(f"API Error: {response_json['error']}")

        return response_json.get(key)

    @staticmethod
    def status_code(error: requests.exceptions.RequestException) -> Optional[int]:
        """HTTPエラーのステータスコードを返す。レスポンスがない場合はNone。"""
        response = getattr(error, "response", None)
        return response.status_code if response is not None else None
