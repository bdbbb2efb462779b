# utils/settings.py
"""
実行時設定の読み込み。

環境変数（および存在すれば .env ファイル）から Settings を一度だけ組み立て、
アプリケーション全体はこのオブジェクトだけを参照します。
"""
import logging
import os
import pathlib
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("local", "remote")


@dataclass
class Settings:
    """解決済みの実行時設定。

    Attributes:
        store_backend (str): "local"（JSONファイル）または "remote"（REST API）。
        data_dir (str): ローカルストアのデータディレクトリ。
        api_base_url (str): リモートストアのベースURL。
        api_timeout (float): HTTPリクエストのタイムアウト秒数。
        poll_interval_ms (int): リモートストアの購読ポーリング間隔（ミリ秒）。
        log_dir (str): ログファイルの出力先。
        log_level (str): ログレベル名。
        user_id (str): サインインするユーザーのUID。
        user_email (str): サインインするユーザーのメールアドレス。
    """
    store_backend: str = "local"
    data_dir: str = "data"
    api_base_url: str = ""
    api_timeout: float = 15.0
    poll_interval_ms: int = 2000
    log_dir: str = "logs"
    log_level: str = "INFO"
    user_id: str = "local-user"
    user_email: str = ""

    def ensure_dirs(self) -> None:
        pathlib.Path(self.data_dir).mkdir(parents=True, exist_ok=True)
        pathlib.Path(self.log_dir).mkdir(parents=True, exist_ok=True)

    def asdict(self) -> Dict[str, Any]:
        return asdict(self)


def _number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("%s=%r is not a valid number; using %r", key, raw, default)
        return default


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """環境変数から Settings を組み立てる。

    Args:
        env (Optional[Mapping[str, str]]): 参照する環境。省略時は os.environ。
        dotenv (bool): True の場合、先に .env ファイルを読み込む。

    Returns:
        Settings: 解決済みの設定。
    """
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    defaults = Settings()
    backend = (env.get("MEMO_STORE_BACKEND") or defaults.store_backend).lower()
    if backend not in STORE_BACKENDS:
        logger.warning("Unknown MEMO_STORE_BACKEND %r; using %r", backend, defaults.store_backend)
        backend = defaults.store_backend

    return Settings(
        store_backend=backend,
        data_dir=env.get("MEMO_DATA_DIR") or defaults.data_dir,
        api_base_url=(env.get("MEMO_API_BASE_URL") or "").rstrip("/"),
        api_timeout=_number(env, "MEMO_API_TIMEOUT", defaults.api_timeout, float),
        poll_interval_ms=_number(env, "MEMO_POLL_INTERVAL_MS", defaults.poll_interval_ms, int),
        log_dir=env.get("MEMO_LOG_DIR") or defaults.log_dir,
        log_level=(env.get("MEMO_LOG_LEVEL") or defaults.log_level).upper(),
        user_id=env.get("MEMO_USER_ID") or defaults.user_id,
        user_email=env.get("MEMO_USER_EMAIL") or defaults.user_email,
    )
