# utils/logging_utils.py
"""
アプリケーション共通のロガー設定。

get_logger() で取得したロガーは、ローテーションするファイル出力と
コンソール出力の2つのハンドラを持ちます。名前に "memoapp" を指定すると
ルートロガーを設定するため、logging.getLogger(__name__) を使う各モジュールの
出力もすべて memoapp.log に記録されます。
"""
import logging
import logging.handlers
import os
import pathlib
from typing import Dict, Optional, Union

ROOT_LOGGER_NAME = "memoapp"

_LOGGER_CACHE: Dict[str, logging.Logger] = {}


def get_logger(
    name: str = ROOT_LOGGER_NAME,
    log_dir: Optional[str] = None,
    level: Optional[Union[int, str]] = None,
) -> logging.Logger:
    """設定済みのロガーを返す。

    同じ名前で2回目以降に呼ばれた場合はキャッシュしたロガーを返し、
    ハンドラの二重登録を防ぎます。

    Args:
        name (str): ロガー名。ログファイル名 {name}.log にも使われる。
        log_dir (Optional[str]): ログファイルの出力先。存在しない場合は作成される。
        level (Optional[Union[int, str]]): ログレベル。省略時は INFO。

    Returns:
        logging.Logger: 設定済みのロガー。
    """
    if name in _LOGGER_CACHE:
        return _LOGGER_CACHE[name]

    logger = logging.getLogger(None if name == ROOT_LOGGER_NAME else name)
    logger.setLevel(level or logging.INFO)

    if logger.handlers:
        return logger

    if log_dir is None:
        log_dir = "logs"
    pathlib.Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_path = os.path.join(log_dir, f"{name}.log")

    fh = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8"
    )
    fh.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    )

    ch = logging.StreamHandler()
    ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    _LOGGER_CACHE[name] = logger
    return logger
