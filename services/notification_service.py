# services/notification_service.py
from typing import Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

SUCCESS = "success"
FAILURE = "failure"


class NotificationService(QObject):
    """ユーザーに表示する成功・失敗の通知（トースト）を送信するサービス。"""

    notified = pyqtSignal(str, str)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.last: Optional[Tuple[str, str]] = None

    def success(self, message: str) -> None:
        self._notify(SUCCESS, message)

    def failure(self, message: str) -> None:
        self._notify(FAILURE, message)

    def _notify(self, level: str, message: str) -> None:
        self.last = (level, message)
        self.notified.emit(level, message)
