"""
サインイン中のユーザーのメモ一覧を表示するウィジェットを提供します。
"""
import logging
from typing import List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QListWidget, QListWidgetItem, QWidget

from models.memo_models import Memo
from services.document_store import Subscription
from services.memo_service import MemoService

logger = logging.getLogger(__name__)


class MemoListWidget(QListWidget):
    """
    メモ一覧を購読し、更新日時の新しい順に表示するリスト。

    項目を選択すると memo_selected(memo_id) を送信します。
    """

    memo_selected = pyqtSignal(str)

    def __init__(self, memo_service: MemoService, owner_uid: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.memo_service = memo_service
        self.owner_uid = owner_uid
        self._subscription: Optional[Subscription] = None
        self.itemClicked.connect(self._on_item_clicked)

    def start(self) -> None:
        """メモ一覧の購読を開始する。"""
        self.stop()
        self._subscription = self.memo_service.watch_memos(
            self.owner_uid, self.set_memos, self._on_error
        )

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def set_memos(self, memos: List[Memo]) -> None:
        selected = self.current_memo_id()
        self.clear()
        for memo in memos:
            # IDの書き戻し前のメモは選択できない
            if not memo.id:
                continue
            item = QListWidgetItem(memo.title)
            item.setData(Qt.ItemDataRole.UserRole, memo.id)
            item.setToolTip(memo.description[:200])
            self.addItem(item)
            if memo.id == selected:
                self.setCurrentItem(item)

    def current_memo_id(self) -> Optional[str]:
        item = self.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item is not None else None

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        self.memo_selected.emit(item.data(Qt.ItemDataRole.UserRole))

    def _on_error(self, error: Exception) -> None:
        logger.error("Memo list subscription failed: %s", error)
        self.clear()
