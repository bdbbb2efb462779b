# services/spinner_service.py
from contextlib import contextmanager
from typing import Iterator, Optional

from PyQt6.QtCore import QObject, pyqtSignal


class SpinnerService(QObject):
    """処理中インジケータ（スピナー）の表示状態を管理するサービス。

    show()/hide() は入れ子にでき、最初の show() で busy_changed(True)、
    対応する最後の hide() で busy_changed(False) が送信されます。
    """

    busy_changed = pyqtSignal(bool)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._depth: int = 0

    def show(self) -> None:
        self._depth += 1
        if self._depth == 1:
            self.busy_changed.emit(True)

    def hide(self) -> None:
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0:
            self.busy_changed.emit(False)

    def is_busy(self) -> bool:
        return self._depth > 0

    @contextmanager
    def busy(self) -> Iterator[None]:
        """ブロックの間スピナーを表示する。例外が発生しても hide() は必ず1回だけ呼ばれる。"""
        self.show()
        try:
            yield
        finally:
            self.hide()
