# ui/main_window.py
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QApplication, QMainWindow, QSplitter, QToolBar, QWidget

from models.user_models import AuthUser
from services.auth_service import AuthenticationService
from services.folder_service import FolderService
from services.memo_service import MemoService
from services.notification_service import FAILURE, NotificationService
from services.spinner_service import SpinnerService
from ui.handlers.upsert_handler import UpsertFormHandler
from ui.widgets import MemoListWidget, UpsertFormWidget


SIGNED_OUT_MESSAGE = "サインアウトしました"


class MainWindow(QMainWindow):
    """
    メモ一覧と作成・更新フォームを並べたメインウィンドウ。

    処理中はカーソルを待機状態にし、保存結果はステータスバーに一定時間表示します。
    auth が渡された場合はツールバーにサインアウトを置き、サインアウト後は
    購読を解除して一覧とフォームを操作できなくします。
    """
    TOAST_MS = 3000

    def __init__(
        self,
        memo_service: MemoService,
        folder_service: FolderService,
        user: AuthUser,
        spinner: Optional[SpinnerService] = None,
        notifier: Optional[NotificationService] = None,
        auth: Optional[AuthenticationService] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("メモ")
        self.setGeometry(100, 100, 1000, 700)

        self.spinner = spinner or SpinnerService(self)
        self.notifier = notifier or NotificationService(self)
        self.auth = auth
        self.upsert_handler = UpsertFormHandler(
            memo_service, folder_service, self.spinner, self.notifier, user, self
        )

        self.memo_list = MemoListWidget(memo_service, user.uid)
        self.upsert_form = UpsertFormWidget(self.upsert_handler)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.memo_list)
        splitter.addWidget(self.upsert_form)
        splitter.setStretchFactor(1, 2)
        self.setCentralWidget(splitter)

        toolbar = QToolBar("メイン")
        self.addToolBar(toolbar)
        self.new_memo_action = QAction("新規メモ", self)
        self.new_memo_action.triggered.connect(self.create_new_memo)
        toolbar.addAction(self.new_memo_action)
        self.sign_out_action = QAction("サインアウト", self)
        self.sign_out_action.triggered.connect(self.sign_out)
        self.sign_out_action.setVisible(auth is not None)
        toolbar.addAction(self.sign_out_action)

        if auth is not None:
            auth.user_changed.connect(self.on_user_changed)

        self.memo_list.memo_selected.connect(self.upsert_handler.bind_memo)
        self.spinner.busy_changed.connect(self.on_busy_changed)
        self.notifier.notified.connect(self.show_toast)

        self.upsert_handler.load_folders()
        self.memo_list.start()

    def create_new_memo(self) -> None:
        """編集中のメモとの結び付きを外し、空のフォームにする。"""
        self.memo_list.clearSelection()
        self.upsert_handler.bind_memo(None)

    def sign_out(self) -> None:
        if self.auth is None:
            return
        with self.spinner.busy():
            self.shutdown()
            self.auth.sign_out()

    def on_user_changed(self, user: Optional[AuthUser]) -> None:
        if user is not None:
            return
        self.shutdown()
        self.centralWidget().setEnabled(False)
        self.new_memo_action.setEnabled(False)
        self.sign_out_action.setEnabled(False)
        self.notifier.success(SIGNED_OUT_MESSAGE)

    def on_busy_changed(self, busy: bool) -> None:
        if busy:
            QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        else:
            QApplication.restoreOverrideCursor()

    def show_toast(self, level: str, message: str) -> None:
        style = "color: #d32f2f;" if level == FAILURE else "color: #2e7d32;"
        self.statusBar().setStyleSheet(style)
        self.statusBar().showMessage(message, self.TOAST_MS)

    def shutdown(self) -> None:
        """すべての購読を解除する。"""
        self.upsert_handler.dispose()
        self.memo_list.stop()

    def closeEvent(self, event) -> None:
        self.shutdown()
        super().closeEvent(event)
