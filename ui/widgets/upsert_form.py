"""
メモの新規作成・更新フォームのウィジェットを提供します。
"""
from typing import List, Optional

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLineEdit, QComboBox,
                             QTextEdit, QPushButton, QLabel)

from models.folder_models import Folder, FolderCode
from ui.handlers.upsert_handler import MemoFormState, UpsertFormHandler

NO_FOLDER_LABEL = "フォルダなし"
REQUIRED_MESSAGE = "タイトルか本文のどちらかを入力してください"


class UpsertFormWidget(QWidget):
    """
    タイトル、フォルダ、本文の入力欄と保存ボタンからなるフォーム。

    入力はすべて UpsertFormHandler に渡され、ハンドラ側でフォームの値が
    置き換わったとき（購読による反映やリセット）は form_changed を受けて表示を更新します。
    保存ボタンは入力が有効で、かつ処理中でないときだけ押せます。
    """

    def __init__(self, handler: UpsertFormHandler, parent: Optional[QWidget] = None) -> None:
        """
        UpsertFormWidgetのコンストラクタ。

        Args:
            handler (UpsertFormHandler): フォームの状態とロジックを持つハンドラ。
            parent (Optional[QWidget]): 親ウィジェット。
        """
        super().__init__(parent)
        self.handler: UpsertFormHandler = handler
        self._busy: bool = False
        self._applying: bool = False

        # --- UI要素の型定義 ---
        self.title_input: QLineEdit
        self.folder_combo: QComboBox
        self.description_edit: QTextEdit
        self.error_label: QLabel
        self.submit_button: QPushButton

        self.setup_ui()
        self.setup_connections()
        self.set_folders(handler.folders)
        self.apply_form_state(handler.form)

    def setup_ui(self) -> None:
        """UIの構築とレイアウト設定を行う。"""
        layout = QVBoxLayout(self)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("タイトル")
        layout.addWidget(self.title_input)

        folder_layout = QHBoxLayout()
        self.folder_combo = QComboBox()
        folder_layout.addWidget(QLabel("フォルダ:"))
        folder_layout.addWidget(self.folder_combo, 1)
        layout.addLayout(folder_layout)

        self.description_edit = QTextEdit()
        self.description_edit.setPlaceholderText("本文")
        layout.addWidget(self.description_edit, 1)

        self.error_label = QLabel(REQUIRED_MESSAGE)
        self.error_label.setStyleSheet("color: #d32f2f;")
        layout.addWidget(self.error_label)

        button_layout = QHBoxLayout()
        button_layout.addStretch()
        self.submit_button = QPushButton("保存")
        button_layout.addWidget(self.submit_button)
        layout.addLayout(button_layout)

    def setup_connections(self) -> None:
        """UI要素とハンドラのシグナルとスロットを接続する。"""
        self.title_input.textChanged.connect(self.on_title_changed)
        self.description_edit.textChanged.connect(self.on_description_changed)
        self.folder_combo.currentIndexChanged.connect(self.on_folder_selected)
        self.submit_button.clicked.connect(lambda: self.handler.submit())

        self.handler.form_changed.connect(self.apply_form_state)
        self.handler.validity_changed.connect(lambda _valid: self._refresh_controls())
        self.handler.folders_changed.connect(self.set_folders)
        self.handler.spinner.busy_changed.connect(self.set_busy)

    def on_title_changed(self, text: str) -> None:
        if not self._applying:
            self.handler.set_title(text)

    def on_description_changed(self) -> None:
        if not self._applying:
            self.handler.set_description(self.description_edit.toPlainText())

    def on_folder_selected(self, index: int) -> None:
        if not self._applying and index >= 0:
            self.handler.set_folder(self.folder_combo.itemData(index))

    def apply_form_state(self, state: MemoFormState) -> None:
        """ハンドラ側のフォームの値を入力欄に反映する。"""
        self._applying = True
        try:
            if self.title_input.text() != state.title:
                self.title_input.setText(state.title)
            if self.description_edit.toPlainText() != state.description:
                self.description_edit.setPlainText(state.description)
            self._select_folder(state.folder_id)
        finally:
            self._applying = False
        self._refresh_controls()

    def set_folders(self, folders: List[Folder]) -> None:
        """フォルダの選択肢を置き換える。先頭は常に「フォルダなし」。"""
        self._applying = True
        try:
            self.folder_combo.clear()
            self.folder_combo.addItem(NO_FOLDER_LABEL, int(FolderCode.NONE))
            for folder in folders:
                self.folder_combo.addItem(folder.name, folder.id)
            self._select_folder(self.handler.form.folder_id)
        finally:
            self._applying = False

    def _select_folder(self, folder_id) -> None:
        if isinstance(folder_id, FolderCode):
            folder_id = int(folder_id)
        index = self.folder_combo.findData(folder_id)
        self.folder_combo.setCurrentIndex(index if index >= 0 else 0)

    def set_busy(self, busy: bool) -> None:
        self._busy = busy
        self._refresh_controls()

    def _refresh_controls(self) -> None:
        valid = self.handler.is_valid()
        self.error_label.setVisible(not valid)
        self.submit_button.setEnabled(valid and not self._busy)
