# ui/handlers/upsert_handler.py
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from PyQt6.QtCore import QObject, pyqtSignal

from models.folder_models import Folder, FolderCode
from models.memo_models import Memo, coerce_title
from models.user_models import AuthUser
from services.document_store import SERVER_TIMESTAMP, Subscription
from services.errors import MemoAppError, PersistenceError, ValidationError
from services.folder_service import FolderService
from services.memo_service import MemoService
from services.notification_service import NotificationService
from services.spinner_service import SpinnerService
from utils.validators import CustomValidator

logger = logging.getLogger(__name__)

IDLE = "idle"
VALIDATING = "validating"
CREATING = "creating"
UPDATING = "updating"

SAVE_SUCCEEDED_MESSAGE = "メモを保存しました"
SAVE_FAILED_MESSAGE = "メモの保存に失敗しました"
LOAD_FAILED_MESSAGE = "メモの読み込みに失敗しました"
FOLDERS_FAILED_MESSAGE = "フォルダの取得に失敗しました"


@dataclass
class MemoFormState:
    """メモ入力フォームの編集中の値。"""
    title: str = ""
    description: str = ""
    folder_id: Union[int, str] = FolderCode.NONE


class UpsertFormHandler(QObject):
    """
    メモの新規作成・更新フォームの状態とロジックを管理するクラス。

    - bind_memo() でメモIDを受け取ると、そのメモを購読してフォームに反映する。
      サーバーから通知された値は未保存の入力より優先される。
    - submit() はフォームを検証し、メモIDがあれば更新、なければ新規作成を行う。
    - 作成・更新・フォルダ一覧の取得はスピナーの show/hide で囲まれ、
      結果は NotificationService で通知される。

    ユーザー入力を受ける set_title() などは form_changed を送信しません。
    form_changed は購読やリセットによってフォームの値が置き換わったときだけ送信されます。
    """

    form_changed = pyqtSignal(object)
    validity_changed = pyqtSignal(bool)
    folders_changed = pyqtSignal(object)
    submitted = pyqtSignal(str)
    state_changed = pyqtSignal(str)

    def __init__(
        self,
        memo_service: MemoService,
        folder_service: FolderService,
        spinner: SpinnerService,
        notifier: NotificationService,
        user: AuthUser,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        UpsertFormHandlerのコンストラクタ。

        Args:
            memo_service (MemoService): メモの読み書きを行うサービス。
            folder_service (FolderService): フォルダ一覧を取得するサービス。
            spinner (SpinnerService): 処理中表示のサービス。
            notifier (NotificationService): 成功・失敗を通知するサービス。
            user (AuthUser): サインイン中のユーザー。作成するメモの所有者になる。
            parent (Optional[QObject]): 親オブジェクト。
        """
        super().__init__(parent)
        self.memo_service = memo_service
        self.folder_service = folder_service
        self.spinner = spinner
        self.notifier = notifier
        self.user = user

        self.form = MemoFormState()
        self.form_errors: Optional[Dict[str, Any]] = CustomValidator.title_or_description_required("", "")
        self.folders: List[Folder] = []
        self.memo_id: Optional[str] = None
        self.memo: Optional[Memo] = None
        self.state: str = IDLE
        self.pending_id_patch: Optional[Memo] = None
        self._pending_id_written: bool = False

        self._memo_subscription: Optional[Subscription] = None
        self._memo_token: Optional[object] = None
        self._folder_subscription: Optional[Subscription] = None
        self._folder_token: Optional[object] = None
        self._submitting: bool = False

    # --- フォーム入力 ---

    def set_title(self, title: str) -> None:
        self.form.title = title or ""
        self.validate()

    def set_description(self, description: str) -> None:
        self.form.description = description or ""
        self.validate()

    def set_folder(self, folder_id: Union[int, str, None]) -> None:
        self.form.folder_id = FolderCode.NONE if folder_id in (None, "") else folder_id

    def validate(self) -> bool:
        """現在の入力を検証し、フォームレベルのエラーを更新する。"""
        was_valid = self.form_errors is None
        self.form_errors = CustomValidator.title_or_description_required(
            self.form.title, self.form.description
        )
        is_valid = self.form_errors is None
        if is_valid != was_valid:
            self.validity_changed.emit(is_valid)
        return is_valid

    def is_valid(self) -> bool:
        return self.form_errors is None

    def reset_form(self) -> None:
        """フォームを空の状態に戻す。"""
        self._replace_form(MemoFormState())

    def _replace_form(self, state: MemoFormState) -> None:
        self.form = state
        self.validate()
        self.form_changed.emit(dataclasses.replace(state))

    # --- メモの購読 ---

    def bind_memo(self, memo_id: Optional[str]) -> None:
        """
        フォームを編集対象のメモに結び付ける。

        以前の購読は新しい購読を開始する前に解除される。memo_id が空の場合は
        フォームを即座にクリアし、購読は行わない。

        Args:
            memo_id (Optional[str]): 編集するメモのID。新規作成の場合はNone。
        """
        self._release_memo_subscription()
        self.memo = None
        self.memo_id = memo_id or None
        if not self.memo_id:
            self.reset_form()
            return

        token = object()
        self._memo_token = token
        try:
            self._memo_subscription = self.memo_service.watch_memo(
                self.memo_id,
                lambda memo: self._on_memo(token, memo),
                lambda error: self._on_memo_error(token, error),
            )
        except MemoAppError as e:
            self._on_memo_error(token, e)

    def _on_memo(self, token: object, memo: Optional[Memo]) -> None:
        if token is not self._memo_token:
            return
        self.memo = memo
        if memo is None:
            return
        self._replace_form(MemoFormState(memo.title, memo.description, memo.folder_id))

    def _on_memo_error(self, token: object, error: Exception) -> None:
        if token is not self._memo_token:
            return
        logger.error("Memo subscription for %s failed: %s", self.memo_id, error)
        self.notifier.failure(LOAD_FAILED_MESSAGE)

    def _release_memo_subscription(self) -> None:
        self._memo_token = None
        if self._memo_subscription is not None:
            self._memo_subscription.unsubscribe()
            self._memo_subscription = None

    # --- フォルダ一覧 ---

    def load_folders(self) -> None:
        """サインイン中のユーザーのフォルダ一覧を購読し、folders を更新し続ける。"""
        if self._folder_subscription is not None:
            self._folder_subscription.unsubscribe()
            self._folder_subscription = None
        token = object()
        self._folder_token = token
        with self.spinner.busy():
            try:
                self._folder_subscription = self.folder_service.watch_folders(
                    self.user.uid,
                    lambda folders: self._on_folders(token, folders),
                    lambda error: self._on_folders_error(token, error),
                )
            except MemoAppError as e:
                self._on_folders_error(token, e)

    def _on_folders(self, token: object, folders: List[Folder]) -> None:
        if token is not self._folder_token:
            return
        with self.spinner.busy():
            self.folders = list(folders)
            self.folders_changed.emit(list(self.folders))

    def _on_folders_error(self, token: object, error: Exception) -> None:
        if token is not self._folder_token:
            return
        logger.error("Folder list for %s failed: %s", self.user.uid, error)
        self.folders = []
        self.folders_changed.emit([])
        self.notifier.failure(FOLDERS_FAILED_MESSAGE)

    # --- 保存 ---

    def submit(self) -> bool:
        """
        フォームを検証し、メモを新規作成または更新する。

        保存中に再度呼ばれた場合は何もせずに False を返す。
        保存に失敗した場合、フォームの入力はそのまま残る。

        Returns:
            bool: 保存に成功した場合はTrue。
        """
        if self._submitting:
            logger.warning("Submit ignored: a save is already in progress")
            return False

        self._submitting = True
        try:
            with self.spinner.busy():
                return self._run_submit()
        finally:
            self._submitting = False
            self._set_state(IDLE)

    def is_submitting(self) -> bool:
        return self._submitting

    def _run_submit(self) -> bool:
        self._set_state(VALIDATING)
        try:
            self._check_form()
        except ValidationError as e:
            logger.debug("Submit rejected by validation: %s", e.errors)
            return False

        try:
            if self.memo_id:
                saved_id = self._update_memo()
            elif self.pending_id_patch is not None:
                saved_id = self._complete_pending_create()
            else:
                saved_id = self._register_memo()
        except MemoAppError as e:
            logger.error("Saving memo failed (%s): %s", self.state, e, exc_info=True)
            self.notifier.failure(SAVE_FAILED_MESSAGE)
            return False

        self.reset_form()
        self.notifier.success(SAVE_SUCCEEDED_MESSAGE)
        self.submitted.emit(saved_id)
        return True

    def _check_form(self) -> None:
        if not self.validate():
            raise ValidationError(self.form_errors)

    def _register_memo(self) -> str:
        self._set_state(CREATING)
        memo = Memo(
            id="",
            title=coerce_title(self.form.title),
            description=self.form.description,
            folder_id=self.form.folder_id,
            created_user=self.user.uid,
            created_date=SERVER_TIMESTAMP,
            updated_date=SERVER_TIMESTAMP,
        )
        ref = self.memo_service.register_memo(memo)
        memo.id = ref.id
        # IDの書き戻しに失敗した場合、次回の submit で再試行する
        self.pending_id_patch = memo
        self._pending_id_written = False
        try:
            self.memo_service.patch_memo_id(ref.id)
        except PersistenceError:
            logger.error("Memo %s was created but its id field could not be written", ref.id)
            raise
        self._clear_pending_create()
        return ref.id

    def _complete_pending_create(self) -> str:
        created = self.pending_id_patch
        self._set_state(CREATING)
        if not self._pending_id_written:
            self.memo_service.patch_memo_id(created.id)
            self._pending_id_written = True
        # 作成後に編集された内容も保存する
        self._set_state(UPDATING)
        self.memo_service.update_memo(self._apply_form(created))
        self._clear_pending_create()
        return created.id

    def _clear_pending_create(self) -> None:
        self.pending_id_patch = None
        self._pending_id_written = False

    def _update_memo(self) -> str:
        self._set_state(UPDATING)
        if self.memo is None:
            # 購読からの最初の通知がまだ届いていない場合は直接読み込む
            self.memo = self.memo_service.retrieve_memo(self.memo_id)
        if self.memo is None:
            raise PersistenceError(
                f"Memo {self.memo_id} is not loaded", operation="update", doc_id=self.memo_id
            )
        updated = dataclasses.replace(self._apply_form(self.memo), id=self.memo_id)
        self.memo_service.update_memo(updated)
        return self.memo_id

    def _apply_form(self, memo: Memo) -> Memo:
        return dataclasses.replace(
            memo,
            title=coerce_title(self.form.title),
            description=self.form.description,
            folder_id=self.form.folder_id,
            updated_date=SERVER_TIMESTAMP,
        )

    def _set_state(self, state: str) -> None:
        if state != self.state:
            self.state = state
            self.state_changed.emit(state)

    # --- 後片付け ---

    def dispose(self) -> None:
        """すべての購読を解除する。"""
        self._release_memo_subscription()
        self._folder_token = None
        if self._folder_subscription is not None:
            self._folder_subscription.unsubscribe()
            self._folder_subscription = None
