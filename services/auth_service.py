# services/auth_service.py
import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from models.user_models import AuthUser

logger = logging.getLogger(__name__)


class AuthenticationService(QObject):
    """現在サインインしているユーザーを保持するサービス。

    パスワード認証は扱わず、呼び出し側がサインイン済みのユーザーを設定します。
    フォームなどの利用側には get_current_user() の結果を明示的に渡します。
    """

    user_changed = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._current_user: Optional[AuthUser] = None

    def sign_in(self, user: AuthUser) -> None:
        self._current_user = user
        logger.info("Signed in as %s", user.uid)
        self.user_changed.emit(user)

    def sign_out(self) -> None:
        if self._current_user is None:
            return
        logger.info("Signed out %s", self._current_user.uid)
        self._current_user = None
        self.user_changed.emit(None)

    def get_current_user(self) -> Optional[AuthUser]:
        return self._current_user
