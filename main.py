"""
アプリケーションのエントリーポイント。

このスクリプトは、設定とログを初期化し、ドキュメントストアと各サービスを生成して、
PyQt6アプリケーションのメインウィンドウを表示します。
また、プロジェクトのルートディレクトリをPythonのパスに追加し、
他のモジュール（ui, servicesなど）を正しくインポートできるように設定します。
"""
import sys
import os
from PyQt6.QtWidgets import QApplication

current_dir: str = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from models.user_models import AuthUser
from services.api_service import RemoteDocumentStore
from services.auth_service import AuthenticationService
from services.document_store import DocumentStore
from services.folder_service import FolderService
from services.memo_service import MemoService
from services.storage_service import LocalDocumentStore
from ui.main_window import MainWindow
from utils.logging_utils import get_logger
from utils.settings import Settings, load_settings


def build_store(settings: Settings) -> DocumentStore:
    """設定に応じてドキュメントストアを生成する。"""
    if settings.store_backend == "remote":
        return RemoteDocumentStore(
            settings.api_base_url,
            timeout=settings.api_timeout,
            poll_interval_ms=settings.poll_interval_ms,
        )
    return LocalDocumentStore(settings.data_dir)


def main() -> int:
    settings = load_settings()
    settings.ensure_dirs()
    logger = get_logger(log_dir=settings.log_dir, level=settings.log_level)
    logger.info("Starting with %s store", settings.store_backend)

    app: QApplication = QApplication(sys.argv)

    auth = AuthenticationService()
    auth.sign_in(AuthUser(uid=settings.user_id, email=settings.user_email))

    store = build_store(settings)
    window: MainWindow = MainWindow(
        MemoService(store), FolderService(store), auth.get_current_user(), auth=auth
    )
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
