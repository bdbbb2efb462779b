import datetime
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from PyQt6.QtWidgets import QApplication

from models.user_models import AuthUser
from services.document_store import DocumentReference, DocumentStore
from services.errors import PersistenceError
from services.folder_service import FolderService
from services.memo_service import MemoService
from services.notification_service import NotificationService
from services.spinner_service import SpinnerService
from services.storage_service import LocalDocumentStore
from ui.handlers.upsert_handler import UpsertFormHandler


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


class StepClock:
    """呼ばれるたびに1秒進む時計。"""

    def __init__(self) -> None:
        self.now = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)

    def __call__(self) -> datetime.datetime:
        self.now += datetime.timedelta(seconds=1)
        return self.now


class RecordingStore(DocumentStore):
    """呼び出しを記録し、指定した操作を失敗させられるストア。"""

    def __init__(self, inner: DocumentStore) -> None:
        self.inner = inner
        self.calls: List[Tuple[Any, ...]] = []
        self.fail_on: Dict[str, int] = {}

    def _maybe_fail(self, operation: str, doc_id: Optional[str] = None) -> None:
        remaining = self.fail_on.get(operation, 0)
        if remaining:
            self.fail_on[operation] = remaining - 1
            raise PersistenceError(f"{operation} rejected", operation=operation, doc_id=doc_id)

    def calls_of(self, operation: str) -> List[Tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == operation]

    def add(self, collection, data) -> DocumentReference:
        self.calls.append(("add", collection, dict(data)))
        self._maybe_fail("add")
        return self.inner.add(collection, data)

    def update(self, collection, doc_id, data) -> None:
        self.calls.append(("update", collection, doc_id, dict(data)))
        self._maybe_fail("update", doc_id)
        self.inner.update(collection, doc_id, data)

    def get(self, collection, doc_id):
        return self.inner.get(collection, doc_id)

    def watch_document(self, collection, doc_id, on_next, on_error=None):
        self.calls.append(("watch_document", collection, doc_id))
        return self.inner.watch_document(collection, doc_id, on_next, on_error)

    def watch_query(self, query, on_next, on_error=None):
        self.calls.append(("watch_query", query))
        return self.inner.watch_query(query, on_next, on_error)


class SignalRecorder:
    """スピナーと通知のシグナルを記録する。"""

    def __init__(self, spinner: SpinnerService, notifier: NotificationService) -> None:
        self.busy: List[bool] = []
        self.notifications: List[Tuple[str, str]] = []
        spinner.busy_changed.connect(self.busy.append)
        notifier.notified.connect(lambda level, message: self.notifications.append((level, message)))


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def local_store(tmp_path, clock):
    return LocalDocumentStore(str(tmp_path / "data"), clock=clock)


@pytest.fixture
def store(local_store):
    return RecordingStore(local_store)


@pytest.fixture
def user():
    return AuthUser(uid="user-1", email="user1@example.com")


@pytest.fixture
def spinner(qapp):
    return SpinnerService()


@pytest.fixture
def notifier(qapp):
    return NotificationService()


@pytest.fixture
def signals(spinner, notifier):
    return SignalRecorder(spinner, notifier)


@pytest.fixture
def memo_service(store):
    return MemoService(store)


@pytest.fixture
def folder_service(store):
    return FolderService(store)


@pytest.fixture
def handler(memo_service, folder_service, spinner, notifier, user):
    h = UpsertFormHandler(memo_service, folder_service, spinner, notifier, user)
    yield h
    h.dispose()
