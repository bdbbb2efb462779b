from models.folder_models import Folder, FolderCode
from ui.widgets import MemoListWidget, UpsertFormWidget
from ui.widgets.upsert_form import NO_FOLDER_LABEL


def test_submit_button_follows_validity_and_busy(handler, qapp):
    form = UpsertFormWidget(handler)
    assert not form.submit_button.isEnabled()
    assert not form.error_label.isHidden()

    form.title_input.setText("Groceries")
    assert handler.form.title == "Groceries"
    assert form.submit_button.isEnabled()
    assert form.error_label.isHidden()

    handler.spinner.show()
    assert not form.submit_button.isEnabled()
    handler.spinner.hide()
    assert form.submit_button.isEnabled()


def test_form_reflects_handler_state_and_folders(handler, local_store, qapp):
    local_store.save_json("folder.json", {
        "f1": {"id": "f1", "name": "仕事", "createdUser": "user-1", "updatedDate": "2024"},
    })
    form = UpsertFormWidget(handler)
    handler.load_folders()

    assert form.folder_combo.count() == 2
    assert form.folder_combo.itemText(0) == NO_FOLDER_LABEL

    local_store.save_json("memo.json", {
        "m1": {"id": "m1", "title": "T", "description": "D", "folderId": "f1", "createdUser": "user-1"},
    })
    handler.bind_memo("m1")

    assert form.title_input.text() == "T"
    assert form.description_edit.toPlainText() == "D"
    assert form.folder_combo.currentData() == "f1"

    form.folder_combo.setCurrentIndex(0)
    assert handler.form.folder_id == FolderCode.NONE


def test_clicking_submit_creates_memo_and_clears_inputs(handler, store, qapp):
    form = UpsertFormWidget(handler)
    form.title_input.setText("Groceries")

    form.submit_button.click()

    assert len(store.calls_of("add")) == 1
    assert form.title_input.text() == ""


def test_memo_list_shows_owned_memos_and_emits_selection(memo_service, local_store, qapp):
    local_store.save_json("memo.json", {
        "a": {"id": "a", "title": "old", "createdUser": "user-1", "updatedDate": "2023"},
        "b": {"id": "b", "title": "new", "createdUser": "user-1", "updatedDate": "2024"},
        "c": {"id": "c", "title": "theirs", "createdUser": "user-2", "updatedDate": "2025"},
        "d": {"id": "", "title": "unpatched", "createdUser": "user-1", "updatedDate": "2026"},
    })
    memo_list = MemoListWidget(memo_service, "user-1")
    selected = []
    memo_list.memo_selected.connect(selected.append)

    memo_list.start()
    assert [memo_list.item(i).text() for i in range(memo_list.count())] == ["new", "old"]

    memo_list.itemClicked.emit(memo_list.item(1))
    assert selected == ["a"]
    memo_list.stop()
    assert local_store.watcher_count() == 0


def test_main_window_shows_notifications_and_starts_new_memo(memo_service, folder_service, user, local_store, qapp):
    from ui.main_window import MainWindow

    window = MainWindow(memo_service, folder_service, user)
    window.upsert_handler.set_title("draft")
    window.notifier.success("保存しました")
    assert window.statusBar().currentMessage() == "保存しました"

    window.create_new_memo()
    assert window.upsert_handler.form.title == ""
    window.shutdown()
    assert local_store.watcher_count() == 0


def test_main_window_sign_out_releases_subscriptions_and_locks_ui(
    memo_service, folder_service, user, spinner, notifier, signals, local_store, qapp
):
    from services.auth_service import AuthenticationService
    from services.notification_service import SUCCESS
    from ui.main_window import SIGNED_OUT_MESSAGE, MainWindow

    auth = AuthenticationService()
    auth.sign_in(user)
    window = MainWindow(memo_service, folder_service, user, spinner, notifier, auth=auth)
    assert window.sign_out_action.isVisible()
    assert local_store.watcher_count() > 0

    window.sign_out_action.trigger()

    assert auth.get_current_user() is None
    assert local_store.watcher_count() == 0
    assert not window.centralWidget().isEnabled()
    assert not window.new_memo_action.isEnabled()
    assert signals.busy[-2:] == [True, False]
    assert signals.notifications[-1] == (SUCCESS, SIGNED_OUT_MESSAGE)
    assert window.statusBar().currentMessage() == SIGNED_OUT_MESSAGE
