import pytest

from models.user_models import AuthUser
from services.auth_service import AuthenticationService
from services.notification_service import FAILURE, SUCCESS


def test_spinner_emits_only_on_outer_transitions(spinner, signals):
    spinner.show()
    spinner.show()
    spinner.hide()
    assert spinner.is_busy()
    spinner.hide()
    spinner.hide()

    assert signals.busy == [True, False]
    assert not spinner.is_busy()


def test_spinner_busy_hides_when_block_raises(spinner, signals):
    with pytest.raises(ValueError):
        with spinner.busy():
            raise ValueError("boom")

    assert signals.busy == [True, False]


def test_notifications_are_emitted_and_remembered(notifier, signals):
    notifier.success("ok")
    notifier.failure("ng")

    assert signals.notifications == [(SUCCESS, "ok"), (FAILURE, "ng")]
    assert notifier.last == (FAILURE, "ng")


def test_authentication_service_tracks_current_user(qapp):
    auth = AuthenticationService()
    changes = []
    auth.user_changed.connect(changes.append)
    user = AuthUser(uid="u1")

    auth.sign_in(user)
    assert auth.get_current_user() == user
    auth.sign_out()
    auth.sign_out()

    assert auth.get_current_user() is None
    assert changes == [user, None]
