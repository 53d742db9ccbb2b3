"""
Tests for toasts and the call-catch-notify helper.
"""

from aquadash.errors import ApiError, FormValidationError
from aquadash.services.notifications import ERROR, SUCCESS, ActivityLog, SessionFlash, run_action


def test_run_action_success():
    flash = SessionFlash({})
    assert run_action(flash, lambda: 42, success="Saved") == 42
    assert flash.pop_all() == [{"kind": SUCCESS, "message": "Saved"}]


def test_run_action_api_error_becomes_toast():
    flash = SessionFlash({})

    def failing():
        raise ApiError("Cage code already exists", status_code=400)

    assert run_action(flash, failing, success="Saved") is None
    assert flash.pop_all() == [{"kind": ERROR, "message": "Cage code already exists"}]


def test_run_action_fallback_message():
    flash = SessionFlash({})

    def failing():
        raise ApiError("")

    run_action(flash, failing, fallback="Failed to delete cage")
    assert flash.pop_all()[0]["message"] == "Failed to delete cage"


def test_flash_is_consumed_once():
    session = {}
    flash = SessionFlash(session)
    flash.notify(SUCCESS, "one")
    flash.notify(ERROR, "two")
    assert [f["message"] for f in flash.pop_all()] == ["one", "two"]
    assert flash.pop_all() == []


def test_activity_log_bounded_newest_first():
    log = ActivityLog(maxlen=3)
    for n in range(5):
        log.notify(SUCCESS, f"event {n}")
    assert [n.message for n in log.recent()] == ["event 4", "event 3", "event 2"]
    assert len(log.recent(1)) == 1


def test_form_validation_error_messages():
    assert FormValidationError({"a": "x", "b": "y"}).messages == ["x", "y"]
    assert FormValidationError(["x"]).messages == ["x"]
    assert str(FormValidationError([])) == "Invalid input"
