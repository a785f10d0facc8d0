import pytest

from backend.autosave import (
    AutosaveStatus,
    InvalidTransition,
    SaveState,
    begin_save,
    mark_edited,
    retry,
    save_failed,
    save_succeeded,
    serialize,
    should_flush,
)


def test_edit_save_cycle():
    status = mark_edited(AutosaveStatus(), {"revenue": "100"}, now=10.0)
    assert status.state == SaveState.DIRTY
    assert not should_flush(status, now=11.0, debounce_seconds=2)
    assert should_flush(status, now=12.0, debounce_seconds=2)

    status, sent = begin_save(status)
    assert status.state == SaveState.SAVING
    assert sent == serialize({"revenue": "100"})

    status = save_succeeded(status, sent)
    assert status.state == SaveState.SAVED
    assert status.last_sent == sent
    assert status.pending is None


def test_unchanged_payload_is_not_resent():
    sent = serialize({"a": 1, "b": 2})
    status = AutosaveStatus(state=SaveState.SAVED, last_sent=sent)
    assert mark_edited(status, {"b": 2, "a": 1}, now=5.0) is status


def test_edit_back_to_saved_payload_clears_dirty():
    status = AutosaveStatus(state=SaveState.SAVED, last_sent=serialize({"a": 1}))
    status = mark_edited(status, {"a": 2}, now=1.0)
    status = mark_edited(status, {"a": 1}, now=2.0)
    assert status.state == SaveState.SAVED
    assert not should_flush(status, now=100.0, debounce_seconds=2)


def test_repeated_identical_edits_keep_debounce_clock():
    status = mark_edited(AutosaveStatus(), {"a": 1}, now=1.0)
    again = mark_edited(status, {"a": 1}, now=5.0)
    assert again.changed_at == 1.0


def test_edit_during_save_goes_dirty_afterwards():
    status = mark_edited(AutosaveStatus(), {"a": 1}, now=1.0)
    status, sent = begin_save(status)
    status = mark_edited(status, {"a": 2}, now=2.0)
    assert status.state == SaveState.SAVING

    status = save_succeeded(status, sent)
    assert status.state == SaveState.DIRTY
    assert status.last_sent == sent
    assert status.pending == serialize({"a": 2})


def test_failure_waits_for_retry_or_edit():
    status = mark_edited(AutosaveStatus(), {"a": 1}, now=1.0)
    status, _ = begin_save(status)
    status = save_failed(status, "503 Service Unavailable")
    assert status.state == SaveState.ERROR
    assert status.error == "503 Service Unavailable"

    # Same payload on the next rerun does not trigger a new attempt
    assert mark_edited(status, {"a": 1}, now=2.0).state == SaveState.ERROR
    assert not should_flush(status, now=100.0, debounce_seconds=2)

    retried = retry(status, now=3.0)
    assert retried.state == SaveState.DIRTY
    assert retried.error is None

    edited = mark_edited(status, {"a": 3}, now=3.0)
    assert edited.state == SaveState.DIRTY


@pytest.mark.parametrize("state", [SaveState.IDLE, SaveState.SAVED, SaveState.SAVING])
def test_begin_save_requires_dirty(state):
    with pytest.raises(InvalidTransition):
        begin_save(AutosaveStatus(state=state, pending="{}"))


def test_invalid_completions():
    with pytest.raises(InvalidTransition):
        save_succeeded(AutosaveStatus(state=SaveState.DIRTY), "{}")
    with pytest.raises(InvalidTransition):
        save_failed(AutosaveStatus(), "boom")
    with pytest.raises(InvalidTransition):
        retry(AutosaveStatus(state=SaveState.SAVED), now=0)


def test_save_now_skips_debounce():
    status = mark_edited(AutosaveStatus(), {"a": 1}, now=10.0)
    assert not should_flush(status, now=10.0, debounce_seconds=2)
    assert should_flush(status, now=10.0, debounce_seconds=0)

    saved = AutosaveStatus(state=SaveState.SAVED, last_sent=serialize({"a": 1}))
    assert not should_flush(saved, now=10.0, debounce_seconds=0)
