"""Draft autosave as an explicit state machine.

    idle -> dirty -> saving -> saved
    saving -> error -> dirty (on edit or retry)

The caller owns an ``AutosaveStatus`` value and threads it through these
functions; nothing here keeps state between calls or performs I/O.
"""

import json
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Tuple


class SaveState(str, Enum):
    IDLE = "idle"
    DIRTY = "dirty"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class InvalidTransition(Exception):
    def __init__(self, state: SaveState, action: str):
        super().__init__(f"cannot {action} while {state.value}")
        self.state = state
        self.action = action


@dataclass(frozen=True)
class AutosaveStatus:
    state: SaveState = SaveState.IDLE
    last_sent: Optional[str] = None
    pending: Optional[str] = None
    changed_at: float = 0.0
    error: Optional[str] = None


def serialize(payload: Any) -> str:
    """Canonical text used to tell whether a payload changed."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def mark_edited(status: AutosaveStatus, payload: Any, now: float) -> AutosaveStatus:
    text = serialize(payload)
    if status.state == SaveState.SAVING:
        # Picked up again once the in-flight save finishes.
        return replace(status, pending=text, changed_at=now) if text != status.pending else status
    if text == status.last_sent:
        if status.state in (SaveState.DIRTY, SaveState.ERROR):
            return replace(status, state=SaveState.SAVED, pending=None, error=None)
        return status
    if status.state in (SaveState.DIRTY, SaveState.ERROR) and text == status.pending:
        return status
    return replace(status, state=SaveState.DIRTY, pending=text, changed_at=now, error=None)


def should_flush(status: AutosaveStatus, now: float, debounce_seconds: float) -> bool:
    return status.state == SaveState.DIRTY and now - status.changed_at >= debounce_seconds


def begin_save(status: AutosaveStatus) -> Tuple[AutosaveStatus, str]:
    """Move to ``saving`` and hand back the payload text to send."""
    if status.state != SaveState.DIRTY or status.pending is None:
        raise InvalidTransition(status.state, "begin save")
    return replace(status, state=SaveState.SAVING), status.pending


def save_succeeded(status: AutosaveStatus, sent: str) -> AutosaveStatus:
    if status.state != SaveState.SAVING:
        raise InvalidTransition(status.state, "complete save")
    if status.pending != sent:
        # Edited while the request was in flight.
        return replace(status, state=SaveState.DIRTY, last_sent=sent, error=None)
    return replace(status, state=SaveState.SAVED, last_sent=sent, pending=None, error=None)


def save_failed(status: AutosaveStatus, error: str) -> AutosaveStatus:
    if status.state != SaveState.SAVING:
        raise InvalidTransition(status.state, "fail save")
    return replace(status, state=SaveState.ERROR, error=error)


def retry(status: AutosaveStatus, now: float) -> AutosaveStatus:
    if status.state != SaveState.ERROR:
        raise InvalidTransition(status.state, "retry")
    return replace(status, state=SaveState.DIRTY, changed_at=now, error=None)
