"""Explicit capture lifecycle state machine with strict transition controls."""
from __future__ import annotations

import threading
from enum import Enum


class CaptureState(str, Enum):
    IDLE = "IDLE"
    REQUESTING = "REQUESTING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


class InvalidTransition(RuntimeError):
    pass


class CaptureStateMachine:
    def __init__(self):
        self._state = CaptureState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> CaptureState:
        with self._lock:
            return self._state

    def _transition(self, expected: set[CaptureState], new_state: CaptureState) -> CaptureState:
        with self._lock:
            if self._state not in expected:
                raise InvalidTransition(f"Cannot transition {self._state.value} -> {new_state.value}")
            self._state = new_state
            return self._state

    def request_start(self) -> CaptureState:
        # ACTIVE must be released to IDLE before a new request.
        return self._transition({CaptureState.IDLE, CaptureState.FAILED}, CaptureState.REQUESTING)

    def mark_active(self) -> CaptureState:
        return self._transition({CaptureState.REQUESTING}, CaptureState.ACTIVE)

    def mark_failed(self) -> CaptureState:
        return self._transition({CaptureState.REQUESTING}, CaptureState.FAILED)

    def mark_idle(self) -> CaptureState:
        return self._transition({CaptureState.ACTIVE}, CaptureState.IDLE)

    def dismiss_failure(self) -> CaptureState:
        return self._transition({CaptureState.FAILED}, CaptureState.IDLE)
