"""Capture session: owns the permission request, the live stream and its release.

Design:
 - One session per signed-in user, driven from a single event-driven context
   (the Qt GUI thread). Requests run through a RequestRunner, which delivers
   outcomes and environment notifications back on that context.
 - Explicit stop, the video track's ended notification and dispose() all go
   through _release_active_stream(), so each stream is released once.
 - One request in flight at a time. start()/stop() issued while REQUESTING are
   queued and applied once the request settles.
"""
from __future__ import annotations

import logging
import weakref
from enum import Enum
from functools import partial
from typing import Callable, Protocol

from mirror_app.services.capture_errors import (
    CaptureError,
    CaptureErrorKind,
    classify_capture_failure,
)
from mirror_app.services.capture_state_machine import CaptureState, CaptureStateMachine
from mirror_app.services.media_stream import DisplayMediaConstraints, MediaStream
from mirror_app.services.request_runner import InlineRequestRunner, RequestRunner

LOG = logging.getLogger(__name__)


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


_STATUS_BY_STATE = {
    CaptureState.IDLE: ConnectionStatus.DISCONNECTED,
    CaptureState.REQUESTING: ConnectionStatus.CONNECTING,
    CaptureState.ACTIVE: ConnectionStatus.CONNECTED,
    CaptureState.FAILED: ConnectionStatus.ERROR,
}


def status_for_state(state: CaptureState) -> ConnectionStatus:
    return _STATUS_BY_STATE[state]


class PresentationSurface(Protocol):
    def attach_stream(self, stream: MediaStream) -> None: ...

    def clear(self) -> None: ...


class CaptureSession:
    def __init__(
        self,
        provider,
        *,
        runner: RequestRunner | None = None,
        constraints: DisplayMediaConstraints | None = None,
    ):
        self._provider = provider
        self._runner = runner or InlineRequestRunner()
        self._constraints = constraints or DisplayMediaConstraints(video=True, audio=True)
        self._state = CaptureStateMachine()
        self._active_stream: MediaStream | None = None
        self._last_error: CaptureError | None = None
        self._surface_ref: weakref.ReferenceType | None = None
        self._listeners: list[Callable[["CaptureSession"], None]] = []
        self._ended_observer: tuple[object, Callable] | None = None
        self._request_seq = 0
        self._pending_request: int | None = None
        self._queued_action: str | None = None
        self._disposed = False

    # ---- observation ----

    @property
    def state(self) -> CaptureState:
        return self._state.state

    @property
    def status(self) -> ConnectionStatus:
        return status_for_state(self._state.state)

    @property
    def active_stream(self) -> MediaStream | None:
        return self._active_stream

    @property
    def last_error(self) -> CaptureError | None:
        return self._last_error

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def request_in_flight(self) -> bool:
        return self._pending_request is not None

    def add_listener(self, listener: Callable[["CaptureSession"], None]) -> Callable[[], None]:
        """Call ``listener(session)`` after every transition. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if self._disposed:
            return
        for listener in list(self._listeners):
            listener(self)

    # ---- operations ----

    def start(self) -> None:
        if self._disposed:
            LOG.warning("[SESSION] start() ignored on disposed session")
            return
        if self._state.state == CaptureState.REQUESTING:
            LOG.info("[SESSION] start() queued behind in-flight request")
            self._queued_action = "start"
            return
        if self._state.state == CaptureState.ACTIVE:
            self._release_active_stream("restart")

        self._last_error = None
        self._state.request_start()
        self._notify()

        if self._provider is None or not self._provider.is_supported():
            self._fail(CaptureError.of(CaptureErrorKind.UNSUPPORTED, "display media capability unavailable"))
            return

        self._request_seq += 1
        request_id = self._request_seq
        self._pending_request = request_id
        LOG.info("[SESSION] requesting display media id=%s constraints=%s", request_id, self._constraints)
        self._runner.submit(
            partial(self._provider.request_stream, self._constraints),
            partial(self._on_request_settled, request_id),
        )

    def stop(self) -> None:
        if self._disposed:
            return
        if self._state.state == CaptureState.REQUESTING:
            LOG.info("[SESSION] stop() queued until request settles")
            self._queued_action = "stop"
            return
        self._release_active_stream("stop")

    def dismiss_error(self) -> None:
        if self._disposed or self._state.state != CaptureState.FAILED:
            return
        self._last_error = None
        self._state.dismiss_failure()
        self._notify()

    def dispose(self) -> None:
        """Release everything synchronously. No notifications fire afterwards."""
        if self._disposed:
            return
        self._disposed = True
        self._queued_action = None
        self._release_active_stream("dispose")
        self._surface_ref = None
        self._listeners.clear()
        LOG.info("[SESSION] disposed (request in flight: %s)", self._pending_request is not None)

    # ---- presentation binding ----

    def bind_surface(self, surface: PresentationSurface) -> None:
        self._surface_ref = weakref.ref(surface)
        if self._active_stream is not None:
            surface.attach_stream(self._active_stream)

    def unbind_surface(self) -> None:
        surface = self._surface()
        self._surface_ref = None
        if surface is not None:
            surface.clear()

    def _surface(self) -> PresentationSurface | None:
        return self._surface_ref() if self._surface_ref is not None else None

    # ---- internals ----

    def _on_request_settled(self, request_id: int, stream: MediaStream | None, error: BaseException | None) -> None:
        if request_id != self._pending_request:
            LOG.error("[SESSION] settlement for unknown request id=%s", request_id)
            self._discard_stream(stream)
            self._discard_stream(getattr(error, "partial_stream", None))
            return
        self._pending_request = None

        if self._disposed:
            self._discard_stream(stream)
            self._discard_stream(getattr(error, "partial_stream", None))
            return

        queued, self._queued_action = self._queued_action, None
        if error is not None:
            self._discard_stream(getattr(error, "partial_stream", None))
            self._fail(classify_capture_failure(error))
        elif stream is None:
            self._fail(CaptureError.of(CaptureErrorKind.REQUEST_FAILED, "capability returned no stream"))
        else:
            self._activate(stream)

        if queued == "stop":
            self.stop()
        elif queued == "start":
            self.start()

    def _activate(self, stream: MediaStream) -> None:
        self._active_stream = stream
        self._state.mark_active()
        video_tracks = stream.get_video_tracks()
        if video_tracks:
            observer = partial(self._on_track_ended, stream)
            video_tracks[0].add_ended_listener(observer)
            self._ended_observer = (video_tracks[0], observer)
        surface = self._surface()
        if surface is not None:
            surface.attach_stream(stream)
        LOG.info("[SESSION] capture active label=%r tracks=%s", stream.label, len(stream.get_tracks()))
        self._notify()

    def _fail(self, error: CaptureError) -> None:
        self._last_error = error
        self._state.mark_failed()
        LOG.warning("[SESSION] capture failed kind=%s detail=%s", error.kind.value, error.detail)
        self._notify()

    def _on_track_ended(self, stream: MediaStream, _track=None) -> None:
        # Called from the capture backend's thread.
        self._runner.call_soon(partial(self._handle_track_ended, stream))

    def _handle_track_ended(self, stream: MediaStream) -> None:
        if self._disposed or stream is not self._active_stream:
            LOG.info("[SESSION] ignoring ended notification for inactive stream label=%r", stream.label)
            return
        self._release_active_stream("track-ended")

    def _release_active_stream(self, reason: str) -> bool:
        stream = self._active_stream
        if stream is None:
            return False
        self._active_stream = None
        if self._ended_observer is not None:
            track, observer = self._ended_observer
            track.remove_ended_listener(observer)
            self._ended_observer = None
        self._stop_tracks(stream)
        surface = self._surface()
        if surface is not None:
            surface.clear()
        self._state.mark_idle()
        LOG.info("[SESSION] capture released reason=%s label=%r", reason, stream.label)
        self._notify()
        return True

    def _discard_stream(self, stream: MediaStream | None) -> None:
        if stream is None:
            return
        LOG.info("[SESSION] discarding stream that never became active label=%r", stream.label)
        self._stop_tracks(stream)

    @staticmethod
    def _stop_tracks(stream: MediaStream) -> None:
        for track in stream.get_tracks():
            try:
                track.stop()
            except Exception:
                LOG.error("[SESSION] failed to stop %r", track, exc_info=True)
