"""Media stream and track handles produced by screen-capture negotiation."""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

LOG = logging.getLogger(__name__)


class TrackKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


class TrackState(str, Enum):
    LIVE = "live"
    ENDED = "ended"


@dataclass(frozen=True)
class DisplayMediaConstraints:
    video: bool = True
    audio: bool = True


class MediaTrack:
    """One media channel of a capture stream.

    ``stop()`` ends the track from our side and never fires ended listeners.
    ``_mark_ended()`` is used by the capture backend when the environment ends
    the track (process exit, display lost) and fires listeners exactly once.
    Listeners run on whatever thread the backend reports from.
    """

    def __init__(self, kind: TrackKind, label: str = ""):
        self.id = uuid.uuid4().hex
        self.kind = kind
        self.label = label
        self._ready_state = TrackState.LIVE
        self._released = False
        self._ended_listeners: list[Callable[["MediaTrack"], None]] = []
        self._lock = threading.Lock()

    @property
    def ready_state(self) -> TrackState:
        with self._lock:
            return self._ready_state

    def add_ended_listener(self, listener: Callable[["MediaTrack"], None]) -> None:
        with self._lock:
            self._ended_listeners.append(listener)

    def remove_ended_listener(self, listener: Callable[["MediaTrack"], None]) -> None:
        with self._lock:
            if listener in self._ended_listeners:
                self._ended_listeners.remove(listener)

    def stop(self) -> None:
        # A track ended by the environment still owns backend resources.
        with self._lock:
            if self._released:
                return
            self._released = True
            self._ready_state = TrackState.ENDED
            self._ended_listeners.clear()
        self._on_stop()

    def _on_stop(self) -> None:
        """Release backend resources. Subclasses override."""

    def _mark_ended(self) -> None:
        with self._lock:
            if self._ready_state == TrackState.ENDED:
                return
            self._ready_state = TrackState.ENDED
            listeners = list(self._ended_listeners)
            self._ended_listeners.clear()
        LOG.info("[CAPTURE] %s track ended by environment label=%r", self.kind.value, self.label)
        for listener in listeners:
            listener(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value} label={self.label!r} state={self.ready_state.value}>"


class MediaStream:
    def __init__(self, tracks: Iterable[MediaTrack] = (), label: str = ""):
        self.id = uuid.uuid4().hex
        self.label = label
        self._tracks = list(tracks)

    def get_tracks(self) -> list[MediaTrack]:
        return list(self._tracks)

    def get_video_tracks(self) -> list[MediaTrack]:
        return [t for t in self._tracks if t.kind == TrackKind.VIDEO]

    def get_audio_tracks(self) -> list[MediaTrack]:
        return [t for t in self._tracks if t.kind == TrackKind.AUDIO]

    @property
    def active(self) -> bool:
        return any(t.ready_state == TrackState.LIVE for t in self._tracks)

    def __repr__(self) -> str:
        return f"<MediaStream label={self.label!r} tracks={len(self._tracks)}>"
