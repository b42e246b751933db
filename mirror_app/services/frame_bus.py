"""Bounded frame buffer between an FFmpeg reader thread and the preview.

The reader publishes raw chunks; the buffer stamps each with a monotonically
increasing sequence so consumers can tell a new frame from one already shown.
Closing the buffer drops whatever is queued and wakes blocked readers.
"""
from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum


class OverflowPolicy(str, Enum):
    DROP_OLDEST = "drop_oldest"
    LAST_ONLY = "last_only"


@dataclass(frozen=True)
class FramePacket:
    sequence: int
    timestamp: float
    payload: bytes


class FrameQueue:
    def __init__(self, maxlen: int = 4, policy: OverflowPolicy = OverflowPolicy.LAST_ONLY):
        self.maxlen = max(1, int(maxlen))
        self.policy = policy
        self._packets: deque[FramePacket] = deque()
        self._cv = threading.Condition()
        self._next_sequence = 1
        self.dropped_frames = 0
        self.closed = False

    @property
    def published(self) -> int:
        with self._cv:
            return self._next_sequence - 1

    def publish(self, payload: bytes) -> FramePacket | None:
        """Queue one chunk. Returns None once the buffer is closed."""
        with self._cv:
            if self.closed:
                return None
            packet = FramePacket(self._next_sequence, time.time(), payload)
            self._next_sequence += 1
            if self.policy == OverflowPolicy.LAST_ONLY:
                self.dropped_frames += len(self._packets)
                self._packets.clear()
            while len(self._packets) >= self.maxlen:
                self._packets.popleft()
                self.dropped_frames += 1
            self._packets.append(packet)
            self._cv.notify_all()
            return packet

    def get(self, timeout: float | None = None) -> FramePacket | None:
        with self._cv:
            self._cv.wait_for(lambda: self._packets or self.closed, timeout=timeout)
            return self._packets.popleft() if self._packets else None

    def latest_after(self, sequence: int) -> FramePacket | None:
        """Newest packet with a sequence above ``sequence``, without consuming it."""
        with self._cv:
            if self._packets and self._packets[-1].sequence > sequence:
                return self._packets[-1]
            return None

    def close(self) -> None:
        with self._cv:
            self.closed = True
            self._packets.clear()
            self._cv.notify_all()

    def __len__(self) -> int:
        with self._cv:
            return len(self._packets)
