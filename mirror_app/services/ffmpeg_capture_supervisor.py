"""Supervise one FFmpeg capture process and publish its raw output to a FrameQueue."""
from __future__ import annotations

import logging
import queue
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from mirror_app.services.ffmpeg_tools import FfmpegNotFoundError
from mirror_app.services.frame_bus import FrameQueue

LOG = logging.getLogger(__name__)

_PERMISSION_TOKENS = (
    "permission denied",
    "not authorized",
    "not permitted",
    "access denied",
    "screen recording permission",
)


class LogLevel(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class FfmpegLogEvent:
    level: LogLevel
    message: str


def is_permission_failure(text: str | None) -> bool:
    lowered = (text or "").lower()
    return any(token in lowered for token in _PERMISSION_TOKENS)


class FfmpegCaptureSupervisor:
    """Run ``cmd`` and cut its stdout into ``chunk_size`` packets.

    ``on_exit`` is called from the reader thread when the process stops
    producing output without ``stop()`` having been requested.
    """

    def __init__(
        self,
        cmd: list[str],
        chunk_size: int,
        frame_queue: FrameQueue,
        *,
        name: str = "capture",
        on_exit: Callable[[], None] | None = None,
    ):
        self.cmd = list(cmd)
        self.chunk_size = chunk_size
        self.frame_queue = frame_queue
        self.name = name
        self.on_exit = on_exit
        self.process: subprocess.Popen | None = None
        self._stop = threading.Event()
        self._reader_thread: threading.Thread | None = None
        self._stderr_thread: threading.Thread | None = None
        self.frames_captured = 0
        self.log_events: "queue.Queue[FfmpegLogEvent]" = queue.Queue(maxsize=512)
        self.last_error: str | None = None

    def start(self) -> None:
        try:
            self.process = subprocess.Popen(
                self.cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
                creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
            )
        except FileNotFoundError as exc:
            raise FfmpegNotFoundError(str(exc)) from exc

        self._stop.clear()
        self._reader_thread = threading.Thread(target=self._reader_loop, name=f"{self.name}-reader", daemon=True)
        self._stderr_thread = threading.Thread(target=self._stderr_loop, name=f"{self.name}-stderr", daemon=True)
        self._reader_thread.start()
        self._stderr_thread.start()
        LOG.info("[CAPTURE] %s started pid=%s", self.name, self.process.pid)

    def _reader_loop(self) -> None:
        if not self.process or not self.process.stdout:
            return
        try:
            while not self._stop.is_set():
                chunk = self._read_exact(self.process.stdout, self.chunk_size)
                if chunk is None:
                    break
                self.frames_captured += 1
                self.frame_queue.publish(chunk)
        except Exception as exc:
            self.last_error = f"FFmpeg {self.name} reader failed: {exc}"
            self._emit_log(LogLevel.ERROR, self.last_error)
        finally:
            if not self._stop.is_set():
                self._handle_unexpected_exit()

    def _handle_unexpected_exit(self) -> None:
        if self.process and self.process.poll() is None:
            self.process.terminate()
        self.frame_queue.close()
        LOG.warning("[CAPTURE] %s exited unexpectedly: %s", self.name, self.last_error or "end of stream")
        if self.on_exit:
            self.on_exit()

    def _stderr_loop(self) -> None:
        if not self.process or not self.process.stderr:
            return
        for raw in iter(self.process.stderr.readline, b""):
            if self._stop.is_set():
                break
            text = raw.decode(errors="ignore").strip()
            if not text:
                continue
            level = self._classify_log(text)
            self._emit_log(level, text)
            if level == LogLevel.ERROR:
                self.last_error = text

    def _emit_log(self, level: LogLevel, message: str) -> None:
        event = FfmpegLogEvent(level=level, message=message)
        try:
            self.log_events.put_nowait(event)
        except queue.Full:
            pass
        getattr(LOG, level.value.lower())("FFmpeg %s: %s", self.name, message)

    @staticmethod
    def _classify_log(text: str) -> LogLevel:
        lowered = text.lower()
        if is_permission_failure(lowered):
            return LogLevel.ERROR
        if any(token in lowered for token in ("error", "failed", "invalid", "unable", "cannot", "i/o")):
            return LogLevel.ERROR
        if any(token in lowered for token in ("warning", "deprecated", "buffer")):
            return LogLevel.WARNING
        return LogLevel.INFO

    @staticmethod
    def _read_exact(stream, size: int) -> bytes | None:
        data = bytearray()
        while len(data) < size:
            chunk = stream.read(size - len(data))
            if not chunk:
                return None
            data.extend(chunk)
        return bytes(data)

    def wait_for_stderr(self, timeout: float = 1.0) -> None:
        """Let the stderr reader finish so ``last_error`` reflects the exit reason."""
        if self._stderr_thread:
            self._stderr_thread.join(timeout=timeout)

    def stop(self, timeout: float = 5.0) -> None:
        if self._stop.is_set():
            return
        self._stop.set()
        if self.process and self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                self.process.kill()
        current = threading.current_thread()
        for thread in (self._reader_thread, self._stderr_thread):
            if thread and thread is not current:
                thread.join(timeout=timeout)
        self.frame_queue.close()
        LOG.info("[CAPTURE] %s stopped frames=%s", self.name, self.frames_captured)

    def is_alive(self) -> bool:
        return bool(self.process and self.process.poll() is None)
