"""Display-media capability: prompt for a screen and open FFmpeg-backed capture tracks."""
from __future__ import annotations

import logging
import os
import platform
import time
from abc import ABC, abstractmethod
from typing import Callable

from mirror_app.services.capture_errors import (
    CapturePermissionError,
    CaptureRequestError,
    CaptureUnsupportedError,
    DisplayMediaError,
)
from mirror_app.services.ffmpeg_capture_supervisor import FfmpegCaptureSupervisor, is_permission_failure
from mirror_app.services.ffmpeg_tools import (
    AUDIO_CHUNK_BYTES,
    CaptureSource,
    FfmpegNotFoundError,
    ScreenCaptureConfig,
    build_audio_capture_command,
    build_screen_capture_command,
    ffmpeg_available,
    fit_frame_size,
    list_avfoundation_screens,
    screen_grabber_for,
)
from mirror_app.services.frame_bus import FrameQueue, OverflowPolicy
from mirror_app.services.media_stream import DisplayMediaConstraints, MediaStream, MediaTrack, TrackKind, TrackState

LOG = logging.getLogger(__name__)


class DisplayMediaProvider(ABC):
    """Host capability that turns a capture request into a live MediaStream."""

    @abstractmethod
    def is_supported(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def request_stream(self, constraints: DisplayMediaConstraints) -> MediaStream:
        """Block until the user has granted capture and tracks are running.

        Raises a DisplayMediaError subclass on failure.
        """
        raise NotImplementedError


class FfmpegTrack(MediaTrack):
    """Track whose frames come from a supervised FFmpeg process."""

    def __init__(self, kind: TrackKind, label: str, supervisor: FfmpegCaptureSupervisor):
        super().__init__(kind, label)
        self.supervisor = supervisor
        supervisor.on_exit = self._mark_ended

    @property
    def frame_queue(self) -> FrameQueue:
        return self.supervisor.frame_queue

    def _on_stop(self) -> None:
        self.supervisor.stop()


class ScreenVideoTrack(FfmpegTrack):
    def __init__(self, label: str, supervisor: FfmpegCaptureSupervisor, config: ScreenCaptureConfig):
        super().__init__(TrackKind.VIDEO, label, supervisor)
        self.config = config

    @property
    def frame_size(self) -> tuple[int, int]:
        return self.config.width, self.config.height


class SystemAudioTrack(FfmpegTrack):
    def __init__(self, label: str, supervisor: FfmpegCaptureSupervisor):
        super().__init__(TrackKind.AUDIO, label, supervisor)


class FfmpegDisplayMedia(DisplayMediaProvider):
    """Capture the user's chosen screen (and system audio) with FFmpeg.

    ``select_source`` plays the role of the permission prompt: it returns the
    screen the user agreed to share, or None when the prompt was dismissed.
    """

    def __init__(
        self,
        select_source: Callable[[], CaptureSource | None],
        *,
        max_width: int = 1280,
        max_height: int = 720,
        fps: int = 15,
        audio_device: str | None = None,
        startup_grace_sec: float = 1.5,
        supervisor_factory=FfmpegCaptureSupervisor,
    ):
        self._select_source = select_source
        self.max_width = max_width
        self.max_height = max_height
        self.fps = fps
        self.audio_device = audio_device
        self.startup_grace_sec = startup_grace_sec
        self._supervisor_factory = supervisor_factory

    def is_supported(self) -> bool:
        system = platform.system()
        if screen_grabber_for(system) is None:
            LOG.info("[CAPTURE] no screen grabber for platform %s", system)
            return False
        if system == "Linux" and not os.environ.get("DISPLAY"):
            LOG.info("[CAPTURE] DISPLAY is not set; x11grab unavailable")
            return False
        if not ffmpeg_available():
            LOG.info("[CAPTURE] ffmpeg executable not found")
            return False
        return True

    def request_stream(self, constraints: DisplayMediaConstraints) -> MediaStream:
        if not constraints.video:
            raise CaptureRequestError("Screen capture requires a video track")
        if not self.is_supported():
            raise CaptureUnsupportedError("No screen capture backend available")

        source = self._select_source()
        if source is None:
            raise CapturePermissionError("Screen share prompt was dismissed")
        LOG.info("[CAPTURE] user selected source id=%s label=%r", source.id, source.label)

        tracks: list[MediaTrack] = []
        try:
            video = self._open_video_track(source)
            tracks.append(video)
            audio = self._open_audio_track() if constraints.audio else None
            if audio is not None:
                tracks.append(audio)
            self._await_startup(video, audio)
            if video.ready_state != TrackState.LIVE:
                reason = video.supervisor.last_error or "screen capture ended during startup"
                LOG.warning("[CAPTURE] screen capture ended before the stream was handed over: %s", reason)
                raise CaptureRequestError(reason)
        except DisplayMediaError as exc:
            if exc.partial_stream is None and tracks:
                exc.partial_stream = MediaStream(tracks, label=source.label)
            raise
        except FfmpegNotFoundError as exc:
            raise CaptureUnsupportedError(str(exc), partial_stream=MediaStream(tracks) if tracks else None) from exc
        except OSError as exc:
            raise CaptureRequestError(str(exc), partial_stream=MediaStream(tracks) if tracks else None) from exc

        live = []
        for track in tracks:
            if track.ready_state == TrackState.LIVE:
                live.append(track)
            else:
                track.stop()
        return MediaStream(live, label=source.label)

    def _open_video_track(self, source: CaptureSource) -> ScreenVideoTrack:
        width, height = fit_frame_size(source.width, source.height, self.max_width, self.max_height)
        config = ScreenCaptureConfig(width=width, height=height, fps=self.fps, label=source.label)
        avfoundation_device = None
        if screen_grabber_for() == "avfoundation":
            avfoundation_device = list_avfoundation_screens().get(source.index)
        cmd = build_screen_capture_command(source, config, avfoundation_device=avfoundation_device)
        supervisor = self._supervisor_factory(
            cmd,
            config.frame_bytes,
            FrameQueue(maxlen=2, policy=OverflowPolicy.LAST_ONLY),
            name="screen",
        )
        track = ScreenVideoTrack(source.label, supervisor, config)
        supervisor.start()
        return track

    def _open_audio_track(self) -> SystemAudioTrack | None:
        cmd = build_audio_capture_command(self.audio_device)
        if cmd is None:
            LOG.warning("[CAPTURE] system audio capture unavailable; continuing video-only")
            return None
        supervisor = self._supervisor_factory(
            cmd,
            AUDIO_CHUNK_BYTES,
            FrameQueue(maxlen=4, policy=OverflowPolicy.DROP_OLDEST),
            name="audio",
        )
        track = SystemAudioTrack("System audio", supervisor)
        try:
            supervisor.start()
        except (FfmpegNotFoundError, OSError):
            LOG.warning("[CAPTURE] system audio process failed to start", exc_info=True)
            return None
        return track

    def _await_startup(self, video: ScreenVideoTrack, audio: SystemAudioTrack | None) -> None:
        deadline = time.monotonic() + self.startup_grace_sec
        while time.monotonic() < deadline:
            if video.supervisor.frames_captured > 0 or not video.supervisor.is_alive():
                break
            time.sleep(0.05)

        if not video.supervisor.is_alive() and video.supervisor.frames_captured == 0:
            video.supervisor.wait_for_stderr()
            reason = video.supervisor.last_error or "ffmpeg exited during startup"
            LOG.warning("[CAPTURE] screen capture failed to start: %s", reason)
            if is_permission_failure(reason):
                raise CapturePermissionError(reason)
            raise CaptureRequestError(reason)

        if audio is not None and not audio.supervisor.is_alive():
            LOG.warning(
                "[CAPTURE] system audio exited during startup (%s); continuing video-only",
                audio.supervisor.last_error or "no output",
            )
            audio.stop()
