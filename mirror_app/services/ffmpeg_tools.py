"""FFmpeg discovery and command helpers for screen and system-audio capture."""
from __future__ import annotations

import logging
import os
import platform
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

LOG = logging.getLogger(__name__)

AUDIO_SAMPLE_RATE = 48000
AUDIO_CHANNELS = 2
# 100 ms of s16le audio per chunk.
AUDIO_CHUNK_BYTES = AUDIO_SAMPLE_RATE * AUDIO_CHANNELS * 2 // 10

_SCREEN_GRABBERS = {
    "Linux": "x11grab",
    "Windows": "gdigrab",
    "Darwin": "avfoundation",
}


def ffmpeg_debug_enabled() -> bool:
    """Enable verbose ffmpeg logs only when explicitly requested."""
    return os.environ.get("FFMPEG_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


class FfmpegNotFoundError(RuntimeError):
    """Raised when FFmpeg cannot be located."""


@dataclass(frozen=True)
class CaptureSource:
    """A screen offered in the share prompt.

    Attributes:
        id: Stable identifier of the screen within this run.
        label: Human-friendly name shown in the picker.
        x, y, width, height: Screen geometry in desktop coordinates.
        index: Ordinal of the screen, used to resolve avfoundation devices.
    """

    id: str
    label: str
    x: int
    y: int
    width: int
    height: int
    index: int = 0


@dataclass(frozen=True)
class ScreenCaptureConfig:
    width: int
    height: int
    fps: int
    label: str = "requested"

    @property
    def frame_bytes(self) -> int:
        return self.width * self.height * 3


def resolve_ffmpeg_path() -> str:
    env_path = os.environ.get("FFMPEG_PATH")
    if env_path and os.path.isfile(env_path):
        return env_path
    root = Path(__file__).resolve().parents[2]
    for name in ("ffmpeg.exe", "ffmpeg"):
        bundled = root / "bin" / name
        if bundled.exists():
            return str(bundled)
    return "ffmpeg"


def ffmpeg_available() -> bool:
    path = resolve_ffmpeg_path()
    if os.path.isfile(path):
        return True
    return shutil.which(path) is not None


def screen_grabber_for(system: str | None = None) -> str | None:
    return _SCREEN_GRABBERS.get(system or platform.system())


def _run_ffmpeg_command(args, timeout=10, text=True):
    try:
        return subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            check=False,
            text=text,
        )
    except FileNotFoundError as exc:
        raise FfmpegNotFoundError("ffmpeg executable not found") from exc


def fit_frame_size(src_width: int, src_height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Scale a source size down to fit the bounds, keeping aspect and even dimensions."""
    if src_width <= 0 or src_height <= 0:
        return max_width - max_width % 2, max_height - max_height % 2
    scale = min(1.0, max_width / src_width, max_height / src_height)
    width = max(2, int(src_width * scale))
    height = max(2, int(src_height * scale))
    return width - width % 2, height - height % 2


def list_avfoundation_screens() -> dict[int, str]:
    """Map macOS screen ordinals to avfoundation device indices."""
    args = [resolve_ffmpeg_path(), "-hide_banner", "-nostdin", "-f", "avfoundation", "-list_devices", "true", "-i", ""]
    result = _run_ffmpeg_command(args, timeout=5, text=True)
    screens: dict[int, str] = {}
    for line in (result.stderr or "").splitlines():
        match = re.search(r"\[(\d+)\]\s+Capture screen (\d+)", line)
        if match:
            screens[int(match.group(2))] = match.group(1)
    LOG.info("[CAPTURE] avfoundation screens: %s", screens)
    return screens


def _x11_display() -> str:
    display = os.environ.get("DISPLAY", ":0")
    # x11grab wants "host:display.screen" before the +x,y offset.
    return display if "." in display.rsplit(":", 1)[-1] else f"{display}.0"


def build_screen_capture_command(
    source: CaptureSource,
    config: ScreenCaptureConfig,
    *,
    system: str | None = None,
    avfoundation_device: str | None = None,
) -> list[str]:
    system = system or platform.system()
    grabber = screen_grabber_for(system)
    if grabber is None:
        raise RuntimeError(f"Screen capture is not supported on {system}")

    ffmpeg_loglevel = "verbose" if ffmpeg_debug_enabled() else "warning"
    cmd = [
        resolve_ffmpeg_path(),
        "-hide_banner",
        "-nostdin",
        "-loglevel",
        ffmpeg_loglevel,
        "-fflags",
        "nobuffer",
        "-flags",
        "low_delay",
        "-f",
        grabber,
        "-framerate",
        str(config.fps),
    ]
    if grabber == "x11grab":
        cmd.extend(["-video_size", f"{source.width}x{source.height}"])
        cmd.extend(["-i", f"{_x11_display()}+{source.x},{source.y}"])
    elif grabber == "gdigrab":
        cmd.extend([
            "-offset_x",
            str(source.x),
            "-offset_y",
            str(source.y),
            "-video_size",
            f"{source.width}x{source.height}",
            "-i",
            "desktop",
        ])
    else:
        device = avfoundation_device if avfoundation_device is not None else str(source.index + 1)
        cmd.extend(["-capture_cursor", "1", "-i", f"{device}:none"])

    cmd.extend(["-vf", f"scale={config.width}:{config.height}:flags=fast_bilinear"])
    cmd.extend([
        "-r",
        str(config.fps),
        "-pix_fmt",
        "bgr24",
        "-f",
        "rawvideo",
        "pipe:1",
    ])
    LOG.info("[CAPTURE] screen command: %s", cmd)
    return cmd


def build_audio_capture_command(device: str | None = None, *, system: str | None = None) -> list[str] | None:
    """Return an FFmpeg command capturing system audio, or None when unavailable.

    Linux uses the PulseAudio/PipeWire monitor of the default sink. macOS and
    Windows have no loopback input by default, so a device (e.g. a BlackHole
    or virtual-audio-capturer install) must be configured.
    """
    system = system or platform.system()
    if system == "Linux":
        input_args = ["-f", "pulse", "-i", device or "@DEFAULT_MONITOR@"]
    elif system == "Darwin" and device:
        input_args = ["-f", "avfoundation", "-i", f":{device}"]
    elif system == "Windows" and device:
        input_args = ["-f", "dshow", "-i", f"audio={device}"]
    else:
        return None

    ffmpeg_loglevel = "verbose" if ffmpeg_debug_enabled() else "warning"
    cmd = [resolve_ffmpeg_path(), "-hide_banner", "-nostdin", "-loglevel", ffmpeg_loglevel]
    cmd.extend(input_args)
    cmd.extend([
        "-ac",
        str(AUDIO_CHANNELS),
        "-ar",
        str(AUDIO_SAMPLE_RATE),
        "-f",
        "s16le",
        "pipe:1",
    ])
    LOG.info("[CAPTURE] audio command: %s", cmd)
    return cmd
