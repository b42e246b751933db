"""Environment-driven runtime configuration."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from mirror_core.paths import DEFAULT_LOG_DIR

LOG = logging.getLogger(__name__)

PLACEHOLDER_CLIENT_ID = "YOUR_GOOGLE_CLIENT_ID.apps.googleusercontent.com"
DEFAULT_CAPTURE_FPS = 15
MIN_CAPTURE_FPS = 1
MAX_CAPTURE_FPS = 60
DEFAULT_PREVIEW_SIZE = (1280, 720)
DEFAULT_STARTUP_GRACE_SEC = 1.5


@dataclass(frozen=True)
class MirrorConfig:
    client_id: str = PLACEHOLDER_CLIENT_ID
    capture_fps: int = DEFAULT_CAPTURE_FPS
    preview_width: int = DEFAULT_PREVIEW_SIZE[0]
    preview_height: int = DEFAULT_PREVIEW_SIZE[1]
    audio_device: str | None = None
    startup_grace_sec: float = DEFAULT_STARTUP_GRACE_SEC
    log_dir: str = str(DEFAULT_LOG_DIR)
    notifications_enabled: bool = True


def _env_int(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        LOG.warning("Ignoring invalid %s=%r (expected integer)", name, raw)
        return default
    return max(minimum, min(maximum, value))


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        LOG.warning("Ignoring invalid %s=%r (expected number)", name, raw)
        return default
    if value < 0:
        LOG.warning("Ignoring negative %s=%r", name, raw)
        return default
    return value


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def load_config() -> MirrorConfig:
    return MirrorConfig(
        client_id=os.environ.get("MIRROR_CLIENT_ID", "").strip() or PLACEHOLDER_CLIENT_ID,
        capture_fps=_env_int("MIRROR_CAPTURE_FPS", DEFAULT_CAPTURE_FPS, MIN_CAPTURE_FPS, MAX_CAPTURE_FPS),
        preview_width=_env_int("MIRROR_PREVIEW_WIDTH", DEFAULT_PREVIEW_SIZE[0], 160, 7680),
        preview_height=_env_int("MIRROR_PREVIEW_HEIGHT", DEFAULT_PREVIEW_SIZE[1], 120, 4320),
        audio_device=os.environ.get("MIRROR_AUDIO_DEVICE", "").strip() or None,
        startup_grace_sec=_env_float("MIRROR_STARTUP_GRACE_SEC", DEFAULT_STARTUP_GRACE_SEC),
        log_dir=os.environ.get("MIRROR_LOG_DIR", "").strip() or str(DEFAULT_LOG_DIR),
        notifications_enabled=_env_flag("MIRROR_NOTIFICATIONS", True),
    )
