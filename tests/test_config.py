"""Environment configuration parsing tests."""
import os
import unittest
from unittest.mock import patch

from mirror_core.config import (
    DEFAULT_CAPTURE_FPS,
    PLACEHOLDER_CLIENT_ID,
    MirrorConfig,
    load_config,
)

MIRROR_KEYS = [
    "MIRROR_CLIENT_ID",
    "MIRROR_CAPTURE_FPS",
    "MIRROR_PREVIEW_WIDTH",
    "MIRROR_PREVIEW_HEIGHT",
    "MIRROR_AUDIO_DEVICE",
    "MIRROR_STARTUP_GRACE_SEC",
    "MIRROR_LOG_DIR",
    "MIRROR_NOTIFICATIONS",
]


class ConfigTests(unittest.TestCase):
    def setUp(self):
        cleaned = {key: "" for key in MIRROR_KEYS}
        patcher = patch.dict(os.environ, cleaned)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_defaults(self):
        self.assertEqual(load_config(), MirrorConfig())
        self.assertEqual(load_config().client_id, PLACEHOLDER_CLIENT_ID)

    def test_overrides(self):
        os.environ.update({
            "MIRROR_CLIENT_ID": "abc.apps.googleusercontent.com",
            "MIRROR_CAPTURE_FPS": "30",
            "MIRROR_PREVIEW_WIDTH": "1920",
            "MIRROR_PREVIEW_HEIGHT": "1080",
            "MIRROR_AUDIO_DEVICE": "BlackHole 2ch",
            "MIRROR_STARTUP_GRACE_SEC": "3",
            "MIRROR_LOG_DIR": "/tmp/mirror-logs",
            "MIRROR_NOTIFICATIONS": "off",
        })
        config = load_config()
        self.assertEqual(config.client_id, "abc.apps.googleusercontent.com")
        self.assertEqual(config.capture_fps, 30)
        self.assertEqual((config.preview_width, config.preview_height), (1920, 1080))
        self.assertEqual(config.audio_device, "BlackHole 2ch")
        self.assertEqual(config.startup_grace_sec, 3.0)
        self.assertEqual(config.log_dir, "/tmp/mirror-logs")
        self.assertFalse(config.notifications_enabled)

    def test_fps_is_clamped(self):
        os.environ["MIRROR_CAPTURE_FPS"] = "500"
        self.assertEqual(load_config().capture_fps, 60)
        os.environ["MIRROR_CAPTURE_FPS"] = "0"
        self.assertEqual(load_config().capture_fps, 1)

    def test_invalid_numbers_fall_back_with_warning(self):
        os.environ["MIRROR_CAPTURE_FPS"] = "fast"
        os.environ["MIRROR_STARTUP_GRACE_SEC"] = "-1"
        with self.assertLogs("mirror_core.config", level="WARNING") as logs:
            config = load_config()
        self.assertEqual(config.capture_fps, DEFAULT_CAPTURE_FPS)
        self.assertEqual(config.startup_grace_sec, 1.5)
        self.assertEqual(len(logs.records), 2)


if __name__ == "__main__":
    unittest.main()
