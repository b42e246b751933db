import logging
import sys

from PyQt6.QtWidgets import QApplication

from mirror_core.config import load_config
from mirror_core.logging_setup import setup_logging
from mirror_app.ui.app_shell import AppShell


def main():
    config = load_config()
    setup_logging(config.log_dir)
    logging.info("Starting Screen Mirror (fps=%s, preview=%sx%s)", config.capture_fps, config.preview_width, config.preview_height)

    app = QApplication(sys.argv)
    app.setOrganizationName("ScreenMirror")
    app.setApplicationName("Screen Mirror")

    window = AppShell(config)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
