from PyQt6.QtWidgets import (
    QWidget,
    QStackedLayout,
    QVBoxLayout,
    QStyle,
)

from mirror_core.config import MirrorConfig
from mirror_app.app_state import app_state
from mirror_app.controllers.navigation_controller import NavigationController
from mirror_app.services.capture_session import CaptureSession
from mirror_app.services.display_media import FfmpegDisplayMedia
from mirror_app.ui.panels.login import LoginPanel
from mirror_app.ui.panels.main_screen import MainScreenPanel
from mirror_app.ui.source_picker import SourcePrompt
from mirror_app.workers.stream_request_worker import QtRequestRunner


class AppShell(QWidget):
    def __init__(self, config=None, provider_factory=None, runner=None):
        super().__init__()

        self.config = config or MirrorConfig()

        self.setWindowTitle("Screen Mirror")
        self.setGeometry(300, 200, 960, 640)

        # ---- layouts ----
        root_layout = QVBoxLayout()
        self.setLayout(root_layout)
        self.stack = QStackedLayout()
        root_layout.addLayout(self.stack)

        self.setWindowIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon))

        # ---- capture plumbing ----
        self.runner = runner or QtRequestRunner(self)
        self.source_prompt = SourcePrompt(self)
        self.provider_factory = provider_factory or self._default_provider

        # ---- navigation ----
        self.login_panel = LoginPanel(self.config.client_id)
        self.nav = NavigationController(
            self.stack,
            self.login_panel,
            self.create_session,
            lambda nav, session: MainScreenPanel(
                nav, session, notifications_enabled=self.config.notifications_enabled
            ),
        )
        self.login_panel.signedIn.connect(self.nav.sign_in)

    def _default_provider(self):
        return FfmpegDisplayMedia(
            self.source_prompt.select,
            max_width=self.config.preview_width,
            max_height=self.config.preview_height,
            fps=self.config.capture_fps,
            audio_device=self.config.audio_device,
            startup_grace_sec=self.config.startup_grace_sec,
        )

    def create_session(self):
        return CaptureSession(self.provider_factory(), runner=self.runner)

    def closeEvent(self, event):
        if app_state.session is not None:
            self.nav.sign_out()
        if hasattr(self.runner, "shutdown"):
            self.runner.shutdown()
        super().closeEvent(event)
