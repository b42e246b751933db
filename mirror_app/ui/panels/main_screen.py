"""Main screen: sharing controls, connection status and live preview."""
import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from mirror_app.app_state import app_state
from mirror_app.controllers.session_controller import SessionController
from mirror_app.services.capture_state_machine import CaptureState
from mirror_app.ui.preview_surface import PreviewSurface
from mirror_app.ui.status_indicator import ConnectionStatusIndicator
from mirror_app.ui.theme import Colors, Styles
from mirror_app.ui.widget_utils import disable_widget_interaction, make_button, make_info_label
from mirror_core import notifier

EMPTY_STATE_TEXT = "You are not sharing your screen. Press Start Sharing to begin."


class MainScreenPanel(QWidget):
    AVATAR_SIZE = 36

    def __init__(self, nav, session, notifications_enabled=True):
        super().__init__()
        self.nav = nav
        self.session = session
        self.notifications_enabled = notifications_enabled
        self.controller = SessionController(session)
        self._last_state = None

        # ---- header ----
        header = QWidget()
        header.setObjectName("main_header")
        header.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        header.setStyleSheet(Styles.header())

        title_lbl = QLabel("Screen Mirror")
        disable_widget_interaction(title_lbl)
        title_lbl.setStyleSheet(Styles.header_label(14, bold=True))

        self.status_indicator = ConnectionStatusIndicator(session.status)

        identity = app_state.identity
        self.avatar = QLabel(identity.initials if identity else "?")
        self.avatar.setFixedSize(self.AVATAR_SIZE, self.AVATAR_SIZE)
        self.avatar.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.avatar.setStyleSheet(Styles.avatar(self.AVATAR_SIZE))
        disable_widget_interaction(self.avatar)

        self.name_label = QLabel(identity.display_name if identity else "")
        self.email_label = QLabel(identity.email if identity else "")
        self.name_label.setStyleSheet(Styles.header_label(13, bold=True))
        self.email_label.setStyleSheet(Styles.header_label(11))
        for label in (self.name_label, self.email_label):
            disable_widget_interaction(label)

        user_box = QVBoxLayout()
        user_box.setSpacing(0)
        user_box.addWidget(self.name_label)
        user_box.addWidget(self.email_label)

        self.logout_btn = make_button("Log out")
        self.logout_btn.clicked.connect(self.nav.sign_out)

        header_layout = QHBoxLayout()
        header_layout.setContentsMargins(6, 6, 6, 6)
        header_layout.addWidget(title_lbl)
        header_layout.addWidget(self.status_indicator)
        header_layout.addStretch()
        header_layout.addWidget(self.avatar)
        header_layout.addLayout(user_box)
        header_layout.addWidget(self.logout_btn)
        header.setLayout(header_layout)

        # ---- error banner ----
        self.error_banner = QFrame()
        self.error_banner.setObjectName("banner")
        self.error_banner.setStyleSheet(Styles.banner("error"))
        self.error_text = QLabel("")
        self.error_text.setWordWrap(True)
        disable_widget_interaction(self.error_text)
        self.dismiss_btn = make_button("Dismiss")
        self.dismiss_btn.clicked.connect(self.dismiss_error)
        banner_layout = QHBoxLayout()
        banner_layout.addWidget(self.error_text, 1)
        banner_layout.addWidget(self.dismiss_btn)
        self.error_banner.setLayout(banner_layout)
        self.error_banner.hide()

        # ---- preview + controls ----
        self.preview = PreviewSurface()
        self.empty_label = make_info_label(EMPTY_STATE_TEXT, Colors.FG_MUTED)
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.start_btn = make_button("Start Sharing", primary=True)
        self.stop_btn = make_button("Stop Sharing")
        self.start_btn.clicked.connect(self.start)
        self.stop_btn.clicked.connect(self.stop)

        self.message_label = make_info_label("", Colors.FG_MUTED)

        controls_row = QHBoxLayout()
        controls_row.addWidget(self.start_btn)
        controls_row.addWidget(self.stop_btn)
        controls_row.addStretch()
        controls_row.addWidget(self.message_label)

        layout = QVBoxLayout()
        layout.addWidget(header)
        layout.addWidget(self.error_banner)
        layout.addWidget(self.preview, 1)
        layout.addWidget(self.empty_label)
        layout.addLayout(controls_row)
        self.setLayout(layout)

        self.session.bind_surface(self.preview)
        self._unsubscribe = self.session.add_listener(self.on_session_changed)
        self.refresh()

    # ---- actions ----

    def start(self):
        self.message_label.setText(self.controller.start())

    def stop(self):
        self.message_label.setText(self.controller.stop())

    def dismiss_error(self):
        self.message_label.setText(self.controller.dismiss_error())

    # ---- session observation ----

    def on_session_changed(self, session):
        state = session.state
        if state == CaptureState.FAILED and self._last_state != CaptureState.FAILED:
            self._raise_failure_notification(session.last_error)
        self.refresh()

    def _raise_failure_notification(self, error):
        if not self.notifications_enabled or error is None:
            return
        if not notifier.alert(error.message, title="Screen sharing failed"):
            logging.info("[SESSION] failure notification not shown")

    def refresh(self):
        state = self.session.state
        self._last_state = state
        self.status_indicator.set_status(self.session.status)

        requesting = state == CaptureState.REQUESTING
        active = state == CaptureState.ACTIVE
        self.start_btn.setText("Connecting..." if requesting else "Start Sharing")
        self.start_btn.setEnabled(not requesting and not active)
        self.start_btn.setVisible(not active)
        self.stop_btn.setVisible(active)
        self.stop_btn.setEnabled(active)

        self.empty_label.setVisible(not active)

        error = self.session.last_error
        if state == CaptureState.FAILED and error is not None:
            self.error_text.setText(error.message)
            self.error_banner.show()
        else:
            self.error_text.setText("")
            self.error_banner.hide()

    def on_panel_close(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.session.unbind_surface()
        self.preview.clear()
