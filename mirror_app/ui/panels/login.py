"""Sign-in panel gating access to screen sharing."""
import logging

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QFrame, QLabel, QLineEdit, QVBoxLayout, QWidget

from mirror_core.identity import IdentityError, decode_id_token, is_placeholder_client_id
from mirror_app.ui.theme import Colors, Styles
from mirror_app.ui.widget_utils import disable_widget_interaction, make_button, make_info_label


class LoginPanel(QWidget):
    signedIn = pyqtSignal(object)

    def __init__(self, client_id):
        super().__init__()
        self.client_id = client_id
        self.configuration_needed = is_placeholder_client_id(client_id)

        title = QLabel("Screen Mirror")
        disable_widget_interaction(title)
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet(f"QLabel {{ color: {Colors.FG_BLACK}; font-size: 22px; font-weight: bold; }}")

        subtitle = make_info_label("Sign in with Google to start sharing your screen", Colors.FG_MUTED)
        subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.notice = QFrame()
        self.notice.setObjectName("banner")
        self.notice.setStyleSheet(Styles.banner("notice"))
        notice_layout = QVBoxLayout()
        notice_title = QLabel("<b>Configuration Needed</b>")
        notice_text = QLabel(
            "Set MIRROR_CLIENT_ID to your Google OAuth client ID to enable sign-in."
        )
        notice_text.setWordWrap(True)
        for label in (notice_title, notice_text):
            disable_widget_interaction(label)
            notice_layout.addWidget(label)
        self.notice.setLayout(notice_layout)
        self.notice.setVisible(self.configuration_needed)

        self.token_input = QLineEdit()
        self.token_input.setPlaceholderText("Paste your Google ID token")
        self.token_input.setStyleSheet(Styles.line_edit())
        self.token_input.returnPressed.connect(self.sign_in)

        self.sign_in_btn = make_button("Sign in", primary=True)
        self.sign_in_btn.clicked.connect(self.sign_in)

        self.error_label = make_info_label("", Colors.ERROR_FG)
        self.error_label.setWordWrap(True)
        self.error_label.hide()

        self.token_input.setEnabled(not self.configuration_needed)
        self.sign_in_btn.setEnabled(not self.configuration_needed)

        layout = QVBoxLayout()
        layout.addStretch()
        layout.addWidget(title)
        layout.addWidget(subtitle)
        layout.addWidget(self.notice)
        layout.addWidget(self.token_input)
        layout.addWidget(self.sign_in_btn)
        layout.addWidget(self.error_label)
        layout.addStretch()
        layout.setContentsMargins(48, 24, 48, 24)
        self.setLayout(layout)

    def sign_in(self):
        if self.configuration_needed:
            self.show_error("Sign-in is disabled until a Google client ID is configured")
            return
        try:
            identity = decode_id_token(self.token_input.text())
        except IdentityError as exc:
            logging.warning("Sign-in failed: %s", exc)
            self.show_error(f"Sign-in failed: {exc}")
            return
        self.error_label.hide()
        self.token_input.clear()
        self.signedIn.emit(identity)

    def show_error(self, message):
        self.error_label.setText(message)
        self.error_label.show()

    def refresh(self):
        self.error_label.hide()
        self.token_input.clear()
