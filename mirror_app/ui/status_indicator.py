from PyQt6.QtWidgets import QHBoxLayout, QLabel, QWidget

from mirror_app.services.capture_session import ConnectionStatus
from mirror_app.ui.theme import Colors
from mirror_app.ui.widget_utils import disable_widget_interaction

STATUS_LABELS = {
    ConnectionStatus.DISCONNECTED: "Disconnected",
    ConnectionStatus.CONNECTING: "Connecting...",
    ConnectionStatus.CONNECTED: "Connected",
    ConnectionStatus.ERROR: "Error",
}

STATUS_COLORS = {
    ConnectionStatus.DISCONNECTED: Colors.STATUS_DISCONNECTED,
    ConnectionStatus.CONNECTING: Colors.STATUS_CONNECTING,
    ConnectionStatus.CONNECTED: Colors.STATUS_CONNECTED,
    ConnectionStatus.ERROR: Colors.STATUS_ERROR,
}


class ConnectionStatusIndicator(QWidget):
    """Colored dot plus label mirroring the session's connection status."""

    DOT_SIZE = 10

    def __init__(self, status=ConnectionStatus.DISCONNECTED):
        super().__init__()
        self.status = None

        self.dot = QLabel()
        self.dot.setFixedSize(self.DOT_SIZE, self.DOT_SIZE)
        self.label = QLabel()
        disable_widget_interaction(self.dot)
        disable_widget_interaction(self.label)

        layout = QHBoxLayout()
        layout.setContentsMargins(4, 0, 4, 0)
        layout.setSpacing(6)
        layout.addWidget(self.dot)
        layout.addWidget(self.label)
        self.setLayout(layout)

        self.set_status(status)

    def set_status(self, status):
        status = ConnectionStatus(status)
        if status == self.status:
            return
        self.status = status
        color = STATUS_COLORS[status]
        self.dot.setStyleSheet(
            f"QLabel {{ background-color: {color}; border-radius: {self.DOT_SIZE // 2}px; }}"
        )
        self.label.setText(STATUS_LABELS[status])
        self.label.setStyleSheet(
            f"QLabel {{ color: {color}; font-weight: bold; font-size: 13px; background-color: transparent; }}"
        )

    def text(self):
        return self.label.text()
