"""Screen picker acting as the capture permission prompt."""
import logging

from PyQt6.QtCore import QObject, Qt, QThread, pyqtSignal, pyqtSlot
from PyQt6.QtGui import QGuiApplication
from PyQt6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
)

from mirror_app.services.capture_errors import CaptureRequestError
from mirror_app.services.ffmpeg_tools import CaptureSource
from mirror_app.ui.theme import Styles
from mirror_app.ui.widget_utils import disable_widget_interaction, make_button


def capture_source_for_screen(screen, index):
    """Describe a QScreen in device pixels, which is what the grabbers expect."""
    geometry = screen.geometry()
    ratio = screen.devicePixelRatio() or 1.0
    width = int(round(geometry.width() * ratio))
    height = int(round(geometry.height() * ratio))
    name = screen.name() or f"Screen {index + 1}"
    return CaptureSource(
        id=f"screen:{index}",
        label=f"{name} ({width}x{height})",
        x=int(round(geometry.x() * ratio)),
        y=int(round(geometry.y() * ratio)),
        width=width,
        height=height,
        index=index,
    )


def list_capture_sources():
    return [capture_source_for_screen(screen, i) for i, screen in enumerate(QGuiApplication.screens())]


class SourcePickerDialog(QDialog):
    def __init__(self, sources, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Choose what to share")
        self.setModal(True)
        self.sources = list(sources)

        title = QLabel("Select a screen to share with Screen Mirror")
        disable_widget_interaction(title)
        title.setStyleSheet(Styles.info_label())

        self.source_list = QListWidget()
        self.source_list.setStyleSheet(Styles.list_widget())
        for source in self.sources:
            item = QListWidgetItem(source.label)
            item.setData(Qt.ItemDataRole.UserRole, source.id)
            self.source_list.addItem(item)
        if self.sources:
            self.source_list.setCurrentRow(0)

        self.cancel_btn = make_button("Cancel")
        self.share_btn = make_button("Share", primary=True)
        self.share_btn.setEnabled(bool(self.sources))

        self.cancel_btn.clicked.connect(self.reject)
        self.share_btn.clicked.connect(self.accept)
        self.source_list.itemDoubleClicked.connect(lambda _item: self.accept())

        buttons = QHBoxLayout()
        buttons.addStretch()
        buttons.addWidget(self.cancel_btn)
        buttons.addWidget(self.share_btn)

        layout = QVBoxLayout()
        layout.addWidget(title)
        layout.addWidget(self.source_list)
        layout.addLayout(buttons)
        self.setLayout(layout)
        self.resize(420, 300)

    def selected_source(self):
        row = self.source_list.currentRow()
        if row < 0 or row >= len(self.sources):
            return None
        return self.sources[row]


class SourcePrompt(QObject):
    """Show the picker on the GUI thread, even when asked from a request worker."""

    _promptRequested = pyqtSignal()

    def __init__(self, parent_widget=None, dialog_factory=SourcePickerDialog, list_sources=list_capture_sources):
        super().__init__()
        self.parent_widget = parent_widget
        self.dialog_factory = dialog_factory
        self.list_sources = list_sources
        self._result = None
        self._no_sources = False
        self._promptRequested.connect(self._prompt, Qt.ConnectionType.BlockingQueuedConnection)

    def select(self):
        """Return the chosen CaptureSource, or None if the prompt was dismissed.

        Raises CaptureRequestError when there is no screen to offer.
        """
        if QThread.currentThread() is self.thread():
            self._prompt()
        else:
            self._promptRequested.emit()
        result, self._result = self._result, None
        if self._no_sources:
            self._no_sources = False
            raise CaptureRequestError("No screens available to share")
        return result

    @pyqtSlot()
    def _prompt(self):
        self._result = None
        sources = self.list_sources()
        if not sources:
            logging.warning("[CAPTURE] no screens available to share")
            self._no_sources = True
            return
        dialog = self.dialog_factory(sources, self.parent_widget)
        accepted = dialog.exec() == QDialog.DialogCode.Accepted
        self._result = dialog.selected_source() if accepted else None
        dialog.deleteLater()
        logging.info("[CAPTURE] screen picker %s", "accepted" if self._result else "dismissed")
