from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QLabel, QPushButton, QWidget

from mirror_app.ui.theme import Styles


def disable_widget_interaction(widget: QWidget):
    """Disable interactive/focus states for display-only widgets."""
    widget.setFocusPolicy(Qt.FocusPolicy.NoFocus)
    if isinstance(widget, QLabel):
        widget.setTextInteractionFlags(Qt.TextInteractionFlag.NoTextInteraction)


def disable_button_focus_rect(button: QPushButton):
    """Disable focus rectangle on button while keeping it clickable."""
    button.setFocusPolicy(Qt.FocusPolicy.NoFocus)


def make_button(text: str, primary: bool = False) -> QPushButton:
    button = QPushButton(text)
    button.setStyleSheet(Styles.button(primary))
    disable_button_focus_rect(button)
    return button


def make_info_label(text: str = "", color=None) -> QLabel:
    label = QLabel(text)
    disable_widget_interaction(label)
    label.setStyleSheet(Styles.info_label(color) if color else Styles.info_label())
    return label


def configure_preview_label(
    label: QLabel,
    min_height: int = 220,
    object_name: str = "preview_label",
) -> QLabel:
    """Apply the non-interactive preview look to an existing label."""
    label.setObjectName(object_name)
    label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    label.setMinimumHeight(min_height)
    label.setTextInteractionFlags(Qt.TextInteractionFlag.NoTextInteraction)
    label.setFocusPolicy(Qt.FocusPolicy.NoFocus)
    label.setStyleSheet(Styles.preview_label(object_name))
    return label
