class Colors:
    """Color palette for the application UI."""

    BG_WHITE = "#ffffff"
    FG_BLACK = "#111111"
    FG_MUTED = "#5f5a54"
    BORDER_LIGHT = "#d6d6d6"
    BORDER_MEDIUM = "#cdcdcd"
    HOVER_BG = "#f7f7f7"
    PRESSED_BG = "#eeeeee"

    BG_DARK = "#332f2a"
    BG_MEDIUM_DARK = "#3a352f"
    BG_HOVER_DARK = "#7a889a"
    FG_LIGHT = "#c8c1b7"
    BORDER_DARK = "#595148"

    ACCENT_BG = "#6f7f94"
    ACCENT_FG = "#ece4d9"
    ACCENT_BORDER = "#7f8fa3"

    STATUS_DISCONNECTED = "#9a938a"
    STATUS_CONNECTING = "#d9a441"
    STATUS_CONNECTED = "#4f9d69"
    STATUS_ERROR = "#c0504d"

    ERROR_BG = "#fbeaea"
    ERROR_BORDER = "#e3b4b3"
    ERROR_FG = "#8a2f2d"
    NOTICE_BG = "#fff6e0"
    NOTICE_BORDER = "#ecd49a"


class Styles:
    """Reusable stylesheet templates."""

    @staticmethod
    def button(primary=False):
        if primary:
            return f"""
                QPushButton {{
                    font-weight: bold;
                    background-color: {Colors.ACCENT_BG};
                    color: {Colors.ACCENT_FG};
                    border: 2px solid {Colors.ACCENT_BORDER};
                    border-radius: 6px;
                    padding: 8px 16px;
                    outline: none;
                }}
                QPushButton:hover {{
                    background-color: #7f8fa4;
                    color: #ffffff;
                }}
                QPushButton:pressed {{
                    background-color: #5f6f84;
                }}
                QPushButton:focus {{
                    outline: none;
                    border: 2px solid {Colors.ACCENT_BORDER};
                }}
                QPushButton:disabled {{
                    background-color: #a7b0bc;
                    color: #eef0f3;
                    border: 2px solid #a7b0bc;
                }}
            """
        return f"""
            QPushButton {{
                background-color: {Colors.BG_WHITE};
                color: {Colors.FG_BLACK};
                border: 1px solid {Colors.BORDER_LIGHT};
                border-radius: 6px;
                padding: 8px 12px;
                outline: none;
            }}
            QPushButton:hover {{
                background-color: {Colors.HOVER_BG};
                border-color: {Colors.BORDER_MEDIUM};
            }}
            QPushButton:pressed {{
                background-color: {Colors.PRESSED_BG};
            }}
            QPushButton:focus {{
                outline: none;
                border: 1px solid {Colors.BORDER_LIGHT};
            }}
            QPushButton:disabled {{
                color: #9a9a9a;
            }}
        """

    @staticmethod
    def header():
        return f"""
            QWidget#main_header {{
                background-color: {Colors.BG_DARK};
                border: 1px solid {Colors.BORDER_DARK};
                border-radius: 6px;
                padding: 4px;
            }}
        """

    @staticmethod
    def header_label(size=13, bold=False):
        weight = "bold" if bold else "normal"
        return f"""
            QLabel {{
                color: {Colors.FG_LIGHT};
                font-weight: {weight};
                font-size: {size}px;
                background-color: transparent;
                padding: 2px 6px;
                selection-background-color: transparent;
                selection-color: {Colors.FG_LIGHT};
            }}
        """

    @staticmethod
    def avatar(size):
        return f"""
            QLabel {{
                background-color: {Colors.ACCENT_BG};
                color: {Colors.ACCENT_FG};
                border-radius: {size // 2}px;
                font-weight: bold;
                font-size: {max(10, size // 3)}px;
            }}
        """

    @staticmethod
    def preview_label(object_name):
        return f"""
            QLabel#{object_name} {{
                border: 2px solid {Colors.BORDER_DARK};
                background-color: {Colors.BG_DARK};
                color: {Colors.FG_LIGHT};
                border-radius: 8px;
                padding: 8px;
                selection-background-color: transparent;
                selection-color: {Colors.FG_LIGHT};
            }}
        """

    @staticmethod
    def info_label(color=Colors.FG_BLACK):
        return f"""
            QLabel {{
                color: {color};
                background-color: transparent;
                padding: 4px;
                font-size: 13px;
                selection-background-color: transparent;
                selection-color: {color};
            }}
        """

    @staticmethod
    def banner(kind="error"):
        if kind == "notice":
            bg, border, fg = Colors.NOTICE_BG, Colors.NOTICE_BORDER, Colors.FG_BLACK
        else:
            bg, border, fg = Colors.ERROR_BG, Colors.ERROR_BORDER, Colors.ERROR_FG
        return f"""
            QFrame#banner {{
                background-color: {bg};
                border: 1px solid {border};
                border-radius: 6px;
            }}
            QFrame#banner QLabel {{
                color: {fg};
                background-color: transparent;
                font-size: 13px;
            }}
        """

    @staticmethod
    def line_edit():
        return f"""
            QLineEdit {{
                background-color: {Colors.BG_WHITE};
                color: {Colors.FG_BLACK};
                border: 1px solid {Colors.BORDER_LIGHT};
                border-radius: 6px;
                padding: 6px 10px;
            }}
            QLineEdit:focus {{
                border: 2px solid {Colors.ACCENT_BORDER};
            }}
        """

    @staticmethod
    def list_widget():
        return f"""
            QListWidget {{
                background-color: {Colors.BG_WHITE};
                color: {Colors.FG_BLACK};
                border: 1px solid {Colors.BORDER_LIGHT};
                border-radius: 6px;
                outline: none;
            }}
            QListWidget::item {{
                padding: 8px;
            }}
            QListWidget::item:selected {{
                background-color: {Colors.ACCENT_BG};
                color: #ffffff;
            }}
        """
