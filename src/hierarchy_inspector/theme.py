"""
Application Theme Module.

Colors, overlay pens and the QSS style sheet of the inspector window.
"""


class Theme:
    """
    Static container for UI theme constants and stylesheet generation.
    """

    FONT_FAMILY: str = "Segoe UI"
    FONT_MONO: str = "Consolas"

    BG_CANVAS: str = "#f9fafb"
    BG_WINDOW: str = "#f3f4f6"
    BG_PANEL: str = "#ffffff"
    BG_HEADER: str = "#f9fafb"
    BORDER: str = "#e5e7eb"

    TEXT_MAIN: str = "#1f2937"
    TEXT_MUTED: str = "#6b7280"

    ACCENT_BLUE: str = "#2563eb"
    ACCENT_GREEN: str = "#16a34a"
    ACCENT_RED: str = "#ef4444"
    ACCENT_AMBER: str = "#d97706"

    # Canvas overlay
    BOX_OUTLINE = (59, 130, 246, 178)
    BOX_SELECTED: str = "#ef4444"
    BOX_SELECTED_FILL = (239, 68, 68, 64)
    CROSSHAIR: str = "#d97706"

    # Tree foreground per element family, first match wins.
    TYPE_COLORS = (
        ("Button", "#2563eb"),
        ("Text", "#16a34a"),
        ("Image", "#9333ea"),
        ("Table", "#ea580c"),
        ("List", "#ea580c"),
        ("Collection", "#ea580c"),
        ("Scroll", "#4f46e5"),
        ("Navigation", "#dc2626"),
        ("TabBar", "#dc2626"),
        ("Toolbar", "#dc2626"),
        ("Application", "#1f2937"),
        ("Window", "#1f2937"),
    )

    @staticmethod
    def type_color(element_type: str) -> str:
        for fragment, color in Theme.TYPE_COLORS:
            if fragment in element_type:
                return color
        return Theme.TEXT_MUTED

    @staticmethod
    def get_stylesheet() -> str:
        """
        Returns the global QSS stylesheet for the application.
        """
        return f"""
        QMainWindow {{
            background: {Theme.BG_WINDOW};
        }}

        QWidget {{
            color: {Theme.TEXT_MAIN};
            font-family: '{Theme.FONT_FAMILY}', sans-serif;
            font-size: 10pt;
        }}

        QToolBar {{
            background: {Theme.BG_PANEL};
            border-bottom: 1px solid {Theme.BORDER};
            spacing: 8px;
            padding: 4px;
        }}

        QDockWidget::title {{
            background: {Theme.BG_HEADER};
            padding: 4px 6px;
            border-bottom: 1px solid {Theme.BORDER};
        }}

        QTreeWidget, QListWidget, QTableWidget, QTextEdit {{
            background-color: {Theme.BG_PANEL};
            border: 1px solid {Theme.BORDER};
            outline: none;
        }}
        QTreeWidget::item:selected, QListWidget::item:selected {{
            background-color: #fee2e2;
            color: #b91c1c;
        }}

        QPushButton {{
            background-color: {Theme.BG_PANEL};
            border: 1px solid {Theme.BORDER};
            padding: 5px 10px;
            border-radius: 6px;
        }}
        QPushButton:hover {{
            background-color: #eef2ff;
        }}
        QPushButton[class="primary"] {{
            background: {Theme.ACCENT_BLUE};
            border: 1px solid #1d4ed8;
            color: white;
            font-weight: 600;
        }}
        QPushButton[class="success"] {{
            background: {Theme.ACCENT_GREEN};
            border: 1px solid #15803d;
            color: white;
            font-weight: 600;
        }}
        QPushButton:disabled {{
            color: {Theme.TEXT_MUTED};
            background: {Theme.BG_HEADER};
        }}

        QLabel#infoLabel {{
            color: {Theme.TEXT_MUTED};
        }}
        QLabel#errorLabel {{
            color: #b91c1c;
            font-weight: 600;
        }}

        QHeaderView::section {{
            background: {Theme.BG_HEADER};
            border: 1px solid {Theme.BORDER};
            padding: 4px;
        }}
        """
