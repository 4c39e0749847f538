"""
UI themes and styles for the application.
"""

from PyQt6.QtWidgets import QApplication

from .settings_manager import AppearanceMode

DARK_STYLESHEET = """
QMainWindow, QDialog, QWidget {
    background-color: #1e1e1e;
    color: #d4d4d4;
}
QTabWidget::pane {
    border: 1px solid #3c3c3c;
    background-color: #252526;
}
QTabBar::tab {
    background-color: #2d2d30;
    color: #d4d4d4;
    padding: 8px 12px;
    border: 1px solid #3c3c3c;
}
QTabBar::tab:selected {
    background-color: #1e1e1e;
    border-bottom-color: #e5a00d;
}
QListWidget {
    background-color: #252526;
    alternate-background-color: #2d2d30;
    color: #d4d4d4;
}
QListWidget::item:selected {
    background-color: #094771;
}
QPushButton {
    background-color: #cc7b19;
    color: #ffffff;
    border: none;
    padding: 5px 15px;
    border-radius: 2px;
}
QPushButton:hover {
    background-color: #e5a00d;
}
QPushButton:disabled {
    background-color: #3c3c3c;
    color: #858585;
}
QLineEdit, QTextEdit, QComboBox {
    background-color: #3c3c3c;
    color: #d4d4d4;
    border: 1px solid #555555;
    padding: 3px;
}
QLineEdit:focus, QTextEdit:focus {
    border: 1px solid #e5a00d;
}
QProgressBar {
    border: 1px solid #3c3c3c;
    background-color: #2d2d30;
    max-height: 6px;
}
QProgressBar::chunk {
    background-color: #e5a00d;
}
QMenuBar, QMenu {
    background-color: #2d2d30;
    color: #d4d4d4;
}
QMenu::item:selected {
    background-color: #094771;
}
"""

LIGHT_STYLESHEET = """
QMainWindow, QDialog, QWidget {
    background-color: #ffffff;
    color: #1e1e1e;
}
QLineEdit, QTextEdit, QComboBox, QListWidget {
    background-color: #f3f3f3;
    color: #1e1e1e;
    border: 1px solid #c8c8c8;
}
QProgressBar {
    border: 1px solid #c8c8c8;
    max-height: 6px;
}
QProgressBar::chunk {
    background-color: #cc7b19;
}
"""


def stylesheet_for(mode: AppearanceMode) -> str:
    """Style sheet for an appearance mode; SYSTEM leaves the platform look alone."""
    if mode == AppearanceMode.DARK:
        return DARK_STYLESHEET
    if mode == AppearanceMode.LIGHT:
        return LIGHT_STYLESHEET
    return ""


def apply_theme(app: QApplication, mode: AppearanceMode):
    """
    Apply an appearance mode to the entire application.

    Args:
        app: QApplication instance
        mode: AppearanceMode value (SYSTEM, LIGHT or DARK)
    """
    app.setStyleSheet(stylesheet_for(mode))
