"""Look and feel of the expense tracker window.

This module provides:
    - Theme: the light and dark themes selectable in the settings
    - Size: spacing and font sizes, in pixels
    - Color: the palette, one RGB triplet per theme
    - init_stylesheet / apply_theme: the application style sheet
"""
import enum
import logging
import os

from PySide6 import QtWidgets, QtGui

STYLESHEET_ENV_KEY = 'DAILYEXPENSETRACKER_DISABLE_STYLESHEET'


class Theme(enum.StrEnum):
    Light = 'light'
    Dark = 'dark'


class Size(enum.IntEnum):
    """Pixel sizes. Call a member with a multiplier to get a scaled size."""
    Spacing = 4
    Text = 12
    Title = 24
    Margin = 18
    Row = 20
    WindowWidth = 420
    WindowHeight = 640

    def __call__(self, multiplier=1.0):
        return round(int(self) * float(multiplier))


class Color(enum.Enum):
    """Palette roles. Calling a member returns a QColor for the current theme."""

    Window = {
        Theme.Light: (245, 245, 245),
        Theme.Dark: (30, 30, 30),
    }
    Field = {
        Theme.Light: (225, 225, 225),
        Theme.Dark: (45, 45, 45),
    }
    Button = {
        Theme.Light: (200, 200, 200),
        Theme.Dark: (65, 65, 65),
    }
    Text = {
        Theme.Light: (30, 30, 30),
        Theme.Dark: (225, 225, 225),
    }
    MutedText = {
        Theme.Light: (90, 90, 90),
        Theme.Dark: (170, 170, 170),
    }
    Submit = {
        Theme.Light: (40, 90, 150),
        Theme.Dark: (80, 130, 180),
    }
    Editing = {
        Theme.Light: (50, 160, 110),
        Theme.Dark: (90, 200, 155),
    }

    @staticmethod
    def theme() -> Theme:
        from ..settings import lib
        try:
            return Theme(lib.settings['theme'])
        except ValueError:
            return Theme.Dark

    def __call__(self, qss=False):
        """
        Returns a QColor, or a CSS rgba string when ``qss`` is True.
        """
        color = QtGui.QColor(*self.value[self.theme()])
        if not qss:
            return color
        return f'rgba({",".join(str(f) for f in color.getRgb())})'


def init_stylesheet() -> str:
    """Build the style sheet for the current theme."""
    return f"""
QWidget {{
    background-color: {Color.Window(qss=True)};
    color: {Color.Text(qss=True)};
    font-size: {Size.Text()}px;
}}
QLineEdit, QComboBox, QListView {{
    background-color: {Color.Field(qss=True)};
    border: 1px solid {Color.Button(qss=True)};
    border-radius: {Size.Spacing()}px;
    padding: {Size.Spacing()}px;
    min-height: {Size.Row()}px;
}}
QPushButton {{
    background-color: {Color.Button(qss=True)};
    border: none;
    border-radius: {Size.Spacing()}px;
    padding: {Size.Spacing()}px {Size.Margin(0.5)}px;
    min-height: {Size.Row()}px;
}}
QPushButton#SubmitButton {{
    background-color: {Color.Submit(qss=True)};
}}
QPushButton#SubmitButton[editing="true"] {{
    background-color: {Color.Editing(qss=True)};
}}
QLabel#TitleLabel {{
    font-size: {Size.Title()}px;
    font-weight: bold;
}}
QLabel#MessageLabel, QLabel#SummaryLabel {{
    color: {Color.MutedText(qss=True)};
}}
"""


def apply_theme() -> None:
    """Set the style sheet for the entire app.

    This function should be called after the QApplication is created.
    """
    if not QtWidgets.QApplication.instance():
        raise RuntimeError('apply_theme() must be called after a QApplication is initiated.')

    if os.environ.get(STYLESHEET_ENV_KEY, '').lower() in ['1', 'true', 'yes']:
        logging.warning('Stylesheet disabled by environment variable.')
        return

    QtWidgets.QApplication.instance().setStyleSheet(init_stylesheet())
