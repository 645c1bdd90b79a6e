"""Application-wide Qt signals for DailyExpenseTracker.

This module provides:
    - Signals: custom Qt signals for configuration changes, application start-up
      and user-facing errors.
"""
import logging

from PySide6 import QtCore


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config and UI events."""
    initializationRequested = QtCore.Signal()

    configSectionChanged = QtCore.Signal(str)  # Section
    metadataChanged = QtCore.Signal(str, object)  # Key, value

    error = QtCore.Signal(str)

    def __init__(self):
        super().__init__()
        self._connect_signals()

    def _connect_signals(self):
        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key != 'theme':
                return
            if not QtCore.QCoreApplication.instance():
                return

            try:
                from . import ui
                ui.apply_theme()
            except RuntimeError as ex:
                logging.debug(f'Error applying theme: {ex}')

        self.metadataChanged.connect(metadata_changed)


signals = Signals()
