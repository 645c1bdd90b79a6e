"""
DailyExpenseTracker: desktop application for keeping a list of daily expenses in a Supabase table.

This package provides:

- :mod:`DailyExpenseTracker.core` – Backend client, authentication, the expense repository and the view-model.
- :mod:`DailyExpenseTracker.ui` – A PySide6 window with the login, the expense form and the expense list.
- :mod:`DailyExpenseTracker.settings` – Settings management and the environment overrides for the backend.
- :mod:`DailyExpenseTracker.status` – Status codes and exceptions.
- :mod:`DailyExpenseTracker.log` – Logging setup.

Use :func:`DailyExpenseTracker.exec_` to launch the application.
"""

import sys

from PySide6 import QtCore

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('DailyExpenseTracker requires Python 3.11 or higher.')

__version__ = '0.1.0'
__description__ = 'DailyExpenseTracker: desktop application for tracking daily expenses stored in Supabase.'

from .log import log

log.setup_logging()


def exec_() -> None:
    """Launch the DailyExpenseTracker GUI application and enter its event loop.

    Initializes the QApplication, builds the backend client and the view-model,
    shows the main window, and starts the Qt event loop.
    """
    from PySide6 import QtWidgets

    from .core import service
    from .core.viewmodel import ExpenseViewModel
    from .status import status
    from .ui import app
    from .ui import main
    from .ui.actions import signals

    app = app.Application(sys.argv)

    try:
        client = service.get_client()
    except status.BaseStatusException as ex:
        QtWidgets.QMessageBox.critical(None, 'Daily Expense Tracker', ex.message)
        sys.exit(1)

    viewmodel = ExpenseViewModel(client)
    main.show(viewmodel)

    # Restore the session and load the list once the window is up
    QtCore.QTimer.singleShot(100, signals.initializationRequested)

    sys.exit(app.exec())


if __name__ == '__main__':
    exec_()
