"""
UI package: application signals, application setup, theming, and the main window.

This package provides:

- :mod:`DailyExpenseTracker.ui.actions` – Application-wide Qt signals.
- :mod:`DailyExpenseTracker.ui.app` – QApplication subclass and setup functions.
- :mod:`DailyExpenseTracker.ui.main` – Main window composition (login, expense form, expense list).
- :mod:`DailyExpenseTracker.ui.model` – List model presenting the expenses.
- :mod:`DailyExpenseTracker.ui.ui` – Styling constants for sizes and colors.
"""
