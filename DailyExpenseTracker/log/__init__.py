"""
Logging subsystem.

Modules:

- :mod:`DailyExpenseTracker.log.log` – Root logger setup and the Qt message bridge.
"""
