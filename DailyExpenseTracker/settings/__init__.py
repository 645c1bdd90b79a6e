"""
Settings package: configuration paths and the settings API.

Modules:

- :mod:`DailyExpenseTracker.settings.lib` – Schema validation, loading, saving and reverting of settings.json,
  and environment overrides for the backend service URL and API key.
"""
