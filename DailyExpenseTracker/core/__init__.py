"""
Core package for DailyExpenseTracker providing essential functionality.

This package includes:

- :mod:`DailyExpenseTracker.core.service` – Creation and caching of the Supabase backend client.
- :mod:`DailyExpenseTracker.core.auth` – Password sign-in, sign-out and durable session storage.
- :mod:`DailyExpenseTracker.core.repository` – The expense model and remote table operations.
- :mod:`DailyExpenseTracker.core.viewmodel` – Form state, edit mode and local list synchronization.
- :mod:`DailyExpenseTracker.core.summary` – Money in / money out totals.
"""
