"""Test suite for DailyExpenseTracker.

Qt runs offscreen and QStandardPaths is switched to test mode before any
package module is imported, so the settings and session files never touch the
user's real application data.
"""
import os

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from PySide6 import QtCore

QtCore.QStandardPaths.setTestModeEnabled(True)
