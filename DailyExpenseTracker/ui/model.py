import enum
import logging
from typing import Any, List, Optional

from PySide6 import QtCore

from ..core.repository import Expense, ExpenseType


class ExpenseRole(enum.IntEnum):
    Expense = QtCore.Qt.UserRole + 1
    Id = QtCore.Qt.UserRole + 2


MARKERS = {
    ExpenseType.Out: '🔴',
    ExpenseType.In: '🟢',
}


class ExpenseListModel(QtCore.QAbstractListModel):
    """
    Displays the view-model's expense list, one row per expense.
    The model is reset whenever the view-model emits expensesChanged.
    """

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._data: List[Expense] = []

    @QtCore.Slot(list)
    def init_data(self, data: list) -> None:
        self.beginResetModel()
        try:
            self._data = list(data or [])
        finally:
            self.endResetModel()
        logging.debug(f'Expense list model reset with {len(self._data)} row(s).')

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._data)

    def expense(self, row: int) -> Optional[Expense]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid():
            return None
        expense = self.expense(index.row())
        if expense is None:
            return None

        if role == QtCore.Qt.DisplayRole:
            return f'{MARKERS[expense.type]}  {expense.display_text()}'
        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            return 'Money In' if expense.type == ExpenseType.In else 'Money Out'
        if role == ExpenseRole.Expense:
            return expense
        if role == ExpenseRole.Id:
            return expense.id
        return None
