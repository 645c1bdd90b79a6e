"""View-model tying the form, the session and the local expense list to the remote table.

Each user action results in at most one request to the backend, made
synchronously from the calling slot. The local list only changes after the
backend confirmed the write, with the single exception of the initial fetch
which replaces the whole list.

Edit mode:
    Creating (default) -> Editing: :meth:`ExpenseViewModel.start_editing` copies the
    expense into the form and remembers its id.
    Editing -> Creating: a successful :meth:`ExpenseViewModel.save_edit`, or
    :meth:`ExpenseViewModel.cancel_editing`.
"""
import dataclasses
import enum
import logging
from typing import Any, Dict, List, Optional

from PySide6 import QtCore
from supabase import Client

from .auth import SessionManager, SessionStore, Session
from .repository import Expense, ExpenseRepository, ExpenseType
from .summary import summarize
from ..status import status
from ..ui.actions import signals

LOGIN_MESSAGE: str = 'Logged in successfully!'


class Mode(enum.StrEnum):
    Creating = enum.auto()
    Editing = enum.auto()


SUBMIT_LABELS: Dict[Mode, str] = {
    Mode.Creating: 'Add Expense',
    Mode.Editing: 'Save Edit',
}


@dataclasses.dataclass
class FormState:
    """Transient UI fields. Never persisted."""
    amount: str = ''
    description: str = ''
    type: ExpenseType = ExpenseType.Out
    email: str = ''
    password: str = ''
    message: str = ''
    editing_id: Any = None

    def clear_expense_fields(self) -> None:
        self.amount = ''
        self.description = ''
        self.type = ExpenseType.Out
        self.editing_id = None


class ExpenseViewModel(QtCore.QObject):
    """Holds the expense list and form state and mirrors every change to the backend.

    Args:
        client: The backend client used by both the session manager and the repository.
        store: Durable session storage. Defaults to the session file.
        owner_only: Only list the signed-in user's rows. Read from the settings when None.

    Signals:
        expensesChanged (list): Emitted with a copy of the local list after it changed.
        formChanged (): Emitted when any form field changed programmatically.
        messageChanged (str): Emitted with the new user-facing message.
        modeChanged (str): Emitted with the new :class:`Mode`.
        sessionChanged (object): Emitted with the new :class:`Session` or None.
    """
    expensesChanged = QtCore.Signal(list)
    formChanged = QtCore.Signal()
    messageChanged = QtCore.Signal(str)
    modeChanged = QtCore.Signal(str)
    sessionChanged = QtCore.Signal(object)

    def __init__(self, client: Client, store: Optional[SessionStore] = None,
                 owner_only: Optional[bool] = None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self.client = client
        self.sessions = SessionManager(client, store)
        self.repository = ExpenseRepository(client)

        self.form = FormState()
        self._expenses: List[Expense] = []
        self._owner_only = owner_only

        signals.metadataChanged.connect(self.metadata_changed)

    @property
    def expenses(self) -> List[Expense]:
        return list(self._expenses)

    @property
    def session(self) -> Optional[Session]:
        return self.sessions.session

    @property
    def mode(self) -> Mode:
        return Mode.Editing if self.form.editing_id is not None else Mode.Creating

    @property
    def submit_label(self) -> str:
        return SUBMIT_LABELS[self.mode]

    @property
    def owner_only(self) -> bool:
        if self._owner_only is not None:
            return self._owner_only
        from ..settings import lib
        return bool(lib.settings['owner_only'])

    def summary(self) -> Dict[str, float]:
        return summarize(self._expenses)

    def find(self, expense_id: Any) -> Optional[Expense]:
        return next((e for e in self._expenses if e.id == expense_id), None)

    # Form setters, connected to the input widgets

    @QtCore.Slot(str)
    def set_amount(self, value: str) -> None:
        self.form.amount = value

    @QtCore.Slot(str)
    def set_description(self, value: str) -> None:
        self.form.description = value

    @QtCore.Slot(str)
    def set_type(self, value: str) -> None:
        self.form.type = ExpenseType(value)

    @QtCore.Slot(str)
    def set_email(self, value: str) -> None:
        self.form.email = value

    @QtCore.Slot(str)
    def set_password(self, value: str) -> None:
        self.form.password = value

    def _set_message(self, message: str) -> None:
        self.form.message = message
        self.messageChanged.emit(message)

    def _set_expenses(self, expenses: List[Expense]) -> None:
        self._expenses = expenses
        self.expensesChanged.emit(self.expenses)

    @QtCore.Slot(str, object)
    def metadata_changed(self, key: str, value: object) -> None:
        """Reload the list when the owner filter setting changed."""
        if key != 'owner_only' or self._owner_only is not None:
            return
        self.fetch_expenses()

    # Session

    @QtCore.Slot()
    def initialize(self) -> None:
        """Restore the stored session, then load the list."""
        session = self.sessions.restore_session()
        self.sessionChanged.emit(session)
        self.fetch_expenses()

    @QtCore.Slot()
    def login(self) -> bool:
        """Sign in with the email and password in the form, then reload the list."""
        try:
            session = self.sessions.login(self.form.email, self.form.password)
        except status.AuthenticationFailedException as ex:
            self._set_message(ex.message)
            return False

        self.form.password = ''
        self.formChanged.emit()
        self._set_message(LOGIN_MESSAGE)
        self.sessionChanged.emit(session)
        self.fetch_expenses()
        return True

    @QtCore.Slot()
    def logout(self) -> bool:
        """Sign out, leave Editing, clear the message and reload the list."""
        try:
            self.sessions.logout()
        except status.AuthenticationFailedException as ex:
            self._set_message(ex.message)
            return False

        self.cancel_editing()
        self._set_message('')
        self.sessionChanged.emit(None)
        self.fetch_expenses()
        return True

    # Expenses

    @QtCore.Slot()
    def fetch_expenses(self) -> bool:
        """
        Replace the local list with the remote rows.

        A failed fetch keeps the current list and is not shown to the user.
        """
        owner_id = None
        if self.owner_only:
            owner_id = self.sessions.user_id
            if owner_id is None:
                logging.debug('Listing is limited to the owner, but nobody is signed in.')
                self._set_expenses([])
                return True

        try:
            expenses = self.repository.list(owner_id=owner_id)
        except status.FetchFailedException as ex:
            logging.warning(f'Keeping the current list: {ex.message}')
            return False

        self._set_expenses(expenses)
        return True

    @QtCore.Slot()
    def add_expense(self) -> bool:
        """
        Insert the expense in the form and prepend it to the list.

        Does nothing if the amount or description is empty, or nobody is signed in.
        """
        if not self.form.amount or not self.form.description:
            logging.debug('Amount and description are required, nothing to add.')
            return False
        if self.sessions.user_id is None:
            logging.debug('Not signed in, nothing to add.')
            return False

        try:
            expense = self.repository.create(
                self.form.amount,
                self.form.description,
                self.form.type,
                self.sessions.user_id,
            )
        except status.BaseStatusException as ex:
            self._set_message(ex.message)
            return False

        self._set_expenses([expense] + self._expenses)
        self.form.clear_expense_fields()
        self.formChanged.emit()
        self._set_message('')
        return True

    @QtCore.Slot(object)
    def delete_expense(self, expense_id: Any) -> bool:
        """Delete an expense remotely and, once confirmed, remove it from the list."""
        try:
            self.repository.delete(expense_id)
        except status.WriteFailedException as ex:
            self._set_message(ex.message)
            return False

        index = next((i for i, e in enumerate(self._expenses) if e.id == expense_id), None)
        if index is not None:
            expenses = list(self._expenses)
            del expenses[index]
            self._set_expenses(expenses)

        if self.form.editing_id == expense_id:
            self.cancel_editing()
        return True

    @QtCore.Slot(object)
    def start_editing(self, expense: Expense) -> None:
        """Copy the expense into the form and switch to Editing."""
        self.form.amount = expense.amount
        self.form.description = expense.description
        self.form.type = expense.type
        self.form.editing_id = expense.id
        self.formChanged.emit()
        self.modeChanged.emit(self.mode.value)

    @QtCore.Slot()
    def cancel_editing(self) -> None:
        """Leave Editing without saving."""
        if self.mode != Mode.Editing:
            return
        self.form.clear_expense_fields()
        self.formChanged.emit()
        self.modeChanged.emit(self.mode.value)

    def _rollback_form(self, expense_id: Any) -> None:
        expense = self.find(expense_id)
        if expense is None:
            return
        self.form.amount = expense.amount
        self.form.description = expense.description
        self.form.type = expense.type
        self.formChanged.emit()

    @QtCore.Slot()
    def save_edit(self) -> bool:
        """
        Update the expense being edited and, once confirmed, replace it in the list.

        On failure the list is left as it was, the form is rolled back to the stored
        values and the mode stays Editing.
        """
        if self.mode != Mode.Editing:
            return False
        if not self.form.amount or not self.form.description:
            logging.debug('Amount and description are required, nothing to save.')
            return False

        expense_id = self.form.editing_id
        try:
            updated = self.repository.update(
                expense_id,
                self.form.amount,
                self.form.description,
                self.form.type,
            )
        except status.WriteFailedException as ex:
            self._rollback_form(expense_id)
            self._set_message(ex.message)
            return False

        self._set_expenses([
            dataclasses.replace(
                e, amount=updated.amount, description=updated.description, type=updated.type
            ) if e.id == expense_id else e
            for e in self._expenses
        ])
        self.form.clear_expense_fields()
        self.formChanged.emit()
        self.modeChanged.emit(self.mode.value)
        self._set_message('')
        return True

    @QtCore.Slot()
    def submit(self) -> bool:
        """Add or save, depending on the mode."""
        if self.mode == Mode.Editing:
            return self.save_edit()
        return self.add_expense()
