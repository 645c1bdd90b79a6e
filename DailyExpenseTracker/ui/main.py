"""Main window composition and UI entry points for DailyExpenseTracker.

This module defines:
    - show(): initialize and display the main window
    - LoginWidget: email/password fields, login and logout
    - ExpenseForm: amount, description and type inputs with the submit button
    - ExpenseListWidget: the expense list with edit and delete actions
    - PreferencesWidget: the owner filter and the theme settings
    - MainWindow: the single window composing the above
"""
import logging
from typing import Optional

from PySide6 import QtWidgets, QtCore, QtGui

from . import ui
from .actions import signals
from .model import ExpenseListModel, ExpenseRole
from ..core.repository import ExpenseType
from ..core.viewmodel import ExpenseViewModel, Mode

widget = None

TYPE_LABELS = {
    ExpenseType.Out: 'Money Out',
    ExpenseType.In: 'Money In',
}


def show(viewmodel: ExpenseViewModel) -> 'MainWindow':
    global widget

    if widget is None:
        widget = MainWindow(viewmodel)

    widget.show()
    return widget


def _set_text(editor: QtWidgets.QLineEdit, text: str) -> None:
    if editor.text() == text:
        return
    blocker = QtCore.QSignalBlocker(editor)
    editor.setText(text)
    del blocker


class LoginWidget(QtWidgets.QWidget):
    """Email and password inputs with login and logout buttons."""

    def __init__(self, viewmodel: ExpenseViewModel, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.viewmodel = viewmodel

        self.email_editor = None
        self.password_editor = None
        self.login_button = None
        self.logout_button = None
        self.message_label = None
        self.user_label = None

        self._create_ui()
        self._connect_signals()
        self.update_session(self.viewmodel.session)

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(ui.Size.Spacing())

        self.email_editor = QtWidgets.QLineEdit(parent=self)
        self.email_editor.setPlaceholderText('Email')
        self.layout().addWidget(self.email_editor)

        self.password_editor = QtWidgets.QLineEdit(parent=self)
        self.password_editor.setPlaceholderText('Password')
        self.password_editor.setEchoMode(QtWidgets.QLineEdit.Password)
        self.layout().addWidget(self.password_editor)

        row = QtWidgets.QWidget(parent=self)
        QtWidgets.QHBoxLayout(row)
        row.layout().setContentsMargins(0, 0, 0, 0)
        self.login_button = QtWidgets.QPushButton('Login', parent=row)
        self.logout_button = QtWidgets.QPushButton('Logout', parent=row)
        row.layout().addWidget(self.login_button, 1)
        row.layout().addWidget(self.logout_button, 1)
        self.layout().addWidget(row)

        self.user_label = QtWidgets.QLabel('', parent=self)
        self.user_label.setObjectName('MessageLabel')
        self.layout().addWidget(self.user_label)

        self.message_label = QtWidgets.QLabel('', parent=self)
        self.message_label.setObjectName('MessageLabel')
        self.message_label.setWordWrap(True)
        self.message_label.setVisible(False)
        self.layout().addWidget(self.message_label)

    def _connect_signals(self) -> None:
        self.email_editor.textChanged.connect(self.viewmodel.set_email)
        self.password_editor.textChanged.connect(self.viewmodel.set_password)
        self.password_editor.returnPressed.connect(self.viewmodel.login)
        self.login_button.clicked.connect(self.viewmodel.login)
        self.logout_button.clicked.connect(self.viewmodel.logout)

        self.viewmodel.messageChanged.connect(self.set_message)
        self.viewmodel.sessionChanged.connect(self.update_session)
        self.viewmodel.formChanged.connect(self.update_fields)

    @QtCore.Slot(str)
    def set_message(self, message: str) -> None:
        self.message_label.setText(message)
        self.message_label.setVisible(bool(message))

    @QtCore.Slot(object)
    def update_session(self, session: object) -> None:
        if session is None:
            self.user_label.setText('Not logged in')
            return
        self.user_label.setText(f'Logged in as {session.email or session.user_id}')

    @QtCore.Slot()
    def update_fields(self) -> None:
        _set_text(self.email_editor, self.viewmodel.form.email)
        _set_text(self.password_editor, self.viewmodel.form.password)


class ExpenseForm(QtWidgets.QWidget):
    """Amount, description and type inputs with the add / save button."""

    def __init__(self, viewmodel: ExpenseViewModel, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.viewmodel = viewmodel

        self.amount_editor = None
        self.description_editor = None
        self.type_editor = None
        self.submit_button = None
        self.cancel_button = None

        self._create_ui()
        self._connect_signals()
        self.update_mode()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(ui.Size.Spacing())

        self.amount_editor = QtWidgets.QLineEdit(parent=self)
        self.amount_editor.setPlaceholderText('Amount')
        validator = QtGui.QDoubleValidator(parent=self.amount_editor)
        validator.setNotation(QtGui.QDoubleValidator.StandardNotation)
        validator.setLocale(QtCore.QLocale.c())
        self.amount_editor.setValidator(validator)
        self.layout().addWidget(self.amount_editor)

        self.description_editor = QtWidgets.QLineEdit(parent=self)
        self.description_editor.setPlaceholderText('Description')
        self.layout().addWidget(self.description_editor)

        self.type_editor = QtWidgets.QComboBox(parent=self)
        for _type in (ExpenseType.Out, ExpenseType.In):
            self.type_editor.addItem(TYPE_LABELS[_type], userData=_type.value)
        self.layout().addWidget(self.type_editor)

        self.submit_button = QtWidgets.QPushButton(parent=self)
        self.submit_button.setObjectName('SubmitButton')
        self.layout().addWidget(self.submit_button)

        self.cancel_button = QtWidgets.QPushButton('Cancel', parent=self)
        self.layout().addWidget(self.cancel_button)

    def _connect_signals(self) -> None:
        self.amount_editor.textChanged.connect(self.viewmodel.set_amount)
        self.description_editor.textChanged.connect(self.viewmodel.set_description)
        self.description_editor.returnPressed.connect(self.viewmodel.submit)
        self.type_editor.currentIndexChanged.connect(
            lambda idx: self.viewmodel.set_type(self.type_editor.itemData(idx))
        )
        self.submit_button.clicked.connect(self.viewmodel.submit)
        self.cancel_button.clicked.connect(self.viewmodel.cancel_editing)

        self.viewmodel.formChanged.connect(self.update_fields)
        self.viewmodel.modeChanged.connect(self.update_mode)

    @QtCore.Slot()
    def update_fields(self) -> None:
        form = self.viewmodel.form
        _set_text(self.amount_editor, form.amount)
        _set_text(self.description_editor, form.description)

        idx = self.type_editor.findData(ExpenseType(form.type).value)
        if idx != self.type_editor.currentIndex():
            blocker = QtCore.QSignalBlocker(self.type_editor)
            self.type_editor.setCurrentIndex(idx)
            del blocker

    def update_mode(self, *args) -> None:
        editing = self.viewmodel.mode == Mode.Editing
        self.submit_button.setText(self.viewmodel.submit_label)
        self.submit_button.setProperty('editing', editing)
        self.submit_button.style().unpolish(self.submit_button)
        self.submit_button.style().polish(self.submit_button)
        self.cancel_button.setVisible(editing)


class ExpenseListWidget(QtWidgets.QWidget):
    """The expense list with edit and delete actions on the selected row."""

    def __init__(self, viewmodel: ExpenseViewModel, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.viewmodel = viewmodel

        self.model = None
        self.view = None
        self.edit_button = None
        self.delete_button = None
        self.summary_label = None

        self._create_ui()
        self._init_actions()
        self._connect_signals()

        self.model.init_data(self.viewmodel.expenses)
        self.update_summary()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(ui.Size.Spacing())

        self.model = ExpenseListModel(parent=self)
        self.view = QtWidgets.QListView(parent=self)
        self.view.setModel(self.model)
        self.view.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.view.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.view.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        self.layout().addWidget(self.view, 1)

        row = QtWidgets.QWidget(parent=self)
        QtWidgets.QHBoxLayout(row)
        row.layout().setContentsMargins(0, 0, 0, 0)
        self.edit_button = QtWidgets.QPushButton('Edit', parent=row)
        self.delete_button = QtWidgets.QPushButton('Delete', parent=row)
        row.layout().addWidget(self.edit_button, 1)
        row.layout().addWidget(self.delete_button, 1)
        self.layout().addWidget(row)

        self.summary_label = QtWidgets.QLabel('', parent=self)
        self.summary_label.setObjectName('SummaryLabel')
        self.layout().addWidget(self.summary_label)

    def _init_actions(self) -> None:
        action = QtGui.QAction('Edit', self.view)
        action.triggered.connect(self.edit_selected)
        self.view.addAction(action)

        action = QtGui.QAction('Delete', self.view)
        action.setShortcut(QtGui.QKeySequence.Delete)
        action.setShortcutContext(QtCore.Qt.WidgetWithChildrenShortcut)
        action.triggered.connect(self.delete_selected)
        self.view.addAction(action)

    def _connect_signals(self) -> None:
        self.viewmodel.expensesChanged.connect(self.model.init_data)
        self.viewmodel.expensesChanged.connect(self.update_summary)

        self.view.doubleClicked.connect(self.edit_selected)
        self.edit_button.clicked.connect(self.edit_selected)
        self.delete_button.clicked.connect(self.delete_selected)

    def selected_expense(self):
        index = self.view.selectionModel().currentIndex()
        if not index.isValid():
            return None
        return index.data(ExpenseRole.Expense)

    def edit_selected(self, *args) -> None:
        expense = self.selected_expense()
        if expense is None:
            logging.debug('No expense selected, nothing to edit.')
            return
        self.viewmodel.start_editing(expense)

    def delete_selected(self, *args) -> None:
        expense = self.selected_expense()
        if expense is None:
            logging.debug('No expense selected, nothing to delete.')
            return
        self.viewmodel.delete_expense(expense.id)

    def update_summary(self, *args) -> None:
        summary = self.viewmodel.summary()
        self.summary_label.setText(
            f'In ${summary["total_in"]:,.2f}   '
            f'Out ${summary["total_out"]:,.2f}   '
            f'Balance ${summary["balance"]:,.2f}'
        )


class PreferencesWidget(QtWidgets.QWidget):
    """The owner filter and the theme, read from and written to the metadata settings."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.owner_only_editor = None
        self.theme_editor = None
        self.reset_button = None

        self._create_ui()
        self._connect_signals()
        self.init_data()

    def _create_ui(self) -> None:
        QtWidgets.QHBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(ui.Size.Spacing())

        self.owner_only_editor = QtWidgets.QCheckBox('Only my expenses', parent=self)
        self.layout().addWidget(self.owner_only_editor, 1)

        self.theme_editor = QtWidgets.QComboBox(parent=self)
        for theme in ui.Theme:
            self.theme_editor.addItem(theme.value.title(), userData=theme.value)
        self.layout().addWidget(self.theme_editor)

        self.reset_button = QtWidgets.QPushButton('Reset', parent=self)
        self.layout().addWidget(self.reset_button)

    def _connect_signals(self) -> None:
        self.owner_only_editor.toggled.connect(self.save_owner_only)
        self.theme_editor.currentIndexChanged.connect(self.save_theme)
        self.reset_button.clicked.connect(self.reset)

        signals.metadataChanged.connect(self.metadata_changed)
        signals.configSectionChanged.connect(self.section_changed)

    @QtCore.Slot()
    def init_data(self) -> None:
        from ..settings import lib

        blocker = QtCore.QSignalBlocker(self.owner_only_editor)
        self.owner_only_editor.setChecked(bool(lib.settings['owner_only']))
        del blocker

        idx = self.theme_editor.findData(lib.settings['theme'])
        blocker = QtCore.QSignalBlocker(self.theme_editor)
        self.theme_editor.setCurrentIndex(max(idx, 0))
        del blocker

    @QtCore.Slot(str, object)
    def metadata_changed(self, key: str, value: object) -> None:
        if key in ('owner_only', 'theme'):
            self.init_data()

    @QtCore.Slot(str)
    def section_changed(self, section: str) -> None:
        if section == 'metadata':
            self.init_data()

    @QtCore.Slot(bool)
    def save_owner_only(self, checked: bool) -> None:
        from ..settings import lib
        lib.settings['owner_only'] = bool(checked)

    @QtCore.Slot(int)
    def save_theme(self, index: int) -> None:
        value = self.theme_editor.itemData(index)
        if not value:
            return
        from ..settings import lib
        lib.settings['theme'] = value

    @QtCore.Slot()
    def reset(self) -> None:
        from ..settings import lib
        lib.settings.revert_section('metadata')


class MainWindow(QtWidgets.QWidget):
    """The single application window."""

    def __init__(self, viewmodel: ExpenseViewModel, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.viewmodel = viewmodel

        self.setWindowTitle('Daily Expense Tracker')
        self.resize(ui.Size.WindowWidth(), ui.Size.WindowHeight())

        self.login_widget = None
        self.preferences = None
        self.expense_form = None
        self.expense_list = None

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin()
        self.layout().setContentsMargins(o, o, o, o)
        self.layout().setSpacing(ui.Size.Margin(0.5))

        label = QtWidgets.QLabel('Daily Expense Tracker', parent=self)
        label.setObjectName('TitleLabel')
        label.setAlignment(QtCore.Qt.AlignCenter)
        self.layout().addWidget(label)

        self.login_widget = LoginWidget(self.viewmodel, parent=self)
        self.layout().addWidget(self.login_widget)

        self.preferences = PreferencesWidget(parent=self)
        self.layout().addWidget(self.preferences)

        self.expense_form = ExpenseForm(self.viewmodel, parent=self)
        self.layout().addWidget(self.expense_form)

        self.expense_list = ExpenseListWidget(self.viewmodel, parent=self)
        self.layout().addWidget(self.expense_list, 1)

    def _connect_signals(self) -> None:
        signals.initializationRequested.connect(self.viewmodel.initialize)
