import unittest

from DailyExpenseTracker.core import auth
from DailyExpenseTracker.core.repository import Expense, ExpenseType
from DailyExpenseTracker.core.viewmodel import ExpenseViewModel, FormState, LOGIN_MESSAGE, Mode
from DailyExpenseTracker.settings import lib
from DailyExpenseTracker.ui.actions import signals
from tests.base import BaseClientTestCase, FakeAuthError, mute_ui_signals, table_error


class SignalRecorder:
    """Collects the emissions of the view-model's signals."""

    def __init__(self, viewmodel: ExpenseViewModel) -> None:
        self.expenses = []
        self.messages = []
        self.modes = []
        self.sessions = []
        self.forms = 0

        viewmodel.expensesChanged.connect(self.expenses.append)
        viewmodel.messageChanged.connect(self.messages.append)
        viewmodel.modeChanged.connect(self.modes.append)
        viewmodel.sessionChanged.connect(self.sessions.append)
        viewmodel.formChanged.connect(self._form_changed)

    def _form_changed(self):
        self.forms += 1


class FormStateTests(unittest.TestCase):
    def test_clear_expense_fields_keeps_credentials(self):
        form = FormState('1', 'x', ExpenseType.In, 'a@b.com', 'pw', 'hello', 5)
        form.clear_expense_fields()
        self.assertEqual((form.amount, form.description, form.type, form.editing_id), ('', '', ExpenseType.Out, None))
        self.assertEqual((form.email, form.password, form.message), ('a@b.com', 'pw', 'hello'))


class BaseViewModelTestCase(BaseClientTestCase):
    owner_only = False

    def setUp(self) -> None:
        super().setUp()
        self.store = auth.MemorySessionStore()
        self.viewmodel = ExpenseViewModel(self.client, self.store, owner_only=self.owner_only)
        self.addCleanup(signals.metadataChanged.disconnect, self.viewmodel.metadata_changed)
        self.recorder = SignalRecorder(self.viewmodel)

    def login(self) -> None:
        self.viewmodel.set_email(self.email)
        self.viewmodel.set_password(self.password)
        self.assertTrue(self.viewmodel.login())

    def fill(self, amount: str, description: str, _type: str = 'out') -> None:
        self.viewmodel.set_amount(amount)
        self.viewmodel.set_description(description)
        self.viewmodel.set_type(_type)


class InitialStateTests(BaseViewModelTestCase):
    def test_initial_state(self):
        self.assertEqual(self.viewmodel.expenses, [])
        self.assertIsNone(self.viewmodel.session)
        self.assertEqual(self.viewmodel.mode, Mode.Creating)
        self.assertEqual(self.viewmodel.submit_label, 'Add Expense')
        self.assertEqual(self.viewmodel.form.message, '')

    def test_expenses_returns_copy(self):
        self.viewmodel.fetch_expenses()
        self.viewmodel.expenses.clear()
        self.assertEqual(len(self.viewmodel.expenses), 3)

    def test_owner_only_from_settings(self):
        viewmodel = ExpenseViewModel(self.client, self.store)
        self.addCleanup(signals.metadataChanged.disconnect, viewmodel.metadata_changed)
        self.assertFalse(viewmodel.owner_only)
        with mute_ui_signals():
            lib.settings['owner_only'] = True
        self.assertTrue(viewmodel.owner_only)

    def test_owner_only_setting_reloads_list(self):
        viewmodel = ExpenseViewModel(self.client, self.store)
        self.addCleanup(signals.metadataChanged.disconnect, viewmodel.metadata_changed)
        viewmodel.set_email(self.email)
        viewmodel.set_password(self.password)
        viewmodel.login()
        self.assertEqual(len(viewmodel.expenses), 3)

        lib.settings['owner_only'] = True
        self.assertEqual([e.id for e in viewmodel.expenses], [1, 2])
        self.assertEqual(self.client.requests[-1][3], [('user_id', self.user_id)])

        lib.settings['owner_only'] = False
        self.assertEqual(len(viewmodel.expenses), 3)

    def test_owner_only_setting_ignored_when_fixed(self):
        self.viewmodel.fetch_expenses()
        count = len(self.client.requests)
        lib.settings['owner_only'] = True
        self.assertEqual(len(self.client.requests), count)
        self.assertEqual(len(self.viewmodel.expenses), 3)


class SessionTests(BaseViewModelTestCase):
    def test_initialize_without_session(self):
        self.viewmodel.initialize()
        self.assertEqual(self.recorder.sessions, [None])
        self.assertEqual(len(self.viewmodel.expenses), 3)

    def test_initialize_restores_session(self):
        self.login()
        viewmodel = ExpenseViewModel(self.client, self.store, owner_only=False)
        recorder = SignalRecorder(viewmodel)

        viewmodel.initialize()
        self.assertEqual(viewmodel.session.user_id, self.user_id)
        self.assertEqual(recorder.sessions[0].user_id, self.user_id)

    def test_login(self):
        self.login()
        self.assertEqual(self.viewmodel.session.user_id, self.user_id)
        self.assertEqual(self.viewmodel.form.message, LOGIN_MESSAGE)
        self.assertEqual(self.recorder.messages, [LOGIN_MESSAGE])
        self.assertEqual(self.viewmodel.form.password, '')
        self.assertEqual(self.viewmodel.form.email, self.email)
        self.assertEqual(self.store.get()['user_id'], self.user_id)
        self.assertEqual(self.client.ops(), ['select'])

    def test_login_failure_shows_backend_message(self):
        self.viewmodel.set_email(self.email)
        self.viewmodel.set_password('wrong')
        self.assertFalse(self.viewmodel.login())

        self.assertIsNone(self.viewmodel.session)
        self.assertEqual(self.viewmodel.form.message, 'Invalid login credentials')
        self.assertEqual(self.recorder.sessions, [])
        self.assertEqual(self.client.ops(), [])

    def test_logout(self):
        self.login()
        self.assertTrue(self.viewmodel.logout())
        self.assertIsNone(self.viewmodel.session)
        self.assertEqual(self.viewmodel.form.message, '')
        self.assertEqual(self.recorder.sessions[-1], None)
        self.assertIsNone(self.store.get())
        self.assertEqual(self.client.ops(), ['select', 'select'])

    def test_logout_leaves_editing(self):
        self.login()
        self.viewmodel.start_editing(self.viewmodel.find(1))
        self.assertTrue(self.viewmodel.logout())

        self.assertEqual(self.viewmodel.mode, Mode.Creating)
        self.assertEqual(self.viewmodel.submit_label, 'Add Expense')
        self.assertIsNone(self.viewmodel.form.editing_id)
        self.assertEqual(self.viewmodel.form.description, '')
        self.assertEqual(self.recorder.modes, ['editing', 'creating'])

    def test_logout_failure_keeps_editing(self):
        self.login()
        self.viewmodel.start_editing(self.viewmodel.find(1))
        self.client.auth.sign_out_error = FakeAuthError('Network request failed')
        self.assertFalse(self.viewmodel.logout())
        self.assertEqual(self.viewmodel.mode, Mode.Editing)

    def test_logout_failure(self):
        self.login()
        self.client.auth.sign_out_error = FakeAuthError('Network request failed')
        self.assertFalse(self.viewmodel.logout())
        self.assertEqual(self.viewmodel.session.user_id, self.user_id)
        self.assertEqual(self.viewmodel.form.message, 'Network request failed')


class FetchTests(BaseViewModelTestCase):
    def test_fetch_lists_every_row(self):
        self.assertTrue(self.viewmodel.fetch_expenses())
        self.assertEqual([e.description for e in self.viewmodel.expenses], ['Bus ticket', 'Salary', 'Lunch'])
        self.assertEqual(len(self.recorder.expenses[-1]), 3)

    def test_fetch_failure_keeps_list(self):
        self.viewmodel.fetch_expenses()
        self.client.errors['select'] = table_error()

        self.assertFalse(self.viewmodel.fetch_expenses())
        self.assertEqual(len(self.viewmodel.expenses), 3)
        self.assertEqual(self.viewmodel.form.message, '')

    def test_summary(self):
        self.viewmodel.fetch_expenses()
        summary = self.viewmodel.summary()
        self.assertEqual(summary['total_in'], 1500.0)
        self.assertAlmostEqual(summary['total_out'], 10.2)
        self.assertEqual(summary['count'], 3)


class OwnerOnlyFetchTests(BaseViewModelTestCase):
    owner_only = True

    def test_nobody_signed_in(self):
        self.assertTrue(self.viewmodel.fetch_expenses())
        self.assertEqual(self.viewmodel.expenses, [])
        self.assertEqual(self.client.requests, [])

    def test_only_own_rows(self):
        self.login()
        self.assertEqual([e.description for e in self.viewmodel.expenses], ['Bus ticket', 'Salary'])
        self.assertEqual(self.client.requests[-1][3], [('user_id', self.user_id)])

    def test_logout_clears_list(self):
        self.login()
        self.viewmodel.logout()
        self.assertEqual(self.viewmodel.expenses, [])


class AddExpenseTests(BaseViewModelTestCase):
    def test_login_then_add(self):
        self.viewmodel.fetch_expenses()
        self.login()
        previous = self.viewmodel.expenses

        self.fill('12.50', 'Coffee', 'out')
        self.assertTrue(self.viewmodel.submit())

        expenses = self.viewmodel.expenses
        self.assertEqual(len(expenses), len(previous) + 1)
        self.assertEqual(expenses[1:], previous)

        created = expenses[0]
        self.assertEqual(created.id, 4)
        self.assertEqual(created.amount, '12.50')
        self.assertEqual(created.description, 'Coffee')
        self.assertEqual(created.type, ExpenseType.Out)
        self.assertEqual(created.user_id, self.user_id)

        self.assertEqual(self.viewmodel.form.amount, '')
        self.assertEqual(self.viewmodel.form.description, '')
        self.assertEqual(self.viewmodel.form.type, ExpenseType.Out)
        self.assertEqual(self.viewmodel.form.message, '')

    def test_add_money_in(self):
        self.login()
        self.fill('20', 'Refund', 'in')
        self.viewmodel.add_expense()
        self.assertEqual(self.viewmodel.expenses[0].type, ExpenseType.In)
        self.assertEqual(self.client.tables['expenses'][-1]['type'], 'in')

    def test_empty_fields_do_nothing(self):
        self.login()
        requests = len(self.client.requests)

        self.fill('', 'Coffee')
        self.assertFalse(self.viewmodel.add_expense())
        self.fill('12.50', '')
        self.assertFalse(self.viewmodel.add_expense())

        self.assertEqual(len(self.client.requests), requests)
        self.assertEqual(self.viewmodel.form.amount, '12.50')

    def test_not_signed_in_does_nothing(self):
        self.fill('12.50', 'Coffee')
        self.assertFalse(self.viewmodel.add_expense())
        self.assertEqual(self.client.requests, [])
        self.assertEqual(self.viewmodel.form.description, 'Coffee')

    def test_insert_failure_keeps_form(self):
        self.login()
        before = self.viewmodel.expenses
        self.client.errors['insert'] = table_error('new row violates row-level security policy')

        self.fill('12.50', 'Coffee')
        self.assertFalse(self.viewmodel.add_expense())
        self.assertEqual(self.viewmodel.expenses, before)
        self.assertEqual(self.viewmodel.form.description, 'Coffee')
        self.assertEqual(self.viewmodel.form.message, 'new row violates row-level security policy')


class DeleteExpenseTests(BaseViewModelTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login()

    def test_delete(self):
        self.assertTrue(self.viewmodel.delete_expense(2))
        self.assertEqual([e.id for e in self.viewmodel.expenses], [1, 3])
        self.assertEqual(self.client.requests[-1][1:], ('delete', None, [('id', 2)]))

    def test_delete_failure_keeps_record(self):
        self.client.errors['delete'] = table_error()
        self.assertFalse(self.viewmodel.delete_expense(2))
        self.assertEqual([e.id for e in self.viewmodel.expenses], [1, 2, 3])
        self.assertEqual(self.viewmodel.form.message, 'permission denied for table expenses')

    def test_delete_unknown_row(self):
        self.assertFalse(self.viewmodel.delete_expense(99))
        self.assertEqual(len(self.viewmodel.expenses), 3)

    def test_delete_record_being_edited(self):
        self.viewmodel.start_editing(self.viewmodel.find(2))
        self.assertTrue(self.viewmodel.delete_expense(2))
        self.assertEqual(self.viewmodel.mode, Mode.Creating)
        self.assertEqual(self.viewmodel.form.amount, '')

    def test_delete_other_record_while_editing(self):
        self.viewmodel.start_editing(self.viewmodel.find(2))
        self.viewmodel.delete_expense(1)
        self.assertEqual(self.viewmodel.mode, Mode.Editing)
        self.assertEqual(self.viewmodel.form.editing_id, 2)


class EditModeTests(BaseViewModelTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login()
        self.expense = self.viewmodel.find(1)

    def test_start_editing(self):
        self.viewmodel.start_editing(self.expense)
        self.assertEqual(self.viewmodel.mode, Mode.Editing)
        self.assertEqual(self.viewmodel.submit_label, 'Save Edit')
        self.assertEqual(self.viewmodel.form.amount, '3.20')
        self.assertEqual(self.viewmodel.form.description, 'Bus ticket')
        self.assertEqual(self.viewmodel.form.type, ExpenseType.Out)
        self.assertEqual(self.recorder.modes, ['editing'])

    def test_save_edit(self):
        self.viewmodel.start_editing(self.expense)
        self.fill('4.00', 'Bus pass', 'out')
        self.assertTrue(self.viewmodel.submit())

        updated = self.viewmodel.find(1)
        self.assertEqual((updated.amount, updated.description), ('4.00', 'Bus pass'))
        self.assertEqual(updated.user_id, self.user_id)
        self.assertEqual([e.id for e in self.viewmodel.expenses], [1, 2, 3])
        self.assertEqual(self.client.tables['expenses'][0]['description'], 'Bus pass')

        self.assertEqual(self.viewmodel.mode, Mode.Creating)
        self.assertEqual(self.viewmodel.submit_label, 'Add Expense')
        self.assertEqual(self.viewmodel.form.amount, '')
        self.assertEqual(self.recorder.modes, ['editing', 'creating'])

    def test_save_edit_does_not_insert(self):
        self.viewmodel.start_editing(self.expense)
        self.fill('4.00', 'Bus pass')
        self.viewmodel.submit()
        self.assertNotIn('insert', self.client.ops())
        self.assertEqual(len(self.viewmodel.expenses), 3)

    def test_save_edit_failure_rolls_back_form(self):
        self.viewmodel.start_editing(self.expense)
        self.fill('4.00', 'Bus pass', 'in')
        self.client.errors['update'] = table_error()

        self.assertFalse(self.viewmodel.save_edit())
        self.assertEqual(self.viewmodel.mode, Mode.Editing)
        self.assertEqual(self.viewmodel.form.editing_id, 1)
        self.assertEqual(self.viewmodel.form.amount, '3.20')
        self.assertEqual(self.viewmodel.form.description, 'Bus ticket')
        self.assertEqual(self.viewmodel.form.type, ExpenseType.Out)
        self.assertEqual(self.viewmodel.find(1), self.expense)
        self.assertEqual(self.viewmodel.form.message, 'permission denied for table expenses')

    def test_save_edit_requires_fields(self):
        self.viewmodel.start_editing(self.expense)
        self.fill('', 'Bus pass')
        self.assertFalse(self.viewmodel.save_edit())
        self.assertNotIn('update', self.client.ops())
        self.assertEqual(self.viewmodel.mode, Mode.Editing)

    def test_save_edit_outside_editing(self):
        self.fill('1', 'x')
        self.assertFalse(self.viewmodel.save_edit())
        self.assertNotIn('update', self.client.ops())

    def test_cancel_editing(self):
        self.viewmodel.start_editing(self.expense)
        self.viewmodel.cancel_editing()
        self.assertEqual(self.viewmodel.mode, Mode.Creating)
        self.assertEqual(self.viewmodel.form.description, '')
        self.assertEqual(self.viewmodel.find(1), self.expense)

    def test_cancel_when_not_editing(self):
        self.viewmodel.cancel_editing()
        self.assertEqual(self.recorder.modes, [])

    def test_edit_another_record(self):
        self.viewmodel.start_editing(self.expense)
        self.viewmodel.start_editing(self.viewmodel.find(2))
        self.assertEqual(self.viewmodel.form.editing_id, 2)
        self.assertEqual(self.viewmodel.form.description, 'Salary')
        self.assertEqual(self.viewmodel.form.type, ExpenseType.In)


if __name__ == '__main__':
    unittest.main()
