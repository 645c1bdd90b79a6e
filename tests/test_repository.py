import unittest

import httpx

from DailyExpenseTracker.core.repository import Expense, ExpenseRepository, ExpenseType
from DailyExpenseTracker.status import status
from tests.base import BaseClientTestCase, table_error


class ExpenseModelTests(unittest.TestCase):
    def test_from_row(self):
        expense = Expense.from_row({'id': 4, 'amount': 12.5, 'description': 'Coffee', 'type': 'out', 'user_id': 'u'})
        self.assertEqual(expense.id, 4)
        self.assertEqual(expense.amount, '12.5')
        self.assertEqual(expense.type, ExpenseType.Out)
        self.assertEqual(expense.user_id, 'u')

    def test_from_row_missing_values(self):
        expense = Expense.from_row({'id': 1, 'amount': None, 'description': None, 'type': None})
        self.assertEqual(expense.amount, '')
        self.assertEqual(expense.description, '')
        self.assertEqual(expense.type, ExpenseType.Out)
        self.assertIsNone(expense.user_id)

    def test_from_row_unknown_type(self):
        expense = Expense.from_row({'id': 1, 'amount': '1', 'description': 'x', 'type': 'sideways'})
        self.assertEqual(expense.type, ExpenseType.Out)

    def test_display_text(self):
        expense = Expense(1, '12.50', 'Coffee', ExpenseType.Out)
        self.assertEqual(expense.display_text(), 'Coffee - $12.50')

    def test_to_row(self):
        row = Expense(1, '12.50', 'Coffee', ExpenseType.In, 'u').to_row()
        self.assertEqual(row, {'id': 1, 'amount': '12.50', 'description': 'Coffee', 'type': 'in', 'user_id': 'u'})


class ExpenseRepositoryTests(BaseClientTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repository = ExpenseRepository(self.client)

    def test_list_all_rows(self):
        expenses = self.repository.list()
        self.assertEqual([e.description for e in expenses], ['Bus ticket', 'Salary', 'Lunch'])
        self.assertEqual(self.client.requests[-1][3], [])

    def test_list_for_owner(self):
        expenses = self.repository.list(owner_id=self.user_id)
        self.assertEqual([e.description for e in expenses], ['Bus ticket', 'Salary'])
        self.assertEqual(self.client.requests[-1][3], [('user_id', self.user_id)])

    def test_list_failure(self):
        self.client.errors['select'] = table_error()
        with self.assertRaises(status.FetchFailedException) as cm:
            self.repository.list()
        self.assertEqual(cm.exception.message, 'permission denied for table expenses')

    def test_list_network_failure(self):
        self.client.errors['select'] = httpx.ConnectError('Connection refused')
        with self.assertRaises(status.FetchFailedException):
            self.repository.list()

    def test_create(self):
        expense = self.repository.create('12.50', 'Coffee', ExpenseType.Out, self.user_id)
        self.assertIsNotNone(expense.id)
        self.assertEqual(expense.amount, '12.50')
        self.assertEqual(expense.description, 'Coffee')
        self.assertEqual(expense.user_id, self.user_id)

        table, op, payload, _ = self.client.requests[-1]
        self.assertEqual((table, op), ('expenses', 'insert'))
        self.assertEqual(payload, [{'amount': '12.50', 'description': 'Coffee', 'type': 'out', 'user_id': self.user_id}])

    def test_create_accepts_plain_type(self):
        expense = self.repository.create('5', 'Gift', 'in', self.user_id)
        self.assertEqual(expense.type, ExpenseType.In)

    def test_create_requires_fields(self):
        with self.assertRaises(ValueError):
            self.repository.create('', 'Coffee', ExpenseType.Out, self.user_id)
        with self.assertRaises(ValueError):
            self.repository.create('1', '', ExpenseType.Out, self.user_id)
        self.assertEqual(self.client.requests, [])

    def test_create_requires_owner(self):
        with self.assertRaises(status.NotAuthenticatedException):
            self.repository.create('1', 'Coffee', ExpenseType.Out, None)
        self.assertEqual(self.client.requests, [])

    def test_create_failure(self):
        self.client.errors['insert'] = table_error('new row violates row-level security policy')
        with self.assertRaises(status.WriteFailedException) as cm:
            self.repository.create('1', 'Coffee', ExpenseType.Out, self.user_id)
        self.assertEqual(cm.exception.message, 'new row violates row-level security policy')

    def test_update(self):
        expense = self.repository.update(1, '4.00', 'Bus pass', ExpenseType.Out)
        self.assertEqual(expense.id, 1)
        self.assertEqual(expense.amount, '4.00')
        self.assertEqual(expense.description, 'Bus pass')
        self.assertEqual(self.client.tables['expenses'][0]['description'], 'Bus pass')
        self.assertEqual(self.client.requests[-1][3], [('id', 1)])

    def test_update_missing_row(self):
        with self.assertRaises(status.WriteFailedException):
            self.repository.update(99, '1', 'x', ExpenseType.Out)

    def test_update_failure(self):
        self.client.errors['update'] = table_error()
        with self.assertRaises(status.WriteFailedException):
            self.repository.update(1, '1', 'x', ExpenseType.Out)
        self.assertEqual(self.client.tables['expenses'][0]['description'], 'Bus ticket')

    def test_delete(self):
        self.repository.delete(2)
        self.assertEqual([r['id'] for r in self.client.tables['expenses']], [1, 3])

    def test_delete_missing_row(self):
        with self.assertRaises(status.WriteFailedException):
            self.repository.delete(99)

    def test_delete_failure(self):
        self.client.errors['delete'] = httpx.ReadTimeout('timed out')
        with self.assertRaises(status.WriteFailedException):
            self.repository.delete(2)
        self.assertEqual(len(self.client.tables['expenses']), 3)


if __name__ == '__main__':
    unittest.main()
