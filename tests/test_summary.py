import unittest

from DailyExpenseTracker.core.repository import Expense, ExpenseType
from DailyExpenseTracker.core.summary import summarize, to_dataframe


class SummaryTests(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(summarize([]), {'total_in': 0.0, 'total_out': 0.0, 'balance': 0.0, 'count': 0})

    def test_totals(self):
        expenses = [
            Expense(1, '12.50', 'Coffee', ExpenseType.Out),
            Expense(2, '100', 'Salary', ExpenseType.In),
            Expense(3, '7.5', 'Lunch', ExpenseType.Out),
        ]
        summary = summarize(expenses)
        self.assertAlmostEqual(summary['total_in'], 100.0)
        self.assertAlmostEqual(summary['total_out'], 20.0)
        self.assertAlmostEqual(summary['balance'], 80.0)
        self.assertEqual(summary['count'], 3)

    def test_only_one_direction(self):
        summary = summarize([Expense(1, '3', 'Bus', ExpenseType.Out)])
        self.assertEqual(summary['total_in'], 0.0)
        self.assertEqual(summary['balance'], -3.0)

    def test_unparsable_amount_counts_as_zero(self):
        expenses = [
            Expense(1, 'a lot', 'Mystery', ExpenseType.Out),
            Expense(2, '2', 'Tea', ExpenseType.Out),
        ]
        summary = summarize(expenses)
        self.assertEqual(summary['total_out'], 2.0)
        self.assertEqual(summary['count'], 2)

    def test_dataframe_columns(self):
        df = to_dataframe([Expense(1, '2.25', 'Tea', ExpenseType.Out, 'u')])
        self.assertEqual(list(df.columns), ['id', 'amount', 'description', 'type', 'user_id', 'value'])
        self.assertEqual(df['value'].iloc[0], 2.25)


if __name__ == '__main__':
    unittest.main()
