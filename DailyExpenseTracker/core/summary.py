"""Money in / money out totals over a list of expenses."""
from typing import Dict, Iterable

import pandas as pd

from .repository import COLUMNS, Expense, ExpenseType


def to_dataframe(expenses: Iterable[Expense]) -> pd.DataFrame:
    """Convert expenses to a DataFrame with a numeric ``value`` column.

    Amount text that does not parse as a number becomes 0.
    """
    df = pd.DataFrame([e.to_row() for e in expenses], columns=COLUMNS)
    df['value'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0.0).astype(float)
    return df


def summarize(expenses: Iterable[Expense]) -> Dict[str, float]:
    """
    Sum the expenses per direction.

    Returns:
        dict: total_in, total_out, balance (total_in - total_out) and count.
    """
    df = to_dataframe(expenses)
    totals = df.groupby('type')['value'].sum()

    total_in = float(totals.get(ExpenseType.In.value, 0.0))
    total_out = float(totals.get(ExpenseType.Out.value, 0.0))
    return {
        'total_in': total_in,
        'total_out': total_out,
        'balance': total_in - total_out,
        'count': int(len(df)),
    }
