"""Expense model and remote table operations.

Every operation of :class:`ExpenseRepository` is exactly one request against
the ``expenses`` table. Nothing is cached here, the local list lives in the
view-model.
"""
import dataclasses
import enum
import logging
from typing import Any, Dict, List, Optional

import httpx
from supabase import Client, PostgrestAPIError

from .service import error_message
from ..settings import lib
from ..status import status

COLUMNS: List[str] = ['id', 'amount', 'description', 'type', 'user_id']


class ExpenseType(enum.StrEnum):
    """Direction of the money."""
    In = 'in'
    Out = 'out'


def _to_text(value: Any) -> str:
    if value is None:
        return ''
    return f'{value}'


@dataclasses.dataclass
class Expense:
    """One row of the expenses table."""
    id: Any
    amount: str
    description: str
    type: ExpenseType = ExpenseType.Out
    user_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Expense':
        """Build an expense from a row returned by the backend."""
        try:
            _type = ExpenseType(row.get('type') or ExpenseType.Out)
        except ValueError:
            logging.warning(f'Expense {row.get("id")} has unknown type "{row.get("type")}", treating it as "out".')
            _type = ExpenseType.Out

        user_id = row.get('user_id')
        return cls(
            id=row.get('id'),
            amount=_to_text(row.get('amount')),
            description=_to_text(row.get('description')),
            type=_type,
            user_id=str(user_id) if user_id is not None else None,
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': self.amount,
            'description': self.description,
            'type': self.type.value,
            'user_id': self.user_id,
        }

    def display_text(self) -> str:
        return f'{self.description} - ${self.amount}'


class ExpenseRepository:
    """Reads and writes expenses in the remote table.

    Args:
        client: The backend client.
        table: Name of the remote table.
    """

    def __init__(self, client: Client, table: str = lib.EXPENSES_TABLE) -> None:
        self.client = client
        self.table = table

    def _query(self):
        return self.client.table(self.table)

    def list(self, owner_id: Optional[str] = None) -> List[Expense]:
        """
        Fetch the expenses.

        Args:
            owner_id: Only return rows owned by this user. All rows are returned when omitted.

        Returns:
            List[Expense]: The rows in the order the backend returned them.

        Raises:
            status.FetchFailedException: If the request fails.
        """
        query = self._query().select('*')
        if owner_id is not None:
            query = query.eq('user_id', owner_id)

        try:
            response = query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as ex:
            raise status.FetchFailedException(error_message(ex)) from ex

        rows = response.data or []
        logging.debug(f'Fetched {len(rows)} expense(s) from "{self.table}".')
        return [Expense.from_row(row) for row in rows]

    def create(self, amount: str, description: str, type: ExpenseType, owner_id: Optional[str]) -> Expense:
        """
        Insert a new expense. The backend assigns the id.

        Returns:
            Expense: The inserted row.

        Raises:
            ValueError: If amount or description is empty.
            status.NotAuthenticatedException: If there is no owner.
            status.WriteFailedException: If the insert fails.
        """
        if not amount or not description:
            raise ValueError('Amount and description are required.')
        if not owner_id:
            raise status.NotAuthenticatedException

        row = {
            'amount': amount,
            'description': description,
            'type': ExpenseType(type).value,
            'user_id': owner_id,
        }
        try:
            response = self._query().insert([row]).execute()
        except (PostgrestAPIError, httpx.HTTPError) as ex:
            raise status.WriteFailedException(error_message(ex)) from ex

        if not response.data:
            raise status.WriteFailedException('The insert did not return the new expense.')

        expense = Expense.from_row(response.data[0])
        logging.debug(f'Inserted expense {expense.id}.')
        return expense

    def update(self, id: Any, amount: str, description: str, type: ExpenseType) -> Expense:
        """
        Overwrite the amount, description and type of an expense.

        Returns:
            Expense: The updated row as stored by the backend.

        Raises:
            status.WriteFailedException: If the update fails or matches no row.
        """
        values = {
            'amount': amount,
            'description': description,
            'type': ExpenseType(type).value,
        }
        try:
            response = self._query().update(values).eq('id', id).execute()
        except (PostgrestAPIError, httpx.HTTPError) as ex:
            raise status.WriteFailedException(error_message(ex)) from ex

        if not response.data:
            raise status.WriteFailedException(f'Expense {id} was not updated.')

        logging.debug(f'Updated expense {id}.')
        return Expense.from_row(response.data[0])

    def delete(self, id: Any) -> None:
        """
        Delete an expense by id.

        Raises:
            status.WriteFailedException: If the delete fails or matches no row.
        """
        try:
            response = self._query().delete().eq('id', id).execute()
        except (PostgrestAPIError, httpx.HTTPError) as ex:
            raise status.WriteFailedException(error_message(ex)) from ex

        if not response.data:
            raise status.WriteFailedException(f'Expense {id} was not deleted.')

        logging.debug(f'Deleted expense {id}.')
