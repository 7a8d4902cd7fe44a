"""
Table matching for manual seating.

Eligible tables keep their input order; picking the best fit is left to
the manager.
"""

from typing import Iterable, List

from core.errors import AssignmentConflictError
from domain.enums import TableStatus
from domain.models import Table


def is_table_eligible(table: Table, party_size: int) -> bool:
    return table.status == TableStatus.AVAILABLE and table.seats >= party_size


def eligible_tables(tables: Iterable[Table], party_size: int) -> List[Table]:
    """
    Tables that are available and seat at least the party.

    Args:
        tables: Table inventory, in display order
        party_size: Number of guests to seat

    Returns:
        Matching tables in their original order; empty when none qualify
    """
    return [table for table in tables if is_table_eligible(table, party_size)]


def ensure_table_eligible(
    tables: Iterable[Table],
    table_id: str,
    party_size: int,
    entry_id: str,
) -> Table:
    """
    Re-check a manager's selection against fresh table state.

    Raises:
        AssignmentConflictError: If the table is gone, too small or taken
    """
    for table in eligible_tables(tables, party_size):
        if table.id == table_id:
            return table
    raise AssignmentConflictError(table_id, entry_id)
