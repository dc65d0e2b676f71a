"""
Identity - who is operating a match clock and what they may do.
"""

from typing import Optional, Protocol

from models.operator import OperatorRole
from models.schemas import OperatorSnapshot


class IdentityProvider(Protocol):
    """Source of operator identity and role."""

    def operator(self, operator_id: str) -> Optional[OperatorSnapshot]:
        ...


class StoreIdentityProvider:
    """Reads Operator records from the schedule store."""

    def __init__(self, store):
        self._store = store

    def operator(self, operator_id: str) -> Optional[OperatorSnapshot]:
        if not operator_id:
            return None
        return self._store.get_operator(operator_id)


def can_operate(operator: Optional[OperatorSnapshot], match) -> bool:
    """Admins may run any match; scorekeepers only the ones assigned to them."""
    if operator is None or not operator.is_active:
        return False
    if operator.role == OperatorRole.ADMIN:
        return True
    return operator.role == OperatorRole.SCOREKEEPER and match.operator_id == operator.id
