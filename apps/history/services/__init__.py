"""
History services - audit trail and undo.

- Ledger: record one entry per mutation, classify updates, list entries
- Undo: apply the inverse of an entry exactly once
"""

from .ledger import (
    record,
    classify_raffle_update,
    classify_cost_update,
    describe,
    list_history,
    get_log,
)

from .undo import undo_action

from apps.history.exceptions import (
    HistoryLogNotFoundError,
    AlreadyUndoneError,
    UnsupportedActionError,
)

__all__ = [
    # Ledger
    'record',
    'classify_raffle_update',
    'classify_cost_update',
    'describe',
    'list_history',
    'get_log',
    # Undo
    'undo_action',
    # Exceptions
    'HistoryLogNotFoundError',
    'AlreadyUndoneError',
    'UnsupportedActionError',
]
