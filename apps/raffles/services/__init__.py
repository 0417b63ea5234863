"""
Raffles services - Business logic layer.

This package contains all business operations for the raffles app:
- Entity store (validation and persistence, no history)
- Raffle management (logged raffle operations)
- Entry management (logged sale/cost operations, reimbursements)
- Policies checked before deleting or finalizing a raffle
"""

from .store import (
    list_raffles,
    get_raffle,
    get_entry,
)

from .raffle_management import (
    create_raffle,
    update_raffle,
    toggle_finalize_raffle,
    delete_raffle,
)

from .entry_management import (
    add_entry,
    update_entry,
    delete_entry,
    record_reimbursement,
    clear_reimbursement,
)

from .policies import (
    ensure_raffle_deletable,
    ensure_raffle_finalizable,
)

from apps.raffles.exceptions import (
    RaffleServiceError,
    InvalidEntityError,
    NotFoundError,
    RaffleNotFoundError,
    EntryNotFoundError,
    RafflePolicyError,
    RaffleFinalizedError,
    PendingReimbursementsError,
    StorageError,
)

__all__ = [
    # Queries
    'list_raffles',
    'get_raffle',
    'get_entry',
    # Raffle Management
    'create_raffle',
    'update_raffle',
    'toggle_finalize_raffle',
    'delete_raffle',
    # Entry Management
    'add_entry',
    'update_entry',
    'delete_entry',
    'record_reimbursement',
    'clear_reimbursement',
    # Policies
    'ensure_raffle_deletable',
    'ensure_raffle_finalizable',
    # Exceptions
    'RaffleServiceError',
    'InvalidEntityError',
    'NotFoundError',
    'RaffleNotFoundError',
    'EntryNotFoundError',
    'RafflePolicyError',
    'RaffleFinalizedError',
    'PendingReimbursementsError',
    'StorageError',
]
