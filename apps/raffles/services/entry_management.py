"""
Entry management service - logged sale and cost operations.

Sale/cost mutations and their history entries share one unit of work.
Cost updates are classified by how reimbursed_date changes, so recording
or clearing a reimbursement shows up as its own history action.
"""

from datetime import date as Date
from typing import Optional
from uuid import UUID

from apps.history.models import HistoryActionType
from apps.history.services import ledger
from apps.raffles.exceptions import InvalidEntityError
from apps.raffles.models import CostKind, EntryType

from . import store
from .snapshots import snapshot_entry
from .unit_of_work import unit_of_work


ADD_ACTIONS = {
    EntryType.SALE: HistoryActionType.ADD_SALE,
    EntryType.COST: HistoryActionType.ADD_COST,
}

DELETE_ACTIONS = {
    EntryType.SALE: HistoryActionType.DELETE_SALE,
    EntryType.COST: HistoryActionType.DELETE_COST,
}


def _update_action(entry_type, change):
    if entry_type == EntryType.SALE:
        return HistoryActionType.UPDATE_SALE
    return ledger.classify_cost_update(change.before, change.after)


def add_entry(*, raffle_id: UUID, entry_type: str, data: dict):
    """
    Add a sale or cost to a raffle and record ADD_SALE / ADD_COST.

    Args:
        raffle_id: UUID of the parent raffle
        entry_type: 'sale' or 'cost'
        data: Entry fields. Sales take description, quantity and an
            optional amount; costs take description, amount, date, kind
            (or is_donation / is_reimbursement), notes and reimbursement
            details

    Returns:
        Created Sale or Cost

    Raises:
        InvalidEntityError: If the type or any field is invalid
        RaffleNotFoundError: If the raffle doesn't exist
        StorageError: If the database fails
    """
    with unit_of_work('add_entry'):
        change = store.add_entry(raffle_id, entry_type, data)
        ledger.record(
            action_type=ADD_ACTIONS[entry_type],
            raffle_id=change.raffle_id,
            raffle_title=change.raffle_title,
            entity_id=change.entity_id,
            after_state=change.after,
        )

    return store.get_entry(change.raffle_id, entry_type, change.entity_id)


def update_entry(*, raffle_id: UUID, entry_type: str, entry_id: UUID, data: dict):
    """
    Replace a sale or cost and record the change.

    Raises:
        InvalidEntityError: If the type or any field is invalid
        RaffleNotFoundError: If the raffle doesn't exist
        EntryNotFoundError: If the entry doesn't belong to the raffle
        StorageError: If the database fails
    """
    with unit_of_work('update_entry'):
        change = store.update_entry(raffle_id, entry_type, entry_id, data)
        ledger.record(
            action_type=_update_action(entry_type, change),
            raffle_id=change.raffle_id,
            raffle_title=change.raffle_title,
            entity_id=change.entity_id,
            before_state=change.before,
            after_state=change.after,
        )

    return store.get_entry(change.raffle_id, entry_type, change.entity_id)


def delete_entry(*, raffle_id: UUID, entry_type: str, entry_id: UUID) -> None:
    """
    Remove a sale or cost and record DELETE_SALE / DELETE_COST.

    Raises:
        RaffleNotFoundError: If the raffle doesn't exist
        EntryNotFoundError: If the entry doesn't belong to the raffle
        StorageError: If the database fails
    """
    with unit_of_work('delete_entry'):
        change = store.delete_entry(raffle_id, entry_type, entry_id)
        ledger.record(
            action_type=DELETE_ACTIONS[entry_type],
            raffle_id=change.raffle_id,
            raffle_title=change.raffle_title,
            entity_id=change.entity_id,
            before_state=change.before,
        )


def _reimbursable_cost(raffle_id, cost_id):
    cost = store.get_entry(raffle_id, EntryType.COST, cost_id)
    if cost.kind != CostKind.REIMBURSEMENT:
        raise InvalidEntityError('kind', 'Only reimbursement costs can be reimbursed.')
    return cost


def record_reimbursement(
    *,
    raffle_id: UUID,
    cost_id: UUID,
    reimbursed_date: Date,
    reimbursement_notes: Optional[str] = ''
):
    """
    Mark a reimbursement cost as paid back on the given date.

    Recorded as ADD_REIMBURSEMENT when the cost was pending, or
    UPDATE_COST when only the date or notes of an existing reimbursement
    change.

    Raises:
        InvalidEntityError: If the cost is not a reimbursement or the date
            is missing
        RaffleNotFoundError, EntryNotFoundError: If the cost doesn't exist
    """
    if reimbursed_date is None or reimbursed_date == '':
        raise InvalidEntityError('reimbursed_date', 'This field is required.')

    cost = _reimbursable_cost(raffle_id, cost_id)
    data = snapshot_entry(EntryType.COST, cost)
    data['reimbursed_date'] = reimbursed_date
    data['reimbursement_notes'] = reimbursement_notes or ''

    return update_entry(
        raffle_id=raffle_id,
        entry_type=EntryType.COST,
        entry_id=cost.id,
        data=data,
    )


def clear_reimbursement(*, raffle_id: UUID, cost_id: UUID):
    """
    Put a reimbursed cost back to pending, recorded as DELETE_REIMBURSEMENT.

    Raises:
        InvalidEntityError: If the cost is not a reimbursement
        RaffleNotFoundError, EntryNotFoundError: If the cost doesn't exist
    """
    cost = _reimbursable_cost(raffle_id, cost_id)
    data = snapshot_entry(EntryType.COST, cost)
    data['reimbursed_date'] = None
    data['reimbursement_notes'] = ''

    return update_entry(
        raffle_id=raffle_id,
        entry_type=EntryType.COST,
        entry_id=cost.id,
        data=data,
    )
