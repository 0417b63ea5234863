"""
Undo orchestrator.

Undoing a history entry applies the inverse of the logged mutation
through the entity store and flips the entry to undone, all in one unit
of work. Compensating writes are not recorded as new history entries.

Inverse actions:
    CREATE_RAFFLE                     delete the raffle
    DELETE_RAFFLE                     re-insert raffle, sales and costs
    UPDATE_RAFFLE, TOGGLE_FINALIZE    overwrite raffle fields with before_state
    ADD_SALE, ADD_COST                delete the entry
    DELETE_SALE, DELETE_COST          re-insert the entry from before_state
    UPDATE_SALE, UPDATE_COST,
    ADD/DELETE_REIMBURSEMENT          overwrite the entry with before_state

Targets are not restored transitively: if a later action removed the
raffle or entry an undo needs, the undo fails with a NotFoundError and the
caller has to undo the later action first.
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.history.exceptions import (
    AlreadyUndoneError,
    HistoryLogNotFoundError,
    UnsupportedActionError,
)
from apps.history.models import HistoryLog, HistoryActionType
from apps.raffles.models import EntryType
from apps.raffles.services import store
from apps.raffles.services.snapshots import load_entry_snapshot, load_raffle_snapshot
from apps.raffles.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


def _undo_create_raffle(log):
    store.delete_raffle(log.raffle_id)


def _undo_delete_raffle(log):
    store.restore_raffle(load_raffle_snapshot(log.before_state))


def _undo_update_raffle(log):
    snapshot = load_raffle_snapshot(log.before_state)
    store.update_raffle(
        log.raffle_id,
        title=snapshot['title'],
        category=snapshot['category'],
        date=snapshot['date'],
        ticket_price=snapshot['ticket_price'],
        is_finalized=snapshot['is_finalized'],
    )


def _undo_add_entry(entry_type):
    def handler(log):
        store.delete_entry(log.raffle_id, entry_type, log.entity_id)
    return handler


def _undo_delete_entry(entry_type):
    def handler(log):
        snapshot = load_entry_snapshot(entry_type, log.before_state)
        store.add_entry(log.raffle_id, entry_type, snapshot, entry_id=snapshot['id'])
    return handler


def _undo_update_entry(entry_type):
    def handler(log):
        snapshot = load_entry_snapshot(entry_type, log.before_state)
        store.update_entry(log.raffle_id, entry_type, log.entity_id, snapshot)
    return handler


INVERSE_ACTIONS = {
    HistoryActionType.CREATE_RAFFLE: _undo_create_raffle,
    HistoryActionType.DELETE_RAFFLE: _undo_delete_raffle,
    HistoryActionType.UPDATE_RAFFLE: _undo_update_raffle,
    HistoryActionType.TOGGLE_FINALIZE_RAFFLE: _undo_update_raffle,
    HistoryActionType.ADD_SALE: _undo_add_entry(EntryType.SALE),
    HistoryActionType.ADD_COST: _undo_add_entry(EntryType.COST),
    HistoryActionType.DELETE_SALE: _undo_delete_entry(EntryType.SALE),
    HistoryActionType.DELETE_COST: _undo_delete_entry(EntryType.COST),
    HistoryActionType.UPDATE_SALE: _undo_update_entry(EntryType.SALE),
    HistoryActionType.UPDATE_COST: _undo_update_entry(EntryType.COST),
    HistoryActionType.ADD_REIMBURSEMENT: _undo_update_entry(EntryType.COST),
    HistoryActionType.DELETE_REIMBURSEMENT: _undo_update_entry(EntryType.COST),
}


def undo_action(*, log_id: UUID) -> HistoryLog:
    """
    Undo a history entry exactly once.

    Args:
        log_id: UUID of the history entry

    Returns:
        The history entry, now marked undone

    Raises:
        HistoryLogNotFoundError: If the entry doesn't exist
        AlreadyUndoneError: If the entry was already undone
        UnsupportedActionError: If the entry's action has no inverse
        RaffleNotFoundError, EntryNotFoundError: If the target no longer exists
        InvalidEntityError: If the stored snapshot is malformed
        StorageError: If the database fails; nothing is applied
    """
    with unit_of_work('undo'):
        try:
            log = HistoryLog.objects.select_for_update().get(id=log_id)
        except (HistoryLog.DoesNotExist, DjangoValidationError, ValueError):
            raise HistoryLogNotFoundError()

        if log.undone:
            logger.warning("Rejected undo of log %s: already undone", log.id)
            raise AlreadyUndoneError()

        inverse = INVERSE_ACTIONS.get(log.action_type)
        if inverse is None:
            raise UnsupportedActionError(f'Cannot undo action type: {log.action_type}')

        inverse(log)
        log.mark_undone()

    logger.info("Undid %s on raffle %s (log %s)", log.action_type, log.raffle_id, log.id)
    return log
