"""
History ledger - appends one entry per raffle/sale/cost mutation.

record() must be called inside the same unit of work as the mutation it
documents, so the mutation and its entry commit or roll back together.
"""

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet

from apps.history.exceptions import HistoryLogNotFoundError, UnsupportedActionError
from apps.history.models import HistoryLog, HistoryActionType

logger = logging.getLogger(__name__)


DESCRIPTIONS = {
    HistoryActionType.CREATE_RAFFLE: 'Raffle "{raffle}" was created.',
    HistoryActionType.UPDATE_RAFFLE: 'Raffle "{raffle}" details were updated.',
    HistoryActionType.DELETE_RAFFLE: 'Raffle "{raffle}" was deleted.',
    HistoryActionType.TOGGLE_FINALIZE_RAFFLE: 'Raffle "{raffle}" was marked as {status}.',
    HistoryActionType.ADD_SALE: 'Sale of {quantity} ticket(s) added to raffle "{raffle}".',
    HistoryActionType.UPDATE_SALE: 'Sale in raffle "{raffle}" was updated.',
    HistoryActionType.DELETE_SALE: 'Sale of {quantity} ticket(s) was deleted from raffle "{raffle}".',
    HistoryActionType.ADD_COST: 'Cost "{cost}" added to raffle "{raffle}".',
    HistoryActionType.UPDATE_COST: 'Cost "{cost}" in raffle "{raffle}" was updated.',
    HistoryActionType.DELETE_COST: 'Cost "{cost}" was deleted from raffle "{raffle}".',
    HistoryActionType.ADD_REIMBURSEMENT: 'Reimbursement for "{cost}" was recorded in raffle "{raffle}".',
    HistoryActionType.DELETE_REIMBURSEMENT: 'Reimbursement record for "{cost}" was removed in raffle "{raffle}".',
}


def classify_raffle_update(before: dict, after: dict) -> str:
    """A raffle update that flips is_finalized is a finalize toggle."""
    if bool(before.get('is_finalized')) != bool(after.get('is_finalized')):
        return HistoryActionType.TOGGLE_FINALIZE_RAFFLE
    return HistoryActionType.UPDATE_RAFFLE


def classify_cost_update(before: dict, after: dict) -> str:
    """
    Classify a cost update by its reimbursed_date transition.

    unset -> set is ADD_REIMBURSEMENT, set -> unset is DELETE_REIMBURSEMENT,
    anything else is UPDATE_COST.
    """
    was_reimbursed = bool(before.get('reimbursed_date'))
    is_reimbursed = bool(after.get('reimbursed_date'))

    if not was_reimbursed and is_reimbursed:
        return HistoryActionType.ADD_REIMBURSEMENT
    if was_reimbursed and not is_reimbursed:
        return HistoryActionType.DELETE_REIMBURSEMENT
    return HistoryActionType.UPDATE_COST


def describe(action_type: str, raffle_title: str, before: Optional[dict] = None, after: Optional[dict] = None) -> str:
    """Human-readable sentence for a history entry."""
    state = after or before or {}
    return DESCRIPTIONS[action_type].format(
        raffle=raffle_title,
        status='Finalized' if state.get('is_finalized') else 'Active',
        quantity=state.get('quantity', ''),
        cost=state.get('description', ''),
    )


def record(
    *,
    action_type: str,
    raffle_id: UUID,
    raffle_title: str,
    entity_id: Optional[UUID] = None,
    before_state: Optional[dict] = None,
    after_state: Optional[dict] = None,
    description: Optional[str] = None
) -> HistoryLog:
    """
    Append a history entry for a completed mutation.

    Args:
        action_type: One of HistoryActionType
        raffle_id: Raffle the mutation belongs to
        raffle_title: Raffle title at the time of the mutation
        entity_id: Sale or cost id, when the mutation targets an entry
        before_state: Snapshot prior to the mutation
        after_state: Snapshot after the mutation
        description: Overrides the generated description

    Returns:
        Created HistoryLog with undone=False

    Raises:
        UnsupportedActionError: If action_type is not a known action
    """
    if action_type not in HistoryActionType.values:
        raise UnsupportedActionError(f'Unsupported history action type: {action_type}')

    if description is None:
        description = describe(action_type, raffle_title, before_state, after_state)

    log = HistoryLog.objects.create(
        action_type=action_type,
        raffle_id=raffle_id,
        raffle_title=raffle_title,
        entity_id=entity_id,
        before_state=before_state,
        after_state=after_state,
        description=description,
    )

    logger.info("Recorded %s for raffle %s (log %s)", action_type, raffle_id, log.id)
    return log


def list_history(*, raffle_id: Optional[UUID] = None, include_undone: bool = True) -> QuerySet:
    """History entries, newest first."""
    queryset = HistoryLog.objects.all().order_by('-timestamp')

    if raffle_id:
        queryset = queryset.filter(raffle_id=raffle_id)
    if not include_undone:
        queryset = queryset.filter(undone=False)

    return queryset


def get_log(*, log_id: UUID) -> HistoryLog:
    """
    Raises:
        HistoryLogNotFoundError: If the entry doesn't exist
    """
    try:
        return HistoryLog.objects.get(id=log_id)
    except (HistoryLog.DoesNotExist, DjangoValidationError, ValueError):
        raise HistoryLogNotFoundError()
