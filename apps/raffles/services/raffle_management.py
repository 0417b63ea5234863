"""
Raffle management service - logged raffle operations.

Each operation runs the store mutation and its history entry in one unit
of work. Business rules about deleting or finalizing are checked by the
caller beforehand (see policies).
"""

from datetime import date as Date
from decimal import Decimal
from uuid import UUID

from apps.history.models import HistoryActionType
from apps.history.services import ledger
from apps.raffles.models import Raffle

from . import store
from .unit_of_work import unit_of_work


def create_raffle(
    *,
    title: str,
    category: str,
    date: Date,
    ticket_price: Decimal
) -> Raffle:
    """
    Create a raffle and record CREATE_RAFFLE.

    Returns:
        Created Raffle, not finalized, with no sales or costs

    Raises:
        InvalidEntityError: If title/category/date are missing or the
            ticket price is negative
        StorageError: If the database fails
    """
    with unit_of_work('create_raffle'):
        change = store.create_raffle(
            title=title,
            category=category,
            date=date,
            ticket_price=ticket_price,
        )
        ledger.record(
            action_type=HistoryActionType.CREATE_RAFFLE,
            raffle_id=change.raffle_id,
            raffle_title=change.raffle_title,
            after_state=change.after,
        )

    return store.get_raffle(change.raffle_id)


def update_raffle(
    *,
    raffle_id: UUID,
    title: str,
    category: str,
    date: Date,
    ticket_price: Decimal,
    is_finalized: bool
) -> Raffle:
    """
    Replace the raffle's fields and record the change.

    The entry is TOGGLE_FINALIZE_RAFFLE when is_finalized flips, otherwise
    UPDATE_RAFFLE.

    Raises:
        RaffleNotFoundError: If the raffle doesn't exist
        InvalidEntityError: If any field is invalid
        StorageError: If the database fails
    """
    with unit_of_work('update_raffle'):
        change = store.update_raffle(
            raffle_id,
            title=title,
            category=category,
            date=date,
            ticket_price=ticket_price,
            is_finalized=is_finalized,
        )
        ledger.record(
            action_type=ledger.classify_raffle_update(change.before, change.after),
            raffle_id=change.raffle_id,
            raffle_title=change.raffle_title,
            before_state=change.before,
            after_state=change.after,
        )

    return store.get_raffle(change.raffle_id)


def toggle_finalize_raffle(*, raffle_id: UUID) -> Raffle:
    """Flip the finalized flag, keeping every other field."""
    raffle = store.get_raffle(raffle_id)

    return update_raffle(
        raffle_id=raffle.id,
        title=raffle.title,
        category=raffle.category,
        date=raffle.date,
        ticket_price=raffle.ticket_price,
        is_finalized=not raffle.is_finalized,
    )


def delete_raffle(*, raffle_id: UUID) -> None:
    """
    Delete a raffle with all of its entries and record DELETE_RAFFLE.

    The entry's before_state holds the whole raffle, sales and costs
    included, so the deletion can be undone.

    Raises:
        RaffleNotFoundError: If the raffle doesn't exist
        StorageError: If the database fails
    """
    with unit_of_work('delete_raffle'):
        change = store.delete_raffle(raffle_id)
        ledger.record(
            action_type=HistoryActionType.DELETE_RAFFLE,
            raffle_id=change.raffle_id,
            raffle_title=change.raffle_title,
            before_state=change.before,
        )
