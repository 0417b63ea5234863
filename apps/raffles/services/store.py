"""
Entity store for raffles, sales and costs.

Owns validation and persistence of the three entity types and nothing
else: functions here never write history. Each mutating function returns
a StoreChange carrying before/after snapshots, which the management
services hand to the history ledger inside the same unit of work. The
undo orchestrator calls these same functions directly so compensating
writes are not logged again.

Callers must already be inside a transaction (see unit_of_work); rows are
locked with SELECT ... FOR UPDATE where the backend supports it.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from django.utils.dateparse import parse_date

from apps.raffles.exceptions import (
    InvalidEntityError,
    RaffleNotFoundError,
    EntryNotFoundError,
)
from apps.raffles.models import (
    Raffle,
    Sale,
    Cost,
    CostKind,
    EntryType,
    RaffleCategory,
)
from .snapshots import snapshot_raffle, snapshot_entry


CENT = Decimal('0.01')
MAX_AMOUNT = Decimal('100000000')  # max_digits=10, decimal_places=2

ENTRY_MODELS = {
    EntryType.SALE: Sale,
    EntryType.COST: Cost,
}


@dataclass(frozen=True)
class StoreChange:
    """Result of a store mutation, ready to be recorded in history."""

    raffle_id: UUID
    raffle_title: str
    entity_id: Optional[UUID] = None
    before: Optional[dict] = None
    after: Optional[dict] = None


# =============================================================================
# Field parsing
# =============================================================================

def _require_text(field, value):
    if value is None or not str(value).strip():
        raise InvalidEntityError(field, 'This field is required.')
    return str(value)


def _parse_amount(field, value):
    if value is None or value == '':
        raise InvalidEntityError(field, 'This field is required.')
    if isinstance(value, bool):
        raise InvalidEntityError(field, 'A valid number is required.')

    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidEntityError(field, 'A valid number is required.')

    if not amount.is_finite():
        raise InvalidEntityError(field, 'A valid number is required.')
    if amount < 0:
        raise InvalidEntityError(field, 'Must not be negative.')
    if amount >= MAX_AMOUNT:
        raise InvalidEntityError(field, 'Value is too large.')

    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _parse_date(field, value, *, required):
    if value is None or value == '':
        if required:
            raise InvalidEntityError(field, 'This field is required.')
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidEntityError(field, 'Enter a valid date (YYYY-MM-DD).')
    return parsed


def _parse_quantity(value):
    if value is None or isinstance(value, bool):
        raise InvalidEntityError('quantity', 'Quantity must be a positive whole number.')
    if isinstance(value, float) and not value.is_integer():
        raise InvalidEntityError('quantity', 'Quantity must be a positive whole number.')

    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise InvalidEntityError('quantity', 'Quantity must be a positive whole number.')

    if quantity < 1:
        raise InvalidEntityError('quantity', 'Quantity must be a positive whole number.')
    return quantity


def _parse_flag(field, value):
    if not isinstance(value, bool):
        raise InvalidEntityError(field, 'Must be true or false.')
    return value


def _optional_flag(data, field):
    value = data.get(field)
    if value is None:
        return None
    return _parse_flag(field, value)


def resolve_cost_kind(data):
    """
    Work out the cost kind from ``kind`` and the is_donation /
    is_reimbursement flags.

    The flags are mutually exclusive and a flag set to true decides the
    kind. When both are true, ``kind`` holds the previous state and the
    flag that disagrees with it is the new choice; without ``kind`` that
    is rejected. With no true flag, ``kind`` is used, except that sending
    its own flag as false turns the cost back into a regular one.
    """
    is_donation = _optional_flag(data, 'is_donation')
    is_reimbursement = _optional_flag(data, 'is_reimbursement')

    kind = data.get('kind')
    if kind in (None, ''):
        kind = None
    elif kind not in CostKind.values:
        raise InvalidEntityError('kind', f'"{kind}" is not a valid cost kind.')
    else:
        kind = CostKind(kind)

    if is_donation and is_reimbursement:
        if kind == CostKind.REIMBURSEMENT:
            return CostKind.DONATION
        if kind == CostKind.DONATION:
            return CostKind.REIMBURSEMENT
        raise InvalidEntityError(
            'is_reimbursement',
            'A cost cannot be both a donation and a reimbursement.'
        )
    if is_donation:
        return CostKind.DONATION
    if is_reimbursement:
        return CostKind.REIMBURSEMENT

    if kind is None:
        return CostKind.REGULAR
    if kind == CostKind.DONATION and is_donation is False:
        return CostKind.REGULAR
    if kind == CostKind.REIMBURSEMENT and is_reimbursement is False:
        return CostKind.REGULAR
    return kind


def _clean_raffle_fields(*, title, category, date, ticket_price):
    title = _require_text('title', title)
    if category in (None, ''):
        raise InvalidEntityError('category', 'This field is required.')
    if category not in RaffleCategory.values:
        raise InvalidEntityError('category', f'"{category}" is not a valid category.')

    return {
        'title': title,
        'category': category,
        'date': _parse_date('date', date, required=True),
        'ticket_price': _parse_amount('ticket_price', ticket_price),
    }


def _clean_sale_fields(raffle, data):
    quantity = _parse_quantity(data.get('quantity'))

    amount = data.get('amount')
    if amount is None or amount == '':
        amount = (raffle.ticket_price * quantity).quantize(CENT, rounding=ROUND_HALF_UP)
    else:
        amount = _parse_amount('amount', amount)

    return {
        'description': data.get('description') or '',
        'quantity': quantity,
        'amount': amount,
    }


def _clean_cost_fields(data):
    description = _require_text('description', data.get('description'))
    kind = resolve_cost_kind(data)
    amount = _parse_amount('amount', data.get('amount'))

    if amount == 0 and kind != CostKind.DONATION:
        raise InvalidEntityError(
            'amount',
            'Amount must be greater than zero unless the cost is a donation.'
        )

    # Reimbursement details only exist on reimbursement costs
    if kind == CostKind.REIMBURSEMENT:
        reimbursed_date = _parse_date('reimbursed_date', data.get('reimbursed_date'), required=False)
        reimbursement_notes = data.get('reimbursement_notes') or ''
    else:
        reimbursed_date = None
        reimbursement_notes = ''

    return {
        'description': description,
        'amount': amount,
        'date': _parse_date('date', data.get('date'), required=False),
        'kind': kind,
        'notes': data.get('notes') or '',
        'reimbursed_date': reimbursed_date,
        'reimbursement_notes': reimbursement_notes,
    }


ENTRY_CLEANERS = {
    EntryType.SALE: _clean_sale_fields,
    EntryType.COST: lambda raffle, data: _clean_cost_fields(data),
}


# =============================================================================
# Lookups
# =============================================================================

def _entry_type(entry_type):
    if entry_type not in EntryType.values:
        raise InvalidEntityError('type', 'Entry type must be "sale" or "cost".')
    return EntryType(entry_type)


def _get_raffle(raffle_id) -> Raffle:
    try:
        return Raffle.objects.select_for_update().get(id=raffle_id)
    except (Raffle.DoesNotExist, DjangoValidationError, ValueError):
        raise RaffleNotFoundError()


def _get_entry(raffle, entry_type, entry_id):
    model = ENTRY_MODELS[entry_type]
    try:
        return model.objects.select_for_update().get(id=entry_id, raffle=raffle)
    except (model.DoesNotExist, DjangoValidationError, ValueError):
        raise EntryNotFoundError()


def list_raffles() -> QuerySet:
    """All raffles with their sales and costs, newest first."""
    return Raffle.objects.prefetch_related('sales', 'costs').order_by('-date', 'title')


def get_raffle(raffle_id) -> Raffle:
    try:
        return Raffle.objects.prefetch_related('sales', 'costs').get(id=raffle_id)
    except (Raffle.DoesNotExist, DjangoValidationError, ValueError):
        raise RaffleNotFoundError()


def get_entry(raffle_id, entry_type, entry_id):
    """Sale or cost by id, checked against its parent raffle."""
    entry_type = _entry_type(entry_type)
    raffle = get_raffle(raffle_id)
    model = ENTRY_MODELS[entry_type]
    try:
        return model.objects.get(id=entry_id, raffle=raffle)
    except (model.DoesNotExist, DjangoValidationError, ValueError):
        raise EntryNotFoundError()


# =============================================================================
# Raffle mutations
# =============================================================================

def create_raffle(*, title, category, date, ticket_price, raffle_id=None) -> StoreChange:
    """
    Insert a new, not yet finalized raffle with no entries.

    Raises:
        InvalidEntityError: If title/category/date are missing or the
            ticket price is negative
    """
    fields = _clean_raffle_fields(
        title=title,
        category=category,
        date=date,
        ticket_price=ticket_price,
    )

    raffle = Raffle(is_finalized=False, **fields)
    if raffle_id is not None:
        raffle.id = raffle_id
    raffle.save(force_insert=True)

    return StoreChange(
        raffle_id=raffle.id,
        raffle_title=raffle.title,
        after=snapshot_raffle(raffle, with_entries=True),
    )


def update_raffle(raffle_id, *, title, category, date, ticket_price, is_finalized) -> StoreChange:
    """
    Replace every editable raffle field.

    Raises:
        RaffleNotFoundError: If the raffle doesn't exist
        InvalidEntityError: If any field is invalid
    """
    raffle = _get_raffle(raffle_id)
    before = snapshot_raffle(raffle)

    fields = _clean_raffle_fields(
        title=title,
        category=category,
        date=date,
        ticket_price=ticket_price,
    )
    fields['is_finalized'] = _parse_flag('is_finalized', is_finalized)

    for name, value in fields.items():
        setattr(raffle, name, value)
    raffle.save(update_fields=list(fields))

    return StoreChange(
        raffle_id=raffle.id,
        raffle_title=raffle.title,
        before=before,
        after=snapshot_raffle(raffle),
    )


def delete_raffle(raffle_id) -> StoreChange:
    """
    Delete a raffle together with all of its sales and costs.

    Business rules (finalized raffles, pending reimbursements) are the
    caller's concern; see policies.
    """
    raffle = _get_raffle(raffle_id)
    before = snapshot_raffle(raffle, with_entries=True)
    raffle_id, raffle_title = raffle.id, raffle.title

    raffle.delete()

    return StoreChange(raffle_id=raffle_id, raffle_title=raffle_title, before=before)


def restore_raffle(snapshot: dict) -> StoreChange:
    """
    Re-insert a raffle and its entries from a parsed raffle snapshot.

    Ids, the finalized flag and every entry are restored as captured.
    """
    fields = _clean_raffle_fields(
        title=snapshot.get('title'),
        category=snapshot.get('category'),
        date=snapshot.get('date'),
        ticket_price=snapshot.get('ticket_price'),
    )
    raffle = Raffle(
        id=snapshot['id'],
        is_finalized=_parse_flag('is_finalized', snapshot.get('is_finalized')),
        **fields
    )
    raffle.save(force_insert=True)

    for entry_type, key in ((EntryType.SALE, 'sales'), (EntryType.COST, 'costs')):
        model = ENTRY_MODELS[entry_type]
        for entry_data in snapshot.get(key) or []:
            entry = model(
                id=entry_data['id'],
                raffle=raffle,
                **ENTRY_CLEANERS[entry_type](raffle, entry_data)
            )
            entry.save(force_insert=True)

    return StoreChange(
        raffle_id=raffle.id,
        raffle_title=raffle.title,
        after=snapshot_raffle(raffle, with_entries=True),
    )


# =============================================================================
# Entry mutations
# =============================================================================

def add_entry(raffle_id, entry_type, data: dict, entry_id=None) -> StoreChange:
    """
    Add a sale or cost to a raffle.

    A sale without an amount is priced at quantity * ticket_price.

    Raises:
        InvalidEntityError: If the type or any field is invalid
        RaffleNotFoundError: If the raffle doesn't exist
    """
    entry_type = _entry_type(entry_type)
    raffle = _get_raffle(raffle_id)
    fields = ENTRY_CLEANERS[entry_type](raffle, data)

    entry = ENTRY_MODELS[entry_type](raffle=raffle, **fields)
    if entry_id is not None:
        entry.id = entry_id
    entry.save(force_insert=True)

    return StoreChange(
        raffle_id=raffle.id,
        raffle_title=raffle.title,
        entity_id=entry.id,
        after=snapshot_entry(entry_type, entry),
    )


def update_entry(raffle_id, entry_type, entry_id, data: dict) -> StoreChange:
    """
    Replace every field of an existing sale or cost.

    Raises:
        InvalidEntityError: If the type or any field is invalid
        RaffleNotFoundError: If the raffle doesn't exist
        EntryNotFoundError: If the entry doesn't belong to the raffle
    """
    entry_type = _entry_type(entry_type)
    raffle = _get_raffle(raffle_id)
    entry = _get_entry(raffle, entry_type, entry_id)
    before = snapshot_entry(entry_type, entry)

    fields = ENTRY_CLEANERS[entry_type](raffle, data)
    for name, value in fields.items():
        setattr(entry, name, value)
    entry.save(update_fields=list(fields))

    return StoreChange(
        raffle_id=raffle.id,
        raffle_title=raffle.title,
        entity_id=entry.id,
        before=before,
        after=snapshot_entry(entry_type, entry),
    )


def delete_entry(raffle_id, entry_type, entry_id) -> StoreChange:
    """
    Remove a sale or cost from a raffle.

    Raises:
        RaffleNotFoundError: If the raffle doesn't exist
        EntryNotFoundError: If the entry doesn't belong to the raffle
    """
    entry_type = _entry_type(entry_type)
    raffle = _get_raffle(raffle_id)
    entry = _get_entry(raffle, entry_type, entry_id)
    before = snapshot_entry(entry_type, entry)
    entity_id = entry.id

    entry.delete()

    return StoreChange(
        raffle_id=raffle.id,
        raffle_title=raffle.title,
        entity_id=entity_id,
        before=before,
    )
