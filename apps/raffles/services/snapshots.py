"""
Snapshot codec for raffles, sales and costs.

History entries keep full copies of entities as JSON. The serializers in
this module are the only way snapshots are written and read back, so a
snapshot always carries the same fields and parses into the same Python
types as the model (Decimal amounts, date objects, UUID ids, real bools).
"""

from decimal import Decimal

from rest_framework import serializers

from apps.raffles.exceptions import InvalidEntityError
from apps.raffles.models import CostKind, EntryType, RaffleCategory


AMOUNT_FIELD_KWARGS = {
    'max_digits': 10,
    'decimal_places': 2,
    'min_value': Decimal('0.00'),
}


class SaleSnapshotSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    description = serializers.CharField(allow_blank=True, required=False, default='')
    quantity = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)


class CostSnapshotSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    description = serializers.CharField()
    amount = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    date = serializers.DateField(allow_null=True, required=False, default=None)
    kind = serializers.ChoiceField(choices=CostKind.choices)
    is_donation = serializers.BooleanField(read_only=True)
    is_reimbursement = serializers.BooleanField(read_only=True)
    notes = serializers.CharField(allow_blank=True, required=False, default='')
    reimbursed_date = serializers.DateField(allow_null=True, required=False, default=None)
    reimbursement_notes = serializers.CharField(allow_blank=True, required=False, default='')


class RaffleSnapshotSerializer(serializers.Serializer):
    """Raffle fields; nested entries only when the whole raffle is captured."""

    id = serializers.UUIDField()
    title = serializers.CharField()
    category = serializers.ChoiceField(choices=RaffleCategory.choices)
    date = serializers.DateField()
    ticket_price = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    is_finalized = serializers.BooleanField()
    sales = SaleSnapshotSerializer(many=True, required=False)
    costs = CostSnapshotSerializer(many=True, required=False)

    def __init__(self, *args, with_entries=False, **kwargs):
        super().__init__(*args, **kwargs)
        if not with_entries and self.instance is not None:
            self.fields.pop('sales')
            self.fields.pop('costs')


ENTRY_SNAPSHOT_SERIALIZERS = {
    EntryType.SALE: SaleSnapshotSerializer,
    EntryType.COST: CostSnapshotSerializer,
}


def _plain(data):
    """Strip DRF's ReturnDict wrappers so JSONField gets builtin types."""
    if isinstance(data, dict):
        return {key: _plain(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_plain(item) for item in data]
    return data


def snapshot_raffle(raffle, with_entries=False):
    """Serialize a raffle, optionally with all of its sales and costs."""
    serializer = RaffleSnapshotSerializer(raffle, with_entries=with_entries)
    return _plain(serializer.data)


def snapshot_entry(entry_type, entry):
    serializer = ENTRY_SNAPSHOT_SERIALIZERS[entry_type](entry)
    return _plain(serializer.data)


def load_raffle_snapshot(data):
    """Parse a raffle snapshot back into typed values."""
    return _load(RaffleSnapshotSerializer, data)


def load_entry_snapshot(entry_type, data):
    return _load(ENTRY_SNAPSHOT_SERIALIZERS[entry_type], data)


def _load(serializer_class, data):
    if not isinstance(data, dict):
        raise InvalidEntityError('snapshot', 'Snapshot is missing or malformed.')

    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        field, messages = next(iter(serializer.errors.items()))
        if isinstance(messages, list) and messages and isinstance(messages[0], str):
            message = str(messages[0])
        else:
            message = 'Invalid value.'
        raise InvalidEntityError(f'snapshot.{field}', message)
    return serializer.validated_data
