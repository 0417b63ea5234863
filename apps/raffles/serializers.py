from decimal import Decimal

from rest_framework import serializers

from .exceptions import InvalidEntityError
from .models import Raffle, Sale, Cost, CostKind, EntryType, RaffleCategory
from .services.store import resolve_cost_kind


# =============================================================================
# Input Serializers
# =============================================================================

class RaffleInputSerializer(serializers.Serializer):
    """
    Validate raffle create/update payloads.

    Fields:
        title (str): Raffle title
        category (str): One of RaffleCategory
        date (date): Draw date
        ticket_price (Decimal): Price per ticket, >= 0
        is_finalized (bool): Only used on update; defaults to current value
    """

    title = serializers.CharField(max_length=200)
    category = serializers.ChoiceField(choices=RaffleCategory.choices)
    date = serializers.DateField()
    ticket_price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.00')
    )
    is_finalized = serializers.BooleanField(required=False, allow_null=True, default=None)


class EntryTypeSerializer(serializers.Serializer):
    """Validate the entry type selector (body or query string)."""

    type = serializers.ChoiceField(choices=EntryType.choices)


class SaleInputSerializer(serializers.Serializer):
    """
    Validate sale payloads.

    Amount is optional; when omitted the sale is priced at
    quantity * ticket_price.
    """

    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    quantity = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        allow_null=True
    )


class CostInputSerializer(serializers.Serializer):
    """
    Validate cost payloads.

    The cost kind can be sent as ``kind`` or through the is_donation /
    is_reimbursement flags; both flags set at once is rejected.
    """

    description = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.00')
    )
    date = serializers.DateField(required=False, allow_null=True)
    kind = serializers.ChoiceField(choices=CostKind.choices, required=False, allow_null=True)
    is_donation = serializers.BooleanField(required=False, allow_null=True, default=None)
    is_reimbursement = serializers.BooleanField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    reimbursed_date = serializers.DateField(required=False, allow_null=True)
    reimbursement_notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        """Validate donation/reimbursement exclusivity and zero amounts."""
        try:
            kind = resolve_cost_kind(attrs)
        except InvalidEntityError as exc:
            raise serializers.ValidationError({exc.field: exc.message})

        if attrs['amount'] == 0 and kind != CostKind.DONATION:
            raise serializers.ValidationError({
                'amount': 'Amount must be greater than zero unless the cost is a donation.'
            })

        return attrs


ENTRY_INPUT_SERIALIZERS = {
    EntryType.SALE: SaleInputSerializer,
    EntryType.COST: CostInputSerializer,
}


class ReimbursementInputSerializer(serializers.Serializer):
    """Validate input for recording a reimbursement."""

    reimbursed_date = serializers.DateField()
    reimbursement_notes = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class SaleSerializer(serializers.ModelSerializer):
    """Serializer for sales."""

    class Meta:
        model = Sale
        fields = ['id', 'description', 'quantity', 'amount']
        read_only_fields = fields


class CostSerializer(serializers.ModelSerializer):
    """Serializer for costs, with the derived reimbursement state."""

    is_donation = serializers.BooleanField(read_only=True)
    is_reimbursement = serializers.BooleanField(read_only=True)
    reimbursement_status = serializers.CharField(read_only=True)

    class Meta:
        model = Cost
        fields = [
            'id',
            'description',
            'amount',
            'date',
            'kind',
            'is_donation',
            'is_reimbursement',
            'notes',
            'reimbursed_date',
            'reimbursement_notes',
            'reimbursement_status',
        ]
        read_only_fields = fields


ENTRY_OUTPUT_SERIALIZERS = {
    EntryType.SALE: SaleSerializer,
    EntryType.COST: CostSerializer,
}


class RaffleSerializer(serializers.ModelSerializer):
    """Main serializer for raffles, with nested sales and costs."""

    sales = SaleSerializer(many=True, read_only=True)
    costs = CostSerializer(many=True, read_only=True)

    class Meta:
        model = Raffle
        fields = [
            'id',
            'title',
            'category',
            'date',
            'ticket_price',
            'is_finalized',
            'sales',
            'costs',
        ]
        read_only_fields = fields


class PendingReimbursementsResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    pending_costs = serializers.ListField(child=serializers.CharField())
