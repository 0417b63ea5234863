from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, PolymorphicProxySerializer
from drf_spectacular.types import OpenApiTypes

from .serializers import (
    RaffleSerializer,
    RaffleInputSerializer,
    EntryTypeSerializer,
    SaleInputSerializer,
    CostInputSerializer,
    CostSerializer,
    ReimbursementInputSerializer,
    PendingReimbursementsResponseSerializer,
    ENTRY_INPUT_SERIALIZERS,
    ENTRY_OUTPUT_SERIALIZERS,
)
from apps.raffles.models import EntryType
from apps.raffles.services import (
    list_raffles,
    get_raffle,
    create_raffle,
    update_raffle,
    toggle_finalize_raffle,
    delete_raffle,
    add_entry,
    update_entry,
    delete_entry,
    record_reimbursement,
    clear_reimbursement,
    ensure_raffle_deletable,
    ensure_raffle_finalizable,
)


EntryInputSerializer = PolymorphicProxySerializer(
    component_name='EntryInput',
    serializers=[SaleInputSerializer, CostInputSerializer],
    resource_type_field_name='type',
)


def _validated_entry_data(entry_type, payload):
    serializer = ENTRY_INPUT_SERIALIZERS[entry_type](data=payload)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)


def _entry_type_from(payload):
    serializer = EntryTypeSerializer(data=payload)
    serializer.is_valid(raise_exception=True)
    return EntryType(serializer.validated_data['type'])


class RaffleViewSet(viewsets.ViewSet):
    """
    ViewSet for raffle operations.

    All business logic is handled by services; every mutation is recorded
    in the history ledger.

    list: Get all raffles with nested sales and costs
    create: Create a new raffle
    retrieve: Get a specific raffle
    update: Replace a raffle's fields
    destroy: Delete a raffle (not finalized, no pending reimbursements)
    toggle_finalize: Finalize or reopen a raffle
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: RaffleSerializer(many=True)})
    def list(self, request):
        serializer = RaffleSerializer(list_raffles(), many=True)
        return Response(serializer.data)

    @extend_schema(request=RaffleInputSerializer, responses={201: RaffleSerializer})
    def create(self, request):
        input_serializer = RaffleInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        raffle = create_raffle(
            title=data['title'],
            category=data['category'],
            date=data['date'],
            ticket_price=data['ticket_price'],
        )

        return Response(RaffleSerializer(raffle).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: RaffleSerializer})
    def retrieve(self, request, pk=None):
        return Response(RaffleSerializer(get_raffle(pk)).data)

    @extend_schema(
        request=RaffleInputSerializer,
        responses={200: RaffleSerializer, 409: PendingReimbursementsResponseSerializer},
    )
    def update(self, request, pk=None):
        """Full replace; is_finalized keeps its current value when omitted."""
        current = get_raffle(pk)

        input_serializer = RaffleInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        is_finalized = data.get('is_finalized')
        if is_finalized is None:
            is_finalized = current.is_finalized
        if is_finalized and not current.is_finalized:
            ensure_raffle_finalizable(current)

        raffle = update_raffle(
            raffle_id=current.id,
            title=data['title'],
            category=data['category'],
            date=data['date'],
            ticket_price=data['ticket_price'],
            is_finalized=is_finalized,
        )

        return Response(RaffleSerializer(raffle).data)

    @extend_schema(responses={204: None, 409: PendingReimbursementsResponseSerializer})
    def destroy(self, request, pk=None):
        raffle = get_raffle(pk)
        ensure_raffle_deletable(raffle)

        delete_raffle(raffle_id=raffle.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: RaffleSerializer, 409: PendingReimbursementsResponseSerializer})
    @action(detail=True, methods=['post'])
    def toggle_finalize(self, request, pk=None):
        """
        Finalize an active raffle or reopen a finalized one.

        POST /api/raffles/{id}/toggle_finalize/
        """
        raffle = get_raffle(pk)
        ensure_raffle_finalizable(raffle)

        raffle = toggle_finalize_raffle(raffle_id=raffle.id)
        return Response(RaffleSerializer(raffle).data)


@extend_schema(
    request=EntryInputSerializer,
    responses={201: PolymorphicProxySerializer(
        component_name='Entry',
        serializers=list(ENTRY_OUTPUT_SERIALIZERS.values()),
        resource_type_field_name=None,
    )},
    description="Add a sale or cost to a raffle. The body's `type` selects which.",
    tags=['raffles'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def raffle_entries(request, raffle_id):
    """Add an entry to a raffle."""
    entry_type = _entry_type_from(request.data)
    data = _validated_entry_data(entry_type, request.data)

    entry = add_entry(raffle_id=raffle_id, entry_type=entry_type, data=data)

    serializer = ENTRY_OUTPUT_SERIALIZERS[entry_type](entry)
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[
        OpenApiParameter('type', OpenApiTypes.STR, enum=EntryType.values,
                         description='Entry type (DELETE only; PUT reads it from the body)'),
    ],
    request=EntryInputSerializer,
    description="Replace or delete a sale/cost of a raffle.",
    tags=['raffles'],
)
@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def raffle_entry_detail(request, raffle_id, entry_id):
    """Update or delete a single entry."""
    if request.method == 'DELETE':
        entry_type = _entry_type_from(request.query_params)
        delete_entry(raffle_id=raffle_id, entry_type=entry_type, entry_id=entry_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    entry_type = _entry_type_from(request.data)
    data = _validated_entry_data(entry_type, request.data)

    entry = update_entry(
        raffle_id=raffle_id,
        entry_type=entry_type,
        entry_id=entry_id,
        data=data,
    )

    serializer = ENTRY_OUTPUT_SERIALIZERS[entry_type](entry)
    return Response(serializer.data)


@extend_schema(
    request=ReimbursementInputSerializer,
    responses={200: CostSerializer},
    description="Record (POST) or clear (DELETE) the reimbursement of a cost.",
    tags=['raffles'],
)
@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def cost_reimbursement(request, raffle_id, cost_id):
    """Record or clear a reimbursement."""
    if request.method == 'DELETE':
        cost = clear_reimbursement(raffle_id=raffle_id, cost_id=cost_id)
        return Response(CostSerializer(cost).data)

    input_serializer = ReimbursementInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    cost = record_reimbursement(
        raffle_id=raffle_id,
        cost_id=cost_id,
        reimbursed_date=input_serializer.validated_data['reimbursed_date'],
        reimbursement_notes=input_serializer.validated_data.get('reimbursement_notes', ''),
    )

    return Response(CostSerializer(cost).data)
