from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import HistoryLogSerializer, HistoryFilterSerializer
from apps.history.services import list_history, get_log, undo_action


class HistoryPagination(PageNumberPagination):
    """Custom pagination for history entries."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class HistoryLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for the history ledger.

    Entries are never edited or deleted through the API; the only write is
    undo, which applies the inverse of an entry once.

    list: Get history entries, newest first (filterable by raffle)
    retrieve: Get a specific entry with its before/after snapshots
    undo: Undo an entry
    """

    serializer_class = HistoryLogSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = HistoryPagination

    def get_queryset(self):
        """Filter history using input serializer validation."""
        filter_serializer = HistoryFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return list_history(
            raffle_id=params.get('raffle'),
            include_undone=params.get('include_undone', True),
        )

    @extend_schema(
        parameters=[
            OpenApiParameter('raffle', OpenApiTypes.UUID, description='Only entries for this raffle'),
            OpenApiParameter('include_undone', OpenApiTypes.BOOL, description='Include undone entries (default true)'),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        log = get_log(log_id=kwargs['pk'])
        return Response(HistoryLogSerializer(log).data)

    @extend_schema(request=None, responses={200: HistoryLogSerializer})
    @action(detail=True, methods=['post'])
    def undo(self, request, pk=None):
        """
        Undo a history entry.

        POST /api/history/{id}/undo/

        Returns 409 if the entry was already undone and 404 if the raffle
        or entry it targets no longer exists.
        """
        log = undo_action(log_id=pk)
        return Response(HistoryLogSerializer(log).data)
