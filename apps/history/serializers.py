from rest_framework import serializers

from .models import HistoryLog


# =============================================================================
# Input Serializers
# =============================================================================

class HistoryFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for history filtering.

    Query Parameters:
        raffle (UUID): Only entries for this raffle
        include_undone (bool): Include undone entries (default true)
    """

    raffle = serializers.UUIDField(required=False)
    include_undone = serializers.BooleanField(required=False, default=True)


# =============================================================================
# Output Serializers
# =============================================================================

class HistoryLogSerializer(serializers.ModelSerializer):
    """Serializer for history entries, snapshots included."""

    action_type_display = serializers.CharField(source='get_action_type_display', read_only=True)

    class Meta:
        model = HistoryLog
        fields = [
            'id',
            'timestamp',
            'action_type',
            'action_type_display',
            'description',
            'raffle_id',
            'raffle_title',
            'entity_id',
            'before_state',
            'after_state',
            'undone',
            'undone_at',
        ]
        read_only_fields = fields
