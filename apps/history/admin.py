from django.contrib import admin
from .models import HistoryLog


@admin.register(HistoryLog)
class HistoryLogAdmin(admin.ModelAdmin):
    """Admin interface for the history ledger (append-only, read-only)."""

    list_display = [
        'timestamp',
        'action_type',
        'raffle_title',
        'description',
        'undone',
    ]

    list_filter = [
        'action_type',
        'undone',
        'timestamp',
    ]

    search_fields = ['raffle_title', 'description']
    date_hierarchy = 'timestamp'
    ordering = ['-timestamp']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
