# ==========================================
# apps/raffles/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Raffle, Sale, Cost, ReimbursementStatus


class ReadOnlyAdminMixin:
    """Raffle data is changed through the API only, so history stays complete."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class SaleInline(ReadOnlyAdminMixin, admin.TabularInline):
    """Inline admin for sales within a raffle."""
    model = Sale
    extra = 0
    fields = ['description', 'quantity', 'amount']


class CostInline(ReadOnlyAdminMixin, admin.TabularInline):
    """Inline admin for costs within a raffle."""
    model = Cost
    extra = 0
    fields = ['description', 'amount', 'date', 'kind', 'reimbursed_date']


@admin.register(Raffle)
class RaffleAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """
    Admin interface for Raffles (read-only).

    Provides:
    - Raffle listing with finalized status
    - Inline sales and costs
    - Filtering by category, status, date
    """

    list_display = [
        'title',
        'category',
        'date',
        'ticket_price',
        'status_badge',
    ]

    list_filter = [
        'category',
        'is_finalized',
        'date',
    ]

    search_fields = ['title']
    inlines = [SaleInline, CostInline]
    date_hierarchy = 'date'
    ordering = ['-date', 'title']

    def status_badge(self, obj):
        """Display finalized status as colored badge."""
        if obj.is_finalized:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Finalized</span>'
            )
        return format_html(
            '<span style="background: #E5C49A; color: #2C1810; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Active</span>'
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'is_finalized'


@admin.register(Cost)
class CostAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Admin interface for Costs, mainly to track reimbursements."""

    list_display = [
        'description',
        'raffle',
        'amount',
        'kind',
        'reimbursement_badge',
        'reimbursed_date',
    ]

    list_filter = ['kind', 'reimbursed_date']
    search_fields = ['description', 'raffle__title', 'notes']
    ordering = ['raffle', 'description']

    def reimbursement_badge(self, obj):
        """Display reimbursement status as colored badge."""
        colors = {
            ReimbursementStatus.PENDING: ('#E5C49A', '#2C1810'),
            ReimbursementStatus.REIMBURSED: ('#6B8E5E', 'white'),
        }
        status = obj.reimbursement_status
        if status not in colors:
            return "—"
        bg, fg = colors[status]
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, status.label
        )
    reimbursement_badge.short_description = 'Reimbursement'

    def get_queryset(self, request):
        """Optimize query with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('raffle')
