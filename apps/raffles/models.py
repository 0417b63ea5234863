from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class RaffleCategory(models.TextChoices):
    CABOCLO = 'Caboclo', 'Caboclo'
    PRETO_VELHO = 'Preto Velho', 'Preto Velho'
    EXU = 'Exú', 'Exú'
    CRIANCAS = 'Crianças', 'Crianças'
    MATA = 'Mata', 'Mata'
    PRAIA = 'Praia', 'Praia'
    OUTRO = 'Outro', 'Outro'


class EntryType(models.TextChoices):
    SALE = 'sale', 'Sale'
    COST = 'cost', 'Cost'


class CostKind(models.TextChoices):
    REGULAR = 'regular', 'Regular'
    DONATION = 'donation', 'Donation'
    REIMBURSEMENT = 'reimbursement', 'Reimbursement'


class ReimbursementStatus(models.TextChoices):
    NOT_REIMBURSABLE = 'not_reimbursable', 'Not reimbursable'
    PENDING = 'pending', 'Pending'
    REIMBURSED = 'reimbursed', 'Reimbursed'


class Raffle(models.Model):
    """A fundraising draw with its ticket sales and costs."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    category = models.CharField(max_length=50, choices=RaffleCategory.choices)
    date = models.DateField()
    ticket_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    is_finalized = models.BooleanField(default=False)

    class Meta:
        db_table = 'raffles'
        indexes = [
            models.Index(fields=['date'], name='raffles_date_idx'),
            models.Index(fields=['category', 'date'], name='raffles_category_date_idx'),
        ]
        ordering = ['-date', 'title']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(ticket_price__gte=0),
                name='raffle_ticket_price_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.date})"

    def pending_reimbursements(self):
        """Costs advanced by someone and not yet paid back."""
        return self.costs.filter(
            kind=CostKind.REIMBURSEMENT,
            reimbursed_date__isnull=True,
        )


class Sale(models.Model):
    """Ticket sale recorded against a raffle."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    raffle = models.ForeignKey(
        Raffle,
        on_delete=models.CASCADE,
        related_name='sales'
    )
    description = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField()

    # Normally quantity * raffle.ticket_price, may be overridden
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    class Meta:
        db_table = 'sales'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name='sale_quantity_positive',
            ),
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name='sale_amount_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.quantity} ticket(s) - {self.amount}"


class Cost(models.Model):
    """Expense recorded against a raffle."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    raffle = models.ForeignKey(
        Raffle,
        on_delete=models.CASCADE,
        related_name='costs'
    )
    description = models.CharField(max_length=255)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    date = models.DateField(null=True, blank=True)
    kind = models.CharField(
        max_length=20,
        choices=CostKind.choices,
        default=CostKind.REGULAR
    )
    notes = models.TextField(blank=True)

    # Only meaningful for reimbursement costs
    reimbursed_date = models.DateField(null=True, blank=True)
    reimbursement_notes = models.TextField(blank=True)

    class Meta:
        db_table = 'costs'
        indexes = [
            models.Index(fields=['kind', 'reimbursed_date'], name='costs_kind_reimbursed_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name='cost_amount_non_negative',
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(kind=CostKind.REIMBURSEMENT)
                    | models.Q(reimbursed_date__isnull=True)
                ),
                name='cost_reimbursed_date_requires_reimbursement',
            ),
        ]

    def __str__(self):
        return f"{self.description} - {self.amount}"

    @property
    def is_donation(self):
        return self.kind == CostKind.DONATION

    @property
    def is_reimbursement(self):
        return self.kind == CostKind.REIMBURSEMENT

    @property
    def reimbursement_status(self):
        if not self.is_reimbursement:
            return ReimbursementStatus.NOT_REIMBURSABLE
        if self.reimbursed_date is None:
            return ReimbursementStatus.PENDING
        return ReimbursementStatus.REIMBURSED
