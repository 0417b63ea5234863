from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone
import uuid


class HistoryActionType(models.TextChoices):
    CREATE_RAFFLE = 'CREATE_RAFFLE', 'Create raffle'
    UPDATE_RAFFLE = 'UPDATE_RAFFLE', 'Update raffle'
    DELETE_RAFFLE = 'DELETE_RAFFLE', 'Delete raffle'
    TOGGLE_FINALIZE_RAFFLE = 'TOGGLE_FINALIZE_RAFFLE', 'Toggle finalize raffle'
    ADD_SALE = 'ADD_SALE', 'Add sale'
    UPDATE_SALE = 'UPDATE_SALE', 'Update sale'
    DELETE_SALE = 'DELETE_SALE', 'Delete sale'
    ADD_COST = 'ADD_COST', 'Add cost'
    UPDATE_COST = 'UPDATE_COST', 'Update cost'
    DELETE_COST = 'DELETE_COST', 'Delete cost'
    ADD_REIMBURSEMENT = 'ADD_REIMBURSEMENT', 'Add reimbursement'
    DELETE_REIMBURSEMENT = 'DELETE_REIMBURSEMENT', 'Delete reimbursement'


class HistoryLog(models.Model):
    """
    Append-only record of a single raffle/sale/cost mutation.

    raffle_id and raffle_title are plain columns, not a foreign key, so the
    entry stays legible after the raffle is renamed or deleted. Only the
    undone flag ever changes after creation.
    """

    UNDO_FIELDS = frozenset({'undone', 'undone_at'})

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    timestamp = models.DateTimeField(default=timezone.now, editable=False)
    action_type = models.CharField(max_length=32, choices=HistoryActionType.choices)
    description = models.TextField(blank=True)

    raffle_id = models.UUIDField()
    raffle_title = models.CharField(max_length=200)
    entity_id = models.UUIDField(null=True, blank=True)

    before_state = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    after_state = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    undone = models.BooleanField(default=False)
    undone_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'history_logs'
        indexes = [
            models.Index(fields=['timestamp'], name='history_timestamp_idx'),
            models.Index(fields=['raffle_id', 'timestamp'], name='history_raffle_time_idx'),
            models.Index(fields=['undone'], name='history_undone_idx'),
        ]
        ordering = ['-timestamp']

    def __str__(self):
        state = ' (undone)' if self.undone else ''
        return f"{self.action_type} - {self.raffle_title}{state}"

    def save(self, *args, **kwargs):
        """Block every update except flipping the undone flag."""
        if not self._state.adding:
            update_fields = kwargs.get('update_fields')
            if not update_fields or not set(update_fields) <= self.UNDO_FIELDS:
                raise ValueError("History entries are append-only. Only the undone flag may change.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("History entries are append-only. Deletions are not allowed.")

    def mark_undone(self):
        self.undone = True
        self.undone_at = timezone.now()
        self.save(update_fields=['undone', 'undone_at'])
