# Generated manually for history app

import uuid
import django.core.serializers.json
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='HistoryLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('action_type', models.CharField(choices=[('CREATE_RAFFLE', 'Create raffle'), ('UPDATE_RAFFLE', 'Update raffle'), ('DELETE_RAFFLE', 'Delete raffle'), ('TOGGLE_FINALIZE_RAFFLE', 'Toggle finalize raffle'), ('ADD_SALE', 'Add sale'), ('UPDATE_SALE', 'Update sale'), ('DELETE_SALE', 'Delete sale'), ('ADD_COST', 'Add cost'), ('UPDATE_COST', 'Update cost'), ('DELETE_COST', 'Delete cost'), ('ADD_REIMBURSEMENT', 'Add reimbursement'), ('DELETE_REIMBURSEMENT', 'Delete reimbursement')], max_length=32)),
                ('description', models.TextField(blank=True)),
                ('raffle_id', models.UUIDField()),
                ('raffle_title', models.CharField(max_length=200)),
                ('entity_id', models.UUIDField(blank=True, null=True)),
                ('before_state', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('after_state', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('undone', models.BooleanField(default=False)),
                ('undone_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'db_table': 'history_logs',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['timestamp'], name='history_timestamp_idx'),
                    models.Index(fields=['raffle_id', 'timestamp'], name='history_raffle_time_idx'),
                    models.Index(fields=['undone'], name='history_undone_idx'),
                ],
            },
        ),
    ]
