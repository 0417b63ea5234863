# Generated manually for raffles app

import uuid
from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Raffle',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('category', models.CharField(choices=[('Caboclo', 'Caboclo'), ('Preto Velho', 'Preto Velho'), ('Exú', 'Exú'), ('Crianças', 'Crianças'), ('Mata', 'Mata'), ('Praia', 'Praia'), ('Outro', 'Outro')], max_length=50)),
                ('date', models.DateField()),
                ('ticket_price', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('is_finalized', models.BooleanField(default=False)),
            ],
            options={
                'db_table': 'raffles',
                'ordering': ['-date', 'title'],
                'indexes': [
                    models.Index(fields=['date'], name='raffles_date_idx'),
                    models.Index(fields=['category', 'date'], name='raffles_category_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(ticket_price__gte=0), name='raffle_ticket_price_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Sale',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('quantity', models.PositiveIntegerField()),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('raffle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sales', to='raffles.raffle')),
            ],
            options={
                'db_table': 'sales',
                'constraints': [
                    models.CheckConstraint(condition=models.Q(quantity__gte=1), name='sale_quantity_positive'),
                    models.CheckConstraint(condition=models.Q(amount__gte=0), name='sale_amount_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Cost',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('description', models.CharField(max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('date', models.DateField(blank=True, null=True)),
                ('kind', models.CharField(choices=[('regular', 'Regular'), ('donation', 'Donation'), ('reimbursement', 'Reimbursement')], default='regular', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('reimbursed_date', models.DateField(blank=True, null=True)),
                ('reimbursement_notes', models.TextField(blank=True)),
                ('raffle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='costs', to='raffles.raffle')),
            ],
            options={
                'db_table': 'costs',
                'indexes': [
                    models.Index(fields=['kind', 'reimbursed_date'], name='costs_kind_reimbursed_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(amount__gte=0), name='cost_amount_non_negative'),
                    models.CheckConstraint(condition=models.Q(('kind', 'reimbursement'), ('reimbursed_date__isnull', True), _connector='OR'), name='cost_reimbursed_date_requires_reimbursement'),
                ],
            },
        ),
    ]
