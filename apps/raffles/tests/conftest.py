import pytest
from datetime import date
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.raffles.models import Raffle, Sale, Cost, CostKind, RaffleCategory


User = get_user_model()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def raffle_user(db):
    """Create and return the operator account."""
    return User.objects.create_user(
        username='treasurer',
        email='treasurer@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def raffle_auth_client(api_client, raffle_user):
    """Return API client authenticated as the operator."""
    refresh = RefreshToken.for_user(raffle_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def raffle(db):
    """Create and return an active raffle with a 10.00 ticket price."""
    return Raffle.objects.create(
        title='Festa de Caboclo',
        category=RaffleCategory.CABOCLO,
        date=date(2025, 1, 1),
        ticket_price=Decimal('10.00'),
    )


@pytest.fixture
def finalized_raffle(db):
    """Create and return a finalized raffle."""
    return Raffle.objects.create(
        title='Festa de Praia',
        category=RaffleCategory.PRAIA,
        date=date(2024, 12, 8),
        ticket_price=Decimal('5.00'),
        is_finalized=True,
    )


@pytest.fixture
def sale(raffle):
    """Create and return a sale of 5 tickets."""
    return Sale.objects.create(
        raffle=raffle,
        description='Maria',
        quantity=5,
        amount=Decimal('50.00'),
    )


@pytest.fixture
def regular_cost(raffle):
    """Create and return a regular cost."""
    return Cost.objects.create(
        raffle=raffle,
        description='Flowers',
        amount=Decimal('30.00'),
        date=date(2025, 1, 2),
    )


@pytest.fixture
def pending_reimbursement(raffle):
    """Create and return a reimbursement cost that was not paid back yet."""
    return Cost.objects.create(
        raffle=raffle,
        description='Prizes',
        amount=Decimal('100.00'),
        kind=CostKind.REIMBURSEMENT,
        notes='Advanced by Joana',
    )


@pytest.fixture
def donation(raffle):
    """Create and return a donated cost."""
    return Cost.objects.create(
        raffle=raffle,
        description='Cake (donated)',
        amount=Decimal('0.00'),
        kind=CostKind.DONATION,
    )
