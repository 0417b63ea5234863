import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.raffles.services import create_raffle, add_entry


User = get_user_model()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def history_user(db):
    """Create and return the operator account."""
    return User.objects.create_user(
        username='auditor',
        email='auditor@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def history_auth_client(api_client, history_user):
    """Return API client authenticated as the operator."""
    refresh = RefreshToken.for_user(history_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def logged_raffle(db):
    """Create a raffle through the service, so it has a CREATE_RAFFLE entry."""
    return create_raffle(
        title='X',
        category='Caboclo',
        date='2025-01-01',
        ticket_price=10,
    )


@pytest.fixture
def logged_sale(logged_raffle):
    """Add a sale of 5 tickets through the service."""
    return add_entry(
        raffle_id=logged_raffle.id,
        entry_type='sale',
        data={'quantity': 5, 'description': 'Maria'},
    )


@pytest.fixture
def logged_reimbursement(logged_raffle):
    """Add a pending reimbursement cost through the service."""
    return add_entry(
        raffle_id=logged_raffle.id,
        entry_type='cost',
        data={
            'description': 'Prizes',
            'amount': '100.00',
            'date': '2025-01-02',
            'is_reimbursement': True,
            'notes': 'Advanced by Joana',
        },
    )
