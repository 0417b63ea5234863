import pytest
from decimal import Decimal
from uuid import uuid4
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from apps.raffles.models import Raffle, Sale, Cost, CostKind
from apps.history.models import HistoryLog, HistoryActionType


def entries_url(raffle):
    return reverse('raffles:raffle-entries', kwargs={'raffle_id': raffle.id})


def entry_url(raffle, entry_id):
    return reverse('raffles:raffle-entry-detail', kwargs={'raffle_id': raffle.id, 'entry_id': entry_id})


def reimburse_url(raffle, cost):
    return reverse('raffles:cost-reimbursement', kwargs={'raffle_id': raffle.id, 'cost_id': cost.id})


# =============================================================================
# Raffle CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestRaffleList:
    """Tests for GET /api/raffles/"""

    def test_list_raffles_with_entries(self, raffle_auth_client, raffle, sale, regular_cost):
        """List returns raffles with nested sales and costs."""
        url = reverse('raffles:raffle-list')
        response = raffle_auth_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        data = response.data[0]
        assert data['id'] == str(raffle.id)
        assert data['ticket_price'] == '10.00'
        assert len(data['sales']) == 1
        assert data['sales'][0]['amount'] == '50.00'
        assert data['costs'][0]['kind'] == CostKind.REGULAR
        assert data['costs'][0]['reimbursement_status'] == 'not_reimbursable'

    def test_list_raffles_unauthenticated(self, api_client, raffle):
        """Unauthenticated users cannot list raffles."""
        url = reverse('raffles:raffle-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestRaffleCreate:
    """Tests for POST /api/raffles/"""

    def test_create_raffle(self, raffle_auth_client):
        url = reverse('raffles:raffle-list')
        data = {
            'title': 'X',
            'category': 'Caboclo',
            'date': '2025-01-01',
            'ticket_price': '10',
        }
        response = raffle_auth_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['title'] == 'X'
        assert response.data['is_finalized'] is False
        assert response.data['sales'] == []
        assert response.data['costs'] == []
        assert HistoryLog.objects.filter(action_type=HistoryActionType.CREATE_RAFFLE).count() == 1

    def test_create_raffle_invalid(self, raffle_auth_client):
        """Field errors are keyed by field."""
        url = reverse('raffles:raffle-list')
        data = {
            'title': 'X',
            'category': 'Unknown',
            'date': '2025-01-01',
            'ticket_price': '-5',
        }
        response = raffle_auth_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'category' in response.data
        assert 'ticket_price' in response.data
        assert Raffle.objects.count() == 0
        assert HistoryLog.objects.count() == 0

    def test_create_raffle_storage_failure(self, raffle_auth_client, monkeypatch):
        """Database failures surface as 503 and nothing is written."""
        def fail(**kwargs):
            raise DatabaseError('disk full')
        monkeypatch.setattr('apps.history.services.ledger.record', fail)

        url = reverse('raffles:raffle-list')
        data = {
            'title': 'X',
            'category': 'Caboclo',
            'date': '2025-01-01',
            'ticket_price': '10',
        }
        response = raffle_auth_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert Raffle.objects.count() == 0


@pytest.mark.django_db
class TestRaffleDetail:
    """Tests for GET/PUT/DELETE /api/raffles/{id}/"""

    def test_retrieve_raffle(self, raffle_auth_client, raffle):
        url = reverse('raffles:raffle-detail', kwargs={'pk': raffle.id})
        response = raffle_auth_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['title'] == raffle.title

    def test_retrieve_missing_raffle(self, raffle_auth_client):
        url = reverse('raffles:raffle-detail', kwargs={'pk': uuid4()})
        response = raffle_auth_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_raffle_keeps_finalized_flag(self, raffle_auth_client, finalized_raffle):
        """Omitting is_finalized keeps the current value."""
        url = reverse('raffles:raffle-detail', kwargs={'pk': finalized_raffle.id})
        data = {
            'title': 'Renamed',
            'category': 'Praia',
            'date': '2024-12-08',
            'ticket_price': '5.00',
        }
        response = raffle_auth_client.put(url, data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['title'] == 'Renamed'
        assert response.data['is_finalized'] is True
        assert HistoryLog.objects.get().action_type == HistoryActionType.UPDATE_RAFFLE

    def test_update_raffle_finalize_blocked_by_pending(self, raffle_auth_client, raffle, pending_reimbursement):
        url = reverse('raffles:raffle-detail', kwargs={'pk': raffle.id})
        data = {
            'title': raffle.title,
            'category': raffle.category,
            'date': '2025-01-01',
            'ticket_price': '10.00',
            'is_finalized': True,
        }
        response = raffle_auth_client.put(url, data, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['pending_costs'] == ['Prizes']
        raffle.refresh_from_db()
        assert raffle.is_finalized is False

    def test_delete_raffle(self, raffle_auth_client, raffle, sale, regular_cost):
        url = reverse('raffles:raffle-detail', kwargs={'pk': raffle.id})
        response = raffle_auth_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Raffle.objects.filter(id=raffle.id).exists()
        assert Sale.objects.count() == 0
        assert Cost.objects.count() == 0

    def test_delete_finalized_raffle_conflict(self, raffle_auth_client, finalized_raffle):
        url = reverse('raffles:raffle-detail', kwargs={'pk': finalized_raffle.id})
        response = raffle_auth_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert Raffle.objects.filter(id=finalized_raffle.id).exists()
        assert HistoryLog.objects.count() == 0

    def test_delete_raffle_with_pending_reimbursement(self, raffle_auth_client, raffle, pending_reimbursement):
        url = reverse('raffles:raffle-detail', kwargs={'pk': raffle.id})
        response = raffle_auth_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['pending_costs'] == ['Prizes']


@pytest.mark.django_db
class TestToggleFinalize:
    """Tests for POST /api/raffles/{id}/toggle_finalize/"""

    def test_finalize_and_reopen(self, raffle_auth_client, raffle):
        url = reverse('raffles:raffle-toggle-finalize', kwargs={'pk': raffle.id})

        response = raffle_auth_client.post(url)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_finalized'] is True

        response = raffle_auth_client.post(url)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_finalized'] is False

        assert HistoryLog.objects.filter(action_type=HistoryActionType.TOGGLE_FINALIZE_RAFFLE).count() == 2

    def test_finalize_blocked_by_pending(self, raffle_auth_client, raffle, pending_reimbursement):
        url = reverse('raffles:raffle-toggle-finalize', kwargs={'pk': raffle.id})
        response = raffle_auth_client.post(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['pending_costs'] == ['Prizes']


# =============================================================================
# Entry Tests
# =============================================================================

@pytest.mark.django_db
class TestEntries:
    """Tests for /api/raffles/{id}/entries/"""

    def test_add_sale(self, raffle_auth_client, raffle):
        response = raffle_auth_client.post(
            entries_url(raffle),
            {'type': 'sale', 'quantity': 5, 'description': ''},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['quantity'] == 5
        assert response.data['amount'] == '50.00'
        assert HistoryLog.objects.get().action_type == HistoryActionType.ADD_SALE

    def test_add_entry_requires_type(self, raffle_auth_client, raffle):
        response = raffle_auth_client.post(entries_url(raffle), {'quantity': 5}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'type' in response.data

    def test_add_sale_invalid_quantity(self, raffle_auth_client, raffle):
        response = raffle_auth_client.post(
            entries_url(raffle),
            {'type': 'sale', 'quantity': 0},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'quantity' in response.data

    def test_add_cost_both_flags(self, raffle_auth_client, raffle):
        response = raffle_auth_client.post(
            entries_url(raffle),
            {
                'type': 'cost',
                'description': 'Prizes',
                'amount': '100',
                'is_donation': True,
                'is_reimbursement': True,
            },
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'is_reimbursement' in response.data
        assert Cost.objects.count() == 0
        assert HistoryLog.objects.count() == 0

    def test_add_reimbursement_cost(self, raffle_auth_client, raffle):
        response = raffle_auth_client.post(
            entries_url(raffle),
            {'type': 'cost', 'description': 'Prizes', 'amount': '100', 'is_reimbursement': True},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['kind'] == CostKind.REIMBURSEMENT
        assert response.data['is_reimbursement'] is True
        assert response.data['reimbursement_status'] == 'pending'

    def test_add_entry_missing_raffle(self, raffle_auth_client, raffle):
        url = reverse('raffles:raffle-entries', kwargs={'raffle_id': uuid4()})
        response = raffle_auth_client.post(url, {'type': 'sale', 'quantity': 1}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_sale(self, raffle_auth_client, raffle, sale):
        response = raffle_auth_client.put(
            entry_url(raffle, sale.id),
            {'type': 'sale', 'quantity': 2, 'amount': '15.00', 'description': 'Maria'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['quantity'] == 2
        assert response.data['amount'] == '15.00'
        assert HistoryLog.objects.get().action_type == HistoryActionType.UPDATE_SALE

    def test_update_cost_sets_reimbursed_date(self, raffle_auth_client, raffle, pending_reimbursement):
        response = raffle_auth_client.put(
            entry_url(raffle, pending_reimbursement.id),
            {
                'type': 'cost',
                'description': 'Prizes',
                'amount': '100.00',
                'kind': 'reimbursement',
                'reimbursed_date': '2025-02-01',
            },
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['reimbursed_date'] == '2025-02-01'
        assert HistoryLog.objects.get().action_type == HistoryActionType.ADD_REIMBURSEMENT

    def test_update_fetched_cost_to_donation(self, raffle_auth_client, raffle, pending_reimbursement):
        """A cost read back from the API and resent with is_donation becomes a donation."""
        fetched = raffle_auth_client.get(reverse('raffles:raffle-detail', kwargs={'pk': raffle.id}))
        cost = fetched.data['costs'][0]

        response = raffle_auth_client.put(
            entry_url(raffle, pending_reimbursement.id),
            {**cost, 'type': 'cost', 'is_donation': True, 'is_reimbursement': False},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_donation'] is True
        assert response.data['kind'] == CostKind.DONATION
        assert response.data['reimbursement_status'] == 'not_reimbursable'

    def test_update_fetched_cost_flag_only(self, raffle_auth_client, raffle, pending_reimbursement):
        fetched = raffle_auth_client.get(reverse('raffles:raffle-detail', kwargs={'pk': raffle.id}))
        cost = fetched.data['costs'][0]

        response = raffle_auth_client.put(
            entry_url(raffle, pending_reimbursement.id),
            {**cost, 'type': 'cost', 'is_donation': True},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_donation'] is True
        assert response.data['is_reimbursement'] is False

    def test_update_missing_entry(self, raffle_auth_client, raffle):
        response = raffle_auth_client.put(
            entry_url(raffle, uuid4()),
            {'type': 'sale', 'quantity': 1},
            format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_sale(self, raffle_auth_client, raffle, sale):
        response = raffle_auth_client.delete(f"{entry_url(raffle, sale.id)}?type=sale")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Sale.objects.filter(id=sale.id).exists()
        assert HistoryLog.objects.get().action_type == HistoryActionType.DELETE_SALE

    def test_delete_entry_requires_type(self, raffle_auth_client, raffle, sale):
        response = raffle_auth_client.delete(entry_url(raffle, sale.id))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Sale.objects.filter(id=sale.id).exists()

    def test_delete_entry_wrong_type(self, raffle_auth_client, raffle, sale):
        """A sale id is not found among costs."""
        response = raffle_auth_client.delete(f"{entry_url(raffle, sale.id)}?type=cost")

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestReimbursement:
    """Tests for /api/raffles/{id}/costs/{cost_id}/reimburse/"""

    def test_record_reimbursement(self, raffle_auth_client, raffle, pending_reimbursement):
        response = raffle_auth_client.post(
            reimburse_url(raffle, pending_reimbursement),
            {'reimbursed_date': '2025-02-01', 'reimbursement_notes': 'Pix'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['reimbursement_status'] == 'reimbursed'
        assert response.data['reimbursement_notes'] == 'Pix'
        assert HistoryLog.objects.get().action_type == HistoryActionType.ADD_REIMBURSEMENT

    def test_record_reimbursement_requires_date(self, raffle_auth_client, raffle, pending_reimbursement):
        response = raffle_auth_client.post(reimburse_url(raffle, pending_reimbursement), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'reimbursed_date' in response.data

    def test_record_reimbursement_on_regular_cost(self, raffle_auth_client, raffle, regular_cost):
        response = raffle_auth_client.post(
            reimburse_url(raffle, regular_cost),
            {'reimbursed_date': '2025-02-01'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'kind' in response.data

    def test_clear_reimbursement(self, raffle_auth_client, raffle, pending_reimbursement):
        pending_reimbursement.reimbursed_date = '2025-02-01'
        pending_reimbursement.save()

        response = raffle_auth_client.delete(reimburse_url(raffle, pending_reimbursement))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['reimbursed_date'] is None
        assert response.data['reimbursement_status'] == 'pending'
        assert HistoryLog.objects.get().action_type == HistoryActionType.DELETE_REIMBURSEMENT
        assert Decimal(response.data['amount']) == Decimal('100.00')
