"""
Domain exceptions for the raffles app.

Every exception here is an APIException, so the service layer can raise
them directly and DRF renders the matching status code at the view
boundary. A failed operation never leaves partial state behind: the unit
of work rolls back before the exception reaches the caller.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class RaffleServiceError(APIException):
    """Base exception for raffle bookkeeping errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Raffle bookkeeping operation failed.'
    default_code = 'raffle_service_error'


class InvalidEntityError(RaffleServiceError):
    """Malformed or out-of-range input, keyed by the offending field."""
    default_detail = 'Invalid data.'
    default_code = 'invalid'

    def __init__(self, field, message):
        self.field = field
        self.message = message
        super().__init__(detail={field: [message]}, code=self.default_code)


class NotFoundError(RaffleServiceError):
    """Referenced raffle, entry or history log does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class RaffleNotFoundError(NotFoundError):
    """Raffle not found."""
    default_detail = 'Raffle not found.'
    default_code = 'raffle_not_found'


class EntryNotFoundError(NotFoundError):
    """Sale or cost not found in the raffle."""
    default_detail = 'Entry not found.'
    default_code = 'entry_not_found'


class RafflePolicyError(RaffleServiceError):
    """Operation is blocked by a business rule on the raffle."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Operation not allowed for this raffle.'
    default_code = 'raffle_policy_violation'


class RaffleFinalizedError(RafflePolicyError):
    """Finalized raffles cannot be deleted."""
    default_detail = 'Finalized raffles cannot be deleted. Reopen the raffle first.'
    default_code = 'raffle_finalized'


class PendingReimbursementsError(RafflePolicyError):
    """Raffle still has reimbursements waiting to be paid back."""
    default_code = 'pending_reimbursements'

    def __init__(self, action, pending_costs):
        self.pending_costs = list(pending_costs)
        super().__init__(
            detail={
                'detail': f'Raffle cannot be {action} while reimbursements are pending.',
                'pending_costs': [cost.description for cost in self.pending_costs],
            },
            code=self.default_code,
        )


class StorageError(APIException):
    """Backing store unreachable or transaction failure."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Storage is unavailable. Please try again.'
    default_code = 'storage_error'
