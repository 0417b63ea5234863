"""Business rules checked by callers before deleting or finalizing a raffle."""

from apps.raffles.exceptions import PendingReimbursementsError, RaffleFinalizedError
from apps.raffles.models import Raffle


def ensure_raffle_deletable(raffle: Raffle) -> None:
    """
    Raises:
        RaffleFinalizedError: If the raffle is finalized
        PendingReimbursementsError: If any reimbursement is still pending
    """
    if raffle.is_finalized:
        raise RaffleFinalizedError()

    pending = list(raffle.pending_reimbursements())
    if pending:
        raise PendingReimbursementsError('deleted', pending)


def ensure_raffle_finalizable(raffle: Raffle) -> None:
    """Reopening is always allowed; finalizing needs every reimbursement settled."""
    if raffle.is_finalized:
        return

    pending = list(raffle.pending_reimbursements())
    if pending:
        raise PendingReimbursementsError('finalized', pending)
