"""Domain exceptions for the history ledger and undo."""
from rest_framework import status

from apps.raffles.exceptions import NotFoundError, RaffleServiceError


class HistoryLogNotFoundError(NotFoundError):
    """History entry not found."""
    default_detail = 'History entry not found.'
    default_code = 'history_log_not_found'


class AlreadyUndoneError(RaffleServiceError):
    """History entry was already undone."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This action has already been undone.'
    default_code = 'already_undone'


class UnsupportedActionError(RaffleServiceError):
    """Action type is not part of the history vocabulary."""
    default_detail = 'Unsupported history action type.'
    default_code = 'unsupported_action'
