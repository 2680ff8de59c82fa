"""Settlement specific exceptions."""

from walletdesk.modules.common.exceptions import DomainError, NotFoundError, StoreWriteError


class SettlementError(DomainError):
    """Base class for settlement errors."""


class SettlementRunNotFoundError(SettlementError, NotFoundError):
    """Settlement run does not exist."""


class TransferClaimError(SettlementError, StoreWriteError):
    """Matched transfer was settled by someone else before it could be claimed."""


class SettlementStateError(SettlementError, StoreWriteError):
    """Settlement run was not in the expected state."""
