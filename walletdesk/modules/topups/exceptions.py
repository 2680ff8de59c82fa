"""Top-up specific exceptions."""

from walletdesk.modules.common.exceptions import DomainError, NotFoundError, ValidationError


class TopupError(DomainError):
    """Base class for top-up errors."""


class TopupNotFoundError(TopupError, NotFoundError):
    """Top-up order does not exist."""


class TopupAlreadyReviewedError(TopupError, ValidationError):
    """Top-up order has already been approved or rejected."""
