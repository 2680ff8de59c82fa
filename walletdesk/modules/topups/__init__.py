"""Top-up domain exports."""

from .exceptions import TopupAlreadyReviewedError, TopupError, TopupNotFoundError
from .models import TOPUP_DECISIONS, TOPUP_FAILED, TOPUP_PENDING, TOPUP_SUCCESS, TopupOrder
from .service import TopupService

__all__ = [
    "TOPUP_DECISIONS",
    "TOPUP_FAILED",
    "TOPUP_PENDING",
    "TOPUP_SUCCESS",
    "TopupAlreadyReviewedError",
    "TopupError",
    "TopupNotFoundError",
    "TopupOrder",
    "TopupService",
]
