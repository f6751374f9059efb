"""ドメインサービスモジュール."""
from .cart_merge_service import CartMergeService, MergeFailureError
from .cart_state_engine import (
    CartConflictError,
    CartStateEngine,
    CartSummary,
    CartValidationError,
    CartValidationIssue,
    CartValidationReport,
    NoIdentityError,
)
from .clock import Clock, utc_now
from .credential_extractor import RequestFields, extract_credential, extract_guest_token
from .guest_session_store import GuestSessionNotFoundError, GuestSessionStore
from .identity_resolver import (
    ForbiddenError,
    IdentityResolver,
    ResolvedRequest,
    SessionExpiredError,
    UnauthenticatedError,
)
from .keyed_lock import KeyedLock

__all__ = [
    "CartConflictError",
    "CartMergeService",
    "CartStateEngine",
    "CartSummary",
    "CartValidationError",
    "CartValidationIssue",
    "CartValidationReport",
    "Clock",
    "ForbiddenError",
    "GuestSessionNotFoundError",
    "GuestSessionStore",
    "IdentityResolver",
    "KeyedLock",
    "MergeFailureError",
    "NoIdentityError",
    "RequestFields",
    "ResolvedRequest",
    "SessionExpiredError",
    "UnauthenticatedError",
    "extract_credential",
    "extract_guest_token",
    "utc_now",
]
