"""
Service layer for S.C.O.P.E.

Provides:
- Identifier generation for new rows
- Normalization between backend rows and domain objects
- Form validation
- The DomainStore cache and its derived views
- Local snapshot persistence
"""

from src.services.exceptions import (
    BackendError,
    DuplicateCategoryError,
    NotFoundError,
    ScopeError,
    UnauthenticatedError,
    ValidationError,
)

from src.services.store import (
    DomainStore,
    LoadState,
    Result,
    StoreState,
    get_store,
    reset_store,
)

__all__ = [
    # Errors
    "BackendError",
    "DuplicateCategoryError",
    "NotFoundError",
    "ScopeError",
    "UnauthenticatedError",
    "ValidationError",
    # Store
    "DomainStore",
    "LoadState",
    "Result",
    "StoreState",
    "get_store",
    "reset_store",
]
