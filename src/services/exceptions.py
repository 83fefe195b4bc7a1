"""
Error taxonomy for store and backend operations.

Backends translate driver-specific failures (database integrity errors,
HTTP status codes) into these types so the store can report them uniformly.
"""

from typing import Optional


class ScopeError(Exception):
    """Base exception for S.C.O.P.E. data operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(ScopeError):
    """No active session when an account-scoped operation requires one."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class DuplicateCategoryError(ScopeError):
    """A category name collides (case-insensitively) with an existing one."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category '{name}' already exists")


class NotFoundError(ScopeError):
    """A referenced row is absent."""

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ValidationError(ScopeError):
    """
    Client-side validation rejected a submission before any backend call.

    Attributes:
        errors: Mapping of form field key (e.g. "traffic_1_member_id") to message
    """

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


class BackendError(ScopeError):
    """
    Unstructured backend failure.

    Carries the underlying message and, when available, the backend's error
    code (HTTP status, SQLSTATE) and the original exception.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.original_error = original_error

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} (Code: {self.code})"
        return self.message
