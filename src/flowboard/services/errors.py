"""Exceptions raised by the service layer."""


class StoreError(Exception):
    """Base exception for board/task store failures.

    Messages are safe to show to the user as-is.
    """

    pass


class ContextError(StoreError):
    """No business or board is resolved for the operation."""

    pass


class RemoteWriteError(StoreError):
    """The document store rejected or failed a write."""

    pass


class AutomationValidationError(ValueError):
    """An automation draft is malformed and cannot be created."""

    pass


class AuthError(Exception):
    """Sign-in, registration or account lookup failed."""

    pass
