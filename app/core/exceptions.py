"""
Business exception hierarchy for the guest list and RSVP flow.

These exceptions describe domain failures, not HTTP responses. The API
layer maps them to status codes in ``app.utils.responses``.
"""

from typing import Optional


class GuestListError(Exception):
    """Base class for every error raised by the guest services."""

    status_code = 400

    def __init__(self, message: str, error_code: str = None, context: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def get_context(self) -> dict:
        """Get additional error context for logging/debugging"""
        return self.context


class ValidationError(GuestListError):
    """
    Raised when submitted data breaks a business rule the user can fix.

    For missing companion names ``required`` is the number of companion
    slots the invitation has and ``missing`` how many of them are blank.
    """

    status_code = 422

    def __init__(
        self,
        message: str,
        required: Optional[int] = None,
        missing: Optional[int] = None,
        context: dict = None,
    ):
        context = dict(context or {})
        if required is not None:
            context["required"] = required
        if missing is not None:
            context["missing"] = missing
        super().__init__(message, context=context)
        self.required = required
        self.missing = missing


class NotFoundError(GuestListError):
    """Raised when no guest matches a name query, id or name key."""

    status_code = 404


class StoreError(GuestListError):
    """
    Raised when the guest directory cannot be reached or rejects a request.

    Store errors are transient from the caller's point of view: nothing was
    applied and the same request can be retried.
    """

    status_code = 502
    retryable = True


class ConflictError(GuestListError):
    """Raised when a write would conflict with the stored state."""

    status_code = 409


class AlreadyRespondedError(ConflictError):
    """Raised when a guest that already confirmed or declined submits again."""


class DuplicateGuestError(ConflictError):
    """Raised when an admin creates a guest whose name is already listed."""
