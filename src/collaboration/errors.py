"""Domain error kinds for the collaboration core.

Every refused operation maps to exactly one ErrorCode. The numeric
values are small, distinct and stable so a calling layer can map
them to its own messages. Components raise the matching
CollaborationError subclass; the service facade converts it into a
failed ServiceResult at its boundary.

Ill-formed input (blank principals, negative scores) is not a domain
error: components raise ValueError for it.
"""

from __future__ import annotations

import enum


class ErrorCode(enum.IntEnum):
    """Numeric error signals returned to the environment."""
    NOT_OWNER = 100
    NOT_FOUND = 101
    NOT_ADMIN = 102
    ALREADY_VERIFIED = 103
    SCORE_OVERFLOW = 104
    ALREADY_INITIALIZED = 105


class CollaborationError(Exception):
    """Base class for refused operations. Carries its ErrorCode."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotOwnerError(CollaborationError):
    """Caller is not the registry owner."""
    code = ErrorCode.NOT_OWNER


class NotAdminError(CollaborationError):
    """Caller lacks the admin role."""
    code = ErrorCode.NOT_ADMIN


class NotFoundError(CollaborationError):
    """Referenced contribution or profile does not exist."""
    code = ErrorCode.NOT_FOUND


class AlreadyVerifiedError(CollaborationError):
    """Contribution has already been verified."""
    code = ErrorCode.ALREADY_VERIFIED


class ScoreOverflowError(CollaborationError):
    """Score or accumulated total would exceed the configured ceiling."""
    code = ErrorCode.SCORE_OVERFLOW


class AlreadyInitializedError(CollaborationError):
    """Bootstrap was attempted a second time."""
    code = ErrorCode.ALREADY_INITIALIZED


class InvariantViolation(RuntimeError):
    """Internal state is inconsistent. Never converted into a result."""
