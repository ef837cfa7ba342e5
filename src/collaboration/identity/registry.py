"""Identity and role registry: owner and admin set.

Authorization state is an explicit, immutable AuthorizationContext.
Every change produces a new context; nothing is mutated in place and
no module-level state exists. Callers hold the current context and
pass it to whatever needs an authorization decision.

Rules:
- The owner is set once, by bootstrap, and never changes.
- After bootstrap the owner is always an admin.
- Only the owner may promote another principal to admin.
- The admin set only grows. There is no removal operation.
- Admin lookup is public and never fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from collaboration.errors import AlreadyInitializedError, NotOwnerError


def canonical_principal(principal: str) -> str:
    """Strip whitespace from a principal. Raises ValueError if blank."""
    if not isinstance(principal, str):
        raise ValueError(f"Principal must be a string, got {type(principal).__name__}")
    canonical = principal.strip()
    if not canonical:
        raise ValueError("Principal cannot be blank")
    return canonical


@dataclass(frozen=True)
class AuthorizationContext:
    """Owner plus admin set. Immutable; transitions return a new context."""
    owner: Optional[str] = None
    admins: frozenset[str] = field(default_factory=frozenset)

    @property
    def initialized(self) -> bool:
        return self.owner is not None

    def is_admin(self, principal: str) -> bool:
        return principal.strip() in self.admins

    def is_owner(self, principal: str) -> bool:
        return self.owner is not None and principal.strip() == self.owner


def bootstrap(ctx: AuthorizationContext, caller: str) -> AuthorizationContext:
    """Establish caller as owner and first admin.

    Raises AlreadyInitializedError if an owner is already set; the
    existing context is left untouched.
    """
    caller = canonical_principal(caller)
    if ctx.initialized:
        raise AlreadyInitializedError(
            f"Registry already initialized with owner {ctx.owner}"
        )
    return AuthorizationContext(owner=caller, admins=ctx.admins | {caller})


def promote(
    ctx: AuthorizationContext, caller: str, target: str,
) -> AuthorizationContext:
    """Add target to the admin set. Only the owner may do this.

    Promoting an existing admin is a no-op that still succeeds.
    """
    caller = canonical_principal(caller)
    target = canonical_principal(target)
    if not ctx.is_owner(caller):
        raise NotOwnerError(f"{caller} is not the owner and cannot add admins")
    if target in ctx.admins:
        return ctx
    return AuthorizationContext(owner=ctx.owner, admins=ctx.admins | {target})
