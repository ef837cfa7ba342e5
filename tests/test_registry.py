"""Tests for the identity and role registry transitions."""

import pytest

from collaboration.errors import AlreadyInitializedError, ErrorCode, NotOwnerError
from collaboration.identity.registry import (
    AuthorizationContext,
    bootstrap,
    canonical_principal,
    promote,
)


class TestBootstrap:
    def test_owner_becomes_admin(self) -> None:
        ctx = bootstrap(AuthorizationContext(), "owner")
        assert ctx.owner == "owner"
        assert ctx.is_admin("owner")
        assert ctx.initialized

    def test_second_bootstrap_rejected(self) -> None:
        ctx = bootstrap(AuthorizationContext(), "owner")
        with pytest.raises(AlreadyInitializedError) as exc:
            bootstrap(ctx, "intruder")
        assert exc.value.code == ErrorCode.ALREADY_INITIALIZED
        assert ctx.owner == "owner"
        assert not ctx.is_admin("intruder")

    def test_blank_caller_rejected(self) -> None:
        with pytest.raises(ValueError):
            bootstrap(AuthorizationContext(), "   ")


class TestPromote:
    def test_owner_promotes(self) -> None:
        ctx = bootstrap(AuthorizationContext(), "owner")
        new_ctx = promote(ctx, "owner", "reviewer")
        assert new_ctx.is_admin("reviewer")
        assert not ctx.is_admin("reviewer")  # original context untouched

    def test_non_owner_rejected(self) -> None:
        ctx = promote(bootstrap(AuthorizationContext(), "owner"), "owner", "reviewer")
        with pytest.raises(NotOwnerError) as exc:
            promote(ctx, "reviewer", "friend")
        assert exc.value.code == ErrorCode.NOT_OWNER

    def test_promote_before_bootstrap_rejected(self) -> None:
        with pytest.raises(NotOwnerError):
            promote(AuthorizationContext(), "anyone", "friend")

    def test_promote_existing_admin_is_noop(self) -> None:
        ctx = bootstrap(AuthorizationContext(), "owner")
        assert promote(ctx, "owner", "owner") is ctx

    def test_admin_set_only_grows(self) -> None:
        ctx = bootstrap(AuthorizationContext(), "owner")
        for name in ("a", "b", "c"):
            before = ctx.admins
            ctx = promote(ctx, "owner", name)
            assert before <= ctx.admins
        assert ctx.admins == frozenset({"owner", "a", "b", "c"})


class TestPrincipal:
    def test_strips_whitespace(self) -> None:
        assert canonical_principal("  alice ") == "alice"

    def test_non_string_rejected(self) -> None:
        with pytest.raises(ValueError):
            canonical_principal(42)
