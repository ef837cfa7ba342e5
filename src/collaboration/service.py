"""Collaboration service: unified facade for the contribution tracker.

This is the primary interface for programmatic access. It orchestrates
all subsystems:
- Identity & role registry (bootstrap, admin promotion, admin lookup)
- Contribution ledger (submission, one-time verification, lookup)
- Contributor profiles (lazy creation, score accumulation)
- Tier engine (explicit, unauthenticated tier recomputation)
- Persistence (event log, state store)

The caller identity is always an explicit argument supplied by the
host; the service never invents one. Every mutating operation returns
a ServiceResult. Refused operations carry the ErrorCode of the refusal.
State changes are recorded in the event log when one is wired; if the
audit append fails, the in-memory change is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from collaboration.errors import CollaborationError, ErrorCode, NotAdminError, NotFoundError
from collaboration.identity.registry import (
    AuthorizationContext,
    bootstrap,
    canonical_principal,
    promote,
)
from collaboration.ledger.contributions import ContributionLedger
from collaboration.models.contribution import Contribution, ContributorProfile, Tier
from collaboration.persistence.event_log import EventKind, EventLog, EventRecord
from collaboration.persistence.state_store import StateStore
from collaboration.policy.resolver import PolicyResolver
from collaboration.profiles.store import ProfileStore
from collaboration.tiers.engine import TierEngine


logger = logging.getLogger(__name__)


def _last_event_number(event_log: Optional[EventLog]) -> int:
    """Return the numeric suffix of the last logged EVT-NNNNNNNN ID, or 0."""
    if event_log is None or event_log.last_event is None:
        return 0
    _, _, suffix = event_log.last_event.event_id.rpartition("-")
    return max(int(suffix), event_log.count) if suffix.isdigit() else event_log.count


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    error_code: Optional[ErrorCode] = None


class CollaborationService:
    """Unified contribution-tracking facade.

    Usage:
        service = CollaborationService(PolicyResolver.defaults())
        service.initialize("owner")
        service.add_admin("owner", "reviewer")

        result = service.submit_contribution("alice", "Wrote the docs")
        cid = result.data["contribution_id"]
        service.verify_contribution("reviewer", cid, score=150)
        service.update_tier("anyone", "alice")

    Persistence (optional):
        service = CollaborationService(resolver, event_log=log, state_store=store)
        # State is persisted on each mutation and loaded on construction.
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        event_log: Optional[EventLog] = None,
        state_store: Optional[StateStore] = None,
    ) -> None:
        self._resolver = resolver
        self._tier_engine = TierEngine(resolver)
        self._event_log = event_log
        self._state_store = state_store

        if state_store is not None:
            self._auth = state_store.load_authorization()
            self._ledger = state_store.load_ledger()
            self._profiles = state_store.load_profiles()
        else:
            self._auth = AuthorizationContext()
            self._ledger = ContributionLedger()
            self._profiles = ProfileStore()

        # Seed from the last persisted ID, not the count, so a gap left by
        # an earlier failed append cannot cause a collision on restart.
        self._event_counter = _last_event_number(event_log)

        # Set when a StateStore write fails after the audit event is durable.
        self._persistence_degraded: bool = False

    # ------------------------------------------------------------------
    # Identity & roles
    # ------------------------------------------------------------------

    def initialize(self, caller: str) -> ServiceResult:
        """Make caller the owner and first admin. Rejected if repeated."""
        try:
            new_ctx = bootstrap(self._auth, caller)
        except CollaborationError as e:
            return self._refused("initialize", e)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        previous = self._auth
        self._auth = new_ctx

        def _rollback() -> None:
            self._auth = previous

        err = self._record_event(
            EventKind.ADMIN_BOOTSTRAPPED, new_ctx.owner, {"owner": new_ctx.owner},
            on_rollback=_rollback,
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        logger.info("Initialized with owner %s", new_ctx.owner)
        return self._committed({"owner": new_ctx.owner})

    def add_admin(self, caller: str, principal: str) -> ServiceResult:
        """Promote principal to admin. Only the owner may do this."""
        try:
            new_ctx = promote(self._auth, caller, principal)
        except CollaborationError as e:
            return self._refused("add_admin", e)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        target = principal.strip()
        already_admin = new_ctx is self._auth
        previous = self._auth
        self._auth = new_ctx

        def _rollback() -> None:
            self._auth = previous

        err = self._record_event(
            EventKind.ADMIN_ADDED,
            caller.strip(),
            {"admin": target, "already_admin": already_admin},
            on_rollback=_rollback,
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        logger.info("Admin %s added by %s", target, caller.strip())
        return self._committed({"admin": target, "already_admin": already_admin})

    def is_admin(self, principal: str) -> bool:
        """Public admin lookup. Never fails."""
        return self._auth.is_admin(principal)

    @property
    def owner(self) -> Optional[str]:
        return self._auth.owner

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------

    def submit_contribution(self, caller: str, details: str) -> ServiceResult:
        """Record a new contribution by caller and upsert caller's profile."""
        try:
            contributor = canonical_principal(caller)
            self._check_details(details)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        cid = self._ledger.submit(contributor, details)
        profile, created = self._profiles.record_submission(contributor)

        def _rollback() -> None:
            self._ledger.withdraw_last(cid)
            if created:
                self._profiles.discard(contributor)
            else:
                profile.contribution_count -= 1

        err = self._record_event(
            EventKind.CONTRIBUTION_SUBMITTED,
            contributor,
            {
                "contribution_id": cid,
                "contribution_count": profile.contribution_count,
                "profile_created": created,
            },
            on_rollback=_rollback,
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        logger.info(
            "Contribution %d submitted by %s (profile_created=%s)",
            cid, contributor, created,
        )
        return self._committed({"contribution_id": cid, "profile_created": created})

    def verify_contribution(
        self, caller: str, contribution_id: int, score: int,
    ) -> ServiceResult:
        """Assign a score to an unverified contribution. Admins only.

        Checks, in order: caller is admin, score is a non-negative
        integer, contribution exists, it is not yet verified, the score
        fits under the ceiling. Nothing is mutated unless every check
        passes.
        """
        try:
            verifier = canonical_principal(caller)
            if not self._auth.is_admin(verifier):
                raise NotAdminError(f"{verifier} is not an admin")
            self._check_score(score)
            record = self._ledger.check_verifiable(contribution_id)
            self._profiles.check_accumulate(
                record.contributor, score, self._resolver.score_ceiling(),
            )
        except CollaborationError as e:
            return self._refused("verify_contribution", e)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        self._ledger.mark_verified(contribution_id, score, verifier)
        profile = self._profiles.accumulate(
            record.contributor, score, self._resolver.score_ceiling(),
        )

        def _rollback() -> None:
            self._ledger.unmark_verified(contribution_id)
            profile.total_score -= score

        err = self._record_event(
            EventKind.CONTRIBUTION_VERIFIED,
            verifier,
            {
                "contribution_id": contribution_id,
                "contributor": record.contributor,
                "score": score,
                "total_score": profile.total_score,
            },
            on_rollback=_rollback,
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        logger.info(
            "Contribution %d verified by %s with score %d",
            contribution_id, verifier, score,
        )
        return self._committed({
            "contribution_id": contribution_id,
            "contributor": record.contributor,
            "score": score,
            "total_score": profile.total_score,
        })

    def get_contribution(self, contribution_id: int) -> Optional[Contribution]:
        """Look up a contribution."""
        return self._ledger.get(contribution_id)

    def contributions_for(self, principal: str) -> list[Contribution]:
        return self._ledger.contributions_for(principal.strip())

    # ------------------------------------------------------------------
    # Profiles & tiers
    # ------------------------------------------------------------------

    def get_profile(self, principal: str) -> Optional[ContributorProfile]:
        """Look up a contributor profile. None if they never submitted."""
        return self._profiles.get(principal)

    def update_tier(self, caller: str, principal: str) -> ServiceResult:
        """Recompute and store principal's tier. Any caller may do this."""
        try:
            requester = canonical_principal(caller)
            profile = self._require_profile(principal)
        except CollaborationError as e:
            return self._refused("update_tier", e)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        updated, change = self._tier_engine.recompute(profile)
        self._profiles.set_tier(profile.contributor, updated.tier)

        def _rollback() -> None:
            self._profiles.set_tier(profile.contributor, change.previous_tier)

        err = self._record_event(
            EventKind.TIER_UPDATED,
            requester,
            {
                "contributor": change.contributor,
                "previous_tier": change.previous_tier.name,
                "new_tier": change.new_tier.name,
                "total_score": change.total_score,
            },
            on_rollback=_rollback,
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        if change.changed:
            logger.info(
                "Tier of %s changed %s -> %s",
                change.contributor, change.previous_tier.name, change.new_tier.name,
            )
        return self._committed({
            "contributor": change.contributor,
            "tier": change.new_tier,
            "previous_tier": change.previous_tier,
            "changed": change.changed,
        })

    def get_tier(self, principal: str) -> ServiceResult:
        """Return the stored (possibly stale) tier in data["tier"]."""
        try:
            profile = self._require_profile(principal)
        except CollaborationError as e:
            return self._refused("get_tier", e)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])
        return ServiceResult(success=True, data={"tier": profile.tier})

    def classify(self, total_score: int) -> Tier:
        """Expose the pure tier classification."""
        return self._tier_engine.classify(total_score)

    # ------------------------------------------------------------------
    # Status & invariants
    # ------------------------------------------------------------------

    def check_invariants(self) -> list[str]:
        """Cross-check profiles against the ledger. Empty list means consistent."""
        errors: list[str] = []
        if self._auth.initialized and self._auth.owner not in self._auth.admins:
            errors.append(f"Owner {self._auth.owner} is not an admin")

        for profile in self._profiles.all_profiles():
            records = self._ledger.contributions_for(profile.contributor)
            expected_total = sum(c.score for c in records if c.verified)
            if profile.total_score != expected_total:
                errors.append(
                    f"{profile.contributor}: total_score {profile.total_score} "
                    f"!= verified sum {expected_total}"
                )
            if profile.contribution_count != len(records):
                errors.append(
                    f"{profile.contributor}: contribution_count "
                    f"{profile.contribution_count} != {len(records)} records"
                )

        for record in self._ledger.all_contributions():
            if self._profiles.get(record.contributor) is None:
                errors.append(
                    f"Contribution {record.contribution_id} has no profile "
                    f"for {record.contributor}"
                )
        return errors

    def status(self) -> dict[str, Any]:
        """Return system-wide status summary."""
        return {
            "version": "0.1.0",
            "params_version": self._resolver.version,
            "registry": {
                "initialized": self._auth.initialized,
                "owner": self._auth.owner,
                "admins": len(self._auth.admins),
            },
            "contributions": {
                "total": self._ledger.count,
                "verified": self._ledger.verified_count,
                "last_id": self._ledger.last_id,
            },
            "contributors": {
                "total": self._profiles.count,
                "active": self._profiles.active_count,
            },
            "events": self._event_log.count if self._event_log is not None else 0,
            "persistence_degraded": self._persistence_degraded,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_profile(self, principal: str) -> ContributorProfile:
        try:
            key = canonical_principal(principal)
        except ValueError:
            raise NotFoundError(f"No contributor profile for {principal!r}") from None
        profile = self._profiles.get(key)
        if profile is None:
            raise NotFoundError(f"No contributor profile for {key}")
        return profile

    def _check_details(self, details: str) -> None:
        if not isinstance(details, str):
            raise ValueError(f"Details must be a string, got {type(details).__name__}")
        limit = self._resolver.max_details_length()
        if len(details) > limit:
            raise ValueError(
                f"Details exceed {limit} characters (got {len(details)})"
            )

    @staticmethod
    def _check_score(score: int) -> None:
        if not isinstance(score, int) or isinstance(score, bool):
            raise ValueError(f"Score must be an integer, got {type(score).__name__}")
        if score < 0:
            raise ValueError(f"Score must be non-negative, got {score}")

    @staticmethod
    def _refused(operation: str, error: CollaborationError) -> ServiceResult:
        logger.warning("%s refused [%d]: %s", operation, error.code, error.message)
        return ServiceResult(
            success=False, errors=[error.message], error_code=error.code,
        )

    def _committed(self, data: dict[str, Any]) -> ServiceResult:
        warning = self._safe_persist_post_audit()
        if warning:
            data["warning"] = warning
        return ServiceResult(success=True, data=data)

    def _next_event_id(self) -> str:
        """Generate a monotonically increasing unique event ID."""
        self._event_counter += 1
        return f"EVT-{self._event_counter:08d}"

    def _record_event(
        self,
        kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
        on_rollback: Optional[Callable[[], None]] = None,
    ) -> Optional[str]:
        """Append an audit event. Returns error string or None.

        Fail-closed: if the append fails, the rollback callback undoes
        the in-memory mutation before the error is returned.
        """
        if self._event_log is None:
            return None
        try:
            event = EventRecord.create(
                event_id=self._next_event_id(),
                event_kind=kind,
                actor_id=actor_id,
                payload=payload,
            )
            self._event_log.append(event)
        except (ValueError, OSError) as e:
            # The ID was never written; hand it to the next event.
            self._event_counter -= 1
            if on_rollback is not None:
                on_rollback()
            logger.error("Event log failure for %s: %s", kind.value, e)
            return f"Event log failure: {e}"
        return None

    def _persist_state(self) -> None:
        """Persist current state to the state store (if wired)."""
        if self._state_store is None:
            return
        self._state_store.save(self._auth, self._ledger, self._profiles)

    def _safe_persist_post_audit(self) -> Optional[str]:
        """Persist state after audit events have been committed.

        MUST NOT rollback in-memory state: the audit trail is already
        durable. On failure the in-memory state stays correct but the
        StateStore is stale, so the degraded flag is set and a warning
        string is returned.
        """
        try:
            self._persist_state()
            return None
        except OSError as e:
            self._persistence_degraded = True
            logger.error("State store write failed: %s", e)
            return f"Persistence degraded: {e}; state committed in audit trail but StateStore is stale"
