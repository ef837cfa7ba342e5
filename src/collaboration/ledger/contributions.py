"""Contribution ledger: sequential IDs, records, and verification state.

IDs start at 1 and increase by exactly 1 per successful submission,
regardless of who submits. Records are never deleted. A record is
verified at most once: a second verification is refused, never
silently accepted or overwritten.

The ledger does not know about admins or profiles. Authorization and
profile accumulation are orchestrated by the service layer, which
calls check_verifiable() before mutating anything and mark_verified()
only once every other check has passed.

Thread-safety: this class is not thread-safe. The caller must
serialise access (the next-ID counter is a plain integer).
"""

from __future__ import annotations

from typing import Iterable, Optional

from collaboration.errors import AlreadyVerifiedError, NotFoundError
from collaboration.models.contribution import Contribution


class ContributionLedger:
    """In-memory table of contributions keyed by ID.

    Usage:
        ledger = ContributionLedger()
        cid = ledger.submit("alice", "Fixed the parser")
        ledger.check_verifiable(cid)
        ledger.mark_verified(cid, score=150, verifier="admin")
    """

    def __init__(
        self,
        contributions: Optional[Iterable[Contribution]] = None,
        last_id: int = 0,
    ) -> None:
        self._contributions: dict[int, Contribution] = {}
        for c in contributions or ():
            if c.contribution_id in self._contributions:
                raise ValueError(f"Duplicate contribution ID: {c.contribution_id}")
            self._contributions[c.contribution_id] = c
        highest = max(self._contributions, default=0)
        if last_id < highest:
            raise ValueError(
                f"Counter {last_id} is behind highest stored ID {highest}"
            )
        self._last_id = last_id

    def submit(self, contributor: str, details: str) -> int:
        """Store a new unverified contribution and return its ID."""
        next_id = self._last_id + 1
        self._contributions[next_id] = Contribution(
            contribution_id=next_id,
            contributor=contributor,
            details=details,
        )
        self._last_id = next_id
        return next_id

    def get(self, contribution_id: int) -> Optional[Contribution]:
        return self._contributions.get(contribution_id)

    def check_verifiable(self, contribution_id: int) -> Contribution:
        """Return the record if it exists and is still unverified.

        Raises NotFoundError or AlreadyVerifiedError. Mutates nothing.
        """
        record = self._contributions.get(contribution_id)
        if record is None:
            raise NotFoundError(f"Contribution not found: {contribution_id}")
        if record.verified:
            raise AlreadyVerifiedError(
                f"Contribution {contribution_id} already verified "
                f"by {record.verifier} with score {record.score}"
            )
        return record

    def mark_verified(
        self, contribution_id: int, score: int, verifier: str,
    ) -> Contribution:
        """Apply the one-time verification to a record."""
        record = self.check_verifiable(contribution_id)
        record.verified = True
        record.score = score
        record.verifier = verifier
        return record

    def unmark_verified(self, contribution_id: int) -> None:
        """Restore a record to unverified. Rollback path only."""
        record = self._contributions[contribution_id]
        record.verified = False
        record.score = 0
        record.verifier = None

    def withdraw_last(self, contribution_id: int) -> None:
        """Undo the most recent submission. Rollback path only."""
        if contribution_id != self._last_id:
            raise ValueError(
                f"Can only withdraw the latest contribution ({self._last_id})"
            )
        del self._contributions[contribution_id]
        self._last_id -= 1

    def contributions_for(self, contributor: str) -> list[Contribution]:
        """Return a contributor's contributions in ID order."""
        return [
            c for _, c in sorted(self._contributions.items())
            if c.contributor == contributor
        ]

    def all_contributions(self) -> list[Contribution]:
        return [c for _, c in sorted(self._contributions.items())]

    @property
    def last_id(self) -> int:
        return self._last_id

    @property
    def count(self) -> int:
        return len(self._contributions)

    @property
    def verified_count(self) -> int:
        return sum(1 for c in self._contributions.values() if c.verified)
