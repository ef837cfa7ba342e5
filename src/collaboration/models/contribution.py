"""Contribution and contributor-profile data models.

A contribution is created unverified with a zero score and is mutated
exactly once, by a successful verification. Contributions are never
deleted.

A contributor profile is the per-principal aggregate. Its tier is a
cached value: it is only re-derived from total_score when a tier
update is explicitly requested, so it may lag the score in between.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class Tier(enum.IntEnum):
    """Coarse reputation band derived from total verified score."""
    BRONZE = 1
    SILVER = 2
    GOLD = 3
    PLATINUM = 4


@dataclass
class Contribution:
    """A single submitted contribution.

    Invariants enforced by the ledger:
    - contribution_id >= 1 and unique.
    - verified flips False -> True at most once.
    - score and verifier are only set together with verified.
    """
    contribution_id: int
    contributor: str
    details: str
    verified: bool = False
    score: int = 0
    verifier: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "contribution_id": self.contribution_id,
            "contributor": self.contributor,
            "details": self.details,
            "verified": self.verified,
            "score": self.score,
            "verifier": self.verifier,
        }

    @staticmethod
    def from_dict(data: dict) -> Contribution:
        return Contribution(
            contribution_id=int(data["contribution_id"]),
            contributor=data["contributor"],
            details=data["details"],
            verified=bool(data["verified"]),
            score=int(data["score"]),
            verifier=data.get("verifier"),
        )


@dataclass
class ContributorProfile:
    """Aggregate state for one contributor.

    total_score always equals the sum of score over the contributor's
    verified contributions. tier is NOT kept in sync automatically.
    """
    contributor: str
    total_score: int = 0
    contribution_count: int = 0
    tier: Tier = Tier.BRONZE
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "contributor": self.contributor,
            "total_score": self.total_score,
            "contribution_count": self.contribution_count,
            "tier": self.tier.name,
            "is_active": self.is_active,
        }

    @staticmethod
    def from_dict(data: dict) -> ContributorProfile:
        return ContributorProfile(
            contributor=data["contributor"],
            total_score=int(data["total_score"]),
            contribution_count=int(data["contribution_count"]),
            tier=Tier[data["tier"]],
            is_active=bool(data["is_active"]),
        )


@dataclass(frozen=True)
class TierChange:
    """Record of a tier recomputation. previous == new when unchanged."""
    contributor: str
    previous_tier: Tier
    new_tier: Tier
    total_score: int

    @property
    def changed(self) -> bool:
        return self.previous_tier != self.new_tier
