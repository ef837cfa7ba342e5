"""Tier engine: maps accumulated score to a reputation tier.

Tier model (default thresholds, config/collaboration_params.json):
  total < 100          -> BRONZE
  100 <= total < 250   -> SILVER
  250 <= total < 500   -> GOLD
  total >= 500         -> PLATINUM

Invariants enforced:
- Lower bounds are inclusive.
- classify() is non-decreasing in total score.
- classify() is pure: no state, clock, or randomness.
- recompute() never mutates its input; it returns a new profile.
"""

from __future__ import annotations

from dataclasses import replace

from collaboration.models.contribution import ContributorProfile, Tier, TierChange
from collaboration.policy.resolver import PolicyResolver


class TierEngine:
    """Derives tiers from total score."""

    def __init__(self, resolver: PolicyResolver) -> None:
        self._thresholds = resolver.tier_thresholds()

    def classify(self, total_score: int) -> Tier:
        """Return the tier for a total score."""
        if total_score < 0:
            raise ValueError(f"Total score cannot be negative, got {total_score}")
        tier = Tier.BRONZE
        for lower_bound, candidate in self._thresholds:
            if total_score >= lower_bound:
                tier = candidate
            else:
                break
        return tier

    def recompute(
        self, profile: ContributorProfile,
    ) -> tuple[ContributorProfile, TierChange]:
        """Return (updated profile copy, change record).

        Idempotent: recomputing an up-to-date profile yields an equal
        profile and a change with changed == False.
        """
        new_tier = self.classify(profile.total_score)
        change = TierChange(
            contributor=profile.contributor,
            previous_tier=profile.tier,
            new_tier=new_tier,
            total_score=profile.total_score,
        )
        return replace(profile, tier=new_tier), change
