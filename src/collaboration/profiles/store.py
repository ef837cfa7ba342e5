"""Contributor profile store: per-principal aggregates.

Profiles are created lazily on a contributor's first submission. The
creation branch is explicit: get_or_create() reports whether it made
a new profile, so callers (and tests) can see it.

Mutation entry points are internal to the collaboration flow:
- record_submission(): upsert and bump contribution_count.
- accumulate(): add a verified score to total_score.
- set_tier(): store a recomputed tier.
External callers only read.
"""

from __future__ import annotations

from typing import Iterable, Optional

from collaboration.errors import InvariantViolation, ScoreOverflowError
from collaboration.models.contribution import ContributorProfile, Tier


class ProfileStore:
    """In-memory table of contributor profiles.

    Thread-safety: this class is not thread-safe. The caller must
    synchronise access if used from multiple threads.
    """

    def __init__(self, profiles: Optional[Iterable[ContributorProfile]] = None) -> None:
        self._profiles: dict[str, ContributorProfile] = {}
        for p in profiles or ():
            self._profiles[p.contributor] = p

    def get(self, contributor: str) -> Optional[ContributorProfile]:
        return self._profiles.get(contributor.strip())

    def get_or_create(self, contributor: str) -> tuple[ContributorProfile, bool]:
        """Return (profile, was_created).

        A new profile starts at zero score and zero contributions,
        BRONZE and active. record_submission() sets the count.
        """
        key = contributor.strip()
        existing = self._profiles.get(key)
        if existing is not None:
            return existing, False
        profile = ContributorProfile(contributor=key)
        self._profiles[key] = profile
        return profile, True

    def record_submission(self, contributor: str) -> tuple[ContributorProfile, bool]:
        """Upsert the profile and count one more submission."""
        profile, created = self.get_or_create(contributor)
        profile.contribution_count += 1
        return profile, created

    def check_accumulate(self, contributor: str, score: int, ceiling: int) -> ContributorProfile:
        """Validate that score can be added without exceeding ceiling.

        Raises InvariantViolation if the profile is missing: a verified
        contribution always has a submitting contributor with a profile.
        """
        profile = self._profiles.get(contributor)
        if profile is None:
            raise InvariantViolation(
                f"No profile for contributor {contributor} of an existing contribution"
            )
        if score > ceiling or profile.total_score > ceiling - score:
            raise ScoreOverflowError(
                f"Adding {score} to {contributor}'s total {profile.total_score} "
                f"would exceed the ceiling {ceiling}"
            )
        return profile

    def accumulate(self, contributor: str, score: int, ceiling: int) -> ContributorProfile:
        profile = self.check_accumulate(contributor, score, ceiling)
        profile.total_score += score
        return profile

    def set_tier(self, contributor: str, tier: Tier) -> ContributorProfile:
        profile = self._profiles.get(contributor)
        if profile is None:
            raise InvariantViolation(f"No profile for contributor {contributor}")
        profile.tier = tier
        return profile

    def discard(self, contributor: str) -> None:
        """Remove a profile. Rollback path for a just-created profile only."""
        self._profiles.pop(contributor, None)

    def all_profiles(self) -> list[ContributorProfile]:
        return list(self._profiles.values())

    @property
    def count(self) -> int:
        return len(self._profiles)

    @property
    def active_count(self) -> int:
        return sum(1 for p in self._profiles.values() if p.is_active)
