"""Tests for the contributor profile store."""

import pytest

from collaboration.errors import InvariantViolation, ScoreOverflowError
from collaboration.models.contribution import ContributorProfile, Tier
from collaboration.profiles.store import ProfileStore


class TestGetOrCreate:
    def test_creation_is_reported(self) -> None:
        store = ProfileStore()
        profile, created = store.get_or_create("alice")
        assert created
        assert profile == ContributorProfile(contributor="alice")
        again, created_again = store.get_or_create("alice")
        assert again is profile
        assert not created_again

    def test_absent_profile(self) -> None:
        assert ProfileStore().get("nobody") is None


class TestRecordSubmission:
    def test_first_submission_defaults(self) -> None:
        store = ProfileStore()
        profile, created = store.record_submission("alice")
        assert created
        assert profile.total_score == 0
        assert profile.contribution_count == 1
        assert profile.tier == Tier.BRONZE
        assert profile.is_active

    def test_count_increments(self) -> None:
        store = ProfileStore()
        store.record_submission("alice")
        profile, created = store.record_submission("alice")
        assert not created
        assert profile.contribution_count == 2


class TestAccumulate:
    def test_adds_score(self) -> None:
        store = ProfileStore()
        store.record_submission("alice")
        store.accumulate("alice", 70, ceiling=1000)
        assert store.accumulate("alice", 30, ceiling=1000).total_score == 100

    def test_tier_not_touched(self) -> None:
        store = ProfileStore()
        store.record_submission("alice")
        profile = store.accumulate("alice", 900, ceiling=1000)
        assert profile.tier == Tier.BRONZE

    def test_overflow_refused(self) -> None:
        store = ProfileStore()
        store.record_submission("alice")
        store.accumulate("alice", 90, ceiling=100)
        with pytest.raises(ScoreOverflowError):
            store.accumulate("alice", 11, ceiling=100)
        assert store.get("alice").total_score == 90

    def test_total_may_reach_ceiling(self) -> None:
        store = ProfileStore()
        store.record_submission("alice")
        assert store.accumulate("alice", 100, ceiling=100).total_score == 100

    def test_missing_profile_is_invariant_violation(self) -> None:
        with pytest.raises(InvariantViolation):
            ProfileStore().accumulate("ghost", 1, ceiling=100)
