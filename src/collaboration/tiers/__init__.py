"""Tier classification and recomputation."""

from collaboration.tiers.engine import TierEngine

__all__ = ["TierEngine"]
