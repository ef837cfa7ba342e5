"""Core data models for the collaboration tracker."""

from collaboration.models.contribution import (
    Contribution,
    ContributorProfile,
    Tier,
    TierChange,
)

__all__ = [
    "Contribution",
    "ContributorProfile",
    "Tier",
    "TierChange",
]
