"""Proof of collaboration: contribution tracking, review scoring, and reputation tiers."""

__version__ = "0.1.0"
