"""Contribution ledger."""

from collaboration.ledger.contributions import ContributionLedger

__all__ = ["ContributionLedger"]
