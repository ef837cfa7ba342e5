"""Contributor profile store."""

from collaboration.profiles.store import ProfileStore

__all__ = ["ProfileStore"]
