"""State store: durable snapshot of the collaboration tables.

A single JSON document holds the authorization context, the
contribution table with its ID counter, and the profile table.
Writes go to a temporary sibling file that then replaces the target,
so a crash mid-write never leaves a half-written snapshot.

Scores are stored as JSON integers; Python's json module round-trips
arbitrarily large integers exactly.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from collaboration.identity.registry import AuthorizationContext
from collaboration.ledger.contributions import ContributionLedger
from collaboration.models.contribution import Contribution, ContributorProfile
from collaboration.profiles.store import ProfileStore


STATE_VERSION = 1


class StateStore:
    """JSON-file persistence for registry, ledger, and profiles."""

    def __init__(self, storage_path: Path) -> None:
        self._storage_path = Path(storage_path)
        self._data: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        if not self._storage_path.exists():
            return {}
        with self._storage_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        version = data.get("version")
        if version != STATE_VERSION:
            raise ValueError(
                f"Unsupported state version {version!r} in {self._storage_path}"
            )
        return data

    def _write(self) -> None:
        self._data["version"] = STATE_VERSION
        tmp = self._storage_path.with_suffix(self._storage_path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, sort_keys=True, ensure_ascii=False)
        os.replace(tmp, self._storage_path)

    # ------------------------------------------------------------------
    # Authorization context
    # ------------------------------------------------------------------

    def load_authorization(self) -> AuthorizationContext:
        raw = self._data.get("authorization", {})
        return AuthorizationContext(
            owner=raw.get("owner"),
            admins=frozenset(raw.get("admins", [])),
        )

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------

    def load_ledger(self) -> ContributionLedger:
        raw = self._data.get("contributions", {})
        return ContributionLedger(
            contributions=[Contribution.from_dict(c) for c in raw.get("records", [])],
            last_id=int(raw.get("last_id", 0)),
        )

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def load_profiles(self) -> ProfileStore:
        return ProfileStore(
            ContributorProfile.from_dict(p) for p in self._data.get("profiles", [])
        )

    def save(
        self,
        authorization: AuthorizationContext,
        ledger: ContributionLedger,
        profiles: ProfileStore,
    ) -> None:
        """Write a full snapshot. Raises OSError on I/O failure."""
        self._data = {
            "authorization": {
                "owner": authorization.owner,
                "admins": sorted(authorization.admins),
            },
            "contributions": {
                "last_id": ledger.last_id,
                "records": [c.to_dict() for c in ledger.all_contributions()],
            },
            "profiles": [
                p.to_dict()
                for p in sorted(profiles.all_profiles(), key=lambda p: p.contributor)
            ],
        }
        self._write()
