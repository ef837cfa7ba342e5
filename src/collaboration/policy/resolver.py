"""Policy resolver: loads and validates collaboration parameters.

All tunable numbers live in config/collaboration_params.json:
- tier_thresholds: lower bound (inclusive) of every tier above BRONZE.
- score_ceiling: maximum value of a single score and of any total.
- max_details_length: maximum length of contribution details.

Validation is fail-closed: a malformed parameter file raises ValueError
at load time rather than producing a resolver with undefined behaviour.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from collaboration.models.contribution import Tier


PARAMS_FILENAME = "collaboration_params.json"

DEFAULT_PARAMS: dict[str, Any] = {
    "version": "1.0",
    "tier_thresholds": {"SILVER": 100, "GOLD": 250, "PLATINUM": 500},
    "score_ceiling": 2**128 - 1,
    "max_details_length": 500,
}


class PolicyResolver:
    """Read-only view over validated collaboration parameters."""

    def __init__(self, params: dict[str, Any]) -> None:
        self._params = params
        self._thresholds = self._validate(params)

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        path = Path(config_dir) / PARAMS_FILENAME
        with path.open("r", encoding="utf-8") as handle:
            return cls(json.load(handle))

    @classmethod
    def defaults(cls) -> PolicyResolver:
        return cls(json.loads(json.dumps(DEFAULT_PARAMS)))

    @staticmethod
    def _validate(params: dict[str, Any]) -> list[tuple[int, Tier]]:
        raw = params.get("tier_thresholds")
        if not isinstance(raw, dict):
            raise ValueError("tier_thresholds must be an object")

        expected = [t for t in Tier if t != Tier.BRONZE]
        missing = [t.name for t in expected if t.name not in raw]
        if missing:
            raise ValueError(f"tier_thresholds missing: {', '.join(missing)}")

        thresholds: list[tuple[int, Tier]] = []
        previous = 0
        for tier in expected:
            value = raw[tier.name]
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{tier.name} threshold must be an integer")
            if value <= previous:
                raise ValueError(
                    f"{tier.name} threshold must exceed {previous}, got {value}"
                )
            thresholds.append((value, tier))
            previous = value

        ceiling = params.get("score_ceiling")
        if not isinstance(ceiling, int) or ceiling < previous:
            raise ValueError(
                f"score_ceiling must be an integer >= {previous}, got {ceiling!r}"
            )

        max_len = params.get("max_details_length")
        if not isinstance(max_len, int) or max_len <= 0:
            raise ValueError(
                f"max_details_length must be a positive integer, got {max_len!r}"
            )
        return thresholds

    def tier_thresholds(self) -> list[tuple[int, Tier]]:
        """Return (lower_bound, tier) pairs in ascending order, BRONZE excluded."""
        return list(self._thresholds)

    def score_ceiling(self) -> int:
        return self._params["score_ceiling"]

    def max_details_length(self) -> int:
        return self._params["max_details_length"]

    @property
    def version(self) -> str:
        return str(self._params.get("version", "unknown"))
