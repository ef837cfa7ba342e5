#!/usr/bin/env python3
"""Invariant checks against the shipped collaboration parameters."""

import json
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
CONFIG_DIR = ROOT / "config"
PARAMS_FILENAME = "collaboration_params.json"

TIER_ORDER = ("SILVER", "GOLD", "PLATINUM")
UINT128_MAX = 2**128 - 1


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def check_thresholds(thresholds: dict, errors: list[str]) -> None:
    """Thresholds must exist for every tier and strictly increase."""
    previous = 0
    for name in TIER_ORDER:
        value = thresholds.get(name)
        if not isinstance(value, int) or isinstance(value, bool):
            errors.append(f"tier_thresholds.{name} must be an integer")
            return
        if value <= previous:
            errors.append(
                f"tier_thresholds.{name} ({value}) must exceed the previous bound ({previous})"
            )
        previous = value
    extra = set(thresholds) - set(TIER_ORDER)
    if extra:
        errors.append(f"Unknown tier thresholds: {', '.join(sorted(extra))}")


def check(config_dir: Path = CONFIG_DIR) -> int:
    params = load_json(Path(config_dir) / PARAMS_FILENAME)
    errors: list[str] = []

    check_thresholds(params.get("tier_thresholds", {}), errors)

    ceiling = params.get("score_ceiling")
    if not isinstance(ceiling, int):
        errors.append("score_ceiling must be an integer")
    elif ceiling > UINT128_MAX:
        errors.append(f"score_ceiling must not exceed 2**128 - 1, got {ceiling}")
    elif ceiling < params.get("tier_thresholds", {}).get("PLATINUM", 0):
        errors.append("score_ceiling must allow reaching PLATINUM")

    max_len = params.get("max_details_length")
    if not isinstance(max_len, int) or max_len <= 0:
        errors.append("max_details_length must be a positive integer")

    if errors:
        print("Invariant check: FAIL")
        for err in errors:
            print(f"- {err}")
        return 1

    print("Invariant check: PASS")
    return 0


if __name__ == "__main__":
    sys.exit(check(Path(sys.argv[1]) if len(sys.argv) > 1 else CONFIG_DIR))
