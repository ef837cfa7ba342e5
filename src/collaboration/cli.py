"""Collaboration CLI: command-line interface for the contribution tracker.

Usage:
    python -m collaboration.cli status
    python -m collaboration.cli init --caller owner
    python -m collaboration.cli add-admin --caller owner --principal reviewer
    python -m collaboration.cli submit --caller alice --details "Fixed the parser"
    python -m collaboration.cli verify --caller reviewer --id 1 --score 150
    python -m collaboration.cli update-tier --caller anyone --principal alice
    python -m collaboration.cli show-profile --principal alice
    python -m collaboration.cli check-invariants

Defaults for --config and --data can be set in a .env file at the
project root (COLLABORATION_CONFIG_DIR, COLLABORATION_DATA_DIR).
Relative values are taken relative to the project root.
"""

from __future__ import annotations

import argparse
import enum
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from collaboration.persistence.event_log import EventLog
from collaboration.persistence.state_store import StateStore
from collaboration.policy.resolver import PolicyResolver
from collaboration.service import CollaborationService, ServiceResult


ROOT = Path(__file__).resolve().parents[2]

load_dotenv(ROOT / ".env")


def _env_path(name: str, default: str) -> Path:
    """Read a directory from the environment; relative values are under ROOT."""
    return ROOT / os.getenv(name, default)


DEFAULT_CONFIG = _env_path("COLLABORATION_CONFIG_DIR", "config")
DEFAULT_DATA = _env_path("COLLABORATION_DATA_DIR", "data")


def _make_service(config_dir: Path, data_dir: Path) -> CollaborationService:
    """Create a CollaborationService with durable persistence."""
    data_dir.mkdir(parents=True, exist_ok=True)
    resolver = PolicyResolver.from_config_dir(config_dir)
    return CollaborationService(
        resolver,
        event_log=EventLog(storage_path=data_dir / "events.jsonl"),
        state_store=StateStore(storage_path=data_dir / "state.json"),
    )


def _report(result: ServiceResult) -> int:
    if result.success:
        # Tier is an IntEnum; print its name rather than its number.
        data = {
            k: v.name if isinstance(v, enum.Enum) else v
            for k, v in result.data.items()
        }
        print(json.dumps(data, indent=2, default=str))
        return 0
    message = "; ".join(result.errors)
    if result.error_code is not None:
        print(f"Failed [{int(result.error_code)}]: {message}", file=sys.stderr)
    else:
        print(f"Failed: {message}", file=sys.stderr)
    return 1


def cmd_status(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    print(json.dumps(service.status(), indent=2))
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    return _report(service.initialize(args.caller))


def cmd_add_admin(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    return _report(service.add_admin(args.caller, args.principal))


def cmd_is_admin(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    print(json.dumps({"principal": args.principal, "is_admin": service.is_admin(args.principal)}))
    return 0


def cmd_submit(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    return _report(service.submit_contribution(args.caller, args.details))


def cmd_verify(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    return _report(service.verify_contribution(args.caller, args.id, args.score))


def cmd_show_contribution(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    record = service.get_contribution(args.id)
    print(json.dumps(record.to_dict() if record else None, indent=2))
    return 0


def cmd_show_profile(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    profile = service.get_profile(args.principal)
    print(json.dumps(profile.to_dict() if profile else None, indent=2))
    return 0


def cmd_update_tier(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    return _report(service.update_tier(args.caller, args.principal))


def cmd_show_tier(args: argparse.Namespace) -> int:
    service = _make_service(args.config, args.data)
    return _report(service.get_tier(args.principal))


def cmd_check_invariants(args: argparse.Namespace) -> int:
    """Check the parameter file, then the stored state."""
    tools_dir = ROOT / "tools"
    sys.path.insert(0, str(tools_dir))
    from check_invariants import check

    exit_code = check(args.config)
    if exit_code != 0:
        return exit_code

    service = _make_service(args.config, args.data)
    errors = service.check_invariants()
    if errors:
        print("State invariant check: FAIL")
        for err in errors:
            print(f"- {err}")
        return 1
    print("State invariant check: PASS")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collaboration",
        description="Proof of collaboration: contribution tracker CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=DEFAULT_DATA,
        help="Path to data directory (default: data/)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable INFO logging")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Show system status")

    p_init = sub.add_parser("init", help="Initialize the registry with caller as owner")
    p_init.add_argument("--caller", required=True, help="Calling principal")

    p_admin = sub.add_parser("add-admin", help="Promote a principal to admin (owner only)")
    p_admin.add_argument("--caller", required=True, help="Calling principal")
    p_admin.add_argument("--principal", required=True, help="Principal to promote")

    p_is_admin = sub.add_parser("is-admin", help="Check whether a principal is an admin")
    p_is_admin.add_argument("--principal", required=True)

    p_submit = sub.add_parser("submit", help="Submit a contribution")
    p_submit.add_argument("--caller", required=True, help="Contributing principal")
    p_submit.add_argument("--details", required=True, help="Contribution details")

    p_verify = sub.add_parser("verify", help="Verify a contribution with a score (admin only)")
    p_verify.add_argument("--caller", required=True, help="Verifying admin")
    p_verify.add_argument("--id", type=int, required=True, help="Contribution ID")
    p_verify.add_argument("--score", type=int, required=True, help="Assigned score")

    p_show = sub.add_parser("show-contribution", help="Show a contribution")
    p_show.add_argument("--id", type=int, required=True)

    p_profile = sub.add_parser("show-profile", help="Show a contributor profile")
    p_profile.add_argument("--principal", required=True)

    p_update = sub.add_parser("update-tier", help="Recompute a contributor's tier")
    p_update.add_argument("--caller", required=True, help="Calling principal (any)")
    p_update.add_argument("--principal", required=True, help="Contributor to update")

    p_tier = sub.add_parser("show-tier", help="Show a contributor's stored tier")
    p_tier.add_argument("--principal", required=True)

    sub.add_parser("check-invariants", help="Run parameter and state invariant checks")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    commands = {
        "status": cmd_status,
        "init": cmd_init,
        "add-admin": cmd_add_admin,
        "is-admin": cmd_is_admin,
        "submit": cmd_submit,
        "verify": cmd_verify,
        "show-contribution": cmd_show_contribution,
        "show-profile": cmd_show_profile,
        "update-tier": cmd_update_tier,
        "show-tier": cmd_show_tier,
        "check-invariants": cmd_check_invariants,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
