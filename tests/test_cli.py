"""Tests for the collaboration CLI: proves commands dispatch and persist."""

import json
import pytest
from pathlib import Path

from collaboration.cli import build_parser, main


def _run(tmp_path: Path, *argv: str) -> int:
    return main(["--data", str(tmp_path), *argv])


class TestCLIParsing:
    def test_status_command(self) -> None:
        args = build_parser().parse_args(["status"])
        assert args.command == "status"

    def test_verify_command(self) -> None:
        args = build_parser().parse_args([
            "verify", "--caller", "admin", "--id", "3", "--score", "150",
        ])
        assert args.command == "verify"
        assert args.id == 3
        assert args.score == 150

    def test_submit_requires_caller(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["submit", "--details", "x"])


class TestCLIExecution:
    def test_no_command_shows_help(self) -> None:
        assert main([]) == 0

    def test_status_runs(self, tmp_path: Path, capsys) -> None:
        assert _run(tmp_path, "status") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["contributions"]["total"] == 0

    def test_walkthrough_persists(self, tmp_path: Path, capsys) -> None:
        assert _run(tmp_path, "init", "--caller", "deployer") == 0
        assert _run(tmp_path, "submit", "--caller", "u1", "--details", "A") == 0
        assert _run(tmp_path, "verify", "--caller", "deployer", "--id", "1", "--score", "150") == 0
        assert _run(tmp_path, "update-tier", "--caller", "u2", "--principal", "u1") == 0
        capsys.readouterr()

        assert _run(tmp_path, "show-tier", "--principal", "u1") == 0
        assert json.loads(capsys.readouterr().out) == {"tier": "SILVER"}

        assert _run(tmp_path, "show-profile", "--principal", "u1") == 0
        profile = json.loads(capsys.readouterr().out)
        assert profile["total_score"] == 150
        assert profile["contribution_count"] == 1

        assert _run(tmp_path, "show-contribution", "--id", "1") == 0
        assert json.loads(capsys.readouterr().out)["verifier"] == "deployer"

    def test_refusal_prints_code(self, tmp_path: Path, capsys) -> None:
        _run(tmp_path, "init", "--caller", "deployer")
        capsys.readouterr()
        assert _run(tmp_path, "add-admin", "--caller", "u1", "--principal", "u2") == 1
        assert "Failed [100]" in capsys.readouterr().err

    def test_is_admin(self, tmp_path: Path, capsys) -> None:
        _run(tmp_path, "init", "--caller", "deployer")
        capsys.readouterr()
        assert _run(tmp_path, "is-admin", "--principal", "deployer") == 0
        assert json.loads(capsys.readouterr().out)["is_admin"] is True

    def test_check_invariants_runs(self, tmp_path: Path, capsys) -> None:
        _run(tmp_path, "submit", "--caller", "u1", "--details", "A")
        assert _run(tmp_path, "check-invariants") == 0
        out = capsys.readouterr().out
        assert "Invariant check: PASS" in out
        assert "State invariant check: PASS" in out


class TestInvariantTool:
    def test_shipped_params_pass(self) -> None:
        from check_invariants import check
        assert check() == 0

    def test_bad_params_fail(self, tmp_path: Path) -> None:
        from check_invariants import check
        (tmp_path / "collaboration_params.json").write_text(json.dumps({
            "tier_thresholds": {"SILVER": 300, "GOLD": 250, "PLATINUM": 500},
            "score_ceiling": 1000,
            "max_details_length": 10,
        }), encoding="utf-8")
        assert check(tmp_path) == 1


class TestEnvDefaults:
    def test_relative_env_path_under_root(self, monkeypatch) -> None:
        from collaboration import cli
        monkeypatch.setenv("COLLABORATION_DATA_DIR", "var/data")
        assert cli._env_path("COLLABORATION_DATA_DIR", "data") == cli.ROOT / "var" / "data"

    def test_absolute_env_path_kept(self, tmp_path: Path, monkeypatch) -> None:
        from collaboration import cli
        monkeypatch.setenv("COLLABORATION_DATA_DIR", str(tmp_path))
        assert cli._env_path("COLLABORATION_DATA_DIR", "data") == tmp_path

    def test_default_when_unset(self, monkeypatch) -> None:
        from collaboration import cli
        monkeypatch.delenv("COLLABORATION_CONFIG_DIR", raising=False)
        assert cli._env_path("COLLABORATION_CONFIG_DIR", "config") == cli.ROOT / "config"
