"""Tests for laggy.cli — Click command interface."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from click.testing import CliRunner

from laggy.cli import main
from laggy.config import ENV_VAR, decode_config
from laggy.observer import DEFAULT_MAX_RECORDS

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dump_env_command(tmp_path: Path) -> tuple[list[str], Path]:
    """Command that writes the child's LAGGY_CONFIG to a file."""
    out = tmp_path / "env.txt"
    script = (
        "import os, pathlib; "
        f"pathlib.Path({str(out)!r}).write_text(os.environ.get({ENV_VAR!r}, ''))"
    )
    return [sys.executable, "-c", script], out


# ---------------------------------------------------------------------------
# --version / --help
# ---------------------------------------------------------------------------


class TestTopLevel:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_subcommands(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "presets", "decide"):
            assert command in result.output


# ---------------------------------------------------------------------------
# presets command
# ---------------------------------------------------------------------------


class TestPresetsCommand:
    def test_lists_all(self) -> None:
        result = CliRunner().invoke(main, ["presets"])
        assert result.exit_code == 0
        for name in ("5g", "slow-3g", "offline", "lie-fi"):
            assert name in result.output
        assert "latency: 400ms" in result.output

    def test_json(self) -> None:
        result = CliRunner().invoke(main, ["presets", "--json-output"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data) == 11
        assert data[7]["name"] == "offline"
        assert data[7]["config"] == {"fail_rate": 1.0, "fail_codes": [0]}


# ---------------------------------------------------------------------------
# decide command
# ---------------------------------------------------------------------------


class TestDecideCommand:
    def test_plain_latency(self) -> None:
        result = CliRunner().invoke(
            main, ["decide", "https://x.com", "--latency", "100", "--seed", "42"]
        )
        assert result.exit_code == 0, result.output
        assert "delay 100ms" in result.output

    def test_json_output(self) -> None:
        result = CliRunner().invoke(
            main,
            ["decide", "https://x.com", "--fail-rate", "1", "--fail-codes", "500",
             "--count", "3", "--json-output"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [d["status_code"] for d in data["decisions"]] == [500, 500, 500]
        assert data["summary"]["fail"] == 3

    def test_seed_reproduces(self) -> None:
        args = ["decide", "https://x.com", "--preset", "chaos", "--seed", "7",
                "--count", "25", "--json-output"]
        first = CliRunner().invoke(main, args)
        second = CliRunner().invoke(main, args)
        assert first.exit_code == 0, first.output
        assert json.loads(first.output) == json.loads(second.output)

    def test_excluded_url(self) -> None:
        result = CliRunner().invoke(
            main,
            ["decide", "http://localhost/health", "--preset", "offline",
             "--exclude", "*localhost*", "--json-output"],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["decisions"] == [{"kind": "passthrough"}]

    def test_offline_preset(self) -> None:
        result = CliRunner().invoke(main, ["decide", "https://x.com", "--preset", "offline"])
        assert result.exit_code == 0
        assert "fail 0" in result.output

    def test_unknown_preset_exits_nonzero(self) -> None:
        result = CliRunner().invoke(main, ["decide", "https://x.com", "--preset", "dial-up"])
        assert result.exit_code == 1
        assert "Unknown preset" in result.output
        assert "laggy presets" in result.output

    def test_bad_fail_codes(self) -> None:
        result = CliRunner().invoke(main, ["decide", "u", "--fail-codes", "5xx"])
        assert result.exit_code != 0

    def test_bad_latency(self) -> None:
        result = CliRunner().invoke(main, ["decide", "u", "--latency", "abc"])
        assert result.exit_code != 0

    def test_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "laggy.yaml"
        path.write_text("preset: slow-3g\njitter_ms: 0\nfail_rate: 0\ntimeout_rate: 0\n",
                        encoding="utf-8")
        result = CliRunner().invoke(main, ["decide", "u", "--config", str(path)])
        assert result.exit_code == 0, result.output
        assert "delay 400ms" in result.output

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            main, ["decide", "u", "--config", str(tmp_path / "absent.yaml")]
        )
        assert result.exit_code == 1

    def test_non_string_preset_in_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "laggy.yaml"
        path.write_text("preset: 3\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["decide", "u", "--config", str(path)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error: preset must be a preset name" in result.output

    def test_summary_counts_beyond_recorder_default(self) -> None:
        count = DEFAULT_MAX_RECORDS + 5
        result = CliRunner().invoke(
            main, ["decide", "https://x.com", "--count", str(count), "--json-output"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["summary"]["total"] == count


# ---------------------------------------------------------------------------
# run command
# ---------------------------------------------------------------------------


class TestRunCommand:
    def test_requires_command(self) -> None:
        result = CliRunner().invoke(main, ["run"])
        assert result.exit_code != 0

    def test_publishes_config_to_child(self, tmp_path: Path) -> None:
        command, out = _dump_env_command(tmp_path)
        result = CliRunner().invoke(
            main,
            ["run", "--preset", "slow-3g", "--latency", "50", "--seed", "9",
             "--include", "*api*", "--include", "*cdn*", *command],
        )
        assert result.exit_code == 0, result.output
        config = decode_config(out.read_text())
        assert config.latency_ms == 50
        assert config.jitter_ms == 100
        assert config.seed == 9
        assert config.include == ["*api*", "*cdn*"]

    def test_zero_override_kept(self, tmp_path: Path) -> None:
        command, out = _dump_env_command(tmp_path)
        result = CliRunner().invoke(
            main, ["run", "--preset", "chaos", "--fail-rate", "0", *command]
        )
        assert result.exit_code == 0, result.output
        assert decode_config(out.read_text()).fail_rate == 0.0

    def test_child_exit_code_propagates(self) -> None:
        result = CliRunner().invoke(
            main, ["run", sys.executable, "-c", "import sys; sys.exit(3)"]
        )
        assert result.exit_code == 3

    def test_summary_printed(self) -> None:
        result = CliRunner().invoke(
            main, ["run", "--preset", "slow-3g", sys.executable, "-c", "pass"]
        )
        assert result.exit_code == 0
        assert "Using preset: slow-3g" in result.output
        assert "Latency: 400ms" in result.output

    def test_silent_suppresses_summary(self) -> None:
        result = CliRunner().invoke(
            main, ["run", "--silent", "--preset", "slow-3g", sys.executable, "-c", "pass"]
        )
        assert result.exit_code == 0
        assert "Using preset" not in result.output

    def test_missing_executable(self) -> None:
        result = CliRunner().invoke(main, ["run", "definitely-not-a-real-binary-xyz"])
        assert result.exit_code == 1
        assert "Failed to start command" in result.output

    def test_unknown_preset(self) -> None:
        result = CliRunner().invoke(main, ["run", "--preset", "dial-up", "true"])
        assert result.exit_code == 1
        assert "Unknown preset" in result.output
