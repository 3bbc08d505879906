"""Tests for Courier CLI — proves CLI dispatches correctly."""

import json

import pytest
from pathlib import Path

from courier.cli import main, build_parser


def _run(data_dir: Path, *args: str) -> int:
    return main(["--data-dir", str(data_dir), *args])


def _keygen(capsys: pytest.CaptureFixture[str], data_dir: Path) -> dict:
    capsys.readouterr()
    assert _run(data_dir, "keygen") == 0
    return json.loads(capsys.readouterr().out)


class TestCLIParsing:
    def test_status_command(self) -> None:
        args = build_parser().parse_args(["status"])
        assert args.command == "status"

    def test_deposit_flags(self) -> None:
        args = build_parser().parse_args(["deposit", "--private-key", "ab", "--flags", "100000"])
        assert args.flags == "100000"
        assert args.data is None

    def test_deposit_requires_payload(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["deposit", "--private-key", "ab"])

    def test_events_range(self) -> None:
        args = build_parser().parse_args(["events", "--from", "2", "--to", "5"])
        assert (args.from_index, args.to_index) == (2, 5)

    def test_no_command_prints_help(self) -> None:
        assert main([]) == 0


class TestCLIExecution:
    def test_full_flow(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(tmp_path, "init") == 0
        keys = _keygen(capsys, tmp_path)

        assert _run(tmp_path, "register", "--public-key", keys["public_key"]) == 0
        assert _run(tmp_path, "deposit", "--private-key", keys["private_key"], "--flags", "100000") == 0
        assert _run(tmp_path, "deposit", "--private-key", keys["private_key"], "--data", "32") == 1
        capsys.readouterr()

        assert _run(tmp_path, "events") == 0
        events = json.loads(capsys.readouterr().out)
        assert [e["flags"] for e in events] == ["100000"]

        assert _run(tmp_path, "status") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["message_count"] == 1
        assert status["used_nullifiers"] == 1

        assert _run(tmp_path, "check-invariants") == 0

    def test_init_twice_fails(self, tmp_path: Path) -> None:
        assert _run(tmp_path, "init") == 0
        assert _run(tmp_path, "init") == 1

    def test_flag_rule_failure(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _run(tmp_path, "init")
        keys = _keygen(capsys, tmp_path)
        _run(tmp_path, "register", "--public-key", keys["public_key"])
        assert _run(tmp_path, "deposit", "--private-key", keys["private_key"], "--data", "5") == 1
        assert "flag 4" in capsys.readouterr().err

    def test_bad_public_key(self, tmp_path: Path) -> None:
        _run(tmp_path, "init")
        assert _run(tmp_path, "register", "--public-key", "00" * 32) == 1

    def test_bad_flag_bits(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _run(tmp_path, "init")
        keys = _keygen(capsys, tmp_path)
        assert _run(tmp_path, "deposit", "--private-key", keys["private_key"], "--flags", "12") == 1

    def test_deposit_before_init(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        keys = _keygen(capsys, tmp_path)
        _run(tmp_path, "register", "--public-key", keys["public_key"])
        assert _run(tmp_path, "status") == 0
        assert json.loads(capsys.readouterr().out)["initialized"] is False
