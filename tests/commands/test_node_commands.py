"""Tests for the me and peers commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from oblctl.cli import cli

PEERS = ["O=PartyA, L=London, C=GB", "O=PartyB, L=New York, C=US", "O=PartyC"]


@pytest.mark.usefixtures("_isolated_ledger")
class TestMe:
    def test_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "me"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == {
            "ok": True,
            "op": "me",
            "data": {"me": "O=PartyA, L=London, C=GB"},
            "warnings": [],
            "error": None,
            "meta": None,
        }

    def test_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["me"])
        assert result.exit_code == 0
        assert "OK" in result.output
        assert "me: O=PartyA, L=London, C=GB" in result.output

    def test_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "me"])
        assert result.output.strip() == "O=PartyA, L=London, C=GB"

    def test_verbose_shows_telemetry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "me"])
        assert result.exit_code == 0
        assert "meta:" in result.output
        assert "ms" in result.output


@pytest.mark.usefixtures("_isolated_ledger")
class TestPeers:
    def test_json_includes_local_node(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "peers"])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["peers"] == PEERS

    def test_quiet_one_per_line(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "peers"])
        assert result.output.splitlines() == PEERS

    def test_human_table(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["peers"])
        assert "Peer" in result.output
        assert "O=PartyC" in result.output
        assert "3 peers" in result.output


class TestWithoutLedger:
    @pytest.mark.parametrize("command", ["me", "peers"])
    def test_exit_2(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        command: str,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("OBLCTL_CONFIG", raising=False)
        result = cli_runner.invoke(cli, ["--json", command])
        assert result.exit_code == 2
        assert f'"op": "{command}"' in result.output
        assert '"kind": "server"' in result.output
