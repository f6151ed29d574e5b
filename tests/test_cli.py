"""Tests for the konfbind CLI."""

from __future__ import annotations

import json
import logging

import click
import pytest
from click.testing import CliRunner

from konfbind import __version__
from konfbind.cli import cli, load_target, parse_pairs
from tests.records import AppConfig


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "konfbind" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


class TestHelpers:
    def test_load_target(self) -> None:
        assert load_target("tests.records:AppConfig") is AppConfig

    @pytest.mark.parametrize("spec", ["tests.records", "no_such_module_xyz:A", "tests.records:Nope"])
    def test_load_target_errors(self, spec: str) -> None:
        with pytest.raises(click.BadParameter):
            load_target(spec)

    def test_parse_pairs(self) -> None:
        assert parse_pairs(("a=1", "b.c=x=y", "d=")) == {"a": "1", "b.c": "x=y", "d": ""}

    def test_parse_pairs_rejects_bare_words(self) -> None:
        with pytest.raises(click.BadParameter):
            parse_pairs(("novalue",))


class TestKeys:
    def test_lists_keys(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["keys", "tests.records:StrictExample"])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["a", "c"]

    def test_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "keys", "tests.records:ServerModel"])
        assert result.exit_code == 0
        keys = json.loads(result.stdout)
        assert "limits.max_conns" in keys
        assert "addr" in keys

    def test_non_record(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["keys", "tests.records:Level"])
        assert result.exit_code == 1
        assert "not a dataclass or pydantic model" in result.output


class TestApply:
    def test_apply_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "--json",
                "apply",
                "tests.records:AppConfig",
                "name=svc",
                "count=3",
                "items.x.size=2",
                "nope=1",
            ],
        )
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["value"]["name"] == "svc"
        assert payload["value"]["count"] == 3
        assert payload["value"]["items"] == {"x": {"name": "", "size": 2}}
        assert payload["not_found"] == ["nope"]

    def test_apply_model(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["apply", "tests.records:ServerModel", "addr=127.0.0.1", "limits.burst=2"]
        )
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["host"] == "127.0.0.1"
        assert payload["limits"]["burst"] == 2.0

    def test_apply_open_map(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["apply", "builtins:dict", "a=1"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"a": "1"}

    def test_codec_failure(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["apply", "tests.records:AppConfig", "level=loud"])
        assert result.exit_code == 1
        assert "rejected" in result.output

    def test_invalid_target(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["apply", "tests.records:Level", "a=1"])
        assert result.exit_code == 1

    def test_bad_pair(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["apply", "tests.records:AppConfig", "novalue"])
        assert result.exit_code == 2


def test_debug_store_option_raises_only_that_store(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--debug-store", "root", "keys", "tests.records:AppConfig"])
    assert result.exit_code == 0
    assert logging.getLogger("konfbind.store.root").level == logging.DEBUG
    assert logging.getLogger("konfbind").level == logging.WARNING
