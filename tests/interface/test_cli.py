import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml
from click.testing import CliRunner
from pytest_mock import MockerFixture

from treeconf.interface.cli import treeconf


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def terminal_logging(mocker: MockerFixture) -> MagicMock:
    return mocker.patch("treeconf.interface.cli.configure_logging_to_terminal")


@pytest.fixture
def app_config(write_file: Callable[[str, str], Path]) -> Path:
    return write_file(
        "app.yaml",
        "server:\n  host: prod.internal\n  url: http://${server.host}:${server.port}\n",
    )


@pytest.fixture
def defaults(write_file: Callable[[str, str], Path]) -> Path:
    return write_file("defaults.yaml", "server:\n  host: localhost\n  port: 8080\nworkers: 2\n")


def test_show_parameters() -> None:
    show_parameters = {param.name for param in treeconf.commands["show"].params}
    assert show_parameters == {
        "source",
        "namespace",
        "fallbacks",
        "optional_fallbacks",
        "output_format",
        "verbose",
        "quiet",
    }


def test_show_with_fallback(
    runner: CliRunner,
    app_config: Path,
    defaults: Path,
    terminal_logging: MagicMock,
) -> None:
    result = runner.invoke(treeconf, ["show", str(app_config), "--fallback", str(defaults)])

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.output) == {
        "server": {"host": "prod.internal", "url": "http://prod.internal:8080", "port": 8080},
        "workers": 2,
    }
    terminal_logging.assert_called_once_with(verbosity=1, long_format=False)


def test_show_at_namespace_as_json(runner: CliRunner, app_config: Path, defaults: Path) -> None:
    args = [
        "show",
        str(app_config),
        "--fallback",
        str(defaults),
        "--at",
        "server",
        "--format",
        "json",
    ]
    result = runner.invoke(treeconf, args)

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "host": "prod.internal",
        "url": "http://prod.internal:8080",
        "port": 8080,
    }


def test_show_reports_failures(runner: CliRunner, app_config: Path) -> None:
    result = runner.invoke(treeconf, ["show", str(app_config)])

    assert result.exit_code == 1
    assert f"Unable to load configuration from {app_config}" in result.output
    assert "at 'server.url':" in result.output
    assert "Could not resolve substitution 'server.port'" in result.output


def test_show_optional_fallback(runner: CliRunner, defaults: Path, tmp_path: Path) -> None:
    missing = tmp_path / "missing.yaml"
    args = ["show", str(defaults), "--optional-fallback", str(missing), "--at", "workers"]
    result = runner.invoke(treeconf, args)

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.output) == 2

    result = runner.invoke(treeconf, ["show", str(defaults), "--fallback", str(missing)])
    assert result.exit_code == 1
    assert "Unable to read file" in result.output


def test_show_file_url(runner: CliRunner, defaults: Path) -> None:
    result = runner.invoke(treeconf, ["show", defaults.as_uri(), "--at", "server.port"])
    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.output) == 8080


@pytest.mark.parametrize("flags, verbosity", [(["-v"], 2), (["-q"], 0)])
def test_verbosity(
    runner: CliRunner,
    defaults: Path,
    terminal_logging: MagicMock,
    flags: list[str],
    verbosity: int,
) -> None:
    result = runner.invoke(treeconf, ["show", str(defaults), *flags])
    assert result.exit_code == 0, result.output
    terminal_logging.assert_called_once_with(verbosity=verbosity, long_format=False)


def test_verbose_and_quiet(runner: CliRunner, defaults: Path) -> None:
    result = runner.invoke(treeconf, ["show", str(defaults), "-v", "-q"])
    assert result.exit_code != 0
    assert "Cannot be both verbose and quiet." in result.output
