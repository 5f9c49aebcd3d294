"""
Tests for the ospkg CLI.

``OsPackage.create`` is patched to return a context built from a preset
snapshot, a MockDriver and a FakeRunner, so no host probing happens.
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ospkg import __version__
from ospkg.core.context import SysEnv
from ospkg.core.errors import PlatformError
from ospkg.core.services.ospackage import OsPackage
from ospkg.drivers.mock import MockDriver
from ospkg.drivers.registry import DriverRegistry
from ospkg.main import _read_modules, cli
from tests.fakes import FakeRunner

CPAN = "/usr/bin/cpan"


def _ospackage(driver: MockDriver | None = None, **values) -> OsPackage:
    registry = DriverRegistry()
    if driver is not None:
        registry.register(driver)
    snapshot = {
        "os": "Linux",
        "kernel": "6.1.0-21-amd64",
        "machine": "x86_64",
        "platform": "debian",
        "packager": "debian",
        "detected": "debian handled by debian",
        "root": True,
        "cpan": CPAN,
        "perl_inc": [],
        **values,
    }
    return OsPackage(sysenv=SysEnv(snapshot), runner=FakeRunner(), registry=registry)


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("ospkg.main.setup_logging") as setup:
        yield setup


@pytest.fixture
def mock_driver() -> MockDriver:
    return MockDriver(
        "debian",
        packages={"YAML::Tiny": "libyaml-tiny-perl"},
        found={"curl"},
    )


@pytest.fixture
def with_ospackage(mock_driver):
    ospkg = _ospackage(mock_driver)
    with patch("ospkg.main.OsPackage.create", return_value=ospkg):
        yield ospkg


# ── Group options ───────────────────────────────────────────────


class TestGroup:
    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, cli_runner):
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("detect", "find", "modpkg", "pkg-install", "install", "establish"):
            assert command in result.output

    def test_debug_flag_sets_level(self, cli_runner, with_ospackage, _no_logging_setup):
        cli_runner.invoke(cli, ["--debug", "detect", "--json"])
        assert _no_logging_setup.call_args.kwargs["level"] == "DEBUG"

    def test_bad_config(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["--config", str(tmp_path / "missing.yml"), "detect"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_platform_error(self, cli_runner):
        with patch("ospkg.main.OsPackage.create", side_effect=PlatformError("can't find uname")):
            result = cli_runner.invoke(cli, ["detect"])
        assert result.exit_code == 1
        assert "uname" in result.output


# ── detect ──────────────────────────────────────────────────────


class TestDetect:
    def test_json(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["detect", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["platform"] == "debian"
        assert data["implemented"] is True
        assert data["commands"] == {"cpan": CPAN}

    def test_human(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["detect"])
        assert result.exit_code == 0
        assert "system detected: debian handled by debian" in result.output
        assert "packager:  debian" in result.output

    def test_quiet_hides_banner(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["-q", "detect"])
        assert "system detected" not in result.output


# ── find / modpkg ───────────────────────────────────────────────


class TestFind:
    def test_found(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["-q", "find", "curl"])
        assert result.exit_code == 0
        assert result.output.strip() == "curl"

    def test_not_found(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["-q", "find", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_json(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["find", "curl", "--json"])
        assert json.loads(result.output) == {"pkg": "curl", "found": "curl"}

    def test_no_driver(self, cli_runner):
        ospkg = _ospackage(None, platform="gentoo", packager=None)
        with patch("ospkg.main.OsPackage.create", return_value=ospkg):
            result = cli_runner.invoke(cli, ["find", "curl", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["found"] is None


class TestModpkg:
    def test_known_module(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["modpkg", "YAML::Tiny", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"module": "YAML::Tiny", "package": "libyaml-tiny-perl"}

    def test_unknown_module(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["-q", "modpkg", "No::Such"])
        assert result.exit_code == 1
        assert "no OS package" in result.output


# ── pkg-install ─────────────────────────────────────────────────


class TestPkgInstall:
    def test_installs(self, cli_runner, with_ospackage, mock_driver):
        result = cli_runner.invoke(cli, ["-q", "pkg-install", "curl", "make"])
        assert result.exit_code == 0
        assert mock_driver.calls("install")[0].pkg == ["curl", "make"]

    def test_failure(self, cli_runner):
        ospkg = _ospackage(MockDriver("debian", install_ok=False))
        with patch("ospkg.main.OsPackage.create", return_value=ospkg):
            result = cli_runner.invoke(cli, ["-q", "pkg-install", "curl"])
        assert result.exit_code == 1
        assert "install failed" in result.output

    def test_no_driver(self, cli_runner):
        ospkg = _ospackage(None, platform="gentoo", packager=None)
        with patch("ospkg.main.OsPackage.create", return_value=ospkg):
            result = cli_runner.invoke(cli, ["-q", "pkg-install", "curl"])
        assert result.exit_code == 1
        assert "no package driver" in result.output


# ── install ─────────────────────────────────────────────────────


class TestInstall:
    def test_no_modules(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["install"])
        assert result.exit_code == 2

    def test_os_package_then_cpan(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(
            cli, ["install", "--no-establish", "--json", "YAML::Tiny", "JSON"],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        methods = {r["module"]: r["method"] for r in data["results"]}
        assert methods == {"YAML::Tiny": "ospkg", "JSON": "cpan"}
        assert with_ospackage.runner.ran == [[CPAN, "JSON"]]

    def test_failure_exit_code(self, cli_runner, with_ospackage):
        with_ospackage.runner.on_run(CPAN, "Broken::Module", ok=False)
        result = cli_runner.invoke(cli, ["install", "--no-establish", "JSON", "Broken::Module"])
        assert result.exit_code == 1
        assert "✗ Broken::Module" in result.output
        assert "✓ JSON" in result.output

    def test_stdin(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(
            cli, ["install", "--no-establish", "--stdin", "--json"],
            input="JSON  # serializer\n\nstrict\n",
        )
        assert result.exit_code == 0
        statuses = [r["status"] for r in json.loads(result.output)["results"]]
        assert statuses == ["installed", "skipped"]

    def test_establish_runs_first(self, cli_runner, with_ospackage, mock_driver):
        result = cli_runner.invoke(cli, ["-q", "install", "JSON"])
        assert result.exit_code == 0
        prereqs = mock_driver.calls("install")[0].pkg
        assert prereqs == ["curl", "tar", "make", "perl-modules"]


class TestReadModules:
    def test_comments_and_blanks(self):
        assert _read_modules(["YAML::Tiny\n", "# all\n", "\n", "JSON # fast\n"]) == [
            "YAML::Tiny", "JSON",
        ]


# ── establish ───────────────────────────────────────────────────


class TestEstablish:
    def test_cpan_present(self, cli_runner, with_ospackage):
        result = cli_runner.invoke(cli, ["-q", "establish"])
        assert result.exit_code == 0

    def test_bootstrap_impossible(self, cli_runner):
        ospkg = _ospackage(None, platform="gentoo", packager=None, cpan=None, root=None)
        with patch("ospkg.main.OsPackage.create", return_value=ospkg):
            result = cli_runner.invoke(cli, ["-q", "establish"])
        assert result.exit_code == 1
        assert "can't bootstrap cpanm" in result.output
