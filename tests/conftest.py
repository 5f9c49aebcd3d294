"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ospkg.core.config.platforms import PlatformTable, default_table
from ospkg.core.context import SysEnv
from ospkg.drivers.base import DriverContext
from tests.fakes import FakeRunner


@pytest.fixture
def table() -> PlatformTable:
    """The compiled-in platform table."""
    return default_table()


@pytest.fixture
def runner() -> FakeRunner:
    """A runner that records commands instead of executing them."""
    return FakeRunner()


@pytest.fixture
def make_ctx(runner: FakeRunner):
    """Build a DriverContext from snapshot values, sharing ``runner``."""

    def _make(overrides: dict[str, str] | None = None, **values) -> DriverContext:
        ctx = DriverContext(sysenv=SysEnv(values), runner=runner)
        if overrides:
            ctx.override = overrides.get
        return ctx

    return _make


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Directory for fake executables."""
    d = tmp_path / "bin"
    d.mkdir()
    return d


