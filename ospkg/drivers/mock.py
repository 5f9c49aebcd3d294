"""
Mock driver — test double for dispatcher and installer tests.

Answers every operation from canned values and records each call,
without running any command.
"""

from __future__ import annotations

from typing import Any

from ospkg.core.context import SysEnv
from ospkg.drivers.base import NOT_IMPLEMENTED, Driver, DriverContext, PackageArgs


class MockDriver(Driver):
    """Configurable stand-in for a packaging driver.

    Args:
        driver_name: Id reported by ``name`` and ``ping``.
        available: Value of ``pkgcmd``.
        packages: Module name → package name answered by ``modpkg``.
        found: Package names ``find`` reports as present.
        install_ok: Value returned by ``install``.
    """

    def __init__(
        self,
        driver_name: str = "mock",
        available: bool = True,
        packages: dict[str, str] | None = None,
        found: set[str] | None = None,
        install_ok: bool = True,
    ):
        self._name = driver_name
        self._available = available
        self._packages = dict(packages or {})
        self._found = set(found or ())
        self._install_ok = install_ok
        self._call_log: list[tuple[str, PackageArgs | None]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[tuple[str, PackageArgs | None]]:
        """(operation, args) for every call received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls(self, op: str) -> list[PackageArgs | None]:
        return [args for name, args in self._call_log if name == op]

    def pkgcmd(self, sysenv: SysEnv) -> bool:
        self._call_log.append(("pkgcmd", None))
        return self._available

    def modpkg(self, ctx: DriverContext, args: PackageArgs) -> Any:
        self._call_log.append(("modpkg", args))
        if not self._available:
            return None
        return self._packages.get(args.module or "")

    def find(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        self._call_log.append(("find", args))
        if not self._available:
            return None
        return args.pkg if args.pkg in self._found else None  # type: ignore[return-value]

    def install(self, ctx: DriverContext, args: PackageArgs) -> bool:
        self._call_log.append(("install", args))
        if not self._available:
            return False
        return self._install_ok

    def refresh(self, ctx: DriverContext, args: PackageArgs) -> Any:
        self._call_log.append(("refresh", args))
        return NOT_IMPLEMENTED

    def reset(self) -> None:
        self._call_log.clear()
