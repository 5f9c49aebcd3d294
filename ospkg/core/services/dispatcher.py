"""
Package dispatcher — the single entry point for driver operations.

``dispatch(op, **args)`` resolves the active driver for this run and
calls the named operation on it:

    1. op "implemented" → pre-flight check, never reaches a driver
    2. apply the platform's package-name override to ``pkg``
    3. split ``module`` into ``mod_parts``
    4. look up the driver and the operation; either missing → NOT_IMPLEMENTED
    5. call it and return its result unchanged

NOT_IMPLEMENTED is distinct from failure: callers skip, not abort.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ospkg.core.config.platforms import PlatformTable
from ospkg.core.context import SysEnv
from ospkg.core.errors import DispatchError
from ospkg.core.services.runner import CommandRunner
from ospkg.drivers.base import NOT_IMPLEMENTED, Driver, DriverContext, PackageArgs
from ospkg.drivers.registry import DriverRegistry

logger = logging.getLogger(__name__)

_Operation = Callable[[Driver, DriverContext, PackageArgs], Any]

# Operation name → driver method
OPERATIONS: dict[str, _Operation] = {
    "pkgcmd": lambda d, ctx, a: d.pkgcmd(ctx.sysenv),
    "modpkg": lambda d, ctx, a: d.modpkg(ctx, a),
    "find": lambda d, ctx, a: d.find(ctx, a),
    "install": lambda d, ctx, a: d.install(ctx, a),
    "is_installed": lambda d, ctx, a: d.is_installed(ctx, a),
    "refresh": lambda d, ctx, a: d.refresh(ctx, a),
    "ping": lambda d, ctx, a: d.ping(),
}


class Dispatcher:
    """Routes operation requests to the driver selected for this host."""

    def __init__(
        self,
        sysenv: SysEnv,
        table: PlatformTable,
        registry: DriverRegistry,
        runner: CommandRunner,
    ):
        self._sysenv = sysenv
        self._table = table
        self._registry = registry
        self._ctx = DriverContext(sysenv=sysenv, runner=runner, override=self.pkg_override)

    def implemented(self) -> bool:
        """Whether this host has a platform id and a driver for it.

        Only Linux distros are told apart here; other systems have no
        driver yet.
        """
        if self._sysenv.get("os") != "Linux":
            return False
        if self._sysenv.platform is None:
            return False
        return self._sysenv.packager is not None

    def driver(self) -> Driver | None:
        """The active driver, or None when the host has none."""
        return self._registry.get(self._sysenv.packager)

    def pkg_override(self, pkg: str) -> str | None:
        return self._table.override(self._sysenv.platform, pkg)

    def _apply_override(self, pkg: str | list[str] | None) -> str | list[str] | None:
        if pkg is None:
            return None
        if isinstance(pkg, str):
            return self.pkg_override(pkg) or pkg
        return [self.pkg_override(p) or p for p in pkg]

    def dispatch(self, op: str, **args: Any) -> Any:
        """Run ``op`` on the active driver.

        Args:
            op: Operation name: implemented, pkgcmd, modpkg, find,
                install, is_installed, refresh or ping.
            args: ``module`` (Perl module name) and/or ``pkg`` (package
                name or list of names).

        Returns:
            The driver's result, or NOT_IMPLEMENTED when there is no
            driver or it lacks the operation.

        Raises:
            DispatchError: If ``op`` is empty.
        """
        if not op:
            raise DispatchError("dispatch() requires an operation name")

        if op == "implemented":
            return self.implemented()

        bag = PackageArgs(op=op, module=args.get("module"), pkg=args.get("pkg"))
        bag.pkg = self._apply_override(bag.pkg)
        if bag.module:
            bag.mod_parts = bag.module.split("::")

        driver = self.driver()
        if driver is None:
            logger.debug("%s: no driver for platform %s", op, self._sysenv.platform)
            return NOT_IMPLEMENTED

        operation = OPERATIONS.get(op)
        if operation is None:
            logger.debug("%s.%s not implemented", driver.name, op)
            return NOT_IMPLEMENTED

        logger.debug(
            "%s.%s(module=%s pkg=%s)", driver.name, op, bag.module, bag.pkg,
        )
        return operation(driver, self._ctx, bag)
