"""
OsPackage — the run context that wires every component together.

Built once per run (``OsPackage.create``) and passed to whoever needs
it; there is no global instance.  Construction order matters:

    1. locate commands           (needs nothing)
    2. resolve platform/driver   (needs uname)
    3. root: refresh packager metadata
       otherwise: user library environment (rewrites PATH)

After that the snapshot is only read, apart from command paths
recorded while establishing CPAN.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable

from ospkg.core.config.loader import Settings
from ospkg.core.config.platforms import SEARCH_CMDS, PlatformTable
from ospkg.core.context import SysEnv
from ospkg.core.models.results import BatchReport
from ospkg.core.services.command_locator import CommandLocator
from ospkg.core.services.dispatcher import Dispatcher
from ospkg.core.services.installer import ModuleInstaller
from ospkg.core.services.platform_resolver import OsIdentity, PlatformResolver, probe_os_release
from ospkg.core.services.runner import CommandRunner
from ospkg.core.services.user_env import set_user_env
from ospkg.drivers.registry import DriverRegistry, default_registry

logger = logging.getLogger(__name__)


class OsPackage:
    """Per-run state and the components operating on it."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        sysenv: SysEnv | None = None,
        runner: CommandRunner | None = None,
        table: PlatformTable | None = None,
        registry: DriverRegistry | None = None,
        probe: Callable[[], OsIdentity] = probe_os_release,
        geteuid: Callable[[], int] = os.geteuid,
    ):
        self.settings = settings or Settings()
        self.sysenv = sysenv if sysenv is not None else SysEnv()
        self.runner = runner or CommandRunner(timeout=self.settings.timeout)
        self.table = table or self.settings.platform_table()
        self.registry = registry or default_registry()
        self._geteuid = geteuid

        self.locator = CommandLocator(self.sysenv, self.table)
        self.resolver = PlatformResolver(self.sysenv, self.table, self.runner, probe=probe)
        self.dispatcher = Dispatcher(self.sysenv, self.table, self.registry, self.runner)
        self.installer = ModuleInstaller(
            self.sysenv, self.table, self.dispatcher, self.runner, self.locator,
        )
        self.user_env: dict[str, str] = {}

    @classmethod
    def create(cls, settings: Settings | None = None, **kwargs: Any) -> OsPackage:
        """Build the context and collect the environment snapshot."""
        ospkg = cls(settings, **kwargs)
        ospkg.collect_sysenv()
        return ospkg

    # ── Accessors ───────────────────────────────────────────────

    @property
    def quiet(self) -> bool:
        return self.settings.quiet

    @property
    def platform(self) -> str | None:
        return self.sysenv.platform

    @property
    def packager(self) -> str | None:
        return self.sysenv.packager

    def is_root(self) -> bool:
        return self.sysenv.is_root

    # ── Discovery ───────────────────────────────────────────────

    def collect_sysenv(self) -> None:
        """Populate the snapshot: commands, platform, privilege, user env.

        Raises:
            PlatformError: If uname is not available.
        """
        self.locator.locate(SEARCH_CMDS)
        self.resolver.resolve()

        if self._geteuid() == 0:
            self.sysenv.set("root", True)
            refreshed = self.dispatcher.dispatch("refresh")
            if refreshed is False:
                logger.warning("package metadata refresh failed on %s", self.platform)
        else:
            self.user_env = set_user_env(self.sysenv, self.locator)

        if logger.isEnabledFor(logging.DEBUG):
            for key, value in self.sysenv.to_dict().items():
                if isinstance(value, list):
                    value = "[" + " ".join(str(v) for v in value) + "]"
                logger.debug("sysenv: %s => %s", key, value)

    # ── Operations ──────────────────────────────────────────────

    def manage_pkg(self, op: str, **args: Any) -> Any:
        """Run a driver operation (see ``Dispatcher.dispatch``)."""
        return self.dispatcher.dispatch(op, **args)

    def check_module(self, name: str) -> bool:
        return self.installer.check_module(name)

    def install_modules(self, names: list[str]) -> BatchReport:
        return self.installer.install_modules(names)

    def establish_cpan(self) -> bool:
        return self.installer.establish_cpan()

    def describe(self) -> dict[str, Any]:
        """Summary of what was detected, for display."""
        commands = {
            name: self.sysenv.get(name) for name in SEARCH_CMDS if self.sysenv.get(name)
        }
        return {
            "detected": self.sysenv.get("detected"),
            "os": self.sysenv.get("os"),
            "kernel": self.sysenv.get("kernel"),
            "machine": self.sysenv.get("machine"),
            "platform": self.platform,
            "packager": self.packager,
            "implemented": self.dispatcher.implemented(),
            "root": self.is_root(),
            "perlbase": self.sysenv.get("perlbase"),
            "commands": commands,
            "drivers": self.registry.driver_status(self.sysenv),
        }
