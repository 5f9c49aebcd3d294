"""
RPM driver — dnf, or yum with repoquery (Fedora, RHEL and EL clones).

Unlike the other families, Perl modules are looked up by the virtual
provides every Perl RPM declares, ``perl(Module::Name)``, instead of by
a constructed package name.
"""

from __future__ import annotations

import logging

from ospkg.core.context import SysEnv
from ospkg.drivers.base import Driver, DriverContext, PackageArgs, latest

logger = logging.getLogger(__name__)


class RpmDriver(Driver):
    """RPM-family packaging via dnf or yum."""

    @property
    def name(self) -> str:
        return "rpm"

    def pkgcmd(self, sysenv: SysEnv) -> bool:
        if sysenv.get("dnf") is not None:
            return True
        return sysenv.get("yum") is not None and sysenv.get("repoquery") is not None

    def _querycmd(self, sysenv: SysEnv) -> list[str]:
        # dnf ships repoquery as a subcommand; yum needs yum-utils' repoquery
        if sysenv.get("dnf") is not None:
            return [sysenv.get("dnf"), "repoquery"]
        return [sysenv.get("repoquery")]

    def modpkg(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        if not args.module:
            return None
        lines = ctx.runner.capture([
            *self._querycmd(ctx.sysenv), "--available", "--quiet", "--whatprovides",
            f"perl({args.module})",
        ])
        logger.debug("modpkg %s -> %s", args.module, " ".join(lines or []))
        return latest(lines)

    def find(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        if not args.pkg:
            return None
        lines = ctx.runner.capture([
            *self._querycmd(ctx.sysenv), "--quiet", "--latest-limit=1", args.pkg,
        ])
        return latest(lines)

    def install(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        pkgcmd = ctx.sysenv.get("dnf") or ctx.sysenv.get("yum")
        return ctx.runner.run([
            pkgcmd, "install", "--quiet", "--assumeyes", "--setopt=install_weak_deps=false",
            *args.packages(),
        ])

    def is_installed(self, ctx: DriverContext, args: PackageArgs) -> bool | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        rpm = ctx.sysenv.get("rpm")
        if rpm is None or not args.pkg:
            return None
        lines = ctx.runner.capture([rpm, "--query", args.pkg])
        return bool(lines)
