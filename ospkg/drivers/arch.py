"""
Arch driver — pacman (Arch Linux, Manjaro, EndeavourOS).

Perl modules are packaged as ``perl-<module-path>``, lower-cased:
YAML::Tiny → perl-yaml-tiny.
"""

from __future__ import annotations

from ospkg.core.context import SysEnv
from ospkg.drivers.base import Driver, DriverContext, PackageArgs, latest, perl_dash_name


class ArchDriver(Driver):
    """Arch packaging via pacman."""

    @property
    def name(self) -> str:
        return "arch"

    def pkgcmd(self, sysenv: SysEnv) -> bool:
        return sysenv.get("pacman") is not None

    def package_name(self, mod_parts: list[str]) -> str | None:
        return perl_dash_name(mod_parts)

    def find(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        if not args.pkg:
            return None
        lines = ctx.runner.capture([
            ctx.sysenv.get("pacman"), "--sync", "--search", "--quiet", args.pkg,
        ])
        return latest(lines)

    def install(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        return ctx.runner.run([
            ctx.sysenv.get("pacman"), "--sync", "--needed", "--noconfirm", *args.packages(),
        ])
