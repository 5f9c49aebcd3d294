"""
Alpine driver — apk.

Same ``perl-<module-path>`` naming as Arch, but ``apk list`` prints
``name-version-release arch {origin} (license)`` so each result line is
cut at the first space before sorting.
"""

from __future__ import annotations

from ospkg.core.context import SysEnv
from ospkg.drivers.base import Driver, DriverContext, PackageArgs, latest, perl_dash_name


def _package_field(line: str) -> str:
    return line.split(" ", 1)[0]


class AlpineDriver(Driver):
    """Alpine packaging via apk."""

    @property
    def name(self) -> str:
        return "alpine"

    def pkgcmd(self, sysenv: SysEnv) -> bool:
        return sysenv.get("apk") is not None

    def package_name(self, mod_parts: list[str]) -> str | None:
        return perl_dash_name(mod_parts)

    def find(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        if not args.pkg:
            return None
        lines = ctx.runner.capture([
            ctx.sysenv.get("apk"), "list", "--available", "--quiet", args.pkg,
        ])
        return latest(_package_field(line) for line in (lines or []))

    def install(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        return ctx.runner.run([ctx.sysenv.get("apk"), "add", *args.packages()])

    def refresh(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        return ctx.runner.run([ctx.sysenv.get("apk"), "update"])
