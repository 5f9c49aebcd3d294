"""
SUSE driver — zypper (openSUSE Leap/Tumbleweed, SLES).

SUSE keeps CPAN capitalization in package names:
YAML::LibYAML → perl-YAML-LibYAML.  ``zypper search`` prints a table;
the Name column is the second ``|``-separated field.
"""

from __future__ import annotations

from ospkg.core.context import SysEnv
from ospkg.drivers.base import Driver, DriverContext, PackageArgs, latest, perl_dash_name


def _table_names(lines: list[str]) -> list[str]:
    names: list[str] = []
    for line in lines:
        fields = [f.strip() for f in line.split("|")]
        if len(fields) < 3:
            continue  # separator rule or banner text
        name = fields[1]
        if not name or name == "Name":
            continue
        names.append(name)
    return names


class SuseDriver(Driver):
    """SUSE packaging via zypper."""

    @property
    def name(self) -> str:
        return "suse"

    def pkgcmd(self, sysenv: SysEnv) -> bool:
        return sysenv.get("zypper") is not None

    def package_name(self, mod_parts: list[str]) -> str | None:
        return perl_dash_name(mod_parts, lower=False)

    def find(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        if not args.pkg:
            return None
        lines = ctx.runner.capture([
            ctx.sysenv.get("zypper"), "--non-interactive", "--quiet",
            "search", "--type", "package", args.pkg,
        ])
        return latest(_table_names(lines or []))

    def install(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        return ctx.runner.run([
            ctx.sysenv.get("zypper"), "--non-interactive", "install", "--no-recommends",
            *args.packages(),
        ])

    def refresh(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        return ctx.runner.run([ctx.sysenv.get("zypper"), "--non-interactive", "refresh"])
