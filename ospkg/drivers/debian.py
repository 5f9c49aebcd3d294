"""
Debian driver — apt-get / apt-cache (Debian, Ubuntu and derivatives).

Perl modules are packaged as ``lib<module-path>-perl``, lower-cased and
hyphen-joined: Term::ANSIColor → libterm-ansicolor-perl.
"""

from __future__ import annotations

import re

from ospkg.core.context import SysEnv
from ospkg.drivers.base import Driver, DriverContext, PackageArgs, latest

# Keeps apt-get from stopping at debconf prompts
_NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

_ERE_SPECIAL = re.compile(r"[.^$*+?()\[\]{}|\\]")


class DebianDriver(Driver):
    """Debian-family packaging via apt."""

    @property
    def name(self) -> str:
        return "debian"

    def pkgcmd(self, sysenv: SysEnv) -> bool:
        return sysenv.get("apt-get") is not None and sysenv.get("apt-cache") is not None

    def package_name(self, mod_parts: list[str]) -> str | None:
        return "lib" + "-".join(p.lower() for p in mod_parts) + "-perl"

    def find(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        if not args.pkg:
            return None
        # "name - short description": keep the name
        lines = ctx.runner.capture([
            ctx.sysenv.get("apt-cache"), "search", "--quiet=2", "--names-only", args.pkg,
        ])
        return latest(line.split(None, 1)[0] for line in (lines or []) if line.strip())

    def available(self, ctx: DriverContext, pkgname: str) -> bool:
        # apt-cache search takes a regex; anchor it so libfoo-perl does not
        # match libfoo-perl-extra
        if not self.pkgcmd(ctx.sysenv):
            return False
        pattern = "^" + _ERE_SPECIAL.sub(r"\\\g<0>", pkgname) + "$"
        lines = ctx.runner.capture([
            ctx.sysenv.get("apt-cache"), "search", "--quiet=2", "--names-only", pattern,
        ])
        return any(line.split(None, 1)[0] == pkgname for line in (lines or []) if line.strip())

    def install(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        return ctx.runner.run(
            [ctx.sysenv.get("apt-get"), "install", "--quiet", "--yes",
             "--no-install-recommends", *args.packages()],
            env_overrides=_NONINTERACTIVE_ENV,
        )

    def is_installed(self, ctx: DriverContext, args: PackageArgs) -> bool | None:
        if not self.pkgcmd(ctx.sysenv):
            return None
        query = ctx.sysenv.get("dpkg-query")
        if query is None or not args.pkg:
            return None
        lines = ctx.runner.capture([query, "--show", "--showformat=${Status}", args.pkg])
        return bool(lines) and "install ok installed" in "\n".join(lines)

    def refresh(self, ctx: DriverContext, args: PackageArgs) -> bool:
        if not self.pkgcmd(ctx.sysenv):
            return False
        return ctx.runner.run(
            [ctx.sysenv.get("apt-get"), "update", "--quiet"],
            env_overrides=_NONINTERACTIVE_ENV,
        )
