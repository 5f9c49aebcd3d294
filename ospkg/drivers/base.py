"""
Driver base — the contract between the dispatcher and OS packagers.

Every packaging family (apt, dnf/yum, pacman, apk, zypper) implements
this interface.  The dispatcher only talks to packagers through it,
never directly to their command-line tools.

Result conventions (no exceptions for expected conditions):
    - packager command absent   → None (``pkgcmd``/``install``: False)
    - nothing found             → None
    - operation not supported   → NOT_IMPLEMENTED (falsy)

To add a packaging family:
    1. Subclass Driver
    2. Implement name, pkgcmd, find, install (and package_name or modpkg)
    3. Register it in drivers/registry.py and map platforms to its id
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from pydantic import BaseModel, Field

from ospkg.core.context import SysEnv
from ospkg.core.services.runner import CommandRunner


class DriverStatus(Enum):
    """Outcomes that are not values but are not failures either."""

    NOT_IMPLEMENTED = "not-implemented"

    def __bool__(self) -> bool:
        return False


NOT_IMPLEMENTED = DriverStatus.NOT_IMPLEMENTED


class PackageArgs(BaseModel):
    """Argument bag for one driver operation."""

    op: str
    module: str | None = None
    mod_parts: list[str] = Field(default_factory=list)
    pkg: str | list[str] | None = None

    def packages(self) -> list[str]:
        """The ``pkg`` argument flattened into an argument list."""
        if self.pkg is None:
            return []
        if isinstance(self.pkg, str):
            return [self.pkg]
        return list(self.pkg)


def _no_override(pkg: str) -> str | None:
    return None


@dataclass
class DriverContext:
    """Everything a driver operation may touch.

    ``override`` maps a constructed package name to the platform's real
    name (or None), so names built inside a driver get the same
    corrections the dispatcher applies to ``pkg`` arguments.
    """

    sysenv: SysEnv
    runner: CommandRunner
    override: Callable[[str], str | None] = _no_override


def latest(lines: Iterable[str] | None) -> str | None:
    """Lexicographically last line, or None for no lines.

    Stands in for "most recent version".  This is plain string order,
    not version comparison: perl-Foo-1.10 sorts before perl-Foo-1.9.
    """
    pkglist = sorted(line for line in (lines or []) if line)
    if not pkglist:
        return None
    return pkglist[-1]


class Driver(ABC):
    """Abstract base class for packaging-family drivers.

    Drivers are stateless: all state lives in the ``DriverContext``
    passed to each call, so one instance serves the whole run.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The driver identifier (e.g., 'debian', 'rpm', 'arch')."""

    @abstractmethod
    def pkgcmd(self, sysenv: SysEnv) -> bool:
        """Whether this family's packaging command was located.

        Every other operation returns its "not usable" value without
        running anything when this is False.
        """

    @abstractmethod
    def find(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        """Search the repositories for ``args.pkg``; return the latest match."""

    @abstractmethod
    def install(self, ctx: DriverContext, args: PackageArgs) -> bool:
        """Install ``args.pkg`` (a name or a list) non-interactively."""

    def package_name(self, mod_parts: list[str]) -> str | None:
        """This family's package name for a Perl module, before lookup."""
        return None

    def modpkg(self, ctx: DriverContext, args: PackageArgs) -> str | None:
        """OS package providing the Perl module in ``args.mod_parts``.

        Builds the family's conventional name, applies the platform
        override, and confirms the result with ``available``.  The short
        name is returned rather than the matched line because install
        commands reject full versioned strings.
        """
        if not self.pkgcmd(ctx.sysenv):
            return None
        if not args.mod_parts:
            return None
        pkgname = self.package_name(args.mod_parts)
        if not pkgname:
            return None
        pkgname = ctx.override(pkgname) or pkgname
        if not self.available(ctx, pkgname):
            return None
        return pkgname

    def available(self, ctx: DriverContext, pkgname: str) -> bool:
        """Whether the repositories carry a package named ``pkgname``."""
        return bool(self.find(ctx, PackageArgs(op="find", pkg=pkgname)))

    def is_installed(self, ctx: DriverContext, args: PackageArgs) -> bool | DriverStatus | None:
        """Whether ``args.pkg`` is installed locally."""
        return NOT_IMPLEMENTED

    def refresh(self, ctx: DriverContext, args: PackageArgs) -> bool | DriverStatus | None:
        """Update the local copy of repository metadata."""
        return NOT_IMPLEMENTED

    def ping(self) -> str:
        """Identify this driver without running any packaging command."""
        return self.name

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


def perl_dash_name(mod_parts: list[str], *, lower: bool = True) -> str:
    """``perl-`` prefixed, hyphen-joined module path (Arch, Alpine, SUSE)."""
    parts = [p.lower() for p in mod_parts] if lower else list(mod_parts)
    return "-".join(["perl", *parts])
