"""
Platform resolver — decide which packaging driver serves this host.

Combines ``uname`` output with the os-release identity (via the
``distro`` library) and walks the platform table:

    1. candidates = release id, its alias ancestors, then its ID_LIKE
       ids (breadth-first, N levels deep, each id once)
    2. platform   = first candidate with a packager mapping,
                    else first common id, else the release id
    3. packager   = mapping for the platform; none off Linux

The walk is pure (``select``) so it can be tested against simulated
identities without a real /etc/os-release.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

import distro

from ospkg.core.config.platforms import PlatformTable
from ospkg.core.context import SysEnv
from ospkg.core.errors import PlatformError
from ospkg.core.services.runner import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OsIdentity:
    """What the os-release probe reports about the host."""

    id: str
    like: tuple[str, ...] = field(default_factory=tuple)
    name: str = ""
    has_os_release: bool = True


def probe_os_release() -> OsIdentity:
    """Identify the running OS from its release metadata."""
    release = distro.os_release_info()
    return OsIdentity(
        id=distro.id(),
        like=tuple(distro.like().split()),
        name=distro.name(pretty=True),
        has_os_release=bool(release),
    )


class PlatformResolver:
    """Selects the platform id and driver id for the host."""

    def __init__(
        self,
        sysenv: SysEnv,
        table: PlatformTable,
        runner: CommandRunner,
        probe: Callable[[], OsIdentity] = probe_os_release,
    ):
        self._sysenv = sysenv
        self._table = table
        self._runner = runner
        self._probe = probe

    # ── Pure selection ──────────────────────────────────────────

    def candidates(self, identity: OsIdentity) -> list[str]:
        """Release id followed by every id it derives from, in BFS order.

        The table's own aliases for the release id come before its
        ID_LIKE ids, so rhel maps to centos even though it is like fedora.
        """
        seen: list[str] = [identity.id] if identity.id else []
        queue = [*self._table.ancestors(identity.id), *identity.like]
        while queue:
            current = queue.pop(0)
            if not current or current in seen:
                continue
            seen.append(current)
            queue.extend(self._table.ancestors(current))
        return seen

    def select(self, identity: OsIdentity) -> tuple[str, str | None]:
        """Return ``(platform_id, driver_id or None)`` for an identity."""
        candidates = self.candidates(identity)
        for candidate in candidates:
            driver_id = self._table.driver_for(candidate)
            if driver_id is not None:
                return candidate, driver_id
        for candidate in candidates:
            if self._table.is_common(candidate):
                return candidate, None
        return identity.id, None

    # ── Host probing ────────────────────────────────────────────

    def _uname(self, flag: str) -> str | None:
        lines = self._runner.capture([self._sysenv.get("uname"), flag])
        if not lines:
            return None
        return lines[0].strip()

    def resolve(self) -> tuple[str, str | None]:
        """Probe the host and record os/kernel/machine/platform/packager.

        Raises:
            PlatformError: If the ``uname`` command was not located.
        """
        if self._sysenv.get("uname") is None:
            raise PlatformError("can't find uname command to collect system information")

        self._sysenv.set("os", self._uname("-s"))
        self._sysenv.set("kernel", self._uname("-r"))
        self._sysenv.set("machine", self._uname("-m"))

        identity = self._probe()
        if not identity.id:
            os_name = (self._sysenv.get("os") or "unknown").lower()
            identity = OsIdentity(id=os_name, like=identity.like, name=identity.name, has_os_release=False)

        platform, driver_id = self.select(identity)
        if self._sysenv.get("os") != "Linux":
            driver_id = None

        self._sysenv.set("platform", platform)
        self._sysenv.set("packager", driver_id)
        self._sysenv.set("detected", self._summary(identity, platform, driver_id))
        logger.info("system detected: %s", self._sysenv.get("detected"))
        return platform, driver_id

    @staticmethod
    def _summary(identity: OsIdentity, platform: str, driver_id: str | None) -> str:
        if not identity.has_os_release:
            return f"{platform} (no os-release data)"
        detected = platform if platform == identity.id else f"{identity.id} -> {platform}"
        if driver_id is not None:
            detected += f" handled by {driver_id}"
        return detected
