"""
Driver registry — driver id → driver instance.

The platform table maps platform ids to driver ids; this registry maps
driver ids to the stateless driver objects.  Adding a packaging family
means registering one more entry here, not touching the dispatcher.
"""

from __future__ import annotations

import logging
from typing import Any

from ospkg.core.context import SysEnv
from ospkg.drivers.alpine import AlpineDriver
from ospkg.drivers.arch import ArchDriver
from ospkg.drivers.base import Driver
from ospkg.drivers.debian import DebianDriver
from ospkg.drivers.rpm import RpmDriver
from ospkg.drivers.suse import SuseDriver

logger = logging.getLogger(__name__)


class DriverRegistry:
    """Lookup table of packaging drivers."""

    def __init__(self) -> None:
        self._drivers: dict[str, Driver] = {}

    def register(self, driver: Driver) -> None:
        name = driver.name
        if name in self._drivers:
            logger.warning("Overwriting existing driver: %s", name)
        self._drivers[name] = driver
        logger.debug("Registered driver: %s", name)

    def unregister(self, name: str) -> None:
        self._drivers.pop(name, None)

    def get(self, name: str | None) -> Driver | None:
        if name is None:
            return None
        return self._drivers.get(name)

    def list_drivers(self) -> list[str]:
        return sorted(self._drivers)

    def driver_status(self, sysenv: SysEnv) -> dict[str, dict[str, Any]]:
        """Which drivers would be usable with the located commands."""
        return {
            name: {
                "name": name,
                "available": driver.pkgcmd(sysenv),
                "type": driver.__class__.__name__,
            }
            for name, driver in sorted(self._drivers.items())
        }


def default_registry() -> DriverRegistry:
    """Registry holding the five built-in packaging families."""
    registry = DriverRegistry()
    for driver in (DebianDriver(), RpmDriver(), ArchDriver(), AlpineDriver(), SuseDriver()):
        registry.register(driver)
    return registry
