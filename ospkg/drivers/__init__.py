"""Drivers — one per OS packaging family.

Public re-exports for convenient access.
"""

from ospkg.drivers.base import (
    NOT_IMPLEMENTED,
    Driver,
    DriverContext,
    DriverStatus,
    PackageArgs,
)
from ospkg.drivers.registry import DriverRegistry, default_registry

__all__ = [
    "NOT_IMPLEMENTED",
    "Driver",
    "DriverContext",
    "DriverRegistry",
    "DriverStatus",
    "PackageArgs",
    "default_registry",
]
