"""
Error types.

Expected conditions (package not found, packager missing, operation
not implemented) are reported as return values, never as exceptions.
These classes cover the conditions that stop a run.
"""

from __future__ import annotations


class OsPackageError(Exception):
    """Base class for all ospkg errors."""


class ConfigError(OsPackageError):
    """Raised when the configuration file or environment settings are invalid."""


class PlatformError(OsPackageError):
    """Raised when the host platform cannot be introspected at all."""


class DispatchError(OsPackageError):
    """Raised when a driver operation is requested without an operation name."""


class BootstrapError(OsPackageError):
    """Raised when cpanminus cannot be bootstrapped from its source tarball."""
