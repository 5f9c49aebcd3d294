"""
Command locator — find packaging and helper commands on the host.

Search order: $PATH entries, then the standard system directories,
then the platform's extra directories (e.g. Arch's core_perl).  The
combined list and a presence set are cached in the environment snapshot
and rebuilt after ``invalidate()``, which must be called whenever PATH
is rewritten.  Never touches the filesystem beyond stat/access checks.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

from ospkg.core.config.platforms import SEARCH_PATH, PlatformTable
from ospkg.core.context import SysEnv

logger = logging.getLogger(__name__)


class CommandLocator:
    """Resolve command names to absolute executable paths."""

    def __init__(self, sysenv: SysEnv, table: PlatformTable):
        self._sysenv = sysenv
        self._table = table

    def search_path(self) -> list[str]:
        """Return the cached search path, building it if needed."""
        path_list = self._sysenv.get("path_list")
        path_flag = self._sysenv.get("path_flag")
        if path_list is not None and path_flag is not None:
            return path_list

        path_list = []
        path_flag = set()
        for directory in os.environ.get("PATH", "").split(os.pathsep):
            if directory and directory not in path_flag:
                path_list.append(directory)
                path_flag.add(directory)
        for directory in (*SEARCH_PATH, *self._table.cmd_path_for(self._sysenv.platform)):
            if not os.path.isdir(directory):
                continue
            if directory not in path_flag:
                path_list.append(directory)
                path_flag.add(directory)

        self._sysenv.set("path_list", path_list)
        self._sysenv.set("path_flag", path_flag)
        logger.debug("command search path: %s", os.pathsep.join(path_list))
        return path_list

    def invalidate(self) -> None:
        """Drop the cached search path (call after changing PATH)."""
        self._sysenv.clear_path_cache()

    def cmd_path(self, name: str) -> str | None:
        """Absolute path of the first executable named ``name``, or None."""
        for directory in self.search_path():
            filepath = os.path.join(directory, name)
            if os.path.isfile(filepath) and os.access(filepath, os.X_OK):
                return filepath
        return None

    def locate(self, names: Iterable[str]) -> dict[str, str]:
        """Locate each command and record the found ones in the snapshot."""
        found: dict[str, str] = {}
        for name in names:
            filepath = self.cmd_path(name)
            if filepath:
                self._sysenv.set(name, filepath)
                found[name] = filepath
        logger.debug("located commands: %s", ", ".join(sorted(found)) or "(none)")
        return found
