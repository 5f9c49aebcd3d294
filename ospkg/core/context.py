"""
Environment snapshot — what this run discovered about the host.

One ``SysEnv`` is built per run by ``OsPackage.collect_sysenv()``:

    - Command locator:  command name → absolute path
    - Platform resolver: os, kernel, machine, platform, packager
    - User environment:  home, perlbase
    - Caches:           path_list / path_flag (search path), perl_inc

Design notes:
    - Explicit object passed to every component that needs it, not a
      module-level singleton.  Tests build their own with injected values.
    - Written only by discovery routines before any driver call; the path
      cache is dropped with ``clear_path_cache()`` after PATH is rewritten.
    - A key whose value is None is treated as absent.
"""

from __future__ import annotations

from typing import Any

# Keys holding cached search-path data (rebuilt on demand)
_PATH_CACHE_KEYS = ("path_list", "path_flag")


class SysEnv:
    """Mapping of logical resource name → discovered value."""

    def __init__(self, values: dict[str, Any] | None = None):
        self._values: dict[str, Any] = {
            k: v for k, v in (values or {}).items() if v is not None
        }

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> Any:
        """Store a value; storing None removes the key."""
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value
        return value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    # ── Derived accessors ───────────────────────────────────────

    @property
    def platform(self) -> str | None:
        return self._values.get("platform")

    @property
    def packager(self) -> str | None:
        """Active driver id, or None when the platform has no driver."""
        return self._values.get("packager")

    @property
    def is_root(self) -> bool:
        return bool(self._values.get("root"))

    def clear_path_cache(self) -> None:
        """Forget the cached search path so the next lookup re-reads PATH."""
        for key in _PATH_CACHE_KEYS:
            self._values.pop(key, None)

    def to_dict(self) -> dict[str, Any]:
        """Serializable copy (sets become sorted lists)."""
        out: dict[str, Any] = {}
        for key in sorted(self._values):
            value = self._values[key]
            if isinstance(value, (set, frozenset)):
                value = sorted(value)
            elif isinstance(value, (list, tuple)):
                value = list(value)
            out[key] = value
        return out

    def __repr__(self) -> str:
        return f"<SysEnv platform={self.platform!r} packager={self.packager!r}>"
