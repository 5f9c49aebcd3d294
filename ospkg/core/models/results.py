"""
Module results — the outcome contract of the module installer.

Each requested module produces one ``ModuleResult``.  A batch run
collects them into a ``BatchReport``.  Failures are recorded here,
never raised.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class ModuleResult(BaseModel):
    """Outcome of installing one Perl module."""

    module: str
    status: Literal["installed", "present", "skipped", "failed"] = "installed"
    method: Literal["ospkg", "cpan", "cpanm", "none"] = "none"
    package: str | None = None      # OS package name when method == "ospkg"
    error: str | None = None
    finished_at: str = Field(default_factory=_now_iso)

    @property
    def ok(self) -> bool:
        """Whether the module is available after this step."""
        return self.status != "failed"

    @classmethod
    def present(cls, module: str) -> ModuleResult:
        return cls(module=module, status="present")

    @classmethod
    def skipped(cls, module: str) -> ModuleResult:
        return cls(module=module, status="skipped")

    @classmethod
    def failure(cls, module: str, error: str, **kwargs: Any) -> ModuleResult:
        return cls(module=module, status="failed", error=error, **kwargs)


class BatchReport(BaseModel):
    """Per-module results for one batch run."""

    results: list[ModuleResult] = Field(default_factory=list)

    def add(self, result: ModuleResult) -> None:
        self.results.append(result)

    @property
    def ok(self) -> bool:
        """True only if every module in the batch succeeded."""
        return all(r.ok for r in self.results)

    @property
    def failed(self) -> list[str]:
        return [r.module for r in self.results if not r.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "total": len(self.results),
            "failed": self.failed,
            "results": [r.model_dump() for r in self.results],
        }
