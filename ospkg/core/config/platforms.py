"""
Platform configuration table — static per-distro packaging data.

Pure data plus lookups.  Every table is keyed by platform id (the
distro id after alias resolution, e.g. "centos" for Rocky Linux).

    packager   platform → driver id
    aliases    distro id → ids it derives from (walked N-deep)
    common_ids ids accepted as a platform even without a packager
    overrides  platform → {computed package name → real package name}
    prereqs    platform → OS packages CPAN needs on that platform
    cmd_path   platform → extra command search directories

The table is built once at startup (defaults merged with the optional
config file) and frozen for the rest of the run.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── System configuration ────────────────────────────────────────

# Commands located at startup
SEARCH_CMDS: tuple[str, ...] = (
    "uname", "curl", "tar", "make", "perl", "cpan", "cpanm",
    "rpm", "yum", "repoquery", "dnf",
    "apt", "apt-get", "apt-cache", "dpkg-query",
    "apk", "pacman", "brew", "zypper",
)

# Searched after $PATH, in order
SEARCH_PATH: tuple[str, ...] = (
    "/bin", "/usr/bin", "/sbin", "/usr/sbin", "/opt/bin", "/usr/local/bin",
)

# ── Perl configuration ──────────────────────────────────────────

PERL_SOURCES: dict[str, str] = {
    "App::cpanminus": (
        "https://cpan.metacpan.org/authors/id/M/MI/MIYAGAWA/"
        "App-cpanminus-1.7046.tar.gz"
    ),
}

# Commands needed to bootstrap cpanminus from source
CPAN_DEPS: tuple[str, ...] = ("curl", "tar", "make")

# Pragmas and core modules that never need installing
SKIP_MODULES: frozenset[str] = frozenset({
    "strict", "warnings", "utf8", "feature", "autodie",
})

# ── Platform defaults ───────────────────────────────────────────

_DEFAULT_PACKAGER: dict[str, str] = {
    "alpine": "alpine",
    "arch": "arch",
    "centos": "rpm",  # CentOS itself is gone; its derivatives alias to it
    "debian": "debian",
    "fedora": "rpm",
    "opensuse": "suse",
    "suse": "suse",
    "ubuntu": "debian",
}

_DEFAULT_ALIASES: dict[str, list[str]] = {
    "almalinux": ["centos"],
    "rocky": ["centos"],
    "rhel": ["centos"],
    "centos": ["fedora"],
    "opensuse-leap": ["opensuse"],
    "opensuse-tumbleweed": ["opensuse"],
    "opensuse": ["suse"],
    "sles": ["suse"],
    "manjaro": ["arch"],
    "endeavouros": ["arch"],
    "linuxmint": ["ubuntu"],
    "pop": ["ubuntu"],
}

# CentOS stays recognizable in ID_LIKE so Rocky and Alma get EPEL
_DEFAULT_COMMON_IDS: list[str] = ["centos"]

_DEFAULT_OVERRIDES: dict[str, dict[str, str]] = {
    "debian": {"libapp-cpanminus-perl": "cpanminus"},
    "ubuntu": {"libapp-cpanminus-perl": "cpanminus"},
    "arch": {
        "perl-app-cpanminus": "cpanminus",
        "tar": "core/tar",
        "curl": "core/curl",
    },
}

_DEFAULT_PREREQS: dict[str, list[str]] = {
    "alpine": ["perl-utils"],
    "fedora": ["perl-CPAN"],
    "centos": ["epel-release", "perl-CPAN"],
    "debian": ["perl-modules"],
    "ubuntu": ["perl-modules"],
}

_DEFAULT_CMD_PATH: dict[str, list[str]] = {
    "arch": ["/usr/bin/core_perl", "/usr/bin/vendor_perl", "/usr/bin/site_perl"],
}


def _listify(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]  # type: ignore[union-attr]


class PlatformTable(BaseModel):
    """Frozen per-platform packaging configuration."""

    model_config = ConfigDict(frozen=True)

    packager: dict[str, str] = Field(default_factory=dict)
    aliases: dict[str, list[str]] = Field(default_factory=dict)
    common_ids: list[str] = Field(default_factory=list)
    overrides: dict[str, dict[str, str]] = Field(default_factory=dict)
    prereqs: dict[str, list[str]] = Field(default_factory=dict)
    cmd_path: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("aliases", "prereqs", "cmd_path", mode="before")
    @classmethod
    def _scalar_or_list(cls, value: object) -> object:
        # entries may be a single string or a list of strings
        if isinstance(value, dict):
            return {k: _listify(v) for k, v in value.items()}
        return value

    # ── Lookups ─────────────────────────────────────────────────

    def driver_for(self, platform: str | None) -> str | None:
        if platform is None:
            return None
        return self.packager.get(platform)

    def ancestors(self, platform_id: str) -> list[str]:
        return list(self.aliases.get(platform_id, []))

    def is_common(self, platform_id: str) -> bool:
        return platform_id in self.common_ids

    def override(self, platform: str | None, pkg: str) -> str | None:
        """Corrected package name for ``pkg`` on ``platform``, if any."""
        if platform is None:
            return None
        return self.overrides.get(platform, {}).get(pkg)

    def prereqs_for(self, platform: str | None) -> list[str]:
        if platform is None:
            return []
        return list(self.prereqs.get(platform, []))

    def cmd_path_for(self, platform: str | None) -> list[str]:
        if platform is None:
            return []
        return list(self.cmd_path.get(platform, []))


def default_table() -> PlatformTable:
    """The compiled-in table with no user additions."""
    return build_table()


def build_table(
    *,
    packager: dict[str, str] | None = None,
    aliases: dict[str, list[str]] | None = None,
    common_ids: list[str] | None = None,
    overrides: dict[str, dict[str, str]] | None = None,
    prereqs: dict[str, list[str]] | None = None,
    cmd_path: dict[str, list[str]] | None = None,
) -> PlatformTable:
    """Merge user additions over the defaults.

    Scalar maps (packager) and list maps (aliases, prereqs, cmd_path)
    replace the default entry for a platform.  Override maps are merged
    per platform so a user entry only adds or corrects single names.
    """
    merged_overrides = {k: dict(v) for k, v in _DEFAULT_OVERRIDES.items()}
    for platform, entries in (overrides or {}).items():
        merged_overrides.setdefault(platform, {}).update(entries)

    return PlatformTable(
        packager={**_DEFAULT_PACKAGER, **(packager or {})},
        aliases={**_DEFAULT_ALIASES, **(aliases or {})},
        common_ids=[*_DEFAULT_COMMON_IDS, *[c for c in (common_ids or []) if c not in _DEFAULT_COMMON_IDS]],
        overrides=merged_overrides,
        prereqs={**_DEFAULT_PREREQS, **(prereqs or {})},
        cmd_path={**_DEFAULT_CMD_PATH, **(cmd_path or {})},
    )
