"""
User Perl environment — local library setup for non-root runs.

Without root, modules can only go into a library under $HOME.  This
finds one (or creates ~/.local/perl) and exports the variables
local::lib would set, so cpan/cpanm children install there and later
perl processes find the modules:

    PATH  PERL5LIB  PERL_LOCAL_LIB_ROOT  PERL_MB_OPT  PERL_MM_OPT  MANPATH

The process environment is updated in place.  PATH changes, so the
command locator cache is invalidated afterwards.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import MutableMapping

from ospkg.core.context import SysEnv
from ospkg.core.services.command_locator import CommandLocator

logger = logging.getLogger(__name__)

# Order in which exports are reported
EXPORTED_VARS: tuple[str, ...] = (
    "PATH", "PERL5LIB", "PERL_LOCAL_LIB_ROOT", "PERL_MB_OPT", "PERL_MM_OPT", "MANPATH",
)


def dedup_path(*in_paths: str) -> str:
    """Join colon-delimited paths, keeping the first copy of each existing dir.

    "." is always dropped.
    """
    out_path: list[str] = []
    seen: set[str] = set()
    for path in in_paths:
        for directory in path.split(os.pathsep):
            if not directory or directory == ".":
                continue
            if directory not in seen and os.path.isdir(directory):
                out_path.append(directory)
            seen.add(directory)
    return os.pathsep.join(out_path)


def _writable_dir(path: str) -> bool:
    return os.path.isdir(path) and os.access(path, os.W_OK)


def _under_home(item: str, home: str) -> bool:
    return item.startswith(home.rstrip("/") + "/")


def library_hints(home: str, environ: MutableMapping[str, str]) -> list[str]:
    """Candidate Perl library bases found in the user's environment."""
    hints: list[str] = []

    def save(item: str) -> None:
        if item not in hints:
            hints.append(item)

    for item in environ.get("PERL_LOCAL_LIB_ROOT", "").split(os.pathsep):
        if item and _under_home(item, home):
            save(item.rstrip("/"))
    for item in environ.get("PERL5LIB", "").split(os.pathsep):
        if item and _under_home(item, home):
            save(os.path.dirname(item.rstrip("/")))
    for item in environ.get("PATH", "").split(os.pathsep):
        if item and _under_home(item, home) and ("/perl/" in item or "/perl5/" in item):
            save(os.path.dirname(item.rstrip("/")))
    return hints


def find_user_perldir(home: str, environ: MutableMapping[str, str]) -> str | None:
    """Existing writable Perl library base for this user, if any."""
    for dirpath in library_hints(home, environ):
        if _writable_dir(dirpath):
            return dirpath

    for dirpath in (home, os.path.join(home, "lib"), os.path.join(home, ".local")):
        for perlname in ("perl", "perl5"):
            candidate = os.path.join(dirpath, perlname)
            if _writable_dir(candidate):
                return candidate
    return None


def create_user_perldir(home: str) -> str:
    """Create ~/.local/perl/lib/perl5 (XDG layout) and return ~/.local/perl."""
    perlbase = Path(home) / ".local" / "perl"
    (perlbase / "lib" / "perl5").mkdir(mode=0o755, parents=True, exist_ok=True)
    logger.info("created user Perl library %s", perlbase)
    return str(perlbase)


def set_user_env(
    sysenv: SysEnv,
    locator: CommandLocator,
    environ: MutableMapping[str, str] | None = None,
) -> dict[str, str]:
    """Find or create the user library and export its environment.

    Returns:
        The exported variables, in ``EXPORTED_VARS`` order, for display.
    """
    env = os.environ if environ is None else environ

    if env.get("HOME"):
        sysenv.set("home", env["HOME"])
    home = sysenv.get("home") or str(Path.home())
    sysenv.set("home", home)

    perlbase = sysenv.get("perlbase") or find_user_perldir(home, env) or create_user_perldir(home)
    sysenv.set("perlbase", perlbase)

    if "PATH" in env:
        env["PATH"] = dedup_path(env["PATH"], f"{perlbase}/bin")
    else:
        env["PATH"] = dedup_path("/usr/bin:/bin", f"{perlbase}/bin", "/usr/local/bin")

    # PATH changed: the cached search path is stale
    locator.invalidate()

    env["PERL5LIB"] = dedup_path(env.get("PERL5LIB", ""), f"{perlbase}/lib/perl5")
    if "PERL_LOCAL_LIB_ROOT" in env:
        env["PERL_LOCAL_LIB_ROOT"] = dedup_path(env["PERL_LOCAL_LIB_ROOT"], perlbase)
    else:
        env["PERL_LOCAL_LIB_ROOT"] = perlbase
    env["PERL_MB_OPT"] = f'--install_base "{perlbase}"'
    env["PERL_MM_OPT"] = f"INSTALL_BASE={perlbase}"
    if "MANPATH" in env:
        env["MANPATH"] = dedup_path(env["MANPATH"], f"{perlbase}/man")
    else:
        env["MANPATH"] = dedup_path("/usr/share/man", f"{perlbase}/man", "/usr/local/share/man")

    exported = {name: env[name] for name in EXPORTED_VARS}
    for name, value in exported.items():
        logger.debug("export %s=%s", name, value)
    return exported
