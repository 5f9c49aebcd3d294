"""
Module installer — get Perl modules onto the host, OS packages first.

For each module:

    1. already known installed (cache, then perl's @INC)  → done
    2. root, driver implemented, ``modpkg`` finds a package,
       ``install`` succeeds                               → done
    3. fall back to ``cpan`` (or ``cpanm``)               → its result

Step 2 needs root, so unprivileged runs go straight to step 3 with
the user library from user_env.  Every path reports a bool or a
``ModuleResult``; nothing here raises for a failed install.

``establish_cpan()`` makes sure step 3 is possible at all, installing
CPAN's OS prerequisites and bootstrapping cpanminus from its tarball
when neither cpan nor cpanm exists.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from ospkg.core.config.platforms import CPAN_DEPS, PERL_SOURCES, SKIP_MODULES, PlatformTable
from ospkg.core.context import SysEnv
from ospkg.core.errors import BootstrapError
from ospkg.core.models.results import BatchReport, ModuleResult
from ospkg.core.services.command_locator import CommandLocator
from ospkg.core.services.dispatcher import Dispatcher
from ospkg.core.services.runner import CommandRunner

logger = logging.getLogger(__name__)

_CPANM_MEMBER = re.compile(r"/bin/cpanm$")

# Prints one @INC directory per line
_PERL_INC_SCRIPT = 'print join("\\n", @INC), "\\n"'


class ModuleInstaller:
    """Installs Perl modules through the dispatcher or CPAN."""

    def __init__(
        self,
        sysenv: SysEnv,
        table: PlatformTable,
        dispatcher: Dispatcher,
        runner: CommandRunner,
        locator: CommandLocator,
    ):
        self._sysenv = sysenv
        self._table = table
        self._dispatcher = dispatcher
        self._runner = runner
        self._locator = locator
        self._installed: dict[str, bool] = {}

    # ── Queries ─────────────────────────────────────────────────

    def is_root(self) -> bool:
        return self._sysenv.is_root

    def pkg_skip(self, module: str) -> bool:
        """Whether ``module`` is a pragma that ships with perl itself."""
        return module in SKIP_MODULES

    def cpan_prereqs(self) -> list[str]:
        """OS packages CPAN needs here: common commands plus platform extras."""
        return [*CPAN_DEPS, *self._table.prereqs_for(self._sysenv.platform)]

    def perl_inc(self) -> list[str]:
        """perl's @INC, queried once per run."""
        cached = self._sysenv.get("perl_inc")
        if cached is not None:
            return cached
        perl = self._sysenv.get("perl")
        if perl is None:
            return []
        lines = self._runner.capture([perl, "-e", _PERL_INC_SCRIPT]) or []
        inc = [line for line in lines if line and line != "."]
        self._sysenv.set("perl_inc", inc)
        return inc

    def module_installed(self, name: str, value: bool | None = None) -> bool:
        """Read, or with ``value`` set, the installed flag for a module.

        A miss in the cache checks each @INC directory for the module's
        ``.pm`` file and remembers a hit.
        """
        if value is not None:
            self._installed[name] = bool(value)
            return bool(value)

        if self._installed.get(name):
            return True

        modfile = os.path.join(*name.split("::")) + ".pm"
        for element in self.perl_inc():
            if os.path.isfile(os.path.join(element, modfile)):
                self._installed[name] = True
                return True
        return False

    # ── OS package path ─────────────────────────────────────────

    def _ospkg_for(self, module: str) -> str | None:
        """Package that would provide ``module``, or None to fall back."""
        if not self.is_root():
            return None
        if not self._dispatcher.dispatch("implemented"):
            return None
        pkgname = self._dispatcher.dispatch("modpkg", module=module)
        if not pkgname or not isinstance(pkgname, str):
            return None
        return pkgname

    def _install_ospkg(self, module: str) -> tuple[str | None, bool]:
        """(package, installed) for an OS package attempt at ``module``."""
        pkgname = self._ospkg_for(module)
        if pkgname is None:
            return None, False
        logger.info("install %s for %s using %s", pkgname, module, self._sysenv.packager)
        return pkgname, bool(self._dispatcher.dispatch("install", pkg=pkgname))

    def module_package(self, module: str) -> bool:
        """Install a Perl module as an OS package (root only)."""
        return self._install_ospkg(module)[1]

    # ── Module installation ─────────────────────────────────────

    def install_module(self, name: str) -> ModuleResult:
        """Install one module and describe what happened."""
        if self.module_installed(name):
            return ModuleResult.present(name)

        logger.info("install %s", name)

        pkgname, ok = self._install_ospkg(name)
        if ok:
            self.module_installed(name, True)
            return ModuleResult(module=name, method="ospkg", package=pkgname)
        if pkgname is not None:
            logger.warning("OS package %s failed for %s, trying CPAN", pkgname, name)

        return self._cpan_install(name)

    def _cpan_install(self, name: str) -> ModuleResult:
        if self._sysenv.get("cpan") is not None:
            method, cmd = "cpan", self._sysenv.get("cpan")
        elif self._sysenv.get("cpanm") is not None:
            method, cmd = "cpanm", self._sysenv.get("cpanm")
        else:
            logger.error("failed to install %s module: no cpan or cpanm command", name)
            return ModuleResult.failure(name, "no cpan or cpanm command available")

        if not self._runner.run([cmd, name]):
            logger.error("failed to install %s module", name)
            return ModuleResult.failure(name, f"{method} failed for {name}", method=method)

        self.module_installed(name, True)
        return ModuleResult(module=name, method=method)

    def check_module(self, name: str) -> bool:
        """Make sure a module is installed; True if it is afterwards."""
        return self.install_module(name).ok

    def install_modules(self, names: list[str]) -> BatchReport:
        """Install each module in turn, continuing past failures."""
        report = BatchReport()
        for name in names:
            if self.pkg_skip(name):
                report.add(ModuleResult.skipped(name))
                continue
            report.add(self.install_module(name))
        return report

    # ── CPAN bootstrap ──────────────────────────────────────────

    def _relocate(self, name: str) -> str | None:
        filepath = self._locator.cmd_path(name)
        self._sysenv.set(name, filepath)
        return filepath

    def bootstrap_cpanm(self, build_dir: Path | None = None) -> str:
        """Fetch and unpack cpanminus into ``build_dir`` (default ./build).

        Returns:
            Absolute path of the extracted ``cpanm`` script.

        Raises:
            BootstrapError: If curl/tar/make are missing or a step fails.
        """
        build_dir = (build_dir or Path.cwd() / "build").resolve()

        missing = [cmd for cmd in CPAN_DEPS if self._sysenv.get(cmd) is None]
        if missing:
            raise BootstrapError(f"missing {', '.join(missing)} command - can't bootstrap cpanm")

        try:
            build_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BootstrapError(f"can't make build directory {build_dir}: {e}") from e

        archive = build_dir / "app-cpanminus.tar.gz"
        if not self._runner.run([
            self._sysenv.get("curl"), "-L", "--output", str(archive),
            PERL_SOURCES["App::cpanminus"],
        ]):
            raise BootstrapError("download failed for App::cpanminus")

        members = self._runner.capture([self._sysenv.get("tar"), "-tf", str(archive)]) or []
        cpanm_member = next((m for m in members if _CPANM_MEMBER.search(m)), None)
        if cpanm_member is None:
            raise BootstrapError(f"no bin/cpanm in {archive}")

        if not self._runner.run(
            [self._sysenv.get("tar"), "-xf", str(archive), cpanm_member],
            cwd=str(build_dir),
        ):
            raise BootstrapError(f"failed to extract {cpanm_member} from {archive}")

        cpanm = str(build_dir / cpanm_member)
        self._sysenv.set("cpanm", cpanm)
        logger.info("bootstrapped cpanm at %s", cpanm)
        return cpanm

    def establish_cpan(self, build_dir: Path | None = None) -> bool:
        """Make cpan (and if needed cpanm) available.

        Returns:
            True if cpan or cpanm is usable afterwards.

        Raises:
            BootstrapError: If cpanminus had to be bootstrapped and failed.
        """
        if self.is_root():
            deps = self.cpan_prereqs()
            if self._dispatcher.dispatch("implemented"):
                if not self._dispatcher.dispatch("install", pkg=deps):
                    logger.warning("could not install CPAN prerequisites: %s", " ".join(deps))
            for dep in (*deps, "cpan"):
                if self._locator.cmd_path(dep):
                    self._relocate(dep)

        if self._sysenv.get("cpan") is None and self._sysenv.get("cpanm") is None:
            if self.is_root() and self.module_package("App::cpanminus"):
                self._relocate("cpanm")
            if self._sysenv.get("cpanm") is None:
                self.bootstrap_cpanm(build_dir)

        if self._sysenv.get("cpan") is None:
            if self.is_root() and self.module_package("CPAN"):
                self._relocate("cpan")
            if self._sysenv.get("cpan") is None and self._sysenv.get("cpanm") is not None:
                if self._runner.run([self._sysenv.get("cpanm"), "CPAN"]):
                    self._relocate("cpan")

        return self._sysenv.get("cpan") is not None or self._sysenv.get("cpanm") is not None
