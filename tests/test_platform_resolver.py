"""
Tests for platform resolution against simulated os-release identities.
"""

from __future__ import annotations

import pytest

from ospkg.core.config.platforms import build_table
from ospkg.core.context import SysEnv
from ospkg.core.errors import PlatformError
from ospkg.core.services.platform_resolver import OsIdentity, PlatformResolver
from ospkg.drivers.registry import default_registry
from tests.simulated_platforms import PLATFORMS, UNSUPPORTED

UNAME = "/usr/bin/uname"


def _resolver(table, runner, identity: OsIdentity, **values) -> PlatformResolver:
    return PlatformResolver(SysEnv(values), table, runner, probe=lambda: identity)


def _linux_uname(runner, system: str = "Linux") -> None:
    runner.on_capture(UNAME, "-s", lines=[system])
    runner.on_capture(UNAME, "-r", lines=["6.8.0-45-generic"])
    runner.on_capture(UNAME, "-m", lines=["x86_64"])


# ── select ──────────────────────────────────────────────────────


class TestSelect:
    @pytest.mark.parametrize("name", sorted(PLATFORMS))
    def test_supported(self, table, runner, name):
        identity, platform, driver_id = PLATFORMS[name]
        assert _resolver(table, runner, identity).select(identity) == (platform, driver_id)

    @pytest.mark.parametrize("name", sorted(PLATFORMS))
    def test_exactly_one_registered_driver(self, table, runner, name):
        identity, _, _ = PLATFORMS[name]
        _, driver_id = _resolver(table, runner, identity).select(identity)
        assert default_registry().get(driver_id) is not None

    @pytest.mark.parametrize("name", sorted(UNSUPPORTED))
    def test_unsupported_has_no_driver(self, table, runner, name):
        identity = UNSUPPORTED[name]
        platform, driver_id = _resolver(table, runner, identity).select(identity)
        assert platform == identity.id
        assert driver_id is None

    def test_candidates_breadth_first(self, table, runner):
        identity = OsIdentity(id="rocky", like=("rhel", "centos", "fedora"))
        candidates = _resolver(table, runner, identity).candidates(identity)
        assert candidates == ["rocky", "centos", "rhel", "fedora"]

    def test_alias_beats_id_like(self, table, runner):
        # rhel reports ID_LIKE=fedora but the table maps it to centos
        identity = OsIdentity(id="rhel", like=("fedora",))
        resolver = _resolver(table, runner, identity)
        assert resolver.candidates(identity) == ["rhel", "centos", "fedora"]
        assert resolver.select(identity) == ("centos", "rpm")

    def test_alias_chain_walked(self, table, runner):
        # no ID_LIKE: rocky → centos via aliases
        identity = OsIdentity(id="rocky")
        assert _resolver(table, runner, identity).select(identity) == ("centos", "rpm")

    def test_alias_cycle_terminates(self, runner):
        table = build_table(aliases={"a": ["b"], "b": ["a"]})
        identity = OsIdentity(id="a")
        assert _resolver(table, runner, identity).candidates(identity) == ["a", "b"]

    def test_common_id_without_packager(self, runner):
        table = build_table(common_ids=["myos"])
        identity = OsIdentity(id="myos-server", like=("myos",))
        assert _resolver(table, runner, identity).select(identity) == ("myos", None)

    def test_configured_packager(self, runner):
        table = build_table(packager={"kali": "debian"})
        identity = OsIdentity(id="kali")
        assert _resolver(table, runner, identity).select(identity) == ("kali", "debian")


# ── resolve ─────────────────────────────────────────────────────


class TestResolve:
    def test_requires_uname(self, table, runner):
        identity = OsIdentity(id="debian")
        with pytest.raises(PlatformError):
            _resolver(table, runner, identity).resolve()

    def test_records_snapshot(self, table, runner):
        _linux_uname(runner)
        identity = OsIdentity(id="ubuntu", like=("debian",))
        resolver = _resolver(table, runner, identity, uname=UNAME)
        assert resolver.resolve() == ("ubuntu", "debian")

        sysenv = resolver._sysenv
        assert sysenv.get("os") == "Linux"
        assert sysenv.get("kernel") == "6.8.0-45-generic"
        assert sysenv.get("machine") == "x86_64"
        assert sysenv.platform == "ubuntu"
        assert sysenv.packager == "debian"
        assert sysenv.get("detected") == "ubuntu handled by debian"

    def test_derived_distro_summary(self, table, runner):
        _linux_uname(runner)
        identity = OsIdentity(id="rocky", like=("rhel", "centos", "fedora"))
        resolver = _resolver(table, runner, identity, uname=UNAME)
        resolver.resolve()
        assert resolver._sysenv.get("detected") == "rocky -> centos handled by rpm"

    def test_non_linux_has_no_packager(self, table, runner):
        _linux_uname(runner, system="Darwin")
        identity = OsIdentity(id="", has_os_release=False)
        resolver = _resolver(table, runner, identity, uname=UNAME)
        assert resolver.resolve() == ("darwin", None)
        assert resolver._sysenv.packager is None
        assert resolver._sysenv.get("detected") == "darwin (no os-release data)"

    def test_unknown_linux(self, table, runner):
        _linux_uname(runner)
        identity = UNSUPPORTED["gentoo"]
        resolver = _resolver(table, runner, identity, uname=UNAME)
        assert resolver.resolve() == ("gentoo", None)
        assert resolver._sysenv.get("detected") == "gentoo"
