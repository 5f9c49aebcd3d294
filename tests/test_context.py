"""
Tests for the environment snapshot.
"""

from __future__ import annotations

from ospkg.core.context import SysEnv


class TestSysEnv:
    def test_none_values_dropped(self):
        sysenv = SysEnv({"apk": "/sbin/apk", "dnf": None})
        assert "apk" in sysenv
        assert "dnf" not in sysenv

    def test_set_none_removes(self):
        sysenv = SysEnv({"cpan": "/usr/bin/cpan"})
        sysenv.set("cpan", None)
        assert sysenv.get("cpan") is None
        assert "cpan" not in sysenv

    def test_derived_accessors(self):
        sysenv = SysEnv({"platform": "centos", "packager": "rpm", "root": True})
        assert sysenv.platform == "centos"
        assert sysenv.packager == "rpm"
        assert sysenv.is_root is True
        assert SysEnv().is_root is False

    def test_clear_path_cache(self):
        sysenv = SysEnv({"path_list": ["/usr/bin"], "path_flag": {"/usr/bin"}, "perl": "/usr/bin/perl"})
        sysenv.clear_path_cache()
        assert "path_list" not in sysenv
        assert "path_flag" not in sysenv
        assert sysenv.get("perl") == "/usr/bin/perl"

    def test_to_dict_sorts_sets(self):
        sysenv = SysEnv({"path_flag": {"/usr/bin", "/bin"}, "os": "Linux"})
        assert sysenv.to_dict() == {"os": "Linux", "path_flag": ["/bin", "/usr/bin"]}
