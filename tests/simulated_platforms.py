"""
Test fixtures — simulated os-release identities.

Each entry is what the os-release probe would report on that distro
(ID, ID_LIKE), paired with the platform id and driver id the resolver
must pick.
"""

from __future__ import annotations

from ospkg.core.services.platform_resolver import OsIdentity


def _identity(distro_id: str, like: str = "", name: str = "") -> OsIdentity:
    return OsIdentity(id=distro_id, like=tuple(like.split()), name=name or distro_id)


# name → (identity, expected platform, expected driver)
PLATFORMS: dict[str, tuple[OsIdentity, str, str | None]] = {
    "debian-12": (_identity("debian", name="Debian GNU/Linux 12 (bookworm)"), "debian", "debian"),
    "ubuntu-24.04": (_identity("ubuntu", "debian", "Ubuntu 24.04 LTS"), "ubuntu", "debian"),
    "linuxmint-21": (_identity("linuxmint", "ubuntu debian"), "ubuntu", "debian"),
    "pop-22.04": (_identity("pop", "ubuntu debian"), "ubuntu", "debian"),
    "fedora-40": (_identity("fedora", name="Fedora Linux 40"), "fedora", "rpm"),
    "rocky-9": (_identity("rocky", "rhel centos fedora", "Rocky Linux 9.4"), "centos", "rpm"),
    "almalinux-9": (_identity("almalinux", "rhel centos fedora"), "centos", "rpm"),
    "rhel-9": (_identity("rhel", "fedora"), "centos", "rpm"),
    "arch": (_identity("arch", name="Arch Linux"), "arch", "arch"),
    "manjaro": (_identity("manjaro", "arch"), "arch", "arch"),
    "endeavouros": (_identity("endeavouros", "arch"), "arch", "arch"),
    "alpine-3.20": (_identity("alpine", name="Alpine Linux v3.20"), "alpine", "alpine"),
    "opensuse-leap-15": (_identity("opensuse-leap", "suse opensuse"), "opensuse", "suse"),
    "opensuse-tumbleweed": (_identity("opensuse-tumbleweed", "opensuse suse"), "opensuse", "suse"),
    "sles-15": (_identity("sles"), "suse", "suse"),
}

# Identities with no driver at all
UNSUPPORTED: dict[str, OsIdentity] = {
    "gentoo": _identity("gentoo"),
    "void": _identity("void"),
    "nixos": _identity("nixos"),
    "freebsd": OsIdentity(id="freebsd", has_os_release=False),
}
