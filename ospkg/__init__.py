"""ospkg — provision Perl modules through the host's native package manager."""

__version__ = "0.1.0"
