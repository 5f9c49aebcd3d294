"""
Command runner — the single place where packaging commands are executed.

Two modes, both blocking:

    capture(cmd)  stdout captured line by line, for queries
    run(cmd)      output goes to the terminal, for installs

Neither raises for command failures.  Launch errors, signal deaths,
non-zero exits and timeouts come back as ``None`` / ``False`` and are
logged with their detail.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess

logger = logging.getLogger(__name__)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


def _describe(cmd: list[str]) -> str:
    return " ".join(cmd)


class CommandRunner:
    """Blocking subprocess execution with uniform failure reporting.

    Args:
        timeout: Seconds before a command is abandoned.  None waits
            forever; a hung packager then hangs the run.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def capture(self, cmd: list[str], *, carp_errors: bool = False) -> list[str] | None:
        """Run a query command and return its stdout lines.

        Args:
            cmd: Command and arguments (no shell).
            carp_errors: Log a non-zero exit at WARNING instead of DEBUG.
                Searches that find nothing often exit non-zero, so this
                is off by default.

        Returns:
            Output lines without line endings, or None if the command
            could not run or exited non-zero.
        """
        logger.debug("capture: %s", _describe(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("command '%s' timed out after %ss", _describe(cmd), self.timeout)
            return None
        except OSError as e:
            logger.warning("failed to run command '%s': %s", _describe(cmd), e)
            return None

        if result.stderr:
            logger.debug("stderr from '%s': %s", _describe(cmd), result.stderr.strip())

        if result.returncode != 0:
            log = logger.warning if carp_errors else logger.debug
            log("exit status %d from command '%s'", result.returncode, _describe(cmd))
            return None

        return result.stdout.splitlines()

    def run(
        self,
        cmd: list[str],
        *,
        env_overrides: dict[str, str] | None = None,
        cwd: str | None = None,
    ) -> bool:
        """Run a command with inherited stdio and report success.

        Args:
            cmd: Command and arguments (no shell).
            env_overrides: Extra environment variables for the child.
            cwd: Working directory for the child.

        Returns:
            True on exit status 0, False otherwise.
        """
        logger.debug("run: %s", _describe(cmd))

        env = None
        if env_overrides:
            env = os.environ.copy()
            env.update(env_overrides)

        try:
            result = subprocess.run(cmd, env=env, cwd=cwd, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logger.warning("child '%s' timed out after %ss", _describe(cmd), self.timeout)
            return False
        except OSError as e:
            logger.warning("failed to execute '%s': %s", _describe(cmd), e)
            return False

        if result.returncode < 0:
            logger.warning(
                "child '%s' died with %s", _describe(cmd), _signal_name(-result.returncode),
            )
            return False
        if result.returncode != 0:
            logger.warning("child '%s' exited with value %d", _describe(cmd), result.returncode)
            return False
        return True
