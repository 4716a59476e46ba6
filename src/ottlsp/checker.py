"""
Run the ``ott`` executable over a file and capture its report.

``ott`` is always run with parse errors signalled and colour disabled so
that its stdout is the plain-text report understood by :mod:`ottlsp.report`.
Any extra flags configured by the client are inserted before the file path.
"""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)

OTT_EXECUTABLE = 'ott'
BASE_FLAGS = ('-signal_parse_errors', 'true', '-colour', 'false')


class CheckerError(RuntimeError):
    """Raised when the ``ott`` process could not be started at all."""


@dataclass(frozen=True)
class CheckerReport:
    stdout: str
    returncode: int

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


def build_command(path: str, extra_flags: Sequence[str] = (),
                  executable: str = OTT_EXECUTABLE) -> list[str]:
    """Return the argv used to check *path*."""
    return [executable, *BASE_FLAGS, *extra_flags, path]


def run_checker(path: str, extra_flags: Sequence[str] = (),
                executable: str = OTT_EXECUTABLE) -> CheckerReport:
    """Run ``ott`` on *path* and return its stdout and exit status.

    The call blocks until ``ott`` exits; there is no timeout.  stderr is
    captured so it does not leak onto the LSP stream, but only logged.

    Raises :class:`CheckerError` if the executable cannot be spawned.
    """
    cmd = build_command(path, extra_flags, executable)
    logger.debug('run_checker: %s', ' '.join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as e:
        logger.error('run_checker: could not start %r: %s', executable, e)
        raise CheckerError(f'could not run {executable!r}: {e}') from e

    stdout = result.stdout.decode('utf-8', errors='replace')
    if result.stderr:
        logger.debug('run_checker: stderr from %s:\n%s', executable,
                     result.stderr.decode('utf-8', errors='replace'))
    logger.debug('run_checker: %s exited with %d', executable, result.returncode)
    return CheckerReport(stdout=stdout, returncode=result.returncode)
