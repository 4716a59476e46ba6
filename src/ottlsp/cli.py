"""
Command line entry point for ottlsp.

The server always talks LSP over stdin/stdout; the only arguments are
``--version`` and ``--log-level``.
"""
from __future__ import annotations

import argparse
import logging
import sys

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='ottlsp',
        description='Run ott on opened and saved files and report its output as LSP diagnostics.',
    )
    p.add_argument('--version', action='store_true', help='Print the version and exit')
    p.add_argument(
        '--log-level',
        metavar='LEVEL',
        type=str.upper,
        choices=_LOG_LEVELS,
        default='WARNING',
        help='Level of the log written to stderr (default: WARNING)',
    )
    return p


def ottlsp(argv: list[str] | None = None) -> None:
    """Entry point for the ``ottlsp`` command."""
    args = _build_parser().parse_args(argv)

    if args.version:
        from ottlsp import __version__
        print(f'ottlsp {__version__}')
        sys.exit(0)

    # stdout is the LSP channel
    logging.basicConfig(
        level=args.log_level,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    from ottlsp.server import server
    server.start_io()


if __name__ == '__main__':
    ottlsp()
