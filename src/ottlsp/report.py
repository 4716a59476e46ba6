"""
Parser for the free-text report ``ott`` writes to stdout.

The report is a sequence of blocks, one per problem.  Each block starts with
a header line beginning with ``File`` that names the location::

    File foo.ott on line 12, column 4 - 9:
    Error: no parses of "x y"
    (char 5) ...

The remaining lines carry the severity tag, free-text explanation and,
occasionally, a ``(char N)`` column marker.

This module only turns text into plain data (:class:`PositionSpec` and
:class:`AccumulatedMessage`).  Numbers are left exactly as ``ott`` printed
them; converting to 0-based editor positions is done by
:mod:`ottlsp.handlers.diagnostics`.
"""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Iterator

HEADER_MARKER = 'File'
UNKNOWN_MESSAGE = 'unknown ott diagnostic message'

# Header location patterns, tried in this order.  The single-line form
# requires a digit straight after ``- `` so it never eats the cross-line form.
_RANGE_SINGLE_LINE_RE = re.compile(r'line (\d+), column (\d+) - (\d+)')
_RANGE_CROSS_LINE_RE = re.compile(r'line (\d+), column (\d+) - line (\d+), column (\d+)')
_LINE_ONLY_RE = re.compile(r'line (\d+)')

# Low-confidence column marker found in body lines: ``(char 5)`` or ``char 5:``
_CHAR_MARKER_RE = re.compile(r'\(char (\d+)\)|\bchar (\d+):')

_ERROR_PREFIX = 'Error:'
_WARNING_PREFIX = 'Warning:'
_IGNORED_PREFIX = 'Definition rule'


class Severity(enum.Enum):
    ERROR = 'error'
    WARNING = 'warning'
    UNSET = 'unset'


@dataclass
class DiagnosticBlock:
    header: str
    body: list[str] = field(default_factory=list)


@dataclass
class PositionSpec:
    start_line: int | None = None    # 1-based
    end_line: int | None = None      # 1-based
    start_col: int | None = None
    end_col: int | None = None


@dataclass
class AccumulatedMessage:
    severity: Severity = Severity.UNSET
    fragments: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return ' '.join(self.fragments) if self.fragments else UNKNOWN_MESSAGE


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

def _lines(text: str) -> Iterator[str]:
    # Only "\n" and "\r\n" end a line, unlike str.splitlines().
    if text.endswith('\n'):
        text = text[:-1]
    if not text:
        return
    for line in text.split('\n'):
        yield line[:-1] if line.endswith('\r') else line


def iter_blocks(stdout: str) -> Iterator[DiagnosticBlock]:
    """Yield one :class:`DiagnosticBlock` per ``File`` header in *stdout*.

    A block ends at the next header or at the end of the stream; blank lines
    inside a block are kept because ``ott`` uses them within long messages.
    Anything printed before the first header is ignored.
    """
    current: DiagnosticBlock | None = None
    for line in _lines(stdout):
        if line.startswith(HEADER_MARKER):
            if current is not None:
                yield current
            current = DiagnosticBlock(header=line)
        elif current is not None:
            current.body.append(line)
    if current is not None:
        yield current


# ---------------------------------------------------------------------------
# Range extraction
# ---------------------------------------------------------------------------

def _char_marker(line: str) -> int | None:
    m = _CHAR_MARKER_RE.search(line)
    if m is None:
        return None
    return int(m.group(1) or m.group(2))


def extract_position(block: DiagnosticBlock) -> PositionSpec:
    """Recover the location of *block* from its header and body lines.

    The first matching header pattern wins.  A ``(char N)`` marker on an
    untagged body line only fills in the start column when the header gave
    none.
    """
    pos = PositionSpec()
    header = block.header

    m = _RANGE_SINGLE_LINE_RE.search(header)
    if m:
        pos.start_line, pos.start_col, pos.end_col = (int(g) for g in m.groups())
    else:
        m = _RANGE_CROSS_LINE_RE.search(header)
        if m:
            pos.start_line, pos.start_col, pos.end_line, pos.end_col = (int(g) for g in m.groups())
        else:
            m = _LINE_ONLY_RE.search(header)
            if m:
                pos.start_line = int(m.group(1))

    if pos.start_col is None:
        for line in block.body:
            if line.startswith((_ERROR_PREFIX, _WARNING_PREFIX)):
                continue
            col = _char_marker(line)
            if col is not None:
                pos.start_col = col
                break

    return pos


# ---------------------------------------------------------------------------
# Message accumulation
# ---------------------------------------------------------------------------

def accumulate_message(block: DiagnosticBlock) -> AccumulatedMessage:
    """Fold the body lines of *block* into one severity and message."""
    acc = AccumulatedMessage()
    for line in block.body:
        if line.startswith(_ERROR_PREFIX):
            acc.severity = Severity.ERROR
            rest = line[len(_ERROR_PREFIX):].strip()
        elif line.startswith(_WARNING_PREFIX):
            if acc.severity is not Severity.ERROR:
                acc.severity = Severity.WARNING
            rest = line[len(_WARNING_PREFIX):].strip()
        elif _char_marker(line) is not None or line.startswith(_IGNORED_PREFIX):
            continue
        else:
            rest = line.strip()
        if rest:
            acc.fragments.append(rest)
    return acc


def parse_report(stdout: str) -> Iterator[tuple[PositionSpec, AccumulatedMessage]]:
    """Yield ``(position, message)`` for every block in an ``ott`` report."""
    for block in iter_blocks(stdout):
        yield extract_position(block), accumulate_message(block)
