"""Convert a parsed ``ott`` report into LSP Diagnostic objects."""
from __future__ import annotations

from lsprotocol import types as lsp

from ottlsp.checker import CheckerReport
from ottlsp.report import AccumulatedMessage, PositionSpec, Severity, parse_report

SOURCE = 'ott'
PROCESSING_FAILED_MESSAGE = 'ott processing failed'

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
}


def _origin_range() -> lsp.Range:
    return lsp.Range(start=lsp.Position(line=0, character=0),
                     end=lsp.Position(line=0, character=0))


def make_range(pos: PositionSpec, message: str) -> lsp.Range:
    """Build the 0-based, end-exclusive range for a block.

    ``ott`` lines are 1-based; a missing line points at the top of the file.
    Columns are used as printed.  When only the start column is known the
    range is stretched by the length of *message* so that something visible
    is highlighted.
    """
    start_line = max(0, pos.start_line - 1) if pos.start_line is not None else 0
    end_line = max(0, pos.end_line - 1) if pos.end_line is not None else start_line

    if pos.start_col is not None and pos.end_col is not None:
        start_col, end_col = pos.start_col, pos.end_col
    elif pos.start_col is not None:
        start_col = pos.start_col
        end_col = start_col + len(message)
    else:
        start_col = end_col = 0

    return lsp.Range(
        start=lsp.Position(line=start_line, character=max(0, start_col)),
        end=lsp.Position(line=end_line, character=max(0, end_col)),
    )


def block_diagnostic(pos: PositionSpec, msg: AccumulatedMessage,
                     failed: bool = False) -> lsp.Diagnostic:
    """Return the diagnostic for one report block.

    An untagged block is an error when the whole run failed and carries no
    severity otherwise.
    """
    text = msg.text
    severity = _SEVERITY_MAP.get(msg.severity)
    if severity is None and failed:
        severity = lsp.DiagnosticSeverity.Error
    return lsp.Diagnostic(
        range=make_range(pos, text),
        message=text,
        severity=severity,
        source=SOURCE,
    )


def get_diagnostics(report: CheckerReport) -> list[lsp.Diagnostic]:
    """Return LSP ``Diagnostic`` objects for every block in *report*.

    A failed run with no recognisable block still yields one error so the
    failure is never silent.
    """
    failed = not report.succeeded
    diags = [block_diagnostic(pos, msg, failed) for pos, msg in parse_report(report.stdout)]
    if not diags and failed:
        diags.append(
            lsp.Diagnostic(
                range=_origin_range(),
                message=PROCESSING_FAILED_MESSAGE,
                severity=lsp.DiagnosticSeverity.Error,
                source=SOURCE,
            )
        )
    return diags


def missing_file_diagnostic(path: str) -> lsp.Diagnostic:
    """Diagnostic published instead of running ``ott`` when *path* is not a file."""
    return lsp.Diagnostic(
        range=_origin_range(),
        message=f'file path {path} is not a file',
        severity=lsp.DiagnosticSeverity.Information,
        source=SOURCE,
    )
