"""
ottlsp Language Server.

Registers LSP capabilities and runs ``ott`` whenever a document is opened or
saved, publishing the translated report as diagnostics.

Checks run synchronously on the pygls event loop: one notification is
handled to completion before the next is read, so repeated saves of the same
file are checked strictly in order.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Sequence

from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path
from lsprotocol import types as lsp

logger = logging.getLogger(__name__)

from ottlsp import __version__
from ottlsp.checker import CheckerReport, run_checker
from ottlsp.config import (
    ConfigStore,
    OttConfig,
    config_from_settings,
    log_level_from_settings,
    read_project_config,
)
from ottlsp.handlers import get_diagnostics, missing_file_diagnostic

# ---------------------------------------------------------------------------
# Server instance + per-session state
# ---------------------------------------------------------------------------

server = LanguageServer(
    'ottlsp', __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)

# Extra ott flags; replaced wholesale on configuration changes.
_config = ConfigStore()


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

Runner = Callable[[str, Sequence[str]], CheckerReport]


def check_ott_file(path: str, config: OttConfig,
                   run: Runner = run_checker) -> list[lsp.Diagnostic]:
    """Check *path* with ``ott`` and return the diagnostics to publish.

    If *path* is not a regular file ``ott`` is not run at all and a single
    informational diagnostic is returned instead.  Errors starting ``ott``
    propagate to the caller.
    """
    if not Path(path).is_file():
        logger.info('check_ott_file: %s is not a file, skipping ott', path)
        return [missing_file_diagnostic(path)]

    report = run(path, config.ott_flags)
    diags = get_diagnostics(report)
    logger.debug('check_ott_file: %s → %d diagnostics (exit %d)',
                 path, len(diags), report.returncode)
    return diags


def _uri_to_path(uri: str) -> str:
    return to_fs_path(uri) or uri


def _check_and_publish(uri: str) -> None:
    diags = check_ott_file(_uri_to_path(uri), _config.get())
    server.text_document_publish_diagnostics(
        lsp.PublishDiagnosticsParams(uri=uri, diagnostics=diags, version=None)
    )


def _apply_log_level(raw: str | None) -> None:
    """Set the root logger level from a string like 'debug', 'warning', etc."""
    if not raw:
        return
    level = getattr(logging, raw.upper(), None)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@server.feature(lsp.INITIALIZE)
def on_initialize(params: lsp.InitializeParams):
    workspace_root = None
    if params.root_uri:
        workspace_root = to_fs_path(params.root_uri)
    elif params.root_path:
        workspace_root = params.root_path

    config = read_project_config(workspace_root)

    opts = getattr(params, 'initialization_options', None)
    # Flags in initializationOptions win over the project file
    opts_config = config_from_settings(opts) if opts is not None else None
    if opts_config is not None and opts_config.ott_flags:
        config = opts_config
    if config is not None:
        _config.replace(config)

    _apply_log_level(log_level_from_settings(opts))


@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(params: lsp.DidChangeConfigurationParams):
    """Replace the ott flags with those in the new settings."""
    settings = getattr(params, 'settings', None)
    config = config_from_settings(settings)
    if config is None:
        logger.warning('did_change_configuration: ignoring unusable settings %r', settings)
    else:
        _config.replace(config)
    _apply_log_level(log_level_from_settings(settings))


# ---------------------------------------------------------------------------
# Text document synchronisation
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams):
    _check_and_publish(params.text_document.uri)


@server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
def did_save(params: lsp.DidSaveTextDocumentParams):
    _check_and_publish(params.text_document.uri)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    """Nothing is cached per document, so closing needs no cleanup."""
    pass


# ---------------------------------------------------------------------------
# Document symbols
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    return []
