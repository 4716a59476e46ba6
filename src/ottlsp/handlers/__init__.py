"""Builders that turn an ott report into LSP diagnostics."""
from .diagnostics import get_diagnostics, missing_file_diagnostic

__all__ = ['get_diagnostics', 'missing_file_diagnostic']
