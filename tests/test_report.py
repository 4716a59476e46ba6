"""Tests for ottlsp.report — tokenizer, range extractor and message accumulator."""
from __future__ import annotations

import pytest

from ottlsp.report import (
    DiagnosticBlock,
    PositionSpec,
    Severity,
    UNKNOWN_MESSAGE,
    accumulate_message,
    extract_position,
    iter_blocks,
    parse_report,
)

TWO_BLOCK_REPORT = """\
ott version 0.34
File test.ott on line 3, column 2 - 7:
Error: no parses of "foo"

with extra detail
File test.ott on line 9:
Warning: unused metavariable x
"""


class TestIterBlocks:
    def test_no_header_yields_nothing(self):
        assert list(iter_blocks('all fine\nnothing to see\n')) == []

    def test_empty_input(self):
        assert list(iter_blocks('')) == []

    def test_blocks_split_on_header(self):
        blocks = list(iter_blocks(TWO_BLOCK_REPORT))
        assert len(blocks) == 2
        assert blocks[0].header == 'File test.ott on line 3, column 2 - 7:'
        assert blocks[1].header == 'File test.ott on line 9:'

    def test_lines_before_first_header_ignored(self):
        blocks = list(iter_blocks(TWO_BLOCK_REPORT))
        assert all('ott version' not in line for b in blocks for line in b.body)

    def test_blank_lines_stay_inside_block(self):
        blocks = list(iter_blocks(TWO_BLOCK_REPORT))
        assert blocks[0].body == ['Error: no parses of "foo"', '', 'with extra detail']

    def test_last_block_runs_to_end_of_stream(self):
        blocks = list(iter_blocks('File a\nx\ny'))
        assert blocks == [DiagnosticBlock(header='File a', body=['x', 'y'])]

    def test_header_must_start_line(self):
        blocks = list(iter_blocks('File a\n  File b\n'))
        assert len(blocks) == 1
        assert blocks[0].body == ['  File b']

    def test_form_feed_does_not_start_a_block(self):
        blocks = list(iter_blocks('File t on line 1:\nError: a\x0cFile junk\n'))
        assert len(blocks) == 1
        assert blocks[0].body == ['Error: a\x0cFile junk']

    @pytest.mark.parametrize('sep', ['\x1c', '\u2028', '\x0b'])
    def test_only_newline_separates_lines(self, sep):
        blocks = list(iter_blocks(f'File a\nx{sep}File b'))
        assert [b.header for b in blocks] == ['File a']

    def test_crlf_line_endings(self):
        blocks = list(iter_blocks('File a\r\nError: x\r\nFile b\r\n'))
        assert blocks == [
            DiagnosticBlock(header='File a', body=['Error: x']),
            DiagnosticBlock(header='File b', body=[]),
        ]

    def test_trailing_newline_adds_no_line(self):
        assert list(iter_blocks('File a\nx\n')) == [DiagnosticBlock(header='File a', body=['x'])]

    def test_is_lazy(self):
        gen = iter_blocks('File a\nFile b\n')
        assert next(gen).header == 'File a'
        assert next(gen).header == 'File b'


class TestExtractPosition:
    def _pos(self, header: str, *body: str) -> PositionSpec:
        return extract_position(DiagnosticBlock(header=header, body=list(body)))

    def test_single_line_range(self):
        pos = self._pos('File t.ott on line 4, column 10 - 15:')
        assert pos == PositionSpec(start_line=4, end_line=None, start_col=10, end_col=15)

    def test_cross_line_range(self):
        pos = self._pos('File t.ott on line 4, column 10 - line 6, column 3:')
        assert pos == PositionSpec(start_line=4, end_line=6, start_col=10, end_col=3)

    def test_bare_line(self):
        pos = self._pos('File t.ott on line 12:')
        assert pos == PositionSpec(start_line=12)

    def test_no_match(self):
        assert self._pos('File t.ott:') == PositionSpec()

    def test_char_marker_fills_missing_column(self):
        pos = self._pos('File t.ott on line 2:', 'some text', '(char 5)', '(char 9)')
        assert pos.start_line == 2
        assert pos.start_col == 5
        assert pos.end_col is None

    def test_colon_char_marker(self):
        pos = self._pos('File t.ott on line 2:', 'at char 7: unexpected token')
        assert pos.start_col == 7

    def test_char_marker_never_overrides_header_column(self):
        pos = self._pos('File t.ott on line 2, column 1 - 3:', '(char 5)')
        assert pos.start_col == 1
        assert pos.end_col == 3

    def test_char_marker_on_tagged_line_ignored(self):
        pos = self._pos('File t.ott on line 2:', 'Error: bad (char 5)')
        assert pos.start_col is None

    def test_values_not_shifted(self):
        pos = self._pos('File t.ott on line 1, column 0 - 1:')
        assert (pos.start_line, pos.start_col, pos.end_col) == (1, 0, 1)


class TestAccumulateMessage:
    def _msg(self, *body: str):
        return accumulate_message(DiagnosticBlock(header='File t.ott', body=list(body)))

    def test_error_then_continuation(self):
        msg = self._msg('Error: foo', 'bar')
        assert msg.severity is Severity.ERROR
        assert msg.text == 'foo bar'

    def test_warning(self):
        msg = self._msg('Warning:   unused  ')
        assert msg.severity is Severity.WARNING
        assert msg.fragments == ['unused']

    def test_empty_tag_contributes_no_fragment(self):
        msg = self._msg('Error:', '  explanation  ')
        assert msg.severity is Severity.ERROR
        assert msg.fragments == ['explanation']

    def test_error_never_downgraded(self):
        msg = self._msg('Error: a', 'Warning: b')
        assert msg.severity is Severity.ERROR
        assert msg.text == 'a b'

    def test_warning_upgraded_to_error(self):
        msg = self._msg('Warning: a', 'Error: b')
        assert msg.severity is Severity.ERROR

    def test_untagged_block_is_unset(self):
        assert self._msg('just text').severity is Severity.UNSET

    def test_definition_rule_skipped(self):
        msg = self._msg('Definition rule X')
        assert msg.fragments == []
        assert msg.text == UNKNOWN_MESSAGE

    def test_char_marker_line_skipped(self):
        msg = self._msg('Error: bad token', '(char 12)')
        assert msg.text == 'bad token'

    def test_blank_lines_skipped(self):
        assert self._msg('one', '', '   ', 'two').text == 'one two'

    def test_no_body_gives_sentinel(self):
        assert self._msg().text == 'unknown ott diagnostic message'


class TestParseReport:
    def test_pairs_per_block(self):
        results = list(parse_report(TWO_BLOCK_REPORT))
        assert len(results) == 2
        pos, msg = results[0]
        assert pos.start_line == 3
        assert msg.text == 'no parses of "foo" with extra detail'
        pos, msg = results[1]
        assert pos == PositionSpec(start_line=9)
        assert msg.severity is Severity.WARNING
