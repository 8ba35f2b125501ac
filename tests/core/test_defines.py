# SPDX-License-Identifier: MIT
"""Tests for vcxgen.core.defines."""

from vcxgen.core.defines import format_defines, merge_defines, parse_defines


class TestParseDefines:
    def test_string_with_mixed_separators(self):
        assert parse_defines("FOO=1 BAR;BAZ=x,QUX") == {
            "FOO": "1",
            "BAR": "",
            "BAZ": "x",
            "QUX": "",
        }

    def test_list(self):
        assert parse_defines(["A=1", "B = 2", "C"]) == {"A": "1", "B": "2", "C": ""}

    def test_empty(self):
        assert parse_defines("") == {}
        assert parse_defines([]) == {}

    def test_value_with_equals(self):
        assert parse_defines(["PATH=a=b"]) == {"PATH": "a=b"}


class TestMergeDefines:
    def test_last_writer_wins(self):
        assert merge_defines({"A": "1"}, {"A": "2"}) == {"A": "2"}

    def test_first_position_kept(self):
        merged = merge_defines({"A": "1", "B": "1"}, {"C": "1", "A": "2"})
        assert list(merged) == ["A", "B", "C"]
        assert merged["A"] == "2"

    def test_idempotent(self):
        d = {"A": "1", "B": ""}
        assert merge_defines(d, d) == d
        assert merge_defines(d, {}) == d
        assert merge_defines({}, d) == d

    def test_inputs_not_modified(self):
        a = {"A": "1"}
        merge_defines(a, {"A": "2"})
        assert a == {"A": "1"}


class TestFormatDefines:
    def test_bare_and_valued(self):
        assert format_defines({"WIN32": "", "JucePlugin_Build_VST3": "1"}) == (
            "WIN32;JucePlugin_Build_VST3=1"
        )

    def test_separator(self):
        assert format_defines({"A": "", "B": "2"}, " ") == "A B=2"

    def test_empty(self):
        assert format_defines({}) == ""
