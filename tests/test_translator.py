#!/usr/bin/env python3
"""
Test translation of single ignore lines into skip-path regex fragments
"""

import re

import pytest

from gitskip.ignore.translator import (
    RULES,
    DropReason,
    to_shell_separators,
    translate,
    translate_for_shell,
)
from gitskip.shell import ShellKind


@pytest.mark.parametrize("line,expected", [
    ("[Bb]in", "[Bb]in"),
    ("[Bb]in/", "[Bb]in/"),
    ("/build/", "/build/"),
    ("*.txt", "\\.txt$"),
    ("*.mid.*/", "[^/]*\\.mid\\.[^/]*/"),
    ("/src/**/*.doc", "/src/.*/[^/]*\\.doc"),
])
def test_documented_translations(line, expected):
    """Known lines translate to exact fragments"""
    result = translate(line)
    assert not result.dropped
    assert result.fragment == expected


def test_bare_words_are_anchored():
    """A single segment without wildcards matches as a whole name"""
    assert translate("build").fragment == "/build/"
    assert translate("node_modules").fragment == "/node_modules/"
    # A dotted name looks like a file, no folder marker
    assert translate("Settings.Cache").fragment == "/Settings\\.Cache"


def test_trailing_contents_become_folder():
    assert translate("logs/**").fragment == "logs/"
    assert translate("logs/*").fragment == "logs/"
    assert translate("/out/**").fragment == "/out/"


def test_leading_double_star():
    assert translate("**/node_modules").fragment == "/node_modules"
    assert translate("**/obj/").fragment == "/obj/"


def test_wildcards():
    assert translate("test-*-bin-*.tgz").fragment == "test-[^/]*-bin-[^/]*\\.tgz"
    # Every question mark is converted, not just the first
    assert translate("a?c?e.log").fragment == "a[^/]?c[^/]?e\\.log"
    assert translate("docs/**/*.md").fragment == "docs/.*/[^/]*\\.md"


def test_extension_with_classes():
    assert translate("*.[Kk][Ee][Yy]").fragment == "\\.[Kk][Ee][Yy]$"
    assert translate("*.py[cod]").fragment == "\\.py[cod]$"


def test_case_class_canonicalized():
    assert translate("[bB]in").fragment == "[Bb]in"
    assert translate("[BbB]in").fragment == "[Bb]in"


def test_negated_class():
    assert translate("file[!0-9].txt").fragment == "file[^0-9]\\.txt"


def test_unclosed_class_is_literal():
    assert translate("a[bc").fragment == "a\\[bc"


def test_named_classes_expanded():
    assert translate("*.log[[:digit:]]").fragment == "\\.log[0-9]$"
    assert translate("file[![:alpha:]].txt").fragment == "file[^a-zA-Z]\\.txt"
    assert translate("v[[:digit:]_]/").fragment == "v[0-9_]/"


def test_closing_bracket_first_in_class():
    assert translate("[]a]x").fragment == "[\\]a]x"


def test_escaped_trailing_space_kept():
    assert translate("foo\\ ").fragment == "foo "
    assert translate("foo\\  ").fragment == "foo "
    assert translate("foo.txt  ").fragment == "/foo\\.txt"


def test_literal_metacharacters_escaped():
    assert translate("/a+b(c)/").fragment == "/a\\+b\\(c\\)/"
    # A mid-line exclamation mark is not an exemption
    assert translate("a!b").fragment == "/a!b/"


def test_escaped_glob_characters():
    assert translate("\\#notes").fragment == "#notes"
    assert translate("foo\\*bar").fragment == "foo\\*bar"


def test_swap_files():
    assert translate("*~").fragment == "~$"
    assert translate("*~$").fragment == "~$"


@pytest.mark.parametrize("line,reason", [
    ("", DropReason.COMMENT),
    ("   ", DropReason.COMMENT),
    ("# build output", DropReason.COMMENT),
    ("!out/my.txt", DropReason.EXEMPTION),
    (".vs/", DropReason.REDUNDANT_DOT),
    (".*", DropReason.REDUNDANT_DOT),
    ("$RECYCLE.BIN/", DropReason.REDUNDANT_DOT),
    ("/", DropReason.TOO_SHORT),
])
def test_dropped_lines(line, reason):
    result = translate(line)
    assert result.dropped
    assert result.fragment is None
    assert result.reason is reason


def test_dot_lines_kept_without_dot_folder_skip():
    result = translate(".vs/", skip_dot_folders=False)
    assert result.fragment == "\\.vs/"
    assert translate(".env", skip_dot_folders=False).fragment == "/\\.env"


def test_surrounding_whitespace_ignored():
    assert translate("  /build/  ").fragment == "/build/"


def test_fragments_are_valid_regexes():
    lines = ["[Bb]in", "*.txt", "*.mid.*/", "/src/**/*.doc", "test-*-bin-*.tgz",
             "a?c", "*~", "Settings.Cache", "*.[Kk][Ee][Yy]"]
    for line in lines:
        re.compile(translate(line).fragment)


def test_fragment_matches_paths():
    assert re.search(translate("*.txt").fragment, "/repo/docs/readme.txt")
    assert not re.search(translate("*.txt").fragment, "/repo/docs/readme.txt.bak")
    assert re.search(translate("build").fragment, "/repo/build/out.o")
    assert not re.search(translate("build").fragment, "/repo/rebuild/out.o")


def test_rules_are_ordered():
    names = [rule.name for rule in RULES]
    assert names[0] == "blank_or_comment"
    assert names.index("exemption") < names.index("redundant_dot")
    assert names.index("classify") < names.index("wildcards") < names.index("anchors")
    assert names[-1] == "minimum_length"


def test_windows_cmd_separators():
    result = translate_for_shell("/build/", ShellKind.WINDOWS_CMD)
    assert result.fragment == "\\\\build\\\\"


def test_mingw_separators():
    result = translate_for_shell("/build/", ShellKind.MINGW_BASH)
    assert result.fragment == "\\\\\\\\build\\\\\\\\"


def test_forward_slash_supported_keeps_slashes():
    result = translate_for_shell("/build/", ShellKind.WINDOWS_CMD, forward_slash_supported=True)
    assert result.fragment == "/build/"
    assert to_shell_separators("a/b", ShellKind.POSIX_LIKE) == "a/b"


def test_dropped_line_stays_dropped_for_shell():
    result = translate_for_shell("# comment", ShellKind.WINDOWS_CMD)
    assert result.dropped
    assert result.reason is DropReason.COMMENT
