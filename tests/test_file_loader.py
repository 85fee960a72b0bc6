#!/usr/bin/env python3
"""
Test reading and checking ignore files
"""

from gitskip.ignore.file_loader import IgnoreFileLoader


def test_read_valid_file(tmp_path):
    (tmp_path / ".gitignore").write_text("# comment\n/build/\n*.txt\n")
    info = IgnoreFileLoader().read(tmp_path)

    assert info.is_valid
    assert not info.has_warnings
    assert info.path == tmp_path / ".gitignore"
    assert "/build/" in info.text


def test_missing_file(tmp_path):
    info = IgnoreFileLoader().read(tmp_path)

    assert not info.is_valid
    assert info.text is None
    assert "Not exist git ignore file" in info.errors[0].message


def test_empty_file(tmp_path):
    (tmp_path / ".gitignore").write_text("\n   \n")
    info = IgnoreFileLoader().read(tmp_path)

    assert not info.is_valid
    assert "Read empty content" in info.errors[0].message


def test_file_too_large(tmp_path):
    (tmp_path / ".gitignore").write_text("/build/\n" * 100)
    info = IgnoreFileLoader(max_size=64).read(tmp_path)

    assert not info.is_valid
    assert "File too large" in info.errors[0].message


def test_custom_filename(tmp_path):
    (tmp_path / ".searchignore").write_text("*.log\n")
    loader = IgnoreFileLoader(ignore_filename=".searchignore")

    assert loader.ignore_file_path(tmp_path) == tmp_path / ".searchignore"
    assert loader.read(tmp_path).is_valid


def test_warnings_do_not_invalidate(tmp_path):
    (tmp_path / ".gitignore").write_text("*.txt\nbuild\\output\n**\n")
    info = IgnoreFileLoader().read(tmp_path)

    assert info.is_valid
    assert info.has_warnings
    by_line = {w.line: w.message for w in info.warnings}
    assert "backslash" in by_line[2]
    assert "Very broad pattern" in by_line[3]


def test_check_pattern():
    loader = IgnoreFileLoader()

    assert loader.check_pattern("/build/") == []
    assert loader.check_pattern("\\#notes") == []
    assert any("Very broad" in w for w in loader.check_pattern("/*"))
