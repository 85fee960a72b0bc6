#!/usr/bin/env python3
"""
Test configuration and shell dialects
"""

import pytest

from gitskip.config import IgnoreConfig
from gitskip.shell import ShellKind


def test_defaults():
    config = IgnoreConfig()
    assert config.use_ignore_file
    assert not config.omit_exemptions
    assert config.skip_dot_folders
    assert config.shell is ShellKind.POSIX_LIKE
    assert config.export_threshold == 200
    assert config.max_command_length == 131072
    assert not config.uses_backslash


def test_max_command_length_follows_shell():
    config = IgnoreConfig(shell=ShellKind.WINDOWS_CMD)
    assert config.max_command_length == 8163
    assert config.uses_backslash

    changed = config.with_changes(shell=ShellKind.POSIX_LIKE)
    assert changed.max_command_length == 131072

    kept = IgnoreConfig(max_command_length=500).with_changes(omit_exemptions=True)
    assert kept.max_command_length == 500
    assert kept.omit_exemptions


def test_shell_given_as_string():
    assert IgnoreConfig(shell="cmd").shell is ShellKind.WINDOWS_CMD


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        IgnoreConfig(export_threshold=0)
    with pytest.raises(ValueError):
        IgnoreConfig(max_command_length=-1)
    with pytest.raises(ValueError):
        ShellKind.parse("powershell")


def test_configs_compare_by_value():
    assert IgnoreConfig() == IgnoreConfig()
    assert IgnoreConfig() != IgnoreConfig(omit_exemptions=True)


def test_from_env(monkeypatch):
    monkeypatch.setenv("GITSKIP_OMIT_EXEMPTIONS", "yes")
    monkeypatch.setenv("GITSKIP_SKIP_DOT_FOLDERS", "0")
    monkeypatch.setenv("GITSKIP_SHELL", "windows")
    monkeypatch.setenv("GITSKIP_EXPORT_THRESHOLD", "120")
    monkeypatch.setenv("GITSKIP_MAX_COMMAND_LENGTH", "4000")

    config = IgnoreConfig.from_env()
    assert config.omit_exemptions
    assert not config.skip_dot_folders
    assert config.shell is ShellKind.WINDOWS_CMD
    assert config.export_threshold == 120
    assert config.max_command_length == 4000


def test_from_env_overrides_win(monkeypatch):
    monkeypatch.setenv("GITSKIP_SHELL", "cmd")
    monkeypatch.setenv("GITSKIP_USE_IGNORE_FILE", "maybe")

    config = IgnoreConfig.from_env(shell=ShellKind.MINGW_BASH)
    assert config.shell is ShellKind.MINGW_BASH
    # Unrecognized booleans fall back to the default
    assert config.use_ignore_file


@pytest.mark.parametrize("name,kind", [
    ("posix", ShellKind.POSIX_LIKE),
    ("bash", ShellKind.POSIX_LIKE),
    ("WSL", ShellKind.POSIX_LIKE),
    ("cmd", ShellKind.WINDOWS_CMD),
    ("windows", ShellKind.WINDOWS_CMD),
    ("mingw", ShellKind.MINGW_BASH),
    (" gitbash ", ShellKind.MINGW_BASH),
])
def test_shell_parse(name, kind):
    assert ShellKind.parse(name) is kind


def test_shell_properties():
    assert ShellKind.WINDOWS_CMD.script_extension == ".cmd"
    assert ShellKind.MINGW_BASH.script_extension == ".sh"
    assert ShellKind.MINGW_BASH.max_command_length == 131072
    assert ShellKind.WINDOWS_CMD.path_separator() == "\\\\"
    assert ShellKind.MINGW_BASH.path_separator() == "\\\\\\\\"
    assert ShellKind.MINGW_BASH.path_separator(forward_slash_supported=True) == "/"
    assert ShellKind.POSIX_LIKE.path_separator() == "/"
