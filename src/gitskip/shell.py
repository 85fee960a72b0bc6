"""
Shell dialects a generated search command must conform to
"""

from enum import Enum

from .constants import POSIX_MAX_COMMAND_LENGTH, WINDOWS_CMD_MAX_COMMAND_LENGTH


class ShellKind(Enum):
    """Quoting, path-separator and command-length dialect of a terminal"""
    POSIX_LIKE = "posix"
    WINDOWS_CMD = "cmd"
    MINGW_BASH = "mingw"

    @classmethod
    def parse(cls, value: str) -> "ShellKind":
        """Accept enum values and a few common shell names"""
        aliases = {
            'bash': cls.POSIX_LIKE,
            'sh': cls.POSIX_LIKE,
            'zsh': cls.POSIX_LIKE,
            'wsl': cls.POSIX_LIKE,
            'windows': cls.WINDOWS_CMD,
            'gitbash': cls.MINGW_BASH,
        }
        key = value.strip().lower()
        if key in aliases:
            return aliases[key]
        return cls(key)

    @property
    def is_cmd(self) -> bool:
        return self is ShellKind.WINDOWS_CMD

    @property
    def max_command_length(self) -> int:
        if self is ShellKind.WINDOWS_CMD:
            return WINDOWS_CMD_MAX_COMMAND_LENGTH
        return POSIX_MAX_COMMAND_LENGTH

    @property
    def script_extension(self) -> str:
        return ".cmd" if self.is_cmd else ".sh"

    def path_separator(self, forward_slash_supported: bool = False) -> str:
        """
        Regex text standing for one path separator on this shell.

        cmd needs an escaped backslash; MinGW bash unescapes once more before
        the search binary sees it, so it needs two escaped backslashes.
        """
        if forward_slash_supported:
            return "/"
        if self is ShellKind.WINDOWS_CMD:
            return "\\\\"
        if self is ShellKind.MINGW_BASH:
            return "\\\\\\\\"
        return "/"
