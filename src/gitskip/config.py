"""
Configuration for compiling a project's ignore file.

Values come from keyword arguments, with GITSKIP_* environment overrides
available through IgnoreConfig.from_env().
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from .constants import DEFAULT_EXPORT_THRESHOLD
from .shell import ShellKind
from .utils import get_logger

logger = get_logger(__name__)

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Ignoring invalid boolean {name}={raw!r}, using {default}")
    return default


@dataclass(frozen=True)
class IgnoreConfig:
    """Settings that shape one compiled ignore profile

    Any change produces a different config, so the registry compiles a new
    profile instead of mutating the old one.

    Attributes:
        use_ignore_file: Compile the ignore file at all. When False the
            profile is never valid and callers use their default exclusions.
        omit_exemptions: Drop ``!pattern`` lines instead of refusing the file.
        skip_dot_folders: Skip every dot/dollar-prefixed folder with one
            built-in fragment.
        shell: Dialect of the terminal that runs generated commands.
        forward_slash_supported: The search binary on Windows accepts ``/``
            in path regexes, so separators are left alone.
        export_threshold: Pattern length above which it is carried by an
            environment variable.
        max_command_length: Hard ceiling for the variable assignment command
            (defaults to the shell's limit).
    """
    use_ignore_file: bool = True
    omit_exemptions: bool = False
    skip_dot_folders: bool = True
    shell: ShellKind = ShellKind.POSIX_LIKE
    forward_slash_supported: bool = False
    export_threshold: int = DEFAULT_EXPORT_THRESHOLD
    max_command_length: Optional[int] = None

    def __post_init__(self):
        """Validate configuration"""
        if not isinstance(self.shell, ShellKind):
            object.__setattr__(self, 'shell', ShellKind.parse(str(self.shell)))
        if self.export_threshold <= 0:
            raise ValueError(f"export_threshold must be positive, got {self.export_threshold}")
        if self.max_command_length is None:
            object.__setattr__(self, 'max_command_length', self.shell.max_command_length)
        elif self.max_command_length <= 0:
            raise ValueError(f"max_command_length must be positive, got {self.max_command_length}")

    @property
    def uses_backslash(self) -> bool:
        """Whether path separators are rewritten to backslashes"""
        return self.shell.path_separator(self.forward_slash_supported) != "/"

    def with_changes(self, **changes) -> "IgnoreConfig":
        """Copy with some fields replaced; max_command_length follows a shell change"""
        if 'shell' in changes and 'max_command_length' not in changes:
            changes['max_command_length'] = None
        return replace(self, **changes)

    @classmethod
    def from_env(cls, **overrides) -> "IgnoreConfig":
        """Build a config from GITSKIP_* environment variables

        Keyword arguments win over the environment.
        """
        values = {
            'use_ignore_file': _env_bool('GITSKIP_USE_IGNORE_FILE', True),
            'omit_exemptions': _env_bool('GITSKIP_OMIT_EXEMPTIONS', False),
            'skip_dot_folders': _env_bool('GITSKIP_SKIP_DOT_FOLDERS', True),
            'forward_slash_supported': _env_bool('GITSKIP_FORWARD_SLASH', False),
            'shell': ShellKind.parse(os.getenv('GITSKIP_SHELL', 'posix')),
            'export_threshold': int(os.getenv('GITSKIP_EXPORT_THRESHOLD', str(DEFAULT_EXPORT_THRESHOLD))),
        }
        max_length = os.getenv('GITSKIP_MAX_COMMAND_LENGTH')
        if max_length:
            values['max_command_length'] = int(max_length)
        values.update(overrides)
        return cls(**values)
