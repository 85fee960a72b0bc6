"""
Placement of a compiled skip-path pattern in generated commands.

Short patterns are embedded as a literal. Long ones are carried by the
Skip_Git_Paths environment variable, defined by a small per-project script
that the terminal sources once; commands then reference the variable.
"""

import hashlib
import os
import re
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..constants import (
    EXPORT_SCRIPT_SUFFIX,
    SKIP_PATH_OPTION,
    SKIP_PATH_VARIABLE_NAME,
    TRIM_PROJECT_NAME_PATTERN,
)
from ..shell import ShellKind
from ..utils import get_logger
from .profile import IgnoreProfile

logger = get_logger(__name__)


@dataclass(frozen=True)
class Inline:
    """Embed the literal pattern in each command"""
    pattern: str


@dataclass(frozen=True)
class Externalized:
    """Reference the variable defined by the script at script_path"""
    variable_name: str
    script_path: Path


Placement = Union[Inline, Externalized]


def get_export_command(pattern: str, shell: ShellKind) -> str:
    """Single statement that assigns the pattern to the skip-path variable

    POSIX shells get single quotes, so the variable holds the pattern
    byte for byte. The inline ``--np "<pattern>"`` form is double quoted
    and bash collapses ``\\$`` and ``\\\\`` there; callers that need both
    forms to agree must quote the inline pattern themselves.
    """
    if shell.is_cmd:
        return f'@set "{SKIP_PATH_VARIABLE_NAME}={pattern}"'
    quoted = pattern.replace("'", "'\\''")
    return f"export {SKIP_PATH_VARIABLE_NAME}='{quoted}'"


def command_fits(pattern: str, shell: ShellKind, max_length: Optional[int] = None) -> bool:
    """Whether the assignment command stays within the shell's length ceiling"""
    limit = max_length if max_length is not None else shell.max_command_length
    return len(get_export_command(pattern, shell)) <= limit


def get_variable_reference(shell: ShellKind) -> str:
    if shell.is_cmd:
        return f'"%{SKIP_PATH_VARIABLE_NAME}%"'
    return f'"${SKIP_PATH_VARIABLE_NAME}"'


def sanitize_project_name(root_path: Union[str, Path]) -> str:
    name = re.sub(TRIM_PROJECT_NAME_PATTERN, '-', Path(root_path).name).strip('-')
    return name or 'root'


def get_script_name(root_path: Union[str, Path]) -> str:
    """Readable folder name plus a hash of the absolute path

    Roots sharing a folder name (``/a/app``, ``/b/app``) get different scripts.
    """
    abs_path = str(Path(root_path).resolve())
    path_hash = hashlib.sha256(abs_path.encode()).hexdigest()[:8]
    return f"{sanitize_project_name(abs_path)}-{path_hash}"


def default_script_folder() -> Path:
    """Process-wide folder for export scripts (GITSKIP_SCRIPT_DIR overrides)"""
    configured = os.getenv('GITSKIP_SCRIPT_DIR')
    if configured:
        return Path(configured)
    return Path(tempfile.gettempdir()) / 'gitskip'


def get_script_path(root_path: Union[str, Path], shell: ShellKind,
                    save_folder: Optional[Path] = None) -> Path:
    folder = Path(save_folder) if save_folder else default_script_folder()
    return folder / (get_script_name(root_path) + EXPORT_SCRIPT_SUFFIX + shell.script_extension)


def decide_placement(pattern: str, shell: ShellKind, export_threshold: int,
                     script_path: Path) -> Placement:
    """
    Decide whether a pattern is inlined or carried by the variable

    Args:
        pattern: Merged skip-path pattern
        shell: Target shell dialect
        export_threshold: Longest pattern that is still inlined
        script_path: Where the variable script lives for this project

    Returns:
        Inline for short patterns, Externalized otherwise
    """
    if len(pattern) <= export_threshold:
        return Inline(pattern)
    return Externalized(SKIP_PATH_VARIABLE_NAME, script_path)


class SkipPathExporter:
    """
    Writes export scripts and builds skip-path options for profiles
    """

    def __init__(self, save_folder: Optional[Union[str, Path]] = None):
        """
        Initialize exporter

        Args:
            save_folder: Folder for export scripts (defaults to default_script_folder())
        """
        self.save_folder = Path(save_folder) if save_folder else default_script_folder()

    def script_path_for(self, profile: IgnoreProfile) -> Path:
        return get_script_path(profile.root_path, profile.shell_kind, self.save_folder)

    def placement(self, profile: IgnoreProfile) -> Optional[Placement]:
        """Placement for a usable profile, None when it has no usable pattern"""
        if not profile.usable:
            return None
        return decide_placement(
            profile.compiled_pattern,
            profile.shell_kind,
            profile.export_threshold,
            self.script_path_for(profile),
        )

    def export(self, profile: IgnoreProfile, force: bool = False) -> Optional[Placement]:
        """
        Persist the variable script when the pattern must be externalized

        The write is skipped when the same pattern was already exported to
        the same script, unless force is set (e.g. a new terminal). A failed
        write is logged and recorded on profile.export; the profile stays
        valid and callers fall back to the literal pattern.

        Args:
            profile: Compiled profile
            force: Rewrite the script even if the pattern is unchanged

        Returns:
            The placement, or None for an unusable profile
        """
        placement = self.placement(profile)
        if not isinstance(placement, Externalized):
            return placement

        state = profile.export
        pattern = profile.compiled_pattern
        script_path = placement.script_path
        if (not force and state.succeeded and state.script_path == script_path
                and state.last_exported_pattern == pattern):
            logger.debug(f"Skip path variable already exported to {script_path}")
            return placement

        try:
            script_path.parent.mkdir(parents=True, exist_ok=True)
            with open(script_path, 'w', encoding='utf-8') as f:
                f.write(get_export_command(pattern, profile.shell_kind))
        except OSError as e:
            state.succeeded = False
            state.error = str(e)
            logger.error(f"Failed to write skip path script {script_path}: {e}")
            return placement

        state.script_path = script_path
        state.last_exported_pattern = pattern
        state.succeeded = True
        state.error = None
        logger.info(f"Exported {SKIP_PATH_VARIABLE_NAME} ({len(pattern)} chars) to {script_path}")
        return placement

    def get_source_command(self, profile: IgnoreProfile) -> str:
        """Command that loads the exported variable into the current terminal"""
        script_path = str(self.script_path_for(profile))
        if profile.shell_kind.is_cmd:
            return f'call "{script_path}"' if ' ' in script_path else f'call {script_path}'
        return f'source {shlex.quote(script_path)}'

    def get_skip_path_option(self, profile: IgnoreProfile, to_run_in_terminal: bool,
                             can_use_variable: bool = True) -> str:
        """
        Build the ``--np`` option for a search command

        The literal form wraps the pattern in double quotes unchanged; see
        get_export_command() for how that differs from the variable form.

        Args:
            profile: Compiled profile
            to_run_in_terminal: The command runs in a terminal that sourced the script
            can_use_variable: The call site may reference the variable

        Returns:
            The option text, or an empty string for an unusable profile
        """
        placement = self.export(profile)
        if placement is None:
            return ''

        if (isinstance(placement, Externalized) and to_run_in_terminal
                and can_use_variable and profile.export.succeeded):
            return f'{SKIP_PATH_OPTION} {get_variable_reference(profile.shell_kind)}'
        return f'{SKIP_PATH_OPTION} "{profile.compiled_pattern}"'

    def replace_with_variable(self, profile: IgnoreProfile, command: str) -> str:
        """Swap an embedded literal pattern for the variable reference"""
        placement = self.export(profile)
        if not isinstance(placement, Externalized) or not profile.export.succeeded:
            return command
        literal = f'"{profile.compiled_pattern}"'
        return command.replace(literal, get_variable_reference(profile.shell_kind))
