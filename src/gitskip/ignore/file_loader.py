"""
File loader for reading and checking a project's ignore file
"""

import re
from pathlib import Path
from typing import List, Optional, Union
from dataclasses import dataclass, field

import pathspec

from ..constants import IGNORE_FILENAME, MAX_IGNORE_FILE_SIZE
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass
class LoadError:
    """Represents a problem that prevents using the ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class LoadWarning:
    """Represents a suspicious pattern in an ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class IgnoreFileText:
    """Raw content of an ignore file plus what was found while reading it"""
    path: Path
    text: Optional[str] = None
    errors: List[LoadError] = field(default_factory=list)
    warnings: List[LoadWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if file was read and has content"""
        return self.text is not None and len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0


class IgnoreFileLoader:
    """
    Reads the ignore file at a project root
    """

    def __init__(self, ignore_filename: str = IGNORE_FILENAME,
                 max_size: int = MAX_IGNORE_FILE_SIZE):
        """
        Initialize loader

        Args:
            ignore_filename: Name of the ignore file at each root
            max_size: Largest file accepted, in bytes
        """
        self.ignore_filename = ignore_filename
        self.max_size = max_size

    def ignore_file_path(self, root_path: Union[str, Path]) -> Path:
        return Path(root_path) / self.ignore_filename

    def read(self, root_path: Union[str, Path]) -> IgnoreFileText:
        """
        Read the ignore file under a project root

        Args:
            root_path: Project root directory

        Returns:
            IgnoreFileText; on any error text is None and errors is non-empty
        """
        return self.read_file(self.ignore_file_path(root_path))

    def read_file(self, file_path: Path) -> IgnoreFileText:
        info = IgnoreFileText(path=file_path)

        if not file_path.exists():
            info.errors.append(LoadError(0, "", f"Not exist git ignore file: {file_path}"))
            return info

        try:
            file_size = file_path.stat().st_size
        except OSError as e:
            info.errors.append(LoadError(0, "", f"Cannot stat file: {e}"))
            return info

        if file_size > self.max_size:
            info.errors.append(LoadError(
                0, "", f"File too large: {file_size} bytes (max: {self.max_size})"
            ))
            return info

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            info.errors.append(LoadError(0, "", f"Failed to read file: {file_path} , error: {e}"))
            return info

        if not text.strip():
            info.errors.append(LoadError(0, "", f"Read empty content from file: {file_path}"))
            return info

        info.text = text
        for line_num, line in enumerate(re.split(r'\r?\n', text), 1):
            stripped = line.strip()
            if not stripped or stripped.startswith('#'):
                continue
            for message in self.check_pattern(stripped):
                info.warnings.append(LoadWarning(line_num, stripped, message))

        return info

    def check_pattern(self, pattern: str) -> List[str]:
        """
        Check a pattern for issues that do not stop compilation

        Args:
            pattern: Stripped, non-comment ignore line

        Returns:
            List of warning messages
        """
        warnings = []

        try:
            pathspec.PathSpec.from_lines('gitwildmatch', [pattern])
        except ValueError as e:
            warnings.append(f"Not a valid gitignore pattern: {e}")

        # Backslash only escapes in gitignore, a Windows path will not match
        if re.search(r'\\(?![\\!#*?\[\] ])', pattern):
            warnings.append(
                "Pattern contains backslash. Use forward slashes for paths."
            )

        if pattern in ['*', '**', '**/*', '/*']:
            warnings.append(
                "Very broad pattern - will skip every path"
            )

        return warnings
