"""gitskip - compile .gitignore files into skip-path regexes for search tools"""

__version__ = "0.3.0"

from .config import IgnoreConfig
from .shell import ShellKind
from .ignore import IgnoreProfile, IgnoreProfileRegistry, compile_ignore_text, translate

__all__ = [
    'IgnoreConfig',
    'ShellKind',
    'IgnoreProfile',
    'IgnoreProfileRegistry',
    'compile_ignore_text',
    'translate',
]
