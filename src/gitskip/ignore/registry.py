"""
Registry of compiled ignore profiles, one per project root
"""

import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..config import IgnoreConfig
from ..utils import get_logger
from .compiler import compile_ignore_text
from .externalizer import Externalized, SkipPathExporter, get_variable_reference
from .file_loader import IgnoreFileLoader
from .profile import Diagnostic, DiagnosticKind, IgnoreProfile

logger = get_logger(__name__)


@dataclass
class RegistryEntry:
    """Published profile for a root and the request that produced it"""
    profile: IgnoreProfile
    ticket: int


class IgnoreProfileRegistry:
    """
    Maps project roots to their compiled ignore profiles

    Recompilation of one root is serialized; each request takes a ticket and
    a result only replaces the published profile if no newer request has
    already been published. Publishing swaps the whole profile, so readers
    never see a profile mid-compilation.
    """

    def __init__(self,
                 loader: Optional[IgnoreFileLoader] = None,
                 exporter: Optional[SkipPathExporter] = None,
                 default_config: Optional[IgnoreConfig] = None):
        """
        Initialize registry

        Args:
            loader: Reads ignore files for load() and change notifications
            exporter: Writes skip-path variable scripts for long patterns
            default_config: Config used when a root has none yet
        """
        self.loader = loader or IgnoreFileLoader()
        self.exporter = exporter or SkipPathExporter()
        self.default_config = default_config or IgnoreConfig()
        self._entries: Dict[Path, RegistryEntry] = {}
        self._configs: Dict[Path, IgnoreConfig] = {}
        self._tickets: Dict[Path, int] = {}
        self._root_locks: Dict[Path, threading.Lock] = {}
        self._removed: Dict[Path, int] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(root_path: Union[str, Path]) -> Path:
        return Path(root_path).resolve()

    def get(self, root_path: Union[str, Path]) -> Optional[IgnoreProfile]:
        with self._lock:
            entry = self._entries.get(self._key(root_path))
            return entry.profile if entry else None

    def config_for(self, root_path: Union[str, Path]) -> IgnoreConfig:
        with self._lock:
            return self._configs.get(self._key(root_path), self.default_config)

    def recompile(self, root_path: Union[str, Path], raw_text: Optional[str],
                  config: Optional[IgnoreConfig] = None,
                  source: Optional[Path] = None) -> IgnoreProfile:
        """
        Compile already-read ignore text for a root and publish the result

        Args:
            root_path: Project root
            raw_text: Ignore file content
            config: Settings (defaults to the root's last config)
            source: Ignore file path, for messages

        Returns:
            The published profile (a newer one if this request was superseded)
        """
        key = self._key(root_path)
        config = config or self.config_for(key)
        return self._compile_and_publish(
            key, config, lambda: compile_ignore_text(raw_text, config, key, source)
        )

    def load(self, root_path: Union[str, Path],
             config: Optional[IgnoreConfig] = None) -> IgnoreProfile:
        """
        Read the root's ignore file and compile it

        An unreadable, missing or empty file yields an invalid profile with
        IO_ERROR diagnostics.
        """
        key = self._key(root_path)
        config = config or self.config_for(key)
        if not config.use_ignore_file:
            return self.recompile(key, None, config)

        info = self.loader.read(key)
        for warning in info.warnings:
            logger.warning(f"{info.path}:{warning.line}: {warning.message}")

        if not info.is_valid:
            for error in info.errors:
                logger.warning(error.message)
            diagnostics = tuple(
                Diagnostic(DiagnosticKind.IO_ERROR, error.line, error.pattern, error.message)
                for error in info.errors
            )
            return self._compile_and_publish(
                key, config,
                lambda: IgnoreProfile(root_path=key, config=config, source=info.path,
                                      diagnostics=diagnostics)
            )

        return self.recompile(key, info.text, config, source=info.path)

    def notify_file_changed(self, file_path: Union[str, Path]) -> Optional[IgnoreProfile]:
        """
        Handle external notification of an ignore file change

        Only roots already in the registry are reloaded.
        """
        file_path = Path(file_path).resolve()
        if file_path.name != self.loader.ignore_filename:
            logger.debug(f"Not an ignore file: {file_path}")
            return None

        root = file_path.parent
        with self._lock:
            known = root in self._configs
        if not known:
            logger.debug(f"Ignore file of unregistered root changed: {file_path}")
            return None

        logger.info(f"Reloading ignore file: {file_path}")
        return self.load(root)

    def _compile_and_publish(self, key: Path, config: IgnoreConfig,
                             produce: Callable[[], IgnoreProfile]) -> IgnoreProfile:
        with self._lock:
            ticket = self._tickets.get(key, 0) + 1
            self._tickets[key] = ticket
            root_lock = self._root_locks.setdefault(key, threading.Lock())

        with root_lock:
            profile = produce()
            with self._lock:
                if ticket <= self._removed.get(key, 0):
                    logger.debug(f"Discarding compilation of removed root {key}")
                    return profile
                current = self._entries.get(key)
                if current is not None and current.ticket > ticket:
                    logger.debug(f"Discarding superseded compilation of {key}")
                    return current.profile
                if current is not None:
                    profile = replace(profile, export=current.profile.export)
                self._entries[key] = RegistryEntry(profile=profile, ticket=ticket)
                self._configs[key] = config

            if profile.usable:
                self.exporter.export(profile)
            logger.info(profile.summary())
            return profile

    def is_usable(self, root_path: Union[str, Path]) -> bool:
        """Whether the root's compiled pattern should replace generic exclusions"""
        profile = self.get(root_path)
        return profile is not None and profile.usable

    def get_usage(self, root_path: Union[str, Path],
                  can_use_variable: bool = True) -> Tuple[bool, int, str]:
        """
        Summary for command builders

        Returns:
            (valid, exemption_count, pattern or variable reference); the
            variable is referenced only when the pattern was externalized and
            the script write succeeded.
        """
        profile = self.get(root_path)
        if profile is None or not profile.usable:
            exemptions = profile.exemption_count if profile else 0
            return False, exemptions, ''

        placement = self.exporter.placement(profile)
        if (can_use_variable and isinstance(placement, Externalized)
                and profile.export.succeeded):
            return True, profile.exemption_count, get_variable_reference(profile.shell_kind)
        return True, profile.exemption_count, profile.compiled_pattern

    def get_skip_path_option(self, root_path: Union[str, Path], to_run_in_terminal: bool,
                             can_use_variable: bool = True) -> str:
        profile = self.get(root_path)
        if profile is None:
            return ''
        return self.exporter.get_skip_path_option(profile, to_run_in_terminal, can_use_variable)

    def remove(self, root_path: Union[str, Path]) -> None:
        """
        Forget a root

        The root's ticket counter is kept so compilations requested before
        the removal are discarded instead of publishing the root again.
        """
        key = self._key(root_path)
        with self._lock:
            self._entries.pop(key, None)
            self._configs.pop(key, None)
            self._root_locks.pop(key, None)
            self._removed[key] = self._tickets.get(key, 0)
        logger.debug(f"Removed ignore profile: {key}")

    def roots(self) -> List[Path]:
        with self._lock:
            return list(self._entries.keys())

    def get_stats(self) -> Dict[str, int]:
        """
        Get registry statistics

        Returns:
            Dictionary with registry stats
        """
        with self._lock:
            profiles = [entry.profile for entry in self._entries.values()]

        return {
            'total_roots': len(profiles),
            'usable_roots': sum(1 for p in profiles if p.usable),
            'total_patterns': sum(p.parsed_pattern_count for p in profiles),
            'exemptions': sum(p.exemption_count for p in profiles),
            'errors': sum(p.error_count for p in profiles),
        }

    def clear(self):
        """Clear the registry"""
        with self._lock:
            self._removed.update(self._tickets)
            self._entries.clear()
            self._configs.clear()
            self._root_locks.clear()
