"""
Watchdog monitor for project ignore files

Recompiles a registered root's profile when its ignore file is created,
modified, moved or deleted.
"""

import time
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Set, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .ignore import IgnoreProfile, IgnoreProfileRegistry
from .utils import get_logger

logger = get_logger(__name__)


class IgnoreFileHandler(FileSystemEventHandler):
    """
    Watches for changes to ignore files and notifies the registry
    """

    def __init__(self, registry: IgnoreProfileRegistry,
                 debounce_seconds: float = 0.5,
                 on_change_callback: Optional[Callable[[str, Optional[IgnoreProfile]], None]] = None):
        """
        Initialize the ignore file handler

        Args:
            registry: The registry to notify
            debounce_seconds: Minimum time between notifications for same file
            on_change_callback: Called with the file path and the new profile
        """
        super().__init__()
        self.registry = registry
        self.ignore_filename = registry.loader.ignore_filename
        self.debounce_seconds = debounce_seconds
        self.on_change_callback = on_change_callback
        self._last_change_times: Dict[str, float] = {}

    def _should_process_event(self, event: FileSystemEvent) -> bool:
        """Check if we should process this event"""
        if event.is_directory:
            return False

        path = Path(event.src_path)
        if path.name != self.ignore_filename:
            return False

        current_time = time.time()
        last_change = self._last_change_times.get(str(path), 0)
        if current_time - last_change < self.debounce_seconds:
            logger.debug(f"Debouncing change to {path}")
            return False

        self._last_change_times[str(path)] = current_time
        return True

    def _notify(self, file_path: str):
        profile = self.registry.notify_file_changed(file_path)
        if self.on_change_callback:
            self.on_change_callback(file_path, profile)

    def on_created(self, event: FileSystemEvent):
        if self._should_process_event(event):
            logger.info(f"Detected new {self.ignore_filename}: {event.src_path}")
            self._notify(event.src_path)

    def on_modified(self, event: FileSystemEvent):
        if self._should_process_event(event):
            logger.info(f"Detected change to {self.ignore_filename}: {event.src_path}")
            self._notify(event.src_path)

    def on_deleted(self, event: FileSystemEvent):
        if self._should_process_event(event):
            logger.info(f"Detected deletion of {self.ignore_filename}: {event.src_path}")
            self._notify(event.src_path)

    def on_moved(self, event: FileSystemEvent):
        """An ignore file moved away or another file renamed to it"""
        if event.is_directory:
            return
        if Path(event.src_path).name == self.ignore_filename:
            logger.info(f"Detected move of {self.ignore_filename}: {event.src_path} -> {event.dest_path}")
            self._notify(event.src_path)
        if Path(event.dest_path).name == self.ignore_filename and event.dest_path != event.src_path:
            self._notify(event.dest_path)


class WatchdogMonitor:
    """
    Watches registered project roots for ignore file changes
    """

    def __init__(self, registry: IgnoreProfileRegistry, debounce_seconds: float = 0.5):
        """
        Initialize the watchdog monitor

        Args:
            registry: The registry whose roots are watched
            debounce_seconds: Minimum time between notifications
        """
        self.registry = registry
        self.debounce_seconds = debounce_seconds

        self._observer: Optional[Observer] = None
        self._handler: Optional[IgnoreFileHandler] = None
        self._watched_paths: Set[Path] = set()

    def start(self, paths: Optional[Iterable[Union[str, Path]]] = None,
              on_change_callback: Optional[Callable[[str, Optional[IgnoreProfile]], None]] = None):
        """
        Start monitoring for changes

        Args:
            paths: Roots to watch (defaults to the registry's roots)
            on_change_callback: Optional callback for changes
        """
        if self._observer is not None:
            logger.warning("Monitor already running")
            return

        if paths is None:
            paths = self.registry.roots()

        self._handler = IgnoreFileHandler(
            self.registry,
            debounce_seconds=self.debounce_seconds,
            on_change_callback=on_change_callback
        )
        self._observer = Observer()

        # Only the root ignore file is honored, no need to recurse
        for path in paths:
            path_obj = Path(path).resolve()
            if path_obj.is_dir():
                self._observer.schedule(self._handler, str(path_obj), recursive=False)
                self._watched_paths.add(path_obj)
                logger.info(f"Watching directory: {path_obj}")
            else:
                logger.warning(f"Path does not exist or is not a directory: {path}")

        self._observer.start()
        logger.info("Watchdog monitor started")

    def stop(self):
        """Stop monitoring for changes"""
        if self._observer is None:
            logger.warning("Monitor not running")
            return

        self._observer.stop()
        self._observer.join()
        self._observer = None
        self._handler = None
        self._watched_paths.clear()
        logger.info("Watchdog monitor stopped")

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def get_watched_paths(self) -> list:
        return [str(p) for p in self._watched_paths]

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
