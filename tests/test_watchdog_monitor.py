#!/usr/bin/env python3
"""
Test suite for watchdog monitor integration
"""

import unittest
import tempfile
import time
from pathlib import Path
from unittest.mock import Mock

from gitskip.ignore import IgnoreProfileRegistry, SkipPathExporter
from gitskip.watchdog_monitor import IgnoreFileHandler, WatchdogMonitor


class MockEvent:
    def __init__(self, path, is_directory=False, dest_path=None):
        self.src_path = path
        self.is_directory = is_directory
        self.dest_path = dest_path


class TestIgnoreFileHandler(unittest.TestCase):
    """Test the IgnoreFileHandler class"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root_path = Path(self.temp_dir.name).resolve()
        self.ignore_file = self.root_path / ".gitignore"
        self.ignore_file.write_text("/build/\n")
        self.registry = IgnoreProfileRegistry(
            exporter=SkipPathExporter(self.root_path / "scripts")
        )
        self.registry.load(self.root_path)
        self.handler = IgnoreFileHandler(self.registry, debounce_seconds=0.1)

    def tearDown(self):
        """Clean up"""
        self.temp_dir.cleanup()

    def test_handler_initialization(self):
        callback = Mock()
        handler = IgnoreFileHandler(
            self.registry,
            debounce_seconds=1.0,
            on_change_callback=callback
        )

        self.assertIs(handler.registry, self.registry)
        self.assertEqual(handler.ignore_filename, ".gitignore")
        self.assertEqual(handler.debounce_seconds, 1.0)
        self.assertEqual(handler.on_change_callback, callback)

    def test_should_process_event(self):
        """Test event filtering logic"""
        # Directory event - should not process
        event = MockEvent("/path/to/dir", is_directory=True)
        self.assertFalse(self.handler._should_process_event(event))

        # Non-ignore file - should not process
        event = MockEvent("/path/to/file.py")
        self.assertFalse(self.handler._should_process_event(event))

        # Ignore file - should process
        event = MockEvent("/path/to/.gitignore")
        self.assertTrue(self.handler._should_process_event(event))

        # Same file again immediately - should be debounced
        self.assertFalse(self.handler._should_process_event(event))

        # After debounce period - should process
        time.sleep(0.15)
        self.assertTrue(self.handler._should_process_event(event))

    def test_modified_event_recompiles(self):
        callback = Mock()
        handler = IgnoreFileHandler(self.registry, debounce_seconds=0.1,
                                    on_change_callback=callback)
        self.ignore_file.write_text("/dist/\n")

        handler.on_modified(MockEvent(str(self.ignore_file)))

        profile = self.registry.get(self.root_path)
        self.assertEqual(profile.compiled_pattern, "/[\\$\\.]|/dist/")
        callback.assert_called_once_with(str(self.ignore_file), profile)

    def test_deleted_event_invalidates(self):
        self.ignore_file.unlink()
        self.handler.on_deleted(MockEvent(str(self.ignore_file)))

        self.assertFalse(self.registry.is_usable(self.root_path))

    def test_moved_event_to_ignore_file(self):
        staged = self.root_path / "gitignore.new"
        staged.write_text("*.log\n")
        staged.replace(self.ignore_file)

        self.handler.on_moved(MockEvent(str(staged), dest_path=str(self.ignore_file)))

        profile = self.registry.get(self.root_path)
        self.assertEqual(profile.compiled_pattern, "/[\\$\\.]|\\.log$")

    def test_other_files_ignored(self):
        callback = Mock()
        handler = IgnoreFileHandler(self.registry, on_change_callback=callback)

        handler.on_modified(MockEvent(str(self.root_path / "main.py")))
        handler.on_created(MockEvent(str(self.root_path), is_directory=True))

        callback.assert_not_called()


class TestWatchdogMonitor(unittest.TestCase):
    """Test the WatchdogMonitor class"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root_path = Path(self.temp_dir.name).resolve()
        (self.root_path / ".gitignore").write_text("/build/\n")
        self.registry = IgnoreProfileRegistry(
            exporter=SkipPathExporter(self.root_path / "scripts")
        )
        self.registry.load(self.root_path)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_start_stop(self):
        monitor = WatchdogMonitor(self.registry)
        self.assertFalse(monitor.is_running())

        monitor.start()
        self.assertTrue(monitor.is_running())
        self.assertEqual(monitor.get_watched_paths(), [str(self.root_path)])

        monitor.stop()
        self.assertFalse(monitor.is_running())
        self.assertEqual(monitor.get_watched_paths(), [])

    def test_missing_path_not_watched(self):
        monitor = WatchdogMonitor(self.registry)
        monitor.start(paths=[self.root_path / "missing"])
        try:
            self.assertEqual(monitor.get_watched_paths(), [])
        finally:
            monitor.stop()

    def test_context_manager(self):
        with WatchdogMonitor(self.registry) as monitor:
            self.assertTrue(monitor.is_running())
        self.assertFalse(monitor.is_running())

    def test_file_change_detected(self):
        changes = []
        monitor = WatchdogMonitor(self.registry, debounce_seconds=0.1)
        monitor.start(on_change_callback=lambda path, profile: changes.append(profile))
        try:
            time.sleep(0.2)
            # Replace in one step so no half-written file is observed
            staged = self.root_path / "gitignore.new"
            staged.write_text("/dist/\n")
            staged.replace(self.root_path / ".gitignore")

            deadline = time.time() + 5
            while time.time() < deadline:
                profile = self.registry.get(self.root_path)
                if profile.compiled_pattern == "/[\\$\\.]|/dist/":
                    break
                time.sleep(0.1)
        finally:
            monitor.stop()

        self.assertEqual(self.registry.get(self.root_path).compiled_pattern, "/[\\$\\.]|/dist/")
        self.assertTrue(changes)


if __name__ == '__main__':
    unittest.main()
