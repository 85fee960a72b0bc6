"""
Command line interface for gitskip.

    gitskip translate '*.txt' '/build/'      show per-line fragments
    gitskip compile .                         print the merged skip-path regex
    gitskip export .                          write the variable script if needed
    gitskip check . src/a.py build/x.o        compare regex and gitignore decisions
    gitskip watch .                           recompile on ignore file changes
"""

import argparse
import json
import re
import sys
import time
from pathlib import Path
from typing import List, Optional

import pathspec

from . import __version__
from .config import IgnoreConfig
from .ignore import (
    Externalized,
    IgnoreProfile,
    IgnoreProfileRegistry,
    SkipPathExporter,
    translate_for_shell,
)
from .shell import ShellKind
from .utils import configure_logging, get_logger

logger = get_logger("gitskip-cli")


class GitskipError(Exception):
    """Input the CLI cannot work with"""


def build_config(args: argparse.Namespace) -> IgnoreConfig:
    overrides = {}
    if args.shell:
        overrides['shell'] = ShellKind.parse(args.shell)
    if args.forward_slash:
        overrides['forward_slash_supported'] = True
    if args.keep_dot_folders:
        overrides['skip_dot_folders'] = False
    if getattr(args, 'omit_exemptions', False):
        overrides['omit_exemptions'] = True
    if getattr(args, 'export_threshold', None):
        overrides['export_threshold'] = args.export_threshold
    return IgnoreConfig.from_env(**overrides)


def _root(path: str) -> Path:
    root = Path(path).resolve()
    if not root.is_dir():
        raise GitskipError(f"Not a directory: {path}")
    return root


def _profile_json(profile: IgnoreProfile) -> dict:
    return {
        'root': str(profile.root_path),
        'valid': profile.valid,
        'pattern': profile.compiled_pattern,
        'shell': profile.shell_kind.value,
        'exemptions': profile.exemption_count,
        'errors': profile.error_count,
        'total_patterns': profile.total_pattern_count,
        'parsed_patterns': profile.parsed_pattern_count,
        'diagnostics': [
            {'kind': d.kind.value, 'line': d.line, 'text': d.text, 'message': d.message}
            for d in profile.diagnostics
        ],
    }


def _print_diagnostics(profile: IgnoreProfile) -> None:
    for diagnostic in profile.diagnostics:
        print(f"# {diagnostic}", file=sys.stderr)
    print(f"# {profile.summary()}", file=sys.stderr)


def cmd_translate(args: argparse.Namespace) -> int:
    config = build_config(args)
    for line in args.lines:
        result = translate_for_shell(line, config.shell, config.skip_dot_folders,
                                     config.forward_slash_supported)
        if result.dropped:
            print(f"{line}\t(dropped: {result.reason.value})")
        else:
            print(f"{line}\t{result.fragment}")
    return 0


def cmd_compile(args: argparse.Namespace) -> int:
    registry = IgnoreProfileRegistry(exporter=SkipPathExporter(args.script_dir))
    profile = registry.load(_root(args.root), build_config(args))

    if args.json:
        print(json.dumps(_profile_json(profile), indent=2))
    else:
        _print_diagnostics(profile)
        if profile.compiled_pattern:
            print(profile.compiled_pattern)
    return 0 if profile.valid else 1


def cmd_export(args: argparse.Namespace) -> int:
    exporter = SkipPathExporter(args.script_dir)
    registry = IgnoreProfileRegistry(exporter=exporter)
    profile = registry.load(_root(args.root), build_config(args))
    _print_diagnostics(profile)
    if not profile.usable:
        return 1

    placement = exporter.export(profile, force=args.force)
    if isinstance(placement, Externalized):
        if not profile.export.succeeded:
            print(f"# Export failed: {profile.export.error}", file=sys.stderr)
            return 1
        print(exporter.get_source_command(profile))
    print(exporter.get_skip_path_option(profile, to_run_in_terminal=True))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    root = _root(args.root)
    # Decisions do not depend on the shell, compare in slash form
    config = build_config(args).with_changes(shell=ShellKind.POSIX_LIKE)
    registry = IgnoreProfileRegistry(exporter=SkipPathExporter(args.script_dir))
    profile = registry.load(root, config)
    if not profile.usable:
        _print_diagnostics(profile)
        return 1

    regex = re.compile('|'.join(profile.fragments))
    logger.debug(f"Checking {len(args.paths)} paths against {profile.root_path}")
    text = registry.loader.read(root).text or ''
    gitignore = pathspec.PathSpec.from_lines('gitwildmatch', text.splitlines())

    mismatches = 0
    for raw_path in args.paths:
        relative = Path(raw_path).as_posix().lstrip('/')
        by_regex = bool(regex.search('/' + relative))
        by_git = gitignore.match_file(relative)
        flag = '' if by_regex == by_git else '  <-- differs'
        mismatches += by_regex != by_git
        print(f"{relative}: regex={'skip' if by_regex else 'keep'} "
              f"gitignore={'skip' if by_git else 'keep'}{flag}")
    return 0 if mismatches == 0 else 2


def cmd_watch(args: argparse.Namespace) -> int:
    # Imported here so the other commands work without an observer thread
    from .watchdog_monitor import WatchdogMonitor

    registry = IgnoreProfileRegistry(exporter=SkipPathExporter(args.script_dir))
    profile = registry.load(_root(args.root), build_config(args))
    _print_diagnostics(profile)

    def on_change(file_path: str, new_profile: Optional[IgnoreProfile]):
        if new_profile is not None:
            _print_diagnostics(new_profile)

    monitor = WatchdogMonitor(registry)
    monitor.start(on_change_callback=on_change)
    print(f"# Watching {profile.root_path} - press Ctrl+C to stop", file=sys.stderr)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n# Stopping monitor...", file=sys.stderr)
    finally:
        monitor.stop()
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--shell', help='Target shell: posix, cmd or mingw (default: GITSKIP_SHELL or posix)')
    common.add_argument('--forward-slash', action='store_true',
                        help='Search binary accepts / in path regexes on Windows')
    common.add_argument('--keep-dot-folders', action='store_true',
                        help='Do not skip every dot folder, only .git')
    common.add_argument('--log-level', help='Log level (TRACE, DEBUG, INFO, WARNING, ERROR)')

    project = argparse.ArgumentParser(add_help=False)
    project.add_argument('root', help='Project root holding the ignore file')
    project.add_argument('--omit-exemptions', action='store_true',
                         help='Drop !pattern lines instead of refusing the file')
    project.add_argument('--export-threshold', type=int,
                         help='Longest pattern embedded literally (default: 200)')
    project.add_argument('--script-dir', help='Folder for skip-path variable scripts')

    parser = argparse.ArgumentParser(
        prog='gitskip',
        description='Compile .gitignore files into skip-path regexes for search tools'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    subparsers = parser.add_subparsers(dest='command', required=True)

    translate_parser = subparsers.add_parser('translate', parents=[common],
                                             help='Translate ignore lines to regex fragments')
    translate_parser.add_argument('lines', nargs='+', help='Ignore lines')
    translate_parser.set_defaults(func=cmd_translate)

    compile_parser = subparsers.add_parser('compile', parents=[common, project],
                                           help='Print the merged skip-path regex')
    compile_parser.add_argument('--json', action='store_true', help='Output profile as JSON')
    compile_parser.set_defaults(func=cmd_compile)

    export_parser = subparsers.add_parser('export', parents=[common, project],
                                          help='Write the skip-path variable script when needed')
    export_parser.add_argument('--force', action='store_true', help='Rewrite an unchanged script')
    export_parser.set_defaults(func=cmd_export)

    check_parser = subparsers.add_parser('check', parents=[common, project],
                                         help='Compare regex and gitignore decisions for paths')
    check_parser.add_argument('paths', nargs='+', help='Paths relative to the root')
    check_parser.set_defaults(func=cmd_check)

    watch_parser = subparsers.add_parser('watch', parents=[common, project],
                                         help='Recompile when the ignore file changes')
    watch_parser.set_defaults(func=cmd_watch)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.func(args)
    except (GitskipError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
