"""Configuration: argument parser, config file loader, and config assembly."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pygit_reconcile.models import DEFAULT_EXCLUDE_PATTERNS, ReconcileConfig, Visibility

try:
    import tomllib
except ModuleNotFoundError:
    try:
        import tomli as tomllib  # type: ignore[no-redef]
    except ImportError:
        tomllib = None  # type: ignore[assignment]

CONFIG_FILENAME = '.reconcilerc.toml'


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all pygit-reconcile flags."""
    # Lazy import to avoid circular dependency with __init__.py
    from pygit_reconcile import __version__

    parser = argparse.ArgumentParser(
        description="Reconcile local git repositories with their GitHub counterparts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ~/projects --analyze-only             # Classify only
  %(prog)s ~/projects                            # Classify, confirm, remediate
  %(prog)s ~/projects --visibility public        # New repositories are public
  %(prog)s ~/projects --delay 120 --exclude tmp  # Slower creations, extra exclude
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('directory',
                       help='Root folder containing the local repositories')
    parser.add_argument('--visibility', choices=[v.value for v in Visibility], default=Visibility.PRIVATE.value,
                       help='Visibility of created repositories (default: private)')
    parser.add_argument('--delay', dest='delay_seconds', type=float, default=90,
                       help='Seconds to wait between repository creations (default: 90)')
    parser.add_argument('--analyze-only', action='store_true',
                       help='Only classify repositories, change nothing')
    parser.add_argument('--exclude', action='append', default=[],
                       help='Extra exclude pattern, added to the defaults (can specify multiple)')
    parser.add_argument('--host', default='github.com',
                       help='Hostname expected in remote URLs (default: github.com)')
    parser.add_argument('--limit', dest='repo_limit', type=int, default=1000,
                       help='Maximum number of hosted repositories to list (default: 1000)')
    parser.add_argument('--probe-timeout', type=float, default=30,
                       help='Seconds before a remote reachability probe is abandoned (default: 30)')
    parser.add_argument('--verbose', action='store_true',
                       help='Verbose output')
    parser.add_argument('--json', dest='json_output', action='store_true',
                       help='Output results as JSON (suppresses normal output)')
    parser.add_argument('--config', type=str, default=None,
                       help=f'Path to config file (default: {CONFIG_FILENAME} in root folder or home)')

    return parser


def load_config_file(search_dir: Path, config_path: str | None = None) -> dict[str, Any]:
    """Load .reconcilerc.toml from explicit path, search dir, or home dir.

    Returns empty dict if not found or tomllib is unavailable.
    """
    candidates = [Path(config_path)] if config_path else [search_dir / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]
    for path in candidates:
        if path.is_file():
            if tomllib is None:
                print(f"Warning: Found {path} but tomllib/tomli not available (Python 3.11+ or pip install tomli). Ignoring.")
                return {}
            try:
                with open(path, 'rb') as f:
                    return tomllib.load(f)
            except Exception as e:
                print(f"Warning: Failed to parse {path}: {e}")
                return {}
    if config_path:
        print(f"Warning: Config file '{config_path}' not found. Ignoring.")
    return {}


def build_config(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    file_config: dict[str, Any],
    argv: Sequence[str],
) -> ReconcileConfig:
    """Merge CLI flags, config file values and defaults (in that priority)."""
    cli_explicit = set()
    for action in parser._actions:
        if action.dest in ('help', 'version'):
            continue
        if any(opt in argv or any(a.startswith(f'{opt}=') for a in argv) for opt in action.option_strings):
            cli_explicit.add(action.dest)

    def effective(dest: str, toml_key: str):
        if dest in cli_explicit or toml_key not in file_config:
            return getattr(args, dest)
        return file_config[toml_key]

    file_excludes = file_config.get('exclude_patterns') or []
    if isinstance(file_excludes, str):
        file_excludes = [file_excludes]

    exclude_patterns = list(DEFAULT_EXCLUDE_PATTERNS)
    for pattern in list(file_excludes) + list(args.exclude):
        if pattern not in exclude_patterns:
            exclude_patterns.append(pattern)

    return ReconcileConfig(
        visibility=Visibility(effective('visibility', 'visibility')),
        delay_seconds=float(effective('delay_seconds', 'delay_seconds')),
        analyze_only=bool(effective('analyze_only', 'analyze_only')),
        exclude_patterns=exclude_patterns,
        host=effective('host', 'host'),
        repo_limit=int(effective('repo_limit', 'repo_limit')),
        probe_timeout=float(effective('probe_timeout', 'probe_timeout')),
        verbose=bool(effective('verbose', 'verbose')),
        json_output=bool(effective('json_output', 'json_output')),
    )
