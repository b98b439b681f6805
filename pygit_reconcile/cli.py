"""CLI entry point: main() function."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from colorama import Fore, Style

from pygit_reconcile.config import build_config, create_argument_parser, load_config_file
from pygit_reconcile.hosting import GitHubCliClient, HostingError
from pygit_reconcile.orchestrator import ReconcileOrchestrator
from pygit_reconcile.output import ConsoleOutputHandler, NullOutputHandler


def _ask(prompt: str) -> str:
    """Read the confirmation answer; a closed stdin counts as a refusal."""
    try:
        return input(prompt)
    except EOFError:
        return ''


def _ask_stderr(prompt: str) -> str:
    """Confirmation prompt that keeps stdout clean for JSON output."""
    sys.stderr.write(prompt)
    sys.stderr.flush()
    return sys.stdin.readline()


def main(argv: list[str] | None = None):
    """Main entry point"""
    argv = sys.argv[1:] if argv is None else argv
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    search_dir = Path(args.directory).resolve()
    if not search_dir.exists() or not search_dir.is_dir():
        print(f"{Fore.RED}Error: Invalid directory '{search_dir}'{Style.RESET_ALL}")
        sys.exit(1)

    file_config = load_config_file(search_dir, args.config)
    config = build_config(parser, args, file_config, argv)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    output = NullOutputHandler() if config.json_output else ConsoleOutputHandler(verbose=config.verbose)
    confirm = _ask_stderr if config.json_output else _ask

    orchestrator = ReconcileOrchestrator(config, output, GitHubCliClient(), confirm=confirm)

    try:
        result = orchestrator.run(search_dir)

        if config.json_output:
            print(json.dumps(result.to_dict(), indent=2))

        sys.exit(1 if result.has_critical_issues() else 0)

    except HostingError as e:
        if config.json_output:
            print(json.dumps({'error': str(e)}, indent=2))
        else:
            output.error(f"\n{e}")
            output.info("Is the GitHub CLI installed and authenticated? Try: gh auth status")
        sys.exit(1)
    except KeyboardInterrupt:
        if not config.json_output:
            output.warning("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        if config.json_output:
            print(json.dumps({'error': str(e)}, indent=2))
        else:
            output.error(f"\nUnexpected error: {e}")
            if config.verbose:
                import traceback
                traceback.print_exc()
        sys.exit(1)
