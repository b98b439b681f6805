"""Hosted repository service: GitHub CLI client and the per-run name index."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path
from typing import Callable

from pygit_reconcile.models import OperationResult, OperationType, Visibility
from pygit_reconcile.protocols import HostingClient

# Substrings seen in GitHub quota and abuse-detection errors. Advisory only:
# the wording is not a stable contract.
RATE_LIMIT_MARKERS = (
    'rate limit',
    'secondary rate',
    'abuse detection',
    'too many requests',
    'quota',
    'http 429',
)


class HostingError(Exception):
    """Raised when the hosting service cannot answer a required query."""


def is_rate_limited(message: str) -> bool:
    """Heuristically decide whether an error message reports quota exhaustion."""
    text = message.lower()
    return any(marker in text for marker in RATE_LIMIT_MARKERS)


def _error_text(error: Exception) -> str:
    if isinstance(error, subprocess.CalledProcessError):
        detail = error.stderr or error.output or ''
        return detail.strip() or str(error)
    return str(error)


class GitHubCliClient:
    """Hosting client backed by the `gh` command line tool."""

    def __init__(self, runner: Callable[..., str] | None = None, executable: str = 'gh'):
        self._runner = runner or self._default_runner
        self._executable = executable
        self._logger = logging.getLogger(__name__)

    def list_repository_names(self, limit: int) -> list[str]:
        """Names of the authenticated user's repositories, at most limit of them."""
        try:
            out = self._run(['repo', 'list', '--limit', str(limit), '--json', 'name', '--jq', '.[].name'])
        except (subprocess.CalledProcessError, OSError) as e:
            raise HostingError(f"Could not list hosted repositories: {_error_text(e)}") from e
        return [line.strip() for line in out.splitlines() if line.strip()]

    def get_authenticated_owner(self) -> str | None:
        """Login of the authenticated account, or None if it cannot be determined."""
        try:
            out = self._run(['api', 'user', '--jq', '.login'])
        except (subprocess.CalledProcessError, OSError) as e:
            self._logger.warning("Could not resolve authenticated owner: %s", _error_text(e))
            return None
        return out.strip() or None

    def create_repository(
        self, path: Path, name: str, visibility: Visibility, push: bool = True
    ) -> OperationResult:
        """Create a hosted repository from the working tree at path.

        Creation, remote setup and the initial push happen in one `gh` call.
        """
        args = ['repo', 'create', name, '--source', str(path), '--remote', 'origin', f'--{visibility.value}']
        if push:
            args.append('--push')
        try:
            self._run(args, cwd=path)
            return OperationResult(True, OperationType.CREATE_REPO, f"Created {visibility.value} repository {name}")
        except (subprocess.CalledProcessError, OSError) as e:
            return OperationResult(False, OperationType.CREATE_REPO, _error_text(e), e)

    def _run(self, args: list[str], cwd: Path | None = None) -> str:
        return self._runner([self._executable, *args], cwd=cwd)

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path | None = None) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd) if cwd else None,
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


class HostedRepositoryIndex:
    """Snapshot of hosted repository names, fetched once per run."""

    def __init__(self, names: Iterable[str]):
        self._names = frozenset(names)

    @classmethod
    def fetch(cls, client: HostingClient, limit: int) -> HostedRepositoryIndex:
        """Query the hosting service once and freeze the result."""
        return cls(client.list_repository_names(limit))

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)
