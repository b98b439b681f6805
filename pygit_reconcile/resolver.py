"""RemoteResolver: observes commit presence and remote health for one repository."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Collection
from pathlib import Path

from pygit_reconcile.classifier import classify
from pygit_reconcile.models import RepositoryObservation
from pygit_reconcile.protocols import GitRepository
from pygit_reconcile.repository import GitPythonRepository


def remote_url_pattern(host: str, repo_name: str) -> re.Pattern[str]:
    """Pattern matching ssh or https URLs of repo_name under any owner on host."""
    return re.compile(rf'{re.escape(host)}[:/][^/]+/{re.escape(repo_name)}(\.git)?$')


def expected_remote_url(host: str, owner: str, repo_name: str) -> str:
    """The ssh URL a reconnected repository should point at."""
    return f'git@{host}:{owner}/{repo_name}.git'


class RemoteResolver:
    """Builds a RepositoryObservation from read-only git queries."""

    def __init__(
        self,
        host: str = 'github.com',
        probe_timeout: float | None = None,
        repo_factory: Callable[[Path], GitRepository] = GitPythonRepository,
    ):
        self.host = host
        self.probe_timeout = probe_timeout
        self.repo_factory = repo_factory
        self._logger = logging.getLogger(__name__)

    def resolve(self, repo_path: Path, repo_name: str, hosted_names: Collection[str]) -> RepositoryObservation:
        """Inspect one repository and classify it against the hosted names."""
        repo = self.repo_factory(repo_path)
        try:
            has_commits = repo.most_recent_commit() is not None
            remotes = tuple(repo.list_remotes())
            hosted_exists = repo_name in hosted_names
            remote_working = hosted_exists and self._any_remote_working(repo, remotes, repo_name)
        finally:
            repo.close()

        return RepositoryObservation(
            name=repo_name,
            path=repo_path,
            has_commits=has_commits,
            remotes=remotes,
            hosted_exists=hosted_exists,
            remote_working=remote_working,
            category=classify(hosted_exists, remote_working, has_commits),
        )

    def _any_remote_working(
        self, repo: GitRepository, remotes: tuple[tuple[str, str], ...], repo_name: str
    ) -> bool:
        """Probe matching remotes in order and stop at the first reachable one."""
        pattern = remote_url_pattern(self.host, repo_name)
        for name, url in remotes:
            if not pattern.search(url):
                continue
            if repo.probe_remote_reachable(name, self.probe_timeout):
                return True
            self._logger.debug("Remote %s (%s) of %s did not answer", name, url, repo_name)
        return False
