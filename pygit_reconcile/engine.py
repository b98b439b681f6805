"""AnalysisEngine: classifies every discovered repository into a partition."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Sequence
from pathlib import Path

from tqdm import tqdm

from pygit_reconcile.models import Category, CategoryPartition, RepositoryObservation
from pygit_reconcile.protocols import OutputHandler
from pygit_reconcile.repository import GitPythonRepository
from pygit_reconcile.resolver import RemoteResolver


class AnalysisEngine:
    """Runs the probe, resolver and classifier over a list of directories"""

    def __init__(
        self,
        resolver: RemoteResolver,
        output: OutputHandler,
        is_repository: Callable[[Path], bool] = GitPythonRepository.is_repository,
        show_progress: bool = True,
    ):
        self.resolver = resolver
        self.output = output
        self.is_repository = is_repository
        self.show_progress = show_progress
        self._logger = logging.getLogger(__name__)

    def analyze(self, local_repos: Sequence[Path], hosted_names: Collection[str]) -> CategoryPartition:
        """Classify each directory. A failure degrades that entry to PROBLEMS."""
        partition = CategoryPartition()

        with tqdm(total=len(local_repos), desc="Analyzing", unit="repo", disable=not self.show_progress) as pbar:
            for repo_path in local_repos:
                pbar.set_postfix_str(repo_path.name, refresh=True)
                observation = self._observe(repo_path, hosted_names)
                self.output.debug(f"{repo_path}: {observation.category.name}")
                partition.add(observation)
                pbar.update(1)

        return partition

    def _observe(self, repo_path: Path, hosted_names: Collection[str]) -> RepositoryObservation:
        name = repo_path.name
        try:
            if not self.is_repository(repo_path):
                return self._problem(repo_path, hosted_names, "Not a valid git repository")
            return self.resolver.resolve(repo_path, name, hosted_names)
        except Exception as e:
            self._logger.warning("Analysis of %s failed: %s", repo_path, e)
            return self._problem(repo_path, hosted_names, f"Analysis failed: {e}")

    @staticmethod
    def _problem(repo_path: Path, hosted_names: Collection[str], error: str) -> RepositoryObservation:
        return RepositoryObservation(
            name=repo_path.name,
            path=repo_path,
            has_commits=False,
            remotes=(),
            hosted_exists=repo_path.name in hosted_names,
            remote_working=False,
            category=Category.PROBLEMS,
            error=error,
        )
