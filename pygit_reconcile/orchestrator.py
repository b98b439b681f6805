"""ReconcileOrchestrator: discover, analyze, report, confirm, remediate."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from pygit_reconcile.engine import AnalysisEngine
from pygit_reconcile.hosting import HostedRepositoryIndex
from pygit_reconcile.models import ReconcileConfig, ReconcileResult
from pygit_reconcile.protocols import GitRepository, HostingClient, OutputHandler
from pygit_reconcile.remediator import Remediator
from pygit_reconcile.reporter import ReportPresenter
from pygit_reconcile.repository import GitPythonRepository
from pygit_reconcile.resolver import RemoteResolver
from pygit_reconcile.scanner import RepositoryScanner

CONFIRMATION_WORD = 'yes'


class ReconcileOrchestrator:
    """Main orchestrator - coordinates a full reconcile run"""

    def __init__(
        self,
        config: ReconcileConfig,
        output: OutputHandler,
        hosting: HostingClient,
        confirm: Callable[[str], str] = input,
        repo_factory: Callable[[Path], GitRepository] = GitPythonRepository,
        is_repository: Callable[[Path], bool] = GitPythonRepository.is_repository,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Create an orchestrator. Collaborators are injectable for testing."""
        self.config = config
        self.output = output
        self.hosting = hosting
        self.confirm = confirm
        self.scanner = RepositoryScanner(config.exclude_patterns)
        self.presenter = ReportPresenter(output)
        self.engine = AnalysisEngine(
            RemoteResolver(config.host, config.probe_timeout, repo_factory),
            output,
            is_repository=is_repository,
            show_progress=not config.json_output,
        )
        self.remediator = Remediator(hosting, output, config, repo_factory, sleep)

    def run(self, search_dir: Path) -> ReconcileResult:
        """Reconcile every repository under search_dir.

        Raises HostingError if the hosted repository list cannot be fetched,
        since no repository can be classified without it.
        """
        repos = list(self.scanner.find_repositories(search_dir))

        if not repos:
            self.output.warning(f"No git repositories found in {search_dir}")
            return ReconcileResult()

        self.output.info(f"Found {len(repos)} repositories")

        index = HostedRepositoryIndex.fetch(self.hosting, self.config.repo_limit)
        self.output.info(f"Found {len(index)} hosted repositories")

        partition = self.engine.analyze(repos, index.names)
        self.presenter.print_analysis(partition, self.config)

        result = ReconcileResult(partition)
        if self.config.analyze_only or not partition.needs_remediation():
            return result

        if not self._confirmed():
            self.output.warning("Remediation cancelled - no changes were made")
            result.remediation_declined = True
            return result

        result.report = self.remediator.run(partition)
        self.presenter.print_remediation(result.report)
        return result

    def _confirmed(self) -> bool:
        """Ask the operator to type the confirmation word."""
        answer = self.confirm(f"Type '{CONFIRMATION_WORD}' to apply these changes: ")
        return answer.strip() == CONFIRMATION_WORD
