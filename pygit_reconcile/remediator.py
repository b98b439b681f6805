"""Remediator: applies corrective actions to a classified partition."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from tqdm import tqdm

from pygit_reconcile.models import (
    Category,
    CategoryPartition,
    ReconcileConfig,
    RemediationAction,
    RemediationOutcome,
    RemediationReport,
    RemediationStatus,
    RepositoryObservation,
)
from pygit_reconcile.protocols import GitRepository, HostingClient, OutputHandler
from pygit_reconcile.repository import GitPythonRepository
from pygit_reconcile.strategies import (
    CommitAndPushStrategy,
    CreateAndPushStrategy,
    ReconnectStrategy,
    RemediationStrategy,
)


class Remediator:
    """Runs reconnections, then creations, one attempt per repository.

    The fixed delay between creation attempts is the only throttling.
    PROBLEMS entries are never touched.
    """

    def __init__(
        self,
        hosting: HostingClient,
        output: OutputHandler,
        config: ReconcileConfig,
        repo_factory: Callable[[Path], GitRepository] = GitPythonRepository,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.hosting = hosting
        self.output = output
        self.config = config
        self.sleep = sleep
        self._logger = logging.getLogger(__name__)
        self._creations = 0

        self.reconnect_strategy = ReconnectStrategy(hosting, output, config, repo_factory)
        self.creation_strategies: list[RemediationStrategy] = [
            CreateAndPushStrategy(hosting, output, config, repo_factory, before_create=self._pace),
            CommitAndPushStrategy(hosting, output, config, repo_factory, before_create=self._pace),
        ]

    def run(self, partition: CategoryPartition) -> RemediationReport:
        """Remediate every actionable repository in the partition."""
        report = RemediationReport()

        for observation in partition.get(Category.ALREADY_SYNCED):
            report.add(RemediationOutcome(observation, RemediationAction.NONE, RemediationStatus.SKIPPED))

        reconnections = partition.get(Category.NEEDS_RECONNECTION)
        if reconnections:
            self.output.section(f"Reconnecting {len(reconnections)} repositories")
            for observation in reconnections:
                self.output.info(f"\u2500 {observation.name}")
                report.add(self._apply(self.reconnect_strategy, observation))

        queue = partition.get(Category.READY_TO_PUSH) + partition.get(Category.NEEDS_COMMITS)
        if queue:
            self.output.section(f"Creating {len(queue)} hosted repositories")
            self._create_all(queue, report)

        return report

    def _create_all(self, queue: list[RepositoryObservation], report: RemediationReport) -> None:
        self._creations = 0
        with tqdm(total=len(queue), desc="Creating", unit="repo", disable=self.config.json_output) as pbar:
            for observation in queue:
                pbar.set_postfix_str(observation.name, refresh=True)
                self.output.info(f"\u2500 {observation.name}")
                strategy = self._strategy_for(observation)
                report.add(self._apply(strategy, observation))
                pbar.update(1)

    def _pace(self) -> None:
        """Wait delay_seconds before every create call except the first of the run."""
        if self._creations and self.config.delay_seconds > 0:
            self.output.debug(f"Waiting {self.config.delay_seconds}s before next creation")
            self.sleep(self.config.delay_seconds)
        self._creations += 1

    def _strategy_for(self, observation: RepositoryObservation) -> RemediationStrategy:
        for strategy in self.creation_strategies:
            if strategy.can_handle(observation):
                return strategy
        raise ValueError(f"No creation strategy for {observation.category.name}")

    def _apply(self, strategy: RemediationStrategy, observation: RepositoryObservation) -> RemediationOutcome:
        """Run one strategy, converting any unexpected error into a FAILED outcome."""
        try:
            return strategy.remediate(observation)
        except Exception as e:
            self._logger.exception("Remediation of %s failed", observation.path)
            self.output.error(f"\u2717 Unexpected error: {e}", indent=1)
            return RemediationOutcome(observation, strategy.action, RemediationStatus.FAILED, f"Unexpected error: {e}")
