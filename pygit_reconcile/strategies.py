"""Remediation strategies: one class per remediable category."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from pygit_reconcile.hosting import is_rate_limited
from pygit_reconcile.models import (
    Category,
    ReconcileConfig,
    RemediationAction,
    RemediationOutcome,
    RemediationStatus,
    RepositoryObservation,
)
from pygit_reconcile.protocols import GitRepository, HostingClient, OutputHandler
from pygit_reconcile.repository import GitPythonRepository
from pygit_reconcile.resolver import expected_remote_url

INITIAL_COMMIT_MESSAGE = "Initial commit"
FALLBACK_USER_NAME = "pygit-reconcile"
FALLBACK_USER_EMAIL = "pygit-reconcile@users.noreply.github.com"


class RemediationStrategy(ABC):
    """Abstract strategy for remediating one repository."""

    action = RemediationAction.NONE

    def __init__(
        self,
        hosting: HostingClient,
        output: OutputHandler,
        config: ReconcileConfig,
        repo_factory: Callable[[Path], GitRepository] = GitPythonRepository,
    ):
        """Initialize with a hosting client, output handler, and run configuration."""
        self.hosting = hosting
        self.output = output
        self.config = config
        self.repo_factory = repo_factory
        self._logger = logging.getLogger(__name__)

    @abstractmethod
    def can_handle(self, observation: RepositoryObservation) -> bool:
        """Return True if this strategy applies to the observation's category."""
        pass

    @abstractmethod
    def remediate(self, observation: RepositoryObservation) -> RemediationOutcome:
        """Apply the corrective action once and report the terminal state."""
        pass

    def _outcome(
        self, observation: RepositoryObservation, status: RemediationStatus,
        message: str = '', rate_limited: bool = False,
    ) -> RemediationOutcome:
        return RemediationOutcome(observation, self.action, status, message, rate_limited)

    def _remove_all_remotes(self, repo: GitRepository) -> None:
        """Best-effort removal of every configured remote."""
        for name, _url in repo.list_remotes():
            result = repo.remove_remote(name)
            if result.success:
                self.output.debug(f"Removed remote {name} from {repo.path}")
            else:
                self._logger.warning("Could not remove remote %s from %s: %s", name, repo.path, result.error)
                self.output.warning(f"\u26a0 Could not remove remote {name}", indent=1)


class ReconnectStrategy(RemediationStrategy):
    """Strategy for repositories whose hosted counterpart exists but no remote reaches it."""

    action = RemediationAction.RECONNECT

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._owner: str | None = None

    def can_handle(self, observation: RepositoryObservation) -> bool:
        """Match NEEDS_RECONNECTION."""
        return observation.category == Category.NEEDS_RECONNECTION

    def remediate(self, observation: RepositoryObservation) -> RemediationOutcome:
        """Drop all remotes and point origin at the authenticated owner's repository."""
        repo = self.repo_factory(observation.path)
        try:
            self._remove_all_remotes(repo)

            owner = self._resolve_owner()
            if owner is None:
                self.output.error("\u2717 Could not determine the authenticated account", indent=1)
                return self._outcome(observation, RemediationStatus.FAILED, "Owner could not be resolved")

            url = expected_remote_url(self.config.host, owner, observation.name)
            result = repo.add_remote('origin', url)
        finally:
            repo.close()

        if result.success:
            self.output.success(f"\u2713 Reconnected to {url}", indent=1)
            return self._outcome(observation, RemediationStatus.SUCCEEDED, url)
        self.output.error(f"\u2717 Failed to add remote: {result.error or result.message}", indent=1)
        return self._outcome(observation, RemediationStatus.FAILED, result.message)

    def _resolve_owner(self) -> str | None:
        """Look the owner up once; a failed lookup is retried for the next repository."""
        if self._owner is None:
            self._owner = self.hosting.get_authenticated_owner()
        return self._owner


class CreateAndPushStrategy(RemediationStrategy):
    """Strategy for repositories with history and no hosted counterpart."""

    action = RemediationAction.CREATE_AND_PUSH

    def __init__(self, *args, before_create: Callable[[], None] | None = None, **kwargs):
        """before_create runs right before every hosting create call."""
        super().__init__(*args, **kwargs)
        self.before_create = before_create

    def can_handle(self, observation: RepositoryObservation) -> bool:
        """Match READY_TO_PUSH."""
        return observation.category == Category.READY_TO_PUSH

    def remediate(self, observation: RepositoryObservation) -> RemediationOutcome:
        """Prepare the working copy, then create the hosted repository and push in one call."""
        repo = self.repo_factory(observation.path)
        try:
            failure = self._prepare(repo)
            if failure is not None:
                self.output.error(f"\u2717 {failure}", indent=1)
                return self._outcome(observation, RemediationStatus.FAILED, failure)
            self._remove_all_remotes(repo)
        finally:
            repo.close()

        if self.before_create is not None:
            self.before_create()
        result = self.hosting.create_repository(
            observation.path, observation.name, self.config.visibility, push=True
        )
        if result.success:
            self.output.success(f"\u2713 {result.message}", indent=1)
            return self._outcome(observation, RemediationStatus.SUCCEEDED, result.message)

        limited = is_rate_limited(result.message)
        self.output.error(f"\u2717 Create failed: {result.message}", indent=1)
        if limited:
            self.output.warning("\u26a0 RATE LIMITED: the hosting service is throttling requests", indent=1)
            self.output.warning("  Consider re-running later with a larger --delay", indent=1)
        return self._outcome(observation, RemediationStatus.FAILED, result.message, rate_limited=limited)

    def _prepare(self, repo: GitRepository) -> str | None:
        """Hook run before remote cleanup. Return an error message to abort this repository."""
        return None


class CommitAndPushStrategy(CreateAndPushStrategy):
    """Strategy for repositories with no history and no hosted counterpart."""

    def can_handle(self, observation: RepositoryObservation) -> bool:
        """Match NEEDS_COMMITS."""
        return observation.category == Category.NEEDS_COMMITS

    def _prepare(self, repo: GitRepository) -> str | None:
        """Create the single initial commit. No push is attempted if this fails."""
        self._ensure_identity(repo)

        staged = repo.stage_all()
        if not staged.success:
            return f"Staging failed: {staged.error or staged.message}"

        committed = repo.commit(INITIAL_COMMIT_MESSAGE)
        if not committed.success:
            return f"Commit failed: {committed.error or committed.message}"

        self.output.success(f"\u2713 Created commit: {INITIAL_COMMIT_MESSAGE}", indent=1)
        return None

    def _ensure_identity(self, repo: GitRepository) -> None:
        """Set a fallback committer identity only where none is configured."""
        for option, fallback in (('name', FALLBACK_USER_NAME), ('email', FALLBACK_USER_EMAIL)):
            if repo.get_config('user', option):
                continue
            result = repo.set_config('user', option, fallback)
            if result.success:
                self.output.info(f"Using fallback user.{option}: {fallback}", indent=1)
            else:
                self._logger.warning("Could not set user.%s in %s: %s", option, repo.path, result.error)
