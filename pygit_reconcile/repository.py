"""Concrete GitPython-based repository implementation."""

from __future__ import annotations

import logging
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from pygit_reconcile.models import OperationResult, OperationType

# Keeps git from blocking on a credential prompt while probing remotes
_NON_INTERACTIVE_ENV = {'GIT_TERMINAL_PROMPT': '0'}


class GitPythonRepository:
    """Concrete implementation using GitPython.

    Every command runs against the repository path given at construction,
    so the process working directory is never touched.
    """

    def __init__(self, repo_path: Path):
        """Open a git repository at the given path."""
        self._path = repo_path
        self._repo = Repo(repo_path)
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def is_repository(path: Path) -> bool:
        """Return True if path is the root of a non-bare working repository."""
        try:
            repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError):
            return False
        try:
            return not repo.bare
        finally:
            repo.close()

    def close(self) -> None:
        """Release underlying git resources."""
        self._repo.close()

    @property
    def path(self) -> Path:
        """Absolute path to the repository root."""
        return self._path

    def most_recent_commit(self) -> str | None:
        """Hash of the latest commit on HEAD, or None for an empty history."""
        try:
            sha = self._repo.git.log('-1', '--format=%H').strip()
        except GitCommandError as e:
            self._logger.debug("No commits in %s: %s", self._path, e)
            return None
        return sha or None

    def list_remotes(self) -> list[tuple[str, str]]:
        """Return (name, url) for every configured remote, in config order."""
        remotes = []
        for remote in self._repo.remotes:
            try:
                url = self._repo.git.remote('get-url', remote.name).strip()
            except GitCommandError:
                url = ''
            remotes.append((remote.name, url))
        return remotes

    def remove_remote(self, name: str) -> OperationResult:
        """Delete a configured remote by name."""
        try:
            self._repo.git.remote('remove', name)
            return OperationResult(True, OperationType.REMOTE_REMOVE, f"Removed remote {name}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.REMOTE_REMOVE, "Remote removal failed", e)

    def add_remote(self, name: str, url: str) -> OperationResult:
        """Add a remote pointing at url."""
        try:
            self._repo.git.remote('add', name, url)
            return OperationResult(True, OperationType.REMOTE_ADD, f"Added remote {name} -> {url}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.REMOTE_ADD, "Remote add failed", e)

    def probe_remote_reachable(self, name: str, timeout: float | None = None) -> bool:
        """Return True if the remote answers for its HEAD ref.

        Uses `git ls-remote --exit-code`, which transfers no objects and fails
        when the remote is unreachable or has no HEAD.
        """
        kwargs = {'env': _NON_INTERACTIVE_ENV}
        if timeout:
            kwargs['kill_after_timeout'] = timeout
        try:
            self._repo.git.ls_remote('--exit-code', name, 'HEAD', **kwargs)
            return True
        except GitCommandError as e:
            self._logger.debug("Remote %s of %s unreachable: %s", name, self._path, e)
            return False

    def stage_all(self) -> OperationResult:
        """Stage every change in the working tree, including untracked files."""
        try:
            self._repo.git.add('-A')
            return OperationResult(True, OperationType.STAGE, "Staged all changes")
        except GitCommandError as e:
            return OperationResult(False, OperationType.STAGE, "Staging failed", e)

    def commit(self, message: str) -> OperationResult:
        """Commit the staged content."""
        try:
            self._repo.git.commit('-m', message)
            return OperationResult(True, OperationType.COMMIT, f"Committed: {message}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.COMMIT, "Commit failed", e)

    def get_config(self, section: str, option: str) -> str | None:
        """Effective value of section.option across all config levels, or None."""
        try:
            value = self._repo.git.config('--get', f'{section}.{option}').strip()
        except GitCommandError:
            return None
        return value or None

    def set_config(self, section: str, option: str, value: str) -> OperationResult:
        """Set section.option in the repository-local config."""
        try:
            self._repo.git.config('--local', f'{section}.{option}', value)
            return OperationResult(True, OperationType.CONFIG, f"Set {section}.{option}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.CONFIG, "Config update failed", e)
