"""Protocols and abstract interfaces for dependency injection."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pygit_reconcile.models import Category, OperationResult, Visibility


class GitRepository(Protocol):
    """Protocol for git operations bound to one repository path"""

    def most_recent_commit(self) -> str | None: ...
    def list_remotes(self) -> list[tuple[str, str]]: ...
    def remove_remote(self, name: str) -> OperationResult: ...
    def add_remote(self, name: str, url: str) -> OperationResult: ...
    def probe_remote_reachable(self, name: str, timeout: float | None = None) -> bool: ...
    def stage_all(self) -> OperationResult: ...
    def commit(self, message: str) -> OperationResult: ...
    def get_config(self, section: str, option: str) -> str | None: ...
    def set_config(self, section: str, option: str, value: str) -> OperationResult: ...
    def close(self) -> None: ...

    @property
    def path(self) -> Path: ...


class HostingClient(Protocol):
    """Protocol for the hosted repository service"""

    def list_repository_names(self, limit: int) -> list[str]: ...
    def get_authenticated_owner(self) -> str | None: ...
    def create_repository(
        self, path: Path, name: str, visibility: Visibility, push: bool = True
    ) -> OperationResult: ...


class OutputHandler(Protocol):
    """Protocol for handling output"""

    def info(self, message: str, indent: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def category(self, category: Category, message: str, indent: int = 0) -> None: ...
    def section(self, title: str) -> None: ...
    def debug(self, message: str) -> None: ...
