"""Domain models: enums, dataclasses, and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any

DEFAULT_EXCLUDE_PATTERNS = [
    'node_modules',
    '.venv',
    'venv',
    '__pycache__',
    'build',
    'dist',
    'target',
    'vendor',
    '.tox',
]


class Category(Enum):
    """Sync state of a local repository relative to the hosting service"""
    ALREADY_SYNCED = auto()
    NEEDS_RECONNECTION = auto()
    READY_TO_PUSH = auto()
    NEEDS_COMMITS = auto()
    PROBLEMS = auto()


class Visibility(Enum):
    """Visibility of newly created hosted repositories"""
    PUBLIC = 'public'
    PRIVATE = 'private'


class OperationType(Enum):
    """Types of git and hosting operations"""
    REMOTE_ADD = auto()
    REMOTE_REMOVE = auto()
    STAGE = auto()
    COMMIT = auto()
    CONFIG = auto()
    CREATE_REPO = auto()


class RemediationAction(Enum):
    """Corrective action applied to a repository"""
    NONE = auto()
    RECONNECT = auto()
    CREATE_AND_PUSH = auto()


class RemediationStatus(Enum):
    """Terminal state of a repository after remediation"""
    SKIPPED = auto()
    SUCCEEDED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class OperationResult:
    """Result of a single git or hosting operation"""
    success: bool
    operation: OperationType
    message: str
    error: Exception | None = None


@dataclass(frozen=True)
class RepositoryObservation:
    """What was observed about one local repository during analysis"""
    name: str
    path: Path
    has_commits: bool
    remotes: tuple[tuple[str, str], ...]
    hosted_exists: bool
    remote_working: bool
    category: Category
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'name': self.name,
            'path': str(self.path),
            'has_commits': self.has_commits,
            'remotes': [{'name': n, 'url': u} for n, u in self.remotes],
            'hosted_exists': self.hosted_exists,
            'remote_working': self.remote_working,
            'category': self.category.name,
            'error': self.error,
        }


class CategoryPartition:
    """One append-only list of observations per category"""

    def __init__(self):
        self._slots: dict[Category, list[RepositoryObservation]] = {c: [] for c in Category}

    def add(self, observation: RepositoryObservation) -> None:
        """Append an observation to the slot of its category."""
        self._slots[observation.category].append(observation)

    def get(self, category: Category) -> list[RepositoryObservation]:
        """Observations in one category, in discovery order."""
        return list(self._slots[category])

    def counts(self) -> dict[Category, int]:
        return {c: len(items) for c, items in self._slots.items()}

    @property
    def total(self) -> int:
        return sum(len(items) for items in self._slots.values())

    def needs_remediation(self) -> bool:
        """Return True if any repository needs a reconnect or a create/push."""
        return any(self._slots[c] for c in (
            Category.NEEDS_RECONNECTION, Category.READY_TO_PUSH, Category.NEEDS_COMMITS,
        ))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'total': self.total,
            'counts': {c.name: n for c, n in self.counts().items()},
            'repositories': {
                c.name: [obs.to_dict() for obs in items]
                for c, items in self._slots.items()
            },
        }


@dataclass(frozen=True)
class RemediationOutcome:
    """Immutable record of what happened to one repository"""
    observation: RepositoryObservation
    action: RemediationAction
    status: RemediationStatus
    message: str = ''
    rate_limited: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] {self.observation.path}: {self.status.name} {self.message}".rstrip()


@dataclass
class RemediationReport:
    """Mutable outcome accumulator"""
    outcomes: list[RemediationOutcome] = field(default_factory=list)

    def add(self, outcome: RemediationOutcome) -> None:
        self.outcomes.append(outcome)

    def get_by_status(self, status: RemediationStatus) -> list[RemediationOutcome]:
        """Filter outcomes by terminal state."""
        return [o for o in self.outcomes if o.status == status]

    @property
    def succeeded(self) -> list[RemediationOutcome]:
        return self.get_by_status(RemediationStatus.SUCCEEDED)

    @property
    def failed(self) -> list[RemediationOutcome]:
        return self.get_by_status(RemediationStatus.FAILED)

    @property
    def skipped(self) -> list[RemediationOutcome]:
        return self.get_by_status(RemediationStatus.SKIPPED)

    @property
    def rate_limited(self) -> list[RemediationOutcome]:
        return [o for o in self.outcomes if o.rate_limited]

    def has_failures(self) -> bool:
        """Return True if any remediation attempt failed."""
        return any(o.status == RemediationStatus.FAILED for o in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'succeeded': len(self.succeeded),
            'failed': len(self.failed),
            'skipped': len(self.skipped),
            'outcomes': [
                {
                    'name': o.observation.name,
                    'path': str(o.observation.path),
                    'action': o.action.name,
                    'status': o.status.name,
                    'message': o.message,
                    'rate_limited': o.rate_limited,
                    'timestamp': o.timestamp.isoformat(),
                }
                for o in self.outcomes
            ],
        }


@dataclass(frozen=True)
class ReconcileConfig:
    """Configuration for a reconcile run"""
    visibility: Visibility = Visibility.PRIVATE
    delay_seconds: float = 90
    analyze_only: bool = False
    exclude_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    host: str = 'github.com'
    repo_limit: int = 1000
    probe_timeout: float = 30
    verbose: bool = False
    json_output: bool = False


@dataclass
class ReconcileResult:
    """Everything a run produced"""
    partition: CategoryPartition = field(default_factory=CategoryPartition)
    report: RemediationReport | None = None
    remediation_declined: bool = False

    def has_critical_issues(self) -> bool:
        """Return True if any remediation attempt failed."""
        return self.report is not None and self.report.has_failures()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'analysis': self.partition.to_dict(),
            'remediation': self.report.to_dict() if self.report is not None else None,
            'remediation_declined': self.remediation_declined,
            'has_critical_issues': self.has_critical_issues(),
        }
