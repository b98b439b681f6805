"""
pygit-reconcile: Git Repository Reconcile Tool

Recursively discovers git repositories under a directory, classifies each one
against the repositories hosted on GitHub, and reconnects or publishes the
ones that are out of sync.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "1.0.0"

# Re-export public API so `from pygit_reconcile import X` keeps working.
from pygit_reconcile.classifier import classify  # noqa: E402
from pygit_reconcile.cli import main  # noqa: E402
from pygit_reconcile.config import (  # noqa: E402
    build_config,
    create_argument_parser,
    load_config_file,
)
from pygit_reconcile.engine import AnalysisEngine  # noqa: E402
from pygit_reconcile.hosting import (  # noqa: E402
    GitHubCliClient,
    HostedRepositoryIndex,
    HostingError,
    is_rate_limited,
)
from pygit_reconcile.models import (  # noqa: E402
    DEFAULT_EXCLUDE_PATTERNS,
    Category,
    CategoryPartition,
    OperationResult,
    OperationType,
    ReconcileConfig,
    ReconcileResult,
    RemediationAction,
    RemediationOutcome,
    RemediationReport,
    RemediationStatus,
    RepositoryObservation,
    Visibility,
)
from pygit_reconcile.orchestrator import CONFIRMATION_WORD, ReconcileOrchestrator  # noqa: E402
from pygit_reconcile.output import (  # noqa: E402
    SECTION_WIDTH,
    ConsoleOutputHandler,
    NullOutputHandler,
)
from pygit_reconcile.protocols import GitRepository, HostingClient, OutputHandler  # noqa: E402
from pygit_reconcile.remediator import Remediator  # noqa: E402
from pygit_reconcile.reporter import ReportPresenter, estimate_seconds, format_duration  # noqa: E402
from pygit_reconcile.repository import GitPythonRepository  # noqa: E402
from pygit_reconcile.resolver import (  # noqa: E402
    RemoteResolver,
    expected_remote_url,
    remote_url_pattern,
)
from pygit_reconcile.scanner import RepositoryScanner  # noqa: E402
from pygit_reconcile.strategies import (  # noqa: E402
    INITIAL_COMMIT_MESSAGE,
    CommitAndPushStrategy,
    CreateAndPushStrategy,
    ReconnectStrategy,
    RemediationStrategy,
)

__all__ = [
    "__version__",
    # Models
    "Category",
    "CategoryPartition",
    "DEFAULT_EXCLUDE_PATTERNS",
    "OperationResult",
    "OperationType",
    "ReconcileConfig",
    "ReconcileResult",
    "RemediationAction",
    "RemediationOutcome",
    "RemediationReport",
    "RemediationStatus",
    "RepositoryObservation",
    "Visibility",
    # Protocols
    "GitRepository",
    "HostingClient",
    "OutputHandler",
    # Implementations
    "GitPythonRepository",
    "GitHubCliClient",
    "HostedRepositoryIndex",
    "HostingError",
    "ConsoleOutputHandler",
    "NullOutputHandler",
    "SECTION_WIDTH",
    # Classification
    "classify",
    "RemoteResolver",
    "expected_remote_url",
    "remote_url_pattern",
    "is_rate_limited",
    # Strategies
    "INITIAL_COMMIT_MESSAGE",
    "CommitAndPushStrategy",
    "CreateAndPushStrategy",
    "ReconnectStrategy",
    "RemediationStrategy",
    # Services
    "AnalysisEngine",
    "Remediator",
    "RepositoryScanner",
    "ReconcileOrchestrator",
    "ReportPresenter",
    "CONFIRMATION_WORD",
    "estimate_seconds",
    "format_duration",
    # Config / CLI
    "build_config",
    "create_argument_parser",
    "load_config_file",
    "main",
]
