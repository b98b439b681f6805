"""ReportPresenter: renders analysis results and remediation outcomes."""

from __future__ import annotations

from pygit_reconcile.models import (
    Category,
    CategoryPartition,
    ReconcileConfig,
    RemediationOutcome,
    RemediationReport,
    RepositoryObservation,
)
from pygit_reconcile.output import SECTION_WIDTH
from pygit_reconcile.protocols import OutputHandler

# Rough cost of one operation, excluding the configured delay
CREATE_SECONDS = 10
RECONNECT_SECONDS = 2

CATEGORY_LABELS = {
    Category.ALREADY_SYNCED: "\u2705 Already synced",
    Category.NEEDS_RECONNECTION: "\U0001f517 Needs reconnection",
    Category.READY_TO_PUSH: "\u2b06\ufe0f  Ready to push",
    Category.NEEDS_COMMITS: "\U0001f4dd Needs commits",
    Category.PROBLEMS: "\U0001f534 Problems",
}


def estimate_seconds(partition: CategoryPartition, config: ReconcileConfig) -> float:
    """Estimated wall-clock time of remediating the partition."""
    creations = len(partition.get(Category.READY_TO_PUSH)) + len(partition.get(Category.NEEDS_COMMITS))
    reconnections = len(partition.get(Category.NEEDS_RECONNECTION))
    return (
        creations * CREATE_SECONDS
        + reconnections * RECONNECT_SECONDS
        + max(creations - 1, 0) * config.delay_seconds
    )


def format_duration(seconds: float) -> str:
    """Format seconds as e.g. '1h 05m', '3m 20s' or '45s'."""
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


class ReportPresenter:
    """Generates and displays analysis and remediation reports"""

    def __init__(self, output: OutputHandler):
        """Create a presenter that writes to the given output handler."""
        self.output = output

    def print_analysis(self, partition: CategoryPartition, config: ReconcileConfig):
        """Print category counts, the listings that need attention, and a time estimate."""
        self.output.section("\u2554" + "=" * SECTION_WIDTH + "\u2557")
        self.output.info("\u2551" + "ANALYSIS REPORT".center(SECTION_WIDTH) + "\u2551")
        self.output.info("\u255a" + "=" * SECTION_WIDTH + "\u255d")
        self.output.info("")
        self.output.info(f"Total repositories analyzed: {partition.total}")
        self.output.info("")

        for category, count in partition.counts().items():
            self.output.category(category, f"{CATEGORY_LABELS[category]}: {count}")
        self.output.info("")

        self._print_listing(Category.NEEDS_RECONNECTION, partition.get(Category.NEEDS_RECONNECTION))
        self._print_listing(Category.PROBLEMS, partition.get(Category.PROBLEMS))

        if not partition.needs_remediation():
            self.output.success("\u2705 NOTHING TO REMEDIATE")
            return

        self.output.info(
            f"\u23f1  Estimated remediation time: {format_duration(estimate_seconds(partition, config))}"
            f" ({config.delay_seconds:g}s between creations)"
        )
        if config.analyze_only:
            self.output.info("")
            self.output.info("\U0001f50d Analyze-only run - omit --analyze-only to apply changes")

    def print_remediation(self, report: RemediationReport):
        """Print the remediation summary with failed repositories and rate-limit hints."""
        self.output.section("REMEDIATION SUMMARY")
        self.output.success(f"Succeeded: {len(report.succeeded)}")
        self.output.info(f"Skipped: {len(report.skipped)}")
        if report.failed:
            self.output.error(f"Failed: {len(report.failed)}")
            self._print_failures(report.failed)
        else:
            self.output.info("Failed: 0")

        if report.rate_limited:
            self.output.info("")
            self.output.warning(
                f"\u26a0 {len(report.rate_limited)} creation(s) hit the hosting rate limit."
            )
            self.output.info("\u2022 Wait before re-running, or increase --delay")

        self.output.info("")
        self.output.info("=" * SECTION_WIDTH)

    def _print_listing(self, category: Category, observations: list[RepositoryObservation]):
        """Print one category with a line per repository."""
        if not observations:
            return

        self.output.info(f"{CATEGORY_LABELS[category]} ({len(observations)}):")
        self.output.info("-" * SECTION_WIDTH)
        for obs in observations:
            self.output.info(f"  \U0001f4c1 {obs.path}")
            if obs.error:
                self.output.info(f"     \u21b3 {obs.error}")
            elif category == Category.PROBLEMS:
                self.output.info("     \u21b3 hosted repository exists but local history is empty")
            for name, url in obs.remotes:
                self.output.info(f"     \U0001f517 {name}: {url or '(no url)'}")
        self.output.info("")

    def _print_failures(self, failures: list[RemediationOutcome]):
        for outcome in failures:
            self.output.info(f"  \U0001f4c1 {outcome.observation.path}")
            self.output.info(f"     \u21b3 {outcome.action.name}: {outcome.message}")
