"""Classifier: maps observed repository facts to a sync category."""

from __future__ import annotations

from pygit_reconcile.models import Category


def classify(hosted_exists: bool, remote_working: bool, has_commits: bool) -> Category:
    """Return the category for one repository.

    Total over all eight inputs. A hosted repository with an empty local
    history cannot be fixed automatically and lands in PROBLEMS.
    """
    if not has_commits:
        return Category.PROBLEMS if hosted_exists else Category.NEEDS_COMMITS
    if not hosted_exists:
        return Category.READY_TO_PUSH
    if remote_working:
        return Category.ALREADY_SYNCED
    return Category.NEEDS_RECONNECTION
