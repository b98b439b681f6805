"""Repository scanner: finds git working copies under a directory."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from pygit_reconcile.models import DEFAULT_EXCLUDE_PATTERNS


class RepositoryScanner:
    """Responsible for finding candidate repositories.

    Built-in exclusions name tool directories (``dist``, ``venv``...) and only
    match a whole directory name, so ``distance-calc`` is still discovered.
    Any other pattern is a substring of the path below the search root.
    """

    def __init__(
        self,
        exclude_patterns: Iterable[str] = None,
        directory_patterns: Iterable[str] = DEFAULT_EXCLUDE_PATTERNS,
    ):
        patterns = list(exclude_patterns or [])
        builtin = set(directory_patterns)
        self.directory_patterns = frozenset(p for p in patterns if p in builtin)
        self.substring_patterns = [p for p in patterns if p not in self.directory_patterns]

    def find_repositories(self, search_dir: Path) -> Iterator[Path]:
        """Yield each top-most working copy once, without following symlinks."""
        seen: set[Path] = set()
        for dirpath, dirnames, _filenames in os.walk(search_dir, followlinks=False):
            current = Path(dirpath)
            relative = current.relative_to(search_dir)

            if relative.parts and self._is_excluded(relative):
                dirnames.clear()
                continue

            if '.git' not in dirnames:
                continue

            # A working copy is a leaf: nested repositories belong to it
            dirnames.clear()
            real = current.resolve()
            if real not in seen:
                seen.add(real)
                yield current

    def _is_excluded(self, relative: Path) -> bool:
        if self.directory_patterns.intersection(relative.parts):
            return True
        text = str(relative)
        return any(pattern in text for pattern in self.substring_patterns)
