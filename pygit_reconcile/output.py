"""Output handler implementations: console and null."""

from __future__ import annotations

import sys

from colorama import Fore, Style
from tqdm import tqdm

from pygit_reconcile.models import Category

SECTION_WIDTH = 50

CATEGORY_COLORS = {
    Category.ALREADY_SYNCED: Fore.GREEN,
    Category.NEEDS_RECONNECTION: Fore.YELLOW,
    Category.READY_TO_PUSH: Fore.CYAN,
    Category.NEEDS_COMMITS: Fore.BLUE,
    Category.PROBLEMS: Fore.RED,
}


class ConsoleOutputHandler:
    """Console output with colors, routed through tqdm so progress bars stay intact."""

    def __init__(self, verbose: bool = False, use_color: bool | None = None):
        """Create a console handler. Colors default to on when stdout is a terminal."""
        self.verbose = verbose
        self.use_color = sys.stdout.isatty() if use_color is None else use_color

    def _emit(self, message: str, indent: int = 0, color: str = '') -> None:
        if color and self.use_color and message:
            message = f"{color}{message}{Style.RESET_ALL}"
        tqdm.write("  " * indent + message)

    def info(self, message: str, indent: int = 0) -> None:
        """Print an informational message."""
        self._emit(message, indent)

    def success(self, message: str, indent: int = 0) -> None:
        """Print a green success message."""
        self._emit(message, indent, Fore.GREEN)

    def warning(self, message: str, indent: int = 0) -> None:
        """Print a yellow warning message."""
        self._emit(message, indent, Fore.YELLOW)

    def error(self, message: str, indent: int = 0) -> None:
        """Print a red error message."""
        self._emit(message, indent, Fore.RED)

    def category(self, category: Category, message: str, indent: int = 0) -> None:
        """Print a message in the color associated with a category."""
        self._emit(message, indent, CATEGORY_COLORS[category])

    def section(self, title: str) -> None:
        """Print a section header with a divider line."""
        tqdm.write("")
        tqdm.write(title)
        tqdm.write("-" * SECTION_WIDTH)

    def debug(self, message: str) -> None:
        """Print a cyan debug message (only when verbose is enabled)."""
        if self.verbose:
            self._emit(f"[DEBUG] {message}", color=Fore.CYAN)


class NullOutputHandler:
    """Silent output handler for testing and JSON mode."""

    def info(self, message: str, indent: int = 0) -> None:
        pass

    def success(self, message: str, indent: int = 0) -> None:
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        pass

    def error(self, message: str, indent: int = 0) -> None:
        pass

    def category(self, category: Category, message: str, indent: int = 0) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass
