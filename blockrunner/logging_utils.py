"""Logging utilities for Blockrunner runs.

Provides color-coded output to distinguish ordinary steps, denied actions,
and the final outcome of a run.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for step outcomes
    BLUE = "\033[94m"      # Ordinary steps
    YELLOW = "\033[93m"    # Denied actions (run continues)
    RED = "\033[91m"       # Failures and driver errors
    GREEN = "\033[92m"     # Level completed
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if BLOCKRUNNER_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("BLOCKRUNNER_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


# Markers for step outcomes (color-blind accessible)
LOG_TAG_STEP = "[•]"
LOG_TAG_DENIED = "[~]"
LOG_TAG_FAILURE = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"


def log_step(message: str) -> None:
    """Log an ordinary step (blue)."""
    print(colored(f"{LOG_TAG_STEP} {message}", Color.BLUE))


def log_denied(message: str) -> None:
    """Log a blocked move or jump (yellow)."""
    print(colored(f"{LOG_TAG_DENIED} {message}", Color.YELLOW))


def log_failure(message: str) -> None:
    """Log a failed or errored run (red)."""
    print(colored(f"{LOG_TAG_FAILURE} {message}", Color.RED, bold=True))


def log_success(message: str) -> None:
    """Log a completed level (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN, bold=True))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))
