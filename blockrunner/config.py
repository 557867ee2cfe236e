"""
Blockrunner Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Driver cadence: milliseconds between two engine steps
    TICK_MS: int = int(os.getenv("BLOCKRUNNER_TICK_MS", "800"))

    # Safety limit for drivers; WHILE_PATH bodies that never move spin forever
    MAX_STEPS: int = int(os.getenv("BLOCKRUNNER_MAX_STEPS", "500"))

    # Output
    VERBOSE: bool = os.getenv("BLOCKRUNNER_VERBOSE", "").lower() in ("1", "true", "yes")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    LEVELS_DIR: Path = Path(
        os.getenv("BLOCKRUNNER_LEVELS_DIR", str(PROJECT_ROOT / "examples" / "levels"))
    )

    @classmethod
    def tick_seconds(cls) -> float:
        return cls.TICK_MS / 1000.0

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are out of range."""
        if cls.TICK_MS < 0:
            raise ValueError(
                f"BLOCKRUNNER_TICK_MS must be zero or positive (got {cls.TICK_MS})"
            )

        if cls.MAX_STEPS <= 0:
            raise ValueError(
                f"BLOCKRUNNER_MAX_STEPS must be positive (got {cls.MAX_STEPS}). "
                "It bounds how long a single run may take."
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Blockrunner Configuration:",
            f"  Tick: {cls.TICK_MS}ms",
            f"  Max Steps: {cls.MAX_STEPS}",
            f"  Levels: {cls.LEVELS_DIR}",
            f"  Verbose: {cls.VERBOSE}",
        ]
        return "\n".join(lines)
