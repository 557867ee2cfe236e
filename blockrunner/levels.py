"""
Level loading from JSON files.

This module provides LevelLoader for converting JSON level files into
``Level`` objects. A level file describes one puzzle:
- The grid, as rows of compact symbols or rows of tile names
- The runner's starting pose
- The blocks offered to the player
- The number of stars required before the flag counts as a win
- Optional par score and tutorial text

Level file structure:
```json
{
  "id": 3,
  "name": "Star Catcher",
  "tutorialText": "Collect the star before reaching the flag!",
  "availableBlocks": ["MOVE_FORWARD", "TURN_LEFT", "TURN_RIGHT"],
  "minStars": 1,
  "start": {"x": 1, "y": 1, "dir": "RIGHT"},
  "grid": [
    "#####",
    "#S*F#",
    "#####"
  ]
}
```

Grid symbols: ``.`` empty, ``#`` wall, ``S`` start, ``F`` flag, ``*`` star,
``O`` hole, ``K`` key, ``D`` door. Rows may instead be lists whose entries are
symbols or tile names (``"WALL"``, ``"STAR"``, ...). The game's level-table
shorthand also parses: ``W`` wall, ``E`` empty, and ``ST`` star in list rows.

Usage:
    loader = LevelLoader()
    level = loader.load("star_catcher")
    engine = ExecutionEngine(program, level)
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Config
from .schemas import Level


class LevelLoader:
    """Load and validate levels from a directory of JSON files.

    Directory structure:
    - Default: ``Config.LEVELS_DIR`` ({PROJECT_ROOT}/examples/levels/)
    - Override via constructor: LevelLoader(Path("/custom/levels"))
    - Level files: {level_name}.json (e.g., "star_catcher.json")

    Validation:
    - Required fields: name, grid, start
    - Raises ValueError for missing fields or unknown grid symbols
    - Pydantic raises ValidationError for ragged grids or bad poses
    """

    def __init__(self, levels_dir: Optional[Path] = None):
        """Initialize level loader.

        Args:
            levels_dir: Directory containing level files.
                        Defaults to Config.LEVELS_DIR
        """
        self.levels_dir = Path(levels_dir) if levels_dir else Config.LEVELS_DIR

    def load(self, level_name: str) -> Level:
        """Load a level by name from its JSON file.

        Args:
            level_name: Name of level (without .json extension)

        Returns:
            Validated Level ready to hand to ExecutionEngine

        Raises:
            FileNotFoundError: If the level file doesn't exist in levels_dir
            ValueError: If the JSON is missing required fields
            json.JSONDecodeError: If the file contains invalid JSON
        """
        level_path = self.levels_dir / f"{level_name}.json"

        if not level_path.exists():
            raise FileNotFoundError(f"Level '{level_name}' not found at {level_path}")

        data = json.loads(level_path.read_text())
        return self.parse(data)

    def parse(self, data: Dict[str, Any]) -> Level:
        """Validate raw level data into a Level."""
        self._validate_level(data)
        return Level.model_validate(data)

    def _validate_level(self, data: Dict[str, Any]) -> None:
        """Validate level data has required fields.

        Raises:
            ValueError: If required fields are missing or the grid is empty
        """
        if not isinstance(data, dict):
            raise ValueError("Level file must contain a JSON object")

        required = ["name", "grid", "start"]
        missing = [field for field in required if field not in data]

        if missing:
            raise ValueError(f"Level missing required fields: {missing}")

        if not data["grid"]:
            raise ValueError("Level grid must have at least one row")

    def list_levels(self) -> List[str]:
        """List all available level files, ordered by level id then name.

        Returns:
            List of level names (without .json extension)
        """
        if not self.levels_dir.exists():
            return []

        entries = []
        for path in self.levels_dir.glob("*.json"):
            if path.name.startswith("_"):
                continue
            data = json.loads(path.read_text())
            entries.append((int(data.get("id", 0)), path.stem))
        return [name for _, name in sorted(entries)]

    def get_level_info(self, level_name: str) -> Dict[str, Any]:
        """Get level metadata without validating the whole grid.

        Returns:
            Dict with id, name, tutorial text, size and star requirement
        """
        level_path = self.levels_dir / f"{level_name}.json"
        data = json.loads(level_path.read_text())
        grid = data.get("grid", [])

        return {
            "id": data.get("id", 0),
            "name": data.get("name", level_name),
            "tutorial_text": data.get("tutorialText", data.get("tutorial_text")),
            "rows": len(grid),
            "cols": len(grid[0]) if grid else 0,
            "min_stars": data.get("minStars", data.get("min_stars", 0)),
        }


def load_level(level_name: str) -> Level:
    """Convenience function to load a level from the default directory.

    Args:
        level_name: Name of level to load

    Returns:
        Validated Level
    """
    loader = LevelLoader()
    return loader.load(level_name)
