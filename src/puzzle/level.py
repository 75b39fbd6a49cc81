"""
Level payload loading and validation.

A level file holds the initial grid, the full exploration tree, the word
length and the target depth for one difficulty on one day.
"""

import hashlib
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from .grid import are_adjacent, in_bounds
from .models import ExplorationNodeData, GameData, Grid
from .tree import ExplorationTree

logger = logging.getLogger("wordswap.level")


class LevelDataError(ValueError):
    """The level payload is missing or malformed."""


class LevelNotFoundError(ValueError):
    """No level file exists for the requested day and difficulty."""


def content_hash(payload: Dict[str, Any]) -> str:
    """Fingerprint of a level payload, used to invalidate stale saved progress."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


def get_formatted_date(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def get_data_file_path(day: date) -> str:
    """File name of a day's level inside a difficulty directory."""
    return f"{get_formatted_date(day)}.json"


def _check_grid(grid: Any) -> List[str]:
    """Return a list of problems with a raw grid value (empty if it is fine)."""
    if not isinstance(grid, list) or not grid:
        return ["initial grid is missing or empty"]

    problems: List[str] = []
    width = None
    for r, row in enumerate(grid):
        if not isinstance(row, list) or not row:
            problems.append(f"row {r} is not a non-empty list")
            continue
        if width is None:
            width = len(row)
        elif len(row) != width:
            problems.append(f"row {r} has {len(row)} cells, expected {width}")
        for c, cell in enumerate(row):
            if not isinstance(cell, str) or len(cell) != 1:
                problems.append(f"cell ({r}, {c}) is not a single character")
    return problems


def _check_moves(grid: Grid, nodes: List[ExplorationNodeData]) -> List[str]:
    """Every tree move must be an in-bounds swap of adjacent cells."""
    problems: List[str] = []
    stack = list(nodes)
    while stack:
        node = stack.pop()
        a, b = node.move.from_cell, node.move.to_cell
        if not (in_bounds(grid, a) and in_bounds(grid, b)):
            problems.append(f"move {a.as_tuple()}-{b.as_tuple()} is outside the grid")
        elif not are_adjacent(a, b):
            problems.append(f"move {a.as_tuple()}-{b.as_tuple()} swaps non-adjacent cells")
        stack.extend(node.next_moves)
    return problems


def parse_level(payload: Any, difficulty: str = "normal") -> GameData:
    """
    Validate a raw level payload and build its ``GameData``.

    Args:
        payload: Decoded JSON document of the level file
        difficulty: Difficulty tag recorded on the game data

    Returns:
        GameData with its content hash filled in

    Raises:
        LevelDataError: If the grid or the exploration tree is malformed
    """
    corrupted = f"Level data for {difficulty} is corrupted."

    if not isinstance(payload, dict):
        raise LevelDataError(corrupted)

    grid_problems = _check_grid(payload.get("initialGrid"))
    if grid_problems:
        logger.warning("Rejecting %s level: %s", difficulty, "; ".join(grid_problems))
        raise LevelDataError(corrupted)

    try:
        game_data = GameData.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning("Rejecting %s level: %s", difficulty, e)
        raise LevelDataError(corrupted) from e

    move_problems = _check_moves(game_data.initial_grid, game_data.exploration_tree)
    if move_problems:
        logger.warning("Rejecting %s level: %s", difficulty, "; ".join(move_problems[:5]))
        raise LevelDataError(corrupted)

    tree_depth = ExplorationTree.from_payload(game_data.exploration_tree).max_depth
    if "maxDepthReached" not in payload:
        game_data.max_depth_reached = tree_depth
    elif game_data.max_depth_reached != tree_depth:
        logger.warning(
            "%s level declares maxDepthReached=%d but its tree reaches %d",
            difficulty, game_data.max_depth_reached, tree_depth,
        )

    game_data.difficulty = payload.get("difficulty") or difficulty
    game_data.content_hash = content_hash(payload)
    return game_data


def load_level_file(path: str | Path, difficulty: str = "normal") -> GameData:
    """
    Read and validate a level file.

    Raises:
        LevelNotFoundError: If the file does not exist
        LevelDataError: If the file is not valid JSON or not a valid level
    """
    path = Path(path)
    if not path.exists():
        raise LevelNotFoundError(
            f"Today's {difficulty} level is not available yet. Please check back later!"
        )

    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Level file %s is not valid JSON: %s", path, e)
        raise LevelDataError(f"Level data for {difficulty} is corrupted.") from e

    logger.info("Loaded %s level from %s", difficulty, path)
    return parse_level(payload, difficulty)


def load_daily_level(levels_dir: str | Path, day: date, difficulty: str) -> GameData:
    """Load ``<levels_dir>/<difficulty>/<YYYY-MM-DD>.json``."""
    return load_level_file(Path(levels_dir) / difficulty / get_data_file_path(day), difficulty)
