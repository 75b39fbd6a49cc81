"""Puzzle engine: grid model, exploration tree, state machine and chain analysis."""

from .models import (
    Grid,
    Difficulty,
    DIFFICULTIES,
    CellCoordinates,
    Move,
    ExplorationNodeData,
    GameData,
    HistoryEntry,
    MoveOption,
    CoreGameState,
    MoveDetails,
    SwapResult,
    UndoResult,
    SavedProgress,
    LevelCompletionSummary,
    DifficultyProgress,
    DailyProgress,
)
from .grid import are_adjacent, swap_cells, apply_moves, grids_equal, find_word_coordinates, render_grid
from .tree import ExplorationTree, TreeNode, ROOT
from .chain import best_child, deepest_path, find_longest_word_chain
from .level import (
    LevelDataError,
    LevelNotFoundError,
    content_hash,
    parse_level,
    load_level_file,
    load_daily_level,
)
from .logic import GameLogic

__all__ = [
    # Models
    "Grid",
    "Difficulty",
    "DIFFICULTIES",
    "CellCoordinates",
    "Move",
    "ExplorationNodeData",
    "GameData",
    "HistoryEntry",
    "MoveOption",
    "CoreGameState",
    "MoveDetails",
    "SwapResult",
    "UndoResult",
    "SavedProgress",
    "LevelCompletionSummary",
    "DifficultyProgress",
    "DailyProgress",
    # Grid utilities
    "are_adjacent",
    "swap_cells",
    "apply_moves",
    "grids_equal",
    "find_word_coordinates",
    "render_grid",
    # Exploration tree
    "ExplorationTree",
    "TreeNode",
    "ROOT",
    "best_child",
    "deepest_path",
    "find_longest_word_chain",
    # Levels
    "LevelDataError",
    "LevelNotFoundError",
    "content_hash",
    "parse_level",
    "load_level_file",
    "load_daily_level",
    # State machine
    "GameLogic",
]
