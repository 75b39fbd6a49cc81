"""
Pydantic models for the puzzle engine.

Wire-format models (level payload, saved progress, completion summaries) use
the camelCase field names of the level files as aliases so they can be
validated straight from JSON and dumped back with ``by_alias=True``.
"""

from __future__ import annotations

from typing import List, Dict, Optional, Literal, Tuple
from pydantic import BaseModel, Field, ConfigDict


# Type aliases
Grid = List[List[str]]
Difficulty = Literal["normal", "hard", "impossible"]
Direction = Literal["horizontal", "vertical"]

DIFFICULTIES: List[str] = ["normal", "hard", "impossible"]


class WireModel(BaseModel):
    """Base for models read from and written to JSON documents."""
    model_config = ConfigDict(populate_by_name=True)


class CellCoordinates(WireModel):
    """A cell position on the grid (0-indexed)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)

    def as_tuple(self) -> Tuple[int, int]:
        return (self.row, self.col)


class Move(WireModel):
    """A swap of two cells. Direction does not matter for matching."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_cell: CellCoordinates = Field(..., alias="from")
    to_cell: CellCoordinates = Field(..., alias="to")

    def canonical(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """Cell pair ordered so the smaller (row, col) comes first."""
        a, b = self.from_cell.as_tuple(), self.to_cell.as_tuple()
        return (a, b) if a <= b else (b, a)

    def same_cells(self, other: "Move") -> bool:
        return self.canonical() == other.canonical()


class ExplorationNodeData(WireModel):
    """One edge of the exploration tree as stored in a level file."""
    move: Move
    words_formed: List[str] = Field(default_factory=list, alias="wordsFormed")
    depth: Optional[int] = Field(None, ge=1)
    max_depth_reached: Optional[int] = Field(None, alias="maxDepthReached")
    next_moves: List["ExplorationNodeData"] = Field(default_factory=list, alias="nextMoves")


class GameData(WireModel):
    """Immutable per-level payload."""
    initial_grid: Grid = Field(..., alias="initialGrid")
    exploration_tree: List[ExplorationNodeData] = Field(default_factory=list, alias="explorationTree")
    word_length: int = Field(4, alias="wordLength")
    max_depth_reached: int = Field(0, alias="maxDepthReached")
    difficulty: Optional[str] = None
    content_hash: str = Field("", alias="contentHash")


class HistoryEntry(WireModel):
    """A move that was applied, the words it formed and the resulting grid."""
    move: Move
    words_formed_by_move: List[str] = Field(default_factory=list, alias="wordsFormedByMove")
    grid_after_move: Grid = Field(default_factory=list, alias="gridAfterMove")


class MoveOption(BaseModel):
    """A child move available from the current node."""
    node_index: int
    move: Move
    words_formed: List[str] = Field(default_factory=list)
    subtree_depth: int = 0


class CoreGameState(BaseModel):
    """Snapshot of the puzzle state machine."""
    grid: Grid = Field(default_factory=list)
    current_node: Optional[int] = None
    current_possible_moves: List[MoveOption] = Field(default_factory=list)
    current_depth: int = 0
    history: List[HistoryEntry] = Field(default_factory=list)
    has_deviated: bool = False
    turn_failed_attempts: int = 0
    is_game_over: bool = False
    is_solution_view: bool = False
    restore_error: Optional[str] = None
    game_data: Optional[GameData] = None


class MoveDetails(BaseModel):
    """Everything needed to render the transition caused by a swap."""
    from_cell: CellCoordinates
    to_cell: CellCoordinates
    direction: Direction
    previous_grid: Grid = Field(default_factory=list)
    grid: Grid = Field(default_factory=list)
    highlighted_cells: List[CellCoordinates] = Field(default_factory=list)
    transition_pending: bool = True


class SwapResult(BaseModel):
    """Result of a swap attempt."""
    success: bool
    new_state: Optional[CoreGameState] = None
    words_formed: List[str] = Field(default_factory=list)
    move_details: Optional[MoveDetails] = None
    message: Optional[str] = None
    reason: Optional[str] = None


class UndoResult(BaseModel):
    """Result of an undo request."""
    success: bool
    new_state: Optional[CoreGameState] = None
    undone_move: Optional[Move] = None
    message: Optional[str] = None
    reason: Optional[str] = None


class SavedProgress(WireModel):
    """In-progress state persisted between visits. Holds no tree pointers."""
    grid: Grid
    history: List[HistoryEntry] = Field(default_factory=list)
    current_depth: int = Field(0, alias="currentDepth", ge=0)
    has_deviated: bool = Field(False, alias="hasDeviated")
    turn_failed_attempts: int = Field(0, alias="turnFailedAttempts", ge=0)
    content_hash: str = Field("", alias="contentHash")


class LevelCompletionSummary(WireModel):
    """Stored when a level is finished at its maximum depth."""
    history: List[HistoryEntry] = Field(default_factory=list)
    score: int = 0
    max_score: int = Field(0, alias="maxScore")
    player_words: List[str] = Field(default_factory=list, alias="playerWords")
    optimal_path_words: List[str] = Field(default_factory=list, alias="optimalPathWords")
    difficulty_for_summary: Difficulty = Field("normal", alias="difficultyForSummary")
    final_grid: Grid = Field(default_factory=list, alias="finalGrid")


class DifficultyProgress(WireModel):
    """Completion record for one difficulty on one day."""
    completed: bool = False
    summary: Optional[LevelCompletionSummary] = None


class DailyProgress(WireModel):
    """Completion records for every difficulty on one day."""
    difficulties: Dict[str, DifficultyProgress] = Field(default_factory=dict)

    def is_completed(self, difficulty: str) -> bool:
        entry = self.difficulties.get(difficulty)
        return bool(entry and entry.completed)

    def summary_for(self, difficulty: str) -> Optional[LevelCompletionSummary]:
        entry = self.difficulties.get(difficulty)
        return entry.summary if entry else None


ExplorationNodeData.model_rebuild()
