import logging
from typing import List, Optional, Sequence
from pydantic import BaseModel, Field, ConfigDict

from .chain import best_child, find_longest_word_chain
from .grid import (
    are_adjacent,
    copy_grid,
    find_word_coordinates,
    grids_equal,
    in_bounds,
    swap_cells,
    swap_direction,
)
from .models import (
    CellCoordinates,
    CoreGameState,
    GameData,
    Grid,
    HistoryEntry,
    Move,
    MoveDetails,
    SavedProgress,
    SwapResult,
    UndoResult,
)
from .tree import ExplorationTree, TreeNode, ROOT

logger = logging.getLogger("wordswap.logic")


# Rejection reason codes
NO_LEVEL = "NO_LEVEL"
GAME_OVER = "GAME_OVER"
NOT_ADJACENT = "NOT_ADJACENT"
INVALID_MOVE = "INVALID_MOVE"
SOLUTION_VIEW = "SOLUTION_VIEW"
EMPTY_HISTORY = "EMPTY_HISTORY"
CORRUPT_STATE = "CORRUPT_STATE"


class GameLogic(BaseModel):
    """
    Puzzle state machine for one level.

    Owns the current grid, the position in the exploration tree, the move
    history and the turn flags. Every player action goes through one of the
    public operations; rejected actions come back as results with
    ``success=False`` and leave the state untouched (apart from the failed
    attempt counter).

    Attributes:
        game_data: The loaded level, or None before ``load_level``
        grid: Current grid
        current_node: Index of the current exploration tree node
        current_depth: Number of moves applied (the score)
        history: Applied moves in order
        has_deviated: Whether an applied move led to a node that cannot reach
            the tree's maximum depth. This replaces deviation by a move
            outside the tree: ``perform_swap`` rejects such moves, so they
            are never applied and never set it. Stays set until reset or a
            new load
        turn_failed_attempts: Rejected swaps since the last successful one
        is_game_over: Whether the level has ended
        is_solution_view: Whether the state is a read-only replay
        restore_error: Why saved progress was discarded on the last load
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    game_data: Optional[GameData] = None
    grid: Grid = Field(default_factory=list)
    current_node: Optional[int] = None
    current_depth: int = Field(default=0, ge=0)
    history: List[HistoryEntry] = Field(default_factory=list)
    has_deviated: bool = False
    turn_failed_attempts: int = Field(default=0, ge=0)
    is_game_over: bool = False
    is_solution_view: bool = False
    restore_error: Optional[str] = None
    _tree: Optional[ExplorationTree] = None

    @property
    def tree(self) -> Optional[ExplorationTree]:
        return self._tree

    @property
    def max_depth(self) -> int:
        """Target score for the loaded level."""
        return self.game_data.max_depth_reached if self.game_data else 0

    def load_level(
        self,
        game_data: GameData,
        saved_progress: Optional[SavedProgress] = None,
    ) -> CoreGameState:
        """
        Start a level, restoring saved progress when it belongs to this content.

        Saved progress is replayed move by move against the exploration tree.
        If the replay does not line up with the tree or with the recorded
        grids, the save is discarded and the level starts fresh; the reason is
        kept in ``restore_error``.

        Args:
            game_data: The level to play
            saved_progress: Optional progress saved on an earlier visit

        Returns:
            Snapshot of the new state
        """
        self.game_data = game_data
        self._tree = ExplorationTree.from_payload(game_data.exploration_tree)
        self.restore_error = None
        self._start_fresh()

        if saved_progress is not None:
            if saved_progress.content_hash != game_data.content_hash:
                logger.info("Saved progress belongs to different level content; starting fresh")
            else:
                error = self._restore(saved_progress)
                if error:
                    logger.warning("Discarding saved progress: %s", error)
                    self.restore_error = error
                    self._start_fresh()
                else:
                    logger.info("Restored saved progress at depth %d", self.current_depth)

        return self.get_current_game_state()

    def _start_fresh(self) -> None:
        self.grid = copy_grid(self.game_data.initial_grid)
        self.current_node = ROOT
        self.current_depth = 0
        self.history = []
        self.has_deviated = False
        self.turn_failed_attempts = 0
        self.is_game_over = self._tree.root.is_leaf
        self.is_solution_view = False

    def _leaves_best_branch(self, child: TreeNode) -> bool:
        return child.subtree_depth < self._tree.max_depth

    def _restore(self, saved: SavedProgress) -> Optional[str]:
        """Replay saved history against the tree. Returns an error message on mismatch."""
        if saved.current_depth != len(saved.history):
            return (
                f"saved depth {saved.current_depth} does not match "
                f"{len(saved.history)} history entries"
            )

        grid = copy_grid(self.game_data.initial_grid)
        index = ROOT
        deviated = False
        history: List[HistoryEntry] = []

        for i, entry in enumerate(saved.history, start=1):
            move = entry.move
            child = self._tree.match_move(index, move.from_cell, move.to_cell)
            if child is None:
                return f"saved move {i} is not part of this level's tree"

            grid = swap_cells(grid, move.from_cell, move.to_cell)
            if entry.grid_after_move and not grids_equal(grid, entry.grid_after_move):
                return f"grid recorded after move {i} does not match its replay"

            deviated = deviated or self._leaves_best_branch(child)
            history.append(HistoryEntry(
                move=move,
                words_formed_by_move=list(child.words_formed),
                grid_after_move=copy_grid(grid),
            ))
            index = child.index

        if not grids_equal(grid, saved.grid):
            return "saved grid does not match the replayed history"

        self.grid = grid
        self.current_node = index
        self.current_depth = len(history)
        self.history = history
        self.has_deviated = saved.has_deviated or deviated
        self.turn_failed_attempts = saved.turn_failed_attempts
        self.is_game_over = self._tree.node(index).is_leaf
        return None

    def _reject(self, message: str, reason: str) -> SwapResult:
        return SwapResult(
            success=False,
            new_state=self.get_current_game_state() if self.game_data else None,
            message=message,
            reason=reason,
        )

    def perform_swap(self, a: CellCoordinates, b: CellCoordinates) -> SwapResult:
        """
        Try to swap two cells.

        The swap succeeds only when the cell pair is one of the current
        node's child moves. A rejected swap that was physically possible
        counts as a failed attempt for hinting.

        Args:
            a: First cell
            b: Second cell

        Returns:
            SwapResult with the new state, the words formed and the
            transition details on success, or a message and reason code
        """
        if self.game_data is None or self._tree is None:
            return self._reject("No level loaded.", NO_LEVEL)

        if self.is_game_over:
            return self._reject("Game is over.", GAME_OVER)

        if not (in_bounds(self.grid, a) and in_bounds(self.grid, b)) or not are_adjacent(a, b):
            return self._reject("Must swap adjacent cells.", NOT_ADJACENT)

        child = self._tree.match_move(self.current_node, a, b)
        if child is None:
            self.turn_failed_attempts += 1
            logger.debug(
                "Swap %s-%s rejected at depth %d (%d failed this turn)",
                a.as_tuple(), b.as_tuple(), self.current_depth, self.turn_failed_attempts,
            )
            return self._reject("Not a valid move.", INVALID_MOVE)

        previous_grid = self.grid
        new_grid = swap_cells(previous_grid, a, b)
        move = Move(from_cell=a, to_cell=b)

        self.grid = new_grid
        self.history.append(HistoryEntry(
            move=move,
            words_formed_by_move=list(child.words_formed),
            grid_after_move=copy_grid(new_grid),
        ))
        self.current_node = child.index
        self.current_depth += 1
        self.turn_failed_attempts = 0
        if self._leaves_best_branch(child):
            self.has_deviated = True
        self.is_game_over = child.is_leaf

        highlighted: List[CellCoordinates] = []
        for word in child.words_formed:
            for cell in find_word_coordinates(new_grid, word, move) or []:
                if cell not in highlighted:
                    highlighted.append(cell)

        details = MoveDetails(
            from_cell=a,
            to_cell=b,
            direction=swap_direction(a, b),
            previous_grid=copy_grid(previous_grid),
            grid=copy_grid(new_grid),
            highlighted_cells=highlighted,
        )

        logger.debug("Swap %s-%s formed %s, depth now %d", a.as_tuple(), b.as_tuple(),
                     child.words_formed, self.current_depth)

        return SwapResult(
            success=True,
            new_state=self.get_current_game_state(),
            words_formed=list(child.words_formed),
            move_details=details,
        )

    def undo_last_move(self) -> UndoResult:
        """
        Take back the last move.

        The grid is restored by swapping the undone cells back. The deviation
        flag is kept: it records a fact about the session, not the position.

        Returns:
            UndoResult with the new state and the undone move
        """
        if self.game_data is None or self._tree is None:
            return UndoResult(success=False, message="No level loaded.", reason=NO_LEVEL)

        if self.is_solution_view:
            return UndoResult(
                success=False,
                new_state=self.get_current_game_state(),
                message="Solution view is read-only.",
                reason=SOLUTION_VIEW,
            )

        if not self.history:
            logger.warning("Undo requested with empty history")
            return UndoResult(
                success=False,
                new_state=self.get_current_game_state(),
                message="Nothing to undo.",
                reason=EMPTY_HISTORY,
            )

        node = self._tree.node(self.current_node)
        entry = self.history[-1]
        if node.parent is None or not node.move.same_cells(entry.move):
            logger.error(
                "Tree node %d does not match last history entry (depth %d); resetting level",
                self.current_node, self.current_depth,
            )
            self._start_fresh()
            return UndoResult(
                success=False,
                new_state=self.get_current_game_state(),
                message="Game state was inconsistent and has been reset.",
                reason=CORRUPT_STATE,
            )

        self.history.pop()
        self.grid = swap_cells(self.grid, entry.move.from_cell, entry.move.to_cell)
        self.current_node = node.parent
        self.current_depth -= 1
        self.turn_failed_attempts = 0
        self.is_game_over = False

        return UndoResult(
            success=True,
            new_state=self.get_current_game_state(),
            undone_move=entry.move,
        )

    def reset_level(self) -> CoreGameState:
        """
        Discard all progress and return to the root of the current level.

        Raises:
            ValueError: If no level is loaded
        """
        if self.game_data is None:
            raise ValueError("No level loaded")

        self.restore_error = None
        self._start_fresh()
        return self.get_current_game_state()

    def force_game_over(self) -> CoreGameState:
        """Mark the level as finished without touching grid or history."""
        self.is_game_over = True
        return self.get_current_game_state()

    def set_state_for_solution_view(
        self,
        grid: Grid,
        history: Sequence[HistoryEntry],
        score: int,
    ) -> CoreGameState:
        """
        Show a finished run as a read-only replay.

        The supplied run was validated when it was played, so it is taken as
        given. The tree position is recovered when the history still maps
        onto the tree and left empty otherwise.

        Raises:
            ValueError: If no level is loaded
        """
        if self.game_data is None or self._tree is None:
            raise ValueError("No level loaded")

        entries = [HistoryEntry.model_validate(e) for e in history]
        index = self._tree.walk([e.move for e in entries])

        self.grid = copy_grid(grid)
        self.history = [e.model_copy(deep=True) for e in entries]
        self.current_node = index
        self.current_depth = score
        self.has_deviated = index is None or self._tree.node(index).subtree_depth < self._tree.max_depth
        self.turn_failed_attempts = 0
        self.is_game_over = True
        self.is_solution_view = True
        return self.get_current_game_state()

    def calculate_hint_coordinates(self) -> List[CellCoordinates]:
        """
        The two cells of the move to suggest next.

        Returns:
            Two adjacent cells of the best child move, or an empty list when
            the level is over or there is nothing left to play
        """
        if self._tree is None or self.is_game_over or self.current_node is None:
            return []

        child = best_child(self._tree, self.current_node)
        if child is None:
            return []
        return [child.move.from_cell, child.move.to_cell]

    def player_words(self) -> List[str]:
        """Unique words formed so far, in the order they were found."""
        words: List[str] = []
        for entry in self.history:
            for word in entry.words_formed_by_move:
                if word not in words:
                    words.append(word)
        return words

    def optimal_path_words(self) -> List[str]:
        """Best-known word chain given the moves played."""
        if self._tree is None:
            return []
        return find_longest_word_chain(self._tree, self.history)

    def get_current_game_state(self) -> CoreGameState:
        """Snapshot of the current state. Safe to keep: nothing is shared but game data."""
        possible_moves = []
        if self._tree is not None and self.current_node is not None and not self.is_solution_view:
            possible_moves = self._tree.move_options(self.current_node)

        return CoreGameState(
            grid=copy_grid(self.grid),
            current_node=self.current_node,
            current_possible_moves=possible_moves,
            current_depth=self.current_depth,
            history=[e.model_copy(deep=True) for e in self.history],
            has_deviated=self.has_deviated,
            turn_failed_attempts=self.turn_failed_attempts,
            is_game_over=self.is_game_over,
            is_solution_view=self.is_solution_view,
            restore_error=self.restore_error,
            game_data=self.game_data,
        )

    def get_game_state_for_saving(self) -> Optional[SavedProgress]:
        """
        Serializable progress for the current level.

        Returns:
            SavedProgress, or None when there is nothing to save (no level
            loaded, or a solution view is being shown)
        """
        if self.game_data is None or self.is_solution_view:
            return None

        return SavedProgress(
            grid=copy_grid(self.grid),
            history=[e.model_copy(deep=True) for e in self.history],
            current_depth=self.current_depth,
            has_deviated=self.has_deviated,
            turn_failed_attempts=self.turn_failed_attempts,
            content_hash=self.game_data.content_hash,
        )
