import logging
from datetime import date
from typing import List, Dict, Optional, Any
from pydantic import BaseModel, Field, ConfigDict

from .puzzle.logic import GAME_OVER
from .puzzle import (
    DIFFICULTIES,
    CellCoordinates,
    CoreGameState,
    GameData,
    GameLogic,
    LevelCompletionSummary,
    DifficultyProgress,
    SwapResult,
    UndoResult,
    LevelDataError,
    LevelNotFoundError,
    load_daily_level,
)
from .storage import (
    KeyValueStore,
    MemoryStore,
    JsonFileStore,
    save_in_progress_state,
    load_in_progress_state,
    remove_in_progress_state,
    load_daily_progress,
    save_daily_progress,
    load_difficulty_completion_status,
    load_summary_for_difficulty,
    load_all_summaries_for_date,
)

logger = logging.getLogger("wordswap.session")


class SessionConfig(BaseModel):
    """Configuration for a play session."""
    levels_dir: str = "levels"
    storage_path: Optional[str] = None  # None keeps progress in memory
    hint_threshold: int = Field(default=3, ge=1)
    hint_disabled_difficulties: List[str] = Field(default_factory=lambda: ["impossible"])
    log_level: str = "WARNING"


class PuzzleSession(BaseModel):
    """
    One player's session with the daily puzzles.

    Connects the level loader, the progress store and the puzzle state
    machine: saves progress after every change, records a completion summary
    when a level is finished at full depth, gates difficulties on earlier
    completions and decides when hints are offered.

    Attributes:
        config: Session configuration
        day: Calendar day whose levels are played
        difficulty: Difficulty currently loaded
        store: Where progress and summaries are kept
        logic: State machine for the loaded level
        error: Last load error, for display
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: SessionConfig = Field(default_factory=SessionConfig)
    day: date = Field(default_factory=date.today)
    difficulty: str = "normal"
    store: KeyValueStore = Field(default_factory=MemoryStore)
    logic: GameLogic = Field(default_factory=GameLogic)
    error: Optional[str] = None

    @classmethod
    def create(
        cls,
        config: Optional[SessionConfig] = None,
        day: Optional[date] = None,
        store: Optional[KeyValueStore] = None,
        **config_kwargs: Any
    ) -> "PuzzleSession":
        """
        Factory method to create a session with the configured store.

        Args:
            config: Optional SessionConfig instance
            day: Day to play (defaults to today)
            store: Optional store; otherwise built from ``config.storage_path``
            **config_kwargs: Config parameters if config not provided

        Returns:
            A session positioned on the first difficulty not yet completed
        """
        if config is None:
            config = SessionConfig(**config_kwargs)

        if store is None:
            store = JsonFileStore(config.storage_path) if config.storage_path else MemoryStore()

        session = cls(config=config, day=day or date.today(), store=store)
        session.difficulty = session.initial_difficulty()
        return session

    # --- Difficulty progression ---

    def completion_status(self) -> Dict[str, bool]:
        return load_difficulty_completion_status(self.store, self.day, DIFFICULTIES)

    def initial_difficulty(self) -> str:
        """The first difficulty of the day that has not been completed."""
        status = self.completion_status()
        if status["normal"] and not status["hard"]:
            return "hard"
        if status["normal"] and status["hard"] and not status["impossible"]:
            return "impossible"
        return "normal"

    def check_unlocked(self, difficulty: str) -> Optional[str]:
        """Return why a difficulty cannot be played yet, or None if it can."""
        if difficulty not in DIFFICULTIES:
            return f"Unknown difficulty '{difficulty}'."
        status = self.completion_status()
        if difficulty == "hard" and not status["normal"]:
            return "Complete Normal mode first!"
        if difficulty == "impossible" and not (status["normal"] and status["hard"]):
            return "Complete Normal & Hard modes first!"
        return None

    def switch_difficulty(self, difficulty: str) -> Optional[str]:
        """
        Load another difficulty if it is unlocked.

        Returns:
            Error message if the switch was refused or the level failed to
            load, None on success
        """
        blocked = self.check_unlocked(difficulty)
        if blocked:
            return blocked
        self.difficulty = difficulty
        self.load()
        return self.error

    # --- Loading ---

    def load(self) -> Optional[CoreGameState]:
        """
        Load the current difficulty's level and any saved progress.

        A level already completed today is shown finished when the player had
        made moves in it, so it is not played twice.

        Returns:
            The loaded state, or None if the level could not be loaded (the
            reason is kept in ``error``)
        """
        self.error = None
        self.logic = GameLogic()

        try:
            game_data = load_daily_level(self.config.levels_dir, self.day, self.difficulty)
        except (LevelNotFoundError, LevelDataError) as e:
            logger.error("Could not load %s level: %s", self.difficulty, e)
            self.error = str(e)
            return None

        return self.start(game_data)

    def start(self, game_data: GameData) -> CoreGameState:
        """Start an already parsed level, restoring saved progress for it."""
        self.error = None
        saved = load_in_progress_state(self.store, self.day, self.difficulty, game_data.content_hash)
        state = self.logic.load_level(game_data, saved)

        if load_daily_progress(self.store, self.day).is_completed(self.difficulty):
            played = saved is not None and (saved.current_depth > 0 or len(saved.history) > 0)
            if played and not state.is_game_over:
                state = self.logic.force_game_over()

        return state

    @property
    def state(self) -> CoreGameState:
        return self.logic.get_current_game_state()

    # --- Player actions ---

    def swap(self, a: CellCoordinates, b: CellCoordinates) -> SwapResult:
        result = self.logic.perform_swap(a, b)
        if result.reason != GAME_OVER:
            self._autosave()
        if result.success and self.logic.is_game_over:
            self._record_completion()
        return result

    def undo(self) -> UndoResult:
        result = self.logic.undo_last_move()
        if result.success:
            self._autosave()
        return result

    def reset(self) -> CoreGameState:
        """Start the level over and drop its saved progress."""
        state = self.logic.reset_level()
        try:
            remove_in_progress_state(self.store, self.day, self.difficulty)
        except OSError as e:
            logger.error("Failed to clear saved %s progress: %s", self.difficulty, e)
        return state

    @property
    def hints_enabled(self) -> bool:
        return self.difficulty not in self.config.hint_disabled_difficulties

    @property
    def hint_eligible(self) -> bool:
        """Whether enough swaps have failed this turn to offer a hint automatically."""
        return (
            self.hints_enabled
            and not self.logic.is_game_over
            and self.logic.turn_failed_attempts >= self.config.hint_threshold
        )

    def hint(self) -> List[CellCoordinates]:
        """Cells to highlight as a hint, or an empty list when hints are off."""
        if not self.hints_enabled:
            return []
        return self.logic.calculate_hint_coordinates()

    # --- Summaries ---

    def view_my_solution(self) -> Optional[CoreGameState]:
        """
        Replace the board with the saved finished run for this difficulty.

        Returns:
            The solution view state, or None if no summary is saved
        """
        if self.logic.game_data is None:
            return None

        summary = load_summary_for_difficulty(self.store, self.day, self.difficulty)
        if summary is None or not summary.final_grid:
            logger.info("No solution data found for %s", self.difficulty)
            return None

        return self.logic.set_state_for_solution_view(summary.final_grid, summary.history, summary.score)

    def summaries(self) -> Dict[str, Optional[LevelCompletionSummary]]:
        return load_all_summaries_for_date(self.store, self.day, DIFFICULTIES)

    def _autosave(self) -> None:
        """Save the current progress. A failed write is logged and play continues."""
        progress = self.logic.get_game_state_for_saving()
        if progress is None:
            return
        try:
            save_in_progress_state(self.store, self.day, self.difficulty, progress, progress.content_hash)
        except (OSError, TypeError) as e:
            logger.error("Failed to save game state for %s: %s", self.difficulty, e)

    def _record_completion(self) -> None:
        """Store the completion summary once the level is finished at full depth."""
        max_depth = self.logic.max_depth
        if max_depth <= 0 or self.logic.current_depth != max_depth:
            return

        daily = load_daily_progress(self.store, self.day)
        existing = daily.difficulties.get(self.difficulty)
        if existing and existing.completed and existing.summary:
            return

        summary = LevelCompletionSummary(
            history=[e.model_copy(deep=True) for e in self.logic.history],
            score=self.logic.current_depth,
            max_score=max_depth,
            player_words=self.logic.player_words(),
            optimal_path_words=self.logic.optimal_path_words(),
            difficulty_for_summary=self.difficulty,
            final_grid=[list(row) for row in self.logic.grid],
        )
        daily.difficulties[self.difficulty] = DifficultyProgress(completed=True, summary=summary)
        try:
            save_daily_progress(self.store, self.day, daily)
        except (OSError, TypeError) as e:
            logger.error("Failed to save %s completion: %s", self.difficulty, e)
            return
        logger.info("Recorded %s completion for %s", self.difficulty, self.day.isoformat())
