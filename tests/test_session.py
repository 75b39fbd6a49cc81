"""Tests for the play session: autosave, completion summaries, gating and hints."""

import json
from datetime import date

import pytest

from src.puzzle import CellCoordinates
from src.session import PuzzleSession, SessionConfig
from src.storage import MemoryStore, load_daily_progress, load_in_progress_state, progress_key

DAY = date(2026, 10, 19)


def cell(row, col):
    return CellCoordinates(row=row, col=col)


@pytest.fixture
def levels_dir(tmp_path, cats_payload, branching_payload):
    root = tmp_path / "levels"
    for difficulty, payload in [("normal", cats_payload), ("hard", branching_payload), ("impossible", branching_payload)]:
        (root / difficulty).mkdir(parents=True)
        (root / difficulty / "2026-10-19.json").write_text(json.dumps(payload))
    return root


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def session(levels_dir, store):
    s = PuzzleSession.create(config=SessionConfig(levels_dir=str(levels_dir)), day=DAY, store=store)
    s.load()
    return s


def finish_normal(session):
    result = session.swap(cell(0, 0), cell(0, 1))
    assert result.success
    return result


class TestCreate:
    """Session construction."""

    def test_defaults(self, levels_dir):
        session = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY)
        assert session.difficulty == "normal"
        assert session.config.hint_threshold == 3
        assert isinstance(session.store, MemoryStore)

    def test_file_store_from_config(self, tmp_path, levels_dir):
        config = SessionConfig(levels_dir=str(levels_dir), storage_path=str(tmp_path / "p.json"))
        session = PuzzleSession.create(config=config, day=DAY)
        session.load()
        finish_normal(session)
        assert (tmp_path / "p.json").exists()


class FailingStore(MemoryStore):
    """Memory store whose writes fail for keys containing a marker."""

    def __init__(self, marker=""):
        super().__init__()
        self.marker = marker

    def save(self, key, value):
        if self.marker in key:
            raise OSError("disk full")
        super().save(key, value)

    def remove(self, key):
        if self.marker in key:
            raise OSError("disk full")
        super().remove(key)


class TestStoreFailures:
    """Write errors from the store are logged and play continues."""

    def test_unwritable_file_store(self, tmp_path, levels_dir):
        path = tmp_path / "progress"
        path.mkdir()
        config = SessionConfig(levels_dir=str(levels_dir), storage_path=str(path))
        session = PuzzleSession.create(config=config, day=DAY)
        session.load()
        result = session.swap(cell(0, 0), cell(0, 1))
        assert result.success
        assert session.state.current_depth == 1
        assert session.state.is_game_over is True

    def test_completion_recorded_when_autosave_fails(self, levels_dir):
        store = FailingStore(":progress:")
        session = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        session.load()
        finish_normal(session)
        assert load_daily_progress(store, DAY).is_completed("normal")
        assert store.load(progress_key(DAY, "normal")) is None

    def test_failed_completion_save_is_logged(self, levels_dir, caplog):
        store = FailingStore()
        session = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        session.load()
        with caplog.at_level("ERROR", logger="wordswap.session"):
            result = finish_normal(session)
        assert result.words_formed == ["CATS"]
        assert "Failed to save game state" in caplog.text
        assert "Failed to save normal completion" in caplog.text

    def test_reset_with_failing_store(self, levels_dir):
        store = FailingStore()
        session = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        session.load()
        session.swap(cell(1, 0), cell(1, 1))
        assert session.reset().current_depth == 0


class TestLoad:
    """Loading levels through the session."""

    def test_load(self, session):
        assert session.error is None
        assert session.state.grid[0] == ["A", "C", "T", "S"]
        assert session.logic.max_depth == 1

    def test_missing_level(self, tmp_path, store):
        session = PuzzleSession.create(levels_dir=str(tmp_path), day=DAY, store=store)
        assert session.load() is None
        assert "not available yet" in session.error

    def test_corrupted_level(self, tmp_path, store):
        (tmp_path / "normal").mkdir()
        (tmp_path / "normal" / "2026-10-19.json").write_text(json.dumps({"initialGrid": "oops"}))
        session = PuzzleSession.create(levels_dir=str(tmp_path), day=DAY, store=store)
        assert session.load() is None
        assert session.error == "Level data for normal is corrupted."


class TestAutosave:
    """Progress is saved after changes and restored on load."""

    def test_progress_restored(self, levels_dir, store):
        session = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        session.difficulty = "hard"
        session.load()
        session.swap(cell(0, 0), cell(0, 1))
        session.swap(cell(2, 0), cell(2, 1))

        again = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        again.difficulty = "hard"
        state = again.load()
        assert state.current_depth == 1
        assert state.turn_failed_attempts == 1
        assert state.grid == session.state.grid

    def test_undo_saved(self, session, store):
        session.difficulty = "hard"
        session.load()
        session.swap(cell(0, 0), cell(0, 1))
        session.undo()
        saved = load_in_progress_state(store, DAY, "hard", session.logic.game_data.content_hash)
        assert saved.current_depth == 0

    def test_reset_removes_progress(self, session, store):
        session.swap(cell(1, 0), cell(1, 1))
        assert store.load(progress_key(DAY, "normal")) is not None
        state = session.reset()
        assert state.current_depth == 0
        assert store.load(progress_key(DAY, "normal")) is None


class TestCompletion:
    """Completion summaries at maximum depth."""

    def test_summary_recorded(self, session, store):
        finish_normal(session)
        daily = load_daily_progress(store, DAY)
        assert daily.is_completed("normal")
        summary = daily.summary_for("normal")
        assert summary.score == 1
        assert summary.max_score == 1
        assert summary.player_words == ["CATS"]
        assert summary.optimal_path_words == ["CATS"]
        assert summary.final_grid[0] == ["C", "A", "T", "S"]
        assert summary.difficulty_for_summary == "normal"

    def test_short_finish_not_recorded(self, levels_dir, store):
        session = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        session.difficulty = "hard"
        session.load()
        session.swap(cell(1, 1), cell(1, 2))
        assert session.logic.is_game_over
        assert not load_daily_progress(store, DAY).is_completed("hard")

    def test_completed_level_without_moves_is_playable(self, levels_dir, store):
        first = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        first.load()
        finish_normal(first)
        first.undo()

        again = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        again.difficulty = "normal"
        state = again.load()
        assert state.current_depth == 0
        assert state.is_game_over is False

    def test_completed_level_with_moves_forced_over(self, levels_dir, store):
        first = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        first.load()
        finish_normal(first)
        first.switch_difficulty("hard")
        first.swap(cell(0, 0), cell(0, 1))
        first.swap(cell(1, 0), cell(1, 1))
        first.swap(cell(2, 0), cell(2, 1))
        assert load_daily_progress(store, DAY).is_completed("hard")
        first.undo()

        again = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        again.difficulty = "hard"
        state = again.load()
        assert state.current_depth == 2
        assert state.is_game_over is True

    def test_view_my_solution(self, session):
        finish_normal(session)
        session.reset()
        state = session.view_my_solution()
        assert state.is_solution_view is True
        assert state.current_depth == 1
        assert state.grid[0] == ["C", "A", "T", "S"]

    def test_no_solution_yet(self, session):
        assert session.view_my_solution() is None

    def test_summaries(self, session):
        finish_normal(session)
        summaries = session.summaries()
        assert summaries["normal"].score == 1
        assert summaries["hard"] is None


class TestGating:
    """Difficulty progression."""

    def test_hard_locked(self, session):
        assert session.switch_difficulty("hard") == "Complete Normal mode first!"
        assert session.difficulty == "normal"

    def test_impossible_locked(self, session):
        finish_normal(session)
        assert session.switch_difficulty("impossible") == "Complete Normal & Hard modes first!"

    def test_unknown_difficulty(self, session):
        assert session.check_unlocked("easy") == "Unknown difficulty 'easy'."

    def test_unlock_and_switch(self, session):
        finish_normal(session)
        assert session.switch_difficulty("hard") is None
        assert session.difficulty == "hard"
        assert session.state.grid[0] == ["A", "B", "C"]

    def test_initial_difficulty(self, levels_dir, store):
        first = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        first.load()
        finish_normal(first)
        assert PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store).difficulty == "hard"


class TestHints:
    """Hint eligibility."""

    def test_eligible_after_three_failures(self, session):
        for _ in range(2):
            session.swap(cell(1, 0), cell(1, 1))
        assert session.hint_eligible is False
        session.swap(cell(1, 0), cell(1, 1))
        assert session.logic.turn_failed_attempts == 3
        assert session.hint_eligible is True
        assert session.hint() == [cell(0, 0), cell(0, 1)]

    def test_custom_threshold(self, levels_dir, store):
        session = PuzzleSession.create(levels_dir=str(levels_dir), hint_threshold=1, day=DAY, store=store)
        session.load()
        session.swap(cell(1, 0), cell(1, 1))
        assert session.hint_eligible is True

    def test_no_hints_on_impossible(self, levels_dir, store):
        session = PuzzleSession.create(levels_dir=str(levels_dir), day=DAY, store=store)
        session.difficulty = "impossible"
        session.load()
        for _ in range(3):
            session.swap(cell(2, 0), cell(2, 1))
        assert session.hint_eligible is False
        assert session.hint() == []
