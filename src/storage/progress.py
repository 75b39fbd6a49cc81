"""
Progress records kept in a key-value store.

Two kinds of record are stored per calendar day:

- in-progress state for each difficulty, tagged with the level's content
  hash so a save is ignored once the day's puzzle changes;
- the daily progress record: which difficulties are complete, with the
  completion summary of each.
"""

import logging
from datetime import date
from typing import Dict, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from ..puzzle.level import get_formatted_date
from ..puzzle.models import DailyProgress, LevelCompletionSummary, SavedProgress
from .stores import KeyValueStore

logger = logging.getLogger("wordswap.storage")

KEY_PREFIX = "wordswap"


def progress_key(day: date, difficulty: str) -> str:
    return f"{KEY_PREFIX}:progress:{get_formatted_date(day)}:{difficulty}"


def daily_key(day: date) -> str:
    return f"{KEY_PREFIX}:daily:{get_formatted_date(day)}"


def save_in_progress_state(
    store: KeyValueStore,
    day: date,
    difficulty: str,
    progress: SavedProgress,
    content_hash: str,
) -> None:
    """Save progress, stamped with the hash of the level it belongs to."""
    record = progress.model_copy(update={"content_hash": content_hash})
    store.save(progress_key(day, difficulty), record.model_dump(by_alias=True))


def load_in_progress_state(
    store: KeyValueStore,
    day: date,
    difficulty: str,
    content_hash: str,
) -> Optional[SavedProgress]:
    """
    Load saved progress for a level.

    Returns:
        The saved progress, or None if there is none, it cannot be read, or
        it was saved for different level content
    """
    raw = store.load(progress_key(day, difficulty))
    if raw is None:
        return None

    try:
        progress = SavedProgress.model_validate(raw)
    except PydanticValidationError as e:
        logger.warning("Ignoring unreadable progress for %s/%s: %s", get_formatted_date(day), difficulty, e)
        return None

    if progress.content_hash != content_hash:
        logger.info("Saved %s progress is for an older version of the level", difficulty)
        return None

    return progress


def remove_in_progress_state(store: KeyValueStore, day: date, difficulty: str) -> None:
    store.remove(progress_key(day, difficulty))


def load_daily_progress(store: KeyValueStore, day: date) -> DailyProgress:
    """Daily completion record; empty when none is stored or it cannot be read."""
    raw = store.load(daily_key(day))
    if raw is None:
        return DailyProgress()

    try:
        return DailyProgress(difficulties=raw)
    except PydanticValidationError as e:
        logger.warning("Ignoring unreadable daily progress for %s: %s", get_formatted_date(day), e)
        return DailyProgress()


def save_daily_progress(store: KeyValueStore, day: date, progress: DailyProgress) -> None:
    store.save(
        daily_key(day),
        {name: entry.model_dump(by_alias=True) for name, entry in progress.difficulties.items()},
    )


def load_difficulty_completion_status(
    store: KeyValueStore,
    day: date,
    difficulties: Iterable[str],
) -> Dict[str, bool]:
    progress = load_daily_progress(store, day)
    return {d: progress.is_completed(d) for d in difficulties}


def load_summary_for_difficulty(
    store: KeyValueStore,
    day: date,
    difficulty: str,
) -> Optional[LevelCompletionSummary]:
    return load_daily_progress(store, day).summary_for(difficulty)


def load_all_summaries_for_date(
    store: KeyValueStore,
    day: date,
    difficulties: Iterable[str],
) -> Dict[str, Optional[LevelCompletionSummary]]:
    progress = load_daily_progress(store, day)
    return {d: progress.summary_for(d) for d in difficulties}
