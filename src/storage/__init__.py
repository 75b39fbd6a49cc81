"""Persistence of in-progress state and daily completion summaries."""

from .stores import KeyValueStore, MemoryStore, JsonFileStore
from .progress import (
    progress_key,
    daily_key,
    save_in_progress_state,
    load_in_progress_state,
    remove_in_progress_state,
    load_daily_progress,
    save_daily_progress,
    load_difficulty_completion_status,
    load_summary_for_difficulty,
    load_all_summaries_for_date,
)

__all__ = [
    # Stores
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    # Records
    "progress_key",
    "daily_key",
    "save_in_progress_state",
    "load_in_progress_state",
    "remove_in_progress_state",
    "load_daily_progress",
    "save_daily_progress",
    "load_difficulty_completion_status",
    "load_summary_for_difficulty",
    "load_all_summaries_for_date",
]
