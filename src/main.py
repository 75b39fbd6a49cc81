"""
Main entry point for playing Word Swap levels in the terminal.

Usage:
    python -m src.main --levels-dir levels --difficulty normal
    python -m src.main --level levels/normal/2026-10-19.json
    python -m src.main --config config.yaml --verbose
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import yaml

from .puzzle import CellCoordinates, LevelDataError, LevelNotFoundError, load_level_file, render_grid
from .session import PuzzleSession, SessionConfig

COMMANDS_HELP = """Commands:
  R1 C1 R2 C2   swap two adjacent cells (0-indexed row/col)
  undo          take back the last move
  reset         start the level over
  hint          show a suggested move
  words         show the words found and the best-known chain
  solution      show your finished run for this difficulty
  play LEVEL    switch difficulty (normal, hard, impossible)
  quit          leave"""


def load_config(config_path: str) -> SessionConfig:
    """Load session configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return SessionConfig(**data)


def describe_state(session: PuzzleSession) -> str:
    """Grid plus a status line."""
    state = session.state
    lines = [render_grid(state.grid), ""]
    status = f"[{session.difficulty}] depth {state.current_depth}/{session.logic.max_depth}"
    if state.has_deviated:
        status += " (off the best path)"
    if state.is_game_over:
        status += " - level over"
    lines.append(status)
    return "\n".join(lines)


def run_command(session: PuzzleSession, line: str) -> Optional[str]:
    """
    Execute one command line against the session.

    Returns:
        Text to show the player, or None to quit
    """
    parts = line.strip().split()
    if not parts:
        return ""

    command = parts[0].lower()

    if command in ("quit", "exit", "q"):
        return None

    if command in ("help", "?"):
        return COMMANDS_HELP

    if command == "undo":
        result = session.undo()
        if not result.success:
            return result.message or "Cannot undo."
        return describe_state(session)

    if command == "reset":
        session.reset()
        return describe_state(session)

    if command == "hint":
        cells = session.hint()
        if not cells:
            return "No hint available."
        a, b = cells
        return f"Try swapping ({a.row}, {a.col}) with ({b.row}, {b.col})."

    if command == "words":
        found = ", ".join(session.logic.player_words()) or "(none yet)"
        chain = " -> ".join(session.logic.optimal_path_words()) or "(none)"
        return f"Found: {found}\nBest chain: {chain}"

    if command == "solution":
        state = session.view_my_solution()
        if state is None:
            return f"No solution data found for {session.difficulty}."
        return describe_state(session)

    if command == "play":
        if len(parts) != 2:
            return "Usage: play normal|hard|impossible"
        error = session.switch_difficulty(parts[1].lower())
        if error:
            return error
        return describe_state(session)

    numbers = parts[1:] if command == "swap" else parts
    if len(numbers) != 4 or not all(p.isdigit() for p in numbers):
        return f"Unknown command: '{line.strip()}'. Type 'help' for commands."

    r1, c1, r2, c2 = (int(p) for p in numbers)
    result = session.swap(CellCoordinates(row=r1, col=c1), CellCoordinates(row=r2, col=c2))
    if not result.success:
        message = f"Invalid move: {result.message}"
        if session.hint_eligible:
            message += " (type 'hint' for help)"
        return message

    output = [f"Formed: {', '.join(result.words_formed)}", ""]
    highlight = result.move_details.highlighted_cells if result.move_details else []
    output.append(render_grid(session.state.grid, highlight))
    output.append("")
    output.append(describe_state(session).splitlines()[-1])
    if session.logic.is_game_over and session.logic.current_depth == session.logic.max_depth:
        output.append("*** Maximum depth reached! ***")
    return "\n".join(output)


def main():
    parser = argparse.ArgumentParser(
        description="Play a Word Swap puzzle",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  levels_dir: levels
  storage_path: ~/.wordswap/progress.json
  hint_threshold: 3
  log_level: INFO
        """
    )
    parser.add_argument(
        "--config",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--level",
        help="Play a single level file instead of the daily level"
    )
    parser.add_argument(
        "--levels-dir",
        help="Directory holding <difficulty>/<YYYY-MM-DD>.json level files"
    )
    parser.add_argument(
        "--difficulty", "-d",
        choices=["normal", "hard", "impossible"],
        help="Difficulty to play (default: first one not completed today)"
    )
    parser.add_argument(
        "--date",
        help="Day to play as YYYY-MM-DD (default: today)"
    )
    parser.add_argument(
        "--storage", "-s",
        help="Path to the JSON file where progress is saved"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log engine activity to stderr"
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config) if args.config else SessionConfig()
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.levels_dir:
        config.levels_dir = args.levels_dir
    if args.storage:
        config.storage_path = str(Path(args.storage).expanduser())
    elif config.storage_path:
        config.storage_path = str(Path(config.storage_path).expanduser())

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        day = datetime.strptime(args.date, "%Y-%m-%d").date() if args.date else date.today()
    except ValueError:
        print(f"Error: invalid date '{args.date}' (expected YYYY-MM-DD)", file=sys.stderr)
        sys.exit(1)

    session = PuzzleSession.create(config=config, day=day)

    if args.level:
        session.difficulty = args.difficulty or session.difficulty
        try:
            game_data = load_level_file(args.level, session.difficulty)
        except (LevelNotFoundError, LevelDataError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        session.start(game_data)
    else:
        if args.difficulty:
            blocked = session.check_unlocked(args.difficulty)
            if blocked:
                print(f"Error: {blocked}", file=sys.stderr)
                sys.exit(1)
            session.difficulty = args.difficulty
        session.load()
        if session.error:
            print(f"Error: {session.error}", file=sys.stderr)
            sys.exit(1)

    if session.logic.restore_error:
        print("Saved progress could not be restored; starting fresh.")

    print(describe_state(session))
    print()
    print("Type 'help' for commands.")

    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        output = run_command(session, line)
        if output is None:
            break
        if output:
            print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
