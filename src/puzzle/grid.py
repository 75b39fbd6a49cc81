"""Grid operations: adjacency, swapping, word location and rendering."""

from typing import List, Optional, Sequence

from .models import CellCoordinates, Grid, Move, Direction


def copy_grid(grid: Grid) -> Grid:
    """Return a row-by-row copy of the grid."""
    return [list(row) for row in grid]


def grid_dimensions(grid: Grid) -> tuple:
    """(rows, cols) of a rectangular grid."""
    if not grid:
        return (0, 0)
    return (len(grid), len(grid[0]))


def in_bounds(grid: Grid, cell: CellCoordinates) -> bool:
    rows, cols = grid_dimensions(grid)
    return 0 <= cell.row < rows and 0 <= cell.col < cols


def are_adjacent(a: CellCoordinates, b: CellCoordinates) -> bool:
    """True if the cells differ by exactly 1 in exactly one axis (no diagonals)."""
    return abs(a.row - b.row) + abs(a.col - b.col) == 1


def swap_direction(a: CellCoordinates, b: CellCoordinates) -> Direction:
    return "horizontal" if a.row == b.row else "vertical"


def swap_cells(grid: Grid, a: CellCoordinates, b: CellCoordinates) -> Grid:
    """Return a new grid with the two cells exchanged. The input is not modified."""
    new_grid = copy_grid(grid)
    new_grid[a.row][a.col], new_grid[b.row][b.col] = new_grid[b.row][b.col], new_grid[a.row][a.col]
    return new_grid


def apply_moves(grid: Grid, moves: Sequence[Move]) -> Grid:
    """Apply a sequence of swaps in order and return the final grid."""
    result = copy_grid(grid)
    for move in moves:
        result = swap_cells(result, move.from_cell, move.to_cell)
    return result


def grids_equal(a: Grid, b: Grid) -> bool:
    """Positional equality of two grids."""
    if len(a) != len(b):
        return False
    return all(list(row_a) == list(row_b) for row_a, row_b in zip(a, b))


def find_word_coordinates(grid: Grid, word: str, move: Optional[Move] = None) -> Optional[List[CellCoordinates]]:
    """
    Locate a word written left-to-right or top-to-bottom in the grid.

    When a move is given, only placements covering one of the swapped cells
    are considered, since a swap can only form words through those cells.
    Rows are scanned before columns, top-left first.

    Returns:
        The word's cells in reading order, or None if it is not on the grid
    """
    word = word.upper()
    rows, cols = grid_dimensions(grid)
    length = len(word)
    if length == 0:
        return None

    touched = set()
    if move is not None:
        touched = {move.from_cell.as_tuple(), move.to_cell.as_tuple()}

    candidates: List[List[CellCoordinates]] = []

    # Horizontal placements
    for r in range(rows):
        for c in range(cols - length + 1):
            candidates.append([CellCoordinates(row=r, col=c + i) for i in range(length)])

    # Vertical placements
    for c in range(cols):
        for r in range(rows - length + 1):
            candidates.append([CellCoordinates(row=r + i, col=c) for i in range(length)])

    for cells in candidates:
        if touched and not any(cell.as_tuple() in touched for cell in cells):
            continue
        if "".join(grid[cell.row][cell.col].upper() for cell in cells) == word:
            return cells

    return None


def render_grid(grid: Grid, highlight: Sequence[CellCoordinates] = ()) -> str:
    """
    Render the grid to a string, one row per line.

    Highlighted cells are shown in lowercase.
    """
    if not grid:
        return ""

    marked = {cell.as_tuple() for cell in highlight}
    lines = [
        " ".join(
            letter.lower() if (r, c) in marked else letter.upper()
            for c, letter in enumerate(row)
        )
        for r, row in enumerate(grid)
    ]

    return "\n".join(lines)
