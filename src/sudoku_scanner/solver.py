"""Filling a scanned Puzzle with a solution."""

import logging
from typing import Callable, List, Optional

from .model import Puzzle

logger = logging.getLogger(__name__)

Grid = List[List[int]]  # 9x9, 0 = blank
GridSolver = Callable[[Grid], Optional[Grid]]


def clone_grid(grid: Grid) -> Grid:
    return [row[:] for row in grid]


def _allowed(grid: Grid, r: int, c: int, digit: int) -> bool:
    if digit in grid[r]:
        return False
    if any(grid[i][c] == digit for i in range(9)):
        return False
    r0, c0 = 3 * (r // 3), 3 * (c // 3)
    return all(grid[r0 + i][c0 + j] != digit for i in range(3) for j in range(3))


def is_consistent(grid: Grid) -> bool:
    """True if no row, column or box repeats a non-zero digit."""
    for r in range(9):
        for c in range(9):
            digit = grid[r][c]
            if digit == 0:
                continue
            grid[r][c] = 0
            ok = _allowed(grid, r, c, digit)
            grid[r][c] = digit
            if not ok:
                return False
    return True


def backtrack(grid: Grid) -> Optional[Grid]:
    """
    Depth-first Sudoku solver.

    Args:
        grid: 9x9 list of lists, 0 for blanks

    Returns:
        Solved copy of the grid, or None if it has no solution
    """
    work = clone_grid(grid)
    if not is_consistent(work):
        return None

    blanks = [(r, c) for r in range(9) for c in range(9) if work[r][c] == 0]

    def fill(index: int) -> bool:
        if index == len(blanks):
            return True
        r, c = blanks[index]
        for digit in range(1, 10):
            if _allowed(work, r, c, digit):
                work[r][c] = digit
                if fill(index + 1):
                    return True
        work[r][c] = 0
        return False

    return work if fill(0) else None


def solve(puzzle: Puzzle, solve_grid: GridSolver = backtrack) -> bool:
    """
    Solve a puzzle in place.

    Values below 1 (blank or unclassified) are handed to the solver as 0.
    Solved values are written back with set_value_at, which leaves fixed
    values alone.

    Args:
        puzzle: Puzzle to fill
        solve_grid: Callable returning a solved 9x9 grid or None

    Returns:
        True if a solution was written, False if the solver found none
    """
    grid = [[max(value, 0) for value in row] for row in puzzle.to_grid()]
    logger.info("Solving puzzle with %d given values", sum(1 for row in grid for v in row if v))

    solution = solve_grid(grid)
    if solution is None:
        logger.info("No solution found for this puzzle")
        return False

    for r, row in enumerate(solution):
        for c, value in enumerate(row):
            puzzle.set_value_at(9 * r + c, value)
    return True
