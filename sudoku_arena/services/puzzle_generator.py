"""
Puzzle Generator

Produces solved grids and puzzles with a unique solution. The seeded variant
lets every client derive the same daily puzzle from a date string without
transmitting it.
"""

import datetime
import hashlib
import random
from typing import Dict, List, Optional

from ..config.game_settings import GRID_SIZE, BLANK_CHAR, DIFFICULTIES, HOLES_BY_DIFFICULTY

Matrix = List[List[int]]


class PuzzleGenerator:
    """Randomized backtracking Sudoku generator."""

    def __init__(self, size: int = GRID_SIZE):
        self.size = size
        self.box = int(size ** 0.5)

    def generate(self, difficulty: str) -> Dict[str, str]:
        """
        Generate a fresh puzzle.

        Args:
            difficulty: One of DIFFICULTIES

        Returns:
            dict with 'puzzle' (BLANK_CHAR for empty cells), 'solution' and 'difficulty'

        Raises:
            ValueError: If the difficulty is unknown
        """
        return self._build(difficulty, random.Random())

    def generate_seeded(self, seed: str, difficulty: str) -> Dict[str, str]:
        """Deterministic variant: the same seed and difficulty always give the same puzzle."""
        digest = hashlib.sha256(f"{seed}:{difficulty}".encode('utf-8')).hexdigest()
        return self._build(difficulty, random.Random(int(digest, 16)))

    def _build(self, difficulty: str, rng: random.Random) -> Dict[str, str]:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty '{difficulty}'")

        solution = [[0] * self.size for _ in range(self.size)]
        self._fill(solution, rng)
        puzzle = self._dig_holes(solution, HOLES_BY_DIFFICULTY[difficulty], rng)

        return {
            'puzzle': ''.join(BLANK_CHAR if v == 0 else str(v) for row in puzzle for v in row),
            'solution': ''.join(str(v) for row in solution for v in row),
            'difficulty': difficulty,
        }

    def _is_safe(self, grid: Matrix, row: int, col: int, num: int) -> bool:
        if num in grid[row]:
            return False
        if any(grid[r][col] == num for r in range(self.size)):
            return False
        start_row, start_col = row - row % self.box, col - col % self.box
        for r in range(start_row, start_row + self.box):
            for c in range(start_col, start_col + self.box):
                if grid[r][c] == num:
                    return False
        return True

    def _fill(self, grid: Matrix, rng: random.Random) -> bool:
        for r in range(self.size):
            for c in range(self.size):
                if grid[r][c] == 0:
                    nums = list(range(1, self.size + 1))
                    rng.shuffle(nums)
                    for num in nums:
                        if self._is_safe(grid, r, c, num):
                            grid[r][c] = num
                            if self._fill(grid, rng):
                                return True
                            grid[r][c] = 0  # Backtrack
                    return False
        return True

    def _count_solutions(self, grid: Matrix, limit: int = 2) -> int:
        # Branch on the empty cell with the fewest candidates
        best = None
        for r in range(self.size):
            for c in range(self.size):
                if grid[r][c] == 0:
                    candidates = [n for n in range(1, self.size + 1) if self._is_safe(grid, r, c, n)]
                    if not candidates:
                        return 0
                    if best is None or len(candidates) < len(best[2]):
                        best = (r, c, candidates)
        if best is None:
            return 1

        r, c, candidates = best
        count = 0
        for num in candidates:
            grid[r][c] = num
            count += self._count_solutions(grid, limit - count)
            grid[r][c] = 0
            if count >= limit:
                break
        return count

    def _dig_holes(self, solution: Matrix, holes: int, rng: random.Random) -> Matrix:
        puzzle = [row[:] for row in solution]
        cells = [(r, c) for r in range(self.size) for c in range(self.size)]
        rng.shuffle(cells)

        removed = 0
        for r, c in cells:
            if removed >= holes:
                break
            kept = puzzle[r][c]
            puzzle[r][c] = 0
            if self._count_solutions([row[:] for row in puzzle]) != 1:
                puzzle[r][c] = kept  # Put it back if it breaks uniqueness
            else:
                removed += 1
        return puzzle


def get_daily_difficulty(date: datetime.date) -> str:
    """Weekend dailies are hard, Monday and Tuesday easy, the rest medium."""
    weekday = date.weekday()  # Monday == 0
    if weekday >= 5:
        return 'hard'
    if weekday <= 1:
        return 'easy'
    return 'medium'


# Global generator instance
_puzzle_generator = None


def get_puzzle_generator() -> Optional[PuzzleGenerator]:
    """Get the global puzzle generator instance."""
    return _puzzle_generator


def initialize_puzzle_generator(generator=None) -> PuzzleGenerator:
    """Initialize the global puzzle generator instance."""
    global _puzzle_generator
    _puzzle_generator = generator or PuzzleGenerator()
    return _puzzle_generator
