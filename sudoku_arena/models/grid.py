"""
Grid Model

Pure puzzle data: the given clues, the working grid, annotations, mistake
tracking and mutation history. Mutation rules live in the move processor and
undo log; this module only knows how to build, copy and inspect a grid.
"""

from typing import List, Optional, Set, Tuple

from ..config.game_settings import GRID_SIZE, CELL_COUNT, BLANK_CHAR
from .game import GameStatus, HistoryEntry, TERMINAL_STATUSES

Board = List[List[Optional[int]]]
Cell = Tuple[int, int]


def empty_board() -> Board:
    return [[None] * GRID_SIZE for _ in range(GRID_SIZE)]


def empty_notes() -> List[List[List[int]]]:
    return [[[] for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]


def copy_board(board: Board) -> Board:
    return [row[:] for row in board]


def parse_puzzle(puzzle: str) -> Board:
    """
    Parse an 81-character puzzle string into a 9x9 board.

    Args:
        puzzle: Row-major digits with BLANK_CHAR for empty cells

    Returns:
        Board with None for blanks

    Raises:
        ValueError: If the string has the wrong length or an unknown character
    """
    if not isinstance(puzzle, str) or len(puzzle) != CELL_COUNT:
        raise ValueError(f"Puzzle must be a {CELL_COUNT}-character string")

    board = empty_board()
    for index, char in enumerate(puzzle):
        if char == BLANK_CHAR:
            continue
        if char not in "123456789":
            raise ValueError(f"Invalid puzzle character '{char}' at index {index}")
        board[index // GRID_SIZE][index % GRID_SIZE] = int(char)
    return board


def validate_solution(solution: str) -> str:
    if not isinstance(solution, str) or len(solution) != CELL_COUNT or not solution.isdigit() or '0' in solution:
        raise ValueError(f"Solution must be {CELL_COUNT} digits between 1 and 9")
    return solution


def count_empty(board: Board) -> int:
    return sum(1 for row in board for cell in row if cell is None)


def in_bounds(row: int, col: int) -> bool:
    return isinstance(row, int) and isinstance(col, int) and 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE


class Grid:
    """
    Mutable state of one puzzle in play.

    `mistakes` is the lifetime tally of incorrect placements, `mistake_cells`
    the live set of cells currently showing a wrong digit. `progress` is the
    number of empty working cells and is maintained incrementally.
    """

    def __init__(self):
        self.clear()

    def clear(self):
        """Back to an idle, blank grid."""
        self.board: Board = empty_board()
        self.initial_board: Board = empty_board()
        self.solution = ''
        self.difficulty = 'easy'
        self.notes = empty_notes()
        self.mistakes = 0
        self.mistake_cells: Set[Cell] = set()
        self.history: List[HistoryEntry] = []
        self.progress = CELL_COUNT
        self.status = GameStatus.IDLE
        self.start_time: Optional[int] = None
        self.end_time: Optional[int] = None

    def load(self, puzzle: str, solution: str, difficulty: str, now_ms: int):
        """Install a new puzzle and begin play."""
        board = parse_puzzle(puzzle)
        validate_solution(solution)

        self.board = board
        self.initial_board = copy_board(board)
        self.solution = solution
        self.difficulty = difficulty
        self.notes = empty_notes()
        self.mistakes = 0
        self.mistake_cells = set()
        self.history = []
        self.progress = count_empty(board)
        self.status = GameStatus.PLAYING
        self.start_time = now_ms
        self.end_time = None

    def restore_initial(self, now_ms: int):
        """Wipe every placement but keep the same puzzle."""
        self.board = copy_board(self.initial_board)
        self.notes = empty_notes()
        self.mistakes = 0
        self.mistake_cells = set()
        self.history = []
        self.progress = count_empty(self.initial_board)
        self.start_time = now_ms
        self.end_time = None
        if self.status in TERMINAL_STATUSES:
            self.status = GameStatus.PLAYING

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_given(self, row: int, col: int) -> bool:
        return self.initial_board[row][col] is not None

    def solution_digit(self, row: int, col: int) -> int:
        return int(self.solution[row * GRID_SIZE + col])

    def first_empty_cell(self) -> Optional[Cell]:
        """Row-major scan for the first empty working cell."""
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                if self.board[r][c] is None:
                    return r, c
        return None
