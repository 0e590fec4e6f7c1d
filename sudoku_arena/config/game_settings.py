"""
Game Rule Constants Module

This module defines all puzzle rule constants. All game parameters are
centralized here to enable easy modification.
"""

import string
from typing import Dict, Final, Tuple

GRID_SIZE: Final[int] = 9
"""Rows and columns of the puzzle grid."""

CELL_COUNT: Final[int] = GRID_SIZE * GRID_SIZE

BLANK_CHAR: Final[str] = '-'
"""Placeholder for an empty cell in puzzle strings."""

MAX_MISTAKES: Final[int] = 3
"""
Number of incorrect placements that ends a game.
Type: Final[int] - Immutable to prevent accidental modification
"""

MAX_ROOM_PLAYERS: Final[int] = 4
MIN_ROOM_PLAYERS: Final[int] = 2

DIFFICULTIES: Final[Tuple[str, ...]] = ('easy', 'medium', 'hard')

# Assist kicks in once this many (or fewer) empty cells remain
AUTOFILL_THRESHOLDS: Final[Dict[str, int]] = {
    'easy': 10,
    'medium': 8,
    'hard': 5,
}

# Cells removed from a solved grid to produce a puzzle
HOLES_BY_DIFFICULTY: Final[Dict[str, int]] = {
    'easy': 40,
    'medium': 48,
    'hard': 54,
}

ROOM_CODE_LENGTH: Final[int] = 6
ROOM_CODE_ALPHABET: Final[str] = string.ascii_uppercase + string.digits


def validate_game_settings() -> bool:
    """
    Validates the consistency of the rule constants.

    Returns:
        bool: True if every check passes

    Raises:
        ValueError: If any check fails with a detailed error message
    """
    for difficulty in DIFFICULTIES:
        if difficulty not in AUTOFILL_THRESHOLDS:
            raise ValueError(f"Missing auto-fill threshold for '{difficulty}'")
        if difficulty not in HOLES_BY_DIFFICULTY:
            raise ValueError(f"Missing hole count for '{difficulty}'")
        # 17 clues is the minimum for a unique solution
        if not 0 < HOLES_BY_DIFFICULTY[difficulty] <= CELL_COUNT - 17:
            raise ValueError(f"Hole count for '{difficulty}' is out of range")

    thresholds = [AUTOFILL_THRESHOLDS[d] for d in DIFFICULTIES]
    if thresholds != sorted(thresholds, reverse=True):
        raise ValueError("Auto-fill thresholds must shrink as difficulty grows")

    if MIN_ROOM_PLAYERS > MAX_ROOM_PLAYERS:
        raise ValueError("Room player limits are inverted")

    return True


if __name__ == "__main__":

    try:
        validate_game_settings()
        print(" All configuration validation checks passed")
    except ValueError as config_error:
        print(f" Configuration validation failed: {config_error}")
        exit(1)
