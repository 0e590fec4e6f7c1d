"""Puzzle generation: valid solutions, unique puzzles, deterministic dailies."""

import datetime

import pytest

from sudoku_arena.config.game_settings import HOLES_BY_DIFFICULTY
from sudoku_arena.services.puzzle_generator import PuzzleGenerator, get_daily_difficulty


def rows_of(text):
    return [[int(ch) if ch != '-' else 0 for ch in text[r * 9:(r + 1) * 9]] for r in range(9)]


def is_valid_solution(solution):
    grid = rows_of(solution)
    full = set(range(1, 10))
    for i in range(9):
        if set(grid[i]) != full or {grid[r][i] for r in range(9)} != full:
            return False
    for br in range(0, 9, 3):
        for bc in range(0, 9, 3):
            if {grid[r][c] for r in range(br, br + 3) for c in range(bc, bc + 3)} != full:
                return False
    return True


@pytest.fixture(scope='module')
def generator():
    return PuzzleGenerator()


def test_easy_puzzle_shape(generator):
    data = generator.generate('easy')

    assert data['difficulty'] == 'easy'
    assert len(data['puzzle']) == 81 and len(data['solution']) == 81
    assert is_valid_solution(data['solution'])
    assert data['puzzle'].count('-') == HOLES_BY_DIFFICULTY['easy']
    for given, answer in zip(data['puzzle'], data['solution']):
        assert given == '-' or given == answer


def test_puzzle_has_unique_solution(generator):
    data = generator.generate('medium')
    assert generator._count_solutions(rows_of(data['puzzle'])) == 1


def test_seeded_generation_is_deterministic(generator):
    first = generator.generate_seeded('2024-06-01', 'medium')
    second = generator.generate_seeded('2024-06-01', 'medium')
    other = generator.generate_seeded('2024-06-02', 'medium')

    assert first == second
    assert first['solution'] != other['solution'] or first['puzzle'] != other['puzzle']


def test_unknown_difficulty(generator):
    with pytest.raises(ValueError):
        generator.generate('impossible')


@pytest.mark.parametrize('date, expected', [
    (datetime.date(2024, 6, 1), 'hard'),    # Saturday
    (datetime.date(2024, 6, 2), 'hard'),    # Sunday
    (datetime.date(2024, 6, 3), 'easy'),    # Monday
    (datetime.date(2024, 6, 4), 'easy'),    # Tuesday
    (datetime.date(2024, 6, 5), 'medium'),  # Wednesday
    (datetime.date(2024, 6, 7), 'medium'),  # Friday
])
def test_daily_difficulty_by_weekday(date, expected):
    assert get_daily_difficulty(date) == expected
