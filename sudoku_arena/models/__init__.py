"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import GameState, GameStatus, RoomStatus, HistoryEntry, TERMINAL_STATUSES
from .grid import Grid, parse_puzzle, count_empty
from .room import Player, Room
from .ledger import BattleRecord

__all__ = [
    'GameState', 'GameStatus', 'RoomStatus', 'HistoryEntry', 'TERMINAL_STATUSES',
    'Grid', 'parse_puzzle', 'count_empty', 'Player', 'Room', 'BattleRecord'
]
