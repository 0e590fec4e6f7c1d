"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class GameStatus(Enum):
    """Lifecycle of one player's game."""
    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"
    DISCONNECTED = "disconnected"  # only ever written to a remote player snapshot


TERMINAL_STATUSES = (GameStatus.WON, GameStatus.LOST)


class RoomStatus(Enum):
    """Lifecycle of a shared multiplayer room."""
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class HistoryEntry:
    """One reversible grid mutation."""
    row: int
    col: int
    previous_value: Optional[int]


@dataclass
class GameState:
    """Serializable snapshot of a session, safe to send to clients."""
    session_id: str
    status: str
    difficulty: str
    board: List[List[Optional[int]]]
    initial_board: List[List[Optional[int]]]
    notes: List[List[List[int]]]
    mistakes: int
    mistake_cells: List[Tuple[int, int]]
    progress: int
    can_undo: bool
    start_time: Optional[int] = None  # epoch ms
    end_time: Optional[int] = None  # epoch ms
    autofill_target: Optional[Tuple[int, int]] = None
    daily_date: Optional[str] = None
    mode: str = "single"  # "single" or "multiplayer"
    room_id: Optional[str] = None
    solution: Optional[str] = field(default=None)  # only included when the game is over
