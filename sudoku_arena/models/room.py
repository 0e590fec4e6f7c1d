"""
Room Data Models

Wire records for the shared multiplayer room. Field names on the wire are
camelCase so every client reads the same shape.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..config.game_settings import DIFFICULTIES
from ..utils.game_logger import game_logger
from .game import GameStatus, RoomStatus


def _require(data: Dict[str, Any], key: str, kind):
    value = data.get(key)
    # bool is an int subclass; keep numeric fields strict
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is not bool):
        raise ValueError(f"Field '{key}' is missing or has the wrong type")
    return value


@dataclass
class Player:
    """One participant's published snapshot."""
    id: str
    name: str
    progress: int = 81
    mistakes: int = 0
    completed: bool = False
    status: GameStatus = GameStatus.PLAYING
    time_taken: int = 0
    joined_at: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        if not isinstance(data, dict):
            raise ValueError("Player snapshot must be an object")
        try:
            status = GameStatus(data.get('status'))
        except ValueError:
            raise ValueError(f"Unknown player status '{data.get('status')}'")
        return cls(
            id=_require(data, 'id', str),
            name=_require(data, 'name', str),
            progress=int(_require(data, 'progress', (int, float))),
            mistakes=int(_require(data, 'mistakes', (int, float))),
            completed=bool(data.get('completed', False)),
            status=status,
            time_taken=int(data.get('timeTaken') or 0),
            joined_at=int(data.get('joinedAt') or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'progress': self.progress,
            'mistakes': self.mistakes,
            'completed': self.completed,
            'status': self.status.value,
            'timeTaken': self.time_taken,
            'joinedAt': self.joined_at,
        }


@dataclass
class Room:
    """Shared match record owned collectively by its participants."""
    id: str
    owner_id: str
    status: RoomStatus
    puzzle: str
    solution: str
    difficulty: str
    start_time: Optional[int] = None
    created_at: int = 0
    players: Dict[str, Player] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Room':
        if not isinstance(data, dict):
            raise ValueError("Room must be an object")
        try:
            status = RoomStatus(data.get('status'))
        except ValueError:
            raise ValueError(f"Unknown room status '{data.get('status')}'")
        difficulty = _require(data, 'difficulty', str)
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty '{difficulty}'")
        start_time = data.get('startTime')
        players = {}
        for player_id, player in (data.get('players') or {}).items():
            # A broken entry drops that player, not the whole room
            try:
                players[player_id] = Player.from_dict(player)
            except ValueError as e:
                game_logger.log_error(None, e, 'player_snapshot', f"{data.get('id')}/{player_id}")
        return cls(
            id=_require(data, 'id', str),
            owner_id=_require(data, 'ownerId', str),
            status=status,
            puzzle=_require(data, 'puzzle', str),
            solution=_require(data, 'solution', str),
            difficulty=difficulty,
            start_time=int(start_time) if start_time is not None else None,
            created_at=int(data.get('createdAt') or 0),
            players=players,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'ownerId': self.owner_id,
            'status': self.status.value,
            'puzzle': self.puzzle,
            'solution': self.solution,
            'difficulty': self.difficulty,
            'startTime': self.start_time,
            'createdAt': self.created_at,
            'players': {player_id: player.to_dict() for player_id, player in self.players.items()},
        }

    def opponents_of(self, player_id: str) -> Dict[str, Player]:
        return {pid: p for pid, p in self.players.items() if pid != player_id}
