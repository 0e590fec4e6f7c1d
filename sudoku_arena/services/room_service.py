"""
Room Service

Manages shared multiplayer rooms: creation, joining, starting rounds,
leaving and deletion. Failures a player can cause (bad code, room already
running, room full) come back as structured results, not exceptions.
"""

import random
from typing import Any, Dict, Optional

from ..config.game_settings import (
    DIFFICULTIES, MAX_ROOM_PLAYERS, MIN_ROOM_PLAYERS, ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH
)
from ..models.game import GameStatus, RoomStatus
from ..models.room import Player, Room
from ..storage.shared_store import SharedStore
from ..utils.game_logger import game_logger

ROOMS_ROOT = 'rooms'


def room_path(room_id: str) -> str:
    return f"{ROOMS_ROOT}/{room_id}"


def player_path(room_id: str, player_id: str) -> str:
    return f"{ROOMS_ROOT}/{room_id}/players/{player_id}"


def _failure(code: str, error: str) -> Dict[str, Any]:
    return {'success': False, 'code': code, 'error': error}


class RoomService:
    """
    Room lifecycle on top of the shared store.
    """

    def __init__(self, store: SharedStore, generator):
        self.store = store
        self.generator = generator

    def _generate_room_id(self) -> str:
        while True:
            room_id = ''.join(random.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
            if self.store.get(room_path(room_id)) is None:
                return room_id

    def _new_player(self, player_id: str, player_name: str) -> Player:
        return Player(
            id=player_id,
            name=player_name,
            progress=81,
            mistakes=0,
            completed=False,
            status=GameStatus.PLAYING,
            time_taken=0,
            joined_at=self.store.server_timestamp(),
        )

    def create_room(self, player_id: str, player_name: str, difficulty: str) -> str:
        """
        Create a waiting room owned by the caller.

        Returns:
            str: The new room code

        Raises:
            ValueError: If the difficulty is unknown
        """
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty '{difficulty}'")

        data = self.generator.generate(difficulty)
        room_id = self._generate_room_id()
        room = Room(
            id=room_id,
            owner_id=player_id,
            status=RoomStatus.WAITING,
            puzzle=data['puzzle'],
            solution=data['solution'],
            difficulty=difficulty,
            start_time=None,
            created_at=self.store.server_timestamp(),
            players={player_id: self._new_player(player_id, player_name)},
        )
        self.store.set(room_path(room_id), room.to_dict())

        game_logger.log_game_event(room_id, 'room_created', player_id, difficulty=difficulty)
        return room_id

    def get_room(self, room_id: str) -> Optional[Room]:
        data = self.store.get(room_path(room_id))
        return Room.from_dict(data) if data is not None else None

    def join_room(self, room_id: str, player_id: str, player_name: str) -> Dict[str, Any]:
        """Add a player snapshot to a waiting room."""
        room = self.get_room(room_id)
        if room is None:
            return _failure('room_not_found', 'Room code not found. Please check and try again.')

        if player_id in room.players:
            return {'success': True, 'room_id': room_id, 'message': 'Already in this room'}

        if room.status != RoomStatus.WAITING:
            return _failure('already_started', 'Game already in progress or finished.')

        if len(room.players) >= MAX_ROOM_PLAYERS:
            return _failure('room_full', f'Room is full (maximum {MAX_ROOM_PLAYERS} players).')

        self.store.set(player_path(room_id, player_id), self._new_player(player_id, player_name).to_dict())

        game_logger.log_game_event(room_id, 'room_joined', player_id, player_name=player_name)
        return {'success': True, 'room_id': room_id}

    def start_room(self, room_id: str, starter_id: str) -> Dict[str, Any]:
        """
        Begin a round. Only the owner may start, from Waiting or, for a
        rematch in the same room, from Finished.
        """
        room = self.get_room(room_id)
        if room is None:
            return _failure('room_not_found', 'Room not found')

        if room.owner_id != starter_id:
            return _failure('not_owner', 'Only the room owner can start the game.')

        if room.status == RoomStatus.PLAYING:
            return _failure('already_started', 'Game already in progress.')

        if len(room.players) < MIN_ROOM_PLAYERS:
            return _failure('not_enough_players', f'At least {MIN_ROOM_PLAYERS} players are needed.')

        data = self.generator.generate(room.difficulty)

        players = {}
        for player_id, player in room.players.items():
            player.progress = 81
            player.mistakes = 0
            player.completed = False
            player.status = GameStatus.PLAYING
            player.time_taken = 0
            players[player_id] = player.to_dict()

        self.store.update(room_path(room_id), {
            'status': RoomStatus.PLAYING.value,
            'startTime': self.store.server_timestamp(),
            'puzzle': data['puzzle'],
            'solution': data['solution'],
            'players': players,
        })

        game_logger.log_game_event(room_id, 'room_started', starter_id, players=len(players))
        return {'success': True, 'room_id': room_id}

    def leave_room(self, room_id: str, player_id: str) -> Dict[str, Any]:
        """Remove a player; an emptied room is deleted, an orphaned one gets a new owner."""
        room = self.get_room(room_id)
        if room is None:
            return _failure('room_not_found', 'Room not found')

        if player_id not in room.players:
            return _failure('not_in_room', 'Not in this room')

        remaining = room.opponents_of(player_id)
        if not remaining:
            self.delete_room(room_id)
            return {'success': True, 'room_deleted': True}

        updates: Dict[str, Any] = {f"players/{player_id}": None}
        if room.owner_id == player_id:
            successor = min(remaining.values(), key=lambda p: p.joined_at)
            updates['ownerId'] = successor.id
        self.store.update(room_path(room_id), updates)

        game_logger.log_game_event(room_id, 'room_left', player_id)
        return {'success': True, 'room_deleted': False}

    def delete_room(self, room_id: str) -> None:
        self.store.remove(room_path(room_id))
        game_logger.log_game_event(room_id, 'room_deleted', 'system')


# Global service instance
_room_service = None


def get_room_service() -> Optional[RoomService]:
    """Get the global room service instance."""
    return _room_service


def initialize_room_service(store: SharedStore, generator) -> RoomService:
    """Initialize the global room service instance."""
    global _room_service
    _room_service = RoomService(store, generator)
    return _room_service
