"""Room lifecycle on the shared store."""

import pytest

from conftest import PUZZLE, SOLUTION
from sudoku_arena.config.game_settings import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH
from sudoku_arena.models.game import GameStatus, RoomStatus
from sudoku_arena.services.room_service import RoomService, player_path


@pytest.fixture
def rooms(store, generator):
    return RoomService(store, generator)


def test_create_room(rooms):
    room_id = rooms.create_room('alice', 'Alice', 'hard')

    assert len(room_id) == ROOM_CODE_LENGTH
    assert all(ch in ROOM_CODE_ALPHABET for ch in room_id)
    room = rooms.get_room(room_id)
    assert room.owner_id == 'alice'
    assert room.status == RoomStatus.WAITING
    assert room.difficulty == 'hard'
    assert room.puzzle == PUZZLE and room.solution == SOLUTION
    assert room.players['alice'].progress == 81
    assert room.players['alice'].status == GameStatus.PLAYING


def test_create_room_rejects_unknown_difficulty(rooms):
    with pytest.raises(ValueError):
        rooms.create_room('alice', 'Alice', 'nightmare')


def test_join_room_failures(rooms, store):
    assert rooms.join_room('NOPE00', 'bob', 'Bob')['code'] == 'room_not_found'

    room_id = rooms.create_room('alice', 'Alice', 'easy')
    for index in range(3):
        assert rooms.join_room(room_id, f"p{index}", f"P{index}")['success']
    full = rooms.join_room(room_id, 'late', 'Late')
    assert full == {'success': False, 'code': 'room_full', 'error': full['error']}

    store.set(f"rooms/{room_id}/status", 'playing')
    assert rooms.join_room(room_id, 'later', 'Later')['code'] == 'already_started'


def test_rejoining_is_harmless(rooms):
    room_id = rooms.create_room('alice', 'Alice', 'easy')
    assert rooms.join_room(room_id, 'alice', 'Alice')['success']
    assert len(rooms.get_room(room_id).players) == 1


def test_start_room_rules(rooms):
    room_id = rooms.create_room('alice', 'Alice', 'easy')
    assert rooms.start_room(room_id, 'alice')['code'] == 'not_enough_players'

    rooms.join_room(room_id, 'bob', 'Bob')
    assert rooms.start_room(room_id, 'bob')['code'] == 'not_owner'
    assert rooms.start_room('NOPE00', 'alice')['code'] == 'room_not_found'

    assert rooms.start_room(room_id, 'alice')['success']
    assert rooms.start_room(room_id, 'alice')['code'] == 'already_started'


def test_start_resets_every_snapshot(rooms, store, generator):
    room_id = rooms.create_room('alice', 'Alice', 'easy')
    rooms.join_room(room_id, 'bob', 'Bob')
    store.update(player_path(room_id, 'bob'), {'progress': 3, 'mistakes': 2, 'status': 'lost'})
    store.set(f"rooms/{room_id}/status", 'finished')
    calls = generator.calls

    assert rooms.start_room(room_id, 'alice')['success']

    room = rooms.get_room(room_id)
    assert generator.calls == calls + 1
    assert room.status == RoomStatus.PLAYING
    assert room.start_time is not None
    bob = room.players['bob']
    assert (bob.progress, bob.mistakes, bob.status, bob.completed) == (81, 0, GameStatus.PLAYING, False)


def test_leave_room_transfers_ownership(rooms, scheduler):
    room_id = rooms.create_room('alice', 'Alice', 'easy')
    rooms.join_room(room_id, 'bob', 'Bob')

    assert rooms.leave_room(room_id, 'alice') == {'success': True, 'room_deleted': False}
    room = rooms.get_room(room_id)
    assert room.owner_id == 'bob'
    assert 'alice' not in room.players

    assert rooms.leave_room(room_id, 'alice')['code'] == 'not_in_room'
    assert rooms.leave_room(room_id, 'bob') == {'success': True, 'room_deleted': True}
    assert rooms.get_room(room_id) is None


def test_malformed_room_record_raises(rooms, store):
    store.set('rooms/BAD000', {'status': 'playing'})
    with pytest.raises(ValueError):
        rooms.get_room('BAD000')


def test_malformed_player_entry_is_dropped(rooms, store):
    room_id = rooms.create_room('alice', 'Alice', 'easy')
    store.set(f"rooms/{room_id}/players/ghost", {'status': 'disconnected'})

    room = rooms.get_room(room_id)
    assert set(room.players) == {'alice'}
