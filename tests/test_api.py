"""HTTP endpoints: single-player games, identity, rooms and scores."""

import datetime

import pytest

from conftest import PUZZLE, wrong_digit


def auth(token):
    return {'Authorization': f"Bearer {token}"}


@pytest.fixture
def game(client):
    response = client.post('/api/new_game', json={'difficulty': 'easy'})
    assert response.status_code == 200
    return response.get_json()


def blanks(state):
    return [(r, c) for r in range(9) for c in range(9) if state['board'][r][c] is None]


def test_health(client):
    body = client.get('/api/health').get_json()
    assert body['status'] == 'healthy'
    assert body['store_backend'] == 'MemoryStore'


def test_new_game(game):
    assert game['success']
    assert game['state']['status'] == 'playing'
    assert game['state']['progress'] == PUZZLE.count('-')
    assert game['state']['solution'] is None


def test_new_game_rejects_unknown_difficulty(client):
    response = client.post('/api/new_game', json={'difficulty': 'extreme'})
    assert response.status_code == 400
    assert not response.get_json()['success']


def test_move_note_undo_flow(client, game):
    game_id = game['game_id']

    moved = client.post(f"/api/game/{game_id}/move", json={'row': 0, 'col': 2, 'value': 4}).get_json()
    assert moved['success']
    assert moved['state']['board'][0][2] == 4

    wrong = client.post(f"/api/game/{game_id}/move",
                        json={'row': 0, 'col': 3, 'value': wrong_digit(0, 3)}).get_json()
    assert wrong['state']['mistakes'] == 1
    assert wrong['state']['mistake_cells'] == [[0, 3]]

    noted = client.post(f"/api/game/{game_id}/note", json={'row': 0, 'col': 5, 'digit': 8}).get_json()
    assert noted['state']['notes'][0][5] == [8]

    undone = client.post(f"/api/game/{game_id}/undo").get_json()
    assert undone['success']
    assert undone['state']['board'][0][3] is None
    assert undone['state']['mistakes'] == 1

    state = client.get(f"/api/game/{game_id}/state").get_json()['state']
    assert state['progress'] == PUZZLE.count('-') - 1


def test_rejected_move_is_not_a_client_error(client, game):
    response = client.post(f"/api/game/{game['game_id']}/move", json={'row': 0, 'col': 0, 'value': 9})
    assert response.status_code == 200
    body = response.get_json()
    assert not body['success']
    assert body['state']['board'][0][0] == 5


def test_malformed_move_is_rejected(client, game):
    game_id = game['game_id']
    assert client.post(f"/api/game/{game_id}/move", json={'row': 'a', 'col': 0, 'value': 1}).status_code == 400
    assert client.post(f"/api/game/{game_id}/move", json={'row': 0, 'col': 0, 'value': 'x'}).status_code == 400
    assert client.post(f"/api/game/{game_id}/note", json={'row': 0, 'col': 0}).status_code == 400


def test_clearing_with_null_value(client, game):
    game_id = game['game_id']
    client.post(f"/api/game/{game_id}/move", json={'row': 0, 'col': 2, 'value': 4})
    cleared = client.post(f"/api/game/{game_id}/move", json={'row': 0, 'col': 2, 'value': None}).get_json()
    assert cleared['success']
    assert cleared['state']['board'][0][2] is None


def test_reset_board_and_game(client, game):
    game_id = game['game_id']
    client.post(f"/api/game/{game_id}/move", json={'row': 0, 'col': 2, 'value': 4})

    board = client.post(f"/api/game/{game_id}/reset", json={'scope': 'board'}).get_json()
    assert board['state']['board'][0][2] is None
    assert board['state']['status'] == 'playing'

    idle = client.post(f"/api/game/{game_id}/reset", json={'scope': 'game'}).get_json()
    assert idle['state']['status'] == 'idle'

    assert client.post(f"/api/game/{game_id}/reset", json={'scope': 'all'}).status_code == 400


def test_delete_game(client, game):
    game_id = game['game_id']
    assert client.delete(f"/api/game/{game_id}").status_code == 200
    assert client.get(f"/api/game/{game_id}/state").status_code == 404
    assert client.post(f"/api/game/{game_id}/undo").status_code == 404
def win_daily(client, services, token, date):
    created = client.post('/api/new_game', json={'date': date}, headers=auth(token)).get_json()
    game_id = created['game_id']
    for r, c in blanks(created['state']):
        value = int(services['generator'].solution[r * 9 + c])
        last = client.post(f"/api/game/{game_id}/move", json={'row': r, 'col': c, 'value': value}).get_json()
    return created, last


def test_daily_win_is_remembered(client, services, register):
    token, player = register('Alice')
    created, last = win_daily(client, services, token, '2024-06-01')
    assert created['state']['difficulty'] == 'hard'
    assert created['state']['daily_date'] == '2024-06-01'
    assert last['state']['status'] == 'won'
    assert services['preferences'].is_daily_completed(player['id'], '2024-06-01')

    calendar = client.get('/api/daily?year=2024&month=6', headers=auth(token)).get_json()
    assert calendar['completed_in_month'] == ['2024-06-01']


def test_daily_progress_is_per_player(client, services, register):
    alice_token, alice = register('Alice')
    bob_token, bob = register('Bob')
    today = datetime.date.today()
    yesterday = today - datetime.timedelta(days=1)

    win_daily(client, services, alice_token, yesterday.strftime('%Y-%m-%d'))
    win_daily(client, services, alice_token, today.strftime('%Y-%m-%d'))

    alice_calendar = client.get('/api/daily', headers=auth(alice_token)).get_json()
    bob_calendar = client.get('/api/daily', headers=auth(bob_token)).get_json()
    assert alice_calendar['current_streak'] == 2
    assert alice_calendar['completed_today']
    assert bob_calendar['current_streak'] == 0
    assert not bob_calendar['completed_today']
    assert not services['preferences'].is_daily_completed(bob['id'], today.strftime('%Y-%m-%d'))
    assert services['preferences'].player_name(alice['id']) == 'Alice'
    assert services['preferences'].player_name(bob['id']) == 'Bob'


def test_daily_endpoints_require_token(client):
    assert client.post('/api/new_game', json={'date': '2024-06-01'}).status_code == 401
    assert client.get('/api/daily').status_code == 401
    # Regular games stay anonymous
    assert client.post('/api/new_game', json={'difficulty': 'easy'}).status_code == 200


def test_bad_daily_date(client):
    assert client.post('/api/new_game', json={'date': '01/06/2024'}).status_code == 400


def test_register_player(client, services):
    response = client.post('/api/players', json={'name': 'Alice'})
    assert response.status_code == 201
    body = response.get_json()
    assert body['player']['name'] == 'Alice'
    assert services['preferences'].player_name(body['player']['id']) == 'Alice'

    me = client.get('/api/players/me', headers=auth(body['token'])).get_json()
    assert me['player'] == body['player']

    assert client.post('/api/players', json={'name': ''}).status_code == 400


def test_room_endpoints_require_token(client):
    assert client.post('/api/rooms', json={'difficulty': 'easy'}).status_code == 401
    assert client.post('/api/rooms', json={}, headers=auth('garbage')).status_code == 401


def test_room_lifecycle(client, register):
    alice_token, _ = register('Alice')
    bob_token, bob = register('Bob')

    created = client.post('/api/rooms', json={'difficulty': 'easy'}, headers=auth(alice_token))
    assert created.status_code == 201
    room_id = created.get_json()['room_id']
    assert 'solution' not in created.get_json()['room']

    assert client.post(f"/api/rooms/{room_id}/start", headers=auth(alice_token)).status_code == 409

    joined = client.post(f"/api/rooms/{room_id.lower()}/join", headers=auth(bob_token))
    assert joined.get_json()['success']

    forbidden = client.post(f"/api/rooms/{room_id}/start", headers=auth(bob_token))
    assert forbidden.status_code == 403
    assert forbidden.get_json()['code'] == 'not_owner'

    assert client.post(f"/api/rooms/{room_id}/start", headers=auth(alice_token)).get_json()['success']

    room = client.get(f"/api/rooms/{room_id}").get_json()['room']
    assert room['status'] == 'playing'
    assert set(room['players']) == {bob['id'], room['ownerId']}
    assert 'solution' not in room

    assert client.post(f"/api/rooms/{room_id}/leave", headers=auth(bob_token)).get_json()['success']
    assert client.post(f"/api/rooms/{room_id}/leave", headers=auth(alice_token)).get_json()['room_deleted']
    assert client.get(f"/api/rooms/{room_id}").status_code == 404


def test_join_missing_room(client, register):
    token, _ = register('Carol')
    response = client.post('/api/rooms/ZZZZZZ/join', headers=auth(token))
    assert response.status_code == 404
    assert response.get_json()['code'] == 'room_not_found'


def test_scores(client, register, services):
    token, player = register('Alice')
    services['ledger'].record_result(player['id'], 'opp', 'Opponent', True)

    scores = client.get('/api/scores', headers=auth(token)).get_json()['scores']
    assert scores == [{
        'opponent_id': 'opp', 'opponent_name': 'Opponent', 'wins': 1, 'losses': 0, 'games_played': 1
    }]
