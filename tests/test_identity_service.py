"""Anonymous player tokens."""

import datetime

import jwt

from sudoku_arena.services.identity_service import IdentityService

SECRET = 'test-jwt-secret-with-enough-length-for-hs256'


def test_register_and_verify():
    service = IdentityService(SECRET)
    result = service.register_player('  Alice  ')

    assert result['success']
    assert result['player']['name'] == 'Alice'
    verified = service.verify_token(result['token'])
    assert verified == {'success': True, 'player': result['player']}


def test_each_registration_gets_a_new_id():
    service = IdentityService(SECRET)
    first = service.register_player('Alice')['player']['id']
    second = service.register_player('Alice')['player']['id']
    assert first != second


def test_name_validation():
    service = IdentityService(SECRET)
    assert not service.register_player('')['success']
    assert not service.register_player(None)['success']
    assert not service.register_player('x' * 25)['success']


def test_rejects_foreign_and_expired_tokens():
    service = IdentityService(SECRET)
    other = IdentityService('another-secret-that-is-also-long-enough')
    token = other.register_player('Mallory')['token']
    assert service.verify_token(token) == {'success': False, 'error': 'Invalid token'}

    expired = jwt.encode({
        'player_id': 'p1',
        'name': 'Old',
        'exp': datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(seconds=5)
    }, SECRET, algorithm='HS256')
    assert service.verify_token(expired)['error'] == 'Token has expired'
    assert service.verify_token('')['error'] == 'Token is required'
