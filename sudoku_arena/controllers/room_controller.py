"""
Room Controller

Handles multiplayer room lifecycle and battle score HTTP endpoints.
"""

from flask import Blueprint, request, jsonify
from ..config.game_settings import DIFFICULTIES
from ..services.ledger_service import get_ledger
from ..services.room_service import get_room_service
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from ..utils.scheduler import get_scheduler

room_bp = Blueprint('room', __name__)

# HTTP status for each structured room failure
FAILURE_STATUS = {
    'room_not_found': 404,
    'not_in_room': 404,
    'not_owner': 403,
    'already_started': 409,
    'room_full': 409,
    'not_enough_players': 409,
}


def public_room(room):
    """Room record as shown to players: the solution stays server-side."""
    data = room.to_dict()
    data.pop('solution', None)
    return data


def _room_result(action, room_id, result):
    if result['success']:
        game_logger.log_server_response(request, action, True, result, room_id)
        return jsonify(result)
    game_logger.log_server_response(request, action, False, result, room_id)
    return jsonify(result), FAILURE_STATUS.get(result.get('code'), 400)


@room_bp.route('/rooms', methods=['POST'])
@require_auth
def create_room():
    """Create a waiting room owned by the caller."""
    try:
        room_service = get_room_service()
        if not room_service:
            return jsonify({
                'success': False,
                'error': 'Room service unavailable'
            }), 500
        
        data = request.get_json(silent=True) or {}
        difficulty = data.get('difficulty', 'medium') if isinstance(data, dict) else None
        if difficulty not in DIFFICULTIES:
            return jsonify({
                'success': False,
                'error': f"Invalid difficulty. Must be one of: {', '.join(DIFFICULTIES)}"
            }), 400
        
        player = request.player
        game_logger.log_user_action(request, 'create_room', difficulty=difficulty)
        
        with get_scheduler().lock:
            room_id = room_service.create_room(player['id'], player['name'], difficulty)
            room = room_service.get_room(room_id)
        
        response_data = {
            'success': True,
            'room_id': room_id,
            'room': public_room(room)
        }
        game_logger.log_server_response(request, 'create_room', True, response_data, room_id)
        return jsonify(response_data), 201
        
    except Exception as e:
        game_logger.log_error(request, e, 'create_room')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'create_room', False, error_response)
        return jsonify(error_response), 500


@room_bp.route('/rooms/<room_id>', methods=['GET'])
def get_room(room_id):
    """Get the current room record."""
    try:
        room_service = get_room_service()
        if not room_service:
            return jsonify({
                'success': False,
                'error': 'Room service unavailable'
            }), 500
        
        room_id = room_id.upper()
        with get_scheduler().lock:
            room = room_service.get_room(room_id)
        if room is None:
            return jsonify({
                'success': False,
                'code': 'room_not_found',
                'error': 'Room not found'
            }), 404
        
        return jsonify({
            'success': True,
            'room': public_room(room)
        })
        
    except Exception as e:
        game_logger.log_error(request, e, 'get_room', room_id)
        return jsonify({'success': False, 'error': str(e)}), 500


def _room_action(room_id, action, operation):
    try:
        room_service = get_room_service()
        if not room_service:
            return jsonify({
                'success': False,
                'error': 'Room service unavailable'
            }), 500
        
        room_id = room_id.upper()
        game_logger.log_user_action(request, action, room_id)
        
        with get_scheduler().lock:
            result = operation(room_service, room_id, request.player)
        return _room_result(action, room_id, result)
        
    except Exception as e:
        game_logger.log_error(request, e, action, room_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, action, False, error_response, room_id)
        return jsonify(error_response), 500


@room_bp.route('/rooms/<room_id>/join', methods=['POST'])
@require_auth
def join_room(room_id):
    """Join a waiting room by code."""
    return _room_action(
        room_id, 'join_room',
        lambda service, rid, player: service.join_room(rid, player['id'], player['name'])
    )


@room_bp.route('/rooms/<room_id>/start', methods=['POST'])
@require_auth
def start_room(room_id):
    """Start (or restart) a round; owner only."""
    return _room_action(
        room_id, 'start_room',
        lambda service, rid, player: service.start_room(rid, player['id'])
    )


@room_bp.route('/rooms/<room_id>/leave', methods=['POST'])
@require_auth
def leave_room(room_id):
    """Leave a room; the last player out deletes it."""
    return _room_action(
        room_id, 'leave_room',
        lambda service, rid, player: service.leave_room(rid, player['id'])
    )


@room_bp.route('/scores', methods=['GET'])
@require_auth
def get_scores():
    """Head-to-head records for the caller, most played first."""
    try:
        ledger = get_ledger()
        if not ledger:
            return jsonify({
                'success': False,
                'error': 'Score service unavailable'
            }), 500
        
        player_id = request.player['id']
        game_logger.log_user_action(request, 'get_scores')
        
        records = ledger.get_scores(player_id)
        response_data = {
            'success': True,
            'scores': [
                {
                    'opponent_id': record.opponent_id,
                    'opponent_name': record.opponent_name,
                    'wins': record.wins,
                    'losses': record.losses,
                    'games_played': record.games_played
                }
                for record in records
            ]
        }
        game_logger.log_server_response(request, 'get_scores', True, response_data, count=len(records))
        return jsonify(response_data)
        
    except Exception as e:
        game_logger.log_error(request, e, 'get_scores')
        return jsonify({'success': False, 'error': str(e)}), 500
