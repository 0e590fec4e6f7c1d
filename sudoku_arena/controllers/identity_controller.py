"""
Identity Controller

Handles anonymous player registration.
"""

from flask import Blueprint, request, jsonify
from ..services.identity_service import get_identity_service
from ..services.preferences import get_preferences
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger

identity_bp = Blueprint('identity', __name__)


@identity_bp.route('/players', methods=['POST'])
def register_player():
    """Issue a player token for a display name."""
    try:
        identity_service = get_identity_service()
        if not identity_service:
            return jsonify({
                'success': False,
                'error': 'Identity service unavailable'
            }), 500
        
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({
                'success': False,
                'error': 'Request body is required'
            }), 400
        
        name = data.get('name')
        
        game_logger.log_user_action(request, 'register_player', player_name=name)
        
        result = identity_service.register_player(name)
        
        if result['success']:
            preferences = get_preferences()
            if preferences:
                preferences.set_player_name(result['player']['id'], result['player']['name'])
            game_logger.log_server_response(request, 'register_player', True, result)
            return jsonify(result), 201
        else:
            game_logger.log_server_response(request, 'register_player', False, result)
            return jsonify(result), 400
            
    except Exception as e:
        game_logger.log_error(request, e, 'register_player')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'register_player', False, error_response)
        return jsonify(error_response), 500


@identity_bp.route('/players/me', methods=['GET'])
@require_auth
def get_current_player():
    """Return the player the token belongs to."""
    return jsonify({
        'success': True,
        'player': request.player
    })
