"""
Identity Decorators

Contains decorators that resolve the calling player for HTTP and WebSocket handlers.
"""

from functools import wraps
from flask import request, jsonify
from flask_socketio import emit


def resolve_request_player():
    """
    Resolve the player behind the request's Bearer token.

    Returns:
        Tuple of (player dict, None) or (None, (error response, status))
    """
    from ..services.identity_service import get_identity_service

    identity_service = get_identity_service()
    if not identity_service:
        return None, (jsonify({
            'success': False,
            'error': 'Identity service unavailable'
        }), 500)

    # Get token from Authorization header
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None, (jsonify({
            'success': False,
            'error': 'Authorization token required'
        }), 401)

    token = auth_header.split(' ')[1]

    result = identity_service.verify_token(token)
    if not result['success']:
        return None, (jsonify({
            'success': False,
            'error': result['error']
        }), 401)

    return result['player'], None


def require_auth(f):
    """
    Decorator to require a player token for protected HTTP endpoints.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        player, error = resolve_request_player()
        if error:
            return error
        
        # Add player data to request context
        request.player = player
        return f(*args, **kwargs)
    
    return decorated_function


def websocket_auth_required(f):
    """Decorator for WebSocket events carrying a player token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from ..services.identity_service import get_identity_service
        
        identity_service = get_identity_service()
        if not identity_service or not args or not isinstance(args[0], dict) or 'token' not in args[0]:
            emit('error', {'error': 'Authentication required'})
            return
        
        result = identity_service.verify_token(args[0]['token'])
        
        if not result['success']:
            emit('error', {'error': result['error']})
            return
        
        kwargs['player'] = result['player']
        return f(*args, **kwargs)
    
    return decorated_function
