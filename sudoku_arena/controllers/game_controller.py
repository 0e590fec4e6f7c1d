"""
Game Controller

Handles all single-player game HTTP endpoints.
"""

import datetime
from dataclasses import asdict
from flask import Blueprint, request, jsonify
from ..config.game_settings import DIFFICULTIES
from ..models.game import GameStatus
from ..services.preferences import get_preferences
from ..services.puzzle_generator import get_daily_difficulty
from ..services.session_controller import get_session_manager
from ..storage.shared_store import get_store
from ..utils.decorators import require_auth, resolve_request_player
from ..utils.game_logger import game_logger
from ..utils.scheduler import get_scheduler

game_bp = Blueprint('game', __name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _daily_win_recorder(player_id):
    """Session listener recording a won daily challenge for `player_id`."""
    def record(session):
        preferences = get_preferences()
        if preferences and session.daily_date and session.status == GameStatus.WON:
            try:
                preferences.mark_daily_completed(player_id, session.daily_date)
            except (OSError, ValueError) as e:
                game_logger.log_error(None, e, 'mark_daily_completed', session.session_id)
    return record


def _bad_request(action, error, game_id=None):
    error_response = {
        'success': False,
        'error': error
    }
    game_logger.log_server_response(request, action, False, error_response, game_id)
    return jsonify(error_response), 400


def _not_found(action, game_id):
    error_response = {
        'success': False,
        'error': 'Game not found'
    }
    game_logger.log_server_response(request, action, False, error_response, game_id)
    return jsonify(error_response), 404


@game_bp.route('/new_game', methods=['POST'])
def new_game():
    """Create a new single-player game session."""
    try:
        session_manager = get_session_manager()
        if not session_manager:
            return jsonify({
                'success': False,
                'error': 'Game service unavailable'
            }), 500
        
        data = request.get_json(silent=True) or {}
        difficulty = data.get('difficulty', 'medium')
        date_str = data.get('date')
        
        if data.get('daily') and not date_str:
            date_str = datetime.date.today().strftime('%Y-%m-%d')
        if date_str:
            try:
                difficulty = get_daily_difficulty(datetime.datetime.strptime(date_str, '%Y-%m-%d').date())
            except (TypeError, ValueError):
                return _bad_request('new_game', 'Date must be formatted YYYY-MM-DD')
            
            # Daily completions are tracked per player
            player, error = resolve_request_player()
            if error:
                return error
            request.player = player
        
        if difficulty not in DIFFICULTIES:
            return _bad_request('new_game', f"Invalid difficulty. Must be one of: {', '.join(DIFFICULTIES)}")
        
        game_logger.log_user_action(request, 'new_game', difficulty=difficulty, daily_date=date_str)
        
        with get_scheduler().lock:
            session = session_manager.create_session('daily' if date_str else 'single')
            if date_str:
                session.add_listener(_daily_win_recorder(request.player['id']))
            if not session.start(difficulty, date_str):
                session_manager.delete_session(session.session_id)
                error_response = {
                    'success': False,
                    'error': 'Puzzle generation failed'
                }
                game_logger.log_server_response(request, 'new_game', False, error_response)
                return jsonify(error_response), 500
            state = session.get_state()
        
        response_data = {
            'success': True,
            'game_id': session.session_id,
            'state': asdict(state)
        }
        
        game_logger.log_server_response(
            request, 'new_game', True, response_data, session.session_id,
            difficulty=state.difficulty, empty_cells=state.progress
        )
        
        return jsonify(response_data)
        
    except Exception as e:
        game_logger.log_error(request, e, 'new_game')
        
        error_response = {
            'success': False,
            'error': str(e)
        }
        
        game_logger.log_server_response(request, 'new_game', False, error_response)
        return jsonify(error_response), 500


@game_bp.route('/game/<game_id>/state', methods=['GET'])
def get_state(game_id):
    """Get current game state."""
    try:
        session_manager = get_session_manager()
        if not session_manager:
            return jsonify({
                'success': False,
                'error': 'Game service unavailable'
            }), 500
        
        game_logger.log_user_action(request, 'get_state', game_id)
        
        with get_scheduler().lock:
            session = session_manager.get_session(game_id)
            if session is None:
                return _not_found('get_state', game_id)
            state = session.get_state()
        
        response_data = {
            'success': True,
            'state': asdict(state)
        }
        
        game_logger.log_server_response(
            request, 'get_state', True, response_data, game_id,
            status=state.status, progress=state.progress
        )
        
        return jsonify(response_data)
        
    except Exception as e:
        game_logger.log_error(request, e, 'get_state', game_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_state', False, error_response, game_id)
        return jsonify(error_response), 500


def _run_game_action(game_id, action, required, apply):
    """
    Shared flow for the mutating endpoints.

    Args:
        game_id: Session identifier
        action: Action name used in logs
        required: Body keys that must be integers
        apply: Callable(session, data) -> bool performing the change
    """
    try:
        session_manager = get_session_manager()
        if not session_manager:
            return jsonify({
                'success': False,
                'error': 'Game service unavailable'
            }), 500
        
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return _bad_request(action, 'Request body must be a JSON object', game_id)
        for key in required:
            if not _is_int(data.get(key)):
                return _bad_request(action, f"'{key}' must be an integer", game_id)
        
        game_logger.log_user_action(request, action, game_id, **{k: data.get(k) for k in required})
        
        with get_scheduler().lock:
            session = session_manager.get_session(game_id)
            if session is None:
                return _not_found(action, game_id)
            changed = apply(session, data)
            state = session.get_state()
        
        if changed:
            response_data = {
                'success': True,
                'state': asdict(state)
            }
        else:
            # Rejected moves are normal traffic, not client errors
            response_data = {
                'success': False,
                'error': f"{action} rejected",
                'state': asdict(state)
            }
        
        game_logger.log_server_response(
            request, action, changed, response_data, game_id,
            status=state.status, mistakes=state.mistakes, progress=state.progress
        )
        return jsonify(response_data)
        
    except Exception as e:
        game_logger.log_error(request, e, action, game_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, action, False, error_response, game_id)
        return jsonify(error_response), 500


@game_bp.route('/game/<game_id>/move', methods=['POST'])
def make_move(game_id):
    """Place a digit, or clear the cell when value is null."""
    data = request.get_json(silent=True) or {}
    value = data.get('value') if isinstance(data, dict) else None
    if value is not None and not _is_int(value):
        return _bad_request('make_move', "'value' must be an integer or null", game_id)
    return _run_game_action(
        game_id, 'make_move', ('row', 'col'),
        lambda session, body: session.apply_move(body['row'], body['col'], body.get('value'))
    )


@game_bp.route('/game/<game_id>/note', methods=['POST'])
def toggle_note(game_id):
    """Toggle a pencil mark."""
    return _run_game_action(
        game_id, 'toggle_note', ('row', 'col', 'digit'),
        lambda session, body: session.toggle_note(body['row'], body['col'], body['digit'])
    )


@game_bp.route('/game/<game_id>/undo', methods=['POST'])
def undo(game_id):
    """Revert the most recent move."""
    return _run_game_action(game_id, 'undo', (), lambda session, body: session.undo())


@game_bp.route('/game/<game_id>/reset', methods=['POST'])
def reset(game_id):
    """Reset the board ("board", default) or abandon the puzzle ("game")."""
    data = request.get_json(silent=True) or {}
    scope = data.get('scope', 'board') if isinstance(data, dict) else 'board'
    if scope not in ('board', 'game'):
        return _bad_request('reset', "Scope must be 'board' or 'game'", game_id)

    def apply(session, body):
        if scope == 'game':
            session.reset_game()
            return True
        return session.reset_board()

    return _run_game_action(game_id, f"reset_{scope}", (), apply)


@game_bp.route('/game/<game_id>', methods=['DELETE'])
def delete_game(game_id):
    """Tear down a game session."""
    try:
        session_manager = get_session_manager()
        if not session_manager:
            return jsonify({
                'success': False,
                'error': 'Game service unavailable'
            }), 500
        
        game_logger.log_user_action(request, 'delete_game', game_id)
        
        with get_scheduler().lock:
            deleted = session_manager.delete_session(game_id)
        if not deleted:
            return _not_found('delete_game', game_id)
        
        response_data = {'success': True}
        game_logger.log_server_response(request, 'delete_game', True, response_data, game_id)
        return jsonify(response_data)
        
    except Exception as e:
        game_logger.log_error(request, e, 'delete_game', game_id)
        return jsonify({'success': False, 'error': str(e)}), 500


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        session_manager = get_session_manager()
        store = get_store()
        
        game_logger.log_user_action(request, 'health_check')
        
        response_data = {
            'status': 'healthy',
            'active_games': len(session_manager.sessions) if session_manager else 0,
            'store_backend': type(store).__name__ if store else None,
            'log_stats': game_logger.get_log_stats()
        }
        
        game_logger.log_server_response(request, 'health_check', True, response_data)
        
        return jsonify(response_data)
        
    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        game_logger.log_server_response(request, 'health_check', False, error_response)
        return jsonify(error_response), 500


@game_bp.route('/daily', methods=['GET'])
@require_auth
def daily_status():
    """The caller's daily challenge calendar: today's difficulty, completions and streak."""
    try:
        preferences = get_preferences()
        if not preferences:
            return jsonify({
                'success': False,
                'error': 'Preferences unavailable'
            }), 500
        
        today = datetime.date.today()
        try:
            year = int(request.args.get('year', today.year))
            month = int(request.args.get('month', today.month))
        except ValueError:
            return _bad_request('daily_status', 'Year and month must be integers')
        if not 1 <= month <= 12:
            return _bad_request('daily_status', 'Month must be between 1 and 12')
        
        player_id = request.player['id']
        today_key = today.strftime('%Y-%m-%d')
        response_data = {
            'success': True,
            'today': today_key,
            'today_difficulty': get_daily_difficulty(today),
            'completed_today': preferences.is_daily_completed(player_id, today_key),
            'completed_in_month': preferences.completed_in_month(player_id, year, month),
            'current_streak': preferences.current_streak(player_id, today)
        }
        return jsonify(response_data)
        
    except Exception as e:
        game_logger.log_error(request, e, 'daily_status')
        return jsonify({'success': False, 'error': str(e)}), 500
