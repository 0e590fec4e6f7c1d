"""
WebSocket Event Handlers

Realtime match channel: each socket plays at most one multiplayer match,
backed by its own game session and reconciler.
"""

from dataclasses import asdict
from flask import current_app, request
from flask_socketio import emit
from ..models.game import GameStatus
from ..services.ledger_service import get_ledger
from ..services.reconciler import MultiplayerReconciler
from ..services.room_service import get_room_service
from ..services.session_controller import get_session_manager
from ..storage.shared_store import get_store
from ..utils.decorators import websocket_auth_required
from ..utils.game_logger import game_logger
from ..utils.scheduler import get_scheduler


class Match:
    """Everything one socket holds for its current match."""

    def __init__(self, sid, player, room_id, session, reconciler):
        self.sid = sid
        self.player = player
        self.room_id = room_id
        self.session = session
        self.reconciler = reconciler
        self.unsubscribe_room = None


# Socket id -> Match
active_matches = {}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def end_match(sid, forfeit=False, leave=False):
    """
    Tear down the match bound to a socket.

    Args:
        sid: Socket id
        forfeit: Concede a running round before detaching
        leave: Also remove the player from the room
    """
    match = active_matches.pop(sid, None)
    if match is None:
        return None

    if forfeit:
        match.reconciler.forfeit()
    if match.unsubscribe_room:
        match.unsubscribe_room()
    match.reconciler.detach()

    session_manager = get_session_manager()
    if session_manager:
        session_manager.delete_session(match.session.session_id)

    if leave:
        room_service = get_room_service()
        if room_service:
            room_service.leave_room(match.room_id, match.player['id'])

    game_logger.log_game_event(match.room_id, 'match_ended', match.player['id'],
                               forfeit=forfeit, left_room=leave)
    return match


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    def push_game_state(sid, session):
        socketio.emit('game_state_update', {
            'success': True,
            'state': asdict(session.get_state())
        }, to=sid)

    def push_room_state(sid, reconciler):
        socketio.emit('room_update', {
            'success': True,
            'room': reconciler.public_room_view()
        }, to=sid)

    def current_match():
        match = active_matches.get(request.sid)
        if match is None:
            emit('error', {'error': 'Not in a match'})
        return match

    @socketio.on('connect')
    def handle_connect():
        """Handle WebSocket connection."""
        pass

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Unclean exit: fire the registered disconnect writes, then clean up."""
        sid = request.sid
        store = get_store()
        with get_scheduler().lock:
            if store:
                fired = store.disconnect(sid)
                if fired:
                    game_logger.logger.info(f"WebSocket disconnect: {fired} disconnect write(s) applied for {sid}")
            end_match(sid)

    @socketio.on('join_match')
    @websocket_auth_required
    def handle_join_match(data, player=None):
        """Bind this socket to a room the player belongs to."""
        try:
            room_service = get_room_service()
            session_manager = get_session_manager()
            store = get_store()
            if not room_service or not session_manager or not store:
                emit('error', {'error': 'Match service unavailable'})
                return

            room_id = str(data.get('room_id') or '').upper()
            if not room_id:
                emit('error', {'error': 'Room ID is required'})
                return

            sid = request.sid
            config = current_app.config

            with get_scheduler().lock:
                room = room_service.get_room(room_id)
                if room is None or player['id'] not in room.players:
                    emit('error', {'error': 'Room not found or access denied', 'code': 'room_not_found'})
                    return

                end_match(sid)

                session = session_manager.create_session('multiplayer')
                reconciler = MultiplayerReconciler(
                    session, store, room_id, player['id'], get_scheduler(),
                    ledger=get_ledger(),
                    client_id=sid,
                    publish_debounce=config.get('PUBLISH_DEBOUNCE_SECONDS', 0.5),
                    victory_grace=config.get('VICTORY_GRACE_SECONDS', 3.0),
                    defeat_confirm=config.get('DEFEAT_CONFIRM_SECONDS', 1.5),
                    room_delete_delay=config.get('ROOM_DELETE_DELAY_SECONDS', 10.0),
                )
                match = Match(sid, player, room_id, session, reconciler)
                active_matches[sid] = match

                session.add_listener(lambda s: push_game_state(sid, s))
                reconciler.attach()
                match.unsubscribe_room = store.subscribe(
                    f"rooms/{room_id}", lambda _data: push_room_state(sid, reconciler)
                )

                game_logger.log_game_event(room_id, 'match_joined', player['id'], player_name=player['name'])
                push_game_state(sid, session)

        except Exception as e:
            game_logger.log_error(None, e, 'join_match')
            emit('error', {'error': str(e)})

    @socketio.on('make_move')
    def handle_make_move(data):
        """Place or clear a digit in the current match."""
        if not isinstance(data, dict) or not _is_int(data.get('row')) or not _is_int(data.get('col')):
            emit('error', {'error': 'Row and column are required'})
            return
        value = data.get('value')
        if value is not None and not _is_int(value):
            emit('error', {'error': 'Value must be an integer or null'})
            return

        with get_scheduler().lock:
            match = current_match()
            if match is None:
                return
            if not match.session.apply_move(data['row'], data['col'], value):
                emit('move_rejected', {'row': data['row'], 'col': data['col']})

    @socketio.on('toggle_note')
    def handle_toggle_note(data):
        """Toggle a pencil mark in the current match."""
        if not isinstance(data, dict) or not all(_is_int(data.get(k)) for k in ('row', 'col', 'digit')):
            emit('error', {'error': 'Row, column and digit are required'})
            return

        with get_scheduler().lock:
            match = current_match()
            if match is None:
                return
            match.session.toggle_note(data['row'], data['col'], data['digit'])

    @socketio.on('undo')
    def handle_undo(data=None):
        """Undo the last move in the current match."""
        with get_scheduler().lock:
            match = current_match()
            if match is None:
                return
            match.session.undo()

    @socketio.on('rematch_ready')
    def handle_rematch_ready(data=None):
        """Clear a finished board so the next round started in the room is picked up."""
        with get_scheduler().lock:
            match = current_match()
            if match is None:
                return
            if match.session.status in (GameStatus.WON, GameStatus.LOST):
                match.session.reset_game()

    @socketio.on('leave_match')
    def handle_leave_match(data=None):
        """Clean exit: concede any running round and leave the room."""
        with get_scheduler().lock:
            match = end_match(request.sid, forfeit=True, leave=True)
        if match:
            emit('match_left', {'success': True, 'room_id': match.room_id})
