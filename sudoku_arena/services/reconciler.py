"""
Multiplayer Reconciler

Folds the shared room snapshot into one player's local session and publishes
the local state back. The merge is monotone: remote data can end a
still-active local game but never revive a finished one, and local progress
and mistakes are never overwritten by remote copies.
"""

from typing import Any, Dict, Optional

from ..models.game import GameStatus, RoomStatus, TERMINAL_STATUSES
from ..models.room import Room
from ..storage.shared_store import DisconnectHandle, SharedStore
from ..utils.game_logger import game_logger
from ..utils.scheduler import Scheduler, TimerHandle, cancel_timer
from .ledger_service import OutcomeLedger
from .room_service import player_path, room_path
from .session_controller import GameSession

ELIMINATED_STATUSES = (GameStatus.LOST, GameStatus.DISCONNECTED)


class MultiplayerReconciler:
    """
    Keeps one local session and one shared room in step.

    Timers:
    - victory grace: auto-victory by attrition is only evaluated once this
      has elapsed after the round starts locally
    - defeat confirmation: a finished room ends a still-playing local game
      only after this delay, and only if the player has not won meanwhile
    - publish debounce: local progress is written on a trailing debounce
    - room deletion: the owner removes a concluded room after a delay so
      slower clients can still read the final snapshot
    """

    def __init__(self,
                 session: GameSession,
                 store: SharedStore,
                 room_id: str,
                 player_id: str,
                 scheduler: Scheduler,
                 ledger: Optional[OutcomeLedger] = None,
                 client_id: Optional[str] = None,
                 publish_debounce: float = 0.5,
                 victory_grace: float = 3.0,
                 defeat_confirm: float = 1.5,
                 room_delete_delay: float = 10.0):
        self.session = session
        self.store = store
        self.room_id = room_id
        self.player_id = player_id
        self.scheduler = scheduler
        self.ledger = ledger
        self.client_id = client_id
        self.publish_debounce = publish_debounce
        self.victory_grace = victory_grace
        self.defeat_confirm = defeat_confirm
        self.room_delete_delay = room_delete_delay

        self.room: Optional[Room] = None
        self.can_check_victory = False
        self.attached = False

        self._result_recorded = False
        self._grace_timer: Optional[TimerHandle] = None
        self._defeat_timer: Optional[TimerHandle] = None
        self._publish_timer: Optional[TimerHandle] = None
        self._delete_timer: Optional[TimerHandle] = None
        self._unsubscribe = None
        self._remove_listener = None
        self._disconnect_handle: Optional[DisconnectHandle] = None

    @property
    def room_status(self) -> Optional[RoomStatus]:
        return self.room.status if self.room else None

    @property
    def is_owner(self) -> bool:
        return self.room is not None and self.room.owner_id == self.player_id

    def attach(self) -> None:
        """Subscribe to the room and start publishing local changes."""
        if self.attached:
            return
        self.attached = True
        self.session.room_id = self.room_id
        self._remove_listener = self.session.add_listener(self._on_local_change)
        if self.client_id:
            self._disconnect_handle = self.store.on_disconnect_write(
                self.client_id, f"{player_path(self.room_id, self.player_id)}/status",
                GameStatus.DISCONNECTED.value, only_if_exists=True
            )
        self._unsubscribe = self.store.subscribe(room_path(self.room_id), self.on_room_snapshot)

    def detach(self) -> None:
        """Clean exit: stop listening, cancel timers and the disconnect write."""
        self.attached = False
        self._cancel_round_timers()
        cancel_timer(self._publish_timer)
        self._publish_timer = None
        cancel_timer(self._delete_timer)
        self._delete_timer = None
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        if self._remove_listener:
            self._remove_listener()
            self._remove_listener = None
        if self._disconnect_handle:
            self._disconnect_handle.cancel()
            self._disconnect_handle = None

    def on_room_snapshot(self, data: Optional[Dict[str, Any]]) -> None:
        """Merge a remote room snapshot into local state."""
        if not self.attached:
            return
        if data is None:
            # Room deleted; local state stays authoritative
            self.room = None
            if self._disconnect_handle:
                self._disconnect_handle.cancel()
                self._disconnect_handle = None
            return
        try:
            room = Room.from_dict(data)
        except ValueError as e:
            game_logger.log_error(None, e, 'room_snapshot', self.room_id)
            return

        self.room = room

        if self.player_id not in room.players and self._disconnect_handle:
            # Left the room; nothing of ours remains to mark
            self._disconnect_handle.cancel()
            self._disconnect_handle = None

        if self.session.status == GameStatus.IDLE and room.status == RoomStatus.PLAYING:
            self._bootstrap(room)
            return

        self._adopt_remote_terminal(room)
        self._check_attrition()
        self._check_room_finished()
        self._check_round_concluded()

    def forfeit(self) -> bool:
        """Concede a running round and publish the loss at once."""
        if self.session.status != GameStatus.PLAYING:
            return False
        self.session.set_terminal_status(GameStatus.LOST)
        self._publish_now()
        return True

    def public_room_view(self) -> Optional[Dict[str, Any]]:
        """Room snapshot safe to show every participant (no solution)."""
        if self.room is None:
            return None
        view = self.room.to_dict()
        view.pop('solution', None)
        view['canCheckVictory'] = self.can_check_victory
        return view

    def _bootstrap(self, room: Room):
        # Deliberately ignores every remote player status: it may be a
        # leftover from an earlier round in the same room
        self._cancel_round_timers()
        self.can_check_victory = False
        self._result_recorded = False
        cancel_timer(self._delete_timer)
        self._delete_timer = None

        if not self.session.load_puzzle(room.puzzle, room.solution, room.difficulty):
            return

        self._grace_timer = self.scheduler.call_later(self.victory_grace, self._end_grace_period)
        # Overwrite whatever our snapshot held from an earlier round
        self._publish_now()
        game_logger.log_game_event(self.room_id, 'round_joined', self.player_id,
                                   difficulty=room.difficulty, players=len(room.players))

    def _end_grace_period(self):
        self._grace_timer = None
        if self.session.status == GameStatus.PLAYING and self.room_status == RoomStatus.PLAYING:
            self.can_check_victory = True
            self._check_attrition()

    def _adopt_remote_terminal(self, room: Room):
        me = room.players.get(self.player_id)
        if me and me.status in TERMINAL_STATUSES and self.session.status == GameStatus.PLAYING:
            self.session.set_terminal_status(me.status)

    def _check_attrition(self):
        if not self.can_check_victory or self.room is None:
            return
        if self.session.status != GameStatus.PLAYING or self.room.status != RoomStatus.PLAYING:
            return

        opponents = self.room.opponents_of(self.player_id)
        if not opponents:
            return
        if all(player.status in ELIMINATED_STATUSES for player in opponents.values()):
            # Last one standing
            game_logger.log_game_event(self.room_id, 'auto_victory', self.player_id,
                                       opponents=len(opponents))
            self.session.set_terminal_status(GameStatus.WON)
            self._publish_now()

    def _check_room_finished(self):
        if (self.room_status == RoomStatus.FINISHED
                and self.session.status == GameStatus.PLAYING
                and self._defeat_timer is None):
            self._defeat_timer = self.scheduler.call_later(self.defeat_confirm, self._confirm_defeat)

    def _confirm_defeat(self):
        self._defeat_timer = None
        if self.session.status != GameStatus.PLAYING or self.room_status != RoomStatus.FINISHED:
            return
        game_logger.log_game_event(self.room_id, 'defeat_confirmed', self.player_id)
        self.session.set_terminal_status(GameStatus.LOST)
        self._publish_now()

    def _check_round_concluded(self):
        if self._result_recorded or self.room is None:
            return
        if not self.session.grid.is_terminal or self.room.status != RoomStatus.FINISHED:
            return
        self._result_recorded = True
        self._record_results()
        if self.is_owner:
            cancel_timer(self._delete_timer)
            self._delete_timer = self.scheduler.call_later(self.room_delete_delay, self._delete_room)

    def _record_results(self):
        if self.ledger is None or self.room is None:
            return
        did_win = self.session.status == GameStatus.WON
        opponents = self.room.opponents_of(self.player_id).values()
        # Winners beat everyone; losers lost to whoever won
        targets = list(opponents) if did_win else [p for p in opponents if p.status == GameStatus.WON]
        for opponent in targets:
            try:
                self.ledger.record_result(self.player_id, opponent.id, opponent.name, did_win)
            except Exception as e:
                game_logger.log_remote_failure('record_result', f"{self.player_id}/{opponent.id}", e)

    def _delete_room(self):
        self._delete_timer = None
        try:
            current = self.store.get(room_path(self.room_id))
            # A rematch may already have restarted the room
            if current and current.get('status') == RoomStatus.FINISHED.value:
                self.store.remove(room_path(self.room_id))
                game_logger.log_game_event(self.room_id, 'room_deleted', self.player_id)
        except Exception as e:
            game_logger.log_remote_failure('remove', room_path(self.room_id), e)

    def _on_local_change(self, session: GameSession):
        status = session.status
        if status == GameStatus.IDLE:
            cancel_timer(self._publish_timer)
            self._publish_timer = None
            # A reset during a running round rejoins it
            if self.room is not None and self.room.status == RoomStatus.PLAYING:
                self._bootstrap(self.room)
            return

        if status != GameStatus.PLAYING:
            self._cancel_round_timers()

        self._schedule_publish()
        self._check_round_concluded()

    def _schedule_publish(self):
        cancel_timer(self._publish_timer)
        self._publish_timer = self.scheduler.call_later(self.publish_debounce, self._publish_now)

    def _publish_now(self):
        cancel_timer(self._publish_timer)
        self._publish_timer = None

        grid = self.session.grid
        if grid.status == GameStatus.IDLE or self.room is None:
            return
        if self.player_id not in self.room.players:
            return

        prefix = f"players/{self.player_id}"
        updates: Dict[str, Any] = {
            f"{prefix}/progress": grid.progress,
            f"{prefix}/mistakes": grid.mistakes,
            f"{prefix}/status": grid.status.value,
            f"{prefix}/completed": grid.status == GameStatus.WON,
            f"{prefix}/timeTaken": self.session.elapsed_ms(),
        }
        if grid.status == GameStatus.WON:
            # Winning finishes the room in the same batched write
            updates['status'] = RoomStatus.FINISHED.value

        try:
            self.store.update(room_path(self.room_id), updates)
        except Exception as e:
            game_logger.log_remote_failure('update', room_path(self.room_id), e)

    def _cancel_round_timers(self):
        cancel_timer(self._grace_timer)
        self._grace_timer = None
        cancel_timer(self._defeat_timer)
        self._defeat_timer = None
