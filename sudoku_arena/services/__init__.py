"""
Services Package

Contains all business logic and service classes.
"""

from .assist_scheduler import AssistScheduler
from .identity_service import IdentityService, get_identity_service, initialize_identity_service
from .ledger_service import OutcomeLedger, get_ledger, initialize_ledger
from .move_processor import MoveProcessor
from .preferences import PlayerPreferences, get_preferences, initialize_preferences
from .puzzle_generator import (
    PuzzleGenerator, get_daily_difficulty, get_puzzle_generator, initialize_puzzle_generator
)
from .reconciler import MultiplayerReconciler
from .room_service import RoomService, get_room_service, initialize_room_service
from .session_controller import GameSession, SessionManager, get_session_manager, initialize_session_manager
from .undo_log import UndoLog

__all__ = [
    'AssistScheduler', 'MoveProcessor', 'UndoLog', 'MultiplayerReconciler',
    'GameSession', 'SessionManager', 'get_session_manager', 'initialize_session_manager',
    'IdentityService', 'get_identity_service', 'initialize_identity_service',
    'OutcomeLedger', 'get_ledger', 'initialize_ledger',
    'PlayerPreferences', 'get_preferences', 'initialize_preferences',
    'PuzzleGenerator', 'get_daily_difficulty', 'get_puzzle_generator', 'initialize_puzzle_generator',
    'RoomService', 'get_room_service', 'initialize_room_service',
    'initialize_services'
]


def initialize_services(config_class, scheduler=None, store=None, generator=None):
    """
    Build every global service from one configuration.

    Args:
        config_class: Configuration class to read settings from
        scheduler: Optional scheduler (a real threading scheduler by default)
        store: Optional shared store (chosen from MONGO_URI by default)
        generator: Optional puzzle generator

    Returns:
        Dictionary of the initialized services by name
    """
    from ..storage import initialize_store
    from ..utils.scheduler import initialize_scheduler

    scheduler = initialize_scheduler(scheduler)
    store = initialize_store(config_class, store)
    generator = initialize_puzzle_generator(generator)

    return {
        'scheduler': scheduler,
        'store': store,
        'generator': generator,
        'sessions': initialize_session_manager(scheduler, generator, config_class.AUTOFILL_DELAY_SECONDS),
        'rooms': initialize_room_service(store, generator),
        'ledger': initialize_ledger(store),
        'identity': initialize_identity_service(config_class.JWT_SECRET, config_class.JWT_EXPIRATION_DAYS),
        'preferences': initialize_preferences(config_class.PREFERENCES_FILE),
    }
