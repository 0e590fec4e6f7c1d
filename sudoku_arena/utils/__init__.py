"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_auth, websocket_auth_required
from .game_logger import game_logger
from .scheduler import Scheduler, ThreadingScheduler, TimerHandle, get_scheduler, initialize_scheduler

__all__ = [
    'require_auth', 'websocket_auth_required', 'game_logger',
    'Scheduler', 'ThreadingScheduler', 'TimerHandle', 'get_scheduler', 'initialize_scheduler'
]
