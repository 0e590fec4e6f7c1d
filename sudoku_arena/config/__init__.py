"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Puzzle rules and constants (business logic)
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    GRID_SIZE, CELL_COUNT, BLANK_CHAR, MAX_MISTAKES, MAX_ROOM_PLAYERS, MIN_ROOM_PLAYERS,
    DIFFICULTIES, AUTOFILL_THRESHOLDS, HOLES_BY_DIFFICULTY, validate_game_settings
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'GRID_SIZE', 'CELL_COUNT', 'BLANK_CHAR', 'MAX_MISTAKES', 'MAX_ROOM_PLAYERS',
    'MIN_ROOM_PLAYERS', 'DIFFICULTIES', 'AUTOFILL_THRESHOLDS', 'HOLES_BY_DIFFICULTY',
    'validate_game_settings'
]
