"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env next to this module
load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.env'))


class Config:
    """Base configuration class with all settings."""
    
    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    
    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))
    
    # Shared store settings (in-process store when MONGO_URI is unset)
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'sudoku_arena')
    
    # Identity Settings
    JWT_SECRET = os.getenv('JWT_SECRET', 'dev-jwt-secret-change-in-production')
    JWT_EXPIRATION_DAYS = int(os.getenv('JWT_EXPIRATION_DAYS', 30))
    
    # Engine timings (seconds)
    AUTOFILL_DELAY_SECONDS = float(os.getenv('AUTOFILL_DELAY_SECONDS', 0.4))
    PUBLISH_DEBOUNCE_SECONDS = float(os.getenv('PUBLISH_DEBOUNCE_SECONDS', 0.5))
    VICTORY_GRACE_SECONDS = float(os.getenv('VICTORY_GRACE_SECONDS', 3.0))
    DEFEAT_CONFIRM_SECONDS = float(os.getenv('DEFEAT_CONFIRM_SECONDS', 1.5))
    ROOM_DELETE_DELAY_SECONDS = float(os.getenv('ROOM_DELETE_DELAY_SECONDS', 10.0))
    
    # Local preferences
    PREFERENCES_FILE = os.getenv('PREFERENCES_FILE', 'preferences.json')
    
    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    MONGO_URI = None


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
