"""
Sudoku Arena Server - Main Entry Point

This is the main entry point for the Sudoku Arena server.
It initializes all services and starts the Flask-SocketIO application.
"""

import os
from sudoku_arena import create_app
from sudoku_arena.config import config, validate_game_settings
from sudoku_arena.services import initialize_services
from sudoku_arena.storage import get_store
from sudoku_arena.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    config_class = config[os.getenv('APP_ENV', 'default')]
    try:
        validate_game_settings()
        
        # Initialize all services
        print("Initializing services...")
        services = initialize_services(config_class)
        print(f"✓ Shared store ready ({type(services['store']).__name__})")
        print("✓ Game, room, ledger and identity services initialized successfully")
        
        # Create Flask app
        print("Creating Flask application...")
        app, socketio = create_app(config_class)
        print("✓ Flask application created successfully")
        
        # Log server startup
        game_logger.logger.info("Sudoku Arena Server Starting")
        
        print(f"\nStarting Sudoku Arena Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print(f"Mongo store: {bool(config_class.MONGO_URI)}")
        print("=" * 50)
        
        # Start the server
        socketio.run(app, host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)
        
    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Sudoku Arena Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise
    finally:
        store = get_store()
        if store:
            store.close()


if __name__ == '__main__':
    main()
