"""
Game Logger Module for the Sudoku Arena server

This module provides structured logging for player actions, server responses,
game events and failed remote writes.
"""

import logging
import json
import os
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path


class GameLogger:
    """
    Centralized logging system for the game server.
    
    Features:
    - Player action tracking with IP identification
    - Server response logging
    - Game event logging (wins, losses, auto-victory, room cleanup)
    - Remote write failure logging for the fire-and-forget shared store writes
    - JSON structured logs for easy parsing
    """
    
    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = getattr(logging, str(level).upper(), logging.INFO)
        
        # Setup main game logger
        self.logger = self._setup_logger()
        
    def _setup_logger(self) -> logging.Logger:
        """Setup the main game logger with file handler."""
        logger = logging.getLogger('sudoku_arena')
        logger.setLevel(self.level)
        
        # Prevent duplicate handlers
        if logger.handlers:
            logger.handlers.clear()
        
        # Create log file with date
        log_file = self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"
        
        # File handler for detailed logs
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(self.level)
        
        # Console handler for only important messages (WARNING and above)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        
        file_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        
        console_formatter = logging.Formatter(
            '%(levelname)s: %(message)s'
        )
        
        file_handler.setFormatter(file_formatter)
        console_handler.setFormatter(console_formatter)
        
        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        
        return logger
    
    def _get_user_identity(self, request) -> Dict[str, Optional[str]]:
        """Extract player identity information from request."""
        player = getattr(request, 'player', None) or {}
        return {
            'user_ip': getattr(request, 'remote_addr', None) or 'unknown',
            'player_id': player.get('id'),
            'player_name': player.get('name')
        }
    
    def _create_log_entry(self, 
                         event_type: str, 
                         action: str, 
                         user_info: Dict[str, Any],
                         details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)
    
    def log_user_action(self, 
                       request, 
                       action: str, 
                       session_id: Optional[str] = None,
                       **kwargs):
        """
        Log player actions with full context.
        
        Args:
            request: Flask request object
            action: Type of action (e.g., 'new_game', 'make_move', 'join_room')
            session_id: Game session or room identifier if applicable
            **kwargs: Additional details to log
        """
        user_info = self._get_user_identity(request)
        
        details = {
            'session_id': session_id,
            'endpoint': getattr(request, 'endpoint', None),
            'method': getattr(request, 'method', None),
            **kwargs
        }
        
        log_message = self._create_log_entry('USER_ACTION', action, user_info, details)
        self.logger.info(log_message)
    
    def log_server_response(self, 
                           request, 
                           action: str,
                           success: bool,
                           response_data: Dict[str, Any],
                           session_id: Optional[str] = None,
                           **kwargs):
        """
        Log server responses with full context.
        
        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            session_id: Game session or room identifier if applicable
            **kwargs: Additional details to log
        """
        user_info = self._get_user_identity(request)
        
        safe_response = self._sanitize_response_data(response_data)
        
        details = {
            'session_id': session_id,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': safe_response,
            **kwargs
        }
        
        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action, user_info, details)
        
        if success:
            self.logger.info(log_message)
        else:
            self.logger.error(log_message)
    
    def log_game_event(self, 
                      session_id: Optional[str],
                      event: str,
                      actor: str,
                      **kwargs):
        """
        Log game-specific events (wins, losses, etc.).
        
        Args:
            session_id: Game session or room identifier
            event: Type of game event (e.g., 'game_won', 'auto_victory', 'room_deleted')
            actor: Player id, or 'system' for timer-driven events
            **kwargs: Additional game details
        """
        user_info = {'user_ip': None, 'player_id': actor, 'player_name': None}
        
        details = {
            'session_id': session_id,
            **kwargs
        }
        
        log_message = self._create_log_entry('GAME_EVENT', event, user_info, details)
        self.logger.info(log_message)
    
    def log_remote_failure(self,
                          operation: str,
                          path: str,
                          error: Exception):
        """
        Log a failed shared-store write. Such writes are never retried.
        
        Args:
            operation: Store operation that failed (e.g., 'update', 'atomic_update')
            path: Store path that was targeted
            error: Exception that occurred
        """
        details = {
            'path': path,
            'error_type': type(error).__name__,
            'error_message': str(error)
        }
        log_message = self._create_log_entry('REMOTE_FAILURE', operation, {'user_ip': None}, details)
        self.logger.error(log_message)
    
    def log_error(self, 
                 request, 
                 error: Exception,
                 action: str,
                 session_id: Optional[str] = None):
        """
        Log errors with full context.
        
        Args:
            request: Flask request object, or None outside a request
            error: Exception that occurred
            action: Action that was being performed
            session_id: Game session or room identifier if applicable
        """
        user_info = self._get_user_identity(request) if request is not None else {'user_ip': None}
        
        details = {
            'session_id': session_id,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }
        
        log_message = self._create_log_entry('ERROR', action, user_info, details)
        self.logger.error(log_message)
    
    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Remove or mask sensitive data from response logs."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}
        
        sanitized = data.copy()
        
        if 'token' in sanitized:
            sanitized['token'] = '***'
        
        # Keep essential game state info but limit verbosity
        if 'state' in sanitized and isinstance(sanitized['state'], dict):
            state = sanitized['state']
            sanitized['state'] = {
                'status': state.get('status'),
                'progress': state.get('progress'),
                'mistakes': state.get('mistakes'),
                'mistake_cells': len(state.get('mistake_cells', [])),
                'solution_revealed': state.get('solution') is not None
            }
        
        return sanitized
    
    def get_log_stats(self) -> Dict[str, Any]:
        """Get statistics about logged events (useful for monitoring)."""
        try:
            log_file = self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"
            if not log_file.exists():
                return {'error': 'No log file found for today'}
            
            stats = {
                'log_file': str(log_file),
                'file_size_mb': round(log_file.stat().st_size / (1024 * 1024), 2),
                'total_entries': 0,
                'user_actions': 0,
                'server_responses': 0,
                'game_events': 0,
                'remote_failures': 0,
                'errors': 0
            }
            
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    if line.strip():
                        stats['total_entries'] += 1
                        if 'USER_ACTION' in line:
                            stats['user_actions'] += 1
                        elif 'SERVER_RESPONSE' in line:
                            stats['server_responses'] += 1
                        elif 'GAME_EVENT' in line:
                            stats['game_events'] += 1
                        elif 'REMOTE_FAILURE' in line:
                            stats['remote_failures'] += 1
                        elif 'ERROR' in line:
                            stats['errors'] += 1
            
            return stats
            
        except Exception as e:
            return {'error': f'Failed to get stats: {str(e)}'}


# Global logger instance
game_logger = GameLogger(os.getenv('LOG_DIR', 'logs'), os.getenv('LOG_LEVEL', 'INFO'))
