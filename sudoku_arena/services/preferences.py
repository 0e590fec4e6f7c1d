"""
Player Preferences

Small JSON file holding, per player id, the display name and the daily
challenges that player has completed.
"""

import datetime
import json
import os
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..utils.game_logger import game_logger

DATE_FORMAT = '%Y-%m-%d'


def _parse_date(value: str) -> datetime.date:
    return datetime.datetime.strptime(value, DATE_FORMAT).date()


@dataclass
class PlayerRecord:
    """Preferences of one player."""
    player_name: Optional[str] = None
    completed_dailies: Set[str] = field(default_factory=set)

    @classmethod
    def from_dict(cls, data) -> 'PlayerRecord':
        if not isinstance(data, dict):
            return cls()
        name = data.get('player_name')
        dailies = data.get('completed_dailies', [])
        return cls(
            player_name=name if isinstance(name, str) else None,
            completed_dailies={d for d in dailies if isinstance(d, str)} if isinstance(dailies, list) else set(),
        )

    def to_dict(self):
        return {
            'player_name': self.player_name,
            'completed_dailies': sorted(self.completed_dailies),
        }


class PlayerPreferences:
    """
    JSON-backed preferences keyed by player id. A missing or unreadable
    file yields defaults.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._players: Dict[str, PlayerRecord] = {}
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            game_logger.log_error(None, e, 'load_preferences')
            return

        players = data.get('players') if isinstance(data, dict) else None
        if not isinstance(players, dict):
            game_logger.log_error(None, ValueError("Preferences file has no 'players' object"), 'load_preferences')
            return
        self._players = {
            player_id: PlayerRecord.from_dict(record)
            for player_id, record in players.items()
            if isinstance(player_id, str)
        }

    def _save(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        data = {
            'players': {player_id: record.to_dict() for player_id, record in self._players.items()},
        }
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def _record(self, player_id: str) -> PlayerRecord:
        return self._players.get(player_id) or PlayerRecord()

    def player_name(self, player_id: str) -> Optional[str]:
        return self._record(player_id).player_name

    def completed_dailies(self, player_id: str) -> Set[str]:
        return set(self._record(player_id).completed_dailies)

    def set_player_name(self, player_id: str, name: str) -> None:
        with self._lock:
            record = self._players.setdefault(player_id, PlayerRecord())
            record.player_name = name.strip()
            self._save()

    def mark_daily_completed(self, player_id: str, date_str: str) -> bool:
        """
        Record a completed daily challenge for one player.

        Args:
            player_id: Player the completion belongs to
            date_str: YYYY-MM-DD key of the challenge

        Returns:
            True if newly recorded, False if it was already completed
        """
        _parse_date(date_str)
        with self._lock:
            record = self._players.setdefault(player_id, PlayerRecord())
            if date_str in record.completed_dailies:
                return False
            record.completed_dailies.add(date_str)
            self._save()
            return True

    def is_daily_completed(self, player_id: str, date_str: str) -> bool:
        return date_str in self._record(player_id).completed_dailies

    def completed_in_month(self, player_id: str, year: int, month: int) -> List[str]:
        prefix = f"{year:04d}-{month:02d}-"
        return sorted(d for d in self._record(player_id).completed_dailies if d.startswith(prefix))

    def current_streak(self, player_id: str, today: datetime.date) -> int:
        """
        Count consecutive completed days ending today, or ending yesterday
        when today's challenge is still open.
        """
        completed = self._record(player_id).completed_dailies
        day = today
        if day.strftime(DATE_FORMAT) not in completed:
            day = today - datetime.timedelta(days=1)

        streak = 0
        while day.strftime(DATE_FORMAT) in completed:
            streak += 1
            day -= datetime.timedelta(days=1)
        return streak


# Global preferences instance
_preferences = None


def get_preferences() -> Optional[PlayerPreferences]:
    """Get the global preferences instance."""
    return _preferences


def initialize_preferences(path: str) -> PlayerPreferences:
    """Initialize the global preferences instance."""
    global _preferences
    _preferences = PlayerPreferences(path)
    return _preferences
