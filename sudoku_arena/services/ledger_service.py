"""
Outcome Ledger

Pairwise win/loss counts between players, updated with atomic
read-modify-write so both sides of a match can record at the same time.
"""

from typing import Any, Dict, List, Optional

from ..models.ledger import BattleRecord
from ..storage.shared_store import SharedStore

LEDGER_ROOT = 'battleScores'


class OutcomeLedger:
    """
    Records concluded matches.

    The ledger has no per-match key, so callers must record each match at
    most once per opponent.
    """

    def __init__(self, store: SharedStore):
        self.store = store

    def record_result(self, self_id: str, opponent_id: str, opponent_name: str, did_win: bool) -> Dict[str, Any]:
        """
        Add one win or loss against an opponent.

        Returns:
            dict: The stored record after the increment
        """
        def apply(current: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            if current is None:
                return {
                    'opponentName': opponent_name,
                    'wins': 1 if did_win else 0,
                    'losses': 0 if did_win else 1,
                }
            return {
                **current,
                'opponentName': opponent_name,  # keep name up-to-date
                'wins': (current.get('wins') or 0) + (1 if did_win else 0),
                'losses': (current.get('losses') or 0) + (0 if did_win else 1),
            }

        return self.store.atomic_update(f"{LEDGER_ROOT}/{self_id}/{opponent_id}", apply)

    def get_scores(self, self_id: str) -> List[BattleRecord]:
        """All records for a player, most-played opponents first."""
        raw = self.store.get(f"{LEDGER_ROOT}/{self_id}") or {}
        records = [
            BattleRecord(
                opponent_id=opponent_id,
                opponent_name=data.get('opponentName') or 'Unknown',
                wins=data.get('wins') or 0,
                losses=data.get('losses') or 0,
            )
            for opponent_id, data in raw.items()
            if isinstance(data, dict)
        ]
        return sorted(records, key=lambda record: record.games_played, reverse=True)


# Global service instance
_ledger = None


def get_ledger() -> Optional[OutcomeLedger]:
    """Get the global ledger instance."""
    return _ledger


def initialize_ledger(store: SharedStore) -> OutcomeLedger:
    """Initialize the global ledger instance."""
    global _ledger
    _ledger = OutcomeLedger(store)
    return _ledger
