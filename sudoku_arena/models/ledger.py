"""
Ledger Data Models

Pairwise win/loss record between two player identities.
"""

from dataclasses import dataclass


@dataclass
class BattleRecord:
    """Cumulative results against one opponent."""
    opponent_id: str
    opponent_name: str
    wins: int = 0
    losses: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses
