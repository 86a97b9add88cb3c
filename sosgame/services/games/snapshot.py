"""Transport-safe form of a match, exchanged with the match store.

Keys follow the JSON shape clients and the database see:
``{roomId, players, board, currentPlayer, status, updatedAt}``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class MatchSnapshot:
    room_id: str
    players: List[Dict[str, Any]]
    board: List[List[str]]
    current_player: int
    status: str
    updated_at: Optional[datetime] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'roomId': self.room_id,
            'players': [dict(p) for p in self.players],
            'board': [list(r) for r in self.board],
            'currentPlayer': self.current_player,
            'status': self.status,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
