"""State machine for a single two-player SOS match.

A match moves ``waiting -> playing -> finished``. ``reset`` puts a playing
or finished match back to a fresh ``playing`` round with the same players.
Nothing here is thread-safe; the session registry serializes access.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .board import DEFAULT_SIZE, EMPTY, LETTERS, Board
from .errors import (
    CellOccupied,
    GameNotInProgress,
    InvalidLetter,
    NotYourTurn,
    RoomFull,
)
from .scoring import count_new_lines
from .snapshot import MatchSnapshot

WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'
STATUSES = (WAITING, PLAYING, FINISHED)

MAX_PLAYERS = 2
TIE = -1


@dataclass
class Player:
    user_id: str
    name: str
    sid: Optional[str] = None
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'name': self.name,
            'socketId': self.sid,
            'score': self.score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        return cls(
            user_id=data.get('userId'),
            name=data.get('name'),
            sid=data.get('socketId'),
            score=int(data.get('score') or 0),
        )


@dataclass
class MoveResult:
    row: int
    col: int
    letter: str
    player_index: int
    sos_count: int
    scores: List[int]
    current_player: int
    finished: bool = False
    winner: Optional[int] = field(default=None)


class Match:
    def __init__(self, room_id: str, board_size: int = DEFAULT_SIZE):
        self.room_id = room_id
        self.players: List[Player] = []
        self.board = Board.empty(board_size)
        self.current_player = 0
        self.status = WAITING

    @classmethod
    def create(cls, room_id: str, user_id, name, sid=None, board_size: int = DEFAULT_SIZE) -> 'Match':
        match = cls(room_id, board_size=board_size)
        match.players.append(Player(user_id=user_id, name=name, sid=sid))
        return match

    @property
    def scores(self) -> List[int]:
        return [p.score for p in self.players]

    def player_index_for_sid(self, sid) -> Optional[int]:
        for idx, p in enumerate(self.players):
            if p.sid is not None and p.sid == sid:
                return idx
        return None

    @property
    def joinable(self) -> bool:
        return self.status == WAITING and len(self.players) < MAX_PLAYERS

    def add_player(self, user_id, name, sid=None) -> Player:
        """Seat the second player and start the game."""
        if not self.joinable:
            raise RoomFull()
        player = Player(user_id=user_id, name=name, sid=sid)
        self.players.append(player)
        self.status = PLAYING
        return player

    def apply_move(self, row: int, col: int, letter: str, player_index: int) -> MoveResult:
        """Validate and apply one letter placement.

        Nothing is mutated unless every check passes. Scoring moves keep
        the turn with the same player.
        """
        if self.status != PLAYING:
            raise GameNotInProgress()
        if player_index != self.current_player:
            raise NotYourTurn()
        if self.board.get(row, col) != EMPTY:
            raise CellOccupied()
        if letter not in LETTERS:
            raise InvalidLetter()

        self.board.set(row, col, letter)
        sos_count = count_new_lines(self.board, row, col, letter)
        if sos_count > 0:
            self.players[player_index].score += sos_count
        else:
            self.current_player = (self.current_player + 1) % len(self.players)

        result = MoveResult(
            row=row,
            col=col,
            letter=letter,
            player_index=player_index,
            sos_count=sos_count,
            scores=self.scores,
            current_player=self.current_player,
        )
        if self.board.is_full():
            self.status = FINISHED
            result.finished = True
            result.winner = self.winner()
        return result

    def reset(self) -> None:
        if self.status == WAITING:
            raise GameNotInProgress('Waiting for a second player')
        self.board = Board.empty(self.board.size)
        self.current_player = 0
        self.status = PLAYING
        for p in self.players:
            p.score = 0

    def winner(self) -> int:
        """Index of the player with the strictly higher score, else TIE."""
        first, second = self.players[0].score, self.players[1].score
        if first > second:
            return 0
        if second > first:
            return 1
        return TIE

    def to_snapshot(self) -> MatchSnapshot:
        return MatchSnapshot(
            room_id=self.room_id,
            players=[p.to_dict() for p in self.players],
            board=self.board.to_list(),
            current_player=self.current_player,
            status=self.status,
        )

    @classmethod
    def from_snapshot(cls, snapshot: MatchSnapshot) -> 'Match':
        board = Board.from_list(snapshot.board)
        match = cls(snapshot.room_id, board_size=board.size)
        match.board = board
        match.players = [Player.from_dict(p) for p in snapshot.players]
        match.current_player = int(snapshot.current_player or 0)
        match.status = snapshot.status if snapshot.status in STATUSES else WAITING
        return match

    def __repr__(self):
        return f'<Match {self.room_id} status={self.status} players={len(self.players)}>'
