"""Session registry: room id -> live match.

The registry is the only owner of live match state. Every operation on a
room runs under that room's lock, so two handlers never see a half-applied
move. The registry-wide guard only protects the maps themselves and is
never held while a room does work.

Lock order is always room lock, then guard.
"""

import logging
import random
import string
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Set

from .board import DEFAULT_SIZE
from .errors import PersistenceFailure, RoomFull, RoomIdsExhausted, RoomNotFound
from .match import Match, MoveResult
from .snapshot import MatchSnapshot
from .store import MatchStore

logger = logging.getLogger(__name__)

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_id(length: int = 6) -> str:
    """Generate a short, human-shareable room code."""
    return ''.join(random.choices(ROOM_ID_ALPHABET, k=length))


@dataclass
class Outcome:
    """Result of an accepted mutation.

    ``persisted`` is False when the in-memory change was applied but the
    durable mirror could not be written.
    """
    match: Match
    persisted: bool
    move: Optional[MoveResult] = None


Applied = Callable[[Outcome], None]


@dataclass
class Departure:
    room_id: str
    user_id: Optional[str]
    player_name: Optional[str]
    remaining_sids: List[str] = field(default_factory=list)


class SessionRegistry:
    def __init__(
        self,
        store: MatchStore,
        board_size: int = DEFAULT_SIZE,
        room_id_length: int = 6,
        room_id_attempts: int = 20,
        id_factory: Optional[Callable[[int], str]] = None,
    ):
        self.store = store
        self.board_size = board_size
        self.room_id_length = room_id_length
        self.room_id_attempts = room_id_attempts
        self.id_factory = id_factory or generate_room_id
        self._matches: Dict[str, Match] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._rooms_by_sid: Dict[str, Set[str]] = {}
        self._guard = threading.Lock()

    def __contains__(self, room_id) -> bool:
        return self.normalize(room_id) in self._matches

    def __len__(self) -> int:
        return len(self._matches)

    @staticmethod
    def normalize(room_id) -> str:
        if not isinstance(room_id, str) or not room_id.strip():
            raise RoomNotFound()
        return room_id.strip().upper()

    # ---- lookup ----

    def get(self, room_id) -> Match:
        """Return the live match, recovering it from the store if needed."""
        room_id = self.normalize(room_id)
        match = self._matches.get(room_id)
        if match is not None:
            return match
        return self._recover(room_id)

    def _recover(self, room_id: str, joinable_only: bool = False) -> Match:
        snapshot = self._load(room_id)
        if snapshot is None:
            raise RoomNotFound()
        recovered = Match.from_snapshot(snapshot)
        # a room that cannot take a second player is never brought back
        if joinable_only and not recovered.joinable:
            raise RoomFull()
        with self._guard:
            existing = self._matches.get(room_id)
            if existing is not None:
                return existing
            self._install(recovered, index_sids=False)
        logger.info(f"[recover] room={room_id} status={recovered.status} players={len(recovered.players)}")
        return recovered

    def remove(self, room_id) -> Optional[Match]:
        """Drop the live match; the persisted record is left untouched."""
        room_id = self.normalize(room_id)
        with self._guard:
            match = self._matches.pop(room_id, None)
            self._locks.pop(room_id, None)
            if match is not None:
                for p in match.players:
                    rooms = self._rooms_by_sid.get(p.sid)
                    if rooms is not None:
                        rooms.discard(room_id)
                        if not rooms:
                            self._rooms_by_sid.pop(p.sid, None)
        if match is not None:
            logger.info(f"[remove] room={room_id}")
        return match

    # ---- actions ----

    # ``on_applied`` runs with the room lock still held, so callers that
    # broadcast from it emit in the same order the changes were applied.

    def create_room(self, user_id, name, sid=None, on_applied: Optional[Applied] = None) -> Outcome:
        for _ in range(self.room_id_attempts):
            room_id = self.normalize(self.id_factory(self.room_id_length))
            if room_id in self._matches or self._load(room_id) is not None:
                logger.debug(f"[create-room] room id collision {room_id}, regenerating")
                continue
            match = Match.create(room_id, user_id, name, sid=sid, board_size=self.board_size)
            with self._guard:
                if room_id in self._matches:
                    continue
                self._install(match)
            with self._room(room_id) as live:
                return self._applied(Outcome(live, self._persist(live)), on_applied)
        raise RoomIdsExhausted()

    def join_room(self, room_id, user_id, name, sid=None, on_applied: Optional[Applied] = None) -> Outcome:
        room_id = self.normalize(room_id)
        if room_id not in self._matches:
            self._recover(room_id, joinable_only=True)
        with self._room(room_id) as match:
            match.add_player(user_id, name, sid=sid)
            if sid is not None:
                with self._guard:
                    self._rooms_by_sid.setdefault(sid, set()).add(match.room_id)
            return self._applied(Outcome(match, self._persist(match)), on_applied)

    def make_move(self, room_id, row, col, letter, player_index, on_applied: Optional[Applied] = None) -> Outcome:
        with self._room(room_id) as match:
            move = match.apply_move(row, col, letter, player_index)
            return self._applied(Outcome(match, self._persist(match), move), on_applied)

    def new_game(self, room_id, on_applied: Optional[Applied] = None) -> Outcome:
        with self._room(room_id) as match:
            match.reset()
            return self._applied(Outcome(match, self._persist(match)), on_applied)

    def disconnect(self, sid) -> List[Departure]:
        """Tear down every live match the socket takes part in."""
        with self._guard:
            room_ids = sorted(self._rooms_by_sid.pop(sid, set()))
        departures = []
        for room_id in room_ids:
            try:
                with self._room(room_id) as match:
                    idx = match.player_index_for_sid(sid)
                    player = match.players[idx] if idx is not None else None
                    remaining = [p.sid for p in match.players if p.sid and p.sid != sid]
                    self.remove(room_id)
            except RoomNotFound:
                continue
            departures.append(Departure(
                room_id=room_id,
                user_id=player.user_id if player else None,
                player_name=player.name if player else None,
                remaining_sids=remaining,
            ))
        return departures

    # ---- internals ----

    def _install(self, match: Match, index_sids: bool = True) -> None:
        # caller holds the guard
        self._matches[match.room_id] = match
        self._locks[match.room_id] = threading.Lock()
        if index_sids:
            for p in match.players:
                if p.sid is not None:
                    self._rooms_by_sid.setdefault(p.sid, set()).add(match.room_id)

    @contextmanager
    def _room(self, room_id) -> Iterator[Match]:
        """Hold the room lock for a live match."""
        room_id = self.normalize(room_id)
        with self._guard:
            lock = self._locks.get(room_id)
        if lock is None:
            raise RoomNotFound()
        with lock:
            match = self._matches.get(room_id)
            # removed while we waited for the lock
            if match is None or self._locks.get(room_id) is not lock:
                raise RoomNotFound()
            yield match

    @staticmethod
    def _applied(outcome: Outcome, on_applied: Optional[Applied]) -> Outcome:
        # caller holds the room lock
        if on_applied is not None:
            on_applied(outcome)
        return outcome

    def _persist(self, match: Match) -> bool:
        try:
            self.store.save(match.to_snapshot())
        except PersistenceFailure as exc:
            logger.warning(f"[persist-failed] room={match.room_id} status={match.status}: {exc.message}")
            return False
        return True

    def _load(self, room_id: str) -> Optional[MatchSnapshot]:
        try:
            return self.store.load(room_id)
        except PersistenceFailure as exc:
            logger.warning(f"[load-failed] room={room_id}: {exc.message}")
            return None
