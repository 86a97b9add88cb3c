"""Durable mirror of live matches.

The registry only talks to the ``MatchStore`` protocol, so tests can swap
in an in-memory store.
"""

from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from .errors import PersistenceFailure
from .snapshot import MatchSnapshot


class MatchStore(Protocol):
    """Upsert and point lookup of match snapshots by room id."""

    def save(self, snapshot: MatchSnapshot) -> MatchSnapshot:
        """Insert or replace the record for ``snapshot.room_id``."""
        ...

    def load(self, room_id: str) -> Optional[MatchSnapshot]:
        """Return the stored snapshot, if a record exists."""
        ...


class SQLMatchStore:
    """MatchStore backed by the ``match`` table (Flask-SQLAlchemy)."""

    def __init__(self, db):
        self.db = db

    def save(self, snapshot: MatchSnapshot) -> MatchSnapshot:
        from sosgame.models import MatchRecord, utc_now

        try:
            record = MatchRecord.query.filter_by(room_id=snapshot.room_id).first()
            if record is None:
                record = MatchRecord(room_id=snapshot.room_id)
                self.db.session.add(record)
            record.players = [dict(p) for p in snapshot.players]
            record.board = [list(r) for r in snapshot.board]
            record.current_player = snapshot.current_player
            record.status = snapshot.status
            record.updated_at = utc_now()
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise PersistenceFailure(f'Could not save room {snapshot.room_id}: {exc}') from exc
        snapshot.updated_at = record.updated_at
        return snapshot

    def load(self, room_id: str) -> Optional[MatchSnapshot]:
        from sosgame.models import MatchRecord

        try:
            record = MatchRecord.query.filter_by(room_id=room_id).first()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise PersistenceFailure(f'Could not load room {room_id}: {exc}') from exc
        if record is None:
            return None
        return MatchSnapshot(
            room_id=record.room_id,
            players=list(record.players or []),
            board=list(record.board or []),
            current_player=record.current_player or 0,
            status=record.status,
            updated_at=record.updated_at,
        )
