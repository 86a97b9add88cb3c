from datetime import datetime, timezone

from flask_login import UserMixin

from sosgame import bcrypt, db


def utc_now():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    surname = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now)
    last_login = db.Column(db.DateTime(timezone=True), default=utc_now)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'surname': self.surname,
            'email': self.email,
        }


class MatchRecord(db.Model):
    """Durable mirror of a live match, one row per room."""
    __tablename__ = 'match'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(16), unique=True, nullable=False, index=True)
    players = db.Column(db.JSON, nullable=False, default=list)
    board = db.Column(db.JSON, nullable=False, default=list)
    current_player = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default='waiting')  # waiting, playing, finished
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now)
    updated_at = db.Column(db.DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    def to_dict(self):
        return {
            'roomId': self.room_id,
            'players': self.players,
            'board': self.board,
            'currentPlayer': self.current_player,
            'status': self.status,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
