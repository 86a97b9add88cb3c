from flask import Blueprint, jsonify

from sosgame import get_sessions
from sosgame.models import MatchRecord

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    """Returns the persisted record of a room.

    The record outlives the live session, so finished or abandoned rooms
    can still be inspected here.
    """
    record = MatchRecord.query.filter_by(room_id=room_id.upper()).first()
    if record is None:
        return jsonify({'error': 'Room not found'}), 404
    payload = record.to_dict()
    payload['live'] = record.room_id in get_sessions()
    return jsonify(payload)
