import functools
from typing import Any, Dict

from flask import current_app, request
from flask_socketio import close_room, emit, join_room

from sosgame import get_sessions, socketio
from sosgame.services.games.errors import InvalidPayload, SOSError

# Generic replies for failures that are not game-rule errors
FAILURE_MESSAGES = {
    'create-room': 'Could not create room',
    'join-room': 'Could not join room',
    'make-move': 'Could not make move',
    'new-game': 'Could not start a new game',
}

# Identity announced via 'user-authenticated', keyed by socket id
_sid_to_user: Dict[str, str] = {}


def _get_sid() -> str:
    return request.sid  # type: ignore


def _socket_action(event: str):
    """Run a handler, answering rule violations with an 'error' event.

    Errors are only ever sent back to the connection that caused them.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(data=None):
            try:
                return fn(data if isinstance(data, dict) else {})
            except SOSError as exc:
                current_app.logger.info(f"[{event}-rejected] sid={_get_sid()} reason={exc.message}")
                emit('error', {'message': exc.message})
            except Exception:
                current_app.logger.exception(f"[{event}-failed] sid={_get_sid()}")
                emit('error', {'message': FAILURE_MESSAGES.get(event, 'Operation failed')})
        return wrapper
    return decorator


def _required(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or isinstance(value, bool) or not str(value).strip():
        raise InvalidPayload(f'{key} is required')
    return str(value).strip()


def _required_int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayload(f'{key} must be an integer')
    return value


def _state_payload(match) -> Dict[str, Any]:
    return {
        'board': match.board.to_list(),
        'currentPlayer': match.current_player,
        'scores': match.scores,
    }


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    _sid_to_user.pop(sid, None)
    current_app.logger.info(f"[disconnect] sid={sid}")
    # The match ends for everybody as soon as one participant drops
    for departure in get_sessions().disconnect(sid):
        emit('player-left', {
            'userId': departure.user_id,
            'playerName': departure.player_name,
        }, to=departure.room_id, include_self=False)
        close_room(departure.room_id)
        current_app.logger.info(
            f"[player-left] room={departure.room_id} user={departure.user_id} remaining={len(departure.remaining_sids)}"
        )


def handle_user_authenticated(data=None):
    user_id = (data or {}).get('userId') if isinstance(data, dict) else None
    if user_id:
        _sid_to_user[_get_sid()] = str(user_id)
    emit('authentication-confirmed')


@_socket_action('create-room')
def handle_create_room(data):
    user_id = data.get('userId') or _sid_to_user.get(_get_sid())
    if not user_id:
        raise InvalidPayload('userId is required')
    user_name = _required(data, 'userName')

    def announce(outcome):
        join_room(outcome.match.room_id)
        emit('room-created', {
            'roomId': outcome.match.room_id,
            'message': 'Room created. Share the room id with the other player.',
        })

    outcome = get_sessions().create_room(str(user_id), user_name, sid=_get_sid(), on_applied=announce)
    current_app.logger.info(f"[create-room] room={outcome.match.room_id} user={user_id} persisted={outcome.persisted}")


@_socket_action('join-room')
def handle_join_room(data):
    room_id = _required(data, 'roomId')
    user_id = _required(data, 'userId')
    user_name = _required(data, 'userName')

    def announce(outcome):
        match = outcome.match
        join_room(match.room_id)
        emit('player-joined', {
            'players': [p.to_dict() for p in match.players],
            'message': f'{user_name} joined the room. The game is starting!',
        }, to=match.room_id)
        emit('game-started', _state_payload(match), to=match.room_id)

    outcome = get_sessions().join_room(room_id, user_id, user_name, sid=_get_sid(), on_applied=announce)
    current_app.logger.info(f"[join-room] room={outcome.match.room_id} user={user_id} persisted={outcome.persisted}")


@_socket_action('make-move')
def handle_make_move(data):
    room_id = _required(data, 'roomId')
    row = _required_int(data, 'row')
    col = _required_int(data, 'col')
    player_index = _required_int(data, 'playerIndex')
    letter = data.get('letter')
    if not isinstance(letter, str):
        raise InvalidPayload('letter is required')

    def broadcast(outcome):
        match, move = outcome.match, outcome.move
        emit('move-made', {
            'row': move.row,
            'col': move.col,
            'letter': move.letter,
            'playerIndex': move.player_index,
            'scores': move.scores,
            'currentPlayer': move.current_player,
            'sosCount': move.sos_count,
        }, to=match.room_id)
        if move.finished:
            emit('game-over', {'scores': move.scores, 'winner': move.winner}, to=match.room_id)

    outcome = get_sessions().make_move(room_id, row, col, letter, player_index, on_applied=broadcast)
    move = outcome.move
    if move.finished:
        current_app.logger.info(f"[game-over] room={outcome.match.room_id} scores={move.scores} winner={move.winner}")


@_socket_action('new-game')
def handle_new_game(data):
    room_id = _required(data, 'roomId')

    def broadcast(outcome):
        emit('game-started', _state_payload(outcome.match), to=outcome.match.room_id)

    outcome = get_sessions().new_game(room_id, on_applied=broadcast)
    current_app.logger.info(f"[new-game] room={outcome.match.room_id} persisted={outcome.persisted}")


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('user-authenticated', handle_user_authenticated, namespace=namespace)
    socketio.on_event('create-room', handle_create_room, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('make-move', handle_make_move, namespace=namespace)
    socketio.on_event('new-game', handle_new_game, namespace=namespace)
