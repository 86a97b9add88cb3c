import pytest
from conftest import TestConfig

from sosgame import create_app, db
from sosgame.models import MatchRecord, User


def register(client, **overrides):
    payload = {'name': 'Ada', 'surname': 'Lovelace', 'email': 'ada@example.com', 'password': 'secret1'}
    payload.update(overrides)
    return client.post('/api/register', json=payload)


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    res = client.get('/health')
    assert res.status_code == 200
    assert res.data == b'OK'


def test_register_creates_user_with_hashed_password(client):
    res = register(client)
    assert res.status_code == 201
    user = res.get_json()['user']
    assert user['email'] == 'ada@example.com'
    assert 'password' not in user

    stored = User.query.filter_by(email='ada@example.com').first()
    assert stored.password_hash != 'secret1'
    assert stored.check_password('secret1')
    # registering logs the user in
    assert client.get('/api/check_login').get_json()['user']['id'] == user['id']


def test_register_validation(client):
    assert register(client, surname='').status_code == 400
    short = register(client, password='abc')
    assert short.status_code == 400
    assert '6' in short.get_json()['error']
    assert register(client).status_code == 201
    dup = register(client, name='Other')
    assert dup.status_code == 400
    assert dup.get_json()['error'] == 'This email is already registered'


def test_login_and_logout(flask_app):
    register(flask_app.test_client())
    client = flask_app.test_client()

    assert client.post('/api/login', json={'email': 'ada@example.com'}).status_code == 400
    assert client.post('/api/login', json={'email': 'ada@example.com', 'password': 'nope00'}).status_code == 401
    assert client.post('/api/login', json={'email': 'nobody@example.com', 'password': 'secret1'}).status_code == 401
    assert client.get('/api/check_login').status_code == 401

    res = client.post('/api/login', json={'email': 'ADA@example.com', 'password': 'secret1'})
    assert res.status_code == 200
    assert res.get_json()['user']['name'] == 'Ada'
    assert client.get('/api/check_login').status_code == 200

    assert client.post('/api/logout').status_code == 200
    assert client.get('/api/check_login').status_code == 401


def test_room_record_endpoint(flask_app, client, sio_client):
    assert client.get('/api/rooms/NOPE00').status_code == 404

    sio_client.emit('create-room', {'userId': 'u1', 'userName': 'Alice'})
    room_id = [p for p in sio_client.get_received() if p['name'] == 'room-created'][0]['args'][0]['roomId']

    res = client.get(f'/api/rooms/{room_id.lower()}')
    assert res.status_code == 200
    data = res.get_json()
    assert data['roomId'] == room_id
    assert data['status'] == 'waiting'
    assert data['live'] is True
    assert data['players'][0]['name'] == 'Alice'

    sio_client.disconnect()
    data = client.get(f'/api/rooms/{room_id}').get_json()
    assert data['live'] is False
    assert data['status'] == 'waiting'


def test_db_reset_command(flask_app):
    db.session.add(MatchRecord(room_id='OLD001', players=[], board=[], current_player=0, status='waiting'))
    db.session.commit()
    result = flask_app.test_cli_runner().invoke(args=['db-reset'])
    assert 'Database has been reset' in result.output
    assert MatchRecord.query.count() == 0


def test_board_smaller_than_three_is_rejected_at_startup():
    class TinyBoard(TestConfig):
        BOARD_SIZE = 2

    with pytest.raises(ValueError, match='BOARD_SIZE'):
        create_app(TinyBoard)
