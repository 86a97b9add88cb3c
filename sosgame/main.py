from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from sosgame import db
from sosgame.models import User, utc_now

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the SOS game server!'})

@main.route('/health')
def health_check():
    return 'OK', 200

@main.route('/api/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    surname = (data.get('surname') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not all([name, surname, email, password]):
        return jsonify({'error': 'All fields are required'}), 400

    min_length = int(current_app.config.get('PASSWORD_MIN_LENGTH', 6))
    if len(password) < min_length:
        return jsonify({'error': f'Password must be at least {min_length} characters'}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({'error': 'This email is already registered'}), 400

    user = User(name=name, surname=surname, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    current_app.logger.info(f"[register] user={user.id}")

    return jsonify({'message': 'Registration successful', 'user': user.to_dict()}), 201

@main.route('/api/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        return jsonify({'error': 'Email and password are required'}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        return jsonify({'error': 'Invalid email or password'}), 401

    user.last_login = utc_now()
    db.session.commit()
    login_user(user, remember=True)
    return jsonify({'message': 'Logged in successfully.', 'user': user.to_dict()})

@main.route('/api/check_login')
@login_required
def check_login():
    return jsonify({'success': True, 'user': current_user.to_dict()})

@main.route('/api/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})
