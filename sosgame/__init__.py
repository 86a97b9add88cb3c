from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def get_sessions():
    """Session registry of the current app."""
    from flask import current_app
    return current_app.extensions['sos_sessions']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    from sosgame.services.games.board import MIN_SIZE
    if flask_app.config.get('BOARD_SIZE', 8) < MIN_SIZE:
        raise ValueError(f"BOARD_SIZE must be at least {MIN_SIZE}")
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Live matches are per app; the durable mirror lives in the match table
    from sosgame.services.games.registry import SessionRegistry
    from sosgame.services.games.store import SQLMatchStore
    flask_app.extensions['sos_sessions'] = SessionRegistry(
        SQLMatchStore(db),
        board_size=flask_app.config.get('BOARD_SIZE', 8),
        room_id_length=flask_app.config.get('ROOM_ID_LENGTH', 6),
        room_id_attempts=flask_app.config.get('ROOM_ID_ATTEMPTS', 20),
    )

    # Import and register blueprints here
    from sosgame.main import main
    flask_app.register_blueprint(main)

    from sosgame.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    from sosgame.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    # Flask-Login user loader
    from sosgame.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
