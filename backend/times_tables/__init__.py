from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, resources={r"/api/*": {"origins": origins}})
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from times_tables.models import PLAYER_NAME_COLUMN_LENGTH
    from times_tables.services.quiz import QuizController, RunRepository, SessionStore
    from times_tables.socketio_events import register_socketio_handlers, broadcast_run_saved

    store = SessionStore(
        timeout_sec=flask_app.config.get('SESSION_TIMEOUT_SEC', 3600),
        sweep_interval_sec=flask_app.config.get('SESSION_SWEEP_INTERVAL_SEC', 900),
    )
    controller = QuizController(
        store,
        RunRepository(),
        max_player_name_length=min(
            flask_app.config.get('MAX_PLAYER_NAME_LENGTH', PLAYER_NAME_COLUMN_LENGTH),
            PLAYER_NAME_COLUMN_LENGTH,
        ),
        on_run_saved=broadcast_run_saved,
    )
    flask_app.extensions['times_tables'] = controller

    from times_tables.api.quiz import quiz
    flask_app.register_blueprint(quiz, url_prefix='/api')

    register_socketio_handlers()

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code

    # The sweeper is off in tests unless explicitly requested
    if not flask_app.config.get('TESTING') or flask_app.config.get('ENABLE_SWEEPER_IN_TESTS'):
        store.start_sweeper(flask_app)

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the runs table."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
