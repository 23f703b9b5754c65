import os
import random
import sys
import pytest

# Ensure the backend root (containing the `times_tables` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from times_tables import create_app, db, socketio
from times_tables.services.quiz import QuizController, RunRepository, SessionStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    DEFAULT_QUESTION_COUNT = 10
    LEADERBOARD_PAGE_SIZE = 20
    MAX_PLAYER_NAME_LENGTH = 64
    SESSION_TIMEOUT_SEC = 3600
    SESSION_SWEEP_INTERVAL_SEC = 900


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    application.extensions['times_tables'].store.stop_sweeper()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def controller(flask_app, clock):
    """A controller on a fake clock and seeded shuffle, installed into the app."""
    store = SessionStore(clock=clock, rng=random.Random(7))
    ctrl = QuizController(store, RunRepository(), max_player_name_length=64)
    flask_app.extensions['times_tables'] = ctrl
    return ctrl


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
