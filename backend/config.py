import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'data.sqlite3')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Browser origins allowed to call the API (comma separated)
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',') if o.strip()
    ]
    DEFAULT_QUESTION_COUNT = int(os.environ.get('DEFAULT_QUESTION_COUNT', '10'))
    LEADERBOARD_PAGE_SIZE = int(os.environ.get('LEADERBOARD_PAGE_SIZE', '20'))
    MAX_PLAYER_NAME_LENGTH = int(os.environ.get('MAX_PLAYER_NAME_LENGTH', '64'))
    # Unfinished sessions are dropped once older than this (seconds)
    SESSION_TIMEOUT_SEC = int(os.environ.get('SESSION_TIMEOUT_SEC', '3600'))
    # How often the expiry sweep runs (seconds)
    SESSION_SWEEP_INTERVAL_SEC = int(os.environ.get('SESSION_SWEEP_INTERVAL_SEC', '900'))
