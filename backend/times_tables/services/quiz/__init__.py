"""Quiz domain services: questions, scoring, sessions and runs.

This package contains the quiz mechanics that HTTP routes call into,
keeping transport concerns (request parsing, JSON rendering) out of the
session lifecycle and the scoring rules.
"""

from .errors import QuizError, InvalidArgument, NotFound
from .lifecycle import QuizController
from .runs import RunRepository
from .session_store import SessionStore
