import random
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from times_tables import socketio
from .questions import Question, generate_questions
from .scoring import compute_time_limit


@dataclass(frozen=True)
class Session:
    session_id: str
    questions: Tuple[Question, ...]
    start_time: float
    time_limit_seconds: int

    def to_public_dict(self):
        # start_time stays server-side; clients only see the limit
        return {
            'sessionId': self.session_id,
            'questions': [q.to_dict() for q in self.questions],
            'timeLimitSeconds': self.time_limit_seconds,
        }


class SessionStore:
    """In-memory registry of quiz sessions that have not been completed yet.

    Sessions are immutable once created; the only transitions are
    registration and removal. Removal happens on completion, on rejection
    of a malformed answer list, or when the sweeper finds a session older
    than ``timeout_sec``. The map is guarded by a lock because Flask may
    serve requests from several threads while the sweeper runs.
    """

    def __init__(
        self,
        timeout_sec: int = 3600,
        sweep_interval_sec: int = 900,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self.timeout_sec = timeout_sec
        self.sweep_interval_sec = sweep_interval_sec
        self.clock = clock
        self._rng = rng
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        # One stop token per start; an old loop only watches its own
        self._stop_event: Optional[threading.Event] = None

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id):
        with self._lock:
            return session_id in self._sessions

    def create(self, question_count: int) -> Session:
        questions = tuple(generate_questions(question_count, rng=self._rng))
        session = Session(
            session_id=str(uuid.uuid4()),
            questions=questions,
            start_time=self.clock(),
            time_limit_seconds=compute_time_limit(question_count),
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def take(self, session_id: str) -> Optional[Session]:
        """Remove and return a session; only one caller can win a given id."""
        with self._lock:
            return self._sessions.pop(session_id, None)

    def sweep(self) -> int:
        """Drop every session older than the timeout. Returns how many went."""
        now = self.clock()
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items()
                if now - s.start_time > self.timeout_sec
            ]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    # ---- background sweeper ----

    @property
    def sweeper_running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start_sweeper(self, app) -> None:
        if self.sweeper_running:
            return
        stop_event = threading.Event()
        self._stop_event = stop_event
        app.logger.info(
            f"[sweeper-start] interval={self.sweep_interval_sec}s timeout={self.timeout_sec}s"
        )
        socketio.start_background_task(self._sweep_loop, app, stop_event)

    def stop_sweeper(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    def _sweep_loop(self, app, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            # Sleep in short steps so stop_sweeper takes effect promptly
            waited = 0.0
            while waited < self.sweep_interval_sec and not stop_event.is_set():
                step = min(1.0, self.sweep_interval_sec - waited)
                socketio.sleep(step)
                waited += step
            if stop_event.is_set():
                break
            removed = self.sweep()
            if removed:
                app.logger.info(f"[sweep] removed={removed} remaining={len(self)}")
        app.logger.info("[sweeper-stop]")
