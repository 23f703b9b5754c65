import math
from typing import Any, Callable, List, Optional

from flask import current_app

from .errors import InvalidArgument, NotFound
from .questions import MAX_QUESTIONS, get_correct_answer
from .runs import RunRepository
from .scoring import compute_score
from .session_store import Session, SessionStore


def _numeric_answer(raw: Any) -> Optional[float]:
    """Coerce a submitted answer to a finite number, or None if it isn't one."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


class QuizController:
    """Drives a session from start to a persisted run.

    Questions and the clock both live on the server: clients only send back
    answers, and elapsed time is measured from the session's own start.
    """

    def __init__(
        self,
        store: SessionStore,
        runs: RunRepository,
        clock: Optional[Callable[[], float]] = None,
        max_player_name_length: int = 64,
        on_run_saved: Optional[Callable[[dict], None]] = None,
    ):
        self.store = store
        self.runs = runs
        self._clock = clock or store.clock
        self.max_player_name_length = max_player_name_length
        self._on_run_saved = on_run_saved

    def start(self, question_count: int) -> Session:
        if isinstance(question_count, bool) or not isinstance(question_count, int) \
                or not 1 <= question_count <= MAX_QUESTIONS:
            raise InvalidArgument(f'Question count must be a whole number between 1 and {MAX_QUESTIONS}.')
        session = self.store.create(question_count)
        current_app.logger.info(
            f"[session-start] session={session.session_id} questions={question_count} limit={session.time_limit_seconds}s"
        )
        return session

    def complete(self, session_id: str, player_name: Any, answers: Any) -> dict:
        session = self.store.get(session_id)
        if session is None:
            raise NotFound('Session not found or expired.')

        name = player_name.strip() if isinstance(player_name, str) else ''
        if not name:
            raise InvalidArgument('A player name is required.')
        if len(name) > self.max_player_name_length:
            raise InvalidArgument(f'Player name must be at most {self.max_player_name_length} characters.')
        if not isinstance(answers, list) or len(answers) != len(session.questions):
            raise InvalidArgument('The number of answers must match the number of questions.')

        elapsed_seconds = round(max(0.0, self._clock() - session.start_time), 2)
        correct_count = self._grade(session, answers)

        # Claim the session before persisting so two concurrent submissions
        # cannot both produce a run
        if self.store.take(session_id) is None:
            raise NotFound('Session not found or expired.')

        question_count = len(session.questions)
        breakdown = compute_score(question_count, correct_count, elapsed_seconds)
        run, rank = self.runs.save_with_rank(
            player_name=name,
            score=breakdown.score,
            question_count=question_count,
            correct_count=correct_count,
            elapsed_seconds=elapsed_seconds,
        )
        current_app.logger.info(
            f"[session-complete] session={session_id} run={run.id} score={breakdown.score} "
            f"correct={correct_count}/{question_count} elapsed={elapsed_seconds}s rank={rank}"
        )

        result = {
            'runId': run.id,
            'rank': rank,
            'playerName': name,
            'score': breakdown.score,
            'basePoints': breakdown.base_points,
            'floorScore': breakdown.floor_score,
            'timeBonus': breakdown.time_bonus,
            'questionCount': question_count,
            'correctCount': correct_count,
            'elapsedSeconds': elapsed_seconds,
            'timeLimitSeconds': breakdown.time_limit_seconds,
        }
        if self._on_run_saved:
            # The run is already committed; a failed broadcast must not fail the request
            try:
                self._on_run_saved(result)
            except Exception:
                current_app.logger.exception(f"[broadcast-error] run={run.id}")
        return result

    def _grade(self, session: Session, answers: List[Any]) -> int:
        by_id = {q.id: q for q in session.questions}
        graded = set()
        correct = 0
        for response in answers:
            question_id = response.get('questionId') if isinstance(response, dict) else None
            question = by_id.get(question_id) if isinstance(question_id, str) else None
            if question is None:
                # A bad reference burns the session; it cannot be retried
                self.store.delete(session.session_id)
                current_app.logger.info(
                    f"[session-rejected] session={session.session_id} question={question_id!r}"
                )
                raise InvalidArgument('Invalid question in the answer list.')
            if question.id in graded:
                continue
            graded.add(question.id)
            value = _numeric_answer(response.get('answer'))
            if value is not None and value == get_correct_answer(question.id):
                correct += 1
        return correct
