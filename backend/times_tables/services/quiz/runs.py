import math
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError

from times_tables import db
from times_tables.models import Run
from .errors import InvalidArgument
from .scoring import compute_time_limit

# Leaderboard order: higher score, then faster, then earlier submission
RANKING_ORDER = (
    Run.score.desc(),
    Run.elapsed_seconds.asc(),
    Run.created_at.asc(),
    Run.id.asc(),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RunRepository:
    """Append-only store of completed runs backed by the ``runs`` table."""

    def save(
        self,
        player_name: str,
        score: int,
        question_count: int,
        correct_count: int,
        elapsed_seconds: float,
    ) -> Run:
        run, _ = self.save_with_rank(
            player_name=player_name,
            score=score,
            question_count=question_count,
            correct_count=correct_count,
            elapsed_seconds=elapsed_seconds,
        )
        return run

    def save_with_rank(
        self,
        player_name: str,
        score: int,
        question_count: int,
        correct_count: int,
        elapsed_seconds: float,
    ) -> Tuple[Run, int]:
        """Insert a run and rank it in the same transaction.

        The rank is counted after a flush and before the commit, so a failure
        while ranking leaves nothing persisted.
        """
        if correct_count < 0 or correct_count > question_count:
            raise InvalidArgument('Correct answers cannot exceed the number of questions')
        # created_at never goes backwards, even if the wall clock does
        latest = db.session.query(func.max(Run.created_at)).scalar()
        created_at = _utcnow()
        if latest is not None and latest > created_at:
            created_at = latest
        run = Run(
            player_name=player_name,
            score=score,
            question_count=question_count,
            correct_count=correct_count,
            elapsed_seconds=elapsed_seconds,
            time_limit_seconds=compute_time_limit(question_count),
            created_at=created_at,
        )
        db.session.add(run)
        try:
            db.session.flush()
            rank = self._rank_of(run)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        return run, rank

    def get(self, run_id: int) -> Optional[Run]:
        return db.session.get(Run, run_id)

    def list_runs(self, page: int = 1, page_size: int = 20, search: str = ''):
        """One page of the leaderboard, optionally filtered by player name.

        ``search`` is a case-insensitive substring match; an empty string
        matches everyone. ``page`` is 1-based and must be at least 1; a page past
        the end comes back with no items but correct totals.
        """
        if page < 1:
            raise InvalidArgument('Page must be 1 or greater.')
        if page_size < 1:
            raise InvalidArgument('Page size must be 1 or greater.')
        query = Run.query
        if search:
            query = query.filter(Run.player_name.icontains(search, autoescape=True))
        total = query.count()
        offset = (page - 1) * page_size
        items = query.order_by(*RANKING_ORDER).limit(page_size).offset(offset).all()
        return {
            'items': [r.to_dict() for r in items],
            'total': total,
            'page': page,
            'pageSize': page_size,
            'totalPages': math.ceil(total / page_size),
        }

    def get_rank(self, run_id: int) -> Optional[int]:
        """Zero-based count of runs that sort strictly ahead of ``run_id``."""
        run = self.get(run_id)
        if run is None:
            return None
        return self._rank_of(run)

    def _rank_of(self, run: Run) -> int:
        same_score = Run.score == run.score
        same_time = Run.elapsed_seconds == run.elapsed_seconds
        return Run.query.filter(
            or_(
                Run.score > run.score,
                and_(same_score, Run.elapsed_seconds < run.elapsed_seconds),
                and_(same_score, same_time, Run.created_at < run.created_at),
                and_(same_score, same_time, Run.created_at == run.created_at, Run.id < run.id),
            )
        ).count()

    def get_with_rank(self, run_id: int) -> Optional[Tuple[Run, int]]:
        run = self.get(run_id)
        if run is None:
            return None
        return run, self.get_rank(run_id)
