import math
from dataclasses import dataclass

SECONDS_PER_QUESTION = 6
POINTS_PER_CORRECT = 10
FLOOR_MULTIPLIER = 0.3
BONUS_MULTIPLIER = 2


@dataclass(frozen=True)
class ScoreBreakdown:
    score: int
    base_points: int
    floor_score: int
    time_bonus: int
    time_limit_seconds: int

    def to_dict(self):
        return {
            'score': self.score,
            'basePoints': self.base_points,
            'floorScore': self.floor_score,
            'timeBonus': self.time_bonus,
            'timeLimitSeconds': self.time_limit_seconds,
        }


def compute_time_limit(question_count: int) -> int:
    return question_count * SECONDS_PER_QUESTION


def compute_score(question_count: int, correct_count: int, elapsed_seconds: float) -> ScoreBreakdown:
    """Score a finished run.

    Every correct answer is worth ``POINTS_PER_CORRECT``. A run with no
    mistakes that beats the time limit earns ``BONUS_MULTIPLIER`` points per
    second left over. Whatever the clock says, the score never drops below
    ``FLOOR_MULTIPLIER`` of the base points.
    """
    time_limit = compute_time_limit(question_count)
    base_points = correct_count * POINTS_PER_CORRECT
    floor_score = math.floor(base_points * FLOOR_MULTIPLIER)

    if elapsed_seconds >= time_limit:
        return ScoreBreakdown(
            score=floor_score,
            base_points=base_points,
            floor_score=floor_score,
            time_bonus=0,
            time_limit_seconds=time_limit,
        )

    raw_bonus = max(0, math.floor((time_limit - elapsed_seconds) * BONUS_MULTIPLIER))
    time_bonus = raw_bonus if correct_count == question_count else 0
    return ScoreBreakdown(
        score=max(base_points + time_bonus, floor_score),
        base_points=base_points,
        floor_score=floor_score,
        time_bonus=time_bonus,
        time_limit_seconds=time_limit,
    )


def scoring_constants():
    """Constants a client needs to preview a score with the same formula."""
    return {
        'secondsPerQuestion': SECONDS_PER_QUESTION,
        'pointsPerCorrect': POINTS_PER_CORRECT,
        'floorMultiplier': FLOOR_MULTIPLIER,
        'bonusMultiplier': BONUS_MULTIPLIER,
    }
