import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import InvalidArgument

MIN_FACTOR = 1
MAX_FACTOR = 10


@dataclass(frozen=True)
class Question:
    id: str
    left: int
    right: int

    def to_dict(self):
        return {'id': self.id, 'left': self.left, 'right': self.right}


def _build_universe() -> Tuple[Question, ...]:
    return tuple(
        Question(id=f"{left}x{right}", left=left, right=right)
        for left in range(MIN_FACTOR, MAX_FACTOR + 1)
        for right in range(MIN_FACTOR, MAX_FACTOR + 1)
    )


# Every multiplication fact the quiz can ask, built once per process
QUESTION_UNIVERSE: Tuple[Question, ...] = _build_universe()
MAX_QUESTIONS = len(QUESTION_UNIVERSE)


def generate_questions(count: int, rng: Optional[random.Random] = None) -> List[Question]:
    """Return ``count`` distinct questions in random order.

    Shuffles a copy of the whole universe and takes the head, so every
    ordering is equally likely. ``rng`` lets callers pass a seeded source.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1 or count > MAX_QUESTIONS:
        raise InvalidArgument(f'Question count must be between 1 and {MAX_QUESTIONS}')
    pool = list(QUESTION_UNIVERSE)
    (rng or random).shuffle(pool)
    return pool[:count]


def get_correct_answer(question_id: str) -> int:
    try:
        left_str, right_str = question_id.split('x')
        left, right = int(left_str), int(right_str)
    except (AttributeError, ValueError):
        raise InvalidArgument(f'Malformed question id: {question_id!r}')
    return left * right
