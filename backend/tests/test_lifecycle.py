import math

import pytest

from times_tables.models import Run
from times_tables.services.quiz import InvalidArgument, NotFound
from times_tables.services.quiz.questions import get_correct_answer


def answer_all(session, wrong=0):
    """Answer every question, getting the first `wrong` of them wrong."""
    answers = []
    for i, q in enumerate(session.questions):
        value = get_correct_answer(q.id)
        answers.append({'questionId': q.id, 'answer': value + 1 if i < wrong else value})
    return answers


def test_start_registers_session(controller):
    session = controller.start(10)
    assert controller.store.get(session.session_id) is session
    assert len(session.questions) == 10


@pytest.mark.parametrize('count', [0, 101, True, 3.0])
def test_start_rejects_bad_count(controller, count):
    with pytest.raises(InvalidArgument):
        controller.start(count)
    assert len(controller.store) == 0


def test_perfect_run_is_scored_and_persisted(controller, clock):
    session = controller.start(10)
    clock.advance(30)
    result = controller.complete(session.session_id, '  Ana  ', answer_all(session))
    assert result['playerName'] == 'Ana'
    assert result['correctCount'] == 10
    assert result['elapsedSeconds'] == 30
    assert result['timeBonus'] == 60
    assert result['score'] == 160
    assert result['rank'] == 0
    run = Run.query.get(result['runId'])
    assert run.correct_count == run.question_count == 10
    assert run.time_limit_seconds == 60
    # Session is gone once completed
    assert controller.store.get(session.session_id) is None


def test_mistakes_remove_bonus(controller, clock):
    session = controller.start(10)
    clock.advance(30)
    result = controller.complete(session.session_id, 'Ana', answer_all(session, wrong=2))
    assert result['correctCount'] == 8
    assert result['timeBonus'] == 0
    assert result['score'] == 80


def test_elapsed_time_is_rounded_server_side(controller, clock):
    session = controller.start(2)
    clock.advance(3.14159)
    result = controller.complete(session.session_id, 'Ana', answer_all(session))
    assert result['elapsedSeconds'] == 3.14


def test_clock_going_backwards_counts_as_zero(controller, clock):
    session = controller.start(1)
    clock.advance(-5)
    result = controller.complete(session.session_id, 'Ana', answer_all(session))
    assert result['elapsedSeconds'] == 0


def test_completing_twice_is_not_found(controller):
    session = controller.start(3)
    controller.complete(session.session_id, 'Ana', answer_all(session))
    with pytest.raises(NotFound):
        controller.complete(session.session_id, 'Ana', answer_all(session))
    assert Run.query.count() == 1


def test_unknown_session_is_not_found(controller):
    with pytest.raises(NotFound):
        controller.complete('no-such-session', 'Ana', [])


@pytest.mark.parametrize('name', ['', '   ', None, 42, 'x' * 65])
def test_bad_player_name_keeps_session(controller, name):
    session = controller.start(2)
    with pytest.raises(InvalidArgument):
        controller.complete(session.session_id, name, answer_all(session))
    assert controller.store.get(session.session_id) is not None
    assert Run.query.count() == 0


def test_answer_count_mismatch_keeps_session(controller):
    session = controller.start(3)
    with pytest.raises(InvalidArgument):
        controller.complete(session.session_id, 'Ana', answer_all(session)[:2])
    with pytest.raises(InvalidArgument):
        controller.complete(session.session_id, 'Ana', {'not': 'a list'})
    assert controller.store.get(session.session_id) is not None


def test_foreign_question_rejects_and_burns_session(controller):
    session = controller.start(3)
    taken = {q.id for q in session.questions}
    foreign = next(f"{a}x{b}" for a in range(1, 11) for b in range(1, 11) if f"{a}x{b}" not in taken)
    answers = answer_all(session)
    answers[1] = {'questionId': foreign, 'answer': 1}
    with pytest.raises(InvalidArgument):
        controller.complete(session.session_id, 'Ana', answers)
    assert controller.store.get(session.session_id) is None
    with pytest.raises(NotFound):
        controller.complete(session.session_id, 'Ana', answer_all(session))
    assert Run.query.count() == 0


@pytest.mark.parametrize('bad_entry', ['7x8', None, {'answer': 3}, {'questionId': ['1x1']}])
def test_malformed_answer_entry_burns_session(controller, bad_entry):
    session = controller.start(2)
    answers = answer_all(session)
    answers[0] = bad_entry
    with pytest.raises(InvalidArgument):
        controller.complete(session.session_id, 'Ana', answers)
    assert controller.store.get(session.session_id) is None


@pytest.mark.parametrize('bad_value', [None, 'abc', '', math.inf, math.nan, [1], True])
def test_non_numeric_answer_counts_as_incorrect(controller, bad_value):
    session = controller.start(2)
    answers = answer_all(session)
    answers[0]['answer'] = bad_value
    result = controller.complete(session.session_id, 'Ana', answers)
    assert result['correctCount'] == 1


def test_numeric_strings_and_floats_are_graded(controller):
    session = controller.start(2)
    answers = answer_all(session)
    answers[0]['answer'] = str(answers[0]['answer'])
    answers[1]['answer'] = float(answers[1]['answer'])
    result = controller.complete(session.session_id, 'Ana', answers)
    assert result['correctCount'] == 2


def test_repeated_question_is_graded_once(controller):
    session = controller.start(3)
    answers = answer_all(session)
    answers[2] = dict(answers[0])
    result = controller.complete(session.session_id, 'Ana', answers)
    assert result['correctCount'] == 2
    assert result['timeBonus'] == 0


def test_expired_session_cannot_be_completed(controller, clock):
    session = controller.start(2)
    clock.advance(3601)
    controller.store.sweep()
    with pytest.raises(NotFound):
        controller.complete(session.session_id, 'Ana', answer_all(session))


def test_run_saved_callback_receives_result(flask_app, controller):
    seen = []
    controller._on_run_saved = seen.append
    session = controller.start(1)
    result = controller.complete(session.session_id, 'Ana', answer_all(session))
    assert seen == [result]


def test_failing_broadcast_does_not_fail_completion(flask_app, controller):
    def broken_hook(result):
        raise RuntimeError('socket server unavailable')

    controller._on_run_saved = broken_hook
    session = controller.start(1)
    result = controller.complete(session.session_id, 'Ana', answer_all(session))
    assert result['correctCount'] == 1
    assert Run.query.count() == 1
    assert controller.store.get(session.session_id) is None
