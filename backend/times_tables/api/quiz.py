from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from times_tables import db
from times_tables.services.quiz import InvalidArgument, NotFound, QuizController, QuizError
from times_tables.services.quiz.questions import MAX_QUESTIONS
from times_tables.services.quiz.scoring import scoring_constants

quiz = Blueprint('quiz', __name__)


def _controller() -> QuizController:
    return current_app.extensions['times_tables']


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument('Request body must be a JSON object.')
    return data


def _parse_question_count(raw, default: int) -> int:
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise InvalidArgument(f'Question count must be a whole number between 1 and {MAX_QUESTIONS}.')
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError:
            raw = None
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, int):
        return raw
    raise InvalidArgument(f'Question count must be a whole number between 1 and {MAX_QUESTIONS}.')


@quiz.errorhandler(QuizError)
def handle_quiz_error(exc: QuizError):
    return jsonify({'error': exc.message}), exc.status_code


@quiz.errorhandler(SQLAlchemyError)
def handle_storage_error(exc: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.error(f"[internal-error] {exc.__class__.__name__}", exc_info=exc)
    return jsonify({'error': 'An internal error occurred. Please try again.'}), 500


@quiz.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()})


@quiz.route('/config', methods=['GET'])
def get_config():
    return jsonify({
        'maxQuestions': MAX_QUESTIONS,
        'defaultQuestionCount': current_app.config.get('DEFAULT_QUESTION_COUNT', 10),
        'scoring': scoring_constants(),
    })


@quiz.route('/sessions', methods=['POST'])
def start_session():
    data = _json_body()
    count = _parse_question_count(
        data.get('questionCount'), current_app.config.get('DEFAULT_QUESTION_COUNT', 10)
    )
    session = _controller().start(count)
    return jsonify(session.to_public_dict()), 201


@quiz.route('/sessions/<string:session_id>/complete', methods=['POST'])
def complete_session(session_id):
    controller = _controller()
    # Unknown sessions are reported before the body is looked at
    if controller.store.get(session_id) is None:
        raise NotFound('Session not found or expired.')
    data = _json_body()
    result = controller.complete(session_id, data.get('playerName'), data.get('answers'))
    return jsonify(result), 201


@quiz.route('/leaderboard', methods=['GET'])
def leaderboard():
    try:
        page = max(int(request.args.get('page', 1)) or 1, 1)
    except (TypeError, ValueError):
        page = 1
    search = (request.args.get('search') or '').strip()
    page_size = current_app.config.get('LEADERBOARD_PAGE_SIZE', 20)
    return jsonify(_controller().runs.list_runs(page=page, page_size=page_size, search=search))


@quiz.route('/runs/<int:run_id>', methods=['GET'])
def get_run(run_id):
    found = _controller().runs.get_with_rank(run_id)
    if found is None:
        raise NotFound('Run not found.')
    run, rank = found
    return jsonify({'run': run.to_dict(), 'rank': rank})
