class QuizError(Exception):
    """Base error for quiz operations; carries the HTTP status it maps to."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(QuizError):
    status_code = 400


class NotFound(QuizError):
    status_code = 404
