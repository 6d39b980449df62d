# PATH: apps/domains/attempts/errors.py
from apps.api.common.exceptions import (
    ConflictError,
    ForbiddenStateError,
    NotFoundError,
    ValidationFailed,
)


class AttemptNotFound(NotFoundError):
    code = "attempt_not_found"
    default_message = "Attempt not found."


class QuestionNotFound(NotFoundError):
    code = "question_not_found"
    default_message = "Question not found in this attempt."


class TestExpired(ForbiddenStateError):
    __test__ = False  # pytest 수집 대상 아님

    code = "test_expired"
    default_message = "This test has expired."


class TestTerminated(ForbiddenStateError):
    __test__ = False

    code = "test_terminated"
    default_message = "This test was terminated."


class AlreadyCompleted(ConflictError):
    code = "already_completed"
    default_message = "This test has already been submitted."


class InvalidState(ConflictError):
    code = "invalid_state"
    default_message = "Operation is not allowed in the current attempt state."


class PendingInviteExists(ValidationFailed):
    code = "pending_invite_exists"
    default_message = "Candidate already has a pending invitation."


class EmptySubmission(ValidationFailed):
    code = "empty_submission"
    default_message = "Either a presentation link or a file is required."


class InvalidUrl(ValidationFailed):
    code = "invalid_url"
    default_message = "Presentation link is not a valid URL."


class InvalidUrlScheme(ValidationFailed):
    code = "invalid_url_scheme"
    default_message = "Presentation link must use http or https."


class InvalidFileType(ValidationFailed):
    code = "invalid_file_type"
    default_message = "Unsupported presentation file type."


class NotPresentation(ValidationFailed):
    code = "not_presentation"
    default_message = "This attempt is not a presentation test."


class InvalidGrade(ValidationFailed):
    code = "invalid_grade"
    default_message = "Grade is out of range."
