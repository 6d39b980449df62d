# apps/domains/attempts/models/__init__.py
from .attempt import Attempt
from .answer_log import AnswerLog

__all__ = [
    "Attempt",
    "AnswerLog",
]
