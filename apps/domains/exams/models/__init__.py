# apps/domains/exams/models/__init__.py
from .exam import Exam

__all__ = [
    "Exam",
]
