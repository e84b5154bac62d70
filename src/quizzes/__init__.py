"""Quiz attempts and essay grading.

Provides:
- Attempt lifecycle (start, submit, result)
- Automatic multiple-choice scoring
- Essay grading with attempt score recalculation
"""

from .models import QUIZZES_TABLES_CQL, QuestionType


__all__ = ["QUIZZES_TABLES_CQL", "QuestionType"]
