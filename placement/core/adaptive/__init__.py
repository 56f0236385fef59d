"""
Adaptive placement test: level mapping, question selection and the session
engine.
"""

from .engine import (
    AdaptiveTestSession,
    Response,
    SessionStateError,
    TestResult,
)
from .factory import start_session
from .levels import (
    MAX_RANK,
    MIN_RANK,
    level_descriptor,
    level_display_name,
    level_to_rank,
    performance_label,
    rank_to_level,
)
from .selection import (
    QUESTIONS_PER_LEVEL,
    candidate_levels,
    select_questions,
)

__all__ = [
    "AdaptiveTestSession",
    "Response",
    "SessionStateError",
    "start_session",
    "TestResult",
    "MIN_RANK",
    "MAX_RANK",
    "rank_to_level",
    "level_to_rank",
    "level_descriptor",
    "level_display_name",
    "performance_label",
    "QUESTIONS_PER_LEVEL",
    "candidate_levels",
    "select_questions",
]
