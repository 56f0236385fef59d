"""
Entry point for starting a placement test from configuration.
"""
import random
from datetime import datetime
from typing import Callable, Optional

from libs.domain_types import CEFRLevel
from placement.core.adaptive.engine import AdaptiveTestSession
from placement.core.adaptive.levels import level_to_rank
from placement.core.adaptive.selection import select_questions
from placement.core.config import settings
from placement.core.datetime_utils import utc_now
from placement.core.logging_config import session_id_context
from placement.core.question_bank import QuestionRepository


def start_session(
    repository: QuestionRepository,
    starting_level: Optional[CEFRLevel] = None,
    rng: Optional[random.Random] = None,
    questions_per_level: Optional[int] = None,
    clock: Callable[[], datetime] = utc_now,
) -> AdaptiveTestSession:
    """
    Select questions and open a session at the matching rank.

    The new session's id is stored in session_id_context so log lines emitted
    while driving it carry the same correlation id.

    Args:
        repository: Catalog to draw questions from
        starting_level: Level to start at (defaults to settings.STARTING_LEVEL)
        rng: Optional Random instance for deterministic testing
        questions_per_level: Sample size per level (defaults to
            settings.QUESTIONS_PER_LEVEL)
        clock: Source of the current time for the session

    Returns:
        A new in-progress AdaptiveTestSession

    Raises:
        ValueError: If the repository has no questions around the starting level
    """
    level = (
        CEFRLevel(starting_level)
        if starting_level is not None
        else settings.starting_level
    )
    per_level = (
        questions_per_level
        if questions_per_level is not None
        else settings.QUESTIONS_PER_LEVEL
    )

    questions = select_questions(repository, level, rng=rng, questions_per_level=per_level)
    if not questions:
        raise ValueError(f"No questions available around level {level.value}")

    session = AdaptiveTestSession(questions, starting_rank=level_to_rank(level), clock=clock)
    session_id_context.set(session.session_id)
    return session
