"""
Question selection for the adaptive placement test.

Builds the ordered question list for one attempt from the starting level and
its immediate neighbours:

1. Candidate levels: the starting level, then the level below (if any), then
   the level above (if any)
2. From each candidate level, sample up to ``questions_per_level`` questions
   without replacement
3. Concatenate the per-level samples in candidate order

Only "starting level first" is guaranteed about ordering across levels.
Sampling is intentionally non-deterministic unless an ``rng`` is provided.
"""
import logging
import random
from typing import List, Optional

from libs.domain_types import CEFRLevel
from placement.core.question_bank import Question, QuestionRepository

logger = logging.getLogger(__name__)

# Questions drawn from each candidate level
QUESTIONS_PER_LEVEL = 2


def candidate_levels(starting_level: CEFRLevel) -> List[CEFRLevel]:
    """
    Levels a test starting at ``starting_level`` draws questions from.

    Boundary levels omit the missing neighbour: A1 yields [A1, A2] and C2
    yields [C2, C1].

    Args:
        starting_level: Level the test is centred on

    Returns:
        Starting level first, then the lower neighbour, then the upper one
    """
    starting_level = CEFRLevel(starting_level)
    levels = list(CEFRLevel)
    centre = starting_level.ordinal

    candidates = [starting_level]
    if centre > 0:
        candidates.append(levels[centre - 1])
    if centre < len(levels) - 1:
        candidates.append(levels[centre + 1])
    return candidates


def select_questions(
    repository: QuestionRepository,
    starting_level: CEFRLevel,
    rng: Optional[random.Random] = None,
    questions_per_level: int = QUESTIONS_PER_LEVEL,
) -> List[Question]:
    """
    Pick the ordered question list for one adaptive test attempt.

    Args:
        repository: Catalog to draw from
        starting_level: Level the test is centred on
        rng: Optional Random instance for deterministic testing
        questions_per_level: Maximum questions sampled per candidate level

    Returns:
        Questions grouped by candidate level, starting level first. A level
        with fewer questions than requested contributes all of them.

    Raises:
        ValueError: If questions_per_level is not positive
    """
    if questions_per_level <= 0:
        raise ValueError(
            f"questions_per_level must be positive, got {questions_per_level}"
        )

    source = rng if rng is not None else random
    pools = repository.by_level()
    selected: List[Question] = []

    for level in candidate_levels(starting_level):
        pool = pools.get(level, [])
        if not pool:
            logger.debug(f"No questions available at level {level.value}")
            continue
        take = min(questions_per_level, len(pool))
        selected.extend(source.sample(pool, take))

    logger.info(
        f"Selected {len(selected)} questions around {CEFRLevel(starting_level).value}: "
        f"{[q.id for q in selected]}"
    )
    return selected
