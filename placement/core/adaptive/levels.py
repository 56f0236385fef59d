"""
Mapping between the engine's numeric difficulty rank and CEFR levels.

The engine tracks difficulty as an integer rank in [MIN_RANK, MAX_RANK]. Each
rank corresponds to exactly one CEFR level (1 -> A1, ..., 6 -> C2). The
mapping is checked: out-of-range input raises instead of indexing blindly.
"""
from typing import Dict

from libs.domain_types import CEFRLevel

MIN_RANK = 1
MAX_RANK = 6

_DESCRIPTORS: Dict[CEFRLevel, str] = {
    CEFRLevel.A1: "Beginner",
    CEFRLevel.A2: "Elementary",
    CEFRLevel.B1: "Intermediate",
    CEFRLevel.B2: "Upper Intermediate",
    CEFRLevel.C1: "Advanced",
    CEFRLevel.C2: "Proficient",
}

# (minimum accuracy, label), checked in order
_PERFORMANCE_BANDS = (
    (0.8, "Excellent Performance!"),
    (0.6, "Good Job!"),
    (0.4, "Fair Performance"),
)
_LOWEST_PERFORMANCE_LABEL = "Needs More Practice"


def is_valid_rank(rank: object) -> bool:
    """Whether rank is an int within [MIN_RANK, MAX_RANK]."""
    return (
        isinstance(rank, int)
        and not isinstance(rank, bool)
        and MIN_RANK <= rank <= MAX_RANK
    )


def rank_to_level(rank: int) -> CEFRLevel:
    """
    Convert an engine rank to its CEFR level.

    Args:
        rank: Difficulty rank, 1 (A1) to 6 (C2)

    Returns:
        The corresponding CEFRLevel

    Raises:
        ValueError: If rank is not an int in [MIN_RANK, MAX_RANK]
    """
    if not is_valid_rank(rank):
        raise ValueError(f"rank must be an int in [{MIN_RANK}, {MAX_RANK}], got {rank!r}")
    return CEFRLevel.from_ordinal(rank - MIN_RANK)


def level_to_rank(level: CEFRLevel) -> int:
    """Convert a CEFR level to its engine rank (A1 -> 1, C2 -> 6)."""
    return CEFRLevel(level).ordinal + MIN_RANK


def level_descriptor(level: CEFRLevel) -> str:
    """Descriptive name of a level, e.g. "Upper Intermediate" for B2."""
    return _DESCRIPTORS[CEFRLevel(level)]


def level_display_name(level: CEFRLevel) -> str:
    """Short name plus descriptor, e.g. "B1 Intermediate"."""
    level = CEFRLevel(level)
    return f"{level.value} {_DESCRIPTORS[level]}"


def performance_label(accuracy: float) -> str:
    """
    Describe a test's accuracy for the results summary.

    Args:
        accuracy: Share of correct answers in [0.0, 1.0]

    Returns:
        Label for the highest band the accuracy reaches
    """
    for threshold, label in _PERFORMANCE_BANDS:
        if accuracy >= threshold:
            return label
    return _LOWEST_PERFORMANCE_LABEL
