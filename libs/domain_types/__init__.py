"""Shared domain types for the placement test.

This package is the single source of truth for domain enums used across the
question bank, the adaptive engine, and persisted result history.

Usage:
    from libs.domain_types import CEFRLevel, QuestionCategory
"""

import enum


class CEFRLevel(str, enum.Enum):
    """CEFR proficiency levels, declared from lowest to highest.

    Declaration order is significant: it defines the ordering used for
    difficulty progression and for picking the best level in history.
    """

    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    @property
    def ordinal(self) -> int:
        """Zero-based position of the level (A1 -> 0, C2 -> 5)."""
        return list(CEFRLevel).index(self)

    @classmethod
    def from_ordinal(cls, ordinal: int) -> "CEFRLevel":
        """Return the level at a zero-based position.

        Raises:
            ValueError: If ordinal is not in 0..5.
        """
        levels = list(cls)
        if isinstance(ordinal, bool) or not isinstance(ordinal, int):
            raise ValueError(f"CEFR level ordinal must be an int, got {ordinal!r}")
        if not 0 <= ordinal < len(levels):
            raise ValueError(
                f"CEFR level ordinal must be in 0..{len(levels) - 1}, got {ordinal}"
            )
        return levels[ordinal]


class QuestionCategory(str, enum.Enum):
    """Skill area a question tests."""

    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"
    READING = "reading"


class TestStatus(str, enum.Enum):
    """Test session status."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


__all__ = [
    "CEFRLevel",
    "QuestionCategory",
    "TestStatus",
]
