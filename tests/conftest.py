"""
Pytest configuration and shared fixtures for testing.
"""
import sys
from pathlib import Path

# Add project root to path so libs/ and placement/ are importable without an install
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import random  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Callable, List, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402

from libs.domain_types import CEFRLevel, QuestionCategory  # noqa: E402
from placement.core.logging_config import session_id_context  # noqa: E402
from placement.core.question_bank import (  # noqa: E402
    Question,
    QuestionRepository,
    default_repository,
)

# Monday morning; "yesterday" and "today" labels are computed against it
FIXED_START = datetime(2025, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock standing in for utc_now()."""

    def __init__(self, start: datetime = FIXED_START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_session_id():
    """Keep log correlation ids from leaking between tests."""
    token = session_id_context.set(None)
    yield
    session_id_context.reset(token)


@pytest.fixture
def clock() -> FakeClock:
    """A clock fixed at FIXED_START until advanced."""
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for deterministic selection."""
    return random.Random(42)


@pytest.fixture
def repository() -> QuestionRepository:
    """Repository over the packaged catalog."""
    return default_repository()


@pytest.fixture
def make_question() -> Callable[..., Question]:
    """Factory for questions with sensible defaults."""

    def _make(
        question_id: str,
        difficulty: CEFRLevel = CEFRLevel.B1,
        correct_answer_index: int = 0,
        category: QuestionCategory = QuestionCategory.GRAMMAR,
        options: Optional[Tuple[str, ...]] = None,
    ) -> Question:
        return Question(
            id=question_id,
            text=f"Prompt for {question_id}",
            options=options or ("first", "second", "third", "fourth"),
            correct_answer_index=correct_answer_index,
            explanation="Because.",
            difficulty=difficulty,
            category=category,
        )

    return _make


@pytest.fixture
def six_questions(make_question) -> List[Question]:
    """Six questions whose correct answer is always option 0."""
    return [make_question(f"Q{i}") for i in range(1, 7)]


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    """Location for a JSON history file inside the test's temp directory."""
    return tmp_path / "placement" / "history.json"
