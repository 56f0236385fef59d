"""
AdaptiveTestSession: state machine for a single placement test attempt.

Tracks the question cursor, running score, answer streaks and a bounded
difficulty rank. The rank moves one step after two consecutive answers of the
same outcome and is clamped to [MIN_RANK, MAX_RANK]; it is mapped 1:1 onto the
six CEFR levels to produce the final estimate.

The session is synchronous and not re-entrant: callers submit one answer at a
time. Display pacing between questions is the caller's concern.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from libs.domain_types import CEFRLevel, TestStatus
from placement.core.adaptive.levels import (
    MAX_RANK,
    MIN_RANK,
    is_valid_rank,
    rank_to_level,
)
from placement.core.datetime_utils import to_milliseconds, utc_now
from placement.core.question_bank import Question

logger = logging.getLogger(__name__)


class SessionStateError(RuntimeError):
    """Raised when a session operation is called in the wrong state."""


@dataclass(frozen=True)
class Response:
    """Single answer recorded during a session."""

    question: Question
    selected_index: Optional[int]  # None when the question was left unanswered
    is_correct: bool
    time_taken: timedelta


@dataclass(frozen=True)
class TestResult:
    """Immutable snapshot of a completed session."""

    test_id: str
    completed_at: datetime
    estimated_level: CEFRLevel
    questions_answered: int
    correct_answers: int
    total_time: timedelta
    responses: Tuple[Response, ...]

    @property
    def accuracy(self) -> float:
        """Share of answered questions that were correct (0.0 if none)."""
        if self.questions_answered <= 0:
            return 0.0
        return self.correct_answers / self.questions_answered


def _truncate_to_ms(delta: timedelta) -> timedelta:
    # Persisted history stores durations in whole milliseconds
    return timedelta(milliseconds=to_milliseconds(delta))


class AdaptiveTestSession:
    """
    One adaptive test attempt over a fixed, ordered question list.

    States:
    - IN_PROGRESS: questions remain; ``submit_answer`` and
      ``current_question`` are valid
    - COMPLETED: every question answered; ``finalize_result`` is valid
    - ABANDONED: discarded by the caller before completion

    Example:
        >>> session = AdaptiveTestSession(questions, starting_rank=3)
        >>> while not session.is_completed:
        ...     q = session.current_question()
        ...     session.submit_answer(pick(q))
        >>> result = session.finalize_result()
    """

    # Consecutive answers of one outcome needed to move the rank
    PROMOTION_STREAK = 2
    DEMOTION_STREAK = 2
    # Rank 3 corresponds to B1
    DEFAULT_STARTING_RANK = 3

    def __init__(
        self,
        questions: Sequence[Question],
        starting_rank: int = DEFAULT_STARTING_RANK,
        clock: Callable[[], datetime] = utc_now,
        session_id: Optional[str] = None,
    ):
        """
        Start a new session.

        Args:
            questions: Ordered questions for this attempt (non-empty)
            starting_rank: Initial difficulty rank in [MIN_RANK, MAX_RANK]
            clock: Source of the current time
            session_id: Correlation id for log lines (random if omitted)

        Raises:
            ValueError: If questions is empty or starting_rank is out of range
        """
        if not questions:
            raise ValueError("An adaptive test session needs at least one question")
        if not is_valid_rank(starting_rank):
            raise ValueError(
                f"starting_rank must be an int in [{MIN_RANK}, {MAX_RANK}], "
                f"got {starting_rank!r}"
            )

        self._session_id = session_id or uuid.uuid4().hex
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._clock = clock
        self._cursor = 0
        self._score = 0
        self._rank = starting_rank
        self._consecutive_correct = 0
        self._consecutive_incorrect = 0
        self._responses: List[Response] = []
        self._status = TestStatus.IN_PROGRESS

        now = clock()
        self._started_at = now
        self._question_started_at = now

        logger.info(
            f"Started adaptive session with {len(self._questions)} questions "
            f"at rank {starting_rank} ({rank_to_level(starting_rank).value})"
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def score(self) -> int:
        return self._score

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def consecutive_correct(self) -> int:
        return self._consecutive_correct

    @property
    def consecutive_incorrect(self) -> int:
        return self._consecutive_incorrect

    @property
    def responses(self) -> Tuple[Response, ...]:
        return tuple(self._responses)

    @property
    def status(self) -> TestStatus:
        return self._status

    @property
    def is_completed(self) -> bool:
        return self._status == TestStatus.COMPLETED

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def question_started_at(self) -> datetime:
        return self._question_started_at

    @property
    def progress(self) -> float:
        """Share of questions answered so far."""
        return len(self._responses) / len(self._questions)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _require_in_progress(self, operation: str) -> None:
        if self._status != TestStatus.IN_PROGRESS:
            raise SessionStateError(
                f"Cannot {operation}: session is {self._status.value}"
            )

    def current_question(self) -> Question:
        """
        Return the question at the cursor.

        Raises:
            SessionStateError: If the session is not in progress
        """
        self._require_in_progress("get current question")
        return self._questions[self._cursor]

    def submit_answer(self, selected_index: Optional[int]) -> Response:
        """
        Record an answer to the current question and advance the session.

        This is a single atomic transition:
        - Grades the answer against the current question
        - Appends a Response with the time spent on the question
        - Updates score, streak counters and difficulty rank
        - Moves to the next question, or completes the session after the last

        Args:
            selected_index: Option index chosen, or None if left unanswered

        Returns:
            The recorded Response

        Raises:
            SessionStateError: If the session is not in progress
        """
        self._require_in_progress("submit answer")

        question = self._questions[self._cursor]
        is_correct = (
            selected_index is not None
            and selected_index == question.correct_answer_index
        )
        now = self._clock()
        response = Response(
            question=question,
            selected_index=selected_index,
            is_correct=is_correct,
            time_taken=_truncate_to_ms(now - self._question_started_at),
        )
        self._responses.append(response)

        previous_rank = self._rank
        if is_correct:
            self._score += 1
            self._consecutive_correct += 1
            self._consecutive_incorrect = 0
            if (
                self._consecutive_correct >= self.PROMOTION_STREAK
                and self._rank < MAX_RANK
            ):
                self._rank += 1
                self._consecutive_correct = 0
        else:
            self._consecutive_incorrect += 1
            self._consecutive_correct = 0
            if (
                self._consecutive_incorrect >= self.DEMOTION_STREAK
                and self._rank > MIN_RANK
            ):
                self._rank -= 1
                self._consecutive_incorrect = 0

        logger.debug(
            f"Answer #{len(self._responses)} (Q{question.id}, selected={selected_index}, "
            f"correct={is_correct}) -> rank={self._rank}, "
            f"streaks=+{self._consecutive_correct}/-{self._consecutive_incorrect}",
            extra={
                "question_id": question.id,
                "is_correct": is_correct,
                "rank": self._rank,
                "elapsed_ms": to_milliseconds(response.time_taken),
            },
        )
        if self._rank != previous_rank:
            logger.info(
                f"Rank changed {previous_rank} -> {self._rank} "
                f"({rank_to_level(self._rank).value}) after question {question.id}",
                extra={
                    "question_id": question.id,
                    "rank": self._rank,
                    "cefr_level": rank_to_level(self._rank).value,
                },
            )

        if self._cursor < len(self._questions) - 1:
            self._cursor += 1
            self._question_started_at = now
        else:
            self._status = TestStatus.COMPLETED
            logger.info(
                f"Session completed: {self._score}/{len(self._responses)} correct, "
                f"final rank {self._rank} ({rank_to_level(self._rank).value})"
            )

        return response

    def estimated_level(self) -> CEFRLevel:
        """
        Map the current rank to a CEFR level.

        Valid at any time, but only meaningful once the session is completed.
        """
        return rank_to_level(self._rank)

    def finalize_result(self) -> TestResult:
        """
        Produce an immutable result snapshot of the completed session.

        Each call builds a new snapshot stamped with the current time; the
        session does not cache it.

        Returns:
            TestResult for this attempt

        Raises:
            SessionStateError: If the session has not completed
        """
        if self._status != TestStatus.COMPLETED:
            raise SessionStateError(
                f"Cannot finalize result: session is {self._status.value}"
            )

        now = self._clock()
        result = TestResult(
            test_id=f"test_{int(now.timestamp() * 1000)}",
            completed_at=now,
            estimated_level=self.estimated_level(),
            questions_answered=len(self._responses),
            correct_answers=self._score,
            total_time=_truncate_to_ms(now - self._started_at),
            responses=tuple(self._responses),
        )

        logger.info(
            f"Finalized result {result.test_id}: level={result.estimated_level.value}, "
            f"correct={result.correct_answers}/{result.questions_answered}, "
            f"total_time_ms={to_milliseconds(result.total_time)}",
            extra={
                "test_id": result.test_id,
                "rank": self._rank,
                "cefr_level": result.estimated_level.value,
                "elapsed_ms": to_milliseconds(result.total_time),
            },
        )
        return result

    def abandon(self) -> None:
        """
        Discard an in-progress session.

        Raises:
            SessionStateError: If the session is already completed or abandoned
        """
        self._require_in_progress("abandon")
        self._status = TestStatus.ABANDONED
        logger.info(
            f"Session abandoned after {len(self._responses)}/{len(self._questions)} answers"
        )
