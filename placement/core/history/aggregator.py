"""
ResultAggregator: appends finished results to history and derives rollups.

History is persisted as one list and rewritten whole on every save. Statistics
are recomputed from the full history on each read.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from libs.domain_types import CEFRLevel
from placement.core.adaptive.engine import TestResult
from placement.core.config import settings
from placement.core.datetime_utils import format_relative_date, utc_now
from placement.core.history.serialization import (
    HistoryDecodeError,
    UnknownQuestionError,
    decode_result,
    encode_result,
)
from placement.core.history.store import (
    HistoryCorruptedError,
    HistoryStore,
    JsonFileHistoryStore,
)
from placement.core.question_bank import QuestionRepository, default_repository

logger = logging.getLogger(__name__)

NO_LEVEL_LABEL = "N/A"
NEVER_LABEL = "Never"


@dataclass(frozen=True)
class HistoryStatistics:
    """Rollup over every stored result."""

    total_tests: int
    average_accuracy: float
    best_level: Optional[CEFRLevel]
    total_questions: int
    correct_answers: int
    overall_accuracy: float
    last_test_at: Optional[datetime]
    last_test_label: str

    @property
    def best_level_label(self) -> str:
        if self.best_level is None:
            return NO_LEVEL_LABEL
        return self.best_level.value

    def to_dict(self) -> Dict[str, Any]:
        """Summary mapping with the camelCase keys used by the history screen."""
        return {
            "totalTests": self.total_tests,
            "averageAccuracy": self.average_accuracy,
            "bestLevel": self.best_level_label,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "overallAccuracy": self.overall_accuracy,
            "lastTestDate": self.last_test_label,
        }


class ResultAggregator:
    """
    Persists TestResults and computes statistics over them.

    Example:
        >>> aggregator = ResultAggregator(InMemoryHistoryStore(), default_repository())
        >>> aggregator.save_result(session.finalize_result())
        >>> aggregator.get_statistics().to_dict()["totalTests"]
        1
    """

    def __init__(
        self,
        store: HistoryStore,
        repository: QuestionRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            store: Backend holding the raw serialized history
            repository: Catalog used to resolve question ids on load
            clock: Reference time for relative date labels
        """
        self.store = store
        self.repository = repository
        self._clock = clock

    def _load_raw(self) -> List[Any]:
        try:
            raw = self.store.get_raw_history()
        except HistoryCorruptedError as e:
            logger.warning(f"Ignoring unreadable history: {e}")
            return []
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(
                f"Ignoring malformed history: expected a list, got {type(raw).__name__}"
            )
            return []
        return raw

    def save_result(self, result: TestResult) -> None:
        """
        Append a result to the stored history.

        The existing history is read, extended by one record and written back
        as a whole.
        """
        records = self._load_raw()
        records.append(encode_result(result))
        self.store.set_raw_history(records)
        logger.info(
            f"Saved result {result.test_id} ({result.estimated_level.value}, "
            f"{result.correct_answers}/{result.questions_answered}); "
            f"history now holds {len(records)} records",
            extra={
                "test_id": result.test_id,
                "cefr_level": result.estimated_level.value,
                "records": len(records),
            },
        )

    def get_results(self) -> List[TestResult]:
        """
        Load every stored result in the order saved.

        Records that fail to decode are skipped with a warning; the rest are
        still returned.
        """
        results: List[TestResult] = []
        for position, data in enumerate(self._load_raw()):
            try:
                results.append(decode_result(data, self.repository))
            except UnknownQuestionError as e:
                logger.warning(f"Skipping history record {position}: {e}")
            except HistoryDecodeError as e:
                logger.warning(f"Skipping malformed history record {position}: {e}")
        return results

    def get_statistics(self) -> HistoryStatistics:
        """Compute the rollup over the full stored history."""
        results = self.get_results()

        total_tests = len(results)
        total_questions = sum(r.questions_answered for r in results)
        correct_answers = sum(r.correct_answers for r in results)

        best_level: Optional[CEFRLevel] = None
        last_test_at: Optional[datetime] = None
        for result in results:
            if best_level is None or result.estimated_level.ordinal > best_level.ordinal:
                best_level = result.estimated_level
            if last_test_at is None or result.completed_at > last_test_at:
                last_test_at = result.completed_at

        average_accuracy = (
            sum(r.accuracy for r in results) / total_tests if total_tests else 0.0
        )
        overall_accuracy = (
            correct_answers / total_questions if total_questions else 0.0
        )
        last_test_label = (
            format_relative_date(last_test_at, self._clock())
            if last_test_at is not None
            else NEVER_LABEL
        )

        return HistoryStatistics(
            total_tests=total_tests,
            average_accuracy=average_accuracy,
            best_level=best_level,
            total_questions=total_questions,
            correct_answers=correct_answers,
            overall_accuracy=overall_accuracy,
            last_test_at=last_test_at,
            last_test_label=last_test_label,
        )

    def clear_all(self) -> None:
        """Remove the entire stored history."""
        self.store.clear()
        logger.info("Cleared result history")


def default_aggregator(
    repository: Optional[QuestionRepository] = None,
) -> ResultAggregator:
    """
    Build an aggregator over the configured JSON history file.

    Uses settings.HISTORY_FILE and settings.HISTORY_KEY; the packaged catalog
    is used when no repository is given.
    """
    if repository is None:
        repository = default_repository()
    store = JsonFileHistoryStore(settings.HISTORY_FILE, key=settings.HISTORY_KEY)
    return ResultAggregator(store, repository)
