"""
Conversion between TestResult objects and persisted history records.

Responses are stored by question id only; decoding resolves each id back to a
full Question through the repository. An id the repository does not know is
a data-integrity error and raises UnknownQuestionError rather than being
substituted.
"""
from datetime import timedelta
from typing import Any, Dict, List

from pydantic import ValidationError

from libs.domain_types import CEFRLevel
from placement.core.adaptive.engine import Response, TestResult
from placement.core.datetime_utils import to_milliseconds
from placement.core.question_bank import QuestionNotFoundError, QuestionRepository
from placement.schemas.results import ResponseRecord, ResultRecord


class HistoryDecodeError(ValueError):
    """Raised when a persisted record cannot be turned back into a TestResult."""


class UnknownQuestionError(HistoryDecodeError):
    """Raised when a persisted response references a question not in the repository."""

    def __init__(self, question_id: str, test_id: str):
        super().__init__(
            f"Result {test_id!r} references unknown question id {question_id!r}"
        )
        self.question_id = question_id
        self.test_id = test_id


def to_record(result: TestResult) -> ResultRecord:
    """Build the persisted record for a result."""
    return ResultRecord(
        test_id=result.test_id,
        completed_at=result.completed_at,
        estimated_level=CEFRLevel(result.estimated_level).ordinal,
        questions_answered=result.questions_answered,
        correct_answers=result.correct_answers,
        total_time_ms=to_milliseconds(result.total_time),
        responses=[
            ResponseRecord(
                question_id=response.question.id,
                selected_answer_index=response.selected_index,
                is_correct=response.is_correct,
                time_taken_ms=to_milliseconds(response.time_taken),
            )
            for response in result.responses
        ],
    )


def encode_result(result: TestResult) -> Dict[str, Any]:
    """
    Serialize a result to a JSON-compatible dict with camelCase keys.

    Args:
        result: Result to serialize

    Returns:
        Dict ready for json.dumps
    """
    return to_record(result).model_dump(mode="json", by_alias=True)


def from_record(record: ResultRecord, repository: QuestionRepository) -> TestResult:
    """
    Rebuild a result from a validated record.

    Raises:
        UnknownQuestionError: If a response's question id is not in the repository
    """
    responses: List[Response] = []
    for item in record.responses:
        try:
            question = repository.find_by_id(item.question_id)
        except QuestionNotFoundError:
            raise UnknownQuestionError(item.question_id, record.test_id) from None
        responses.append(
            Response(
                question=question,
                selected_index=item.selected_answer_index,
                is_correct=item.is_correct,
                time_taken=timedelta(milliseconds=item.time_taken_ms),
            )
        )

    return TestResult(
        test_id=record.test_id,
        completed_at=record.completed_at,
        estimated_level=CEFRLevel.from_ordinal(record.estimated_level),
        questions_answered=record.questions_answered,
        correct_answers=record.correct_answers,
        total_time=timedelta(milliseconds=record.total_time_ms),
        responses=tuple(responses),
    )


def decode_result(data: Any, repository: QuestionRepository) -> TestResult:
    """
    Deserialize one persisted record.

    Args:
        data: Raw record as read from the store
        repository: Catalog used to resolve question ids

    Returns:
        The reconstructed TestResult

    Raises:
        HistoryDecodeError: If the record does not match the result schema
        UnknownQuestionError: If a response references an unknown question
    """
    try:
        record = ResultRecord.model_validate(data)
    except ValidationError as e:
        raise HistoryDecodeError(f"Malformed result record: {e}") from e
    return from_record(record, repository)
