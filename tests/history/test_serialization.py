"""
Tests for converting results to and from persisted history records.
"""
import json
from datetime import timedelta, timezone

import pytest

from libs.domain_types import CEFRLevel
from placement.core.adaptive.engine import AdaptiveTestSession
from placement.core.history.serialization import (
    HistoryDecodeError,
    UnknownQuestionError,
    decode_result,
    encode_result,
)


@pytest.fixture
def finished_result(repository, clock):
    """A completed attempt over B1 questions with mixed answers and timings."""
    questions = [repository.find_by_id(qid) for qid in ("B1_001", "B1_002", "A2_001", "B2_001")]
    session = AdaptiveTestSession(questions, clock=clock)
    for selected, seconds in ((2, 3.2), (0, 5.75), (None, 12.0), (1, 0.9)):
        clock.advance(seconds=seconds, microseconds=321)
        session.submit_answer(selected)
    clock.advance(milliseconds=40)
    return session.finalize_result()


class TestEncodeResult:
    """Tests for encode_result()."""

    def test_wire_keys(self, finished_result):
        data = encode_result(finished_result)

        assert set(data) == {
            "testId",
            "completedAt",
            "estimatedLevel",
            "questionsAnswered",
            "correctAnswers",
            "totalTime",
            "responses",
        }
        assert set(data["responses"][0]) == {
            "questionId",
            "selectedAnswerIndex",
            "isCorrect",
            "timeTakenMs",
        }

    def test_values(self, finished_result):
        data = encode_result(finished_result)

        assert data["testId"] == finished_result.test_id
        assert data["estimatedLevel"] == finished_result.estimated_level.ordinal
        assert data["questionsAnswered"] == 4
        assert data["correctAnswers"] == 2
        assert data["totalTime"] == 21_891
        assert [r["questionId"] for r in data["responses"]] == [
            "B1_001",
            "B1_002",
            "A2_001",
            "B2_001",
        ]
        assert data["responses"][2]["selectedAnswerIndex"] is None
        assert data["responses"][0]["timeTakenMs"] == 3200

    def test_json_serializable(self, finished_result):
        text = json.dumps(encode_result(finished_result))

        assert isinstance(json.loads(text)["completedAt"], str)


class TestDecodeResult:
    """Tests for decode_result()."""

    def test_round_trip(self, finished_result, repository):
        """Test that encode then decode through JSON reproduces an equal result."""
        data = json.loads(json.dumps(encode_result(finished_result)))

        decoded = decode_result(data, repository)

        assert decoded == finished_result

    def test_legacy_time_taken_key(self, repository):
        """Test that records written with "timeTaken" still load."""
        data = {
            "testId": "test_1700000000000",
            "completedAt": "2023-11-14T22:13:20.000",
            "estimatedLevel": 3,
            "questionsAnswered": 1,
            "correctAnswers": 1,
            "totalTime": 4500,
            "responses": [
                {
                    "questionId": "A1_001",
                    "selectedAnswerIndex": 0,
                    "isCorrect": True,
                    "timeTaken": 4500,
                }
            ],
        }

        result = decode_result(data, repository)

        assert result.estimated_level == CEFRLevel.B2
        assert result.total_time == timedelta(milliseconds=4500)
        assert result.responses[0].time_taken == timedelta(milliseconds=4500)
        assert result.responses[0].question.id == "A1_001"
        assert result.completed_at.tzinfo == timezone.utc

    def test_unknown_question(self, finished_result, repository):
        data = encode_result(finished_result)
        data["responses"][1]["questionId"] = "ZZ_999"

        with pytest.raises(UnknownQuestionError) as exc_info:
            decode_result(data, repository)

        assert exc_info.value.question_id == "ZZ_999"
        assert exc_info.value.test_id == finished_result.test_id
        assert isinstance(exc_info.value, HistoryDecodeError)

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda d: d.pop("testId"),
            lambda d: d.update(estimatedLevel=6),
            lambda d: d.update(completedAt="not a date"),
            lambda d: d.update(totalTime=-1),
        ],
    )
    def test_malformed_record(self, finished_result, repository, mutate):
        data = encode_result(finished_result)
        mutate(data)

        with pytest.raises(HistoryDecodeError, match="Malformed result record"):
            decode_result(data, repository)

    def test_non_mapping_record(self, repository):
        with pytest.raises(HistoryDecodeError):
            decode_result(["not", "a", "record"], repository)
