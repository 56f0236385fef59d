"""
Pydantic schemas for persisted test results.

Records use camelCase keys on the wire so history written by earlier clients
stays readable.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from placement.core.datetime_utils import ensure_timezone_aware


class ResponseRecord(BaseModel):
    """Schema for one persisted answer."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    question_id: str = Field(..., alias="questionId", description="Answered question ID")
    selected_answer_index: Optional[int] = Field(
        None,
        alias="selectedAnswerIndex",
        description="Option index chosen (null if unanswered)",
    )
    is_correct: bool = Field(..., alias="isCorrect", description="Whether the answer was correct")
    time_taken_ms: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("timeTakenMs", "timeTaken", "time_taken_ms"),
        serialization_alias="timeTakenMs",
        description="Time spent on the question in milliseconds",
    )


class ResultRecord(BaseModel):
    """Schema for one persisted test result."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    test_id: str = Field(..., alias="testId", min_length=1, description="Test identifier")
    completed_at: datetime = Field(
        ..., alias="completedAt", description="Completion timestamp (ISO-8601)"
    )
    estimated_level: int = Field(
        ...,
        alias="estimatedLevel",
        ge=0,
        le=5,
        description="Estimated CEFR level as a zero-based ordinal (A1=0 ... C2=5)",
    )
    questions_answered: int = Field(
        ..., alias="questionsAnswered", ge=0, description="Number of answers recorded"
    )
    correct_answers: int = Field(
        ..., alias="correctAnswers", ge=0, description="Number of correct answers"
    )
    total_time_ms: int = Field(
        ..., alias="totalTime", ge=0, description="Total test duration in milliseconds"
    )
    responses: List[ResponseRecord] = Field(
        default_factory=list, description="Answers in the order given"
    )

    @field_validator("completed_at")
    @classmethod
    def validate_completed_at(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        return ensure_timezone_aware(v)
