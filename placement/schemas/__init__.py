"""
Pydantic schemas for persisted data.
"""
from .results import (
    ResponseRecord,
    ResultRecord,
)

__all__ = [
    "ResponseRecord",
    "ResultRecord",
]
