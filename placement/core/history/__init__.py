"""
Result history: persisted records, storage backends and rollup statistics.
"""

from .aggregator import (
    HistoryStatistics,
    ResultAggregator,
    default_aggregator,
)
from .serialization import (
    HistoryDecodeError,
    UnknownQuestionError,
    decode_result,
    encode_result,
)
from .store import (
    DEFAULT_HISTORY_KEY,
    HistoryCorruptedError,
    HistoryStore,
    InMemoryHistoryStore,
    JsonFileHistoryStore,
)

__all__ = [
    "HistoryStatistics",
    "ResultAggregator",
    "default_aggregator",
    "HistoryDecodeError",
    "UnknownQuestionError",
    "decode_result",
    "encode_result",
    "DEFAULT_HISTORY_KEY",
    "HistoryCorruptedError",
    "HistoryStore",
    "InMemoryHistoryStore",
    "JsonFileHistoryStore",
]
