"""
Core module for configuration, logging, the question bank, the adaptive
engine and result history.

Note: adaptive and history subpackages are not imported at package level.
Import them directly: from placement.core.adaptive import ... or
from placement.core.history import ...
"""
from .config import settings

__all__ = ["settings"]
