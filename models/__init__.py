"""
Models package for completion results and the shared error taxonomy.
"""

from .completion import CompletionResult, TokenUsage
from .errors import (
    ConfigurationError,
    EmptySelectionError,
    NoReportError,
    ResearchError,
    TransportError,
)

__all__ = [
    "CompletionResult",
    "ConfigurationError",
    "EmptySelectionError",
    "NoReportError",
    "ResearchError",
    "TokenUsage",
    "TransportError",
]
