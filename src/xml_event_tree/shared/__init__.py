"""Shared utilities for event-driven XML tree building.

This module provides configuration objects, diagnostic types, exceptions and
logging helpers used across the lexical, tree and API layers.
"""

from .config import (
    ApiConfig,
    ConfigError,
    ConfigValidationError,
    ErrorPolicy,
    FetchConfig,
    FileConfig,
    LexicalConfig,
    ParserConfig,
)
from .errors import (
    FileReadError,
    LexicalError,
    TransportError,
    XMLTreeError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "ApiConfig",
    "ConfigError",
    "ConfigValidationError",
    "ErrorPolicy",
    "FetchConfig",
    "FileConfig",
    "LexicalConfig",
    "ParserConfig",
    "FileReadError",
    "LexicalError",
    "TransportError",
    "XMLTreeError",
    "CorrelationLogger",
    "get_logger",
    "BuildMetrics",
    "DiagnosticEntry",
    "DiagnosticSeverity",
]
