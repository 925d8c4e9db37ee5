"""Diagnostic and metric types shared by the lexical and tree layers."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Conditions worked around, e.g. key collisions
    ERROR = auto()      # Lexical errors that were recovered from


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class BuildMetrics:
    """Counters collected while a single tree is built."""

    processing_time_ms: float = 0.0
    events_processed: int = 0
    elements_created: int = 0
    array_promotions: int = 0
    text_assignments: int = 0
    cdata_sections: int = 0
    lexical_errors: int = 0

    @property
    def events_per_second(self) -> float:
        """Calculate events consumed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * 1000.0) / self.processing_time_ms
