"""Lexical layer: event types and the scanners that produce them."""

from .events import (
    CDataChunk,
    CDataEnd,
    CDataStart,
    CloseTag,
    End,
    Error,
    EventType,
    LexicalEvent,
    OpenTag,
    Text,
)
from .scanner import ExpatScanner, RecoveringScanner, scan

__all__ = [
    "CDataChunk",
    "CDataEnd",
    "CDataStart",
    "CloseTag",
    "End",
    "Error",
    "EventType",
    "LexicalEvent",
    "OpenTag",
    "Text",
    "ExpatScanner",
    "RecoveringScanner",
    "scan",
]
