"""Lexical event types consumed by the tree builder.

A lexical source turns raw XML text into an ordered stream of these events.
The tree builder never sees XML text, so it can be driven by any source,
including a hand-written list of events.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Dict, Optional


class EventType(Enum):
    """Kinds of lexical events emitted by a lexical source."""

    OPEN_TAG = auto()       # Element start with its attributes
    TEXT = auto()           # Trimmed character run between markup
    CDATA_START = auto()    # <![CDATA[
    CDATA_CHUNK = auto()    # Verbatim content inside a CDATA section
    CDATA_END = auto()      # ]]>
    CLOSE_TAG = auto()      # Element end
    END = auto()            # End of document
    ERROR = auto()          # Malformed XML reported by the source


@dataclass(frozen=True)
class LexicalEvent:
    """Base class for all lexical events."""

    type: ClassVar[EventType]


@dataclass(frozen=True)
class OpenTag(LexicalEvent):
    type: ClassVar[EventType] = EventType.OPEN_TAG

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tag name cannot be empty")


@dataclass(frozen=True)
class Text(LexicalEvent):
    type: ClassVar[EventType] = EventType.TEXT

    content: str


@dataclass(frozen=True)
class CDataStart(LexicalEvent):
    type: ClassVar[EventType] = EventType.CDATA_START


@dataclass(frozen=True)
class CDataChunk(LexicalEvent):
    type: ClassVar[EventType] = EventType.CDATA_CHUNK

    content: str


@dataclass(frozen=True)
class CDataEnd(LexicalEvent):
    type: ClassVar[EventType] = EventType.CDATA_END


@dataclass(frozen=True)
class CloseTag(LexicalEvent):
    """Element end. ``name`` is informational; the builder pops regardless."""

    type: ClassVar[EventType] = EventType.CLOSE_TAG

    name: Optional[str] = None


@dataclass(frozen=True)
class End(LexicalEvent):
    type: ClassVar[EventType] = EventType.END


@dataclass(frozen=True)
class Error(LexicalEvent):
    """Malformed XML reported by the lexical source."""

    type: ClassVar[EventType] = EventType.ERROR

    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def position(self) -> Optional[Dict[str, int]]:
        if self.line is None:
            return None
        return {"line": self.line, "column": self.column or 0}
