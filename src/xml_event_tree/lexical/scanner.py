"""Lexical sources that turn XML text into an ordered event stream.

Two scanners are provided. The expat scanner is used first: it is strict and
reports CDATA section boundaries. When expat rejects the document and the
error policy is RECOVER, the document is scanned again with lxml's
recovering parser, which keeps going past malformed fragments. The strict
scanner's error is kept at the head of the recovered stream so the failure is
always reported.
"""

import re
from typing import Dict, Iterator, List, Optional
from xml.parsers import expat

from lxml import etree

from xml_event_tree.shared import ErrorPolicy, LexicalConfig, get_logger

from .events import (
    CDataChunk,
    CDataEnd,
    CDataStart,
    CloseTag,
    End,
    Error,
    LexicalEvent,
    OpenTag,
    Text,
)

# Encoding used between the caller's decoded text and the scanners
WIRE_ENCODING = "utf-8"

CDATA_SECTION = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)


class _EventCollector:
    """Turns scanner callbacks into lexical events.

    Character data is buffered and flushed at every structural boundary so a
    contiguous text run is reported as one ``Text`` event.
    """

    def __init__(self, config: LexicalConfig) -> None:
        self.config = config
        self.events: List[LexicalEvent] = []
        self._text_parts: List[str] = []
        self._in_cdata = False

    def _fold(self, name: str) -> str:
        return name.lower() if self.config.lowercase else name

    def _flush_text(self) -> None:
        if not self._text_parts:
            return
        content = "".join(self._text_parts)
        self._text_parts = []
        if self.config.trim:
            content = content.strip()
        if content:
            self.events.append(Text(content))

    def open_tag(self, name: str, attributes: Dict[str, str]) -> None:
        self._flush_text()
        # Folded keys can collide; the later attribute wins.
        folded = {self._fold(key): value for key, value in attributes.items()}
        self.events.append(OpenTag(self._fold(name), folded))

    def close_tag(self, name: str) -> None:
        self._flush_text()
        self.events.append(CloseTag(self._fold(name)))

    def characters(self, data: str) -> None:
        if self._in_cdata:
            self.events.append(CDataChunk(data))
        else:
            self._text_parts.append(data)

    def cdata_start(self) -> None:
        self._flush_text()
        self._in_cdata = True
        self.events.append(CDataStart())

    def cdata_end(self) -> None:
        self._in_cdata = False
        self.events.append(CDataEnd())

    def boundary(self, *args: object) -> None:
        """Comments and processing instructions only split text runs."""
        self._flush_text()

    def error(self, message: str, line: Optional[int], column: Optional[int]) -> None:
        self.events.append(Error(message, line, column))

    def finish(self) -> None:
        self._flush_text()
        self.events.append(End())


class ExpatScanner(_EventCollector):
    """Strict scanner built on the standard library expat binding."""

    def __init__(self, config: LexicalConfig) -> None:
        super().__init__(config)
        self.failed = False

    def run(self, xml_text: str) -> List[LexicalEvent]:
        # The text is already decoded; force expat to read it back as UTF-8
        # whatever the XML declaration claims.
        parser = expat.ParserCreate(WIRE_ENCODING)
        parser.buffer_text = True
        parser.StartElementHandler = self.open_tag
        parser.EndElementHandler = self.close_tag
        parser.CharacterDataHandler = self.characters
        parser.StartCdataSectionHandler = self.cdata_start
        parser.EndCdataSectionHandler = self.cdata_end
        parser.CommentHandler = self.boundary
        parser.ProcessingInstructionHandler = self.boundary

        try:
            parser.Parse(xml_text.encode(WIRE_ENCODING), True)
        except expat.ExpatError as e:
            self.failed = True
            self._text_parts = []
            self.error(expat.ErrorString(e.code), e.lineno, e.offset)
        else:
            self.finish()
        return self.events


def _local_name(name: str) -> str:
    # lxml always resolves namespaces; keep only the local part
    if name.startswith("{"):
        return name.split("}", 1)[1]
    return name


class RecoveringScanner(_EventCollector):
    """Best-effort scanner built on lxml's recovering parser.

    The instance is the parser target: lxml calls ``start``, ``end``,
    ``data``, ``comment``, ``pi`` and ``close`` on it.

    lxml hands CDATA sections to ``data`` like any other text. Section
    contents are collected from the raw text up front, and a ``data`` call
    carrying exactly the next such content is reported as a CDATA section.
    """

    def __init__(self, config: LexicalConfig) -> None:
        super().__init__(config)
        self._pending_cdata: List[str] = []

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        attributes = {_local_name(key): value for key, value in attrib.items()}
        self.open_tag(_local_name(tag), attributes)

    def end(self, tag: str) -> None:
        self.close_tag(_local_name(tag))

    def data(self, data: str) -> None:
        if data in self._pending_cdata:
            # Sections lxml skipped while recovering are dropped with it
            del self._pending_cdata[:self._pending_cdata.index(data) + 1]
            self.cdata_start()
            self.characters(data)
            self.cdata_end()
        else:
            self.characters(data)

    def comment(self, text: str) -> None:
        self.boundary()

    def pi(self, target: str, data: Optional[str] = None) -> None:
        self.boundary()

    def close(self) -> None:
        self._flush_text()

    def run(
        self,
        xml_text: str,
        first_error: Optional[Error] = None
    ) -> List[LexicalEvent]:
        """Scan ``xml_text``, reporting ``first_error`` ahead of the events.

        ``first_error`` is the failure that made the strict scan give up.
        lxml's own error log is often empty in recover mode, so its entries
        are only reported in addition to it.
        """
        if first_error is not None:
            self.events.append(first_error)
        # Empty sections produce no data call
        self._pending_cdata = [
            content for content in CDATA_SECTION.findall(xml_text) if content
        ]

        parser = etree.XMLParser(
            target=self,
            recover=True,
            encoding=WIRE_ENCODING,
            resolve_entities=False,
            no_network=True,
        )
        fatal = None
        try:
            parser.feed(xml_text.encode(WIRE_ENCODING))
            parser.close()
        except etree.XMLSyntaxError as e:
            # Nothing recoverable, e.g. an empty document
            fatal = e
        self._flush_text()
        self._in_cdata = False
        for entry in parser.error_log:
            self.error(entry.message, entry.line, entry.column)
        if fatal is not None and not parser.error_log:
            self.error(fatal.msg or str(fatal), fatal.lineno, fatal.offset)
        if not any(isinstance(event, (OpenTag, Error)) for event in self.events):
            self.error("no element found", None, None)
        self.events.append(End())
        return self.events


def scan(
    xml_text: str,
    config: Optional[LexicalConfig] = None,
    correlation_id: Optional[str] = None
) -> Iterator[LexicalEvent]:
    """Scan XML text into an ordered stream of lexical events.

    Args:
        xml_text: Complete XML document as decoded text
        config: Lexical options (case folding, trimming, error policy)
        correlation_id: Optional correlation ID for request tracking

    Yields:
        Lexical events in document order. Under the RAISE policy a malformed
        document ends with an ``Error`` event and no ``End``. Under RECOVER
        the strict scanner's ``Error`` comes first, followed by the
        recovered events and ``End``.
    """
    config = config or LexicalConfig()
    logger = get_logger(__name__, correlation_id, "lexical_scanner")

    scanner = ExpatScanner(config)
    events = scanner.run(xml_text)

    if scanner.failed and config.error_policy is ErrorPolicy.RECOVER:
        first_error = events[-1]
        logger.warning(
            "Strict scan failed, rescanning with recovering parser",
            extra={"error": getattr(first_error, "message", None)}
        )
        events = RecoveringScanner(config).run(xml_text, first_error)

    logger.debug("Scan completed", extra={"event_count": len(events)})
    yield from events
