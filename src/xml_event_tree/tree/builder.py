"""Event-driven tree builder.

This module implements the state machine that consumes lexical events in
order and grows a tree of ``ElementNode`` objects. The write cursor is an
explicit stack owned by one build; nothing is shared between builds, so
independent documents can be built concurrently with separate builders.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from xml_event_tree.lexical import (
    CDataChunk,
    Error,
    EventType,
    LexicalEvent,
    OpenTag,
    Text,
)
from xml_event_tree.shared import (
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
    ErrorPolicy,
    LexicalConfig,
    LexicalError,
    get_logger,
)

from .node import RESERVED_KEYS, DocumentRoot, ElementNode


@dataclass
class BuildResult:
    """Finished tree plus the diagnostics and counters of its build.

    ``success`` is False when the lexical source reported malformed XML; the
    tree is still delivered and may be partial.
    """

    document: DocumentRoot = field(default_factory=DocumentRoot)
    success: bool = True
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    metrics: BuildMetrics = field(default_factory=BuildMetrics)
    correlation_id: Optional[str] = None

    @property
    def root(self) -> Dict[str, Any]:
        """The Document Root in its JSON shape."""
        return self.document.to_dict()

    @property
    def element_count(self) -> int:
        return self.metrics.elements_created

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity == DiagnosticSeverity.ERROR for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the build."""
        return {
            "success": self.success,
            "element_count": self.metrics.elements_created,
            "events_processed": self.metrics.events_processed,
            "array_promotions": self.metrics.array_promotions,
            "lexical_errors": self.metrics.lexical_errors,
            "processing_time_ms": self.metrics.processing_time_ms,
            "diagnostic_count": len(self.diagnostics),
        }


@dataclass
class _Frame:
    node: ElementNode
    # Plain text must not replace text that came from a CDATA section
    text_from_cdata: bool = False


class WriteCursor:
    """Stack of open elements; the top receives new text and children."""

    def __init__(self) -> None:
        self._frames: List[_Frame] = []

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def top(self) -> Optional[_Frame]:
        return self._frames[-1] if self._frames else None

    def push(self, node: ElementNode) -> None:
        self._frames.append(_Frame(node))

    def pop(self) -> Optional[_Frame]:
        return self._frames.pop() if self._frames else None

    def clear(self) -> None:
        self._frames.clear()


class TreeBuilder:
    """Builds one tree from an ordered stream of lexical events.

    Events can be pushed one at a time with :meth:`feed` or all at once with
    :meth:`build`. A builder is reusable but not shareable: call :meth:`reset`
    (``build`` does it for you) before starting another document.

    Examples:
        >>> from xml_event_tree.lexical import OpenTag, Text, CloseTag, End
        >>> builder = TreeBuilder()
        >>> result = builder.build([OpenTag("a"), Text("hi"), CloseTag(), End()])
        >>> result.root
        {'a': {'name': 'a', 'attr': {}, 'innerText': 'hi'}}
    """

    def __init__(
        self,
        config: Optional[LexicalConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or LexicalConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

        self._cursor = WriteCursor()
        self._cdata: List[str] = []
        self._result = BuildResult(correlation_id=correlation_id)
        self._finished = False
        self._start_time = time.time()

    @property
    def finished(self) -> bool:
        """True once the End event has been consumed."""
        return self._finished

    @property
    def depth(self) -> int:
        return len(self._cursor)

    @property
    def result(self) -> BuildResult:
        return self._result

    def reset(self) -> None:
        """Discard all state and start a new, empty document."""
        self._cursor.clear()
        self._cdata = []
        self._result = BuildResult(correlation_id=self.correlation_id)
        self._finished = False
        self._start_time = time.time()

    def build(self, events: Iterable[LexicalEvent]) -> BuildResult:
        """Consume ``events`` until End and return the finished tree.

        Raises:
            LexicalError: on an Error event under the RAISE policy
        """
        self.reset()
        self.logger.info(
            "Starting tree building",
            extra={"error_policy": self.config.error_policy.name}
        )

        for event in events:
            self.feed(event)
            if self._finished:
                break
        else:
            self._result.add_diagnostic(
                DiagnosticSeverity.INFO,
                "Event stream ended without End event",
                "tree_builder",
            )
            self._finish()

        self.logger.info(
            "Tree building completed",
            extra=self._result.summary()
        )
        return self._result

    def feed(self, event: LexicalEvent) -> None:
        """Apply a single event to the tree under construction."""
        if self._finished:
            self.logger.debug(
                "Ignoring event after End", extra={"event_type": event.type.name}
            )
            return

        self._result.metrics.events_processed += 1

        if event.type == EventType.OPEN_TAG:
            self._handle_open_tag(event)  # type: ignore[arg-type]
        elif event.type == EventType.TEXT:
            self._handle_text(event)  # type: ignore[arg-type]
        elif event.type == EventType.CDATA_START:
            self._cdata = []
        elif event.type == EventType.CDATA_CHUNK:
            self._handle_cdata_chunk(event)  # type: ignore[arg-type]
        elif event.type == EventType.CDATA_END:
            self._handle_cdata_end()
        elif event.type == EventType.CLOSE_TAG:
            self._handle_close_tag()
        elif event.type == EventType.ERROR:
            self._handle_error(event)  # type: ignore[arg-type]
        elif event.type == EventType.END:
            self._finish()
        else:
            raise ValueError(f"Unknown lexical event type: {event.type}")

    def _handle_open_tag(self, event: OpenTag) -> None:
        node = ElementNode(name=event.name, attr=dict(event.attributes))
        frame = self._cursor.top
        parent = frame.node if frame is not None else self._result.document

        if event.name in RESERVED_KEYS and frame is not None:
            self.logger.warning(
                "Child tag collides with a reserved key",
                extra={"tag": event.name, "parent": frame.node.name}
            )
            self._result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Child <{event.name}> is hidden by the '{event.name}' key "
                f"of <{frame.node.name}> in the JSON output",
                "tree_builder",
                details={"tag": event.name, "parent": frame.node.name},
            )

        if parent.attach_child(node):
            self._result.metrics.array_promotions += 1
        self._result.metrics.elements_created += 1
        self._cursor.push(node)

    def _handle_text(self, event: Text) -> None:
        frame = self._cursor.top
        if frame is None:
            self.logger.debug("Ignoring text outside any element")
            return
        if frame.text_from_cdata:
            return
        frame.node.inner_text = event.content
        self._result.metrics.text_assignments += 1

    def _handle_cdata_chunk(self, event: CDataChunk) -> None:
        self._cdata.append(event.content)

    def _handle_cdata_end(self) -> None:
        content = "".join(self._cdata)
        self._cdata = []
        self._result.metrics.cdata_sections += 1

        frame = self._cursor.top
        if frame is None:
            self.logger.debug("Ignoring CDATA section outside any element")
            return
        frame.node.inner_text = content
        frame.text_from_cdata = True

    def _handle_close_tag(self) -> None:
        if self._cursor.pop() is None:
            self.logger.debug("Ignoring close tag with no open element")

    def _handle_error(self, event: Error) -> None:
        self._result.metrics.lexical_errors += 1

        if self.config.error_policy is ErrorPolicy.RAISE:
            self.logger.warning(
                "Malformed XML, aborting build",
                extra={"error": event.message, "line": event.line}
            )
            raise LexicalError(
                f"Malformed XML: {event.message}", event.line, event.column
            )

        self.logger.warning(
            "Malformed XML, continuing with remaining input",
            extra={"error": event.message, "line": event.line}
        )
        self._result.success = False
        self._result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            f"Malformed XML: {event.message}",
            "lexical_source",
            position=event.position,
        )

    def _finish(self) -> None:
        if self.depth:
            self.logger.debug(
                "Document ended with open elements",
                extra={"open_elements": self.depth}
            )
        self._cursor.clear()
        self._cdata = []
        self._finished = True
        self._result.metrics.processing_time_ms = (
            (time.time() - self._start_time) * 1000
        )


def build_tree(
    events: Iterable[LexicalEvent],
    config: Optional[LexicalConfig] = None,
    correlation_id: Optional[str] = None
) -> BuildResult:
    """Build a tree from ``events`` with a fresh builder."""
    return TreeBuilder(config, correlation_id).build(events)
