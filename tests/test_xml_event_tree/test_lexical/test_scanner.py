"""Tests for the lexical scanners."""

import pytest

from xml_event_tree.lexical import (
    CDataChunk,
    CDataEnd,
    CDataStart,
    CloseTag,
    End,
    Error,
    EventType,
    ExpatScanner,
    OpenTag,
    RecoveringScanner,
    Text,
    scan,
)
from xml_event_tree.shared import ErrorPolicy, LexicalConfig

STRICT = LexicalConfig(error_policy=ErrorPolicy.RAISE)


def _types(events):
    return [event.type for event in events]


def _cdata_text(events):
    return "".join(e.content for e in events if e.type == EventType.CDATA_CHUNK)


class TestExpatScanning:
    """Test event production for well-formed XML."""

    def test_event_sequence_for_simple_document(self) -> None:
        events = list(scan('<a x="1"><b>hi</b><b>bye</b></a>'))

        assert events == [
            OpenTag("a", {"x": "1"}),
            OpenTag("b"), Text("hi"), CloseTag("b"),
            OpenTag("b"), Text("bye"), CloseTag("b"),
            CloseTag("a"),
            End(),
        ]

    def test_tag_and_attribute_names_are_lowercased(self) -> None:
        events = list(scan('<Root ID="7"><ITEM Kind="x"/></Root>'))

        assert events[0] == OpenTag("root", {"id": "7"})
        assert events[1] == OpenTag("item", {"kind": "x"})
        assert events[2] == CloseTag("item")

    def test_case_is_kept_when_lowercase_disabled(self) -> None:
        events = list(scan('<Root ID="7"/>', LexicalConfig(lowercase=False)))

        assert events[0] == OpenTag("Root", {"ID": "7"})

    def test_folded_attribute_collision_keeps_last_value(self) -> None:
        events = list(scan('<a Key="first" key="second"/>'))

        assert events[0].attributes == {"key": "second"}

    def test_whitespace_between_elements_is_dropped(self) -> None:
        events = list(scan("<a>\n    <b/>\n    <c/>\n</a>\n"))

        assert EventType.TEXT not in _types(events)

    def test_text_is_trimmed(self) -> None:
        events = list(scan("<a>   padded text \n</a>"))

        assert Text("padded text") in events

    def test_text_is_kept_verbatim_when_trim_disabled(self) -> None:
        events = list(scan("<a>  x  </a>", LexicalConfig(trim=False)))

        assert Text("  x  ") in events

    def test_entities_are_resolved_into_one_text_run(self) -> None:
        events = list(scan("<a>1 &lt; 2 &amp;&amp; 3 &gt; 2</a>"))

        assert [e for e in events if e.type == EventType.TEXT] == [
            Text("1 < 2 && 3 > 2")
        ]

    def test_comment_splits_text_runs(self) -> None:
        events = list(scan("<a>before<!-- note -->after</a>"))

        assert [e for e in events if e.type == EventType.TEXT] == [
            Text("before"), Text("after")
        ]

    def test_cdata_section_boundaries(self) -> None:
        events = list(scan("<a><![CDATA[ x < y ]]></a>"))

        assert _types(events) == [
            EventType.OPEN_TAG,
            EventType.CDATA_START,
            *[EventType.CDATA_CHUNK] * (len(events) - 5),
            EventType.CDATA_END,
            EventType.CLOSE_TAG,
            EventType.END,
        ]
        assert _cdata_text(events) == " x < y "

    def test_text_before_cdata_is_flushed_first(self) -> None:
        events = list(scan("<a>drop<![CDATA[keep]]></a>"))

        text_index = events.index(Text("drop"))
        assert events[text_index + 1] == CDataStart()
        assert CDataEnd() in events

    def test_declared_encoding_does_not_affect_decoded_text(self) -> None:
        xml = '<?xml version="1.0" encoding="ISO-8859-1"?><a>café</a>'

        events = list(scan(xml))

        assert Text("café") in events

    def test_processing_instruction_and_doctype_are_skipped(self) -> None:
        xml = '<?xml version="1.0"?><!DOCTYPE a><?app run?><a/>'

        events = list(scan(xml))

        assert events == [OpenTag("a"), CloseTag("a"), End()]


class TestMalformedInput:
    """Test scanner behaviour on malformed XML."""

    def test_strict_policy_stops_with_error_event(self) -> None:
        events = list(scan("<a><b></a>", STRICT))

        assert isinstance(events[-1], Error)
        assert EventType.END not in _types(events)
        assert events[-1].line == 1

    def test_recover_policy_rescans_and_ends_normally(self) -> None:
        events = list(scan("<a><b>text</a>"))

        assert isinstance(events[-1], End)
        assert any(isinstance(event, Error) for event in events)
        assert [e.name for e in events if isinstance(e, OpenTag)] == ["a", "b"]
        assert Text("text") in events

    def test_empty_document_is_an_error(self) -> None:
        strict_events = list(scan("", STRICT))
        lenient_events = list(scan(""))

        assert _types(strict_events) == [EventType.ERROR]
        assert isinstance(lenient_events[-1], End)
        assert EventType.ERROR in _types(lenient_events)
        assert EventType.OPEN_TAG not in _types(lenient_events)

    def test_expat_scanner_flags_failure(self) -> None:
        scanner = ExpatScanner(LexicalConfig())

        scanner.run("<a>")

        assert scanner.failed is True

    def test_recovering_scanner_applies_folding(self) -> None:
        events = RecoveringScanner(LexicalConfig()).run("<Root><Item>x</Root>")

        assert events[0] == OpenTag("root")
        assert events[1] == OpenTag("item")

    @pytest.mark.parametrize("xml", [
        "<a>",
        "<a><b></a>",
        "<a>Tom & Jerry</a>",
        "<a><b>x</b><b>y<c/></a>",
        "<rss><item><br></item></rss>",
    ])
    def test_recovered_stream_starts_with_strict_error(self, xml) -> None:
        events = list(scan(xml))

        assert isinstance(events[0], Error)
        assert events[0].line == 1
        assert isinstance(events[-1], End)

    def test_recovering_scanner_reports_given_error_first(self) -> None:
        error = Error("mismatched tag", 1, 9)

        events = RecoveringScanner(LexicalConfig()).run("<a><b></a>", error)

        assert events[0] is error

    def test_recovery_keeps_cdata_boundary(self) -> None:
        events = list(scan("<a>drop<![CDATA[keep]]><b></a>"))

        start = events.index(CDataStart())
        assert events[start - 1] == Text("drop")
        assert _cdata_text(events) == "keep"
        assert CDataEnd() in events


class TestEvents:
    """Test event value objects."""

    def test_open_tag_requires_name(self) -> None:
        with pytest.raises(ValueError, match="Tag name cannot be empty"):
            OpenTag("")

    def test_event_types(self) -> None:
        assert OpenTag("a").type is EventType.OPEN_TAG
        assert CDataChunk("x").type is EventType.CDATA_CHUNK
        assert End().type is EventType.END

    def test_error_position(self) -> None:
        assert Error("bad", 2, 5).position == {"line": 2, "column": 5}
        assert Error("bad").position is None
