"""Tests for the node accessor helpers."""

import pytest

from xml_event_tree.tree import (
    ElementNode,
    attribute,
    child,
    children,
    get_element_attr,
    get_element_text,
    text,
)


@pytest.fixture
def feed():
    return {
        "feed": {
            "name": "feed",
            "attr": {"version": "2", "lang": ""},
            "title": {"name": "title", "attr": {"text": "From attribute"}},
            "entry": [
                {"name": "entry", "attr": {}, "innerText": "first"},
                {"name": "entry", "attr": {}, "innerText": "second"},
            ],
            "summary": {"name": "summary", "attr": {}, "innerText": ""},
        }
    }


class TestAttribute:
    """Test attribute lookups."""

    def test_present_attribute(self, feed) -> None:
        assert attribute(feed["feed"], "version") == "2"

    def test_missing_attribute_is_none(self, feed) -> None:
        assert attribute(feed["feed"], "missing") is None

    def test_empty_attribute_is_distinct_from_missing(self, feed) -> None:
        assert attribute(feed["feed"], "lang") == ""
        assert attribute(feed["feed"], "lang") is not None

    @pytest.mark.parametrize("node", [None, "feed", 42, [], {"name": "x"}])
    def test_non_node_input_is_none(self, node) -> None:
        assert attribute(node, "version") is None

    def test_repeated_calls_do_not_change_node(self, feed) -> None:
        node = feed["feed"]
        before = dict(node["attr"])

        assert attribute(node, "version") == attribute(node, "version")
        assert attribute(node, "nope") is attribute(node, "nope")
        assert node["attr"] == before

    def test_element_node_input(self) -> None:
        node = ElementNode(name="a", attr={"id": "7"})

        assert attribute(node, "id") == "7"
        assert attribute(node, "other") is None


class TestText:
    """Test effective text lookups."""

    def test_inner_text(self, feed) -> None:
        assert text(feed["feed"]["entry"][0]) == "first"

    def test_falls_back_to_text_attribute(self, feed) -> None:
        assert text(feed["feed"]["title"]) == "From attribute"

    def test_custom_fallback_key(self) -> None:
        node = {"name": "v", "attr": {"value": "42"}}

        assert text(node, "value") == "42"
        assert text(node) is None

    def test_empty_inner_text_is_returned(self, feed) -> None:
        assert text(feed["feed"]["summary"]) == ""

    def test_inner_text_wins_over_attribute(self) -> None:
        node = {"name": "t", "attr": {"text": "attr"}, "innerText": "inner"}

        assert text(node) == "inner"

    def test_absent_text_is_none(self, feed) -> None:
        assert text(feed["feed"]) is None

    def test_non_node_input_is_none(self) -> None:
        assert text(None) is None
        assert text("plain string") is None

    def test_element_node_input(self) -> None:
        assert text(ElementNode(name="a", inner_text="x")) == "x"
        assert text(ElementNode(name="a", attr={"text": "y"})) == "y"
        assert text(ElementNode(name="a")) is None

    def test_get_element_aliases(self) -> None:
        assert get_element_attr is attribute
        assert get_element_text is text


class TestChildren:
    """Test child navigation helpers."""

    def test_children_normalizes_single_and_many(self, feed) -> None:
        assert len(children(feed["feed"], "entry")) == 2
        assert children(feed["feed"], "title") == [feed["feed"]["title"]]
        assert children(feed["feed"], "missing") == []

    def test_children_skips_fixed_keys(self, feed) -> None:
        assert children(feed["feed"], "attr") == []
        assert children(feed["feed"]["entry"][0], "innerText") == []

    def test_child_by_index(self, feed) -> None:
        assert text(child(feed["feed"], "entry", 1)) == "second"
        assert text(child(feed["feed"], "entry", -1)) == "second"
        assert child(feed["feed"], "entry", 2) is None

    def test_chained_lookup_through_missing_child(self, feed) -> None:
        assert text(child(child(feed["feed"], "missing"), "deeper")) is None

    def test_children_on_element_node(self) -> None:
        parent = ElementNode(name="p")
        kid = ElementNode(name="k")
        parent.attach_child(kid)

        assert children(parent, "k") == [kid]
        assert children(None, "k") == []
