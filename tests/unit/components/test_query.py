"""
Unit tests for the node finder, token collector and query aggregation.
"""

import pytest
from conftest import FIXTURES

from yn.dom import NodeKind
from yn.parser import parse
from yn.paths import node_query_path
from yn.query import QueryResult, collect_tokens, find_node, query


def values(tokens):
    return sorted(t.value for t in tokens.values())


class TestFindNode:
    def test_scalar_in_sequence(self, scenario):
        node = find_node(scenario.documents, "a.c.0")
        assert node.kind is NodeKind.SCALAR
        assert node.value == "x"

    def test_second_item(self, scenario):
        assert find_node(scenario.documents, "a.c.1").value == "y"

    def test_out_of_range_index(self, scenario):
        assert find_node(scenario.documents, "a.c.2") is None

    def test_outermost_match_wins(self, scenario):
        node = find_node(scenario.documents, "a")
        assert node.kind is NodeKind.MAPPING_ENTRY
        assert node.key.value == "a"

    def test_empty_query(self, scenario):
        assert find_node(scenario.documents, "") is None

    @pytest.mark.parametrize("bad", ["a..c", "a.c[0]", ".a", "a."])
    def test_malformed_query(self, scenario, bad):
        assert find_node(scenario.documents, bad) is None

    def test_sequence_item_mapping(self):
        parsed = parse("l:\n  - k: 1\n    j: 2\n")
        node = find_node(parsed.documents, "l.0")
        assert node.kind is NodeKind.MAPPING
        assert [e.key.value for e in node.entries] == ["k", "j"]

    def test_root_sequence(self):
        parsed = parse("- a\n- b\n")
        assert find_node(parsed.documents, "1").value == "b"

    def test_round_trip(self):
        parsed = parse((FIXTURES / "deployment.yaml").read_text())
        seen = set()
        for node in parsed.documents.depth_first():
            path = node_query_path(node)
            if not path or path in seen:
                continue
            seen.add(path)
            assert find_node(parsed.documents, path) is node, path


class TestCollectTokens:
    def test_includes_own_token(self, scenario):
        node = find_node(scenario.documents, "a.c.0")
        tokens = collect_tokens(node)
        assert node.token.index in tokens
        assert values(tokens) == ["x"]

    def test_mapping_size(self, scenario):
        entry = find_node(scenario.documents, "a")
        mapping = entry.value_node
        expected = 1 + sum(
            len(collect_tokens(e.key)) + len(collect_tokens(e.value_node))
            for e in mapping.entries
        )
        assert len(collect_tokens(mapping)) == expected

    def test_entry_covers_key_and_value(self, scenario):
        entry = find_node(scenario.documents, "a")
        tokens = collect_tokens(entry)
        assert {"a", "b", "1", "c", "x", "y"} <= {t.value for t in tokens.values()}

    def test_alias_does_not_pull_in_target(self):
        parsed = parse("base: &b\n  k: v\nother: *b\n")
        tokens = collect_tokens(find_node(parsed.documents, "other"))
        assert values(tokens) == ["*b", "other"]

    def test_includes_anchor_and_tag(self):
        parsed = parse("a: &x !!str 1\n")
        tokens = collect_tokens(find_node(parsed.documents, "a"))
        assert [t.value for t in tokens.values()] == ["a", "&x", "!!str", "1"]

    def test_ordered_by_visit(self, scenario):
        tokens = collect_tokens(find_node(scenario.documents, "a.c"))
        assert [t.value for t in tokens.values() if t.value] == ["c", "x", "y"]


class TestQuery:
    def test_single_match(self, scenario):
        result = query(scenario.documents, "a.c.0")
        assert len(result.nodes) == 1
        assert values(result.tokens) == ["x"]

    def test_no_match(self, scenario):
        result = query(scenario.documents, "a.c.2")
        assert not result
        assert result.nodes == []
        assert result.tokens == {}

    def test_malformed_is_no_match(self, scenario):
        result = query(scenario.documents, "a.[0]")
        assert result.nodes == []

    def test_multi_document(self, multi):
        result = query(multi.documents, "a")
        assert len(result.nodes) == 2
        first, second = result.nodes
        assert first.value_node.value == "1"
        assert second.value_node.value == "2"

    def test_owners(self, multi):
        result = query(multi.documents, "a")
        first, second = result.nodes
        owners = {result.owner(t).value_node.value for t in result.tokens.values()}
        assert owners == {"1", "2"}
        assert result.owner(first.token) is first
        assert result.owner(second.token) is second

    def test_on_single_node(self, scenario):
        doc = scenario.documents.documents[0]
        assert query(doc, "a.b").nodes[0].key.value == "b"

    def test_is_highlighted(self, scenario):
        result = query(scenario.documents, "a.b")
        entry = result.nodes[0]
        assert result.is_highlighted(entry.key.token)
        assert result.is_highlighted(entry.value_node.token)

    def test_empty_result_is_falsy(self):
        assert not QueryResult(path="")
