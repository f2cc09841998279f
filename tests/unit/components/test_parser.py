"""
Unit tests for the parser pipeline: entries, regions, contents.
"""

import pytest

from dv6.config import Config
from dv6.content import CONTENT_MALFORMED, ContentBodyParser, ExtendedSectionParser
from dv6.dom import element
from dv6.errors import DV6SyntaxError
from dv6.parser import DV6, WORD_WITHOUT_CONTENT, WORD_WITHOUT_NAME, Parser, parse
from dv6.tree import lift
from dv6.diagnostics import DiagnosticSink
from dv6.lines import split_lines


def doc(*lines):
    return "\n".join(lines)


def run(text, **kwargs):
    return parse(text, config=Config(), **kwargs)


class TestEntries:
    def test_empty_document(self):
        result = run("")
        assert result.entries == []
        assert result.errors == []
        assert result.warnings == []
        assert result.success

    def test_single_word_structure(self):
        result = run(doc("#テスト", "\tyomi:てすと", "\t* 試験"))
        assert result.success
        (word,) = result.entries
        assert word.name == "word"
        assert [c.name for c in word.children] == ["name", "properties", "contents"]
        assert word.find("name").text == "テスト"

    def test_yomi_round_trip(self):
        result = run(doc("#テスト", "\tyomi:てすと"))
        (word,) = result.entries
        (yomi,) = word.find("properties").children
        assert yomi.name == "yomi"
        assert yomi.children == ["てすと"]

    def test_word_without_body(self):
        result = run(doc("#a", "\tyomi:x", "#word"))
        assert len(result.entries) == 1
        assert [d.message for d in result.errors] == [WORD_WITHOUT_CONTENT]
        assert result.errors[0].line_description == "3"

    def test_only_word_without_body(self):
        result = run("#word")
        assert result.entries == []
        assert len(result.errors) == 1

    def test_empty_title(self):
        result = run(doc("#", "\tyomi:x"))
        assert result.entries == []
        assert [d.message for d in result.errors] == [WORD_WITHOUT_NAME]

    def test_non_header_top_level_lines_are_ignored(self):
        result = run(doc("comment", "\tindented", "#a", "\tyomi:x"))
        assert len(result.entries) == 1
        assert result.success

    def test_multiple_words_in_order(self):
        result = run(doc("#a", "\tyomi:x", "#b", "\tyomi:y", "#c", "\tyomi:z"))
        assert [w.find("name").text for w in result.entries] == ["a", "b", "c"]

    def test_indent_jump_reported_and_parse_continues(self):
        result = run(doc("#a", "\t\tyomi:x", "#b", "\tyomi:y"))
        assert any("2レベル以上" in d.message for d in result.errors)
        assert [w.find("name").text for w in result.entries] == ["a", "b"]

    def test_continuation_inside_property(self):
        result = run(doc("#a", "\tyomi:て\\", "\tすと"))
        (word,) = result.entries
        assert word.find("properties").find("yomi").text == "てすと"

    def test_parse_is_deterministic(self):
        text = doc("#a", "\tyomi:x", "\tflag:ODD", "\tdir:bad", "\t* body", "#b")
        first, second = run(text), run(text)
        assert [e.to_data() for e in first.entries] == [e.to_data() for e in second.entries]
        assert first.errors == second.errors
        assert first.warnings == second.warnings

    def test_reused_parser_starts_clean(self):
        parser = Parser(config=Config())
        first = parser.parse("#lonely")
        second = parser.parse(doc("#a", "\tyomi:x", "\tcolor:red"))
        assert len(first.errors) == 1
        assert second.errors == []
        assert [d.message for d in second.warnings] == ["未知のプロパティ指定があります"]

    def test_reused_parser_property_diagnostics_are_per_run(self):
        parser = Parser(config=Config())
        parser.parse(doc("#a", "\tdir:bad"))
        assert parser.parse(doc("#b", "\tdir:/ok")).errors == []

    def test_blank_line_closes_entry(self, caplog):
        with caplog.at_level("DEBUG", logger="dv6.parser"):
            result = run(doc("#a", "\tyomi:x", "", "\tpos:n"))
        (word,) = result.entries
        assert [c.name for c in word.find("properties").children] == ["yomi"]
        assert result.errors == []
        assert "ignoring top-level line 3: ''" in caplog.text

    def test_parsers_do_not_share_diagnostics(self):
        parser_a, parser_b = Parser(config=Config()), Parser(config=Config())
        parser_a.parse("#lonely")
        assert parser_b.parse(doc("#a", "\tyomi:x")).errors == []


class TestRegions:
    def setup_method(self):
        self.parser = Parser(config=Config())

    def word_node(self, *children):
        root = lift(split_lines(doc("#w", *("\t" + c for c in children)), DiagnosticSink()))
        return root.children[0]

    def test_properties_contents_extended(self):
        node = self.word_node("yomi:a", "pos:n", "* def", "- ex", "//ext", "more")
        regions = self.parser.parse_top_children(node)
        assert [n.text for n in regions.properties] == ["yomi:a", "pos:n"]
        assert [n.text for n in regions.contents] == ["* def", "- ex"]
        assert [n.text for n in regions.extended] == ["//ext", "more"]

    def test_all_properties(self):
        node = self.word_node("yomi:a", "pos:n")
        regions = self.parser.parse_top_children(node)
        assert len(regions.properties) == 2
        assert regions.contents == ()
        assert regions.extended == ()

    def test_property_after_content_is_content(self):
        node = self.word_node("* def", "yomi:a")
        regions = self.parser.parse_top_children(node)
        assert regions.properties == ()
        assert [n.text for n in regions.contents] == ["* def", "yomi:a"]

    def test_extended_right_after_properties(self):
        node = self.word_node("yomi:a", "//ext")
        regions = self.parser.parse_top_children(node)
        assert len(regions.properties) == 1
        assert regions.contents == ()
        assert len(regions.extended) == 1

    def test_nested_variant_has_no_extended(self):
        node = self.word_node("yomi:a", "* def", "//ext")
        regions = self.parser.parse_children(node)
        assert len(regions.properties) == 1
        assert [n.text for n in regions.contents] == ["* def", "//ext"]
        assert regions.extended == ()


class TestContents:
    def test_content_node(self):
        result = run(doc("#a", "\t* first meaning", "\t1. second"))
        contents = result.entries[0].find("contents")
        assert [(c.attributes["marker"], c.text) for c in contents.children] == [
            ("*", "first meaning"),
            ("1.", "second"),
        ]

    def test_malformed_content_line(self):
        result = run(doc("#a", "\tyomi:x", "\tnospace"))
        assert [d.message for d in result.errors] == [CONTENT_MALFORMED]
        assert result.entries[0].find("contents").children == []

    def test_nested_content_children(self):
        result = run(doc("#a", "\t* meaning", "\t\tpos:noun", "\t\t- example"))
        (content,) = result.entries[0].find("contents").children
        assert content.text == "meaning"
        props = content.find("properties")
        assert [p.text for p in props.children] == ["noun"]
        (nested,) = content.find_all("content")
        assert nested.attributes == {"marker": "-"}
        assert nested.text == "example"
        assert result.success

    def test_custom_body_parser(self):
        class UpperBody(ContentBodyParser):
            def parse_content_body(self, raw):
                return [element("name", raw.upper())]

        result = run(doc("#a", "\t* cat"), body_parser=UpperBody())
        (content,) = result.entries[0].find("contents").children
        assert content.find("name").text == "CAT"

    def test_default_extended_is_dropped(self):
        result = run(doc("#a", "\tyomi:x", "\t//anything goes"))
        assert result.success
        assert [c.name for c in result.entries[0].children] == ["name", "properties", "contents"]

    def test_custom_extended_parser(self):
        seen = []

        class Collect(ExtendedSectionParser):
            def parse_extended(self, nodes, sink):
                seen.extend(n.text for n in nodes)
                sink.warning(nodes[0], "extended")
                return [element("source", "ext")]

        result = run(doc("#a", "\t* x", "\t//one", "\ttwo"), extended_parser=Collect())
        assert seen == ["//one", "two"]
        assert [c.name for c in result.entries[0].children] == ["name", "properties", "contents", "source"]
        assert [d.message for d in result.warnings] == ["extended"]


class TestParseResult:
    def test_raise_for_errors(self):
        result = run("#lonely")
        with pytest.raises(DV6SyntaxError, match="単語の内容がありません") as excinfo:
            result.raise_for_errors()
        assert excinfo.value.diagnostics == result.errors

    def test_raise_for_errors_ignores_warnings(self):
        result = run(doc("#a", "\tcolor:red"))
        assert result.warnings
        result.raise_for_errors()

    def test_to_data(self):
        data = run(doc("#a", "\tyomi:x", "#b")).to_data()
        assert data["entries"][0]["name"] == "word"
        assert data["errors"] == ["行3: 単語の内容がありません"]
        assert data["warnings"] == []


class TestFacade:
    def test_structure_before_parse(self):
        assert DV6("#a\n\tyomi:x", config=Config()).structure is None

    def test_parse_keeps_structure_and_logs(self, caplog):
        document = DV6(doc("#a", "\tyomi:x", "\tcolor:red", "#b"), config=Config())
        with caplog.at_level("WARNING", logger="dv6.parser"):
            result = document.parse()
        assert document.structure == result.entries
        assert len(document.structure) == 1
        messages = [r.getMessage() for r in caplog.records]
        assert "行4: 単語の内容がありません" in messages
        assert "行3: 未知のプロパティ指定があります" in messages
