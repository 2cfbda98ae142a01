"""
Unit tests for core/abbrev/io.py: abbreviation text format.
"""

import pytest

from core.abbrev.abbrev_map import AbbrevMap
from core.abbrev.codec import TermCodec
from core.abbrev.exceptions import AbbrevFileError, ParseError
from core.abbrev.io import (
    SEPARATOR,
    deserialize,
    is_comment_line,
    load_file,
    save_file,
    serialize,
)
from core.logic import LogicCodec, Namespace


class WordCodec(TermCodec):
    """Accepts a fixed vocabulary; terms are ("term", word) tuples."""

    def __init__(self, words):
        self.words = set(words)

    def parse(self, text):
        if text not in self.words:
            raise ParseError(f"Unknown word {text!r}", text, 0)
        return ("term", text)

    def print(self, term):
        return term[1]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def codec():
    return WordCodec(["term1", "term2", "term3"])


@pytest.fixture
def target():
    return AbbrevMap()


@pytest.fixture
def logic_codec():
    return LogicCodec(Namespace.standard("p", {"x": 0, "y": 0, "f": 1}), AbbrevMap())


# ---------------------------------------------------------------------------
# Comment detection
# ---------------------------------------------------------------------------

class TestCommentLines:
    @pytest.mark.parametrize("line", ["", "   ", "\t", "# foo", "// bar", "   # indented", "  // x::==term1"])
    def test_comment_or_blank(self, line):
        assert is_comment_line(line)

    @pytest.mark.parametrize("line", ["x::==term1", " x::==term1", "x::==# not a comment"])
    def test_data_lines(self, line):
        assert not is_comment_line(line)


# ---------------------------------------------------------------------------
# serialize
# ---------------------------------------------------------------------------

class TestSerialize:
    def test_empty_map(self, codec, target):
        assert serialize(target, codec) == ""

    def test_lines(self, codec, target):
        target.put(("term", "term1"), "x")
        target.put(("term", "term2"), "y")
        assert serialize(target, codec) == "x::==term1\ny::==term2"

    def test_disabled_marker(self, codec, target):
        target.put(("term", "term1"), "x", enabled=False)
        assert serialize(target, codec) == "!x::==term1"

    def test_separator_constant(self):
        assert SEPARATOR == "::=="


# ---------------------------------------------------------------------------
# deserialize
# ---------------------------------------------------------------------------

class TestDeserialize:
    def test_load_scenario(self, codec, target):
        report = deserialize("x::==term1\ny::==term2\n# comment\n", codec, target)
        assert report.added == 2
        assert report.ok
        assert sorted(target.export(), key=lambda p: p[1]) == [
            (("term", "term1"), "x"),
            (("term", "term2"), "y"),
        ]
        assert target.is_enabled(("term", "term1"))
        assert target.is_enabled(("term", "term2"))

    def test_comments_produce_nothing(self, codec, target):
        report = deserialize("# foo\n// bar\n\n   \n", codec, target)
        assert report.added == 0
        assert report.errors == []
        assert len(target) == 0

    def test_label_is_trimmed(self, codec, target):
        deserialize("  x  ::==term1", codec, target)
        assert target.get_term("x") == ("term", "term1")

    def test_term_text_is_trimmed(self, codec, target):
        deserialize("x::==  term1  \r", codec, target)
        assert target.get_term("x") == ("term", "term1")

    def test_line_without_separator_skipped_silently(self, codec, target):
        report = deserialize("just some text\nx::==term1", codec, target)
        assert report.added == 1
        assert report.skipped == 1
        assert report.errors == []

    def test_split_on_first_separator(self, codec, target):
        report = deserialize("x::==term1::==term2", codec, target)
        assert report.added == 0
        assert report.errors[0].kind == "parse"

    def test_parse_error_does_not_abort(self, codec, target):
        report = deserialize("a::==bogus\nb::==term2", codec, target)
        assert report.added == 1
        assert len(report.errors) == 1
        error = report.errors[0]
        assert error.line_no == 1
        assert error.line == "a::==bogus"
        assert error.kind == "parse"
        assert target.get_term("b") == ("term", "term2")

    def test_duplicate_label_recorded(self, codec, target):
        report = deserialize("x::==term1\nx::==term2\ny::==term3", codec, target)
        assert report.added == 2
        assert [e.kind for e in report.errors] == ["duplicate_label"]
        assert report.errors[0].line_no == 2
        assert target.get_term("x") == ("term", "term1")

    def test_duplicate_term_recorded(self, codec, target):
        report = deserialize("x::==term1\ny::==term1", codec, target)
        assert [e.kind for e in report.errors] == ["duplicate_term"]

    def test_invalid_label_recorded(self, codec, target):
        report = deserialize("::==term1\nbad label::==term2", codec, target)
        assert report.added == 0
        assert [e.kind for e in report.errors] == ["invalid_label", "invalid_label"]

    def test_disabled_marker(self, codec, target):
        deserialize("!x::==term1\n ! y ::==term2", codec, target)
        assert target.is_enabled(("term", "term1")) is False
        assert target.is_enabled(("term", "term2")) is False
        assert target.get_term("y") == ("term", "term2")

    def test_error_sink_called_per_line(self, codec, target):
        seen = []
        deserialize("a::==bogus\nb::==nope\nc::==term1", codec, target, on_error=seen.append)
        assert [e.line_no for e in seen] == [1, 2]

    def test_appends_to_existing_entries(self, codec, target):
        target.put(("term", "term3"), "z")
        deserialize("x::==term1", codec, target)
        assert len(target) == 2


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------

class TestRoundTrip:
    def test_round_trip_preserves_triples(self, logic_codec):
        source = logic_codec.abbreviations
        source.put(logic_codec.parse("f(x) + 1"), "a")
        source.put(logic_codec.parse("x -> y = x"), "b", enabled=False)
        source.put(logic_codec.parse("!(x < 3)"), "c")

        text = serialize(source, logic_codec)
        fresh = AbbrevMap()
        fresh_codec = LogicCodec(logic_codec.namespace, fresh)
        report = deserialize(text, fresh_codec, fresh)

        assert report.ok
        triples = lambda m: sorted((e.label, e.term, e.enabled) for e in m.entries())
        assert [t[0] for t in triples(fresh)] == ["a", "b", "c"]
        assert triples(fresh) == triples(source)

    def test_later_lines_may_reference_earlier_labels(self, logic_codec):
        target = logic_codec.abbreviations
        report = deserialize("fx::==f(x)\nsum::==@fx + y", logic_codec, target)
        assert report.ok
        assert target.get_term("sum") == logic_codec.parse("f(x) + y")


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

class TestFiles:
    def test_save_and_load(self, tmp_path, codec, target):
        target.put(("term", "term1"), "x")
        target.put(("term", "term2"), "y", enabled=False)
        path = tmp_path / "proof.abbrev"

        assert save_file(path, target, codec) == 2
        assert path.read_text(encoding="utf-8") == "x::==term1\n!y::==term2"

        loaded = AbbrevMap()
        report = load_file(path, codec, loaded)
        assert report.added == 2
        assert loaded.is_enabled(("term", "term2")) is False

    def test_save_empty_map(self, tmp_path, codec, target):
        path = tmp_path / "empty.abbrev"
        assert save_file(path, target, codec) == 0
        assert path.read_text(encoding="utf-8") == ""

    def test_load_missing_file(self, tmp_path, codec, target):
        revision = target.revision
        with pytest.raises(AbbrevFileError) as exc:
            load_file(tmp_path / "missing.abbrev", codec, target)
        assert exc.value.path == tmp_path / "missing.abbrev"
        assert target.revision == revision

    def test_load_undecodable_file(self, tmp_path, codec, target):
        path = tmp_path / "latin1.abbrev"
        path.write_bytes("x::==t\xe9rm".encode("latin-1"))
        with pytest.raises(AbbrevFileError):
            load_file(path, codec, target)
        assert len(target) == 0

    def test_save_into_missing_directory(self, tmp_path, codec, target):
        target.put(("term", "term1"), "x")
        with pytest.raises(AbbrevFileError):
            save_file(tmp_path / "nope" / "out.abbrev", target, codec)

    def test_utf8_labels(self, tmp_path, codec, target):
        target.put(("term", "term1"), "größe")
        path = tmp_path / "utf8.abbrev"
        save_file(path, target, codec)
        loaded = AbbrevMap()
        load_file(path, codec, loaded)
        assert loaded.get_term("größe") == ("term", "term1")


class TestDeeplyNestedLines:
    def test_deep_line_reported_and_load_continues(self, logic_codec):
        target = logic_codec.abbreviations
        deep = "(" * 5000 + "x" + ")" * 5000
        report = deserialize(f"a::=={deep}\nb::==x", logic_codec, target)

        assert report.added == 1
        assert [e.kind for e in report.errors] == ["parse"]
        assert report.errors[0].line_no == 1
        assert "nested too deeply" in report.errors[0].message
        assert target.get_term("b") == logic_codec.parse("x")
        assert not target.contains_label("a")
