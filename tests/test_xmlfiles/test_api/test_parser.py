"""Tests for the public parsing API.

Covers input routing, stream ownership, error propagation and the
print-parse-print round trip.
"""

import io
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from xmlfiles.api import parse, parse_file, parse_string
from xmlfiles.serialization import serialize
from xmlfiles.shared import MismatchedTagError, NoRootElementError, XMLFilesConfig
from xmlfiles.tokenization import open_chunks
from xmlfiles.tree import CData, Comment, Element


class TestParseString:
    """Test parsing in-memory text."""

    def test_prolog_and_root_split(self):
        """Test the declaration goes to the prolog and the rest to root."""
        document = parse_string('<?xml version="1.0"?><root>hi</root>')

        assert len(document.prolog) == 1
        declaration = document.prolog[0]
        assert declaration.tag == "?xml"
        assert declaration.attributes == {"version": "1.0"}
        assert declaration.closed is False
        assert document.root == Element("root", {}, ["hi"])

    def test_nested_self_closing_elements(self):
        """Test the nesting of self-closing and open siblings."""
        document = parse_string("<a><b/><c><d/></c></a>")

        a = document.root
        assert a.tag == "a"
        assert [child.tag for child in a.children] == ["b", "c"]
        assert a.children[0].children == []
        assert a.children[1].children == [Element("d")]

    def test_no_root_element(self):
        """Test that input without a root raises an explicit error."""
        with pytest.raises(NoRootElementError):
            parse_string("just some text")

    def test_strict_config_is_honoured(self):
        """Test configuration reaches the tree builder."""
        with pytest.raises(MismatchedTagError):
            parse_string("<a></b>", XMLFilesConfig.strict())

        assert parse_string("<a></b>").root == Element("a")

    def test_logs_completion(self, caplog):
        """Test that completion is logged with the root tag."""
        with caplog.at_level(logging.INFO, logger="xmlfiles.api.parser"):
            parse_string("<root/>", correlation_id="req-1")

        record = next(r for r in caplog.records if r.getMessage() == "String parse completed")
        assert record.root == "root"
        assert record.correlation_id == "req-1"


class TestParseFile:
    """Test parsing from paths and streams."""

    def test_path_is_read_and_closed(self, tmp_path):
        """Test files opened by the parser are closed afterwards."""
        path = tmp_path / "doc.xml"
        path.write_text('<?xml version="1.0"?>\n<list>\n  <item>one</item>\n</list>\n',
                        encoding="utf-8")
        readers = []

        def spy(*args, **kwargs):
            reader = open_chunks(*args, **kwargs)
            readers.append(reader)
            return reader

        with patch("xmlfiles.api.parser.open_chunks", side_effect=spy):
            document = parse_file(str(path))

        assert document.root == Element("list", {}, [Element("item", {}, ["one"])])
        assert readers[0]._stream.closed

    def test_path_closed_when_parsing_fails(self, tmp_path):
        """Test the file is released on the error path too."""
        path = tmp_path / "empty.xml"
        path.write_text("<!-- nothing here -->", encoding="utf-8")
        readers = []

        def spy(*args, **kwargs):
            reader = open_chunks(*args, **kwargs)
            readers.append(reader)
            return reader

        with patch("xmlfiles.api.parser.open_chunks", side_effect=spy):
            with pytest.raises(NoRootElementError):
                parse_file(path)

        assert readers[0]._stream.closed

    def test_explicit_encoding(self, tmp_path):
        """Test the encoding argument is used to open the file."""
        path = tmp_path / "latin.xml"
        path.write_bytes("<name>René</name>".encode("latin-1"))

        document = parse_file(path, encoding="latin-1")

        assert document.root.text == "René"

    def test_stream_is_left_open(self):
        """Test caller-owned streams are not closed."""
        stream = io.StringIO("<root><a/></root>")

        document = parse_file(stream, config=XMLFilesConfig().override(tokenizer__buffer_size=2))

        assert document.root == Element("root", {}, [Element("a")])
        assert not stream.closed

    def test_missing_file(self, tmp_path):
        """Test that I/O errors propagate unchanged."""
        with pytest.raises(FileNotFoundError):
            parse_file(tmp_path / "missing.xml")


class TestParseDispatch:
    """Test routing of the generic parse() entry point."""

    def test_str_is_xml_text(self):
        """Test strings are parsed as XML, never as file names."""
        assert parse("<a>x</a>").root == Element("a", {}, ["x"])

    def test_bytes_are_decoded(self):
        """Test bytes are decoded with the configured encoding."""
        document = parse("<a>ü</a>".encode("utf-8"))

        assert document.root.text == "ü"

    def test_path(self, tmp_path):
        """Test Path objects are opened as files."""
        path = tmp_path / "doc.xml"
        path.write_text("<doc/>", encoding="utf-8")

        assert parse(Path(path)).root == Element("doc")

    def test_stream(self):
        """Test readable objects are parsed as streams."""
        assert parse(io.StringIO("<doc/>")).root == Element("doc")

    def test_unsupported_type(self):
        """Test other input types are rejected."""
        with pytest.raises(TypeError, match="Unsupported input type: int"):
            parse(42)  # type: ignore[arg-type]


class TestRoundTrip:
    """Test print-parse-print idempotence and edit workflows."""

    @pytest.mark.parametrize("source", [
        '<?xml version="1.0"?>\n<!-- c -->\n<root a="1"><b/><c>text</c><d><e>x</e></d></root>',
        "<p>Hello <b>big</b> world<br/>again</p>",
        "<poem>\n  one\n  two\n</poem>",
        "<a><!-- x <y --><![CDATA[<b>]]></a>",
        '<config><?pi mode="fast"?><entry key="k" value="a b"/></config>',
        "<a k='say \"hi\"'/>",
    ])
    def test_serialization_is_idempotent(self, source):
        """Test re-parsing canonical output reproduces it exactly."""
        first = serialize(parse(source))
        second = serialize(parse(first))

        assert second == first

    def test_reparsed_tree_is_equal(self):
        """Test canonical output parses back to an equal tree."""
        document = parse("<list><item id=\"1\">a</item><item id=\"2\"/></list>")

        assert parse(serialize(document)) == document

    def test_edit_and_write(self):
        """Test mutating a parsed tree and rendering it."""
        document = parse('<?xml version="1.0"?><list><item>a</item></list>')
        item = document.root.children[0]

        document.root.append(item(Comment("copied"), id="2"))
        document.root.append(CData("x"))
        buffer = io.StringIO()
        document.write(buffer)

        assert buffer.getvalue() == (
            '<?xml version="1.0">\n'
            "<list>\n"
            "  <item>a</item>\n"
            '  <item id="2">\n'
            "    a\n"
            "    <!-- copied -->\n"
            "  </item>\n"
            "  <![CDATA[x]]>\n"
            "</list>\n"
        )
        assert item == Element("item", {}, ["a"])
