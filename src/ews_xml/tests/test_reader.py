"""Tests for the forward-only XML cursor."""

import pytest

from ews_xml import NodeType, ValueConverter, XmlNamespace, XmlParseError, XmlReader

MESSAGES = XmlNamespace.MESSAGES
TYPES = XmlNamespace.TYPES


class TestNavigation:
    """Node-by-node navigation."""

    def test_root_is_start_element(self, reader):
        """Test the first read lands on the document element."""
        assert reader.read() is True
        assert reader.is_start_element(MESSAGES, "Root")
        assert reader.node_type == NodeType.ELEMENT
        assert reader.depth == 1
        assert not reader.is_empty_element

    def test_read_element_value_advances_and_converts(self, reader):
        """Test element values are read and converted."""
        reader.read()
        count = reader.read_element_value(MESSAGES, "Count", ValueConverter.to_int)
        assert count == 12
        assert reader.node_type == NodeType.END_ELEMENT
        assert reader.local_name == "Count"

    def test_empty_element_is_also_end_element(self, reader):
        """Test self-closing elements satisfy the end-element check."""
        reader.read()
        reader.read_element_value(MESSAGES, "Count")
        reader.read()
        assert reader.is_start_element(TYPES, "Flag")
        assert reader.is_empty_element
        assert reader.is_end_element(TYPES, "Flag")

    def test_open_close_pair_without_content_is_empty(self, reader):
        """Test <x></x> is reported like <x/> and keeps its attributes."""
        reader.read()
        assert reader.read_to_descendant(TYPES, "ItemId")
        assert reader.is_empty_element
        assert reader.read_attribute_value("Id") == "AAA="
        assert reader.read_attribute_value("ChangeKey") == "CK1"
        assert reader.read_attribute_value("Missing") is None
        assert reader.has_attributes

    def test_skip_current_element_lands_on_end(self, reader):
        """Test skipping a subtree leaves the cursor on its end node."""
        reader.read_to_descendant(MESSAGES, "Nested")
        reader.skip_current_element()
        assert reader.node_type == NodeType.END_ELEMENT
        assert reader.local_name == "Nested"
        assert reader.read_element_value(MESSAGES, "After") == "done"

    def test_read_until_end_of_document(self, reader):
        """Test read returns False once the input is exhausted."""
        nodes = 0
        while reader.read():
            nodes += 1
        assert nodes > 0
        assert reader.node_type == NodeType.NONE

    def test_unexpected_node_raises(self, reader):
        """Test asserting the wrong start element raises a parse error."""
        reader.read()
        with pytest.raises(XmlParseError) as exc_info:
            reader.ensure_current_node_is_start_element(MESSAGES, "Other")
        assert "Root" in str(exc_info.value)

    def test_read_value_rejects_child_elements(self, reader):
        """Test reading a container as a value raises a parse error."""
        reader.read_to_descendant(MESSAGES, "Nested")
        with pytest.raises(XmlParseError):
            reader.read_value()

    def test_whitespace_leaf_value_is_kept(self):
        """Test a value made only of spaces survives while indentation is dropped."""
        reader = XmlReader(b"<Root>\n  <Subject>   </Subject>\n  <Empty></Empty>\n</Root>")
        reader.read()
        assert reader.read_element_value(None, "Subject") == "   "
        reader.read()
        assert reader.is_start_element(None, "Empty")
        assert reader.is_empty_element
        reader.read()
        assert reader.node_type == NodeType.END_ELEMENT
        assert reader.local_name == "Root"

    def test_next_is_start_element_does_not_consume(self, reader):
        """Test peeking at the next element leaves the cursor in place."""
        reader.read()
        assert reader.next_is_start_element(MESSAGES, "Count")
        assert not reader.next_is_start_element(TYPES, "Count")
        assert reader.is_start_element(MESSAGES, "Root")
        reader.read_element_value(MESSAGES, "Count")
        assert reader.next_is_start_element(TYPES)
        assert not reader.next_is_start_element(MESSAGES, "After")


class TestMalformedInput:
    """Malformed and hostile documents."""

    def test_mismatched_tags(self):
        """Test mismatched tags surface as XmlParseError."""
        reader = XmlReader(b"<a><b></a>")
        with pytest.raises(XmlParseError):
            while reader.read():
                pass

    def test_entity_declarations_rejected(self):
        """Test entity expansion is refused by the secure parser."""
        document = b'<!DOCTYPE x [<!ENTITY a "boom">]><x>&a;</x>'
        reader = XmlReader(document)
        with pytest.raises(XmlParseError):
            while reader.read():
                pass

    def test_invalid_boolean_value(self):
        """Test boolean conversion refuses unknown literals."""
        reader = XmlReader(b"<Flag>maybe</Flag>")
        reader.read()
        with pytest.raises(XmlParseError):
            reader.read_element_value(converter=ValueConverter.to_bool)


class TestFragments:
    """Several documents carried back to back in one body."""

    def _documents(self):
        first = b'<?xml version="1.0" encoding="utf-8"?><Envelope><Body>1</Body></Envelope>'
        second = b'\xef\xbb\xbf<?xml version="1.0" encoding="utf-8"?><Envelope><Body>2</Body></Envelope>'
        return first + second

    @pytest.mark.parametrize("size", [1, 3, 7, 64])
    def test_documents_read_in_sequence(self, chunker, size):
        """Test each document is readable regardless of chunk boundaries."""
        reader = XmlReader(chunker(self._documents(), size), fragments=True)
        bodies = []
        while reader.read():
            if reader.is_start_element(None, "Body"):
                bodies.append(reader.read_value())
        assert bodies == ["1", "2"]

    def test_callable_source(self):
        """Test a read callable is polled until it returns no data."""
        chunks = [self._documents(), b""]
        reader = XmlReader.from_stream(lambda: chunks.pop(0))
        assert reader.read()
        assert reader.is_start_element(None, "Envelope")
        assert reader.depth == 1

    def test_empty_stream(self):
        """Test a stream closed before any document simply ends."""
        reader = XmlReader.from_stream(lambda: b"")
        assert reader.read() is False

    def test_truncated_document(self):
        """Test a stream ending inside a document is a parse error."""
        reader = XmlReader([b"<Envelope><Body>1</Bo"], fragments=True)
        with pytest.raises(XmlParseError):
            while reader.read():
                pass

    def test_source_errors_propagate_unchanged(self):
        """Test transport failures are not disguised as parse errors."""
        def failing():
            raise TimeoutError("stalled")

        reader = XmlReader.from_stream(failing)
        with pytest.raises(TimeoutError):
            reader.read()
