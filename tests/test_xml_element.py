"""Unit tests for form definition navigation."""

import pytest

from formsync.errors import MalformedFormDefinitionError
from formsync.xml_element import XmlElement


XFORM = """<?xml version="1.0"?>
<h:html xmlns="http://www.w3.org/2002/xforms" xmlns:h="http://www.w3.org/1999/xhtml">
  <h:head>
    <h:title> Census </h:title>
    <model>
      <instance>
        <data id="census-1" version="2023-01"><name/></data>
      </instance>
      <instance id="districts">
        <root><item/><item/></root>
      </instance>
    </model>
  </h:head>
  <h:body/>
</h:html>
"""


class TestParsing:
    """Test building elements from documents."""

    def test_from_string(self):
        """Should expose the root element by local name."""
        assert XmlElement.from_string(XFORM.encode("utf-8")).name == "html"

    def test_from_file(self, tmp_path):
        """Should parse a definition stored on disk."""
        form_file = tmp_path / "census.xml"
        form_file.write_text(XFORM, encoding="utf-8")
        assert XmlElement.from_file(form_file).name == "html"

    def test_malformed_document(self):
        """Should raise a domain error for documents that aren't well-formed."""
        with pytest.raises(MalformedFormDefinitionError):
            XmlElement.from_string("<html><head></html>")

    def test_malformed_file(self, tmp_path):
        """Should raise a domain error for files that aren't well-formed."""
        form_file = tmp_path / "broken.xml"
        form_file.write_text("<html>", encoding="utf-8")
        with pytest.raises(MalformedFormDefinitionError):
            XmlElement.from_file(form_file)


class TestNavigation:
    """Test walking down a parsed definition."""

    def test_find_elements_ignores_namespaces(self):
        """Should match tag names without their namespace."""
        root = XmlElement.from_string(XFORM.encode("utf-8"))
        titles = root.find_elements("head", "title")
        assert len(titles) == 1
        assert titles[0].maybe_value() == "Census"

    def test_find_elements_returns_all_matches(self):
        """Should return every element reached by the path."""
        root = XmlElement.from_string(XFORM.encode("utf-8"))
        assert len(root.find_elements("head", "model", "instance")) == 2

    def test_find_elements_without_match(self):
        """Should return an empty list when the path leads nowhere."""
        root = XmlElement.from_string(XFORM.encode("utf-8"))
        assert root.find_elements("head", "missing") == []

    def test_children(self):
        """Should list direct child elements."""
        root = XmlElement.from_string(XFORM.encode("utf-8"))
        secondary = root.find_elements("head", "model", "instance")[1]
        assert [c.name for c in secondary.children()] == ["root"]
        assert len(secondary.children()[0].children()) == 2

    def test_attributes(self):
        """Should read attributes by name."""
        root = XmlElement.from_string(XFORM.encode("utf-8"))
        main, secondary = root.find_elements("head", "model", "instance")
        data = main.children()[0]

        assert not main.has_attribute("id")
        assert secondary.has_attribute("id")
        assert data.get_attribute_value("id") == "census-1"
        assert data.get_attribute_value("version") == "2023-01"
        assert data.get_attribute_value("missing") is None

    def test_maybe_value_of_empty_element(self):
        """Should return None for elements without text."""
        root = XmlElement.from_string("<html><head><title>  </title></head></html>")
        assert root.find_elements("head", "title")[0].maybe_value() is None
