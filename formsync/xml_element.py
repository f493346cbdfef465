"""Read-only navigation over a parsed form definition document.

XmlElement wraps an ElementTree element and only exposes what is needed to
identify a form: walking down by tag names, reading text values, children and
attributes. Tag names are compared without their namespace, so XForms
documents using `h:html` or a default `xmlns` resolve the same way as plain
ones.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Union

from formsync.errors import MalformedFormDefinitionError


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


class XmlElement:
    """A node of a parsed form definition.

    Examples:
        >>> root = XmlElement.from_string("<html><head><title>Census</title></head></html>")
        >>> root.find_elements("head", "title")[0].maybe_value()
        'Census'
    """

    def __init__(self, element: ET.Element) -> None:
        self._element = element

    @classmethod
    def from_string(cls, text: Union[str, bytes]) -> "XmlElement":
        """Parse a document held in memory.

        Raises:
            MalformedFormDefinitionError: If the document isn't well-formed
        """
        try:
            return cls(ET.fromstring(text))
        except ET.ParseError as e:
            raise MalformedFormDefinitionError(f"Form definition is not well-formed XML: {e}") from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "XmlElement":
        """Parse the form definition stored at path.

        Raises:
            MalformedFormDefinitionError: If the document isn't well-formed
        """
        try:
            return cls(ET.parse(str(path)).getroot())
        except ET.ParseError as e:
            raise MalformedFormDefinitionError(f"Form definition {path} is not well-formed XML: {e}") from e

    @property
    def name(self) -> str:
        return _local_name(self._element.tag)

    def children(self) -> List["XmlElement"]:
        return [XmlElement(child) for child in self._element]

    def find_elements(self, *names: str) -> List["XmlElement"]:
        """Return every element reached by following names down from this one.

        Each name selects the direct children with that local name, so
        find_elements("head", "model", "instance") returns all instances of
        all models in all heads.
        """
        current = [self]
        for name in names:
            current = [child for element in current for child in element.children() if child.name == name]
        return current

    def has_attribute(self, name: str) -> bool:
        return self.get_attribute_value(name) is not None

    def get_attribute_value(self, name: str) -> Optional[str]:
        return self._element.get(name)

    def maybe_value(self) -> Optional[str]:
        """Text content, stripped, or None when empty."""
        text = (self._element.text or "").strip()
        return text or None

    def __repr__(self) -> str:
        return f"XmlElement({self.name!r})"


__all__ = [
    "XmlElement",
]
