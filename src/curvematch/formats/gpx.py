# curvematch/formats/gpx.py
"""
GPX helpers for CurveMatch

This module is intentionally format-focused:
- GPX namespace handling
- safely parsing in-memory documents (text or bytes) into ElementTree
- building and serializing new GPX trees
- pretty-printing

Key design principle:
  Keep analysis (distance, elevation, bounds) in curvematch.analyze and
  orchestration (paths, reports, user interaction) in the CLI, separate from
  GPX parsing and serialization (here).
"""

from __future__ import annotations

from typing import Iterator, Optional, Union
from xml.etree import ElementTree as ET

from curvematch.errors import MalformedInputError

# GPX 1.1 default namespace
GPX_NS_URI = "http://www.topografix.com/GPX/1/1"
GPX_VERSION = "1.1"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

GpxSource = Union[str, bytes]


def local_name(tag: str) -> str:
    """
    Strip the namespace from an ElementTree tag.

    Lets the same walk handle GPX 1.0, GPX 1.1 and namespace-less files.
    """
    return tag.rsplit("}", 1)[-1]


def iter_children(parent: ET.Element, name: str) -> Iterator[ET.Element]:
    """Direct children of `parent` whose local name is `name`, in document order."""
    for child in parent:
        if isinstance(child.tag, str) and local_name(child.tag) == name:
            yield child


def child_text(parent: ET.Element, name: str) -> Optional[str]:
    """Stripped text of the first direct child called `name`, or None if missing/blank."""
    for child in iter_children(parent, name):
        text = (child.text or "").strip()
        return text or None
    return None


def _indent(elem: ET.Element, level: int = 0, indent: str = "  ") -> None:
    """
    In-place pretty-printer for ElementTree output. Eliminates double blank-line
    issues by explicitly controlling .text/.tail.
    """
    i = "\n" + level * indent
    j = "\n" + (level - 1) * indent if level > 0 else "\n"

    children = list(elem)
    if children:
        if elem.text is None or not elem.text.strip():
            elem.text = i + indent
        for child in children:
            _indent(child, level + 1, indent=indent)
        if children[-1].tail is None or not children[-1].tail.strip():
            children[-1].tail = i
    if elem.tail is None or not elem.tail.strip():
        elem.tail = j


def parse_gpx(content: GpxSource) -> ET.Element:
    """
    Parse a GPX document held in memory and return its root element.

    Raises:
      MalformedInputError if the document is empty, not well-formed XML,
      declares an unknown encoding, or its root element is not <gpx>.
    """
    if not content or not content.strip():
        raise MalformedInputError("Invalid GPX file format: document is empty")

    try:
        root = ET.fromstring(content)
    except (ET.ParseError, LookupError, ValueError) as e:
        # LookupError: unknown encoding named in the XML declaration
        raise MalformedInputError(f"Invalid GPX file format: {e}") from e

    if local_name(root.tag) != "gpx":
        raise MalformedInputError(
            f"Invalid GPX file format: root element is <{local_name(root.tag)}>, expected <gpx>"
        )
    return root


def new_gpx_root(creator: str) -> ET.Element:
    """
    Create an empty GPX 1.1 root element.

    Children are added with plain tag names (ET.SubElement(root, "trk")); the
    xmlns attribute puts the whole output tree in the GPX 1.1 namespace.
    """
    return ET.Element("gpx", {"xmlns": GPX_NS_URI, "version": GPX_VERSION, "creator": creator})


def serialize_gpx(root: ET.Element, *, pretty: bool = False) -> str:
    """
    Serialize a GPX 1.1 tree to text.

    - expects a tree from new_gpx_root(): plain tag names, xmlns on the root
    - an XML declaration is prepended if the serializer did not write one
    - pretty=True applies indentation for human readability
    """
    if pretty:
        _indent(root)
    text = ET.tostring(root, encoding="unicode")
    if not text.startswith("<?xml"):
        text = f"{XML_DECLARATION}\n{text}"
    return text

