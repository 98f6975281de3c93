"""Namespace-agnostic XML helpers shared by the detector and parsers."""

from __future__ import annotations

import math

from lxml import etree
from loguru import logger

from trackmerge.core.errors import MalformedXmlError

# Entity resolution and network access stay off for uploaded files
_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def load_xml_root(text: str, *, file_name: str | None = None) -> etree._Element:
    """Parse raw XML text into its root element.

    Args:
        text: Raw file text (already decoded)
        file_name: Display name, carried on the raised error

    Returns:
        Root element

    Raises:
        MalformedXmlError: If the text is not well-formed XML
    """
    try:
        # lxml rejects str input that carries an encoding declaration
        return etree.fromstring(text.encode("utf-8"), parser=_PARSER)
    except etree.XMLSyntaxError as e:
        logger.debug(f"XML syntax error in {file_name or '<text>'}: {e}")
        raise MalformedXmlError(f"Invalid XML file: {e}", file_name=file_name) from e


def has_element(root: etree._Element, name: str) -> bool:
    """Check whether an element with this local name exists anywhere in the tree."""
    return next(root.iter(f"{{*}}{name}"), None) is not None


def find_text(element: etree._Element, path: str) -> str | None:
    """Return the stripped text at ``path``, or None when absent or empty.

    ``path`` uses ``{*}`` wildcards so lookups work with and without a
    default namespace.
    """
    found = element.find(path)
    if found is None or found.text is None:
        return None
    text = found.text.strip()
    return text or None


def parse_float(text: str | None) -> float | None:
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_int(text: str | None) -> int | None:
    """Parse a non-negative integer sample, tolerating decimal notation."""
    value = parse_float(text)
    if value is None or value < 0:
        return None
    return int(value)
