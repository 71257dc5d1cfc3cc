"""Response decoder for conferencing server payloads.

RAW bodies are returned as text. PARSED bodies are read as XML into a plain
nested mapping:

- text nodes are whitespace-trimmed;
- an element with neither attributes nor children becomes its text;
- a tag that occurs once under its parent maps to a single value, a tag that
  repeats maps to a list of values in document order;
- attributes are kept verbatim under ``"$"`` and the text of an element that also has
  attributes or children under ``"_"`` (omitted when empty).

The conferencing server wraps every payload in a ``<response>`` element; when
the document root carries the envelope key, only its contents are returned.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from src.meetups.conference.errors import DecodeError
from src.meetups.conference.request import ResponseType

DEFAULT_ENVELOPE_KEY = "response"

ATTRIBUTES_KEY = "$"
TEXT_KEY = "_"


def _strip_namespace(tag: str) -> str:
    # ElementTree reports namespaced tags as "{uri}local"
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _element_to_value(element: ET.Element) -> Any:
    text = (element.text or "").strip()
    children = list(element)

    if not children and not element.attrib:
        return text

    node: dict[str, Any] = {}
    if element.attrib:
        node[ATTRIBUTES_KEY] = {
            _strip_namespace(name): value for name, value in element.attrib.items()
        }

    grouped: dict[str, list[Any]] = {}
    for child in children:
        grouped.setdefault(_strip_namespace(child.tag), []).append(_element_to_value(child))
    for key, values in grouped.items():
        node[key] = values[0] if len(values) == 1 else values

    # Text interleaved between children counts towards the element's text
    tails = [(child.tail or "").strip() for child in children]
    text = "".join([text, *tails])
    if text:
        node[TEXT_KEY] = text

    return node


def parse_xml(body: str | bytes) -> dict[str, Any]:
    """Parse an XML document into ``{root_tag: value}``.

    Raises:
        DecodeError: If the body is empty or not well-formed XML.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        preview = body if isinstance(body, str) else body.decode("utf-8", "replace")
        raise DecodeError(f"Response is not well-formed XML: {exc}", body=preview) from exc
    return {_strip_namespace(root.tag): _element_to_value(root)}


def unwrap_envelope(tree: dict[str, Any], envelope_key: str | None = DEFAULT_ENVELOPE_KEY) -> Any:
    """Return the envelope contents when the top level has ``envelope_key``."""
    if envelope_key and envelope_key in tree:
        return tree[envelope_key]
    return tree


def decode_text(body: bytes) -> str:
    """Decode a body as UTF-8 whatever charset the server declared.

    Lossless: ``decode_text(b).encode("utf-8", "surrogateescape") == b``.
    """
    return body.decode("utf-8", "surrogateescape")


def decode_body(
    body: bytes,
    response_type: ResponseType,
    envelope_key: str | None = DEFAULT_ENVELOPE_KEY,
) -> Any:
    """Decode an accumulated response body according to ``response_type``.

    Raises:
        DecodeError: If PARSED was requested and the body is not XML.
    """
    if response_type is ResponseType.RAW:
        return decode_text(body)
    return unwrap_envelope(parse_xml(body), envelope_key)
