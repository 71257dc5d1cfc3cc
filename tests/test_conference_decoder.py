"""Unit tests for conference response decoding.

Covers:
- Envelope unwrap and no-envelope passthrough
- Whitespace trimming and single-child (non-array) representation
- Repeated siblings, attributes and mixed content
- RAW passthrough of arbitrary bytes
- Decode failures
"""

from __future__ import annotations

import pytest

from src.meetups.conference.decoder import decode_body, parse_xml, unwrap_envelope
from src.meetups.conference.errors import DecodeError, ErrorKind
from src.meetups.conference.request import ResponseType


class TestEnvelope:
    def test_response_envelope_is_unwrapped(self):
        assert decode_body(b"<response><foo>bar</foo></response>", ResponseType.PARSED) == {"foo": "bar"}

    def test_document_without_envelope_is_unchanged(self):
        assert decode_body(b"<root><foo>bar</foo></root>", ResponseType.PARSED) == {"root": {"foo": "bar"}}

    def test_custom_envelope_key(self):
        body = b"<result><foo>bar</foo></result>"
        assert decode_body(body, ResponseType.PARSED, envelope_key="result") == {"foo": "bar"}

    def test_unwrapping_disabled(self):
        tree = {"response": {"foo": "bar"}}
        assert unwrap_envelope(tree, None) == tree


class TestParsing:
    def test_text_nodes_are_trimmed(self):
        body = b"""
        <response>
            <returncode>  SUCCESS  </returncode>
            <meetingID>
                abc123
            </meetingID>
        </response>
        """
        assert decode_body(body, ResponseType.PARSED) == {"returncode": "SUCCESS", "meetingID": "abc123"}

    def test_single_child_is_not_promoted_to_list(self):
        body = b"<response><meetings><meeting><meetingID>m1</meetingID></meeting></meetings></response>"
        assert decode_body(body, ResponseType.PARSED) == {"meetings": {"meeting": {"meetingID": "m1"}}}

    def test_repeated_siblings_become_list(self):
        body = (
            b"<response><attendees>"
            b"<attendee><userID>u1</userID></attendee>"
            b"<attendee><userID>u2</userID></attendee>"
            b"<attendee><userID>u3</userID></attendee>"
            b"</attendees></response>"
        )
        result = decode_body(body, ResponseType.PARSED)
        assert result == {"attendees": {"attendee": [{"userID": "u1"}, {"userID": "u2"}, {"userID": "u3"}]}}

    def test_empty_element_is_empty_string(self):
        assert parse_xml("<response><messageKey/></response>") == {"response": {"messageKey": ""}}

    def test_attributes_and_text(self):
        tree = parse_xml('<response><module name="presentation"> slides </module></response>')
        assert tree == {"response": {"module": {"$": {"name": "presentation"}, "_": "slides"}}}

    def test_attribute_values_are_not_trimmed(self):
        tree = parse_xml('<response><document url=" http://x/y.pdf " /></response>')
        assert tree == {"response": {"document": {"$": {"url": " http://x/y.pdf "}}}}

    def test_mixed_text_chunks_join_without_separator(self):
        tree = parse_xml("<response><note>first <b>bold</b> second</note></response>")
        assert tree == {"response": {"note": {"b": "bold", "_": "firstsecond"}}}

    def test_namespaces_are_stripped(self):
        tree = parse_xml('<r:response xmlns:r="urn:x"><r:foo>bar</r:foo></r:response>')
        assert tree == {"response": {"foo": "bar"}}


class TestRaw:
    @pytest.mark.parametrize(
        "body",
        [
            b"",
            b"<response><foo>bar</foo></response>",
            b"  padded text with trailing newline\n",
            b"\xff\xfe\x00binary\x80garbage",
            "unicode: ünïcödé".encode("utf-8"),
        ],
    )
    def test_raw_returns_body_unchanged(self, body):
        text = decode_body(body, ResponseType.RAW)
        assert isinstance(text, str)
        assert text.encode("utf-8", "surrogateescape") == body

    def test_raw_does_not_parse(self):
        assert decode_body(b"not xml at all", ResponseType.RAW) == "not xml at all"


class TestDecodeFailures:
    @pytest.mark.parametrize("body", [b"not xml at all", b"", b"<response><foo>bar</response>"])
    def test_invalid_xml_raises_decode_error(self, body):
        with pytest.raises(DecodeError) as exc_info:
            decode_body(body, ResponseType.PARSED)
        assert exc_info.value.kind is ErrorKind.INVALID_XML
        assert exc_info.value.body == body.decode()
