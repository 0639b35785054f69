"""
Tests for the inference request builder.
"""

from src.dubby.models import InlinePart, Language, RemotePart
from src.dubby.request import SEGMENT_FIELDS, build_request


def test_build_request_schema_and_safety():
    media = InlinePart(data="AAAA", mime_type="video/mp4")
    request = build_request(media, Language.GERMAN)

    assert request.media is media
    assert request.target_language == "German"
    assert request.response_mime_type == "application/json"

    schema = request.response_schema
    assert schema["type"] == "ARRAY"
    assert schema["items"]["type"] == "OBJECT"
    assert set(schema["items"]["required"]) == set(SEGMENT_FIELDS)
    assert all(p == {"type": "STRING"} for p in schema["items"]["properties"].values())

    categories = {c for c, _ in request.safety_settings}
    assert categories == {
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    }
    assert all(t == "BLOCK_NONE" for _, t in request.safety_settings)


def test_instruction_mentions_language_and_timing():
    request = build_request(RemotePart(uri="https://store/f", mime_type="video/mp4"), "Hindi")
    text = request.instruction

    assert "Translate to Hindi" in text
    assert "MM:SS.mmm" in text
    assert "Verbatim" in text
    assert "LIP SYNC" in text
    assert "JSON array" in text
