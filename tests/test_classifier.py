"""Tests for download content classification."""

import base64

import pytest

from storagegate import (
    DEFAULT_TEXT_MIME_TYPES,
    AudioContent,
    BinaryContent,
    ContentClassifier,
    ImageContent,
    TextContent,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@pytest.fixture
def classifier():
    return ContentClassifier()


class TestImageAndAudio:
    """Test media classification."""

    def test_image(self, classifier):
        result = classifier.classify(PNG_BYTES, "image/png")

        assert isinstance(result, ImageContent)
        assert result.type == "image"
        assert result.mime_type == "image/png"
        assert base64.b64decode(result.data) == PNG_BYTES

    def test_image_content_type_is_lowercased(self, classifier):
        result = classifier.classify(PNG_BYTES, "Image/PNG")

        assert isinstance(result, ImageContent)
        assert result.mime_type == "image/png"

    def test_svg_is_image_not_text(self, classifier):
        result = classifier.classify(b"<svg/>", "image/svg+xml")
        assert isinstance(result, ImageContent)

    def test_audio(self, classifier):
        result = classifier.classify(b"ID3\x03\x00", "audio/mpeg")

        assert isinstance(result, AudioContent)
        assert result.mime_type == "audio/mpeg"
        assert base64.b64decode(result.data) == b"ID3\x03\x00"


class TestText:
    """Test text classification."""

    def test_text_plain(self, classifier):
        result = classifier.classify("héllo".encode(), "text/plain")

        assert isinstance(result, TextContent)
        assert result.text == "héllo"

    def test_text_with_charset(self, classifier):
        result = classifier.classify(b"a,b\n1,2", "text/csv; charset=utf-8")
        assert result == TextContent(text="a,b\n1,2")

    def test_json_is_text(self, classifier):
        result = classifier.classify(b'{"a": 1}', "application/json")
        assert isinstance(result, TextContent)
        assert result.text == '{"a": 1}'

    def test_json_with_parameters_is_text(self, classifier):
        result = classifier.classify(b"{}", "application/json; charset=utf-8")
        assert isinstance(result, TextContent)

    def test_malformed_utf8_is_replaced(self, classifier):
        result = classifier.classify(b"ok\xff", "text/plain")

        assert isinstance(result, TextContent)
        assert result.text == "ok\ufffd"

    def test_custom_text_types(self):
        classifier = ContentClassifier(text_mime_types={"Application/X-Custom"})

        assert isinstance(
            classifier.classify(b"data", "application/x-custom"), TextContent
        )
        assert isinstance(classifier.classify(b"{}", "application/json"), BinaryContent)

    def test_default_text_types(self, classifier):
        assert classifier.text_mime_types == DEFAULT_TEXT_MIME_TYPES


class TestBinary:
    """Test fallback to base64 text."""

    def test_octet_stream(self, classifier):
        body = bytes(range(256))
        result = classifier.classify(body, "application/octet-stream")

        assert isinstance(result, BinaryContent)
        assert base64.b64decode(result.text) == body

    @pytest.mark.parametrize("content_type", [None, ""])
    def test_missing_content_type(self, classifier, content_type):
        result = classifier.classify(b"\x00\x01", content_type)

        assert isinstance(result, BinaryContent)
        assert result.text == "AAE="

    def test_pdf_is_binary(self, classifier):
        result = classifier.classify(b"%PDF-1.7", "application/pdf")
        assert result.type == "binary"
