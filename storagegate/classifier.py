"""Download content classification.

Maps raw object bytes plus their content type to a typed payload that can
be handed to consumers expecting printable data.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable

from .models import AudioContent, BinaryContent, DownloadResult, ImageContent, TextContent

# Structured text formats served without a text/ prefix
DEFAULT_TEXT_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/json",
        "application/ld+json",
        "application/xml",
        "application/xhtml+xml",
        "application/javascript",
        "application/x-javascript",
        "application/yaml",
        "application/x-yaml",
        "application/x-sh",
        "application/sql",
        "application/graphql",
        "application/x-www-form-urlencoded",
    }
)


def _media_type(content_type: str) -> str:
    """Drop parameters such as ``; charset=utf-8``."""
    return content_type.split(";", 1)[0].strip()


class ContentClassifier:
    """Classify downloaded bytes into image, audio, text or binary content.

    Classification order, first match wins:

    1. ``image/*`` -> ImageContent (base64 data)
    2. ``audio/*`` -> AudioContent (base64 data)
    3. ``text/*`` or a configured text-equivalent type -> TextContent
    4. anything else -> BinaryContent (base64 text)
    """

    def __init__(self, text_mime_types: Iterable[str] | None = None):
        if text_mime_types is None:
            text_mime_types = DEFAULT_TEXT_MIME_TYPES
        self._text_mime_types = frozenset(t.lower() for t in text_mime_types)

    @property
    def text_mime_types(self) -> frozenset[str]:
        return self._text_mime_types

    def is_text(self, content_type: str) -> bool:
        normalized = content_type.lower()
        return (
            normalized.startswith("text/")
            or _media_type(normalized) in self._text_mime_types
        )

    def classify(self, body: bytes, content_type: str | None) -> DownloadResult:
        normalized = (content_type or "").lower()

        if normalized.startswith("image/"):
            return ImageContent(data=_b64(body), mime_type=normalized)
        if normalized.startswith("audio/"):
            return AudioContent(data=_b64(body), mime_type=normalized)
        if self.is_text(normalized):
            # Best effort, malformed sequences are replaced rather than rejected
            return TextContent(text=body.decode("utf-8", errors="replace"))
        return BinaryContent(text=_b64(body))


def _b64(body: bytes) -> str:
    return base64.b64encode(body).decode("ascii")
