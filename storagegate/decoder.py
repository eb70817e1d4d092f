"""Upload payload decoding.

Turns each upload request kind into a body the storage client can consume
plus a resolved, never-empty content type. In-memory kinds are decoded by
plain functions; ``PayloadDecoder.open`` adds the kinds backed by a
resource (local file, remote stream) and scopes that resource's lifetime.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing, asynccontextmanager

from .errors import DecodeError, InvalidArgumentError, NotFoundError
from .fetcher import HttpFetcher
from .filesystem import Filesystem, LocalFilesystem
from .models import (
    DEFAULT_BINARY_CONTENT_TYPE,
    DEFAULT_TEXT_CONTENT_TYPE,
    Base64Upload,
    BufferEncoding,
    BufferUpload,
    DecodedPayload,
    FileUpload,
    StringUpload,
    UploadRequest,
    UrlUpload,
)

# data:<mime>;base64,  (mime may carry parameters, e.g. text/plain;charset=utf-8)
DATA_URI_PATTERN = re.compile(r"^data:([^,]*?);base64,", re.IGNORECASE)

_WHITESPACE = re.compile(r"\s+")


def _explicit(content_type: str | None) -> str | None:
    """Caller-supplied content type, or None when blank."""
    if content_type is None:
        return None
    return content_type.strip() or None


def split_data_uri(value: str) -> tuple[str | None, str]:
    """Split an optional data URI header from base64 content.

    Returns:
        (mime type from the header or None, remaining base64 payload)
    """
    value = value.strip()
    match = DATA_URI_PATTERN.match(value)
    if not match:
        return None, value
    mime = match.group(1).strip() or None
    return mime, value[match.end() :].strip()


def _b64decode(payload: str) -> bytes:
    payload = _WHITESPACE.sub("", payload)
    # Many encoders omit the trailing padding
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 content: {e}") from e


def decode_string(content: str, content_type: str | None = None) -> DecodedPayload:
    return DecodedPayload(
        body=content.encode("utf-8"),
        content_type=_explicit(content_type) or DEFAULT_TEXT_CONTENT_TYPE,
    )


def decode_base64(content: str, content_type: str | None = None) -> DecodedPayload:
    """Decode base64 content, honouring an optional data URI header.

    An explicit, non-blank ``content_type`` always wins over the mime type
    embedded in the header.
    """
    embedded_mime, payload = split_data_uri(content)
    resolved = _explicit(content_type) or embedded_mime or DEFAULT_BINARY_CONTENT_TYPE
    return DecodedPayload(body=_b64decode(payload), content_type=resolved)


_BUFFER_DECODERS: dict[BufferEncoding, Callable[[str], bytes]] = {
    BufferEncoding.HEX: bytes.fromhex,
    BufferEncoding.BASE64: _b64decode,
    BufferEncoding.UTF8: lambda content: content.encode("utf-8"),
    BufferEncoding.ASCII: lambda content: content.encode("ascii"),
    BufferEncoding.BINARY: lambda content: content.encode("latin-1"),
}


def decode_buffer(
    content: str,
    encoding: BufferEncoding | str | None = None,
    content_type: str | None = None,
) -> DecodedPayload:
    """Decode buffer content; ``encoding`` may be the enum or its plain value."""
    try:
        encoding = BufferEncoding(encoding or BufferEncoding.UTF8)
    except ValueError as e:
        raise InvalidArgumentError(
            f"Unsupported buffer encoding: {encoding}", detail=str(encoding)
        ) from e

    try:
        body = _BUFFER_DECODERS[encoding](content)
    except (ValueError, UnicodeEncodeError) as e:
        raise DecodeError(f"Content is not valid {encoding.value}: {e}") from e

    return DecodedPayload(
        body=body,
        content_type=_explicit(content_type) or DEFAULT_BINARY_CONTENT_TYPE,
    )


def guess_content_type(name: str) -> str | None:
    guessed, _ = mimetypes.guess_type(name)
    return guessed


class PayloadDecoder:
    """
    Decode any upload request into a ``DecodedPayload``.

    Usage:
        async with decoder.open(request) as payload:
            await storage.put_object(..., payload.body, payload.content_type)
    """

    def __init__(
        self,
        fetcher: HttpFetcher | None = None,
        filesystem: Filesystem | None = None,
    ):
        self._fetcher = fetcher
        self._filesystem = filesystem or LocalFilesystem()

    @asynccontextmanager
    async def open(self, request: UploadRequest) -> AsyncIterator[DecodedPayload]:
        """
        Open the payload of ``request``.

        Raises:
            NotFoundError: If a local file does not exist
            DecodeError: If base64 or buffer content cannot be decoded
            UpstreamFetchError: If the remote URL cannot be fetched
        """
        if isinstance(request, StringUpload):
            yield decode_string(request.content, request.content_type)
        elif isinstance(request, Base64Upload):
            yield decode_base64(request.base64_content, request.content_type)
        elif isinstance(request, BufferUpload):
            yield decode_buffer(request.content, request.encoding, request.content_type)
        elif isinstance(request, FileUpload):
            async with self._open_file(request) as payload:
                yield payload
        elif isinstance(request, UrlUpload):
            async with self._open_url(request) as payload:
                yield payload
        else:
            raise TypeError(f"Unsupported upload request: {type(request).__name__}")

    @asynccontextmanager
    async def _open_file(self, request: FileUpload) -> AsyncIterator[DecodedPayload]:
        path = request.file_path
        if not self._filesystem.exists(path):
            raise NotFoundError(path)

        content_type = (
            _explicit(request.content_type)
            or guess_content_type(request.file_name or path)
            or DEFAULT_BINARY_CONTENT_TYPE
        )
        with self._filesystem.open_read(path) as f:
            yield DecodedPayload(body=f, content_type=content_type)

    @asynccontextmanager
    async def _open_url(self, request: UrlUpload) -> AsyncIterator[DecodedPayload]:
        if self._fetcher is None:
            raise RuntimeError("Remote uploads not available (no fetcher configured)")

        async with self._fetcher.stream(str(request.source_url)) as remote:
            content_type = (
                _explicit(request.content_type)
                or remote.content_type
                or DEFAULT_BINARY_CONTENT_TYPE
            )
            async with aclosing(remote.iter_bytes()) as chunks:
                yield DecodedPayload(body=chunks, content_type=content_type)
