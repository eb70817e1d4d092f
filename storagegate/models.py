"""Request, payload and result models for the storage gateway.

Upload requests form a discriminated union on ``kind``: each kind carries
exactly one payload field and unknown fields are rejected, so a request can
never be ambiguous about where its bytes come from.

All models accept both snake_case field names and the camelCase names of
the original API (``filePath``, ``targetDir``, ``base64Content`` ...), and
``model_dump(by_alias=True)`` produces camelCase output.
"""

from enum import Enum
from typing import Annotated, Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, StrictStr, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Self

from .errors import ErrorCode, StorageGatewayError
from .types import FileName, LocalPath, ObjectKey, TargetDir

T = TypeVar("T")

DEFAULT_TEXT_CONTENT_TYPE = "text/plain"
DEFAULT_BINARY_CONTENT_TYPE = "application/octet-stream"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BufferEncoding(str, Enum):
    """Byte encodings accepted for buffer uploads."""

    HEX = "hex"
    BASE64 = "base64"
    UTF8 = "utf8"
    ASCII = "ascii"
    BINARY = "binary"


# =============================================================================
# Upload requests
# =============================================================================


class _UploadRequestBase(_CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    target_dir: TargetDir | None = None
    file_name: FileName | None = None
    content_type: StrictStr | None = None


class FileUpload(_UploadRequestBase):
    """Upload a local file. ``file_name`` defaults to the path's base name."""

    kind: Literal["file_path"] = "file_path"
    file_path: LocalPath

    @field_validator("file_name", mode="before")
    @classmethod
    def empty_file_name_as_absent(cls, v: Any) -> Any:
        """An empty ``file_name`` falls back to the path's base name."""
        return None if v == "" else v


class StringUpload(_UploadRequestBase):
    """Upload a string as UTF-8 bytes."""

    kind: Literal["string"] = "string"
    content: StrictStr
    file_name: FileName


class Base64Upload(_UploadRequestBase):
    """Upload base64 content, optionally prefixed with a data URI header."""

    kind: Literal["base64"] = "base64"
    base64_content: StrictStr
    file_name: FileName


class BufferUpload(_UploadRequestBase):
    """Upload string content decoded with a byte encoding."""

    kind: Literal["buffer"] = "buffer"
    content: StrictStr
    file_name: FileName
    encoding: BufferEncoding | None = None


class UrlUpload(_UploadRequestBase):
    """Stream a remote URL into storage. ``file_name`` defaults to a generated id."""

    kind: Literal["remote_url"] = "remote_url"
    source_url: HttpUrl


UploadRequest = Annotated[
    Union[FileUpload, StringUpload, Base64Upload, BufferUpload, UrlUpload],
    Field(discriminator="kind"),
]


# =============================================================================
# Decoded payloads and download results
# =============================================================================


class DecodedPayload(BaseModel):
    """Body ready for the storage client plus its resolved content type.

    ``body`` is ``bytes``, an open binary file object, or an async iterator
    of byte chunks (remote streams).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    body: Any
    content_type: str = Field(min_length=1)


class ImageContent(_CamelModel):
    type: Literal["image"] = "image"
    data: str
    mime_type: str


class AudioContent(_CamelModel):
    type: Literal["audio"] = "audio"
    data: str
    mime_type: str


class TextContent(_CamelModel):
    type: Literal["text"] = "text"
    text: str


class BinaryContent(_CamelModel):
    """Binary object rendered as base64 text."""

    type: Literal["binary"] = "binary"
    text: str


DownloadResult = Annotated[
    Union[ImageContent, AudioContent, TextContent, BinaryContent],
    Field(discriminator="type"),
]


class UploadReceipt(_CamelModel):
    """Where an upload landed."""

    key: ObjectKey
    bucket: str
    region: str
    content_type: str
    etag: str | None = None


class SignedUrl(_CamelModel):
    url: str
    key: ObjectKey
    expires_in: int


# =============================================================================
# Outcome envelope
# =============================================================================


class ErrorInfo(_CamelModel):
    """Failure detail carried in the ``data`` field of a failed Outcome."""

    code: ErrorCode
    message: str
    detail: str | None = None


class Outcome(_CamelModel, Generic[T]):
    """
    Uniform result of every gateway operation.

    ``data`` holds the operation result on success and an ``ErrorInfo`` on
    failure. Gateway operations return this instead of raising.
    """

    is_success: bool
    message: str
    data: T | ErrorInfo | None = None

    @classmethod
    def success(cls, message: str, data: T) -> Self:
        """Create a successful outcome."""
        return cls(is_success=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, error: StorageGatewayError) -> Self:
        """Create a failed outcome from a gateway error."""
        return cls(
            is_success=False,
            message=message,
            data=ErrorInfo(code=error.code, message=error.message, detail=error.detail),
        )

    @property
    def error(self) -> ErrorInfo | None:
        """Get error detail if this is a failed outcome."""
        if not self.is_success and isinstance(self.data, ErrorInfo):
            return self.data
        return None
