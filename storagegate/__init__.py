"""storagegate - async object storage gateway.

Uploads from a local path, string, base64 (with or without a data URI
header), encoded buffer or remote URL; downloads classified as
image/audio/text/binary; listing and signed URLs. Every operation returns
an ``Outcome`` envelope instead of raising.

Example:
    from storagegate import GatewaySettings, StorageGateway

    settings = GatewaySettings(bucket="assets-1250000000", region="ap-guangzhou")

    async with StorageGateway(settings) as gateway:
        outcome = await gateway.upload_base64(
            {
                "base64Content": "data:image/png;base64,iVBORw0KGgo=",
                "fileName": "logo.png",
                "targetDir": "/images/",
            }
        )
        # outcome.data.key == "images/logo.png"
        # outcome.data.content_type == "image/png"

        downloaded = await gateway.download("images/logo.png")
        # downloaded.data.type == "image"
"""

from importlib.metadata import PackageNotFoundError, version

from .classifier import DEFAULT_TEXT_MIME_TYPES, ContentClassifier
from .config import GatewaySettings
from .decoder import PayloadDecoder, decode_base64, decode_buffer, decode_string
from .errors import (
    DecodeError,
    ErrorCode,
    InvalidArgumentError,
    NotFoundError,
    ObjectNotFoundError,
    StorageClientError,
    StorageGatewayError,
    UpstreamFetchError,
)
from .fetcher import HttpFetcher, RemoteStream
from .filesystem import Filesystem, IdGenerator, LocalFilesystem, default_id_generator
from .gateway import StorageGateway
from .keys import build_key
from .models import (
    AudioContent,
    Base64Upload,
    BinaryContent,
    BufferEncoding,
    BufferUpload,
    DecodedPayload,
    DownloadResult,
    ErrorInfo,
    FileUpload,
    ImageContent,
    Outcome,
    SignedUrl,
    StringUpload,
    TextContent,
    UploadReceipt,
    UploadRequest,
    UrlUpload,
)
from .storage import (
    ObjectListing,
    ObjectSummary,
    PutResult,
    S3StorageClient,
    StorageClient,
    StoredObject,
)

try:
    __version__ = version("storagegate")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "DEFAULT_TEXT_MIME_TYPES",
    "AudioContent",
    "Base64Upload",
    "BinaryContent",
    "BufferEncoding",
    "BufferUpload",
    "ContentClassifier",
    "DecodeError",
    "DecodedPayload",
    "DownloadResult",
    "ErrorCode",
    "ErrorInfo",
    "FileUpload",
    "Filesystem",
    "GatewaySettings",
    "HttpFetcher",
    "IdGenerator",
    "ImageContent",
    "InvalidArgumentError",
    "LocalFilesystem",
    "NotFoundError",
    "ObjectListing",
    "ObjectNotFoundError",
    "ObjectSummary",
    "Outcome",
    "PayloadDecoder",
    "PutResult",
    "RemoteStream",
    "S3StorageClient",
    "SignedUrl",
    "StorageClient",
    "StorageClientError",
    "StorageGateway",
    "StorageGatewayError",
    "StoredObject",
    "StringUpload",
    "TextContent",
    "UploadReceipt",
    "UploadRequest",
    "UpstreamFetchError",
    "UrlUpload",
    # Version
    "__version__",
    "build_key",
    "decode_base64",
    "decode_buffer",
    "decode_string",
    "default_id_generator",
]
