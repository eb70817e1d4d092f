"""Storage gateway.

Validates requests, resolves object keys, decodes upload payloads and
delegates to a ``StorageClient``. Every public operation returns an
``Outcome``; no exception crosses the gateway boundary.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from .classifier import ContentClassifier
from .config import GatewaySettings
from .decoder import PayloadDecoder
from .errors import InvalidArgumentError, StorageClientError, StorageGatewayError
from .fetcher import HttpFetcher
from .filesystem import Filesystem, IdGenerator, default_id_generator
from .keys import build_key
from .models import (
    Base64Upload,
    BufferUpload,
    DownloadResult,
    FileUpload,
    Outcome,
    SignedUrl,
    StringUpload,
    UploadReceipt,
    UploadRequest,
    UrlUpload,
)
from .storage import ObjectListing, S3StorageClient, StorageClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_UPLOAD_REQUEST = TypeAdapter(UploadRequest)
_UPLOAD_REQUEST_TYPES = (FileUpload, StringUpload, Base64Upload, BufferUpload, UrlUpload)

UPLOAD_SUCCEEDED = "Upload succeeded"
UPLOAD_FAILED = "Upload failed"
DOWNLOAD_SUCCEEDED = "Download succeeded"
DOWNLOAD_FAILED = "Download failed"
LIST_SUCCEEDED = "List objects succeeded"
LIST_FAILED = "List objects failed"
SIGN_SUCCEEDED = "Signed URL generated"
SIGN_FAILED = "Signed URL generation failed"

# S3 ListObjectsV2 page size limit
MAX_LIST_KEYS = 1000


def _invalid_argument(e: ValidationError) -> InvalidArgumentError:
    """List every violated constraint of a validation error."""
    violations = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'request'}: {err['msg']}"
        for err in e.errors()
    )
    return InvalidArgumentError(f"Invalid parameters: {violations}", detail=violations)


def _coerce(model: type[M], params: M | Mapping[str, Any]) -> M:
    if isinstance(params, model):
        return params
    if not isinstance(params, Mapping):
        raise InvalidArgumentError(
            f"Expected {model.__name__} or a mapping, got {type(params).__name__}"
        )
    try:
        return model.model_validate(dict(params))
    except ValidationError as e:
        raise _invalid_argument(e) from e


def _require_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise InvalidArgumentError("key must be a non-empty string")
    return key


class StorageGateway:
    """
    Object storage operations over a single bucket.

    Example:
        settings = GatewaySettings(bucket="assets-1250000000", region="ap-guangzhou")

        async with StorageGateway(settings) as gateway:
            outcome = await gateway.upload_string(
                {"content": "hello", "fileName": "hello.txt", "targetDir": "/greetings/"}
            )
            if outcome.is_success:
                print(outcome.data.key)  # greetings/hello.txt
    """

    def __init__(
        self,
        settings: GatewaySettings,
        storage: StorageClient | None = None,
        fetcher: HttpFetcher | None = None,
        filesystem: Filesystem | None = None,
        id_generator: IdGenerator | None = None,
    ):
        self._settings = settings
        self._storage = storage or S3StorageClient.from_settings(settings)
        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher or HttpFetcher(
            timeout=settings.fetch_timeout,
            chunk_size=settings.chunk_size,
        )
        self._decoder = PayloadDecoder(self._fetcher, filesystem)
        self._classifier = ContentClassifier(settings.text_mime_types)
        self._id_generator = id_generator or default_id_generator

    @property
    def bucket(self) -> str:
        return self._settings.bucket

    @property
    def region(self) -> str:
        return self._settings.region

    async def close(self) -> None:
        """Close the HTTP fetcher if the gateway created it."""
        if self._owns_fetcher:
            await self._fetcher.close()

    async def __aenter__(self) -> StorageGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # =========================================================================
    # Uploads
    # =========================================================================

    async def upload(
        self, request: UploadRequest | Mapping[str, Any]
    ) -> Outcome[UploadReceipt]:
        """Upload any request kind; mappings must carry ``kind``."""
        if not isinstance(request, _UPLOAD_REQUEST_TYPES):
            if not isinstance(request, Mapping):
                return self._failure(
                    UPLOAD_FAILED,
                    InvalidArgumentError(
                        f"Expected an upload request or a mapping, got {type(request).__name__}"
                    ),
                )
            try:
                request = _UPLOAD_REQUEST.validate_python(dict(request))
            except ValidationError as e:
                return self._failure(UPLOAD_FAILED, _invalid_argument(e))
        return await self._upload(request)

    async def upload_file(
        self, params: FileUpload | Mapping[str, Any]
    ) -> Outcome[UploadReceipt]:
        """Upload a local file by path."""
        return await self._validate_and_upload(FileUpload, params)

    async def upload_string(
        self, params: StringUpload | Mapping[str, Any]
    ) -> Outcome[UploadReceipt]:
        """Upload a string as UTF-8 (default content type ``text/plain``)."""
        return await self._validate_and_upload(StringUpload, params)

    async def upload_base64(
        self, params: Base64Upload | Mapping[str, Any]
    ) -> Outcome[UploadReceipt]:
        """Upload base64 content, with or without a data URI header."""
        return await self._validate_and_upload(Base64Upload, params)

    async def upload_buffer(
        self, params: BufferUpload | Mapping[str, Any]
    ) -> Outcome[UploadReceipt]:
        """Upload content decoded with hex/base64/utf8/ascii/binary encoding."""
        return await self._validate_and_upload(BufferUpload, params)

    async def upload_from_url(
        self, params: UrlUpload | Mapping[str, Any]
    ) -> Outcome[UploadReceipt]:
        """Stream a remote URL into the bucket without buffering it in memory."""
        return await self._validate_and_upload(UrlUpload, params)

    async def _validate_and_upload(
        self, model: type[UploadRequest], params: Any
    ) -> Outcome[UploadReceipt]:
        try:
            request = _coerce(model, params)
        except InvalidArgumentError as e:
            return self._failure(UPLOAD_FAILED, e)
        return await self._upload(request)

    def _resolve_file_name(self, request: UploadRequest) -> str:
        if request.file_name:
            return request.file_name
        if isinstance(request, FileUpload):
            name = PurePath(request.file_path).name
            if not name:
                raise InvalidArgumentError(
                    f"Cannot derive a file name from path: {request.file_path}"
                )
            return name
        if isinstance(request, UrlUpload):
            return self._id_generator(self._settings.remote_file_prefix)
        # Other kinds require file_name at validation time
        raise InvalidArgumentError("file_name is required")

    async def _upload(self, request: UploadRequest) -> Outcome[UploadReceipt]:
        logger.info(f"Uploading {request.kind} content to bucket={self.bucket}")
        try:
            async with self._decoder.open(request) as payload:
                key = build_key(self._resolve_file_name(request), request.target_dir)
                result = await self._storage.put_object(
                    self.bucket,
                    self.region,
                    key,
                    payload.body,
                    payload.content_type,
                )
        except StorageGatewayError as e:
            return self._failure(UPLOAD_FAILED, e)
        except Exception as e:
            return self._unexpected(UPLOAD_FAILED, e)

        logger.info(f"Uploaded {key} ({payload.content_type})")
        return Outcome.success(
            UPLOAD_SUCCEEDED,
            UploadReceipt(
                key=key,
                bucket=self.bucket,
                region=self.region,
                content_type=payload.content_type,
                etag=result.etag,
            ),
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def download(self, key: str) -> Outcome[DownloadResult]:
        """Download an object and classify it as image/audio/text/binary."""
        try:
            key = _require_key(key)
            stored = await self._storage.get_object(self.bucket, self.region, key)
            result = self._classifier.classify(stored.body, stored.content_type)
        except StorageGatewayError as e:
            return self._failure(DOWNLOAD_FAILED, e)
        except Exception as e:
            return self._unexpected(DOWNLOAD_FAILED, e)

        return Outcome.success(DOWNLOAD_SUCCEEDED, result)

    async def list_objects(
        self,
        prefix: str = "",
        delimiter: str = "",
        max_keys: int | None = None,
        continuation_token: str | None = None,
    ) -> Outcome[ObjectListing]:
        """List objects under ``prefix`` (one page)."""
        try:
            if not isinstance(prefix, str) or not isinstance(delimiter, str):
                raise InvalidArgumentError("prefix and delimiter must be strings")
            if max_keys is not None and not (
                isinstance(max_keys, int) and 1 <= max_keys <= MAX_LIST_KEYS
            ):
                raise InvalidArgumentError(
                    f"max_keys must be an integer between 1 and {MAX_LIST_KEYS}"
                )
            listing = await self._storage.list_objects(
                self.bucket,
                self.region,
                prefix,
                delimiter,
                max_keys,
                continuation_token,
            )
        except StorageGatewayError as e:
            return self._failure(LIST_FAILED, e)
        except Exception as e:
            return self._unexpected(LIST_FAILED, e)

        return Outcome.success(LIST_SUCCEEDED, listing)

    async def get_signed_url(
        self, key: str, expires_in: int | None = None
    ) -> Outcome[SignedUrl]:
        """Generate a signed GET URL for ``key``."""
        try:
            key = _require_key(key)
            if expires_in is None:
                expires_in = self._settings.signed_url_expires_in
            if not isinstance(expires_in, int) or expires_in < 1:
                raise InvalidArgumentError("expires_in must be a positive integer")
            url = await self._await_signed_url(key, expires_in)
        except StorageGatewayError as e:
            return self._failure(SIGN_FAILED, e)
        except Exception as e:
            return self._unexpected(SIGN_FAILED, e)

        return Outcome.success(SIGN_SUCCEEDED, SignedUrl(url=url, key=key, expires_in=expires_in))

    async def _await_signed_url(self, key: str, expires_in: int) -> str:
        """Bridge the callback-style signing API into an awaitable."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def _settle(error: BaseException | None, url: str | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            elif not url:
                future.set_exception(StorageClientError("Signing returned no URL"))
            else:
                future.set_result(url)

        def _callback(error: BaseException | None, url: str | None) -> None:
            # May be called from a worker thread
            loop.call_soon_threadsafe(_settle, error, url)

        self._storage.get_signed_url(self.bucket, self.region, key, _callback, expires_in)
        return await future

    # =========================================================================
    # Failure mapping
    # =========================================================================

    def _failure(self, message: str, error: StorageGatewayError) -> Outcome[Any]:
        logger.error(f"{message}: [{error.code.value}] {error.message}")
        return Outcome.failure(f"{message}: {error.message}", error)

    def _unexpected(self, message: str, error: Exception) -> Outcome[Any]:
        wrapped = StorageClientError(
            f"Unexpected {type(error).__name__}: {error}", detail=repr(error)
        )
        return self._failure(message, wrapped)
