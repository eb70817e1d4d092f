"""S3-compatible storage client backed by boto3.

Works with AWS S3 and with S3-compatible providers (Tencent COS, MinIO)
through ``endpoint_url``. boto3 is blocking, so every call runs in a worker
thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator
from typing import Any

import boto3
from boto3.exceptions import Boto3Error
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import GatewaySettings
from ..errors import ObjectNotFoundError, StorageClientError
from .base import (
    ObjectListing,
    ObjectSummary,
    PutResult,
    SignedUrlCallback,
    StorageClient,
    StoredObject,
)

logger = logging.getLogger(__name__)

# Streamed bodies must be read in order from a single thread
STREAMING_TRANSFER_CONFIG = TransferConfig(use_threads=False)

_SDK_ERRORS = (ClientError, BotoCoreError, Boto3Error)


def _error_message(e: Exception) -> str:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Message", str(e))
    return str(e)


def _is_missing_key(e: Exception) -> bool:
    if not isinstance(e, ClientError):
        return False
    return e.response.get("Error", {}).get("Code", "") in ("404", "NoSuchKey")


class AsyncIteratorReader:
    """
    Blocking, non-seekable file object over an async iterator of chunks.

    ``read`` pulls the next chunk from the event loop that owns the
    iterator, so it must be called from a worker thread, never from the
    loop itself. Only as many chunks as the reader asks for are fetched.
    """

    def __init__(self, chunks: AsyncIterator[bytes], loop: asyncio.AbstractEventLoop):
        self._chunks = chunks
        self._loop = loop
        self._buffer = bytearray()
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    async def _next_chunk(self) -> bytes | None:
        try:
            return await self._chunks.__anext__()
        except StopAsyncIteration:
            return None

    def read(self, size: int = -1) -> bytes:
        while not self._exhausted and (size < 0 or len(self._buffer) < size):
            chunk = asyncio.run_coroutine_threadsafe(
                self._next_chunk(), self._loop
            ).result()
            if chunk is None:
                self._exhausted = True
            else:
                self._buffer.extend(chunk)

        if size < 0 or size >= len(self._buffer):
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
        return data


class S3StorageClient(StorageClient):
    """
    StorageClient for S3-compatible object storage.

    One boto3 client is created lazily per region.

    Example:
        >>> client = S3StorageClient(
        ...     endpoint_url="https://cos.ap-guangzhou.myqcloud.com",
        ...     access_key_id="AKID...",
        ...     secret_access_key="...",
        ... )
    """

    def __init__(
        self,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        session: boto3.session.Session | None = None,
    ):
        self._endpoint_url = endpoint_url
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._session = session or boto3.session.Session()
        self._clients: dict[str, Any] = {}

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        session: boto3.session.Session | None = None,
    ) -> S3StorageClient:
        return cls(
            endpoint_url=str(settings.endpoint_url) if settings.endpoint_url else None,
            access_key_id=settings.access_key_id,
            secret_access_key=settings.secret_access_key,
            session=session,
        )

    def _client_for(self, region: str) -> Any:
        client = self._clients.get(region)
        if client is not None:
            return client

        config: dict[str, Any] = {"region_name": region}
        if self._endpoint_url:
            config["endpoint_url"] = self._endpoint_url
        # Credentials only when both are set, otherwise use the boto3 chain
        if self._access_key_id and self._secret_access_key:
            config["aws_access_key_id"] = self._access_key_id
            config["aws_secret_access_key"] = self._secret_access_key

        try:
            client = self._session.client("s3", **config)
        except BotoCoreError as e:
            raise StorageClientError(f"Failed to initialize S3 client: {e}") from e

        logger.info(
            f"Created S3 client for region={region}, "
            f"endpoint={self._endpoint_url or 'AWS S3 default'}"
        )
        self._clients[region] = client
        return client

    async def put_object(
        self,
        bucket: str,
        region: str,
        key: str,
        body: Any,
        content_type: str,
    ) -> PutResult:
        client = self._client_for(region)
        logger.info(f"Uploading object key={key}, bucket={bucket}, content_type={content_type}")

        try:
            if isinstance(body, (bytes, bytearray)):
                response = await asyncio.to_thread(
                    client.put_object,
                    Bucket=bucket,
                    Key=key,
                    Body=bytes(body),
                    ContentType=content_type,
                )
                result = PutResult(
                    etag=response.get("ETag"),
                    version_id=response.get("VersionId"),
                )
            else:
                if hasattr(body, "read"):
                    fileobj = body
                    transfer_config = None
                else:
                    fileobj = AsyncIteratorReader(body, asyncio.get_running_loop())
                    transfer_config = STREAMING_TRANSFER_CONFIG
                await asyncio.to_thread(
                    client.upload_fileobj,
                    fileobj,
                    bucket,
                    key,
                    ExtraArgs={"ContentType": content_type},
                    Config=transfer_config,
                )
                # upload_fileobj does not surface the ETag
                result = PutResult()
        except _SDK_ERRORS as e:
            error_msg = f"Failed to upload object {key}: {_error_message(e)}"
            logger.error(error_msg)
            raise StorageClientError(error_msg, detail=str(e)) from e

        logger.info(f"Successfully uploaded {key}")
        return result

    async def get_object(self, bucket: str, region: str, key: str) -> StoredObject:
        client = self._client_for(region)
        logger.info(f"Downloading object key={key}, bucket={bucket}")

        def _get() -> tuple[dict[str, Any], bytes]:
            response = client.get_object(Bucket=bucket, Key=key)
            return response, response["Body"].read()

        try:
            response, content = await asyncio.to_thread(_get)
        except _SDK_ERRORS as e:
            if _is_missing_key(e):
                logger.warning(f"Object not found: {key}")
                raise ObjectNotFoundError(key) from e
            error_msg = f"Failed to download object {key}: {_error_message(e)}"
            logger.error(error_msg)
            raise StorageClientError(error_msg, detail=str(e)) from e

        raw_headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
        headers = {name.lower(): str(value) for name, value in raw_headers.items()}
        if response.get("ContentType"):
            headers["content-type"] = response["ContentType"]

        logger.info(f"Successfully downloaded {key} ({len(content)} bytes)")
        return StoredObject(body=content, headers=headers)

    async def list_objects(
        self,
        bucket: str,
        region: str,
        prefix: str = "",
        delimiter: str = "",
        max_keys: int | None = None,
        continuation_token: str | None = None,
    ) -> ObjectListing:
        client = self._client_for(region)
        logger.info(f"Listing objects prefix={prefix!r}, bucket={bucket}")

        params: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter
        if max_keys is not None:
            params["MaxKeys"] = max_keys
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        try:
            response = await asyncio.to_thread(client.list_objects_v2, **params)
        except _SDK_ERRORS as e:
            error_msg = f"Failed to list objects: {_error_message(e)}"
            logger.error(error_msg)
            raise StorageClientError(error_msg, detail=str(e)) from e

        return ObjectListing(
            prefix=prefix,
            delimiter=delimiter,
            objects=[
                ObjectSummary(
                    key=item["Key"],
                    size=item.get("Size", 0),
                    etag=item.get("ETag"),
                    last_modified=item.get("LastModified"),
                )
                for item in response.get("Contents", [])
            ],
            common_prefixes=[p["Prefix"] for p in response.get("CommonPrefixes", [])],
            is_truncated=response.get("IsTruncated", False),
            next_continuation_token=response.get("NextContinuationToken"),
        )

    def get_signed_url(
        self,
        bucket: str,
        region: str,
        key: str,
        callback: SignedUrlCallback,
        expires_in: int = 900,
    ) -> None:
        try:
            client = self._client_for(region)
        except StorageClientError as e:
            callback(e, None)
            return

        def _sign() -> None:
            try:
                url = client.generate_presigned_url(
                    ClientMethod="get_object",
                    Params={"Bucket": bucket, "Key": key},
                    ExpiresIn=expires_in,
                )
            except _SDK_ERRORS as e:
                error_msg = f"Failed to generate signed URL for {key}: {_error_message(e)}"
                logger.error(error_msg)
                callback(StorageClientError(error_msg, detail=str(e)), None)
                return
            callback(None, url)

        threading.Thread(target=_sign, name=f"sign-{key}", daemon=True).start()
