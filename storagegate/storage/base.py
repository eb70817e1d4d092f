"""Object storage client interface and result models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..types import ObjectKey

# callback(error, url) - exactly one of the two is set
SignedUrlCallback = Callable[[BaseException | None, str | None], None]


class PutResult(BaseModel):
    """Result of a successful object write."""

    etag: str | None = None
    version_id: str | None = None


class StoredObject(BaseModel):
    """Object body plus response headers (lower-cased names)."""

    body: bytes
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


class ObjectSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: ObjectKey
    size: int = 0
    etag: str | None = None
    last_modified: datetime | None = None


class ObjectListing(BaseModel):
    """One page of a bucket listing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prefix: str = ""
    delimiter: str = ""
    objects: list[ObjectSummary] = Field(default_factory=list)
    common_prefixes: list[str] = Field(default_factory=list)
    is_truncated: bool = False
    next_continuation_token: str | None = None


class StorageClient(ABC):
    """
    Object storage operations the gateway delegates to.

    Implementations raise ``StorageClientError`` (or ``ObjectNotFoundError``
    for a missing key) on failure. Retry policy, if any, lives here.
    """

    @abstractmethod
    async def put_object(
        self,
        bucket: str,
        region: str,
        key: str,
        body: Any,
        content_type: str,
    ) -> PutResult:
        """
        Write an object.

        Args:
            body: ``bytes``, a binary file object, or an async iterator of
                byte chunks consumed as the write progresses
        """

    @abstractmethod
    async def get_object(self, bucket: str, region: str, key: str) -> StoredObject:
        """Read an object fully."""

    @abstractmethod
    async def list_objects(
        self,
        bucket: str,
        region: str,
        prefix: str = "",
        delimiter: str = "",
        max_keys: int | None = None,
        continuation_token: str | None = None,
    ) -> ObjectListing:
        """List objects under ``prefix``."""

    @abstractmethod
    def get_signed_url(
        self,
        bucket: str,
        region: str,
        key: str,
        callback: SignedUrlCallback,
        expires_in: int = 900,
    ) -> None:
        """Generate a signed GET URL, reporting through ``callback``.

        The callback may be invoked from any thread.
        """
