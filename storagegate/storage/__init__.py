"""Object storage client interface and the boto3 implementation.

The gateway only talks to ``StorageClient``; ``S3StorageClient`` is the
default implementation for S3-compatible endpoints.
"""

from .base import (
    ObjectListing,
    ObjectSummary,
    PutResult,
    SignedUrlCallback,
    StorageClient,
    StoredObject,
)
from .s3 import AsyncIteratorReader, S3StorageClient

__all__ = [
    "AsyncIteratorReader",
    "ObjectListing",
    "ObjectSummary",
    "PutResult",
    "S3StorageClient",
    "SignedUrlCallback",
    "StorageClient",
    "StoredObject",
]
