"""Gateway configuration.

Loaded from ``STORAGEGATE_`` environment variables via pydantic-settings.
"""

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from .classifier import DEFAULT_TEXT_MIME_TYPES


class GatewaySettings(BaseSettings):
    """
    Storage gateway configuration.

    Uses Pydantic BaseSettings for automatic environment variable loading.
    Environment variables are prefixed with STORAGEGATE_.

    Required environment variables:
        STORAGEGATE_BUCKET: Bucket all operations target
        STORAGEGATE_REGION: Bucket region (e.g., "ap-guangzhou", "us-east-1")

    Optional environment variables:
        STORAGEGATE_ENDPOINT_URL: S3-compatible endpoint (COS, MinIO); AWS default if unset
        STORAGEGATE_ACCESS_KEY_ID: Access key (default: boto3 credential chain)
        STORAGEGATE_SECRET_ACCESS_KEY: Secret key (default: boto3 credential chain)
        STORAGEGATE_SIGNED_URL_EXPIRES_IN: Signed URL lifetime in seconds (default: 900)
        STORAGEGATE_FETCH_TIMEOUT: Remote fetch timeout in seconds (default: 30)
        STORAGEGATE_CHUNK_SIZE: Remote stream chunk size in bytes (default: 8192)
        STORAGEGATE_REMOTE_FILE_PREFIX: Prefix of generated remote file names (default: "remote_")
        STORAGEGATE_TEXT_MIME_TYPES: JSON list of non-text/* types downloaded as text
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGEGATE_",
        extra="ignore",
    )

    bucket: str = Field(min_length=1)
    region: str = Field(min_length=1)

    endpoint_url: HttpUrl | None = None

    # Credentials - both or neither, otherwise boto3 resolves its own chain
    access_key_id: str | None = None
    secret_access_key: str | None = None

    signed_url_expires_in: int = Field(default=900, ge=1)

    # Only the remote fetch is timed out here; the storage SDK owns its own policy
    fetch_timeout: float = Field(default=30.0, gt=0)

    chunk_size: int = Field(default=8192, ge=1)

    remote_file_prefix: str = "remote_"

    text_mime_types: frozenset[str] = DEFAULT_TEXT_MIME_TYPES
