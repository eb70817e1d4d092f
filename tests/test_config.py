"""Tests for gateway configuration."""

import os

import pytest
from pydantic import ValidationError

from storagegate import DEFAULT_TEXT_MIME_TYPES, GatewaySettings

# Environment variables to clear for isolated tests
STORAGEGATE_ENV_VARS = [
    "STORAGEGATE_BUCKET",
    "STORAGEGATE_REGION",
    "STORAGEGATE_ENDPOINT_URL",
    "STORAGEGATE_ACCESS_KEY_ID",
    "STORAGEGATE_SECRET_ACCESS_KEY",
    "STORAGEGATE_SIGNED_URL_EXPIRES_IN",
    "STORAGEGATE_FETCH_TIMEOUT",
    "STORAGEGATE_CHUNK_SIZE",
    "STORAGEGATE_REMOTE_FILE_PREFIX",
    "STORAGEGATE_TEXT_MIME_TYPES",
]


@pytest.fixture
def clean_env():
    """Clear all STORAGEGATE_ environment variables for isolated tests."""
    original = {k: os.environ.get(k) for k in STORAGEGATE_ENV_VARS}
    for k in STORAGEGATE_ENV_VARS:
        os.environ.pop(k, None)
    yield
    # Restore original values
    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.mark.usefixtures("clean_env")
class TestGatewaySettingsRequiredFields:
    """Test GatewaySettings required fields."""

    def test_bucket_is_required(self):
        with pytest.raises(ValidationError):
            GatewaySettings(region="ap-guangzhou")

    def test_region_is_required(self):
        with pytest.raises(ValidationError):
            GatewaySettings(bucket="assets")

    def test_empty_bucket_rejected(self):
        with pytest.raises(ValidationError):
            GatewaySettings(bucket="", region="ap-guangzhou")


@pytest.mark.usefixtures("clean_env")
class TestGatewaySettingsDefaults:
    """Test GatewaySettings defaults."""

    def test_defaults(self):
        settings = GatewaySettings(bucket="assets", region="ap-guangzhou")

        assert settings.endpoint_url is None
        assert settings.access_key_id is None
        assert settings.secret_access_key is None
        assert settings.signed_url_expires_in == 900
        assert settings.fetch_timeout == 30.0
        assert settings.chunk_size == 8192
        assert settings.remote_file_prefix == "remote_"
        assert settings.text_mime_types == DEFAULT_TEXT_MIME_TYPES

    def test_signed_url_expiry_must_be_positive(self):
        with pytest.raises(ValidationError):
            GatewaySettings(bucket="assets", region="r", signed_url_expires_in=0)

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            GatewaySettings(bucket="assets", region="r", chunk_size=0)

    def test_endpoint_url_validated(self):
        with pytest.raises(ValidationError):
            GatewaySettings(bucket="assets", region="r", endpoint_url="not a url")


@pytest.mark.usefixtures("clean_env")
class TestGatewaySettingsFromEnv:
    """Test loading GatewaySettings from environment variables."""

    def test_loads_from_env(self):
        os.environ["STORAGEGATE_BUCKET"] = "env-bucket"
        os.environ["STORAGEGATE_REGION"] = "ap-shanghai"
        os.environ["STORAGEGATE_ENDPOINT_URL"] = "https://cos.ap-shanghai.myqcloud.com"
        os.environ["STORAGEGATE_SIGNED_URL_EXPIRES_IN"] = "60"

        settings = GatewaySettings()

        assert settings.bucket == "env-bucket"
        assert settings.region == "ap-shanghai"
        assert str(settings.endpoint_url).startswith("https://cos.ap-shanghai.myqcloud.com")
        assert settings.signed_url_expires_in == 60

    def test_text_mime_types_from_json(self):
        os.environ["STORAGEGATE_BUCKET"] = "b"
        os.environ["STORAGEGATE_REGION"] = "r"
        os.environ["STORAGEGATE_TEXT_MIME_TYPES"] = '["application/json", "application/toml"]'

        settings = GatewaySettings()

        assert settings.text_mime_types == frozenset({"application/json", "application/toml"})

    def test_explicit_values_override_env(self):
        os.environ["STORAGEGATE_BUCKET"] = "env-bucket"
        os.environ["STORAGEGATE_REGION"] = "env-region"

        settings = GatewaySettings(bucket="explicit", region="ap-guangzhou")

        assert settings.bucket == "explicit"
        assert settings.region == "ap-guangzhou"
