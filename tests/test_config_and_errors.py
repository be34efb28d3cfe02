"""Tests for handler configuration and the error variant."""

import json

import pytest

from pw_shared import ApiError, ConfigurationError, ErrorKind, ReadConfig, UploadConfig, WriteConfig

READ_ENV = {
    "STACK_METADATA_TABLE": "Stacks",
    "STACK_METADATA_GSI": "ByTimestamp",
    "MEDIA_METADATA_TABLE": "Media",
    "MEDIA_METADATA_GSI": "ByStack",
}


class TestConfig:
    """Test suite for config loading."""

    def test_read_config_from_mapping(self):
        """Test that the read config maps each variable."""
        config = ReadConfig.from_env(READ_ENV)

        assert config.stack_table == "Stacks"
        assert config.stack_index == "ByTimestamp"
        assert config.media_table == "Media"
        assert config.media_index == "ByStack"

    def test_empty_value_counts_as_missing(self):
        """Test that an empty variable is rejected like an absent one."""
        with pytest.raises(ConfigurationError, match="MEDIA_METADATA_TABLE environment variable is missing."):
            WriteConfig.from_env({"STACK_METADATA_TABLE": "Stacks", "MEDIA_METADATA_TABLE": ""})

    def test_config_is_immutable(self):
        """Test that a loaded config cannot be changed."""
        config = WriteConfig.from_env({"STACK_METADATA_TABLE": "Stacks", "MEDIA_METADATA_TABLE": "Media"})

        with pytest.raises(Exception):
            config.stack_table = "Other"

    def test_upload_ttl_must_be_positive(self):
        """Test that a zero URL lifetime is rejected."""
        env = {"S3_BUCKET_NAME": "bucket", "S3_URL_TTL": "0", "CDN_DOMAIN_URL": "cdn.example.com"}

        with pytest.raises(ConfigurationError, match="S3_URL_TTL"):
            UploadConfig.from_env(env)

    def test_upload_config(self):
        """Test that the TTL is parsed as seconds."""
        env = {"S3_BUCKET_NAME": "bucket", "S3_URL_TTL": "300", "CDN_DOMAIN_URL": "cdn.example.com"}

        config = UploadConfig.from_env(env)

        assert config.url_ttl_seconds == 300
        assert config.cdn_domain_url == "cdn.example.com"


class TestApiError:
    """Test suite for ApiError."""

    @pytest.mark.parametrize(
        "factory, kind, status",
        [
            (ApiError.validation, ErrorKind.VALIDATION, 400),
            (ApiError.not_found, ErrorKind.NOT_FOUND, 404),
            (ApiError.data_integrity, ErrorKind.DATA_INTEGRITY, 500),
            (ApiError.dependency, ErrorKind.DEPENDENCY, 500),
            (ApiError.internal, ErrorKind.INTERNAL, 500),
        ],
    )
    def test_kinds_map_to_status(self, factory, kind, status):
        """Test that each kind carries its HTTP status."""
        error = factory("boom")

        assert error.kind is kind
        assert error.status_code == status

    def test_to_response(self):
        """Test the API Gateway rendering."""
        response = ApiError.not_found("No stacks found!").to_response()

        assert response["statusCode"] == 404
        assert response["headers"] == {"Content-Type": "application/json"}
        assert json.loads(response["body"]) == {"message": "No stacks found!"}
