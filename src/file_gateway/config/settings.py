# src/file_gateway/config/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from file_gateway.config import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="file-gateway",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID",
        validate_default=True,
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY",
        validate_default=True,
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL",
        validate_default=True,
    )

    # Blob store
    s3_bucket_name: str = Field(
        default="file-gateway-storage",
        description="Bucket holding every uploaded file"
    )

    blob_prefix: str = Field(
        default="files/",
        description="Key prefix for uploaded files; the full key is <prefix><fileName>"
    )

    signed_url_expiry_seconds: int = Field(
        default=604800,
        ge=1,
        le=604800,
        description="Lifetime of signed read links (SigV4 caps presigned URLs at 7 days)"
    )

    # Metadata store
    metadata_backend: str = Field(
        default="sqlite",
        description="Document store backend: sqlite or mongo"
    )

    sqlite_db_path: str = Field(
        default="gateway.db",
        description="SQLite file used by the sqlite backend"
    )

    mongodb_uri: Optional[str] = Field(
        default=None,
        alias="MONGODB_URI",
        description="MongoDB connection string used by the mongo backend"
    )

    mongodb_database: Optional[str] = Field(
        default=None,
        description="MongoDB database name (defaults to the one in the URI)"
    )

    files_collection: str = Field(
        default="files",
        description="Collection holding one record per uploaded file"
    )

    downloads_collection: str = Field(
        default="downloads",
        description="Externally populated collection of download events"
    )

    # HTTP
    cors_allowed_origins: List[str] = Field(
        default=["http://localhost:5173"],
        description="Origins allowed to call the API from a browser"
    )

    upload_date_format: str = Field(
        default="%m/%d/%Y, %I:%M:%S %p",
        description="strftime format of uploadDate in the file listing"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode', mode='before')
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local-mock": "local-dev",
                "cloud": "aws-prod",
            }
            return mode_mapping.get(v, v)
        return v

    @field_validator('deployment_mode')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "aws-mock", "aws-prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator('aws_access_key_id', 'aws_secret_access_key')
    @classmethod
    def set_mock_credentials_for_local_modes(cls, v, info: ValidationInfo):
        """Auto-set mock credentials for local modes if not provided."""
        if v is None and info.data.get('deployment_mode') in ["local-dev", "aws-mock"]:
            return "mock"
        # In production, None lets the execution role handle auth
        return v

    @field_validator('aws_endpoint_url')
    @classmethod
    def set_endpoint_url_based_on_mode(cls, v, info: ValidationInfo):
        """Auto-set endpoint URL based on deployment mode if not explicitly provided."""
        if v is None and info.data.get('deployment_mode') in ["local-dev", "aws-mock"]:
            return "http://localhost:5000"
        return v

    @field_validator('metadata_backend')
    @classmethod
    def validate_metadata_backend(cls, v):
        valid_backends = ["sqlite", "mongo"]
        if v not in valid_backends:
            raise ValueError(f"Invalid metadata_backend: {v}. Must be one of {valid_backends}")
        return v

    @field_validator('blob_prefix')
    @classmethod
    def blob_prefix_ends_with_separator(cls, v):
        if v and not v.endswith("/"):
            return f"{v}/"
        return v

    @property
    def collections(self) -> dict:
        """Logical collection kind -> configured collection name."""
        return {"files": self.files_collection, "downloads": self.downloads_collection}

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=(".env", ".env.local-dev", ".env.aws-mock", ".env.aws-prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
