"""S3 client construction from settings."""
import logging
from typing import TYPE_CHECKING

import boto3
from botocore.config import Config

from file_gateway.config.settings import Settings

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def get_s3_client(settings: Settings) -> "S3Client":
    """Create an S3 client for the configured mode."""
    client_kwargs = {
        "region_name": settings.aws_region,
        "config": Config(signature_version="s3v4"),
    }
    if settings.aws_access_key_id:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

    # Endpoint override only for local/mock modes (e.g. a moto server)
    if settings.aws_endpoint_url and settings.deployment_mode in ["local-dev", "aws-mock"]:
        client_kwargs["endpoint_url"] = settings.aws_endpoint_url

    logger.info(
        f"Creating S3 client (mode={settings.deployment_mode}, region={settings.aws_region}, "
        f"endpoint={client_kwargs.get('endpoint_url', 'default')})"
    )
    return boto3.client("s3", **client_kwargs)
