"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import TYPE_CHECKING, Iterator

from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import GetObjectOutputTypeDef, HeadObjectOutputTypeDef

DEFAULT_MAX_KEYS = 1000


def object_exists_in_s3(bucket_name: str, object_key: str, s3_client: "S3Client") -> bool:
    """
    Check if an object exists in the S3 bucket using head_object.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to check.
    :param s3_client: The boto3 S3 client to use.

    :return: True if the object exists, False otherwise.
    """
    try:
        s3_client.head_object(Bucket=bucket_name, Key=object_key)
        return True
    except ClientError as err:
        error_code = err.response.get("Error", {}).get("Code")
        if error_code in ("404", "NoSuchKey", "NotFound"):
            return False
        raise


def fetch_s3_object(bucket_name: str, object_key: str, s3_client: "S3Client") -> "GetObjectOutputTypeDef":
    """
    Fetch an object, body included, from an S3 bucket.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to fetch.
    :param s3_client: The boto3 S3 client to use.

    :return: The get_object response; ``Body`` is a streaming body.
    """
    return s3_client.get_object(Bucket=bucket_name, Key=object_key)


def fetch_s3_object_metadata(bucket_name: str, object_key: str, s3_client: "S3Client") -> "HeadObjectOutputTypeDef":
    """Fetch an object's metadata (size, content type, last modified) without its body."""
    return s3_client.head_object(Bucket=bucket_name, Key=object_key)


def iter_s3_object_keys(
    bucket_name: str,
    s3_client: "S3Client",
    prefix: str = "",
    max_keys: int = DEFAULT_MAX_KEYS,
) -> Iterator[str]:
    """
    Yield every key in the bucket under ``prefix``, following continuation tokens.

    :param bucket_name: Name of the S3 bucket.
    :param s3_client: The boto3 S3 client to use.
    :param prefix: Only keys starting with this prefix are listed.
    :param max_keys: Page size for each list_objects_v2 call.
    """
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(
        Bucket=bucket_name,
        Prefix=prefix,
        PaginationConfig={"PageSize": max_keys},
    )
    for page in pages:
        for item in page.get("Contents", []):
            yield item["Key"]


def generate_presigned_get_url(
    bucket_name: str,
    object_key: str,
    s3_client: "S3Client",
    expires_in: int,
) -> str:
    """
    Generate a signed, time-limited read link for an object.

    Signing happens locally; the object is not contacted.
    """
    return s3_client.generate_presigned_url(
        ClientMethod="get_object",
        Params={"Bucket": bucket_name, "Key": object_key},
        ExpiresIn=expires_in,
    )
