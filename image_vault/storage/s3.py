"""S3 implementation of StorageClient."""
import logging
from typing import Any, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config import Settings, get_settings

from .base import StorageClient, StorageError

logger = logging.getLogger(__name__)

_MISSING_ERROR_CODES = {"NoSuchKey", "NoSuchBucket", "404", "NotFound"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3StorageClient(StorageClient):
    """Object storage backed by an S3-compatible service.

    A single boto3 client is created per instance and reused for every
    request; boto3 clients are safe to share between threads.
    """

    def __init__(self, client: Optional[Any] = None, settings: Optional[Settings] = None):
        """Initialize the S3 storage client.

        Args:
            client: Preconfigured boto3 S3 client. If not provided, one is
                    built from the object store settings.
            settings: Settings to read credentials from. Defaults to the
                      application settings.
        """
        settings = settings or get_settings()
        self.region = settings.s3_region

        if client is not None:
            self._client = client
        else:
            self._client = boto3.client(
                "s3",
                aws_access_key_id=settings.s3_access_key_id,
                aws_secret_access_key=settings.s3_secret_access_key,
                endpoint_url=settings.s3_endpoint_url,
                region_name=settings.s3_region,
            )
        logger.info(f"Initialized S3StorageClient for endpoint: {settings.s3_endpoint_url}")

    def put_object(self, bucket: str, key: str, content: bytes) -> None:
        try:
            self._client.put_object(Bucket=bucket, Key=key, Body=content)
            logger.debug(f"Uploaded object {bucket}/{key} ({len(content)} bytes)")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload object {bucket}/{key}: {e}")
            raise StorageError(f"Failed to upload object: {e}") from e

    def get_object(self, bucket: str, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            content = response["Body"].read()
        except ClientError as e:
            if _error_code(e) in _MISSING_ERROR_CODES:
                logger.warning(f"Object not found: {bucket}/{key}")
                raise FileNotFoundError(f"Object not found: {bucket}/{key}") from e
            logger.error(f"Failed to read object {bucket}/{key}: {e}")
            raise StorageError(f"Failed to read object: {e}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to read object {bucket}/{key}: {e}")
            raise StorageError(f"Failed to read object: {e}") from e

        logger.debug(f"Read object {bucket}/{key} ({len(content)} bytes)")
        return content

    def delete_object(self, bucket: str, key: str) -> None:
        # S3 answers 204 for missing keys as well
        try:
            self._client.delete_object(Bucket=bucket, Key=key)
            logger.debug(f"Deleted object {bucket}/{key}")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete object {bucket}/{key}: {e}")
            raise StorageError(f"Failed to delete object: {e}") from e

    def list_keys(self, bucket: str) -> List[str]:
        keys: List[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket):
                keys.extend(item["Key"] for item in page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list objects in {bucket}: {e}")
            raise StorageError(f"Failed to list objects: {e}") from e

        logger.debug(f"Found {len(keys)} objects in {bucket}")
        return keys

    def ensure_bucket(self, bucket: str) -> bool:
        try:
            response = self._client.list_buckets()
            names = {b["Name"] for b in response.get("Buckets", [])}
            if bucket in names:
                logger.debug(f"Bucket already exists: {bucket}")
                return False

            params: dict[str, Any] = {"Bucket": bucket}
            # us-east-1 rejects an explicit location constraint
            if self.region and self.region != "us-east-1":
                params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
            self._client.create_bucket(**params)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to ensure bucket {bucket}: {e}")
            raise StorageError(f"Failed to ensure bucket: {e}") from e

        logger.info(f"Created bucket: {bucket}")
        return True
