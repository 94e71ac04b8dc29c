"""
S3 Storage Adapter
==================

StorageInterface implementation on AWS S3 / MinIO via django-storages.
"""

import logging
from typing import BinaryIO

from django.conf import settings
from storages.backends.s3boto3 import S3Boto3Storage

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


class S3StorageAdapter(StorageInterface):
    """
    AWS S3 storage implementation using django-storages.

    Configuration (in settings.py):
        AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY: credentials
        AWS_STORAGE_BUCKET_NAME: bucket name
        AWS_S3_REGION_NAME: region
        AWS_S3_ENDPOINT_URL: MinIO endpoint (optional)
        AWS_QUERYSTRING_AUTH: sign URLs (enabled by default)
    """

    def __init__(self):
        self.storage = S3Boto3Storage()
        self._bucket_name = getattr(settings, "AWS_STORAGE_BUCKET_NAME", "default-bucket")

    def upload(self, file: BinaryIO, path: str, content_type: str) -> StorageFile:
        try:
            saved_path = self.storage.save(path, file)
            size = self.storage.size(saved_path)
            url = self.storage.url(saved_path)

            logger.info(f"Successfully uploaded file to S3: {saved_path}")

            return StorageFile(
                key=saved_path,
                url=url,
                size=size,
                content_type=content_type,
                bucket=self._bucket_name,
            )

        except Exception as e:
            logger.error(f"Failed to upload file to S3: {path}. Error: {str(e)}")
            raise StorageException(f"S3 upload failed: {str(e)}") from e

    def delete(self, key: str) -> bool:
        try:
            if not self.exists(key):
                logger.warning(f"File not found in S3, cannot delete: {key}")
                return False
            self.storage.delete(key)
            logger.info(f"Successfully deleted file from S3: {key}")
            return True

        except Exception as e:
            logger.error(f"Failed to delete file from S3: {key}. Error: {str(e)}")
            raise StorageException(f"S3 deletion failed: {str(e)}") from e

    def get_url(self, key: str, expires_in: int = 3600) -> str:
        try:
            # Signed when AWS_QUERYSTRING_AUTH is True
            return self.storage.url(key, expire=expires_in)
        except Exception as e:
            logger.error(f"Failed to generate URL for S3 key: {key}. Error: {str(e)}")
            raise StorageException(f"URL generation failed: {str(e)}") from e

    def exists(self, key: str) -> bool:
        try:
            return self.storage.exists(key)
        except Exception as e:
            logger.error(f"Error checking existence of S3 key: {key}. Error: {str(e)}")
            return False

    @property
    def bucket_name(self) -> str:
        return self._bucket_name
