"""
Local Storage Adapter
=====================

StorageInterface implementation on Django's FileSystemStorage, used in
development and tests. URLs are plain MEDIA_URL paths (never signed).
"""

import logging
from typing import BinaryIO

from django.core.files import File
from django.core.files.storage import FileSystemStorage

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


class LocalStorageAdapter(StorageInterface):
    def __init__(self, location: str = None, base_url: str = None):
        self.storage = FileSystemStorage(location=location, base_url=base_url)

    def upload(self, file: BinaryIO, path: str, content_type: str) -> StorageFile:
        try:
            saved_path = self.storage.save(path, file if isinstance(file, File) else File(file, name=path))
            logger.info(f"Stored file locally: {saved_path}")
            return StorageFile(
                key=saved_path,
                url=self.storage.url(saved_path),
                size=self.storage.size(saved_path),
                content_type=content_type,
                bucket=self.bucket_name,
            )
        except OSError as e:
            logger.error(f"Failed to store file locally: {path}. Error: {e}")
            raise StorageException(f"Local upload failed: {e}") from e

    def delete(self, key: str) -> bool:
        if not self.storage.exists(key):
            return False
        self.storage.delete(key)
        return True

    def get_url(self, key: str, expires_in: int = 3600) -> str:
        return self.storage.url(key)

    def exists(self, key: str) -> bool:
        return self.storage.exists(key)

    @property
    def bucket_name(self) -> str:
        return "local"
