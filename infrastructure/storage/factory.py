"""
Storage Factory
===============

Creates the storage backend selected by INFRASTRUCTURE['STORAGE_BACKEND'].
"""

import logging
from typing import Literal

from django.conf import settings

from .interface import StorageInterface
from .local_adapter import LocalStorageAdapter
from .s3_adapter import S3StorageAdapter

logger = logging.getLogger(__name__)

StorageBackend = Literal["s3", "local"]


class StorageFactory:
    """
    Factory for creating storage backends.

    Usage:
        storage = StorageFactory.create()
    """

    @staticmethod
    def create(backend: StorageBackend | None = None) -> StorageInterface:
        """
        Create a storage backend instance.

        Args:
            backend: 's3' or 'local'. If None, reads from settings.

        Raises:
            ValueError: If backend type is invalid
        """
        backend_type = backend or getattr(settings, "INFRASTRUCTURE", {}).get("STORAGE_BACKEND", "s3")

        logger.info(f"Creating storage backend: {backend_type}")

        if backend_type == "s3":
            return S3StorageAdapter()
        elif backend_type == "local":
            return LocalStorageAdapter()
        raise ValueError(f"Invalid storage backend: {backend_type}. Must be 's3' or 'local'")
