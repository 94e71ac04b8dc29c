"""
Storage Abstraction Layer
==========================

Provides a unified interface for file storage operations (S3/MinIO or local disk).
"""

from .factory import StorageFactory
from .interface import StorageException, StorageFile, StorageInterface
from .local_adapter import LocalStorageAdapter
from .s3_adapter import S3StorageAdapter

__all__ = [
    "StorageInterface",
    "StorageFile",
    "StorageException",
    "S3StorageAdapter",
    "LocalStorageAdapter",
    "StorageFactory",
]
