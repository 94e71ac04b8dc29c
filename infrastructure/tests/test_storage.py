"""
Storage Infrastructure Tests
=============================
"""

import shutil
import tempfile
from io import BytesIO
from unittest.mock import MagicMock, patch

from django.test import TestCase, override_settings

from infrastructure.storage import (
    LocalStorageAdapter,
    S3StorageAdapter,
    StorageException,
    StorageFactory,
    StorageFile,
    StorageInterface,
)


class StorageInterfaceTest(TestCase):
    def test_interface_is_abstract(self):
        with self.assertRaises(TypeError):
            StorageInterface()


@override_settings(AWS_STORAGE_BUCKET_NAME="pazar-test")
class S3StorageAdapterTest(TestCase):
    def setUp(self):
        patcher = patch("infrastructure.storage.s3_adapter.S3Boto3Storage")
        self.addCleanup(patcher.stop)
        self.mock_storage = MagicMock()
        patcher.start().return_value = self.mock_storage
        self.adapter = S3StorageAdapter()

    def test_upload(self):
        self.mock_storage.save.return_value = "products/store/product/front.jpg"
        self.mock_storage.size.return_value = 10
        self.mock_storage.url.return_value = "https://s3.example.com/pazar-test/products/store/product/front.jpg"

        result = self.adapter.upload(BytesIO(b"jpeg-bytes"), "products/store/product/front.jpg", "image/jpeg")

        self.assertIsInstance(result, StorageFile)
        self.assertEqual(result.key, "products/store/product/front.jpg")
        self.assertEqual(result.size, 10)
        self.assertEqual(result.bucket, "pazar-test")

    def test_upload_failure(self):
        self.mock_storage.save.side_effect = RuntimeError("bucket unavailable")

        with self.assertRaises(StorageException):
            self.adapter.upload(BytesIO(b"x"), "products/a.jpg", "image/jpeg")

    def test_delete(self):
        self.mock_storage.exists.return_value = True

        self.assertTrue(self.adapter.delete("products/a.jpg"))
        self.mock_storage.delete.assert_called_once_with("products/a.jpg")

    def test_delete_missing_file(self):
        self.mock_storage.exists.return_value = False

        self.assertFalse(self.adapter.delete("products/missing.jpg"))
        self.mock_storage.delete.assert_not_called()

    def test_signed_url(self):
        self.mock_storage.url.return_value = "https://s3.example.com/a.jpg?X-Amz-Signature=abc"

        url = self.adapter.get_url("products/a.jpg", expires_in=600)

        self.assertIn("Signature", url)
        self.mock_storage.url.assert_called_once_with("products/a.jpg", expire=600)

    def test_exists_swallows_backend_errors(self):
        self.mock_storage.exists.side_effect = RuntimeError("timeout")

        self.assertFalse(self.adapter.exists("products/a.jpg"))


class LocalStorageAdapterTest(TestCase):
    def setUp(self):
        self.location = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.location, ignore_errors=True)
        self.adapter = LocalStorageAdapter(location=self.location, base_url="/media/")

    def test_upload_exists_delete(self):
        stored = self.adapter.upload(BytesIO(b"jpeg-bytes"), "products/front.jpg", "image/jpeg")

        self.assertEqual(stored.key, "products/front.jpg")
        self.assertEqual(stored.size, 10)
        self.assertEqual(stored.url, "/media/products/front.jpg")
        self.assertEqual(stored.bucket, "local")
        self.assertTrue(self.adapter.exists(stored.key))

        self.assertTrue(self.adapter.delete(stored.key))
        self.assertFalse(self.adapter.exists(stored.key))
        self.assertFalse(self.adapter.delete(stored.key))


class StorageFactoryTest(TestCase):
    @patch("infrastructure.storage.s3_adapter.S3Boto3Storage")
    def test_explicit_backends(self, mock_storage):
        self.assertIsInstance(StorageFactory.create("s3"), S3StorageAdapter)
        self.assertIsInstance(StorageFactory.create("local"), LocalStorageAdapter)

    @override_settings(INFRASTRUCTURE={"STORAGE_BACKEND": "local"})
    def test_backend_from_settings(self):
        self.assertIsInstance(StorageFactory.create(), LocalStorageAdapter)

    def test_invalid_backend(self):
        with self.assertRaises(ValueError):
            StorageFactory.create("floppy")
