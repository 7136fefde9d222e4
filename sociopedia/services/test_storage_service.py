# sociopedia/services/test_storage_service.py
import io
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import NotFound
from werkzeug.datastructures import FileStorage

from sociopedia.core.exceptions import InvalidArgumentError
from sociopedia.services.storage_service import StorageService


@pytest.fixture
def bucket():
    bucket = MagicMock()
    bucket.name = "test-bucket"
    return bucket


def _file(filename="photo.PNG"):
    return FileStorage(stream=io.BytesIO(b"img"), filename=filename, content_type="image/png")


def test_upload_picture_returns_public_url(bucket):
    blob = bucket.blob.return_value
    blob.public_url = "https://storage.googleapis.com/test-bucket/assets/abc.png"

    url = StorageService(bucket).upload_picture(_file())

    assert url == blob.public_url
    blob_name = bucket.blob.call_args.args[0]
    assert blob_name.startswith("assets/")
    assert blob_name.endswith(".png")
    blob.upload_from_file.assert_called_once()
    blob.make_public.assert_called_once()


def test_upload_picture_rejects_other_file_types(bucket):
    with pytest.raises(InvalidArgumentError) as exc_info:
        StorageService(bucket).upload_picture(_file("script.sh"))
    assert exc_info.value.error_code == "INVALID_FILE_TYPE"
    bucket.blob.assert_not_called()


def test_upload_picture_without_filename(bucket):
    assert StorageService(bucket).upload_picture(_file("")) is None


def test_upload_requires_bucket():
    with pytest.raises(RuntimeError):
        StorageService().upload_picture(_file())


def test_delete_picture_by_public_url(bucket):
    StorageService(bucket).delete_picture("https://storage.googleapis.com/test-bucket/assets/abc.png")
    bucket.blob.assert_called_once_with("assets/abc.png")
    bucket.blob.return_value.delete.assert_called_once()


def test_delete_missing_picture_is_ignored(bucket):
    bucket.blob.return_value.delete.side_effect = NotFound("gone")
    StorageService(bucket).delete_picture("assets/abc.png")
    bucket.blob.assert_called_once_with("assets/abc.png")
