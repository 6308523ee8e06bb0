import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from socialnet.services.storage_service import ImageStorage
from socialnet.utils.exceptions import FileTooLargeError, InvalidFileTypeError

pytestmark = pytest.mark.anyio


def make_upload(content: bytes, filename: str = "photo.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture()
def storage(tmp_path):
    return ImageStorage(
        upload_dir=str(tmp_path / "uploads"),
        max_bytes=100,
        allowed_types=["image/png", "image/jpeg"],
    )


async def test_save_and_delete(storage):
    stored = await storage.save(make_upload(b"png-bytes"))

    assert stored.url == f"/uploads/{stored.filename}"
    assert stored.filename.startswith("image-")
    assert stored.filename.endswith(".png")
    assert stored.path.read_bytes() == b"png-bytes"

    await storage.delete(stored.url)
    assert not stored.path.exists()


async def test_save_rejects_type(storage):
    with pytest.raises(InvalidFileTypeError):
        await storage.save(make_upload(b"hello", "notes.txt", "text/plain"))
    assert not storage.upload_dir.exists() or list(storage.upload_dir.iterdir()) == []


async def test_save_rejects_oversized_file_and_cleans_up(storage):
    with pytest.raises(FileTooLargeError):
        await storage.save(make_upload(b"x" * 101))
    assert list(storage.upload_dir.iterdir()) == []


async def test_delete_missing_file_raises(storage):
    storage.ensure_dir()
    with pytest.raises(OSError):
        await storage.delete("/uploads/image-missing.png")


def test_path_for_url_stays_inside_upload_dir(storage):
    assert storage.path_for_url("/uploads/../../etc/passwd") == storage.upload_dir / "passwd"
    assert storage.path_for_url("/uploads/image-1.png") == storage.upload_dir / "image-1.png"
