import io
from pathlib import Path

import pytest

from mixmodas.media import build_filename, save_upload


def test_build_filename_keeps_extension():
    name = build_filename("photo.final.JPG")
    assert name.endswith(".JPG")
    assert name[: -len(".JPG")].isdigit()


def test_build_filename_without_extension():
    assert build_filename(None).isdigit()
    assert build_filename("README").isdigit()


def test_save_upload_creates_directory(tmp_path):
    upload_dir = tmp_path / "nested" / "uploads"
    path = save_upload(io.BytesIO(b"image-bytes"), "shirt.png", str(upload_dir))

    stored = Path(path)
    assert stored.parent == upload_dir
    assert stored.suffix == ".png"
    assert stored.read_bytes() == b"image-bytes"


def test_save_upload_into_a_file_fails(tmp_path):
    blocker = tmp_path / "uploads"
    blocker.write_text("not a directory")
    with pytest.raises(OSError):
        save_upload(io.BytesIO(b"data"), "a.png", str(blocker))
