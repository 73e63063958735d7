"""Storage of uploaded product images on local disk."""

import logging
import shutil
import time
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


def build_filename(original_name: str | None) -> str:
    """Name a stored file after the current time, keeping the original extension."""
    suffix = Path(original_name or "").suffix
    return f"{time.time_ns()}{suffix}"


def save_upload(stream: BinaryIO, original_name: str | None, upload_dir: str) -> str:
    """Copy ``stream`` into ``upload_dir`` and return the stored path.

    The directory is created on first use. Raises ``OSError`` when the file
    cannot be written.
    """
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / build_filename(original_name)
    stream.seek(0)
    with open(target, "xb") as out:
        shutil.copyfileobj(stream, out)
    logger.info("stored upload %s as %s", original_name, target)
    return target.as_posix()
