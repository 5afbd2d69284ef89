# storefront/api/uploads.py
import shutil
import uuid
from pathlib import Path

from fastapi import UploadFile

from storefront.utils.settings import STATIC_DIR
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp")


def save_upload(upload: UploadFile | None, directory: Path) -> str | None:
    """
    Zapisuje plik pod unikalna nazwa i zwraca sciezke wzgledem katalogu static
    (tak jest trzymana w bazie). Brak pliku -> None.
    """
    if upload is None or not upload.filename:
        return None

    suffix = Path(upload.filename).suffix.lower()
    if suffix not in ALLOWED_IMAGE_SUFFIXES:
        raise ValueError(f"Unsupported file type: {suffix or 'none'}")

    directory.mkdir(parents=True, exist_ok=True)
    target = directory / f"{uuid.uuid4().hex}{suffix}"
    with target.open("wb") as out:
        shutil.copyfileobj(upload.file, out)

    relative = target.relative_to(STATIC_DIR).as_posix()
    logger.info(f"Stored upload {upload.filename} as {relative}")
    return relative
