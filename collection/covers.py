"""Cover image storage for collection entries."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import IO, Any, Callable, Mapping

from urllib.request import Request, urlopen

from PIL import ExifTags, Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})

_ORIENTATION_TAG = next(
    (key for key, value in ExifTags.TAGS.items() if value == "Orientation"), None
)


class CoverUploadError(ValueError):
    """An uploaded cover was rejected."""


def open_image_auto_rotate(source: Any) -> Image.Image:
    """Open image from path or file-like and auto-rotate using EXIF."""
    img = Image.open(source) if not isinstance(source, Image.Image) else source
    orientation = None
    if _ORIENTATION_TAG is not None:
        orientation = img.getexif().get(_ORIENTATION_TAG)
    if orientation == 3:
        img = img.rotate(180, expand=True)
    elif orientation == 6:
        img = img.rotate(270, expand=True)
    elif orientation == 8:
        img = img.rotate(90, expand=True)
    return img.convert("RGB")


class CoverStore:
    """Keeps one ``<id>.jpg`` per collection entry."""

    def __init__(
        self,
        directory: str | Path,
        *,
        local_url_prefix: str,
        opener: Callable[[Any], Any] | None = None,
        user_agent: str = "",
    ) -> None:
        self.directory = Path(directory)
        self.local_url_prefix = local_url_prefix
        self._opener = opener or urlopen
        self._user_agent = user_agent

    def ensure_exists(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def filename_for(self, game_id: Any) -> str:
        name = secure_filename(str(game_id))
        if not name:
            raise CoverUploadError(f"invalid cover id: {game_id!r}")
        return f"{name}.jpg"

    def path_for(self, game_id: Any) -> Path:
        return self.directory / self.filename_for(game_id)

    def url_for(self, game_id: Any) -> str:
        return f"{self.local_url_prefix}{self.filename_for(game_id)}"

    def is_local_url(self, url: str) -> bool:
        return str(url).startswith(self.local_url_prefix)

    def download(self, url: str, game_id: Any) -> str:
        """Store the image at ``url`` as the cover of ``game_id``."""

        path = self.path_for(game_id)
        if url.startswith("//"):
            url = f"https:{url}"
        request = Request(url, method="GET")
        if self._user_agent:
            request.add_header("User-Agent", self._user_agent)
        logger.info("Downloading image from %s to %s", url, path)
        with self._opener(request) as response:
            body = response.read()
        self.ensure_exists()
        path.write_bytes(body)
        return path.name

    def ensure_cover(self, entry: Mapping[str, Any]) -> None:
        """Download a remote ``coverUrl`` once; failures are only logged."""

        game_id = entry.get("id")
        cover_url = entry.get("coverUrl")
        if not cover_url or not game_id or self.is_local_url(str(cover_url)):
            return
        try:
            path = self.path_for(game_id)
        except CoverUploadError:
            logger.warning("Skipping cover download for invalid id %r", game_id)
            return
        if path.exists():
            logger.debug("Cover already exists locally: %s", game_id)
            return
        try:
            self.download(str(cover_url), game_id)
        except Exception:
            logger.exception("Failed to download cover for %s", game_id)
            return
        logger.info("Cover downloaded and saved: %s", game_id)

    def save_upload(self, stream: IO[bytes], filename: str, game_id: Any) -> str:
        """Validate and store an uploaded cover as JPEG."""

        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in ALLOWED_UPLOAD_EXTENSIONS:
            raise CoverUploadError("Only accepts .jpg, .jpeg, and .png files")
        try:
            img = open_image_auto_rotate(stream)
        except (UnidentifiedImageError, OSError) as exc:
            raise CoverUploadError("invalid image upload") from exc
        path = self.path_for(game_id)
        self.ensure_exists()
        img.save(path, format="JPEG", quality=90)
        logger.info("Custom cover saved: %s", path.name)
        return path.name

    def delete(self, game_id: Any) -> bool:
        try:
            path = self.path_for(game_id)
        except CoverUploadError:
            return False
        if not path.exists():
            return False
        path.unlink()
        return True


__all__ = [
    "ALLOWED_UPLOAD_EXTENSIONS",
    "CoverStore",
    "CoverUploadError",
    "open_image_auto_rotate",
]
