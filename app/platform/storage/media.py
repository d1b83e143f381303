import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from fastapi import Request

from app.platform.exceptions import UpstreamError
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass
class StoredMedia:
    url: str
    public_id: str
    format: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None


class MediaStorage:
    """Interface for the media host that keeps banner and service images."""

    def upload(self, content: bytes, folder: str, name: str, filename: str) -> StoredMedia:
        raise NotImplementedError

    def move(self, public_id: str, folder: str, name: str) -> Tuple[str, str]:
        """Move an asset to another folder, returning (new_public_id, new_url)."""
        raise NotImplementedError

    def destroy(self, public_id: str) -> None:
        raise NotImplementedError


class LocalMediaStorage(MediaStorage):
    """
    Stores media on local disk under ``root`` and serves it from ``url_prefix``
    through the media mount in app.main.

    A public id is ``<folder>/<name>``; the file keeps its original extension.
    """

    def __init__(self, root: str, url_prefix: str):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _find(self, public_id: str) -> Optional[Path]:
        parent = (self.root / public_id).parent
        stem = Path(public_id).name
        if not parent.exists():
            return None
        for candidate in parent.iterdir():
            if candidate.is_file() and candidate.stem == stem:
                return candidate
        return None

    def _url_for(self, path: Path) -> str:
        return f"{self.url_prefix}/{path.relative_to(self.root).as_posix()}"

    def upload(self, content: bytes, folder: str, name: str, filename: str) -> StoredMedia:
        ext = Path(filename or "").suffix.lower() or ".bin"
        public_id = f"{folder}/{name}"
        target_dir = self.root / folder
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            existing = self._find(public_id)
            if existing is not None:
                existing.unlink()
            path = target_dir / f"{name}{ext}"
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Media upload failed for {public_id}: {e}")
            raise UpstreamError("Failed to upload image") from e

        return StoredMedia(
            url=self._url_for(path),
            public_id=public_id,
            format=ext.lstrip("."),
            size=len(content),
        )

    def move(self, public_id: str, folder: str, name: str) -> Tuple[str, str]:
        source = self._find(public_id)
        if source is None:
            raise UpstreamError(f"Media {public_id} not found")
        new_public_id = f"{folder}/{name}"
        target = self.root / folder / f"{name}{source.suffix}"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise UpstreamError(f"Failed to move media {public_id}") from e
        return new_public_id, self._url_for(target)

    def destroy(self, public_id: str) -> None:
        path = self._find(public_id)
        if path is None:
            logger.info(f"Media {public_id} already absent")
            return
        try:
            os.remove(path)
        except OSError as e:
            raise UpstreamError(f"Failed to delete media {public_id}") from e


def get_media_storage(request: Request) -> MediaStorage:
    return request.app.state.media
