"""Stores shopper artwork and admin banner images on local disk."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional
from uuid import uuid4

from PIL import Image, UnidentifiedImageError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from common.errors import UploadRejected
from common.services.logging import log_event


ARTWORK_EXTENSIONS = {"png", "pdf", "ai", "eps"}
ARTWORK_MIMETYPES = {
    "image/png",
    "application/pdf",
    "application/postscript",
    "application/illustrator",
    "application/eps",
    "application/x-eps",
    "image/eps",
    "image/x-eps",
    # browsers often send this for .ai / .eps
    "application/octet-stream",
}
BANNER_IMAGE_FORMATS = {"PNG": ".png", "JPEG": ".jpg", "WEBP": ".webp"}
DEFAULT_MAX_BYTES = 50 * 1024 * 1024


@dataclass(frozen=True)
class StoredUpload:
    filename: str
    path: str
    url: str
    size: int
    dimensions: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "url": self.url,
            "size": self.size,
            "dimensions": self.dimensions,
        }


class UploadService:
    """Validates and writes uploads, returning a public URL for each file."""

    def __init__(
        self,
        artwork_dir: Path,
        banner_dir: Path,
        url_for_file: Callable[[str], str],
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self._artwork_dir = artwork_dir
        self._banner_dir = banner_dir
        self._url_for_file = url_for_file
        self._max_bytes = max_bytes
        self._artwork_dir.mkdir(parents=True, exist_ok=True)
        self._banner_dir.mkdir(parents=True, exist_ok=True)

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def save_artwork(self, uploaded: Optional[FileStorage]) -> StoredUpload:
        """Store a print-ready design file (PNG, PDF, AI or EPS)."""

        original = self._validate_upload(uploaded)
        ext = self._extension(original)
        if ext not in ARTWORK_EXTENSIONS:
            self._reject(f"Unsupported file type .{ext or '?'}; upload PNG, PDF, AI or EPS.", original)
        mimetype = (uploaded.mimetype or "application/octet-stream").lower()
        if mimetype not in ARTWORK_MIMETYPES:
            self._reject(f"Unsupported content type {mimetype}.", original)

        binary = self._read_limited(uploaded, original)
        dimensions = None
        if ext == "png":
            dimensions = self._verify_image(binary, original, {"PNG"})[1]
        elif ext == "pdf" and not binary.startswith(b"%PDF"):
            self._reject("The PDF file appears to be damaged.", original)

        filename = self._safe_filename(original, prefix="artwork", ext=f".{ext}")
        return self._write(self._artwork_dir / filename, f"artwork/{filename}", binary, dimensions)

    def save_banner_image(self, uploaded: Optional[FileStorage]) -> StoredUpload:
        """Store a hero banner image and record its pixel size."""

        original = self._validate_upload(uploaded)
        binary = self._read_limited(uploaded, original)
        fmt, dimensions = self._verify_image(binary, original, set(BANNER_IMAGE_FORMATS))
        filename = self._safe_filename(original, prefix="banner", ext=BANNER_IMAGE_FORMATS[fmt])
        return self._write(self._banner_dir / filename, f"banners/{filename}", binary, dimensions)

    def resolve(self, relative: str) -> Optional[Path]:
        """Map a public relative path back to a stored file, or None."""

        folder, _, name = (relative or "").partition("/")
        base = {"artwork": self._artwork_dir, "banners": self._banner_dir}.get(folder)
        if base is None or not name or secure_filename(name) != name:
            return None
        target = base / name
        return target if target.is_file() else None

    def _validate_upload(self, uploaded: Optional[FileStorage]) -> str:
        if uploaded is None or uploaded.filename is None or not uploaded.filename.strip():
            raise UploadRejected("Choose a file to upload.")
        return uploaded.filename

    def _read_limited(self, uploaded: FileStorage, original: str) -> bytes:
        binary = uploaded.stream.read(self._max_bytes + 1)
        if not binary:
            self._reject("The uploaded file is empty.", original)
        if len(binary) > self._max_bytes:
            limit_mb = self._max_bytes // (1024 * 1024)
            self._reject(f"Files must be {limit_mb} MB or smaller.", original, too_large=True)
        return binary

    def _verify_image(self, binary: bytes, original: str, formats: set) -> tuple:
        try:
            with Image.open(BytesIO(binary)) as image:
                fmt = image.format
                size = image.size
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
            self._reject("The image could not be read.", original)
        if fmt not in formats:
            self._reject(f"Unsupported image format {fmt}.", original)
        return fmt, f"{size[0]}x{size[1]}"

    def _reject(self, message: str, original: str, *, too_large: bool = False) -> None:
        log_event("warning", "upload.rejected", filename=original, reason=message)
        raise UploadRejected(message, too_large=too_large)

    @staticmethod
    def _extension(original: str) -> str:
        parts = original.rsplit(".", 1)
        return parts[1].lower() if len(parts) == 2 else ""

    @staticmethod
    def _safe_filename(original: str, prefix: str, ext: str) -> str:
        stem = secure_filename(Path(original).stem).lower()[:24] or "file"
        unique = uuid4().hex[:12]
        return f"{prefix}_{stem}_{unique}{ext}"

    def _write(self, target_path: Path, relative: str, binary: bytes, dimensions: Optional[str]) -> StoredUpload:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_bytes(binary)
        stored = StoredUpload(
            filename=target_path.name,
            path=str(target_path),
            url=self._url_for_file(relative),
            size=len(binary),
            dimensions=dimensions,
        )
        log_event("info", "upload.stored", filename=stored.filename, size=stored.size)
        return stored
