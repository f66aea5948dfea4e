"""Score screenshot validation and thumbnailing."""

import io
import logging

from PIL import Image, UnidentifiedImageError

from config import Config
from errors import InvalidInputError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
}


def validate_image(data: bytes, content_type: str | None, max_bytes: int | None = None) -> str:
    """Check type and size of an uploaded image. Returns the normalized content type."""
    max_bytes = max_bytes if max_bytes is not None else Config.MAX_IMAGE_BYTES
    content_type = (content_type or "").lower()

    if content_type not in ALLOWED_CONTENT_TYPES:
        logger.warning(f"Rejected score image with content type {content_type!r}")
        raise InvalidInputError("Only JPEG, PNG and GIF images are allowed")
    if not data:
        raise InvalidInputError("Image file is empty")
    if len(data) > max_bytes:
        logger.warning(f"Rejected score image of {len(data)} bytes")
        raise InvalidInputError(f"Image must be {max_bytes // (1024 * 1024)}MB or smaller")

    return "image/jpeg" if content_type == "image/jpg" else content_type


def make_thumbnail(data: bytes, width: int, height: int) -> tuple[bytes, str]:
    """Shrink an image to fit within width x height, keeping its aspect ratio.

    Images already inside the bounds are re-encoded at their original size.
    Returns (bytes, content type).
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInputError(f"Stored image could not be decoded: {e}") from e

    image_format = img.format if img.format in ("JPEG", "PNG", "GIF") else "PNG"
    img.thumbnail((width, height), Image.Resampling.LANCZOS)
    if image_format == "JPEG" and img.mode != "RGB":
        img = img.convert("RGB")

    out = io.BytesIO()
    if image_format == "JPEG":
        img.save(out, image_format, quality=85)
    else:
        img.save(out, image_format)
    return out.getvalue(), f"image/{image_format.lower()}"
