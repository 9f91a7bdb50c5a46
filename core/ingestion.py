# core/ingestion.py
"""Upload ingestion: turn a multipart file field into a validated UploadedImage"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from core.errors import InvalidImageError, NoImageProvidedError, PayloadTooLargeError

logger = logging.getLogger(__name__)

# Media types must survive the round trip through a data URI prefix
# (data:image/<subtype>;base64,), so the subtype is restricted to word characters.
IMAGE_MEDIA_TYPE = re.compile(r"^image/\w+$")


@dataclass(frozen=True)
class UploadedImage:
    data: bytes
    media_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


def normalize_media_type(content_type: Optional[str]) -> str:
    """Drop parameters and case from a declared content type (image/JPEG; q=1 -> image/jpeg)."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def build_uploaded_image(
    data: Optional[bytes],
    content_type: Optional[str],
    filename: Optional[str] = None,
    max_bytes: Optional[int] = None,
) -> UploadedImage:
    """Validate raw upload bytes and the declared media type.

    Raises NoImageProvidedError when the field is absent, InvalidImageError for an
    empty payload or a non-image media type, PayloadTooLargeError past max_bytes.
    """
    if data is None:
        raise NoImageProvidedError()
    if not data:
        raise InvalidImageError("Uploaded image is empty")

    media_type = normalize_media_type(content_type)
    if not IMAGE_MEDIA_TYPE.match(media_type):
        raise InvalidImageError(
            f"Unsupported media type '{media_type or 'unknown'}'; expected an image/* upload"
        )

    if max_bytes is not None and len(data) > max_bytes:
        raise PayloadTooLargeError(
            f"Image too large. Maximum {max_bytes} bytes allowed."
        )

    logger.info(f"Accepted upload {filename or '<unnamed>'}: {media_type}, {len(data)} bytes")
    return UploadedImage(data=data, media_type=media_type, filename=filename)
