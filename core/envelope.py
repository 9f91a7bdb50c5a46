# core/envelope.py
"""Analysis envelope and data URI helpers shared by both pipeline stages"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional

from core.errors import ImageDecodeError

# Exact prefix the report compiler strips before decoding
DATA_URI_PREFIX = re.compile(r"^data:image/\w+;base64,")


@dataclass(frozen=True)
class AnalysisEnvelope:
    """The {text, image data URI} pair carried by the client between requests."""
    text: Optional[str] = None
    image_data_uri: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.image_data_uri


def encode_data_uri(data: bytes, media_type: str) -> str:
    """data:<media_type>;base64,<payload>"""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{payload}"


def decode_data_uri(uri: str) -> bytes:
    """Strip the image data URI prefix and base64-decode the remainder.

    Raises ImageDecodeError when the prefix does not match or the payload is not base64.
    """
    match = DATA_URI_PREFIX.match(uri or "")
    if not match:
        raise ImageDecodeError("image is not a data:image/*;base64 URI")
    payload = uri[match.end():]
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"invalid base64 payload: {e}") from e
    if not data:
        raise ImageDecodeError("image payload is empty")
    return data
