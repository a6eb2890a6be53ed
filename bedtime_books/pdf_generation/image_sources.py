"""
Classification of page image references.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from enum import Enum

RASTER_DATA_PREFIXES = ("data:image/png;base64,", "data:image/jpeg;base64,")
VECTOR_DATA_PREFIX = "data:image/svg+xml;"
REMOTE_PREFIXES = ("http://", "https://")


class ImageSourceKind(Enum):
    EMBEDDED_RASTER = "embedded_raster"
    EMBEDDED_VECTOR = "embedded_vector"
    REMOTE_URL = "remote_url"
    OPAQUE_REF = "opaque_ref"
    ABSENT = "absent"


@dataclass(frozen=True)
class ImageSource:
    """A page's image reference, classified once."""

    kind: ImageSourceKind
    reference: str | None = None

    def decode_payload(self) -> bytes:
        """
        Decode the base64 payload of an embedded raster image.

        Raises ``ValueError`` for any other kind or for malformed base64.
        """
        if self.kind is not ImageSourceKind.EMBEDDED_RASTER or self.reference is None:
            raise ValueError(f"{self.kind.value} image sources carry no embedded payload.")
        _, _, payload = self.reference.partition(",")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Embedded image payload is not valid base64.") from exc


def classify_image_reference(reference: str | None) -> ImageSource:
    """
    Sort an ``imageUrl`` value into the branch used to draw it.

    >>> classify_image_reference("https://example.com/a.png").kind
    <ImageSourceKind.REMOTE_URL: 'remote_url'>
    """
    if not reference:
        return ImageSource(ImageSourceKind.ABSENT)
    if reference.startswith(RASTER_DATA_PREFIXES):
        return ImageSource(ImageSourceKind.EMBEDDED_RASTER, reference)
    if reference.startswith(VECTOR_DATA_PREFIX):
        return ImageSource(ImageSourceKind.EMBEDDED_VECTOR, reference)
    if reference.lower().startswith(REMOTE_PREFIXES):
        return ImageSource(ImageSourceKind.REMOTE_URL, reference)
    return ImageSource(ImageSourceKind.OPAQUE_REF, reference)
