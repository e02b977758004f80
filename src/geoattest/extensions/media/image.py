from __future__ import annotations

from geoattest.extensions.media.base import SignatureMediaExtension

SUPPORTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/tiff")


class ImageExtension(SignatureMediaExtension):
    """Common raster image formats, checked by file signature."""

    id = "astral:media:image"
    name = "Image Media Type"
    description = "Handles common image formats (JPEG, PNG, GIF, TIFF)"
    supported_media_types = SUPPORTED_IMAGE_TYPES
    signatures = {
        "image/jpeg": [(0, b"\xff\xd8\xff")],
        "image/png": [(0, b"\x89PNG\r\n\x1a\n")],
        "image/gif": [(0, b"GIF87a"), (0, b"GIF89a")],
        "image/tiff": [(0, b"II*\x00"), (0, b"MM\x00*")],
    }
