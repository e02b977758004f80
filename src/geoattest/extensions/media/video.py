from __future__ import annotations

from geoattest.extensions.media.base import SignatureMediaExtension

SUPPORTED_VIDEO_TYPES = ("video/mp4", "video/webm", "video/quicktime")


class VideoExtension(SignatureMediaExtension):
    id = "astral:media:video"
    name = "Video Media Type"
    description = "Handles MP4, WebM and QuickTime video"
    supported_media_types = SUPPORTED_VIDEO_TYPES
    # ISO base media files carry the "ftyp" box right after the 4-byte size
    signatures = {
        "video/mp4": [(4, b"ftyp")],
        "video/quicktime": [(4, b"ftyp"), (4, b"moov"), (4, b"wide")],
        "video/webm": [(0, b"\x1a\x45\xdf\xa3")],
    }
