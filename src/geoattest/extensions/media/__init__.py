from .base import (
    REFERENCE_SCHEMES,
    SignatureMediaExtension,
    ensure_data_url,
    is_reference,
    is_valid_base64,
    strip_data_url_prefix,
)
from .image import ImageExtension
from .video import VideoExtension
from .audio import AudioExtension
from .application import ApplicationExtension

__all__ = [
    "REFERENCE_SCHEMES",
    "SignatureMediaExtension",
    "ensure_data_url",
    "is_reference",
    "is_valid_base64",
    "strip_data_url_prefix",
    "ImageExtension",
    "VideoExtension",
    "AudioExtension",
    "ApplicationExtension",
]
