from __future__ import annotations

import base64
import binascii
import json

from geoattest.extensions.media.base import SignatureMediaExtension, strip_data_url_prefix

SUPPORTED_APPLICATION_TYPES = ("application/pdf", "application/json")


class ApplicationExtension(SignatureMediaExtension):
    id = "astral:media:application"
    name = "Application Media Type"
    description = "Handles PDF documents and JSON payloads"
    supported_media_types = SUPPORTED_APPLICATION_TYPES
    signatures = {
        "application/pdf": [(0, b"%PDF-")],
    }

    def validate_payload(self, media_type: str, head: bytes, data: str) -> bool:
        if media_type == "application/json":
            try:
                json.loads(base64.b64decode(strip_data_url_prefix(data), validate=True))
            except (binascii.Error, ValueError):
                return False
            return True
        return super().validate_payload(media_type, head, data)
