"""Shared helpers for media extensions.

Payloads are base64 strings, optionally wrapped in a ``data:`` URL, or
references to content stored elsewhere (``ipfs://``, ``ar://``, ``https://``).
Inline payloads are checked against the file signature of their MIME type
when one is known. References are accepted as-is.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Dict, Optional, Sequence, Tuple

from geoattest.errors import MediaValidationError
from geoattest.extensions.base import MediaExtension

REFERENCE_SCHEMES = ("ipfs://", "ar://", "https://")

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

# (offset, magic bytes); any entry matching accepts the payload
Signature = Tuple[int, bytes]


def is_reference(data: str) -> bool:
    return isinstance(data, str) and data.startswith(REFERENCE_SCHEMES)


def strip_data_url_prefix(data: str) -> str:
    if data.startswith("data:"):
        comma = data.find(",")
        if comma != -1:
            return data[comma + 1:]
    return data


def ensure_data_url(media_type: str, data: str) -> str:
    if data.startswith("data:"):
        return data
    return f"data:{media_type};base64,{data}"


def is_valid_base64(data: str) -> bool:
    if not isinstance(data, str) or not data:
        return False
    payload = data
    if data.startswith("data:"):
        comma = data.find(",")
        if comma == -1 or comma == len(data) - 1:
            return False
        payload = data[comma + 1:]
    return bool(payload) and bool(_BASE64_PATTERN.match(payload))


def decode_head(data: str, size: int = 32) -> Optional[bytes]:
    """First ``size`` decoded bytes of a base64 payload, or None if undecodable."""
    payload = strip_data_url_prefix(data)
    # decode a prefix whose length is a multiple of 4 to avoid padding issues
    chunk = payload[: ((size + 2) // 3) * 4]
    try:
        return base64.b64decode(chunk + "=" * (-len(chunk) % 4), validate=True)[:size]
    except (binascii.Error, ValueError):
        return None


def has_signature(head: bytes, signatures: Sequence[Signature]) -> bool:
    return any(head[offset:offset + len(magic)] == magic for offset, magic in signatures)


class SignatureMediaExtension(MediaExtension):
    """Media extension validated by MIME type, base64 shape and magic bytes."""

    # MIME type -> accepted signatures; an empty sequence disables the check
    signatures: Dict[str, Sequence[Signature]] = {}

    def validate(self) -> bool:
        return bool(self.id) and bool(self.supported_media_types) and all(
            "/" in t for t in self.supported_media_types
        )

    def validate_payload(self, media_type: str, head: bytes, data: str) -> bool:
        expected = self.signatures.get(media_type)
        if not expected:
            return True
        return has_signature(head, expected)

    def validate_media(self, media_type: str, data: str) -> bool:
        if not self.supports_media_type(media_type):
            return False
        if is_reference(data):
            return True
        if not is_valid_base64(data):
            return False
        head = decode_head(data)
        if head is None:
            return False
        return self.validate_payload(media_type, head, data)

    def process_media(self, media_type: str, data: str) -> str:
        if not self.validate_media(media_type, data):
            raise MediaValidationError(f"Invalid {media_type} data", {"mediaType": media_type})
        if is_reference(data):
            return data
        return ensure_data_url(media_type, data)
