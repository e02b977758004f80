from __future__ import annotations

from geoattest.extensions.media.base import SignatureMediaExtension, has_signature

SUPPORTED_AUDIO_TYPES = ("audio/mpeg", "audio/wav", "audio/ogg", "audio/aac")


class AudioExtension(SignatureMediaExtension):
    id = "astral:media:audio"
    name = "Audio Media Type"
    description = "Handles MP3, WAV, Ogg and AAC audio"
    supported_media_types = SUPPORTED_AUDIO_TYPES
    signatures = {
        "audio/mpeg": [(0, b"ID3"), (0, b"\xff\xfb"), (0, b"\xff\xf3"), (0, b"\xff\xf2")],
        "audio/ogg": [(0, b"OggS")],
        "audio/aac": [(0, b"\xff\xf1"), (0, b"\xff\xf9")],
    }

    def validate_payload(self, media_type: str, head: bytes, data: str) -> bool:
        if media_type == "audio/wav":
            # RIFF container with a WAVE form type
            return has_signature(head, [(0, b"RIFF")]) and has_signature(head, [(8, b"WAVE")])
        return super().validate_payload(media_type, head, data)
