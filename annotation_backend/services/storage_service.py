# /annotation_backend/services/storage_service.py

"""
The voice-recording storage collaborator.

The annotation workflow hands over raw bytes and gets back an opaque
reference; it never stores audio itself. `LocalVoiceStorage` writes files
under VOICE_UPLOAD_DIR, one directory per user, and returns a relative
reference of the form `voice/<user_id>/<file name>`.
"""

import logging
import os
import uuid
from typing import Optional, Protocol

from ..core.config import settings
from ..core.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_AUDIO_TYPES = {
    "audio/webm", "audio/ogg", "audio/wav", "audio/x-wav", "audio/wave",
    "audio/mpeg", "audio/mp3", "audio/mp4", "audio/x-m4a", "audio/aac",
}


class VoiceStorage(Protocol):
    def save(self, user_id: int, audio_bytes: bytes, filename: Optional[str], content_type: Optional[str]) -> str:
        ...


class LocalVoiceStorage:
    def __init__(self, root_dir: str = None, max_bytes: int = None):
        self.root_dir = root_dir or settings.VOICE_UPLOAD_DIR
        self.max_bytes = max_bytes or settings.MAX_VOICE_UPLOAD_BYTES

    def save(self, user_id: int, audio_bytes: bytes, filename: Optional[str], content_type: Optional[str]) -> str:
        """Validates and writes one recording, returning its storage reference."""
        if not audio_bytes:
            raise ValidationError("The uploaded recording is empty.")
        if len(audio_bytes) > self.max_bytes:
            raise ValidationError(f"The uploaded recording exceeds {self.max_bytes} bytes.")
        base_type = (content_type or "").split(";")[0].strip().lower()
        if base_type and base_type not in ALLOWED_AUDIO_TYPES:
            raise ValidationError(f"Unsupported audio type '{content_type}'.")

        user_dir = os.path.join(self.root_dir, str(user_id))
        os.makedirs(user_dir, exist_ok=True)

        safe_filename = f"voice_{uuid.uuid4().hex[:8]}_{os.path.basename(filename or 'recording.webm')}"
        path = os.path.join(user_dir, safe_filename)
        with open(path, "wb") as buffer:
            buffer.write(audio_bytes)

        logger.info("Stored voice recording for user %s at %s (%d bytes)", user_id, path, len(audio_bytes))
        return f"voice/{user_id}/{safe_filename}"


_default_storage = None


def get_voice_storage() -> VoiceStorage:
    """FastAPI dependency for the storage collaborator; overridden in tests."""
    global _default_storage
    if _default_storage is None:
        _default_storage = LocalVoiceStorage()
    return _default_storage
