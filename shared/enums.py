"""
Enums and constants used across the application.
"""

from enum import Enum


class VoiceGender(str, Enum):
    """Available voice genders for TTS."""

    MALE = "male"
    FEMALE = "female"
    NEUTRAL = "neutral"


class TTSProviderName(str, Enum):
    """Text-to-speech providers that can generate audio collections."""

    DEEPGRAM = "deepgram"
    ELEVENLABS = "elevenlabs"


class CollectionType(str, Enum):
    """Collection kinds sharing the collections table."""

    GALLERY = "gallery"
    AUDIO_COLLECTION = "audio_collection"
    IMAGE_COLLECTION = "image_collection"
    DOCUMENT_COLLECTION = "document_collection"


class GenerationErrorType(str, Enum):
    """Per-language failure kinds reported in batch results."""

    TRANSLATION = "TranslationError"
    SYNTHESIS = "SynthesisError"
    EMPTY_AUDIO = "EmptyAudioError"
    STORAGE = "StorageError"
    TIMEOUT = "TimeoutError"
    INTERNAL = "InternalError"
