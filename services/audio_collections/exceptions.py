"""Errors raised by the audio collection pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shared.collection_models import AudioCollection
    from shared.tts_models import SynthesisResult


class AudioCollectionError(Exception):
    """Base class for audio collection errors."""


class ValidationError(AudioCollectionError):
    """Caller input is malformed; raised before any outbound call."""


class TranslationError(AudioCollectionError):
    """The translation service failed for one language."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message)


class SynthesisError(AudioCollectionError):
    """A TTS provider rejected or failed a synthesis call.

    ``body`` is the provider's raw error text, unmodified.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        self.provider = provider
        self.status = status
        self.body = body
        super().__init__(message)

    @classmethod
    def from_upstream(cls, provider: str, status: int, body: str) -> "SynthesisError":
        return cls(provider, f"{provider} TTS failed ({status}): {body}", status=status, body=body)


class EmptyAudioError(AudioCollectionError):
    """A provider answered successfully but returned no audio bytes."""


class PersistenceError(AudioCollectionError):
    """Audio was generated but the collection record could not be saved.

    Carries the per-language results (the files now on disk) and the assembled
    collection so persistence can be retried without synthesizing again.
    """

    def __init__(
        self,
        message: str,
        results: list[SynthesisResult] | None = None,
        collection: AudioCollection | None = None,
        cause: Any = None,
    ) -> None:
        self.results = results or []
        self.collection = collection
        self.cause = cause
        super().__init__(message)

    @property
    def orphaned_files(self) -> list[str]:
        return [result.file_path for result in self.results if result.success and result.file_path]


class CollectionNotFoundError(AudioCollectionError):
    """Raised when a requested collection or collection item does not exist."""
