"""
Text-to-Speech (TTS) request, result and catalog models.
"""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import GenerationErrorType, TTSProviderName, VoiceGender


class TTSSettings(BaseModel):
    """Generation configuration shared by every language of a batch."""

    model_config = ConfigDict(protected_namespaces=())

    provider: TTSProviderName = Field(default=TTSProviderName.DEEPGRAM, description="TTS provider")
    output_format: str = Field(..., description="Catalog format id")
    sample_rate: int | None = Field(None, description="Sample rate in Hz for PCM/WAV formats")
    model_id: str | None = Field(None, description="Provider model (ElevenLabs)")
    stability: float | None = Field(None, ge=0.0, le=1.0)
    similarity_boost: float | None = Field(None, ge=0.0, le=1.0)
    style: float | None = Field(None, ge=0.0, le=1.0)
    use_speaker_boost: bool | None = None
    auto_translate: bool = True

    def provider_options(self) -> dict[str, Any]:
        """Provider knobs passed through to the driver as keyword options."""
        return self.model_dump(
            include={"model_id", "stability", "similarity_boost", "style", "use_speaker_boost"},
            exclude_none=True,
        )

    def to_record(self) -> dict[str, Any]:
        """Plain dict persisted as the collection's tts_settings."""
        return self.model_dump(mode="json", exclude_none=True)


class SynthesisRequest(BaseModel):
    """One unit of work for one language."""

    language_code: str = Field(..., description="Language code, e.g. 'es'")
    voice_id: str = Field(..., description="Provider-specific voice id")
    voice_name: str = Field(default="", description="Informational voice name")
    text: str = Field(..., description="Text to synthesize")
    provider: TTSProviderName
    output_format: str
    sample_rate: int | None = None


class SynthesisResult(BaseModel):
    """Outcome of one language of a batch. Never modified after creation."""

    model_config = ConfigDict(frozen=True)

    language: str
    success: bool
    item_id: str | None = None
    audio_url: str | None = None
    file_path: str | None = None
    file_size: int = 0
    translated_text: str | None = Field(None, description="Text actually spoken")
    voice_id: str | None = None
    voice_name: str | None = None
    translation_skipped: bool = False
    error: str | None = None
    error_type: GenerationErrorType | None = None
    upstream_status: int | None = None

    @classmethod
    def failure(
        cls,
        language: str,
        error: str,
        error_type: GenerationErrorType,
        upstream_status: int | None = None,
        **extra: Any,
    ) -> "SynthesisResult":
        return cls(
            language=language,
            success=False,
            error=error,
            error_type=error_type,
            upstream_status=upstream_status,
            **extra,
        )


class BatchSummary(BaseModel):
    """Success/failure counts derived from a result list."""

    total: int
    successful: int
    failed: int

    @classmethod
    def from_results(cls, results: list[SynthesisResult]) -> "BatchSummary":
        successful = sum(1 for result in results if result.success)
        return cls(total=len(results), successful=successful, failed=len(results) - successful)


class VoiceInfo(BaseModel):
    """Information about an available TTS voice."""

    model_config = ConfigDict(frozen=True)

    voice_id: str = Field(..., description="Unique voice identifier")
    name: str = Field(..., description="Human-readable voice name")
    language: str | None = Field(None, description="Language code, None for multilingual voices")
    gender: VoiceGender | None = Field(None, description="Voice gender")
    featured: bool = Field(default=False, description="Shown first in voice pickers")
    description: str | None = None
    preview_url: str | None = Field(None, description="URL to voice preview sample")


class AudioFormatInfo(BaseModel):
    """Output format supported by a provider."""

    model_config = ConfigDict(frozen=True)

    format_id: str
    name: str
    mime_type: str
    extension: str
    supports_sample_rate: bool = False
    quality: str | None = None
    encoding: str | None = Field(None, description="Wire encoding when it differs from the id")
    container: str | None = None


class TTSModelInfo(BaseModel):
    """Synthesis model offered by a provider."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    name: str
    description: str = ""
    char_limit: int | None = None


class ProviderStatus(BaseModel):
    """Whether a provider can be called, and its account state when known."""

    provider: TTSProviderName
    configured: bool
    endpoint: str
    valid: bool | None = Field(None, description="API key accepted; None when not checked")
    subscription: dict[str, Any] | None = None
    error: str | None = None


class StoredAudioFile(BaseModel):
    """A generated audio file on disk."""

    filename: str
    url: str
    file_size: int
    created_at: datetime
