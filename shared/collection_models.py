"""
Audio collection request, record and response models.
"""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import CollectionType, TTSProviderName
from .tts_models import BatchSummary, SynthesisResult, TTSSettings


class LanguageSelection(BaseModel):
    """A target language and the voice chosen for it."""

    code: str = Field(..., description="Language code")
    voice_id: str = Field(..., description="Provider voice id")
    voice_name: str = Field(default="", description="Voice display name")


class GenerateCollectionRequest(BaseModel):
    """Batch request: one text, many languages, one provider."""

    model_config = ConfigDict(protected_namespaces=())

    text: str = Field(..., max_length=40000, description="Source text")
    collection_name: str = Field(..., description="Name of the collection to create")
    collection_description: str = ""
    museum_id: str | None = None
    source_language: str = Field(default="en", description="Language of the source text")
    languages: list[LanguageSelection] = Field(default_factory=list)
    provider: TTSProviderName = TTSProviderName.DEEPGRAM
    output_format: str | None = Field(None, description="Catalog format id, provider default when omitted")
    sample_rate: int | None = None
    model_id: str | None = None
    stability: float | None = Field(None, ge=0.0, le=1.0)
    similarity_boost: float | None = Field(None, ge=0.0, le=1.0)
    style: float | None = Field(None, ge=0.0, le=1.0)
    use_speaker_boost: bool | None = None
    auto_translate: bool = True

    def tts_settings(self, default_format: str) -> TTSSettings:
        return TTSSettings(
            provider=self.provider,
            output_format=self.output_format or default_format,
            sample_rate=self.sample_rate,
            model_id=self.model_id,
            stability=self.stability,
            similarity_boost=self.similarity_boost,
            style=self.style,
            use_speaker_boost=self.use_speaker_boost,
            auto_translate=self.auto_translate,
        )


class VoiceRef(BaseModel):
    id: str
    name: str = ""


class CollectionItem(BaseModel):
    """One generated audio file inside an audio collection."""

    model_config = ConfigDict(protected_namespaces=())

    id: str
    type: str = "audio"
    url: str
    language: str
    voice: VoiceRef
    provider: TTSProviderName
    format: str
    sample_rate: int | None = None
    model_id: str | None = None
    model_name: str | None = None
    file_size: int
    text: str
    order: int


class CollectionRecord(BaseModel):
    """Any row of the collections table, with its blobs decoded."""

    id: str | None = None
    museum_id: str | None = None
    name: str
    description: str = ""
    type: str = CollectionType.GALLERY.value
    items: list[dict[str, Any]] = Field(default_factory=list)
    source_language: str | None = None
    texts: dict[str, str] = Field(default_factory=dict)
    tts_settings: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AudioCollection(CollectionRecord):
    """Aggregate record produced by a successful batch."""

    type: str = CollectionType.AUDIO_COLLECTION.value
    items: list[CollectionItem] = Field(default_factory=list)

    def item_dicts(self) -> list[dict[str, Any]]:
        return [item.model_dump(mode="json", exclude_none=True) for item in self.items]


class CollectionUpdate(BaseModel):
    """Whole-field replacement of collection columns; omitted fields are untouched."""

    name: str | None = None
    description: str | None = None
    type: str | None = None
    items: list[dict[str, Any]] | None = None
    source_language: str | None = None
    texts: dict[str, str] | None = None
    tts_settings: dict[str, Any] | None = None


class GenerateCollectionResponse(BaseModel):
    """Everything the caller gets back from a batch."""

    results: list[SynthesisResult]
    summary: BatchSummary
    collection_id: str | None = None
    collection: AudioCollection | None = None
    top_level_error: str | None = None


class PreviewRequest(BaseModel):
    provider: TTSProviderName = TTSProviderName.DEEPGRAM
    voice_id: str
    text: str | None = Field(None, max_length=500)
