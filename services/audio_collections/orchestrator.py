"""
Batch generation of multi-language audio collections.

One source text fans out into one task per target language. Each task
translates (when useful), synthesizes, and writes its file independently; a
failing language never stops its siblings. Once every language has a result
the successful ones are assembled into a single collection record.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

from shared.collection_models import (
    GenerateCollectionRequest,
    GenerateCollectionResponse,
    LanguageSelection,
)
from shared.config import ServiceConfig
from shared.enums import GenerationErrorType, TTSProviderName
from shared.tts_models import BatchSummary, SynthesisRequest, SynthesisResult, TTSSettings
from shared.utils import format_file_size, setup_logging

from .assembler import CollectionAssembler
from .catalog import CATALOG, VoiceCatalog
from .drivers.base import TTSProvider
from .exceptions import EmptyAudioError, SynthesisError, TranslationError, ValidationError
from .repository import new_item_id
from .storage import AudioFileStore, batch_filename
from .translation import TranslationClient

logger = setup_logging("audio-collection-orchestrator")

ALL_FAILED_MESSAGE = "All generations failed"
DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_CALL_TIMEOUT = 60.0


class BatchOrchestrator:
    """Runs one batch request end to end."""

    def __init__(
        self,
        providers: Mapping[TTSProviderName, TTSProvider],
        translator: TranslationClient,
        file_store: AudioFileStore,
        assembler: CollectionAssembler,
        catalog: VoiceCatalog = CATALOG,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
    ):
        self.providers = providers
        self.translator = translator
        self.file_store = file_store
        self.assembler = assembler
        self.catalog = catalog
        self.max_concurrency = max(1, max_concurrency)
        self.call_timeout = call_timeout

    @classmethod
    def from_config(
        cls,
        service_config: ServiceConfig,
        providers: Mapping[TTSProviderName, TTSProvider],
        translator: TranslationClient,
        file_store: AudioFileStore,
        assembler: CollectionAssembler,
        catalog: VoiceCatalog = CATALOG,
    ) -> "BatchOrchestrator":
        return cls(
            providers,
            translator,
            file_store,
            assembler,
            catalog=catalog,
            max_concurrency=int(
                service_config.get_pipeline_value("audio_collections.max_concurrency", DEFAULT_MAX_CONCURRENCY)
            ),
            call_timeout=float(
                service_config.get_pipeline_value("audio_collections.call_timeout_seconds", DEFAULT_CALL_TIMEOUT)
            ),
        )

    def validate(self, request: GenerateCollectionRequest) -> TTSSettings:
        """
        Reject malformed requests before any outbound call.

        Returns:
            Batch settings with the provider's defaults filled in

        Raises:
            ValidationError: on the first problem found
        """
        if not request.collection_name or not request.collection_name.strip():
            raise ValidationError("Collection name is required")
        if not request.text or not request.text.strip():
            raise ValidationError("Text is required")
        if not request.languages:
            raise ValidationError("At least one language is required")

        provider = self.providers.get(request.provider)
        if provider is None:
            raise ValidationError(f"TTS provider '{request.provider.value}' is not configured")

        settings = request.tts_settings(self.catalog.default_format(request.provider))
        audio_format = self.catalog.find_format(request.provider, settings.output_format)
        if audio_format is None or not provider.supports_format(settings.output_format):
            raise ValidationError(
                f"Output format '{settings.output_format}' is not supported by {request.provider.value}"
            )

        if audio_format.supports_sample_rate and request.sample_rate is not None:
            rates = self.catalog.sample_rates(request.provider)
            if request.sample_rate not in rates:
                raise ValidationError(
                    f"Sample rate {request.sample_rate} is not supported; choose one of {list(rates)}"
                )

        seen: set[str] = set()
        for selection in request.languages:
            if selection.code in seen:
                raise ValidationError(f"Language '{selection.code}' is selected more than once")
            seen.add(selection.code)
            if self.catalog.find_voice(request.provider, selection.voice_id) is None:
                raise ValidationError(
                    f"Voice '{selection.voice_id}' is not a {request.provider.value} voice"
                )

        resolved = provider.resolve_settings(settings)
        if resolved.model_id is not None and self.catalog.models(request.provider):
            model = self.catalog.find_model(request.provider, resolved.model_id)
            if model is None:
                raise ValidationError(f"Unknown {request.provider.value} model '{resolved.model_id}'")
            if model.char_limit and len(request.text) > model.char_limit:
                raise ValidationError(
                    f"Text is {len(request.text)} characters, {model.name} accepts at most {model.char_limit}"
                )
        return resolved

    async def generate_collection(self, request: GenerateCollectionRequest) -> GenerateCollectionResponse:
        """
        Generate audio for every selected language and save the collection.

        Raises:
            ValidationError: request rejected, nothing was called
            PersistenceError: audio exists on disk but the record was not saved
        """
        settings = self.validate(request)
        provider = self.providers[request.provider]
        semaphore = asyncio.Semaphore(self.max_concurrency)
        slots: list[SynthesisResult | None] = [None] * len(request.languages)

        logger.info(
            f"Generating '{request.collection_name}' in {len(request.languages)} languages "
            f"with {request.provider.value} ({settings.output_format})"
        )

        async def run(index: int, selection: LanguageSelection) -> None:
            async with semaphore:
                try:
                    slots[index] = await self._process_language(selection, request, settings, provider)
                except Exception as exc:
                    logger.exception(f"[{selection.code}] unexpected error: {exc}")
                    slots[index] = SynthesisResult.failure(
                        selection.code,
                        f"Unexpected error: {exc}",
                        GenerationErrorType.INTERNAL,
                        voice_id=selection.voice_id,
                        voice_name=selection.voice_name,
                    )

        await asyncio.gather(*(run(index, selection) for index, selection in enumerate(request.languages)))

        results = [result for result in slots if result is not None]
        summary = BatchSummary.from_results(results)
        logger.info(f"Batch finished: {summary.successful}/{summary.total} languages succeeded")

        if summary.successful == 0:
            logger.warning(f"{ALL_FAILED_MESSAGE} for '{request.collection_name}'")
            return GenerateCollectionResponse(results=results, summary=summary, top_level_error=ALL_FAILED_MESSAGE)

        collection = self.assembler.assemble(request, results, settings)
        collection_id = self.assembler.persist(collection, results)
        return GenerateCollectionResponse(
            results=results,
            summary=summary,
            collection_id=collection_id,
            collection=collection.model_copy(update={"id": collection_id}),
        )

    async def _process_language(
        self,
        selection: LanguageSelection,
        request: GenerateCollectionRequest,
        settings: TTSSettings,
        provider: TTSProvider,
    ) -> SynthesisResult:
        language = selection.code
        voice = {"voice_id": selection.voice_id, "voice_name": selection.voice_name}

        try:
            text, translation_skipped = await self._text_for(language, request)
        except TranslationError as exc:
            logger.warning(f"[{language}] translation failed: {exc}")
            return SynthesisResult.failure(
                language, str(exc), GenerationErrorType.TRANSLATION, upstream_status=exc.status, **voice
            )
        except asyncio.TimeoutError:
            logger.warning(f"[{language}] translation timed out")
            return SynthesisResult.failure(
                language,
                f"Translation timed out after {self.call_timeout:g}s",
                GenerationErrorType.TIMEOUT,
                **voice,
            )

        spoken = {"translated_text": text, "translation_skipped": translation_skipped, **voice}
        unit = SynthesisRequest(
            language_code=language,
            voice_id=selection.voice_id,
            voice_name=selection.voice_name,
            text=text,
            provider=settings.provider,
            output_format=settings.output_format,
            sample_rate=settings.sample_rate,
        )

        try:
            audio = await asyncio.wait_for(
                provider.synthesize(
                    unit.text,
                    unit.voice_id,
                    unit.output_format,
                    unit.sample_rate,
                    **settings.provider_options(),
                ),
                timeout=self.call_timeout,
            )
            if not audio:
                raise EmptyAudioError("empty audio returned")
        except SynthesisError as exc:
            logger.warning(f"[{language}] synthesis failed: {exc}")
            return SynthesisResult.failure(
                language, str(exc), GenerationErrorType.SYNTHESIS, upstream_status=exc.status, **spoken
            )
        except asyncio.TimeoutError:
            logger.warning(f"[{language}] synthesis timed out")
            return SynthesisResult.failure(
                language,
                f"Synthesis timed out after {self.call_timeout:g}s",
                GenerationErrorType.TIMEOUT,
                **spoken,
            )
        except EmptyAudioError as exc:
            logger.warning(f"[{language}] provider returned no audio")
            return SynthesisResult.failure(language, str(exc), GenerationErrorType.EMPTY_AUDIO, **spoken)

        return await self._store_audio(language, selection, settings, audio, spoken)

    async def _text_for(self, language: str, request: GenerateCollectionRequest) -> tuple[str, bool]:
        """Text to speak in ``language`` and whether translation was skipped."""
        if language == request.source_language:
            return request.text, False

        if request.auto_translate and self.catalog.can_translate(language):
            translated = await asyncio.wait_for(
                self.translator.translate(request.text, request.source_language, language),
                timeout=self.call_timeout,
            )
            return translated, False

        logger.warning(
            f"[{language}] speaking untranslated {request.source_language} text "
            f"(auto_translate={request.auto_translate})"
        )
        return request.text, True

    async def _store_audio(
        self,
        language: str,
        selection: LanguageSelection,
        settings: TTSSettings,
        audio: bytes,
        spoken: dict[str, Any],
    ) -> SynthesisResult:
        audio_format = self.catalog.find_format(settings.provider, settings.output_format)
        extension = audio_format.extension if audio_format else f".{settings.output_format}"
        filename = batch_filename(settings.provider.value, language, selection.voice_id, extension)

        try:
            path = await self.file_store.write(filename, audio)
        except OSError as exc:
            logger.error(f"[{language}] could not write {filename}: {exc}")
            return SynthesisResult.failure(language, f"Could not save audio: {exc}", GenerationErrorType.STORAGE, **spoken)

        logger.info(f"[{language}] generated {filename} ({format_file_size(len(audio))})")
        return SynthesisResult(
            language=language,
            success=True,
            item_id=new_item_id(),
            audio_url=self.file_store.public_url(filename),
            file_path=path,
            file_size=len(audio),
            **spoken,
        )

    async def preview_voice(
        self,
        provider_name: TTSProviderName | str,
        voice_id: str,
        sample_text: str | None = None,
    ) -> bytes:
        """Synthesize a short sample for one voice. Nothing is stored."""
        try:
            provider = self.providers[TTSProviderName(provider_name)]
        except (KeyError, ValueError) as exc:
            raise ValidationError(f"TTS provider '{provider_name}' is not configured") from exc
        if not voice_id:
            raise ValidationError("Voice is required")

        audio = await asyncio.wait_for(provider.preview(voice_id, sample_text), timeout=self.call_timeout)
        if not audio:
            raise EmptyAudioError(f"{provider.display_name} returned no audio for voice {voice_id}")
        return audio

