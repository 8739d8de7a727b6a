"""Build the aggregate collection from batch results and persist it."""

from typing import Protocol
from uuid import uuid4

from shared.collection_models import (
    AudioCollection,
    CollectionItem,
    CollectionRecord,
    GenerateCollectionRequest,
    VoiceRef,
)
from shared.tts_models import SynthesisResult, TTSSettings
from shared.utils import setup_logging

from .catalog import CATALOG, VoiceCatalog
from .exceptions import PersistenceError

logger = setup_logging("collection-assembler")


class CollectionStore(Protocol):
    def create(self, record: CollectionRecord) -> CollectionRecord: ...


class CollectionAssembler:
    """Turns successful results into one ``AudioCollection`` and saves it."""

    def __init__(self, store: CollectionStore, catalog: VoiceCatalog = CATALOG):
        self.store = store
        self.catalog = catalog

    def assemble(
        self,
        request: GenerateCollectionRequest,
        results: list[SynthesisResult],
        settings: TTSSettings,
    ) -> AudioCollection:
        """
        Build the collection record. Pure: no I/O.

        Failed results are left out; ``order`` is the position among the
        successful ones, so it is always contiguous from zero.
        """
        model = self.catalog.find_model(settings.provider, settings.model_id) if settings.model_id else None
        items: list[CollectionItem] = []
        texts: dict[str, str] = {}

        for result in (result for result in results if result.success):
            items.append(
                CollectionItem(
                    id=result.item_id or str(uuid4()),
                    url=result.audio_url or "",
                    language=result.language,
                    voice=VoiceRef(id=result.voice_id or "", name=result.voice_name or ""),
                    provider=settings.provider,
                    format=settings.output_format,
                    sample_rate=settings.sample_rate,
                    model_id=settings.model_id,
                    model_name=model.name if model else None,
                    file_size=result.file_size,
                    text=result.translated_text or "",
                    order=len(items),
                )
            )
            texts[result.language] = result.translated_text or ""

        return AudioCollection(
            id=str(uuid4()),
            museum_id=request.museum_id,
            name=request.collection_name.strip(),
            description=request.collection_description,
            items=items,
            source_language=request.source_language,
            texts=texts,
            tts_settings=settings.to_record(),
        )

    def persist(self, collection: AudioCollection, results: list[SynthesisResult] | None = None) -> str:
        """Store the collection with exactly one ``create`` call and return its id."""
        try:
            stored = self.store.create(collection)
        except Exception as exc:
            logger.error(f"Failed to persist collection '{collection.name}': {exc}")
            raise PersistenceError(
                f"Audio was generated but the collection could not be saved: {exc}",
                results=results,
                collection=collection,
                cause=exc,
            ) from exc

        logger.info(f"Persisted audio collection {stored.id} with {len(collection.items)} items")
        return stored.id
