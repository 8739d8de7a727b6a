import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import get_db, init_database
from shared.collection_models import (
    CollectionRecord,
    CollectionUpdate,
    GenerateCollectionRequest,
    GenerateCollectionResponse,
    PreviewRequest,
)
from shared.config import config
from shared.enums import TTSProviderName
from shared.http_client import AsyncHTTPClient
from shared.tts_models import StoredAudioFile
from shared.utils import setup_logging

from .assembler import CollectionAssembler
from .catalog import CATALOG, VoiceCatalog
from .drivers import ElevenLabsTTSProvider, TTSProvider, build_providers
from .exceptions import (
    CollectionNotFoundError,
    EmptyAudioError,
    PersistenceError,
    SynthesisError,
    TranslationError,
    ValidationError,
)
from .orchestrator import BatchOrchestrator
from .repository import CollectionRepository
from .storage import AudioFileStore
from .translation import TranslationClient, build_translation_client

logger = setup_logging("audio-collections-service")


@dataclass
class AudioPipeline:
    """Long-lived collaborators shared by every request."""

    http: AsyncHTTPClient
    providers: dict[TTSProviderName, TTSProvider]
    translator: TranslationClient
    file_store: AudioFileStore
    catalog: VoiceCatalog = CATALOG


@asynccontextmanager
async def lifespan(app: FastAPI):
    http = AsyncHTTPClient(timeout=float(config.get("http_timeout", 120)))
    await http.open()
    init_database()
    app.state.pipeline = AudioPipeline(
        http=http,
        providers=build_providers(http, config),
        translator=build_translation_client(http, config),
        file_store=AudioFileStore.from_config(config),
    )
    logger.info("Audio collection pipeline ready")
    try:
        yield
    finally:
        await http.close()


def get_pipeline(request: Request) -> AudioPipeline:
    return request.app.state.pipeline


def get_repository(db: Session = Depends(get_db)) -> CollectionRepository:
    return CollectionRepository(db)


def get_orchestrator(
    pipeline: AudioPipeline = Depends(get_pipeline),
    repository: CollectionRepository = Depends(get_repository),
) -> BatchOrchestrator:
    return BatchOrchestrator.from_config(
        config,
        pipeline.providers,
        pipeline.translator,
        pipeline.file_store,
        CollectionAssembler(repository, pipeline.catalog),
        catalog=pipeline.catalog,
    )


def _provider_or_400(catalog: VoiceCatalog, provider: str) -> TTSProviderName:
    try:
        return TTSProviderName(provider)
    except ValueError as exc:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown provider '{provider}'. Choose one of {[p.value for p in catalog.providers]}",
        ) from exc


router = APIRouter()


@router.post("/collections/generate", response_model=GenerateCollectionResponse, status_code=201)
async def generate_collection(
    req: GenerateCollectionRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    """Translate, synthesize and save one audio collection across languages."""
    try:
        response = await orchestrator.generate_collection(req)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PersistenceError as e:
        logger.error(f"Collection not saved, {len(e.orphaned_files)} generated files kept on disk")
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(e),
                "results": [result.model_dump(mode="json") for result in e.results],
                "collection": e.collection.model_dump(mode="json") if e.collection else None,
            },
        )

    if response.top_level_error:
        return JSONResponse(status_code=502, content=response.model_dump(mode="json"))
    return response


@router.post("/preview")
async def preview_voice(
    req: PreviewRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    """Short voice sample; provider errors are passed through."""
    try:
        audio = await orchestrator.preview_voice(req.provider, req.voice_id, req.text)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SynthesisError as e:
        raise HTTPException(status_code=e.status or 502, detail=e.body or str(e)) from e
    except asyncio.TimeoutError as e:
        raise HTTPException(status_code=504, detail="Voice preview timed out") from e
    except EmptyAudioError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    return Response(content=audio, media_type="audio/mpeg")


@router.get("/voices")
async def list_voices(
    provider: str = Query("deepgram"),
    language: str | None = Query(None),
    pipeline: AudioPipeline = Depends(get_pipeline),
):
    provider_name = _provider_or_400(pipeline.catalog, provider)
    voices = pipeline.catalog.voices(provider_name, language)
    return {
        "provider": provider_name.value,
        "voices": [voice.model_dump(mode="json") for voice in voices],
    }


@router.post("/voices/refresh")
async def refresh_elevenlabs_voices(pipeline: AudioPipeline = Depends(get_pipeline)):
    """Replace the ElevenLabs voice list with the account's premade voices."""
    provider = pipeline.providers.get(TTSProviderName.ELEVENLABS)
    if not isinstance(provider, ElevenLabsTTSProvider):
        raise HTTPException(status_code=404, detail="ElevenLabs provider not configured")
    try:
        voices = await provider.list_premade_voices()
    except SynthesisError as e:
        raise HTTPException(status_code=e.status or 502, detail=e.body or str(e)) from e

    if voices:
        pipeline.catalog = pipeline.catalog.with_voices(TTSProviderName.ELEVENLABS, voices)
    return {"provider": TTSProviderName.ELEVENLABS.value, "count": len(voices)}


@router.get("/formats")
async def list_formats(provider: str = Query("deepgram"), pipeline: AudioPipeline = Depends(get_pipeline)):
    provider_name = _provider_or_400(pipeline.catalog, provider)
    catalog = pipeline.catalog
    return {
        "provider": provider_name.value,
        "formats": [audio_format.model_dump(mode="json") for audio_format in catalog.formats(provider_name)],
        "default_format": catalog.default_format(provider_name),
        "sample_rates": list(catalog.sample_rates(provider_name)),
        "default_sample_rate": catalog.default_sample_rate(provider_name),
        "models": [model.model_dump(mode="json") for model in catalog.models(provider_name)],
        "default_model": catalog.default_model(provider_name),
    }


@router.get("/languages")
async def list_languages(pipeline: AudioPipeline = Depends(get_pipeline)):
    catalog = pipeline.catalog

    def named(codes: Any) -> list[dict[str, str]]:
        return [{"code": code, "name": catalog.language_name(code)} for code in codes]

    return {
        "translation": named(sorted(catalog.translation_languages)),
        "providers": {provider.value: named(catalog.languages(provider)) for provider in catalog.providers},
    }


@router.get("/languages/translation-service")
async def list_translation_service_languages(pipeline: AudioPipeline = Depends(get_pipeline)):
    try:
        return await pipeline.translator.list_languages()
    except TranslationError as e:
        raise HTTPException(status_code=e.status or 502, detail=e.body or str(e)) from e


@router.get("/collections", response_model=list[CollectionRecord])
async def list_collections(
    type: str | None = Query(None),
    museum_id: str | None = Query(None),
    repository: CollectionRepository = Depends(get_repository),
):
    return repository.list(type=type, museum_id=museum_id)


@router.get("/collections/{collection_id}", response_model=CollectionRecord)
async def get_collection(collection_id: str, repository: CollectionRepository = Depends(get_repository)):
    try:
        return repository.get(collection_id)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.put("/collections/{collection_id}", response_model=CollectionRecord)
async def update_collection(
    collection_id: str,
    changes: CollectionUpdate,
    repository: CollectionRepository = Depends(get_repository),
):
    try:
        return repository.update(collection_id, changes)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/collections/{collection_id}", status_code=204)
async def delete_collection(collection_id: str, repository: CollectionRepository = Depends(get_repository)):
    try:
        repository.delete(collection_id)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return Response(status_code=204)


@router.post("/collections/{collection_id}/items", response_model=CollectionRecord)
async def add_collection_item(
    collection_id: str,
    item: dict[str, Any],
    repository: CollectionRepository = Depends(get_repository),
):
    try:
        return repository.add_item(collection_id, item)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/collections/{collection_id}/items/{item_id}", response_model=CollectionRecord)
async def remove_collection_item(
    collection_id: str,
    item_id: str,
    repository: CollectionRepository = Depends(get_repository),
):
    try:
        return repository.remove_item(collection_id, item_id)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/status")
async def provider_status(pipeline: AudioPipeline = Depends(get_pipeline)):
    """Which providers have keys, plus the ElevenLabs subscription and quota."""
    statuses = await asyncio.gather(*(provider.status() for provider in pipeline.providers.values()))
    return {status.provider.value: status.model_dump(mode="json", exclude={"provider"}) for status in statuses}


@router.get("/files", response_model=list[StoredAudioFile])
async def list_generated_files(pipeline: AudioPipeline = Depends(get_pipeline)):
    return await asyncio.to_thread(pipeline.file_store.list_files)


@router.delete("/files/{filename}", status_code=204)
async def delete_generated_file(filename: str, pipeline: AudioPipeline = Depends(get_pipeline)):
    try:
        deleted = pipeline.file_store.delete(filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not deleted:
        raise HTTPException(status_code=404, detail="Audio file not found")
    return Response(status_code=204)


@router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "audio-collections",
        "providers": [provider.value for provider in CATALOG.providers],
    }


app = FastAPI(
    title="Audio Collection Service",
    description="Multi-language audio collection generation with Deepgram and ElevenLabs",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
