"""TTS provider implementations"""

from services.audio_collections.catalog import CATALOG, VoiceCatalog
from shared.config import ServiceConfig
from shared.enums import TTSProviderName
from shared.http_client import AsyncHTTPClient

from .base import TTSProvider
from .deepgram import DeepgramTTSProvider
from .elevenlabs import ElevenLabsTTSProvider


def build_providers(
    http: AsyncHTTPClient,
    service_config: ServiceConfig,
    catalog: VoiceCatalog = CATALOG,
) -> dict[TTSProviderName, TTSProvider]:
    """Provider registry keyed by provider name, sharing one HTTP client."""
    chunk_size = int(service_config.get_pipeline_value("audio_collections.stream_chunk_size", 16384))
    return {
        TTSProviderName.DEEPGRAM: DeepgramTTSProvider(
            http,
            service_config.get("deepgram_api_key", ""),
            service_config.get("deepgram_api_url", "https://api.deepgram.com/v1"),
            catalog=catalog,
            chunk_size=chunk_size,
        ),
        TTSProviderName.ELEVENLABS: ElevenLabsTTSProvider(
            http,
            service_config.get("elevenlabs_api_key", ""),
            service_config.get("elevenlabs_api_url", "https://api.elevenlabs.io/v1"),
            catalog=catalog,
            chunk_size=chunk_size,
        ),
    }


__all__ = ["DeepgramTTSProvider", "ElevenLabsTTSProvider", "TTSProvider", "build_providers"]
