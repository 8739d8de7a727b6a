"""Tests for the Deepgram and ElevenLabs provider clients."""

import aiohttp
import pytest

from services.audio_collections.drivers import DeepgramTTSProvider, ElevenLabsTTSProvider, build_providers
from services.audio_collections.exceptions import SynthesisError
from shared.config import ServiceConfig
from shared.enums import TTSProviderName
from shared.http_client import UpstreamResponseError
from shared.tts_models import TTSSettings

DEEPGRAM_URL = "https://api.deepgram.com/v1"
ELEVENLABS_URL = "https://api.elevenlabs.io/v1"


class TestDeepgramProvider:
    @pytest.mark.asyncio
    async def test_synthesize_mp3(self, make_http) -> None:
        http = make_http(chunks=[b"ID3", b"abc", b"def"])
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL)

        audio = await provider.synthesize("Hello there", "aura-2-thalia-en", "mp3", sample_rate=48000)

        assert audio == b"ID3abcdef"
        assert len(http.requests) == 1
        request = http.requests[0]
        assert request["url"] == f"{DEEPGRAM_URL}/speak"
        assert request["data"] == {"text": "Hello there"}
        assert request["headers"]["Authorization"] == "Token dg-key"
        assert request["params"] == {"model": "aura-2-thalia-en", "encoding": "mp3"}

    @pytest.mark.asyncio
    async def test_wav_sends_linear16_and_sample_rate(self, make_http) -> None:
        http = make_http()
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL)

        await provider.synthesize("Hallo", "aura-2-julius-de", "wav", sample_rate=16000)

        assert http.requests[0]["params"] == {
            "model": "aura-2-julius-de",
            "encoding": "linear16",
            "container": "wav",
            "sample_rate": "16000",
        }

    @pytest.mark.asyncio
    async def test_ogg_uses_opus_in_ogg_container(self, make_http) -> None:
        http = make_http()
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL)

        await provider.synthesize("Bonjour", "aura-2-agathe-fr", "ogg", sample_rate=24000)

        params = http.requests[0]["params"]
        assert params["encoding"] == "opus"
        assert params["container"] == "ogg"
        assert "sample_rate" not in params

    @pytest.mark.asyncio
    async def test_upstream_error_keeps_status_and_body(self, make_http) -> None:
        body = '{"err_code":"INVALID_MODEL","err_msg":"No such model"}'
        http = make_http(error=UpstreamResponseError(400, body, f"{DEEPGRAM_URL}/speak"))
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL)

        with pytest.raises(SynthesisError) as exc_info:
            await provider.synthesize("Hello", "aura-2-thalia-en", "mp3")

        assert exc_info.value.status == 400
        assert exc_info.value.body == body
        assert body in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error_has_no_status(self, make_http) -> None:
        http = make_http(error=aiohttp.ClientConnectionError("connection reset"))
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL)

        with pytest.raises(SynthesisError) as exc_info:
            await provider.synthesize("Hello", "aura-2-thalia-en", "mp3")

        assert exc_info.value.status is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("text", "voice_id", "api_key"),
        [("   ", "aura-2-thalia-en", "dg-key"), ("Hello", "", "dg-key"), ("Hello", "aura-2-thalia-en", "")],
    )
    async def test_rejects_before_calling_out(self, make_http, text, voice_id, api_key) -> None:
        http = make_http()
        provider = DeepgramTTSProvider(http, api_key, DEEPGRAM_URL)

        with pytest.raises(SynthesisError):
            await provider.synthesize(text, voice_id, "mp3")
        assert http.requests == []

    @pytest.mark.asyncio
    async def test_unsupported_format(self, make_http) -> None:
        http = make_http()
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL)

        with pytest.raises(SynthesisError):
            await provider.synthesize("Hello", "aura-2-thalia-en", "mp3_44100_128")
        assert http.requests == []

    @pytest.mark.asyncio
    async def test_preview_uses_voice_language(self, make_http) -> None:
        http = make_http()
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL)

        await provider.preview("aura-2-celeste-es")

        request = http.requests[0]
        assert request["data"]["text"].startswith("¡Hola")
        assert request["params"]["encoding"] == "mp3"

    @pytest.mark.asyncio
    async def test_stream_chunk_size_is_configurable(self, make_http) -> None:
        http = make_http()
        provider = DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL, chunk_size=1024)

        await provider.synthesize("Hello", "aura-2-thalia-en", "mp3")

        assert http.last_response.content.chunk_size == 1024

    def test_resolve_settings_fills_sample_rate_for_wav(self, make_http) -> None:
        provider = DeepgramTTSProvider(make_http(), "dg-key", DEEPGRAM_URL)

        wav = provider.resolve_settings(TTSSettings(output_format="wav"))
        mp3 = provider.resolve_settings(TTSSettings(output_format="mp3", sample_rate=16000, stability=0.2))

        assert wav.sample_rate == 24000
        assert mp3.sample_rate is None
        assert mp3.stability is None


class TestElevenLabsProvider:
    @pytest.mark.asyncio
    async def test_synthesize_request_shape(self, make_http) -> None:
        http = make_http(chunks=[b"\xff\xfb", b"frames"])
        provider = ElevenLabsTTSProvider(http, "xi-key", ELEVENLABS_URL)

        audio = await provider.synthesize("  Hola  ", "21m00Tcm4TlvDq8ikWAM", "mp3_44100_128", sample_rate=44100)

        assert audio == b"\xff\xfbframes"
        request = http.requests[0]
        assert request["url"] == f"{ELEVENLABS_URL}/text-to-speech/21m00Tcm4TlvDq8ikWAM"
        assert request["params"] == {"output_format": "mp3_44100_128"}
        assert request["headers"]["xi-api-key"] == "xi-key"
        assert request["data"] == {
            "text": "Hola",
            "model_id": "eleven_multilingual_v2",
            "voice_settings": {
                "stability": 0.5,
                "similarity_boost": 0.75,
                "style": 0.0,
                "use_speaker_boost": True,
            },
        }

    @pytest.mark.asyncio
    async def test_options_override_defaults(self, make_http) -> None:
        http = make_http()
        provider = ElevenLabsTTSProvider(http, "xi-key", ELEVENLABS_URL)

        await provider.synthesize(
            "Hello",
            "pNInz6obpgDQGcFmaJgB",
            "pcm_24000",
            model_id="eleven_turbo_v2_5",
            stability=0.9,
            use_speaker_boost=False,
        )

        body = http.requests[0]["data"]
        assert body["model_id"] == "eleven_turbo_v2_5"
        assert body["voice_settings"]["stability"] == 0.9
        assert body["voice_settings"]["use_speaker_boost"] is False
        assert body["voice_settings"]["similarity_boost"] == 0.75

    @pytest.mark.asyncio
    async def test_upstream_error_body_is_verbatim(self, make_http) -> None:
        body = '{"detail":{"status":"quota_exceeded","message":"This request exceeds your quota"}}'
        http = make_http(error=UpstreamResponseError(401, body))
        provider = ElevenLabsTTSProvider(http, "xi-key", ELEVENLABS_URL)

        with pytest.raises(SynthesisError) as exc_info:
            await provider.synthesize("Hello", "21m00Tcm4TlvDq8ikWAM", "mp3_44100_128")

        assert exc_info.value.status == 401
        assert exc_info.value.body == body
        assert exc_info.value.provider == "ElevenLabs"

    @pytest.mark.asyncio
    async def test_preview(self, make_http) -> None:
        http = make_http()
        provider = ElevenLabsTTSProvider(http, "xi-key", ELEVENLABS_URL)

        await provider.preview("21m00Tcm4TlvDq8ikWAM")

        request = http.requests[0]
        assert request["data"] == {
            "text": "Hello! This is a preview of how I sound.",
            "model_id": "eleven_flash_v2_5",
        }
        assert request["params"] == {"output_format": "mp3_44100_128"}

    @pytest.mark.asyncio
    async def test_list_premade_voices_filters_library_voices(self, make_http) -> None:
        http = make_http(
            json_body={
                "voices": [
                    {"voice_id": "a", "name": "Rachel", "category": "premade", "labels": {"gender": "female"}},
                    {"voice_id": "b", "name": "Shared", "category": "professional", "labels": {}},
                    {"voice_id": "c", "name": "Roger", "category": "premade", "labels": {"gender": "unknown"}},
                ]
            }
        )
        provider = ElevenLabsTTSProvider(http, "xi-key", ELEVENLABS_URL)

        voices = await provider.list_premade_voices()

        assert [voice.voice_id for voice in voices] == ["a", "c"]
        assert voices[0].gender == "female"
        assert voices[1].gender is None
        assert http.requests[0]["url"] == f"{ELEVENLABS_URL}/voices"

    @pytest.mark.asyncio
    async def test_status_reports_subscription(self, make_http) -> None:
        http = make_http(
            json_body={
                "tier": "creator",
                "character_count": 1200,
                "character_limit": 100000,
                "can_use_instant_voice_cloning": True,
                "can_use_professional_voice_cloning": False,
                "next_character_count_reset_unix": 1700000000,
            }
        )
        provider = ElevenLabsTTSProvider(http, "xi-key", ELEVENLABS_URL)

        status = await provider.status()

        assert status.configured is True
        assert status.valid is True
        assert status.subscription["character_limit"] == 100000
        assert "next_character_count_reset_unix" not in status.subscription
        assert http.requests[0]["url"] == f"{ELEVENLABS_URL}/user/subscription"
        assert http.requests[0]["headers"] == {"xi-api-key": "xi-key"}

    @pytest.mark.asyncio
    async def test_status_without_key_makes_no_call(self, make_http) -> None:
        http = make_http()

        status = await ElevenLabsTTSProvider(http, "", ELEVENLABS_URL).status()

        assert status.configured is False
        assert status.valid is None
        assert "not configured" in status.error
        assert http.requests == []

    @pytest.mark.asyncio
    async def test_status_with_rejected_key(self, make_http) -> None:
        http = make_http(error=UpstreamResponseError(401, "invalid_api_key"))

        status = await ElevenLabsTTSProvider(http, "bad", ELEVENLABS_URL).status()

        assert status.configured is True
        assert status.valid is False
        assert "401" in status.error

    def test_resolve_settings_fills_model_and_knobs(self, make_http) -> None:
        provider = ElevenLabsTTSProvider(make_http(), "xi-key", ELEVENLABS_URL)

        settings = provider.resolve_settings(
            TTSSettings(provider=TTSProviderName.ELEVENLABS, output_format="mp3_44100_128", sample_rate=22050, style=0.3)
        )

        assert settings.model_id == "eleven_multilingual_v2"
        assert settings.sample_rate is None
        assert settings.style == 0.3
        assert settings.stability == 0.5


def test_build_providers_registry(make_http) -> None:
    service_config = ServiceConfig()
    service_config.set("deepgram_api_key", "dg")
    service_config.set("elevenlabs_api_key", "xi")

    providers = build_providers(make_http(), service_config)

    assert isinstance(providers[TTSProviderName.DEEPGRAM], DeepgramTTSProvider)
    assert isinstance(providers[TTSProviderName.ELEVENLABS], ElevenLabsTTSProvider)
    assert providers[TTSProviderName.ELEVENLABS].api_key == "xi"


@pytest.mark.asyncio
async def test_deepgram_status_reports_configuration(make_http) -> None:
    http = make_http()

    status = await DeepgramTTSProvider(http, "dg-key", DEEPGRAM_URL).status()

    assert status.provider == TTSProviderName.DEEPGRAM
    assert status.configured is True
    assert status.endpoint == DEEPGRAM_URL
    assert http.requests == []
