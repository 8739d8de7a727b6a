import asyncio
from typing import Any, ClassVar

import aiohttp

from services.audio_collections.exceptions import SynthesisError
from shared.enums import TTSProviderName, VoiceGender
from shared.http_client import UpstreamResponseError
from shared.tts_models import ProviderStatus, TTSSettings, VoiceInfo
from shared.utils import setup_logging

from .base import TTSProvider

logger = setup_logging("elevenlabs-tts")


def _parse_gender(value: str | None) -> VoiceGender | None:
    try:
        return VoiceGender(value)
    except ValueError:
        return None


class ElevenLabsTTSProvider(TTSProvider):
    """ElevenLabs text-to-speech with multilingual models."""

    name: ClassVar[TTSProviderName] = TTSProviderName.ELEVENLABS
    display_name: ClassVar[str] = "ElevenLabs"

    DEFAULT_VOICE_SETTINGS: ClassVar[dict[str, Any]] = {
        "stability": 0.5,
        "similarity_boost": 0.75,
        "style": 0.0,
        "use_speaker_boost": True,
    }
    PREVIEW_TEXT: ClassVar[str] = "Hello! This is a preview of how I sound."
    PREVIEW_FORMAT: ClassVar[str] = "mp3_44100_128"
    PREVIEW_MODEL: ClassVar[str] = "eleven_flash_v2_5"
    SUBSCRIPTION_FIELDS: ClassVar[tuple[str, ...]] = (
        "tier",
        "character_count",
        "character_limit",
        "can_use_instant_voice_cloning",
        "can_use_professional_voice_cloning",
    )

    def _headers(self) -> dict[str, str]:
        return {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

    def resolve_settings(self, settings: TTSSettings) -> TTSSettings:
        update: dict[str, Any] = {"sample_rate": None}
        if settings.model_id is None:
            update["model_id"] = self.catalog.default_model(self.name)
        for key, value in self.DEFAULT_VOICE_SETTINGS.items():
            if getattr(settings, key) is None:
                update[key] = value
        return settings.model_copy(update=update)

    async def synthesize(
        self,
        text: str,
        voice_id: str,
        output_format: str = "mp3_44100_128",
        sample_rate: int | None = None,
        **options: Any,
    ) -> bytes:
        """
        Synthesize speech with ElevenLabs.

        The sample rate is part of the format id (``pcm_24000``), so
        ``sample_rate`` is never sent.

        Args:
            text: Text to speak, trimmed before sending
            voice_id: ElevenLabs voice id
            output_format: Catalog format id
            sample_rate: Ignored
            **options: model_id, stability, similarity_boost, style, use_speaker_boost

        Returns:
            Raw audio bytes
        """
        self._check_request(text, voice_id)
        self._require_format(output_format)

        voice_settings = {
            key: options[key] if options.get(key) is not None else default
            for key, default in self.DEFAULT_VOICE_SETTINGS.items()
        }
        body = {
            "text": text.strip(),
            "model_id": options.get("model_id") or self.catalog.default_model(self.name),
            "voice_settings": voice_settings,
        }

        logger.info(
            f"ElevenLabs TTS: voice={voice_id}, model={body['model_id']}, "
            f"format={output_format}, text_len={len(body['text'])}"
        )
        return await self._post_audio(
            f"{self.base_url}/text-to-speech/{voice_id}",
            body,
            self._headers(),
            {"output_format": output_format},
        )

    async def preview(self, voice_id: str, sample_text: str | None = None) -> bytes:
        text = sample_text or self.PREVIEW_TEXT
        self._check_request(text, voice_id)
        return await self._post_audio(
            f"{self.base_url}/text-to-speech/{voice_id}",
            {"text": text.strip(), "model_id": self.PREVIEW_MODEL},
            self._headers(),
            {"output_format": self.PREVIEW_FORMAT},
        )

    async def list_premade_voices(self) -> list[VoiceInfo]:
        """
        Fetch the account's voices and keep only ElevenLabs' premade ones.

        Library voices count against the account's custom voice slots once
        used for generation, so they are never offered.
        """
        if not self.api_key:
            raise SynthesisError(self.display_name, "ElevenLabs API key not configured")

        try:
            data = await self.http.get(f"{self.base_url}/voices", headers={"xi-api-key": self.api_key})
        except UpstreamResponseError as exc:
            raise SynthesisError.from_upstream(self.display_name, exc.status, exc.body) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SynthesisError(self.display_name, f"ElevenLabs request failed: {exc!s}") from exc

        voices = []
        for voice in data.get("voices", []):
            if voice.get("category") != "premade":
                continue
            labels = voice.get("labels") or {}
            voices.append(
                VoiceInfo(
                    voice_id=voice["voice_id"],
                    name=voice.get("name", voice["voice_id"]),
                    gender=_parse_gender(labels.get("gender")),
                    description=labels.get("description"),
                    preview_url=voice.get("preview_url"),
                )
            )

        logger.info(f"Fetched {len(voices)} premade ElevenLabs voices")
        return voices

    async def status(self) -> ProviderStatus:
        """Key check against the account's subscription, with character quota."""
        status = await super().status()
        if not status.configured:
            return status.model_copy(update={"error": "ElevenLabs API key not configured"})

        try:
            data = await self.http.get(
                f"{self.base_url}/user/subscription", headers={"xi-api-key": self.api_key}
            )
        except UpstreamResponseError as exc:
            logger.warning(f"ElevenLabs subscription check failed: {exc.status} {exc.body}")
            return status.model_copy(update={"valid": False, "error": f"Invalid API key or API error ({exc.status})"})
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.warning(f"ElevenLabs subscription check failed: {exc!r}")
            return status.model_copy(update={"valid": False, "error": f"ElevenLabs request failed: {exc!s}"})

        data = data if isinstance(data, dict) else {}
        subscription = {key: data.get(key) for key in self.SUBSCRIPTION_FIELDS}
        return status.model_copy(update={"valid": True, "subscription": subscription})
