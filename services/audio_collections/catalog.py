"""Static voice, format and language reference data for the TTS providers.

The catalog is built once at import time and never mutated. ``with_voices``
returns a new catalog when the voice list is refreshed from a provider.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

from shared.enums import TTSProviderName, VoiceGender
from shared.tts_models import AudioFormatInfo, TTSModelInfo, VoiceInfo

F = VoiceGender.FEMALE
M = VoiceGender.MALE

# Languages the translation service is trusted with
TRANSLATION_LANGUAGES = frozenset({"en", "es", "fr", "de", "it", "ja", "ko", "pt", "zh"})

LANGUAGE_NAMES: Mapping[str, str] = MappingProxyType({
    "en": "English", "es": "Spanish", "fr": "French", "de": "German",
    "it": "Italian", "pt": "Portuguese", "pl": "Polish", "nl": "Dutch",
    "sv": "Swedish", "da": "Danish", "fi": "Finnish", "no": "Norwegian",
    "cs": "Czech", "ro": "Romanian", "el": "Greek", "tr": "Turkish",
    "ru": "Russian", "uk": "Ukrainian", "hu": "Hungarian", "bg": "Bulgarian",
    "hr": "Croatian", "sk": "Slovak", "id": "Indonesian", "ms": "Malay",
    "vi": "Vietnamese", "th": "Thai", "zh": "Chinese", "ja": "Japanese",
    "ko": "Korean", "hi": "Hindi", "ar": "Arabic", "he": "Hebrew",
})

PREVIEW_TEXTS: Mapping[str, str] = MappingProxyType({
    "en": "Hello! This is a sample of my voice. I hope you like how I sound.",
    "es": "¡Hola! Esta es una muestra de mi voz. Espero que te guste cómo sueno.",
    "de": "Hallo! Dies ist eine Probe meiner Stimme. Ich hoffe, sie gefällt Ihnen.",
    "fr": "Bonjour! Ceci est un échantillon de ma voix. J'espère qu'elle vous plaît.",
    "nl": "Hallo! Dit is een voorbeeld van mijn stem. Ik hoop dat u het mooi vindt.",
    "it": "Ciao! Questo è un esempio della mia voce. Spero che ti piaccia.",
    "ja": "こんにちは！これは私の声のサンプルです。気に入っていただけると嬉しいです。",
})


def _aura(language: str, *voices: tuple[str, VoiceGender, bool]) -> tuple[VoiceInfo, ...]:
    return tuple(
        VoiceInfo(
            voice_id=f"aura-2-{name.lower()}-{language}",
            name=name,
            language=language,
            gender=gender,
            featured=featured,
        )
        for name, gender, featured in voices
    )


DEEPGRAM_VOICES: tuple[VoiceInfo, ...] = (
    _aura(
        "en",
        ("Thalia", F, True), ("Andromeda", F, True), ("Helena", F, True),
        ("Apollo", M, True), ("Arcas", M, True), ("Aries", M, True),
        ("Amalthea", F, False), ("Asteria", F, False), ("Athena", F, False),
        ("Atlas", M, False), ("Aurora", F, False), ("Callista", F, False),
        ("Cora", F, False), ("Cordelia", F, False), ("Delia", F, False),
        ("Draco", M, False), ("Electra", F, False), ("Harmonia", F, False),
        ("Hera", F, False), ("Hermes", M, False), ("Hyperion", M, False),
        ("Iris", F, False), ("Janus", M, False), ("Juno", F, False),
        ("Jupiter", M, False), ("Luna", F, False), ("Mars", M, False),
        ("Minerva", F, False), ("Neptune", M, False), ("Odysseus", M, False),
        ("Ophelia", F, False), ("Orion", M, False), ("Orpheus", M, False),
        ("Pandora", F, False), ("Phoebe", F, False), ("Pluto", M, False),
        ("Saturn", M, False), ("Selene", F, False), ("Theia", F, False),
        ("Vesta", F, False), ("Zeus", M, False),
    )
    + _aura(
        "es",
        ("Celeste", F, True), ("Estrella", F, True), ("Nestor", M, True),
        ("Sirio", M, False), ("Carina", F, False), ("Alvaro", M, False),
        ("Diana", F, False), ("Aquila", F, False), ("Selena", F, False),
        ("Javier", M, False), ("Agustina", F, False), ("Antonia", F, False),
        ("Gloria", F, False), ("Luciano", M, False), ("Olivia", F, False),
        ("Silvia", F, False), ("Valerio", M, False),
    )
    + _aura(
        "de",
        ("Viktoria", F, True), ("Julius", M, True), ("Elara", F, False),
        ("Aurelia", F, False), ("Lara", F, False), ("Fabian", M, False),
        ("Kara", F, False),
    )
    + _aura("fr", ("Agathe", F, True), ("Hector", M, True))
    + _aura(
        "nl",
        ("Rhea", F, True), ("Sander", M, True), ("Beatrix", F, True),
        ("Daphne", F, False), ("Cornelia", F, False), ("Hestia", F, False),
        ("Lars", M, False), ("Roman", M, False), ("Leda", F, False),
    )
    + _aura(
        "it",
        ("Livia", F, True), ("Dionisio", M, True), ("Melia", F, False),
        ("Elio", M, False), ("Flavio", M, False), ("Maia", F, False),
        ("Cinzia", F, False), ("Cesare", M, False), ("Perseo", M, False),
        ("Demetra", F, False),
    )
    + _aura(
        "ja",
        ("Fujin", M, True), ("Izanami", F, True), ("Uzume", F, False),
        ("Ebisu", M, False), ("Ama", F, False),
    )
)

DEEPGRAM_FORMATS: tuple[AudioFormatInfo, ...] = (
    AudioFormatInfo(format_id="mp3", name="MP3", mime_type="audio/mpeg", extension=".mp3", encoding="mp3"),
    AudioFormatInfo(
        format_id="wav",
        name="WAV",
        mime_type="audio/wav",
        extension=".wav",
        supports_sample_rate=True,
        encoding="linear16",
        container="wav",
    ),
    AudioFormatInfo(
        format_id="ogg", name="OGG", mime_type="audio/ogg", extension=".ogg", encoding="opus", container="ogg"
    ),
    AudioFormatInfo(format_id="flac", name="FLAC", mime_type="audio/flac", extension=".flac", encoding="flac"),
)

DEEPGRAM_SAMPLE_RATES: tuple[int, ...] = (8000, 16000, 24000, 48000)

# Premade voices only: generating with library/shared voices adds them to the
# account and uses up its custom voice slots. Premade voices speak every
# language of the multilingual models.
ELEVENLABS_VOICES: tuple[VoiceInfo, ...] = (
    VoiceInfo(voice_id="21m00Tcm4TlvDq8ikWAM", name="Rachel", gender=F, featured=True),
    VoiceInfo(voice_id="CwhRBWXzGAHq8TQ4Fs17", name="Roger", gender=M, featured=True),
    VoiceInfo(voice_id="EXAVITQu4vr4xnSDxMaL", name="Sarah", gender=F, featured=True),
    VoiceInfo(voice_id="pNInz6obpgDQGcFmaJgB", name="Adam", gender=M, featured=True),
    VoiceInfo(voice_id="AZnzlk1XvdvUeBnXmlld", name="Domi", gender=F),
    VoiceInfo(voice_id="ErXwobaYiN019PkySvjV", name="Antoni", gender=M),
    VoiceInfo(voice_id="MF3mGyEYCl7XYWbV9V6O", name="Elli", gender=F),
    VoiceInfo(voice_id="TxGEqnHWrfWFTfGW9XjX", name="Josh", gender=M),
    VoiceInfo(voice_id="VR6AewLTigWg4xSOukaG", name="Arnold", gender=M),
    VoiceInfo(voice_id="yoZ06aMxZJJ28mfd3POQ", name="Sam", gender=M),
)

ELEVENLABS_FORMATS: tuple[AudioFormatInfo, ...] = (
    AudioFormatInfo(format_id="mp3_22050_32", name="MP3 22kHz 32kbps (Low)", mime_type="audio/mpeg", extension=".mp3", quality="low"),
    AudioFormatInfo(format_id="mp3_44100_64", name="MP3 44kHz 64kbps (Medium)", mime_type="audio/mpeg", extension=".mp3", quality="medium"),
    AudioFormatInfo(format_id="mp3_44100_128", name="MP3 44kHz 128kbps (Standard)", mime_type="audio/mpeg", extension=".mp3", quality="standard"),
    AudioFormatInfo(format_id="mp3_44100_192", name="MP3 44kHz 192kbps (High)", mime_type="audio/mpeg", extension=".mp3", quality="high"),
    AudioFormatInfo(format_id="pcm_16000", name="PCM 16kHz (Compact)", mime_type="audio/pcm", extension=".pcm", quality="low"),
    AudioFormatInfo(format_id="pcm_22050", name="PCM 22kHz", mime_type="audio/pcm", extension=".pcm", quality="medium"),
    AudioFormatInfo(format_id="pcm_24000", name="PCM 24kHz", mime_type="audio/pcm", extension=".pcm", quality="standard"),
    AudioFormatInfo(format_id="pcm_44100", name="PCM 44kHz (High Quality)", mime_type="audio/pcm", extension=".pcm", quality="high"),
    AudioFormatInfo(format_id="ulaw_8000", name="μ-law 8kHz (Telephony)", mime_type="audio/basic", extension=".ulaw", quality="telephony"),
)

ELEVENLABS_MODELS: tuple[TTSModelInfo, ...] = (
    TTSModelInfo(
        model_id="eleven_multilingual_v2",
        name="Multilingual v2",
        description="Best quality, 29 languages, 10K char limit",
        char_limit=10000,
    ),
    TTSModelInfo(
        model_id="eleven_flash_v2_5",
        name="Flash v2.5",
        description="Ultra-low latency (~75ms), 32 languages, 40K char limit",
        char_limit=40000,
    ),
    TTSModelInfo(
        model_id="eleven_turbo_v2_5",
        name="Turbo v2.5",
        description="Balanced quality/speed, 32 languages, 40K char limit",
        char_limit=40000,
    ),
)

ELEVENLABS_LANGUAGES: tuple[str, ...] = (
    "en", "es", "fr", "de", "it", "pt", "pl", "nl", "sv", "da", "fi", "no",
    "cs", "ro", "el", "tr", "ru", "uk", "hu", "bg", "hr", "sk", "id", "ms",
    "vi", "th", "zh", "ja", "ko", "hi", "ar", "he",
)


@dataclass(frozen=True)
class ProviderCatalog:
    """Everything the catalog knows about one provider."""

    voices: tuple[VoiceInfo, ...]
    formats: tuple[AudioFormatInfo, ...]
    default_format: str
    languages: tuple[str, ...]
    sample_rates: tuple[int, ...] = ()
    default_sample_rate: int | None = None
    models: tuple[TTSModelInfo, ...] = ()
    default_model: str | None = None


class VoiceCatalog:
    """Read-only lookup table over the provider catalogs."""

    def __init__(
        self,
        providers: Mapping[TTSProviderName, ProviderCatalog],
        translation_languages: Iterable[str] = TRANSLATION_LANGUAGES,
    ) -> None:
        self._providers = MappingProxyType(dict(providers))
        self._translation_languages = frozenset(translation_languages)

    @classmethod
    def default(cls) -> "VoiceCatalog":
        return cls({
            TTSProviderName.DEEPGRAM: ProviderCatalog(
                voices=DEEPGRAM_VOICES,
                formats=DEEPGRAM_FORMATS,
                default_format="mp3",
                languages=tuple(dict.fromkeys(voice.language for voice in DEEPGRAM_VOICES)),
                sample_rates=DEEPGRAM_SAMPLE_RATES,
                default_sample_rate=24000,
            ),
            TTSProviderName.ELEVENLABS: ProviderCatalog(
                voices=ELEVENLABS_VOICES,
                formats=ELEVENLABS_FORMATS,
                default_format="mp3_44100_128",
                languages=ELEVENLABS_LANGUAGES,
                models=ELEVENLABS_MODELS,
                default_model="eleven_multilingual_v2",
            ),
        })

    def with_voices(self, provider: TTSProviderName, voices: Iterable[VoiceInfo]) -> "VoiceCatalog":
        """Return a copy of this catalog with one provider's voice list replaced."""
        providers = dict(self._providers)
        providers[provider] = replace(self.provider(provider), voices=tuple(voices))
        return VoiceCatalog(providers, self._translation_languages)

    @property
    def providers(self) -> tuple[TTSProviderName, ...]:
        return tuple(self._providers)

    def provider(self, provider: TTSProviderName | str) -> ProviderCatalog:
        try:
            return self._providers[TTSProviderName(provider)]
        except (KeyError, ValueError) as exc:
            raise KeyError(f"Unknown TTS provider '{provider}'") from exc

    def voices(self, provider: TTSProviderName | str, language: str | None = None) -> tuple[VoiceInfo, ...]:
        """Voices of a provider; multilingual voices match every language."""
        voices = self.provider(provider).voices
        if language is None:
            return voices
        return tuple(voice for voice in voices if voice.language in (None, language))

    def find_voice(self, provider: TTSProviderName | str, voice_id: str) -> VoiceInfo | None:
        for voice in self.provider(provider).voices:
            if voice.voice_id == voice_id:
                return voice
        return None

    def formats(self, provider: TTSProviderName | str) -> tuple[AudioFormatInfo, ...]:
        return self.provider(provider).formats

    def find_format(self, provider: TTSProviderName | str, format_id: str) -> AudioFormatInfo | None:
        for audio_format in self.provider(provider).formats:
            if audio_format.format_id == format_id:
                return audio_format
        return None

    def default_format(self, provider: TTSProviderName | str) -> str:
        return self.provider(provider).default_format

    def sample_rates(self, provider: TTSProviderName | str) -> tuple[int, ...]:
        return self.provider(provider).sample_rates

    def default_sample_rate(self, provider: TTSProviderName | str) -> int | None:
        return self.provider(provider).default_sample_rate

    def models(self, provider: TTSProviderName | str) -> tuple[TTSModelInfo, ...]:
        return self.provider(provider).models

    def find_model(self, provider: TTSProviderName | str, model_id: str) -> TTSModelInfo | None:
        for model in self.provider(provider).models:
            if model.model_id == model_id:
                return model
        return None

    def default_model(self, provider: TTSProviderName | str) -> str | None:
        return self.provider(provider).default_model

    def languages(self, provider: TTSProviderName | str) -> tuple[str, ...]:
        return self.provider(provider).languages

    @property
    def translation_languages(self) -> frozenset[str]:
        return self._translation_languages

    def can_translate(self, language: str) -> bool:
        return language in self._translation_languages

    @staticmethod
    def language_name(code: str) -> str:
        return LANGUAGE_NAMES.get(code, code)

    @staticmethod
    def preview_text(language: str) -> str:
        return PREVIEW_TEXTS.get(language, PREVIEW_TEXTS["en"])


CATALOG = VoiceCatalog.default()
