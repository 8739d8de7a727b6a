import asyncio
import os
import sys
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# database.py builds its engine at import time
_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="tourstack-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DATA_DIR / 'tourstack.db'}")
os.environ.setdefault("MEDIA_ROOT", str(_TEST_DATA_DIR / "uploads"))
os.environ.setdefault("LIBRE_TRANSLATE_URL", "mock")

import models.database  # noqa: E402,F401
from database import Base  # noqa: E402
from services.audio_collections.drivers.base import TTSProvider  # noqa: E402
from services.audio_collections.storage import AudioFileStore  # noqa: E402
from services.audio_collections.translation import TranslationClient  # noqa: E402
from shared.enums import TTSProviderName  # noqa: E402


@pytest.fixture
def session_factory(tmp_path: Path) -> sessionmaker:
    """SQLite session factory backed by a fresh database per test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def file_store(tmp_path: Path) -> AudioFileStore:
    return AudioFileStore(str(tmp_path / "uploads"), "/uploads")


class FakeProvider(TTSProvider):
    """Provider double keyed by voice id: per-voice errors, delays and empty bodies."""

    def __init__(
        self,
        name: TTSProviderName = TTSProviderName.DEEPGRAM,
        audio: bytes = b"\x00" * 100,
        failures: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
        empty: tuple[str, ...] = (),
    ) -> None:
        super().__init__(http=None, api_key="test-key", base_url="https://tts.test")
        self.name = name
        self.display_name = name.value.title()
        self.audio = audio
        self.failures = failures or {}
        self.delays = delays or {}
        self.empty = empty
        self.calls: list[dict[str, Any]] = []

    async def synthesize(
        self,
        text: str,
        voice_id: str,
        output_format: str,
        sample_rate: int | None = None,
        **options: Any,
    ) -> bytes:
        self.calls.append(
            {
                "text": text,
                "voice_id": voice_id,
                "output_format": output_format,
                "sample_rate": sample_rate,
                "options": options,
            }
        )
        if voice_id in self.delays:
            await asyncio.sleep(self.delays[voice_id])
        if voice_id in self.failures:
            raise self.failures[voice_id]
        if voice_id in self.empty:
            return b""
        return self.audio

    async def preview(self, voice_id: str, sample_text: str | None = None) -> bytes:
        self.calls.append({"preview": voice_id, "text": sample_text})
        return self.audio


class StubTranslator(TranslationClient):
    """Translation double returning canned text per target language."""

    def __init__(
        self,
        translations: dict[str, str] | None = None,
        failures: dict[str, Exception] | None = None,
        delay: float = 0,
    ) -> None:
        self.translations = translations or {}
        self.failures = failures or {}
        self.delay = delay
        self.calls: list[tuple[str, str, str]] = []

    async def _translate(self, text: str, source_lang: str, target_lang: str) -> str:
        self.calls.append((text, source_lang, target_lang))
        if self.delay:
            await asyncio.sleep(self.delay)
        if target_lang in self.failures:
            raise self.failures[target_lang]
        return self.translations.get(target_lang, f"{text} ({target_lang})")

    async def list_languages(self) -> list[dict[str, Any]]:
        return [{"code": code, "name": code} for code in self.translations]


class FakeContent:
    def __init__(self, chunks: list[bytes]) -> None:
        self.chunks = chunks
        self.chunk_size: int | None = None

    def iter_chunked(self, size: int):
        self.chunk_size = size

        async def _gen():
            for chunk in self.chunks:
                yield chunk

        return _gen()


class FakeResponse:
    def __init__(self, chunks: list[bytes]) -> None:
        self.status = 200
        self.content = FakeContent(chunks)


class FakeHTTPClient:
    """Stands in for AsyncHTTPClient; records every request."""

    def __init__(
        self,
        chunks: list[bytes] | None = None,
        json_body: Any = None,
        error: Exception | None = None,
    ) -> None:
        self.chunks = chunks if chunks is not None else [b"RIFF", b"audio-bytes"]
        self.json_body = json_body
        self.error = error
        self.requests: list[dict[str, Any]] = []
        self.last_response: FakeResponse | None = None

    @asynccontextmanager
    async def stream_post(self, url, data=None, headers=None, params=None):
        self.requests.append({"method": "POST", "url": url, "data": data, "headers": headers, "params": params})
        if self.error is not None:
            raise self.error
        self.last_response = FakeResponse(self.chunks)
        yield self.last_response

    async def post(self, url, data=None, headers=None, params=None):
        self.requests.append({"method": "POST", "url": url, "data": data, "headers": headers, "params": params})
        if self.error is not None:
            raise self.error
        return self.json_body

    async def get(self, url, headers=None, params=None):
        self.requests.append({"method": "GET", "url": url, "headers": headers, "params": params})
        if self.error is not None:
            raise self.error
        return self.json_body


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture
def make_translator() -> Callable[..., StubTranslator]:
    return StubTranslator


@pytest.fixture
def make_http() -> Callable[..., FakeHTTPClient]:
    return FakeHTTPClient
