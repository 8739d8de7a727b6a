"""Durable storage for generated audio files."""

import asyncio
import os
import time
from datetime import datetime, timezone
from pathlib import Path

from shared.config import ServiceConfig
from shared.tts_models import StoredAudioFile
from shared.utils import ensure_directory, format_file_size, sanitize_filename, setup_logging

logger = setup_logging("audio-storage")

GENERATED_SUBDIR = "audio/generated"


def batch_filename(provider: str, language: str, voice_id: str, extension: str, timestamp_ms: int | None = None) -> str:
    """Name of a batch-generated file, e.g. ``batch-1700000000000-deepgram-es-aura-2-celeste-es.mp3``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return sanitize_filename(f"batch-{timestamp_ms}-{provider}-{language}-{voice_id}") + extension


class AudioFileStore:
    """Writes audio under ``<media_root>/audio/generated`` and maps files to public URLs."""

    def __init__(self, media_root: str, url_prefix: str = "/uploads") -> None:
        self.directory = Path(media_root) / GENERATED_SUBDIR
        self.url_prefix = url_prefix.rstrip("/")

    @classmethod
    def from_config(cls, service_config: ServiceConfig) -> "AudioFileStore":
        return cls(
            service_config.get("media_root", "./uploads"),
            service_config.get("media_url_prefix", "/uploads"),
        )

    def path_for(self, filename: str) -> str:
        return str(self.directory / filename)

    def public_url(self, filename: str) -> str:
        return f"{self.url_prefix}/{GENERATED_SUBDIR}/{filename}"

    def _write_sync(self, filename: str, data: bytes) -> str:
        ensure_directory(str(self.directory))
        path = self.path_for(filename)
        with open(path, "wb") as f:
            f.write(data)
        return path

    async def write(self, filename: str, data: bytes) -> str:
        """Write bytes without blocking the event loop. Returns the file path."""
        path = await asyncio.to_thread(self._write_sync, filename, data)
        logger.info(f"Saved {filename} ({format_file_size(len(data))})")
        return path

    @staticmethod
    def _check_name(filename: str) -> None:
        if not filename or Path(filename).name != filename or filename.startswith("."):
            raise ValueError(f"Invalid audio file name: {filename!r}")

    def list_files(self) -> list[StoredAudioFile]:
        """Generated files, newest first."""
        if not self.directory.is_dir():
            return []

        files = []
        with os.scandir(self.directory) as entries:
            for entry in entries:
                if not entry.is_file() or entry.name.startswith("."):
                    continue
                stat = entry.stat()
                files.append(
                    StoredAudioFile(
                        filename=entry.name,
                        url=self.public_url(entry.name),
                        file_size=stat.st_size,
                        created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    )
                )
        return sorted(files, key=lambda f: f.created_at, reverse=True)

    def delete(self, filename: str) -> bool:
        """Remove one generated file. Returns False when it does not exist.

        Raises:
            ValueError: the name is not a plain file name inside the store
        """
        self._check_name(filename)
        path = self.path_for(filename)
        if os.path.exists(path):
            os.remove(path)
            logger.info(f"Deleted {filename}")
            return True
        return False
