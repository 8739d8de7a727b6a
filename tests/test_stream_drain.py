"""Tests for draining chunked response bodies."""

import pytest

from services.audio_collections.stream import drain_stream


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


class TestDrainStream:
    @pytest.mark.asyncio
    async def test_concatenates_chunks_in_order(self) -> None:
        buffer = await drain_stream(_chunks(b"ab", b"cde", b"f"))
        assert bytes(buffer) == b"abcdef"

    @pytest.mark.asyncio
    async def test_length_is_sum_of_chunk_lengths(self) -> None:
        parts = [bytes([i]) * (i * 37 + 1) for i in range(20)]
        buffer = await drain_stream(_chunks(*parts))
        assert len(buffer) == sum(len(part) for part in parts)
        assert bytes(buffer) == b"".join(parts)

    @pytest.mark.asyncio
    async def test_zero_chunks_gives_empty_buffer(self) -> None:
        buffer = await drain_stream(_chunks())
        assert len(buffer) == 0

    @pytest.mark.asyncio
    async def test_empty_chunks_are_ignored(self) -> None:
        buffer = await drain_stream(_chunks(b"", b"x", b"", b"y"))
        assert bytes(buffer) == b"xy"

    @pytest.mark.asyncio
    async def test_returns_single_bytearray(self) -> None:
        buffer = await drain_stream(_chunks(b"one", b"two"))
        assert isinstance(buffer, bytearray)
