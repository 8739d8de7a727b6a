"""Read a chunked binary response body into one contiguous buffer."""

from collections.abc import AsyncIterable

from shared.utils import setup_logging

logger = setup_logging("stream-drain")


async def drain_stream(chunks: AsyncIterable[bytes]) -> bytearray:
    """
    Consume every chunk of a streamed body, in order.

    Chunks are appended to a single growing buffer; nothing else is retained.
    An empty stream yields an empty buffer, callers decide whether that is an
    error.

    Args:
        chunks: Async iterable of byte chunks (e.g. ``response.content.iter_chunked``)

    Returns:
        Buffer whose length is the sum of the chunk lengths
    """
    buffer = bytearray()
    chunk_count = 0
    async for chunk in chunks:
        if not chunk:
            continue
        buffer += chunk
        chunk_count += 1

    logger.debug(f"Drained {len(buffer)} bytes from {chunk_count} chunks")
    return buffer
