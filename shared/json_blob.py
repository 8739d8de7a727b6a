"""
JSON-encoded text columns.

Collection rows keep their schema-less parts (items, per-language texts, TTS
settings) as serialized text. Reads must never fail on an empty, missing or
corrupt blob, so decoding falls back to a per-column default instead of
raising.
"""

import json
from collections.abc import Callable
from typing import Any

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from shared.utils import setup_logging

logger = setup_logging("json-blob")


def serialize_blob(value: Any) -> str | None:
    """Encode a value for storage. ``None`` stays NULL."""
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def deserialize_blob(
    raw: str | bytes | None,
    default_factory: Callable[[], Any] | None = None,
    expected_type: type | None = None,
) -> Any:
    """
    Decode a stored blob.

    Args:
        raw: Stored text (may be NULL or empty)
        default_factory: Builds the value returned when nothing usable is stored
        expected_type: When given, decoded values of another type are discarded

    Returns:
        Decoded value or the default
    """
    default = default_factory() if default_factory is not None else None
    if raw is None:
        return default
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning(f"Discarding non-UTF-8 JSON blob: {exc}")
            return default
    if not raw.strip():
        return default

    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning(f"Discarding undecodable JSON blob: {exc}")
        return default

    if value is None:
        return default
    if expected_type is not None and not isinstance(value, expected_type):
        logger.warning(
            f"Discarding JSON blob of type {type(value).__name__}, expected {expected_type.__name__}"
        )
        return default
    return value


class JSONBlob(TypeDecorator):
    """Text column transparently holding a JSON document."""

    impl = Text
    cache_ok = True

    def __init__(
        self,
        default_factory: Callable[[], Any] | None = None,
        expected_type: type | None = None,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.default_factory = default_factory
        self.expected_type = expected_type

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        return serialize_blob(value)

    def process_result_value(self, value: Any, dialect: Any) -> Any:
        return deserialize_blob(value, self.default_factory, self.expected_type)
