"""
Collection model - grouped media (galleries, audio collections, documents)
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text

from database import Base
from shared.json_blob import JSONBlob


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Collection(Base):
    """Collection row; items, texts and tts_settings are stored as JSON text"""

    __tablename__ = "collections"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    museum_id = Column(String(36), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(50), nullable=False, default="gallery", index=True)
    items = Column(JSONBlob(default_factory=list, expected_type=list), nullable=False, default=lambda: [])
    source_language = Column(String(10), nullable=True)
    texts = Column(JSONBlob(default_factory=dict, expected_type=dict), nullable=True)
    tts_settings = Column(JSONBlob(expected_type=dict), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, name={self.name}, type={self.type})>"
