"""SQLAlchemy-backed store for collection rows."""

import time
from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.database.collection import Collection
from shared.collection_models import AudioCollection, CollectionRecord, CollectionUpdate
from shared.utils import setup_logging

from .exceptions import CollectionNotFoundError

logger = setup_logging("collection-repository")


def new_item_id() -> str:
    """Item id in the ``item_<epoch ms>_<random>`` form used by collection items."""
    return f"item_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


class CollectionRepository:
    """Create, read, update and delete collections and their items."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, record: CollectionRecord) -> CollectionRecord:
        """Insert one collection row and return it as stored."""
        items = record.item_dicts() if isinstance(record, AudioCollection) else list(record.items)
        row = Collection(
            id=record.id or str(uuid4()),
            museum_id=record.museum_id,
            name=record.name,
            description=record.description,
            type=record.type,
            items=items,
            source_language=record.source_language,
            texts=dict(record.texts),
            tts_settings=record.tts_settings,
        )
        self.session.add(row)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(row)

        logger.info(f"Created collection {row.id} ({row.type}) with {len(items)} items")
        return self._row_to_record(row)

    def get(self, collection_id: str) -> CollectionRecord:
        return self._row_to_record(self._get_row(collection_id))

    def list(self, type: str | None = None, museum_id: str | None = None) -> list[CollectionRecord]:
        """Collections newest-first, optionally filtered by type and museum."""
        query = select(Collection)
        if type:
            query = query.where(Collection.type == type)
        if museum_id:
            query = query.where(Collection.museum_id == museum_id)
        query = query.order_by(Collection.updated_at.desc(), Collection.created_at.desc())

        rows = self.session.execute(query).scalars().all()
        return [self._row_to_record(row) for row in rows]

    def update(self, collection_id: str, changes: CollectionUpdate) -> CollectionRecord:
        """Replace every field present in ``changes``; blobs are replaced whole."""
        row = self._get_row(collection_id)
        for field, value in changes.model_dump(exclude_unset=True).items():
            if field in ("name", "type") and value is None:
                continue
            setattr(row, field, value)
        self._commit()
        return self._row_to_record(row)

    def delete(self, collection_id: str) -> None:
        row = self._get_row(collection_id)
        self.session.delete(row)
        self._commit()
        logger.info(f"Deleted collection {collection_id}")

    def add_item(self, collection_id: str, item: dict[str, Any]) -> CollectionRecord:
        """Append an item, assigning an id and the next ``order`` when missing."""
        row = self._get_row(collection_id)
        items = list(row.items or [])
        new_item = dict(item)
        new_item.setdefault("id", new_item_id())
        new_item.setdefault("order", len(items))
        row.items = items + [new_item]
        self._commit()
        return self._row_to_record(row)

    def remove_item(self, collection_id: str, item_id: str) -> CollectionRecord:
        """Drop one item and renumber the rest so ``order`` stays contiguous."""
        row = self._get_row(collection_id)
        items = [item for item in (row.items or []) if item.get("id") != item_id]
        if len(items) == len(row.items or []):
            raise CollectionNotFoundError(f"Item {item_id} not found in collection {collection_id}")
        row.items = [{**item, "order": index} for index, item in enumerate(items)]
        self._commit()
        return self._row_to_record(row)

    def _get_row(self, collection_id: str) -> Collection:
        row = self.session.get(Collection, collection_id)
        if row is None:
            raise CollectionNotFoundError(f"Collection {collection_id} not found")
        return row

    def _commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    @staticmethod
    def _row_to_record(row: Collection) -> CollectionRecord:
        return CollectionRecord(
            id=row.id,
            museum_id=row.museum_id,
            name=row.name,
            description=row.description or "",
            type=row.type,
            items=row.items or [],
            source_language=row.source_language,
            texts=row.texts or {},
            tts_settings=row.tts_settings,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
