"""
Document store abstraction with an in-memory implementation for tests and a
SQLAlchemy-backed implementation for deployments.

Catalog entities are schemaless JSON documents grouped in named collections,
mirroring how the website's admin routes read and write them.
"""

from __future__ import annotations

import copy
import json
import threading
import time
import uuid
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

from sqlalchemy import JSON, Column, Float, String, create_engine, func, or_, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

ADMINS = "admins"
CATEGORIES = "categories"
PRODUCTS = "products"
PRODUCT_IMAGES = "product_images"
POSTS = "posts"
BANNERS = "banners"

RESERVED_FIELDS = ("id", "created_at", "updated_at")


class DbClient(Protocol):
    """Interface for document store access."""

    def insert(self, collection: str, doc: dict) -> dict:
        ...

    def insert_many(self, collection: str, docs: Iterable[dict]) -> list[dict]:
        ...

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def find(
        self,
        collection: str,
        *,
        where: Optional[dict] = None,
        contains: Optional[dict] = None,
        fields: Optional[Sequence[str]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        ...

    def find_one(
        self,
        collection: str,
        *,
        where: Optional[dict] = None,
        contains: Optional[dict] = None,
        order_by: Optional[str] = None,
    ) -> Optional[dict]:
        ...

    def count(self, collection: str, *, where: Optional[dict] = None) -> int:
        ...

    def update(self, collection: str, doc_id: str, fields: dict) -> Optional[dict]:
        ...

    def update_many(
        self, collection: str, doc_ids: Iterable[str], fields: dict
    ) -> int:
        ...

    def update_where(self, collection: str, where: dict, fields: dict) -> int:
        ...

    def delete(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def delete_where(self, collection: str, where: dict) -> int:
        ...


_clock_lock = threading.Lock()
_last_timestamp = 0.0


def _now() -> float:
    """Strictly increasing timestamp so newest-first ordering is deterministic."""
    global _last_timestamp
    with _clock_lock:
        _last_timestamp = max(time.time(), _last_timestamp + 1e-6)
        return _last_timestamp


def _searchable_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _matches(doc: dict, where: Optional[dict], contains: Optional[dict]) -> bool:
    for field, expected in (where or {}).items():
        if doc.get(field) != expected:
            return False
    if contains:
        return any(
            needle.lower() in _searchable_text(doc.get(field)).lower()
            for field, needle in contains.items()
        )
    return True


def _project(doc: dict, fields: Optional[Sequence[str]]) -> dict:
    if not fields:
        return doc
    return {key: doc.get(key) for key in ("id", *fields)}


def _sort(docs: list[dict], order_by: Optional[str]) -> list[dict]:
    if not order_by:
        return docs
    descending = order_by.startswith("-")
    field = order_by.lstrip("-")
    present = [doc for doc in docs if doc.get(field) is not None]
    missing = [doc for doc in docs if doc.get(field) is None]
    present.sort(key=lambda doc: doc[field], reverse=descending)
    return present + missing


def _strip_reserved(fields: dict) -> dict:
    return {k: v for k, v in fields.items() if k not in RESERVED_FIELDS}


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _collection(self, name: str) -> Dict[str, dict]:
        return self.collections.setdefault(name, {})

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()

    def insert(self, collection: str, doc: dict) -> dict:
        now = _now()
        record = copy.deepcopy(_strip_reserved(doc))
        record["id"] = doc.get("id") or uuid.uuid4().hex
        record["created_at"] = now
        record["updated_at"] = now
        self._collection(collection)[record["id"]] = record
        return copy.deepcopy(record)

    def insert_many(self, collection: str, docs: Iterable[dict]) -> list[dict]:
        return [self.insert(collection, doc) for doc in docs]

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        record = self._collection(collection).get(doc_id)
        return copy.deepcopy(record) if record else None

    def find(
        self,
        collection: str,
        *,
        where: Optional[dict] = None,
        contains: Optional[dict] = None,
        fields: Optional[Sequence[str]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        docs = [
            doc
            for doc in self._collection(collection).values()
            if _matches(doc, where, contains)
        ]
        docs = _sort(docs, order_by)
        if limit is not None:
            docs = docs[:limit]
        return [copy.deepcopy(_project(doc, fields)) for doc in docs]

    def find_one(
        self,
        collection: str,
        *,
        where: Optional[dict] = None,
        contains: Optional[dict] = None,
        order_by: Optional[str] = None,
    ) -> Optional[dict]:
        docs = self.find(
            collection, where=where, contains=contains, order_by=order_by, limit=1
        )
        return docs[0] if docs else None

    def count(self, collection: str, *, where: Optional[dict] = None) -> int:
        return sum(
            1
            for doc in self._collection(collection).values()
            if _matches(doc, where, None)
        )

    def update(self, collection: str, doc_id: str, fields: dict) -> Optional[dict]:
        record = self._collection(collection).get(doc_id)
        if not record:
            return None
        record.update(copy.deepcopy(_strip_reserved(fields)))
        record["updated_at"] = _now()
        return copy.deepcopy(record)

    def update_many(
        self, collection: str, doc_ids: Iterable[str], fields: dict
    ) -> int:
        updated = 0
        for doc_id in doc_ids:
            if self.update(collection, doc_id, fields) is not None:
                updated += 1
        return updated

    def update_where(self, collection: str, where: dict, fields: dict) -> int:
        ids = [
            doc_id
            for doc_id, doc in self._collection(collection).items()
            if _matches(doc, where, None)
        ]
        return self.update_many(collection, ids, fields)

    def delete(self, collection: str, doc_id: str) -> Optional[dict]:
        return self._collection(collection).pop(doc_id, None)

    def delete_where(self, collection: str, where: dict) -> int:
        ids = [
            doc_id
            for doc_id, doc in self._collection(collection).items()
            if _matches(doc, where, None)
        ]
        for doc_id in ids:
            self.delete(collection, doc_id)
        return len(ids)


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    String equality and substring filters are pushed down as JSON field
    expressions; other filters, ordering and projection run on the fetched rows.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _to_doc(row: "DocumentRow") -> dict:
        doc = dict(row.data or {})
        doc["id"] = row.id
        doc["created_at"] = row.created_at
        doc["updated_at"] = row.updated_at
        return doc

    def _select_rows(
        self,
        session: Session,
        collection: str,
        where: Optional[dict],
        contains: Optional[dict],
    ) -> list["DocumentRow"]:
        stmt = select(DocumentRow).where(DocumentRow.collection == collection)
        residual: dict = {}
        for field, value in (where or {}).items():
            if field == "id":
                stmt = stmt.where(DocumentRow.id == value)
            elif isinstance(value, str):
                stmt = stmt.where(DocumentRow.data[field].as_string() == value)
            else:
                residual[field] = value
        if contains:
            stmt = stmt.where(
                or_(
                    *[
                        func.lower(DocumentRow.data[field].as_string()).contains(
                            needle.lower(), autoescape=True
                        )
                        for field, needle in contains.items()
                    ]
                )
            )
        rows = session.execute(stmt).scalars().all()
        if not residual:
            return list(rows)
        return [row for row in rows if _matches(self._to_doc(row), residual, None)]

    def insert(self, collection: str, doc: dict) -> dict:
        now = _now()
        with self.Session() as session:
            row = DocumentRow(
                id=doc.get("id") or uuid.uuid4().hex,
                collection=collection,
                data=copy.deepcopy(_strip_reserved(doc)),
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            return self._to_doc(row)

    def insert_many(self, collection: str, docs: Iterable[dict]) -> list[dict]:
        return [self.insert(collection, doc) for doc in docs]

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, doc_id)
            if not row or row.collection != collection:
                return None
            return self._to_doc(row)

    def find(
        self,
        collection: str,
        *,
        where: Optional[dict] = None,
        contains: Optional[dict] = None,
        fields: Optional[Sequence[str]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        with self.Session() as session:
            rows = self._select_rows(session, collection, where, contains)
            docs = _sort([self._to_doc(row) for row in rows], order_by)
        if limit is not None:
            docs = docs[:limit]
        return [_project(doc, fields) for doc in docs]

    def find_one(
        self,
        collection: str,
        *,
        where: Optional[dict] = None,
        contains: Optional[dict] = None,
        order_by: Optional[str] = None,
    ) -> Optional[dict]:
        docs = self.find(
            collection, where=where, contains=contains, order_by=order_by, limit=1
        )
        return docs[0] if docs else None

    def count(self, collection: str, *, where: Optional[dict] = None) -> int:
        with self.Session() as session:
            return len(self._select_rows(session, collection, where, None))

    def update(self, collection: str, doc_id: str, fields: dict) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, doc_id)
            if not row or row.collection != collection:
                return None
            # Reassign so SQLAlchemy detects the JSON change.
            row.data = {**(row.data or {}), **copy.deepcopy(_strip_reserved(fields))}
            row.updated_at = _now()
            session.commit()
            return self._to_doc(row)

    def update_many(
        self, collection: str, doc_ids: Iterable[str], fields: dict
    ) -> int:
        updated = 0
        for doc_id in doc_ids:
            if self.update(collection, doc_id, fields) is not None:
                updated += 1
        return updated

    def update_where(self, collection: str, where: dict, fields: dict) -> int:
        with self.Session() as session:
            ids = [row.id for row in self._select_rows(session, collection, where, None)]
        return self.update_many(collection, ids, fields)

    def delete(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, doc_id)
            if not row or row.collection != collection:
                return None
            doc = self._to_doc(row)
            session.delete(row)
            session.commit()
            return doc

    def delete_where(self, collection: str, where: dict) -> int:
        with self.Session() as session:
            rows = self._select_rows(session, collection, where, None)
            for row in rows:
                session.delete(row)
            session.commit()
            return len(rows)


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    id = Column(String, primary_key=True)
    collection = Column(String, nullable=False, index=True)
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
