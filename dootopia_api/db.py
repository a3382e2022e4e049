"""
Document store abstraction: in-memory, SQLAlchemy and MongoDB implementations.
"""

from __future__ import annotations

import copy
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.errors import WriteError
from sqlalchemy import (
    JSON,
    Column,
    Float,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from dootopia_api.documents import (
    InvalidDocumentId,
    InvalidUpdate,
    apply_update,
    matches,
    new_document_id,
)

logger = logging.getLogger(__name__)

USERS = "users"
TASKS = "tasks"
SUBTASKS = "sub_tasks"
LISTS = "lists"
REWARDS = "rewards"
PRIZES = "prizes"

COLLECTIONS = (USERS, TASKS, SUBTASKS, LISTS, REWARDS, PRIZES)


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int


class DbClient(Protocol):
    """Interface for document access."""

    def insert_document(self, collection: str, document: dict) -> dict:
        ...

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def find_documents(
        self, collection: str, filters: Optional[dict] = None
    ) -> list[dict]:
        ...

    def find_one(self, collection: str, filters: dict) -> Optional[dict]:
        ...

    def update_document(
        self, collection: str, doc_id: str, update: dict
    ) -> UpdateResult:
        ...

    def delete_document(self, collection: str, doc_id: str) -> int:
        ...


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _collection(self, name: str) -> Dict[str, dict]:
        return self.collections.setdefault(name, {})

    def insert_document(self, collection: str, document: dict) -> dict:
        doc = copy.deepcopy(document)
        doc["_id"] = new_document_id()
        self._collection(collection)[doc["_id"]] = doc
        return copy.deepcopy(doc)

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc else None

    def find_documents(
        self, collection: str, filters: Optional[dict] = None
    ) -> list[dict]:
        return [
            copy.deepcopy(doc)
            for doc in self._collection(collection).values()
            if matches(doc, filters)
        ]

    def find_one(self, collection: str, filters: dict) -> Optional[dict]:
        for doc in self._collection(collection).values():
            if matches(doc, filters):
                return copy.deepcopy(doc)
        return None

    def update_document(
        self, collection: str, doc_id: str, update: dict
    ) -> UpdateResult:
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return UpdateResult(matched_count=0, modified_count=0)
        # Apply to a copy so a rejected update leaves the stored doc intact.
        candidate = copy.deepcopy(doc)
        changed = apply_update(candidate, update)
        if changed:
            self._collection(collection)[doc_id] = candidate
        return UpdateResult(matched_count=1, modified_count=int(changed))

    def delete_document(self, collection: str, doc_id: str) -> int:
        return 1 if self._collection(collection).pop(doc_id, None) else 0

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()


class SqlDbClient:
    """
    SQLAlchemy-backed implementation storing each document as a JSON row.
    Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
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
        logger.info(
            "Document store ready at %s",
            self.engine.url.render_as_string(hide_password=True),
        )

    @staticmethod
    def _to_document(row: "DocumentRow") -> dict:
        doc = copy.deepcopy(row.data)
        doc["_id"] = row.doc_id
        return doc

    def _rows(self, session: Session, collection: str):
        stmt = (
            select(DocumentRow)
            .where(DocumentRow.collection == collection)
            .order_by(DocumentRow.id.asc())
        )
        return session.execute(stmt).scalars()

    @staticmethod
    def _get_row(
        session: Session, collection: str, doc_id: str
    ) -> Optional["DocumentRow"]:
        stmt = select(DocumentRow).where(
            DocumentRow.collection == collection, DocumentRow.doc_id == doc_id
        )
        return session.execute(stmt).scalar_one_or_none()

    def insert_document(self, collection: str, document: dict) -> dict:
        now = time.time()
        data = copy.deepcopy(document)
        data.pop("_id", None)
        with self.Session() as session:
            row = DocumentRow(
                collection=collection,
                doc_id=new_document_id(),
                data=data,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_document(row)

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = self._get_row(session, collection, doc_id)
            return self._to_document(row) if row else None

    def find_documents(
        self, collection: str, filters: Optional[dict] = None
    ) -> list[dict]:
        with self.Session() as session:
            docs = [self._to_document(row) for row in self._rows(session, collection)]
        return [doc for doc in docs if matches(doc, filters)]

    def find_one(self, collection: str, filters: dict) -> Optional[dict]:
        with self.Session() as session:
            for row in self._rows(session, collection):
                doc = self._to_document(row)
                if matches(doc, filters):
                    return doc
        return None

    def update_document(
        self, collection: str, doc_id: str, update: dict
    ) -> UpdateResult:
        with self.Session() as session:
            row = self._get_row(session, collection, doc_id)
            if not row:
                return UpdateResult(matched_count=0, modified_count=0)
            data = copy.deepcopy(row.data)
            changed = apply_update(data, update)
            if changed:
                # JSON columns only notice reassignment, not in-place edits.
                row.data = data
                row.updated_at = time.time()
                session.commit()
            return UpdateResult(matched_count=1, modified_count=int(changed))

    def delete_document(self, collection: str, doc_id: str) -> int:
        with self.Session() as session:
            row = self._get_row(session, collection, doc_id)
            if not row:
                return 0
            session.delete(row)
            session.commit()
            return 1


class MongoDbClient:
    """pymongo-backed implementation for a real MongoDB deployment."""

    def __init__(self, database_url: str, database_name: str, client: Any = None):
        self.client = client or MongoClient(database_url)
        self.db = self.client[database_name]
        logger.info("Using MongoDB database %s", database_name)

    @staticmethod
    def _object_id(doc_id: str) -> ObjectId:
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            raise InvalidDocumentId(f"Invalid id: {doc_id}")

    @staticmethod
    def _to_document(doc: Optional[dict]) -> Optional[dict]:
        if doc is None:
            return None
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        return doc

    def insert_document(self, collection: str, document: dict) -> dict:
        doc = copy.deepcopy(document)
        doc.pop("_id", None)
        result = self.db[collection].insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        return self._to_document(
            self.db[collection].find_one({"_id": self._object_id(doc_id)})
        )

    def find_documents(
        self, collection: str, filters: Optional[dict] = None
    ) -> list[dict]:
        cursor = self.db[collection].find(filters or {})
        return [self._to_document(doc) for doc in cursor]

    def find_one(self, collection: str, filters: dict) -> Optional[dict]:
        return self._to_document(self.db[collection].find_one(filters))

    def update_document(
        self, collection: str, doc_id: str, update: dict
    ) -> UpdateResult:
        try:
            result = self.db[collection].update_one(
                {"_id": self._object_id(doc_id)}, update
            )
        except WriteError as exc:
            # e.g. $inc on a non-numeric field, or conflicting operators
            raise InvalidUpdate(str(exc)) from exc
        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def delete_document(self, collection: str, doc_id: str) -> int:
        result = self.db[collection].delete_one({"_id": self._object_id(doc_id)})
        return result.deleted_count


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    __table_args__ = (UniqueConstraint("collection", "doc_id"),)

    # Insertion order; created_at alone can tie.
    id = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String, nullable=False)
    doc_id = Column(String, nullable=False)
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False, index=True)
    updated_at = Column(Float, nullable=False)
