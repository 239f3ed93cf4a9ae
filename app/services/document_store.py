"""
Key/document storage backends (SQLAlchemy vs Firebase Firestore).

Documents are addressed by slash-separated paths such as
``couples/{tenant}/seating-arrangements/{event}``. Writes replace the whole
document unless ``update`` is used for top-level fields.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import SessionLocal
from app.models import StoredDocument
from app.services.firebase_client import get_firestore_client


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def _split(path: str) -> Tuple[str, str]:
    collection, _, doc_id = path.strip("/").rpartition("/")
    if not collection:
        return "", doc_id
    return collection, doc_id


class SqlDocumentStore:
    """Documents stored as JSON rows in the ``documents`` table"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            row = db.query(StoredDocument).filter(StoredDocument.path == path.strip("/")).first()
            return copy.deepcopy(row.data) if row else None
        finally:
            db.close()

    def set(self, path: str, data: Dict[str, Any]) -> None:
        path = path.strip("/")
        collection, doc_id = _split(path)
        db = self.session_factory()
        try:
            row = db.query(StoredDocument).filter(StoredDocument.path == path).first()
            if row is None:
                row = StoredDocument(path=path, collection=collection, doc_id=doc_id)
                db.add(row)
            row.data = copy.deepcopy(data)
            db.commit()
        finally:
            db.close()

    def update(self, path: str, fields: Dict[str, Any]) -> None:
        """Merge top-level fields into an existing document (created if missing)"""
        current = self.get(path) or {}
        current.update(fields)
        self.set(path, current)

    def delete(self, path: str) -> None:
        db = self.session_factory()
        try:
            db.query(StoredDocument).filter(StoredDocument.path == path.strip("/")).delete()
            db.commit()
        finally:
            db.close()

    def list(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        db = self.session_factory()
        try:
            rows = db.query(StoredDocument).filter(
                StoredDocument.collection == collection.strip("/")
            ).order_by(StoredDocument.doc_id).all()
            return [(row.doc_id, copy.deepcopy(row.data)) for row in rows]
        finally:
            db.close()


class FirestoreDocumentStore:
    """Documents stored in Cloud Firestore"""

    def __init__(self, client=None):
        self.client = client if client is not None else get_firestore_client()
        if self.client is None:
            raise RuntimeError("Firestore is not enabled. Set USE_FIREBASE=true")

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        doc = self.client.document(path.strip("/")).get()
        return doc.to_dict() if doc.exists else None

    def set(self, path: str, data: Dict[str, Any]) -> None:
        self.client.document(path.strip("/")).set(data)

    def update(self, path: str, fields: Dict[str, Any]) -> None:
        self.client.document(path.strip("/")).set(fields, merge=True)

    def delete(self, path: str) -> None:
        self.client.document(path.strip("/")).delete()

    def list(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        docs = self.client.collection(collection.strip("/")).get()
        return [(d.id, d.to_dict()) for d in docs]


def get_document_store():
    """Document store for the configured backend"""
    if use_firestore():
        return FirestoreDocumentStore()
    return SqlDocumentStore()
