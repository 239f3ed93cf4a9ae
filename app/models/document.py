"""
Stored document model
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON

from app.core.db import Base

def _utcnow():
    return datetime.now(timezone.utc)

class StoredDocument(Base):
    """A JSON document addressed by a slash-separated path.

    ``collection`` is the path of the parent collection, so listing a
    collection is a single indexed lookup.
    """
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    path = Column(String(512), unique=True, nullable=False, index=True)
    collection = Column(String(512), nullable=False, index=True)
    doc_id = Column(String(255), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
