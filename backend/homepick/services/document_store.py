"""
Document store facade over SQLAlchemy.

Collections map to ORM models. Reads return plain dict documents
({"id": ..., **fields}); writes notify every subscriber of the collection
with a full, freshly ordered snapshot.
"""

import enum
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from homepick.errors import DocumentNotFoundError, StoreUnavailableError
from homepick.models import Listing, NewsArticle

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], None]
ErrorCallback = Callable[[Exception], None]

COLLECTIONS = {
    "properties": Listing,
    "news": NewsArticle,
}


def _plain(value):
    return value.value if isinstance(value, enum.Enum) else value


class Subscription:
    """Live snapshot subscription. Use as a context manager or call unsubscribe()."""

    def __init__(self, store: "DocumentStore", collection: str, order_by: Optional[str],
                 on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback] = None):
        self.store = store
        self.collection = collection
        self.order_by = order_by
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active = True

    def deliver(self) -> None:
        if not self.active:
            return
        try:
            snapshot = self.store.list(self.collection, self.order_by)
        except StoreUnavailableError as e:
            if self.on_error is None:
                raise
            self.on_error(e)
            return
        self.on_snapshot(snapshot)

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.store._remove(self)
            logger.info(f"Unsubscribed from '{self.collection}'")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()
        return False


class DocumentStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = {}

    # --- Helpers ---

    def _model(self, collection: str):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise ValueError(f"Unknown collection: {collection}")
        return model

    @staticmethod
    def _to_document(row) -> Document:
        return {c.name: getattr(row, c.name) for c in row.__table__.columns}

    @staticmethod
    def _ordering(model, order_by: Optional[str]):
        if not order_by:
            return None
        descending = order_by.startswith("-")
        column = getattr(model, order_by.lstrip("-"), None)
        if column is None:
            raise ValueError(f"Cannot order {model.__tablename__} by '{order_by}'")
        return column.desc() if descending else column.asc()

    def _fields(self, model, record: Dict[str, Any]) -> Dict[str, Any]:
        columns = {c.name for c in model.__table__.columns} - {"id"}
        unknown = set(record) - columns - {"id"}
        if unknown:
            raise ValueError(f"Unknown fields for {model.__tablename__}: {sorted(unknown)}")
        return {k: _plain(v) for k, v in record.items() if k in columns}

    def _publish(self, collection: str) -> None:
        with self._lock:
            subscribers = list(self._subscriptions.get(collection, []))
        for subscription in subscribers:
            subscription.deliver()

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.collection, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    # --- Reads ---

    def list(self, collection: str, order_by: Optional[str] = "-created_at") -> List[Document]:
        """One-shot read of a whole collection."""
        model = self._model(collection)
        db = self.session_factory()
        try:
            query = db.query(model)
            ordering = self._ordering(model, order_by)
            if ordering is not None:
                query = query.order_by(ordering)
            return [self._to_document(row) for row in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to read '{collection}': {e}")
            raise StoreUnavailableError(f"Could not read {collection}") from e
        finally:
            db.close()

    def get(self, collection: str, doc_id: str) -> Document:
        model = self._model(collection)
        db = self.session_factory()
        try:
            row = db.query(model).filter(model.id == doc_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read {collection}/{doc_id}: {e}")
            raise StoreUnavailableError(f"Could not read {collection}/{doc_id}") from e
        finally:
            db.close()
        if row is None:
            raise DocumentNotFoundError(collection, doc_id)
        return self._to_document(row)

    def subscribe(self, collection: str, on_snapshot: SnapshotCallback,
                  order_by: Optional[str] = "-created_at",
                  on_error: Optional[ErrorCallback] = None) -> Subscription:
        """Deliver the current snapshot now and a new one after every write."""
        self._model(collection)
        subscription = Subscription(self, collection, order_by, on_snapshot, on_error)
        with self._lock:
            self._subscriptions.setdefault(collection, []).append(subscription)
        logger.info(f"Subscribed to '{collection}' ordered by {order_by}")
        subscription.deliver()
        return subscription

    # --- Writes ---

    def create(self, collection: str, record: Dict[str, Any]) -> Document:
        model = self._model(collection)
        db = self.session_factory()
        try:
            row = model(**self._fields(model, record))
            db.add(row)
            db.commit()
            db.refresh(row)
            document = self._to_document(row)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create document in '{collection}': {e}")
            raise StoreUnavailableError(f"Could not save to {collection}") from e
        finally:
            db.close()

        logger.info(f"Created {collection}/{document['id']}")
        self._publish(collection)
        return document

    def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> Document:
        model = self._model(collection)
        db = self.session_factory()
        try:
            row = db.query(model).filter(model.id == doc_id).first()
            if row is None:
                raise DocumentNotFoundError(collection, doc_id)
            for key, value in self._fields(model, partial).items():
                setattr(row, key, value)
            db.commit()
            db.refresh(row)
            document = self._to_document(row)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update {collection}/{doc_id}: {e}")
            raise StoreUnavailableError(f"Could not update {collection}/{doc_id}") from e
        finally:
            db.close()

        logger.info(f"Updated {collection}/{doc_id}: {sorted(partial)}")
        self._publish(collection)
        return document

    def delete(self, collection: str, doc_id: str) -> None:
        model = self._model(collection)
        db = self.session_factory()
        try:
            row = db.query(model).filter(model.id == doc_id).first()
            if row is None:
                raise DocumentNotFoundError(collection, doc_id)
            db.delete(row)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete {collection}/{doc_id}: {e}")
            raise StoreUnavailableError(f"Could not delete {collection}/{doc_id}") from e
        finally:
            db.close()

        logger.info(f"Deleted {collection}/{doc_id}")
        self._publish(collection)


_store: Optional[DocumentStore] = None


def get_store() -> DocumentStore:
    """FastAPI dependency returning the process-wide store."""
    global _store
    if _store is None:
        from homepick.database import SessionLocal
        _store = DocumentStore(SessionLocal)
    return _store
