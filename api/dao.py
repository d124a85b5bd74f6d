"""
Generic Firestore data access objects.

Each DAO wraps one collection and maps documents to plain dicts shaped
``{"id": <document id>, **fields}``. Writes stamp ``createdAt``/``updatedAt``
with Firestore server timestamps. There are no retries, transactions or
batching here: every method is a single round trip (``delete`` is two).
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core.exceptions import NotFound

from .constants import MEETINGS_COLLECTION, PARTICIPANTS_COLLECTION, USERS_COLLECTION
from .firebase_service import FirestoreUnavailableError, get_firestore

logger = logging.getLogger("api")

# Fields owned by the DAO; client-supplied values are discarded
_SERVER_FIELDS = ("id", "createdAt", "updatedAt")


class DocumentNotFoundError(LookupError):
    """Raised when an update targets a document that does not exist."""


class GlobalDAO:
    """CRUD operations against a single Firestore collection."""

    # Fields never written to this collection, whatever the caller sends
    blocked_fields: Tuple[str, ...] = ()

    def __init__(self, collection_name: str, client=None):
        self.collection_name = collection_name
        self._client = client

    @property
    def db(self):
        """Resolve the Firestore client lazily so configuration can change at runtime."""
        db = self._client or get_firestore()
        if db is None:
            raise FirestoreUnavailableError("Firebase Firestore is not configured")
        return db

    @property
    def collection(self):
        return self.db.collection(self.collection_name)

    @staticmethod
    def _to_record(snapshot) -> Dict[str, Any]:
        return {"id": snapshot.id, **(snapshot.to_dict() or {})}

    def _writable_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: value
            for key, value in data.items()
            if key not in _SERVER_FIELDS and key not in self.blocked_fields
        }

    def _with_timestamps(self, data: Dict[str, Any]) -> Dict[str, Any]:
        document = self._writable_fields(data)
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        document["updatedAt"] = firestore.SERVER_TIMESTAMP
        return document

    def create(self, data: Dict[str, Any]) -> str:
        """Insert with a generated id and return it."""
        _, doc_ref = self.collection.add(self._with_timestamps(data))
        logger.info(f"[DAO/{self.collection_name}] Created {doc_ref.id}")
        return doc_ref.id

    def create_with_id(self, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or replace the document at a caller-chosen id (e.g. an auth uid)."""
        document = self._with_timestamps(data)
        document["id"] = doc_id
        self.collection.document(doc_id).set(document)
        logger.info(f"[DAO/{self.collection_name}] Wrote {doc_id}")

    def get_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        query = self.collection
        for field_name, value in (filters or {}).items():
            query = query.where(field_name, "==", value)
        return [self._to_record(doc) for doc in query.stream()]

    def get_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self.collection.document(doc_id).get()
        if not doc.exists:
            return None
        return self._to_record(doc)

    def find_by(self, field_name: str, op: str, value: Any) -> List[Dict[str, Any]]:
        query = self.collection.where(field_name, op, value)
        return [self._to_record(doc) for doc in query.stream()]

    def update(self, doc_id: str, data: Dict[str, Any]) -> None:
        """Patch the given fields and bump updatedAt."""
        patch = self._writable_fields(data)
        patch["updatedAt"] = firestore.SERVER_TIMESTAMP
        try:
            self.collection.document(doc_id).update(patch)
        except NotFound:
            raise DocumentNotFoundError(f"{self.collection_name}/{doc_id} not found")

    def delete(self, doc_id: str) -> bool:
        """Delete if present. Returns False when there was nothing to delete."""
        doc_ref = self.collection.document(doc_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.delete()
        logger.info(f"[DAO/{self.collection_name}] Deleted {doc_id}")
        return True


class UserDAO(GlobalDAO):
    # Passwords live only in Firebase Auth
    blocked_fields = ("password",)

    def __init__(self, client=None):
        super().__init__(USERS_COLLECTION, client)

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        results = self.find_by("email", "==", email)
        return results[0] if results else None

    def link_provider(self, uid: str, provider: str) -> None:
        """Add an oauth provider to the profile without duplicating it."""
        self.update(uid, {"oauth": firestore.ArrayUnion([provider])})


class MeetingDAO(GlobalDAO):
    def __init__(self, client=None):
        super().__init__(MEETINGS_COLLECTION, client)


class ParticipantDAO(GlobalDAO):
    def __init__(self, client=None):
        super().__init__(PARTICIPANTS_COLLECTION, client)


# Singleton instances
user_dao = UserDAO()
meeting_dao = MeetingDAO()
participant_dao = ParticipantDAO()
