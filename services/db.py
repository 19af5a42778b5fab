# services/db.py
"""Document store used by every service.

Firestore is preferred; when the library or the service-account credentials are
missing we fall back to local JSON files (one file per document). Both backends
expose the same small interface plus an all-or-nothing write batch.
"""

import copy
import json
import logging
import os
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

# Firestore is optional – we'll try to initialize and fall back to local JSON.
try:
    import firebase_admin
    from firebase_admin import credentials, firestore
    from google.api_core.exceptions import NotFound
except ImportError:
    firebase_admin = None
    credentials = None
    firestore = None
    NotFound = None

logger = logging.getLogger(__name__)

USERS = "users"
CURRICULUMS = "curriculums"
QUIZZES = "quizzes"
RESULTS = "results"


class DocumentNotFound(LookupError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} does not exist")
        self.collection = collection
        self.doc_id = doc_id


def _new_id() -> str:
    return uuid.uuid4().hex


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _set_path(doc: Dict[str, Any], path: str, value: Any) -> None:
    """Assign ``value`` at a dotted field path, creating nested maps on the way."""
    parts = path.split(".")
    target = doc
    for part in parts[:-1]:
        nxt = target.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            target[part] = nxt
        target = nxt
    target[parts[-1]] = value


def _get_path(doc: Dict[str, Any], path: str) -> Any:
    target: Any = doc
    for part in path.split("."):
        if not isinstance(target, dict):
            return None
        target = target.get(part)
    return target


class WriteBatch:
    """Collects writes and applies them together on ``commit``."""

    def __init__(self):
        self._ops: List[Tuple[str, str, str, Any]] = []

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> "WriteBatch":
        self._ops.append(("set", collection, doc_id, data))
        return self

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> "WriteBatch":
        self._ops.append(("update", collection, doc_id, fields))
        return self

    def array_union(self, collection: str, doc_id: str, field_path: str, values: List[Any]) -> "WriteBatch":
        self._ops.append(("array_union", collection, doc_id, (field_path, list(values))))
        return self

    def __len__(self) -> int:
        return len(self._ops)

    def commit(self) -> None:
        raise NotImplementedError


class DocumentStore:
    """Interface shared by the Firestore and local JSON backends."""

    name = "abstract"

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def create(self, collection: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        raise NotImplementedError

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        raise NotImplementedError

    def batch(self) -> WriteBatch:
        raise NotImplementedError

    def new_id(self, collection: str) -> str:
        return _new_id()


# ---------- Local JSON fallback ----------

class _LocalWriteBatch(WriteBatch):
    def __init__(self, store: "LocalJSONStore"):
        super().__init__()
        self._store = store

    def commit(self) -> None:
        self._store._apply(self._ops)
        self._ops = []


class LocalJSONStore(DocumentStore):
    """Stores each document as ``<data_dir>/<collection>/<doc_id>.json``."""

    name = "local"

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        os.makedirs(self.data_dir, exist_ok=True)
        self._lock = threading.RLock()

    def _local_path(self, collection: str, doc_id: str) -> str:
        return os.path.join(self.data_dir, collection, f"{doc_id}.json")

    def _read(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        path = self._local_path(collection, doc_id)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        path = self._local_path(collection, doc_id)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2, default=_json_default)
        os.replace(tmp_path, path)

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._read(collection, doc_id)
        if doc is not None:
            doc["id"] = doc_id
        return doc

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        folder = os.path.join(self.data_dir, collection)
        if not os.path.isdir(folder):
            return []
        items: List[Dict[str, Any]] = []
        with self._lock:
            for name in sorted(os.listdir(folder)):
                if not name.endswith(".json"):
                    continue
                doc_id = name[: -len(".json")]
                doc = self._read(collection, doc_id)
                if doc is None:
                    continue
                if all(_get_path(doc, k) == v for k, v in equals.items()):
                    doc["id"] = doc_id
                    items.append(doc)
        return items

    def create(self, collection: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or self.new_id(collection)
        payload = dict(data)
        payload["id"] = doc_id
        self.set(collection, doc_id, payload)
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._apply([("set", collection, doc_id, data)])

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        self._apply([("update", collection, doc_id, fields)])

    def batch(self) -> WriteBatch:
        return _LocalWriteBatch(self)

    def _apply(self, ops: List[Tuple[str, str, str, Any]]) -> None:
        # Stage everything in memory first; nothing touches disk unless every op applies.
        with self._lock:
            staged: Dict[Tuple[str, str], Dict[str, Any]] = {}
            for kind, collection, doc_id, payload in ops:
                key = (collection, doc_id)
                if kind == "set":
                    staged[key] = copy.deepcopy(payload)
                    continue
                doc = staged.get(key)
                if doc is None:
                    doc = self._read(collection, doc_id)
                    if doc is None:
                        raise DocumentNotFound(collection, doc_id)
                if kind == "update":
                    for path, value in payload.items():
                        _set_path(doc, path, copy.deepcopy(value))
                elif kind == "array_union":
                    path, values = payload
                    current = _get_path(doc, path)
                    merged = list(current) if isinstance(current, list) else []
                    for value in values:
                        if value not in merged:
                            merged.append(value)
                    _set_path(doc, path, merged)
                else:
                    raise ValueError(f"Unknown write operation: {kind}")
                staged[key] = doc

            for (collection, doc_id), doc in staged.items():
                self._write(collection, doc_id, doc)


# ---------- Firestore ----------

class _FirestoreWriteBatch(WriteBatch):
    def __init__(self, store: "FirestoreStore"):
        super().__init__()
        self._store = store

    def commit(self) -> None:
        client = self._store.client
        batch = client.batch()
        for kind, collection, doc_id, payload in self._ops:
            ref = client.collection(collection).document(doc_id)
            if kind == "set":
                batch.set(ref, payload)
            elif kind == "update":
                batch.update(ref, payload)
            elif kind == "array_union":
                path, values = payload
                batch.update(ref, {path: firestore.ArrayUnion(values)})
        try:
            batch.commit()
        except NotFound as e:
            raise DocumentNotFound("batch", str(e)) from e
        self._ops = []


class FirestoreStore(DocumentStore):
    name = "firestore"

    def __init__(self, client):
        self.client = client

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        d = self.client.collection(collection).document(doc_id).get()
        if not d.exists:
            return None
        doc = d.to_dict() or {}
        doc["id"] = doc_id
        return doc

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        ref = self.client.collection(collection)
        for field_path, value in equals.items():
            ref = ref.where(field_path, "==", value)
        items = []
        for d in ref.stream():
            doc = d.to_dict() or {}
            doc["id"] = d.id
            items.append(doc)
        return items

    def new_id(self, collection: str) -> str:
        return self.client.collection(collection).document().id

    def create(self, collection: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        ref = self.client.collection(collection).document(doc_id) if doc_id else \
            self.client.collection(collection).document()
        payload = dict(data)
        payload["id"] = ref.id
        ref.set(payload)
        return ref.id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.client.collection(collection).document(doc_id).set(data)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        try:
            self.client.collection(collection).document(doc_id).update(fields)
        except NotFound as e:
            raise DocumentNotFound(collection, doc_id) from e

    def batch(self) -> WriteBatch:
        return _FirestoreWriteBatch(self)


def _firestore_client(service_account_path: str):
    if not firebase_admin._apps:
        cred = credentials.Certificate(service_account_path)
        firebase_admin.initialize_app(cred)
    return firestore.client()


# ---------- public API ----------

_store: Optional[DocumentStore] = None


def init_store(backend: str = "auto", *, data_dir: str, service_account_path: Optional[str] = None) -> DocumentStore:
    """
    Initialize the global document store.

    backend: "firestore" requires working credentials, "local" always uses JSON
    files, "auto" tries Firestore and falls back to local JSON.
    """
    global _store
    backend = (backend or "auto").lower()

    if backend in ("auto", "firestore"):
        usable = firebase_admin is not None and service_account_path and os.path.exists(service_account_path)
        if usable:
            try:
                _store = FirestoreStore(_firestore_client(service_account_path))
                logger.info("Firestore initialized from %s", service_account_path)
                return _store
            except (ValueError, OSError) as e:
                if backend == "firestore":
                    raise
                logger.warning("Firestore init failed; falling back to local JSON. Error: %s", e)
        elif backend == "firestore":
            raise RuntimeError("Firestore backend requested but firebase-admin or credentials are unavailable")
        else:
            logger.info("Firestore credentials not available; using local JSON storage.")

    _store = LocalJSONStore(data_dir)
    logger.info("Local JSON store at %s", data_dir)
    return _store


def get_store() -> DocumentStore:
    if _store is None:
        raise RuntimeError("Document store has not been initialized; call init_store() first")
    return _store
