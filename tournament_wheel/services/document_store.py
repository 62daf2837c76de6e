import copy
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from tournament_wheel.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class DocumentStore(ABC):
    """
    Keyed collections of JSON-like documents.
    The store owns the id space: ids are assigned by `add`, never by callers.
    Returned documents are copies carrying their id under the "id" key.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def server_timestamp(self) -> datetime:
        return self.clock()

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    def add(self, collection: str, data: Document) -> str:
        ...

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Document) -> None:
        """Replaces the whole document (creating it if needed)."""
        ...

    @abstractmethod
    def set_if_revision(self, collection: str, doc_id: str, data: Document, expected_revision: int) -> int:
        """
        Replaces the document only while its stored "revision" equals expected_revision,
        checking and writing in one step. A missing document or revision counts as 0.
        Returns the revision that was found.
        """
        ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Returns False when there was no such document."""
        ...

    @abstractmethod
    def list(self, collection: str) -> List[Document]:
        ...

class InMemoryDocumentStore(DocumentStore):
    def __init__(self, clock: Callable[[], datetime] = utc_now):
        super().__init__(clock)
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._lock = threading.RLock()

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def add(self, collection: str, data: Document) -> str:
        doc_id = str(uuid4())
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: Document) -> None:
        with self._lock:
            doc = copy.deepcopy(data)
            doc["id"] = doc_id
            self._collections.setdefault(collection, {})[doc_id] = doc

    def set_if_revision(self, collection: str, doc_id: str, data: Document, expected_revision: int) -> int:
        with self._lock:
            stored = self._collections.get(collection, {}).get(doc_id) or {}
            stored_revision = stored.get("revision") or 0
            if stored_revision == expected_revision:
                self.set(collection, doc_id, data)
            return stored_revision

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._collections.get(collection, {}).pop(doc_id, None) is not None

    def list(self, collection: str) -> List[Document]:
        with self._lock:
            return [copy.deepcopy(doc) for doc in self._collections.get(collection, {}).values()]

class JsonFileDocumentStore(DocumentStore):
    """
    One JSON file per collection under data_dir, holding a list of documents.
    Every write rewrites the file through a temporary file and os.replace,
    so readers never see a partially written collection.
    """

    def __init__(
        self,
        data_dir: str,
        file_names: Optional[Dict[str, str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(clock)
        self.data_dir = data_dir
        self.file_names = dict(file_names or {})
        self._lock = threading.RLock()

        try:
            os.makedirs(self.data_dir, exist_ok=True)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot create data directory {self.data_dir}: {e}") from e

    def _path(self, collection: str) -> str:
        return os.path.join(self.data_dir, self.file_names.get(collection, f"{collection}.json"))

    def _load_collection(self, collection: str) -> List[Document]:
        path = self._path(collection)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r") as f:
                content = f.read()
        except OSError as e:
            raise StoreUnavailableError(f"Cannot read {path}: {e}") from e

        # Handle empty file case before json.loads
        if not content.strip():
            return []
        try:
            documents = json.loads(content)
        except json.JSONDecodeError as e:
            raise StoreUnavailableError(f"Could not decode JSON from {path}: {e}") from e
        if not isinstance(documents, list):
            raise StoreUnavailableError(f"{path} does not hold a list of documents.")
        return documents

    def _save_collection(self, collection: str, documents: List[Document]):
        path = self._path(collection)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(documents, f, indent=4, default=str)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write {path}: {e}") from e

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            for doc in self._load_collection(collection):
                if doc.get("id") == doc_id:
                    logger.debug("Loaded %s/%s", collection, doc_id)
                    return doc
        return None

    def add(self, collection: str, data: Document) -> str:
        doc_id = str(uuid4())
        with self._lock:
            documents = self._load_collection(collection)
            documents.append({**data, "id": doc_id})
            self._save_collection(collection, documents)
        logger.info("Added %s/%s", collection, doc_id)
        return doc_id

    def set(self, collection: str, doc_id: str, data: Document) -> None:
        with self._lock:
            documents = self._load_collection(collection)
            new_doc = {**data, "id": doc_id}
            for i, doc in enumerate(documents):
                if doc.get("id") == doc_id:
                    documents[i] = new_doc
                    break
            else:
                documents.append(new_doc)
            self._save_collection(collection, documents)
        logger.info("Replaced %s/%s", collection, doc_id)

    def set_if_revision(self, collection: str, doc_id: str, data: Document, expected_revision: int) -> int:
        with self._lock:
            documents = self._load_collection(collection)
            position = next((i for i, doc in enumerate(documents) if doc.get("id") == doc_id), None)
            stored_revision = (documents[position].get("revision") or 0) if position is not None else 0
            if stored_revision != expected_revision:
                logger.info("Kept %s/%s: revision is %d, not %d", collection, doc_id, stored_revision, expected_revision)
                return stored_revision
            new_doc = {**data, "id": doc_id}
            if position is None:
                documents.append(new_doc)
            else:
                documents[position] = new_doc
            self._save_collection(collection, documents)
        logger.info("Replaced %s/%s at revision %d", collection, doc_id, stored_revision)
        return stored_revision

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            documents = self._load_collection(collection)
            kept = [doc for doc in documents if doc.get("id") != doc_id]
            if len(kept) == len(documents):
                return False
            self._save_collection(collection, kept)
        logger.info("Deleted %s/%s", collection, doc_id)
        return True

    def list(self, collection: str) -> List[Document]:
        with self._lock:
            documents = self._load_collection(collection)
        logger.debug("Listed %d documents from %s", len(documents), collection)
        return documents
