"""
Case store for the HTTP boundary.

Holds case files, the unassigned pool of orphan documents and the content
hashes already taken in. Durable persistence is a caller concern; this
in-memory backend is what the API process uses.

Design Decisions:
- Abstract store interface so a persistent backend can replace it
- Case files are immutable; saving a case replaces it by id
- Duplicate intake is detected by content hash, not filename
"""

import logging
import threading
from abc import ABC, abstractmethod

from tradedocs.domain.models import CaseFile, DocumentRecord

logger = logging.getLogger(__name__)


class DuplicateDocumentError(Exception):
    """Raised when a document with the same content hash was already taken in."""

    def __init__(self, content_hash: str, existing_id: str):
        super().__init__(f"Document {content_hash} already received as {existing_id}")
        self.content_hash = content_hash
        self.existing_id = existing_id


class CaseStore(ABC):
    """Abstract interface for case file and orphan pool storage."""

    @abstractmethod
    def add_document(self, record: DocumentRecord, pooled: bool) -> None:
        """Register an analysed document, in the unassigned pool if pooled."""

    @abstractmethod
    def get_document(self, document_id: str) -> DocumentRecord | None:
        pass

    @abstractmethod
    def unassigned(self) -> list[DocumentRecord]:
        pass

    @abstractmethod
    def is_unassigned(self, document_id: str) -> bool:
        pass

    @abstractmethod
    def release(self, document_id: str) -> None:
        """Remove a document from the unassigned pool."""

    @abstractmethod
    def save_case(self, case: CaseFile) -> None:
        pass

    @abstractmethod
    def get_case(self, case_id: str) -> CaseFile | None:
        pass

    @abstractmethod
    def cases(self) -> list[CaseFile]:
        pass


class InMemoryCaseStore(CaseStore):
    """Process-local store. Insertion order is preserved everywhere."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._documents: dict[str, DocumentRecord] = {}
        self._pool: dict[str, DocumentRecord] = {}
        self._cases: dict[str, CaseFile] = {}
        self._hashes: dict[str, str] = {}

    def add_document(self, record: DocumentRecord, pooled: bool) -> None:
        with self._lock:
            if record.content_hash:
                existing = self._hashes.get(record.content_hash)
                if existing is not None:
                    raise DuplicateDocumentError(record.content_hash, existing)
                self._hashes[record.content_hash] = record.id
            self._documents[record.id] = record
            if pooled:
                self._pool[record.id] = record
        logger.debug(f"Stored document {record.id} (pooled={pooled})")

    def get_document(self, document_id: str) -> DocumentRecord | None:
        with self._lock:
            return self._documents.get(document_id)

    def unassigned(self) -> list[DocumentRecord]:
        with self._lock:
            return list(self._pool.values())

    def is_unassigned(self, document_id: str) -> bool:
        with self._lock:
            return document_id in self._pool

    def release(self, document_id: str) -> None:
        with self._lock:
            self._pool.pop(document_id, None)

    def save_case(self, case: CaseFile) -> None:
        with self._lock:
            self._cases[case.id] = case

    def get_case(self, case_id: str) -> CaseFile | None:
        with self._lock:
            return self._cases.get(case_id)

    def cases(self) -> list[CaseFile]:
        with self._lock:
            return list(self._cases.values())

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()
            self._pool.clear()
            self._cases.clear()
            self._hashes.clear()
