"""
Document Repository - documents and enhancement history over a key-value store.

Each collection is stored as one JSON array under ``<prefix>:documents`` and
``<prefix>:history``; every write overwrites the whole collection. Writes
are serialized per repository instance with an asyncio lock. Multi-key
operations (deleting a document and its history) are best-effort, not
transactional.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from docenhancer.core.storage.base import KeyValueStore
from docenhancer.models.api import ImportDataResult
from docenhancer.models.document import CamelModel, Document, EnhancementRecord, utc_now
from docenhancer.utils.exceptions import StoreError
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

# Nominal quota reported by get_storage_size
STORAGE_QUOTA_BYTES = 10 * 1024 * 1024


class StorageUsage(CamelModel):
    used: int
    available: int
    percentage: float


class DocumentRepository:
    """
    Persistence for documents and their enhancement history.

    Usage:
        repository = DocumentRepository(InMemoryKeyValueStore())
        await repository.add_document(document)
        history = await repository.get_history(document.id)
    """

    def __init__(self, store: KeyValueStore, key_prefix: str = "doc-enhancer"):
        """
        Args:
            store: Key-value backend
            key_prefix: Namespace for collection keys
        """
        self.store = store
        self.key_prefix = key_prefix
        self._lock = asyncio.Lock()

    @property
    def documents_key(self) -> str:
        return f"{self.key_prefix}:documents"

    @property
    def history_key(self) -> str:
        return f"{self.key_prefix}:history"

    # ═══════════════════════════════════════════════════════════
    # RAW COLLECTION ACCESS
    # ═══════════════════════════════════════════════════════════

    async def _load(self, key: str) -> list[dict[str, Any]]:
        raw = await self.store.get(key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupted collection at {key}: {e}", context={"key": key}) from e
        if not isinstance(data, list):
            raise StoreError(f"Corrupted collection at {key}: expected a list", context={"key": key})
        return data

    async def _save(self, key: str, items: list[dict[str, Any]]) -> None:
        await self.store.set(key, json.dumps(items))

    async def _load_documents(self) -> list[Document]:
        try:
            return [Document.model_validate(item) for item in await self._load(self.documents_key)]
        except PydanticValidationError as e:
            raise StoreError(f"Invalid stored document: {e}") from e

    async def _save_documents(self, documents: list[Document]) -> None:
        await self._save(self.documents_key, [document.to_storage() for document in documents])

    async def _load_history(self) -> list[EnhancementRecord]:
        try:
            return [
                EnhancementRecord.model_validate(item) for item in await self._load(self.history_key)
            ]
        except PydanticValidationError as e:
            raise StoreError(f"Invalid stored enhancement record: {e}") from e

    async def _save_history(self, history: list[EnhancementRecord]) -> None:
        await self._save(self.history_key, [record.to_storage() for record in history])

    # ═══════════════════════════════════════════════════════════
    # DOCUMENTS
    # ═══════════════════════════════════════════════════════════

    async def list_documents(self) -> list[Document]:
        return await self._load_documents()

    async def get_document(self, document_id: str) -> Document | None:
        for document in await self._load_documents():
            if document.id == document_id:
                return document
        return None

    async def add_document(self, document: Document) -> Document:
        async with self._lock:
            documents = await self._load_documents()
            if any(existing.id == document.id for existing in documents):
                raise StoreError(
                    f"Duplicate document id: {document.id}", context={"document_id": document.id}
                )
            documents.append(document)
            await self._save_documents(documents)
        logger.info(f"Document added: {document.id}", extra={"document_id": document.id})
        return document

    async def update_document(self, document_id: str, **updates: Any) -> Document | None:
        """
        Merge field updates into a stored document and bump ``updated_at``.

        Returns:
            Updated document, or None if it doesn't exist
        """
        async with self._lock:
            documents = await self._load_documents()
            for index, document in enumerate(documents):
                if document.id == document_id:
                    updated = document.model_copy(update={**updates, "updated_at": utc_now()})
                    documents[index] = updated
                    await self._save_documents(documents)
                    return updated
        return None

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete a document and its enhancement history.

        Returns:
            False if the document doesn't exist
        """
        async with self._lock:
            documents = await self._load_documents()
            remaining = [document for document in documents if document.id != document_id]
            if len(remaining) == len(documents):
                return False
            await self._save_documents(remaining)

            # Orphaned history cleanup; the document deletion above stands even if this fails
            try:
                history = await self._load_history()
                await self._save_history(
                    [record for record in history if record.document_id != document_id]
                )
            except StoreError as e:
                logger.warning(f"History cleanup failed for {document_id}: {e}")

        logger.info(f"Document deleted: {document_id}", extra={"document_id": document_id})
        return True

    # ═══════════════════════════════════════════════════════════
    # ENHANCEMENT HISTORY
    # ═══════════════════════════════════════════════════════════

    async def get_history(self, document_id: str | None = None) -> list[EnhancementRecord]:
        history = await self._load_history()
        if document_id is None:
            return history
        return [record for record in history if record.document_id == document_id]

    async def add_history(self, record: EnhancementRecord) -> EnhancementRecord:
        """
        Append a record to the audit trail.

        Raises:
            StoreError: If the referenced document doesn't exist
        """
        async with self._lock:
            documents = await self._load_documents()
            if not any(document.id == record.document_id for document in documents):
                raise StoreError(
                    f"Enhancement record references unknown document: {record.document_id}",
                    context={"document_id": record.document_id},
                )
            history = await self._load_history()
            history.append(record)
            await self._save_history(history)
        return record

    async def get_latest_enhancement(self, document_id: str) -> EnhancementRecord | None:
        history = await self.get_history(document_id)
        if not history:
            return None
        return max(history, key=lambda record: record.created_at)

    async def delete_history(self, record_id: str) -> bool:
        async with self._lock:
            history = await self._load_history()
            remaining = [record for record in history if record.id != record_id]
            if len(remaining) == len(history):
                return False
            await self._save_history(remaining)
        return True

    # ═══════════════════════════════════════════════════════════
    # UTILITIES
    # ═══════════════════════════════════════════════════════════

    async def clear_all(self) -> None:
        async with self._lock:
            await self.store.delete(self.documents_key)
            await self.store.delete(self.history_key)
        logger.info("All documents and history cleared")

    async def export_data(self) -> str:
        """Serialize every document and record as an indented JSON backup."""
        return json.dumps(
            {
                "documents": await self._load(self.documents_key),
                "history": await self._load(self.history_key),
                "exportedAt": datetime.now(timezone.utc).isoformat(),
            },
            indent=2,
        )

    async def import_data(self, json_string: str) -> ImportDataResult:
        """
        Replace stored collections with the contents of a backup.

        Document ids must be unique and every history record must reference
        an imported document; otherwise nothing is written. A backup without
        history keeps the existing records of documents it still contains.
        Never raises for bad input; failures are reported in the result.
        """
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            return ImportDataResult(success=False, error=str(e))

        if not isinstance(data, dict) or not isinstance(data.get("documents"), list):
            return ImportDataResult(
                success=False, error="Invalid data format: documents array not found"
            )

        history_items = data.get("history")
        try:
            documents = [Document.model_validate(item) for item in data["documents"]]
            history = (
                [EnhancementRecord.model_validate(item) for item in history_items]
                if isinstance(history_items, list)
                else None
            )
        except PydanticValidationError as e:
            return ImportDataResult(success=False, error=str(e))

        document_ids: set[str] = set()
        for document in documents:
            if document.id in document_ids:
                return ImportDataResult(success=False, error=f"Duplicate document id: {document.id}")
            document_ids.add(document.id)
        for record in history or []:
            if record.document_id not in document_ids:
                return ImportDataResult(
                    success=False,
                    error=(
                        f"Enhancement record {record.id} references unknown document: "
                        f"{record.document_id}"
                    ),
                )

        async with self._lock:
            if history is None:
                # Existing records must still reference an imported document
                existing = await self._load_history()
                kept = [record for record in existing if record.document_id in document_ids]
                if len(kept) != len(existing):
                    dropped = len(existing) - len(kept)
                    logger.warning(f"Dropped {dropped} history records for documents not in backup")
                    await self._save_history(kept)
            await self._save_documents(documents)
            if history is not None:
                await self._save_history(history)

        logger.info(
            f"Imported {len(documents)} documents and {len(history or [])} history records"
        )
        return ImportDataResult(
            success=True,
            documents_imported=len(documents),
            history_imported=len(history or []),
        )

    async def get_storage_size(self) -> StorageUsage:
        """Bytes used by the stored collections against the nominal quota."""
        used = 0
        for key in (self.documents_key, self.history_key):
            value = await self.store.get(key)
            if value is not None:
                used += len(key.encode()) + len(value.encode())
        return StorageUsage(
            used=used,
            available=STORAGE_QUOTA_BYTES - used,
            percentage=round(used / STORAGE_QUOTA_BYTES * 100, 2),
        )
