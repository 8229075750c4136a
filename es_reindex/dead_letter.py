# dead_letter.py
import json

from es_reindex.config import ERROR_INDEX_SUFFIX
from es_reindex.documents import resolve_parent_id
from es_reindex.models import WriteRequest


def error_index_name(destination_index):
    return f"{destination_index}{ERROR_INDEX_SUFFIX}"


def build_error_document(document, parent_map):
    """
    Error record for a document that could not be written: its type, the
    original payload pretty-printed, and the parent id when one resolves.
    """
    error_doc = {
        "type": document.doc_type,
        "content": json.dumps(document.source, indent=2, ensure_ascii=False, default=str),
    }
    parent_id = resolve_parent_id(document, parent_map)
    if parent_id:
        error_doc["parent_id"] = parent_id
    return error_doc


class DeadLetterSink:
    """Archives documents that failed every write attempt in ``<destination>-error``."""

    def __init__(self, store, parent_map=None):
        self.store = store
        self.parent_map = parent_map or {}

    async def archive(self, document, destination_index):
        request = WriteRequest(
            index=error_index_name(destination_index),
            doc_id=document.id,
            source=build_error_document(document, self.parent_map),
        )
        return await self.store.write(request)
