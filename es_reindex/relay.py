# relay.py
from dataclasses import dataclass
from typing import Optional

from es_reindex.config import logger
from es_reindex.dead_letter import DeadLetterSink
from es_reindex.documents import parse_version, resolve_parent_id
from es_reindex.models import PassFailure, WriteRequest


@dataclass
class RelayResult:
    written: int
    failure: Optional[PassFailure] = None


class BulkRelay:
    """
    Copies one scroll batch into the destination index.

    Write ladder:
    1) One bulk request for the whole batch.
    2) If the bulk response is invalid, every document of the batch is
       written on its own, in batch order.
    3) A document that still fails goes to the dead-letter index.
    4) If the dead-letter write fails too, the run is over: the result
       carries a PassFailure.

    Only confirmed writes count as written; dead-lettered documents do not.
    """

    def __init__(self, store, source_index, destination_index, parent_map=None,
                 dead_letters=None):
        self.store = store
        self.source_index = source_index
        self.destination_index = destination_index
        self.parent_map = parent_map or {}
        self.dead_letters = dead_letters or DeadLetterSink(store, self.parent_map)

    def build_request(self, document, version):
        if not document.doc_type:
            logger.error("Hit type empty. id=%s", document.id)

        return WriteRequest(
            index=self.destination_index,
            doc_id=document.id,
            source=document.source,
            doc_type=document.doc_type,
            version=version,
            parent=resolve_parent_id(document, self.parent_map),
        )

    async def relay(self, batch, completed=0):
        """
        Write ``batch``; ``completed`` is the pass total so far and only feeds
        the diagnostics.
        """
        requests = [self.build_request(d, d.version) for d in batch]
        response = await self.store.bulk_write(requests)
        if response.ok:
            return RelayResult(written=len(batch))

        logger.warning(
            "Reindex bulk error: old=%s new=%s completed=%s message=%s",
            self.source_index, self.destination_index, completed, response.error)

        written = 0
        for document in batch:
            request = self.build_request(document, parse_version(document.version))
            response = await self.store.write(request)
            if response.ok:
                written += 1
                continue

            logger.error(
                "Reindex error: old=%s new=%s id=%s completed=%s message=%s",
                self.source_index, self.destination_index, document.id,
                completed + written, response.error)

            archived = await self.dead_letters.archive(document, self.destination_index)
            if archived.ok:
                continue

            message = (
                f"Reindex error: old={self.source_index} new={self.destination_index} "
                f"id={document.id} completed={completed + written} message={archived.error}"
            )
            logger.error(message)
            return RelayResult(
                written=written,
                failure=PassFailure(
                    source_index=self.source_index,
                    destination_index=self.destination_index,
                    completed=completed + written,
                    message=message,
                    cause=archived.cause,
                ),
            )

        return RelayResult(written=written)
