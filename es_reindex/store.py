# store.py
from typing import Iterable, List, Protocol, Set, Tuple

from elasticsearch import exceptions

from es_reindex.config import PAGE_SIZE, SCROLL_KEEP_ALIVE, VERSION_TYPE
from es_reindex.models import (
    AliasBinding,
    Document,
    ItemResult,
    ScanFilter,
    ScrollCursor,
    WriteRequest,
    WriteResult,
)

STORE_ERRORS = (exceptions.ApiError, exceptions.TransportError)


class DocumentStore(Protocol):
    """The store operations a migration run needs."""

    async def count(self, index: str) -> int: ...

    async def scan_open(self, index: str, scan_filter: ScanFilter,
                        page_size: int = PAGE_SIZE,
                        keep_alive: str = SCROLL_KEEP_ALIVE) -> Tuple[ScrollCursor, int]: ...

    async def scan_fetch(self, cursor: ScrollCursor,
                         keep_alive: str = SCROLL_KEEP_ALIVE) -> Tuple[List[Document], ScrollCursor]: ...

    async def close_scan(self, cursor: ScrollCursor) -> None: ...

    async def bulk_write(self, requests: List[WriteRequest]) -> WriteResult: ...

    async def write(self, request: WriteRequest) -> WriteResult: ...

    async def get_aliases(self, index: str) -> Set[str]: ...

    async def swap_aliases(self, remove: Iterable[AliasBinding],
                           add: Iterable[AliasBinding]) -> WriteResult: ...

    async def refresh(self, index: str) -> WriteResult: ...

    async def delete_index(self, index: str) -> WriteResult: ...


def _body(resp):
    return getattr(resp, "body", resp)


def _error_message(item):
    error = item.get("error")
    if isinstance(error, dict):
        return f"{error.get('type')}: {error.get('reason')}"
    return str(error) if error else None


def _failed(e):
    return WriteResult(ok=False, error=str(e), cause=e)


class ElasticStore:
    """
    DocumentStore backed by an ``AsyncElasticsearch`` client.

    Scroll and count failures raise the client's exceptions; counting a
    missing index answers 0. Write-path calls answer with a WriteResult
    instead, the same way a response validity flag would.
    """

    def __init__(self, client):
        self.client = client

    async def count(self, index):
        try:
            resp = await self.client.count(index=index)
        except exceptions.NotFoundError:
            # bulk writes create a missing index on demand
            return 0
        return _body(resp)["count"]

    async def scan_open(self, index, scan_filter, page_size=PAGE_SIZE,
                        keep_alive=SCROLL_KEEP_ALIVE):
        resp = _body(await self.client.search(
            index=index,
            query=scan_filter.to_query(),
            size=page_size,
            scroll=keep_alive,
            sort=["_doc"],
            version=True,
            track_total_hits=True,
        ))
        scroll_id = resp.get("_scroll_id")
        if not scroll_id:
            raise exceptions.TransportError(
                f"Invalid search result for '{index}': no scroll id returned")

        hits = resp.get("hits", {})
        total = hits.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)
        documents = [Document.from_hit(h) for h in hits.get("hits", [])]
        return ScrollCursor(scroll_id, documents), total

    async def scan_fetch(self, cursor, keep_alive=SCROLL_KEEP_ALIVE):
        resp = _body(await self.client.scroll(scroll_id=cursor.scroll_id, scroll=keep_alive))
        documents = [Document.from_hit(h) for h in resp.get("hits", {}).get("hits", [])]
        return documents, ScrollCursor(resp.get("_scroll_id") or cursor.scroll_id)

    async def close_scan(self, cursor):
        await self.client.clear_scroll(scroll_id=cursor.scroll_id)

    async def bulk_write(self, requests):
        operations = []
        for request in requests:
            action = {"_index": request.index, "_id": request.doc_id}
            if request.version is not None:
                action["version"] = request.version
                action["version_type"] = VERSION_TYPE
            if request.parent:
                action["routing"] = request.parent
            operations.append({"index": action})
            operations.append(request.source)

        try:
            resp = _body(await self.client.bulk(operations=operations))
        except STORE_ERRORS as e:
            return _failed(e)

        items = []
        for entry in resp.get("items", []):
            item = next(iter(entry.values()))
            message = _error_message(item)
            items.append(ItemResult(
                doc_id=item.get("_id"),
                ok=message is None,
                status=item.get("status"),
                error=message,
            ))

        failures = [i for i in items if not i.ok]
        if resp.get("errors") or failures:
            summary = "; ".join(f"{i.doc_id}: {i.error}" for i in failures[:5])
            return WriteResult(
                ok=False,
                error=f"{len(failures)} of {len(items)} bulk items failed: {summary}",
                items=items,
            )
        return WriteResult(ok=True, items=items)

    async def write(self, request):
        version = request.version
        try:
            await self.client.index(
                index=request.index,
                id=request.doc_id,
                document=request.source,
                version=version,
                version_type=VERSION_TYPE if version is not None else None,
                routing=request.parent or None,
            )
        except STORE_ERRORS as e:
            return _failed(e)
        return WriteResult(ok=True)

    async def get_aliases(self, index):
        try:
            resp = _body(await self.client.indices.get_alias(index=index))
        except exceptions.NotFoundError:
            return set()
        return set(resp.get(index, {}).get("aliases", {}))

    async def swap_aliases(self, remove, add):
        actions = [{"remove": {"index": b.index, "alias": b.alias}} for b in remove]
        actions += [{"add": {"index": b.index, "alias": b.alias}} for b in add]
        try:
            await self.client.indices.update_aliases(actions=actions)
        except STORE_ERRORS as e:
            return _failed(e)
        return WriteResult(ok=True)

    async def refresh(self, index):
        try:
            await self.client.indices.refresh(index=index)
        except STORE_ERRORS as e:
            return _failed(e)
        return WriteResult(ok=True)

    async def delete_index(self, index):
        try:
            await self.client.indices.delete(index=index)
        except STORE_ERRORS as e:
            return _failed(e)
        return WriteResult(ok=True)
