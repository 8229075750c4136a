# scanner.py
from es_reindex.config import PAGE_SIZE, SCROLL_KEEP_ALIVE, logger
from es_reindex.store import STORE_ERRORS


class DocumentScanner:
    """
    Opens a scroll over an index and hands back its pages in order.

    Every fetch renews the scroll lease for another ``keep_alive``.
    """

    def __init__(self, store, page_size=PAGE_SIZE, keep_alive=SCROLL_KEEP_ALIVE):
        self.store = store
        self.page_size = page_size
        self.keep_alive = keep_alive

    async def open(self, index, scan_filter):
        """
        Returns ``(cursor, total)``. A scroll that cannot be opened is logged
        and reported as ``(None, 0)``: nothing has been written yet, so the
        pass simply has nothing to copy.
        """
        try:
            return await self.store.scan_open(
                index, scan_filter, page_size=self.page_size, keep_alive=self.keep_alive)
        except STORE_ERRORS as e:
            logger.error("Invalid search result for '%s': message=%s", index, e)
            return None, 0

    async def fetch(self, cursor):
        """Returns ``(batch, next_cursor)``; an empty batch means exhausted."""
        if cursor.pending:
            return cursor.pending, cursor.drained()
        return await self.store.scan_fetch(cursor, keep_alive=self.keep_alive)

    async def batches(self, cursor):
        """
        Yield non-empty batches until the scroll is exhausted, then release
        it. Fetch errors propagate after the release attempt.
        """
        try:
            while True:
                batch, cursor = await self.fetch(cursor)
                if not batch:
                    break
                yield batch
        finally:
            await self.close(cursor)

    async def close(self, cursor):
        try:
            await self.store.close_scan(cursor)
        except STORE_ERRORS as e:
            logger.warning("Unable to clear scroll %s: %s", cursor.scroll_id, e)
