"""Tests for DocumentScanner."""

import logging

import pytest
from elasticsearch import exceptions

from es_reindex.models import ScanFilter
from es_reindex.scanner import DocumentScanner
from tests.fakes import seed_documents


class TestDocumentScanner:
    @pytest.mark.asyncio
    async def test_open_failure_is_an_empty_scan(self, store, caplog):
        store.fail_scan_open = True
        scanner = DocumentScanner(store)

        with caplog.at_level(logging.ERROR, logger="es_reindex"):
            cursor, total = await scanner.open("old", ScanFilter())

        assert cursor is None
        assert total == 0
        assert "Invalid search result for 'old'" in caplog.text

    @pytest.mark.asyncio
    async def test_batches_in_order_then_releases_scroll(self, store):
        seed_documents(store, "old", 250)
        scanner = DocumentScanner(store)

        cursor, total = await scanner.open("old", ScanFilter())
        batches = [batch async for batch in scanner.batches(cursor)]

        assert total == 250
        assert [len(b) for b in batches] == [100, 100, 50]
        ids = [d.id for b in batches for d in b]
        assert ids == [f"doc-{n}" for n in range(250)]
        assert store.calls_to("close_scan") == [("close_scan", cursor.scroll_id)]
        assert store.open_scrolls == {}

    @pytest.mark.asyncio
    async def test_fetch_error_propagates_after_release(self, store):
        seed_documents(store, "old", 150)
        store.expire_scroll_after = 0
        scanner = DocumentScanner(store)
        cursor, _ = await scanner.open("old", ScanFilter())

        seen = []
        with pytest.raises(exceptions.TransportError):
            async for batch in scanner.batches(cursor):
                seen.append(batch)

        assert [len(b) for b in seen] == [100]
        assert len(store.calls_to("close_scan")) == 1

    @pytest.mark.asyncio
    async def test_uses_page_size(self, store):
        seed_documents(store, "old", 5)
        scanner = DocumentScanner(store, page_size=2)
        cursor, _ = await scanner.open("old", ScanFilter())
        assert [len(b) async for b in scanner.batches(cursor)] == [2, 2, 1]
