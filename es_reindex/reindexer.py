# reindexer.py
import asyncio
from contextlib import aclosing
from datetime import datetime, timezone

from es_reindex.alias_utils import collect_aliases, cut_over_aliases
from es_reindex.config import CUTOVER_CLOCK_SKEW, logger
from es_reindex.errors import MigrationError
from es_reindex.models import PassFailure, PassSuccess, ProgressEvent, ScanFilter
from es_reindex.progress import ProgressTracker
from es_reindex.relay import BulkRelay
from es_reindex.scanner import DocumentScanner
from es_reindex.store import STORE_ERRORS
from es_reindex.validation_utils import reconcile_doc_counts, should_delete_source


def utc_now():
    return datetime.now(timezone.utc)


class MigrationOrchestrator:
    """
    Zero-downtime move of one index into another.

    1) Copy everything (or everything newer than ``catch_up_since``).
    2) Atomically move the source's aliases to the destination.
    3) Copy again, only documents written since just before step 1.
    4) Optionally delete the source, but only when the destination gained
       at least as many documents as the source holds.

    Runs must be serialized per index pair by the caller.
    """

    def __init__(self, store, scanner=None, clock=utc_now):
        self.store = store
        self.scanner = scanner or DocumentScanner(store)
        self.clock = clock

    async def run_migration(self, request, progress_callback=None):
        progress = ProgressTracker(progress_callback)
        source, destination = request.source_index, request.destination_index

        if source == destination:
            await progress.emit(100)
            return

        baseline_count = await self._count_or_fail(
            request, self.store.count(destination), completed=0)
        logger.info("Received reindex request for new index %s", destination)
        cutover_mark = self.clock() - CUTOVER_CLOCK_SKEW
        await progress.emit(0, "Starting reindex...")

        first = await self.copy_pass(request, progress.phase(0, 90), request.catch_up_since)
        self._raise_on_failure(first)
        await progress.emit(95, f"Total: {first.total} Completed: {first.completed}")

        aliases = await collect_aliases(self.store, source, request.alias)
        if aliases:
            swapped = await cut_over_aliases(self.store, source, destination, aliases)
            if not swapped.ok:
                raise MigrationError(
                    f"Alias update failed: old={source} new={destination} message={swapped.error}",
                    source_index=source,
                    destination_index=destination,
                    completed=first.completed,
                    cause=swapped.cause,
                ) from swapped.cause
            await progress.emit(
                98, f"Updated aliases: {', '.join(aliases)} Remove: {source} Add: {destination}")

        await self._refresh(destination)
        second = await self.copy_pass(request, progress.phase(90, 98), cutover_mark)
        self._raise_on_failure(second)
        await progress.emit(98, f"Total: {second.total} Completed: {second.completed}")

        if request.delete_source_when_done:
            await self._refresh(destination)
            old_count, new_count = await self._count_or_fail(
                request,
                reconcile_doc_counts(self.store, source, destination, baseline_count),
                completed=first.completed + second.completed,
            )
            await progress.emit(98, f"Old Docs: {old_count} New Docs: {new_count}")
            if should_delete_source(old_count, new_count):
                deleted = await self.store.delete_index(source)
                if deleted.ok:
                    logger.info("🗑️  Deleted index '%s'", source)
                    await progress.emit(98, f"Deleted index: {source}")
                else:
                    logger.error("Error deleting index '%s': %s", source, deleted.error)
            else:
                logger.warning("Keeping index '%s': old=%d new=%d", source, old_count, new_count)

        await progress.emit(100)
        logger.info("🎉 Reindex of '%s' into '%s' complete", source, destination)

    async def stream(self, request):
        """
        Run the migration and yield each ProgressEvent as it happens.

        Events go through an unbounded queue, so the run never waits on the
        consumer. A failed run re-raises here after its queued events.
        """
        queue = asyncio.Queue()
        done = object()

        async def runner():
            try:
                await self.run_migration(request, lambda p, m: queue.put_nowait(ProgressEvent(p, m)))
            finally:
                queue.put_nowait(done)

        task = asyncio.ensure_future(runner())
        try:
            while True:
                event = await queue.get()
                if event is done:
                    break
                yield event
            await task
        finally:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    async def copy_pass(self, request, phase, since=None):
        """
        Scan the source (optionally only ``timestamp_field > since``) and
        relay every batch to the destination.

        Returns PassSuccess, or PassFailure when the scroll breaks or the
        write ladder is exhausted.
        """
        source, destination = request.source_index, request.destination_index
        scan_filter = ScanFilter(request.timestamp_field, since) if since else ScanFilter()
        cursor, total = await self.scanner.open(source, scan_filter)

        if cursor is None or total == 0:
            if cursor is not None:
                await self.scanner.close(cursor)
            await phase.finish(f"Total: {total} Completed: 0")
            return PassSuccess(total=total, completed=0)

        relay = BulkRelay(self.store, source, destination, request.parent_map)
        completed = 0
        try:
            async with aclosing(self.scanner.batches(cursor)) as batches:
                async for batch in batches:
                    result = await relay.relay(batch, completed)
                    completed += result.written
                    if result.failure is not None:
                        return result.failure

                    percent = await phase.report(
                        total, completed, f"Total: {total} Completed: {completed}")
                    logger.info("Reindex Progress: %d Completed: %d Total: %d",
                                percent, completed, total)
        except STORE_ERRORS as e:
            message = (f"Reindex scroll error: old={source} new={destination} "
                       f"completed={completed} message={e}")
            logger.error(message)
            return PassFailure(source, destination, completed, message, cause=e)

        return PassSuccess(total=total, completed=completed)

    async def _count_or_fail(self, request, counting, completed):
        try:
            return await counting
        except STORE_ERRORS as e:
            message = (f"Reindex count error: old={request.source_index} "
                       f"new={request.destination_index} message={e}")
            logger.error(message)
            raise MigrationError(
                message,
                source_index=request.source_index,
                destination_index=request.destination_index,
                completed=completed,
                cause=e,
            ) from e

    async def _refresh(self, index):
        result = await self.store.refresh(index)
        if not result.ok:
            logger.warning("Refresh of '%s' failed: %s", index, result.error)

    @staticmethod
    def _raise_on_failure(result):
        if isinstance(result, PassFailure):
            raise MigrationError.from_failure(result) from result.cause
