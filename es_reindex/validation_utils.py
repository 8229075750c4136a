# validation_utils.py
from es_reindex.config import logger


async def reconcile_doc_counts(store, source_index, destination_index, baseline_count=0):
    """
    Compare the source index with what the migration added to the
    destination.

    Returns ``(old_count, new_count)`` where new_count excludes the
    ``baseline_count`` documents the destination held before the run.
    """
    new_count = await store.count(destination_index) - baseline_count
    old_count = await store.count(source_index)
    if new_count >= old_count:
        logger.info("Doc counts reconcile for '%s': old=%d new=%d",
                    source_index, old_count, new_count)
    else:
        logger.warning("Doc count shortfall for '%s' -> '%s': old=%d new=%d",
                       source_index, destination_index, old_count, new_count)
    return old_count, new_count


def should_delete_source(old_count, new_count):
    return new_count >= old_count
