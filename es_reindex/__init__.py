"""Zero-downtime Elasticsearch reindexing: copy, alias cutover, catch-up, retire."""

from es_reindex.errors import MigrationError
from es_reindex.models import (
    Document,
    MigrationRequest,
    ParentMapping,
    PassFailure,
    PassSuccess,
    ProgressEvent,
)
from es_reindex.progress import ProgressTracker, map_progress
from es_reindex.reindexer import MigrationOrchestrator
from es_reindex.store import DocumentStore, ElasticStore

__all__ = [
    "Document",
    "DocumentStore",
    "ElasticStore",
    "MigrationError",
    "MigrationOrchestrator",
    "MigrationRequest",
    "ParentMapping",
    "PassFailure",
    "PassSuccess",
    "ProgressEvent",
    "ProgressTracker",
    "map_progress",
]
