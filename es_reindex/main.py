# main.py
import argparse
import asyncio
from datetime import datetime, timezone

from es_reindex.config import (
    DEFAULT_TIMESTAMP_FIELD,
    ES_URL,
    LOG_LEVEL,
    configure_logging,
    create_client,
    logger
)
from es_reindex.errors import MigrationError
from es_reindex.models import MigrationRequest, ParentMapping
from es_reindex.reindexer import MigrationOrchestrator
from es_reindex.store import ElasticStore

# To move an index behind its aliases:
# es-reindex --source events-v1 --dest events-v2
#
# Also point "events" at the new index and drop the old one once counts match:
# es-reindex --source events-v1 --dest events-v2 --alias events --delete-old


def parse_since(value):
    since = datetime.fromisoformat(value)
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return since


def parse_parent_map(value):
    doc_type, sep, path = value.partition("=")
    if not sep or not doc_type or not path:
        raise argparse.ArgumentTypeError(f"expected TYPE=PATH, got '{value}'")
    return ParentMapping(doc_type, path)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Reindex an Elasticsearch index into a new one without downtime."
    )
    parser.add_argument("--source", required=True, help="Index to copy from.")
    parser.add_argument("--dest", required=True, help="Index to copy into.")
    parser.add_argument(
        "--alias",
        help="Alias to point at the new index, in addition to the source's aliases."
    )
    parser.add_argument(
        "--delete-old", action="store_true",
        help="Delete the source index when the document counts reconcile."
    )
    parser.add_argument(
        "--timestamp-field", default=DEFAULT_TIMESTAMP_FIELD,
        help="Field used to find documents written during the copy."
    )
    parser.add_argument(
        "--since", type=parse_since,
        help="Only copy documents newer than this ISO-8601 time in the first pass."
    )
    parser.add_argument(
        "--parent-map", type=parse_parent_map, action="append", default=[],
        metavar="TYPE=PATH",
        help="Path to the parent id for documents of TYPE (repeatable)."
    )
    parser.add_argument("--es-url", default=ES_URL, help="Elasticsearch URL.")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level.")
    return parser


def log_progress(percent, message):
    if message:
        logger.info("[%3d%%] %s", percent, message)
    else:
        logger.info("[%3d%%]", percent)


async def run(args):
    request = MigrationRequest(
        source_index=args.source,
        destination_index=args.dest,
        alias=args.alias,
        delete_source_when_done=args.delete_old,
        timestamp_field=args.timestamp_field,
        catch_up_since=args.since,
        parent_mappings=args.parent_map,
    )
    client = create_client(args.es_url)
    try:
        orchestrator = MigrationOrchestrator(ElasticStore(client))
        await orchestrator.run_migration(request, log_progress)
    finally:
        await client.close()


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        asyncio.run(run(args))
    except MigrationError as e:
        logger.error("❌ Reindex of '%s' into '%s' failed after %d documents: %s",
                     e.source_index, e.destination_index, e.completed, e.message)
        return 1
    except ValueError as e:
        logger.error("❌ Invalid request: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
