# config.py
import logging
import os
from datetime import timedelta

from elasticsearch import AsyncElasticsearch

# === Configuration ===
ES_URL = os.getenv("REINDEX_ES_URL", "http://localhost:9200")
ES_USER = os.getenv("REINDEX_ES_USER")
ES_PASSWORD = os.getenv("REINDEX_ES_PASSWORD")
REQUEST_TIMEOUT = int(os.getenv("REINDEX_REQUEST_TIMEOUT", "600"))
LOG_LEVEL = os.getenv("REINDEX_LOG_LEVEL", "INFO")

PAGE_SIZE = 100
SCROLL_KEEP_ALIVE = "5m"
DEFAULT_TIMESTAMP_FIELD = "_timestamp"
DEFAULT_DOC_TYPE = "_doc"
ERROR_INDEX_SUFFIX = "-error"
VERSION_TYPE = "external_gte"  # same id + same version overwrites
CUTOVER_CLOCK_SKEW = timedelta(seconds=1)

# === Logging Setup ===
logger = logging.getLogger("es_reindex")


def configure_logging(level=LOG_LEVEL):
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(message)s",
        level=level
    )


# === Elasticsearch Client ===
def create_client(url=ES_URL, user=ES_USER, password=ES_PASSWORD,
                  request_timeout=REQUEST_TIMEOUT):
    """
    Build an async Elasticsearch client for the cluster holding both indices.

    Basic auth is only sent when a user is configured.
    """
    kwargs = {"request_timeout": request_timeout}
    if user:
        kwargs["basic_auth"] = (user, password or "")
    return AsyncElasticsearch(url, **kwargs)
