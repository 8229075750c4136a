# documents.py
import re

from es_reindex.config import logger

_SEGMENT = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def select_token(source, path):
    """
    Resolve a JSONPath-like ``path`` ("$.project.id", "items[0].id") inside
    ``source`` and return the value as a string.

    Returns None for a missing path, a container value, None or "".
    Never raises.
    """
    if not path or not isinstance(path, str):
        return None
    expr = path.strip()
    if expr.startswith("$"):
        expr = expr[1:]
    expr = expr.lstrip(".")
    if not expr:
        return None

    current = source
    for match in _SEGMENT.finditer(expr):
        key, position = match.groups()
        if key is not None:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        else:
            index = int(position)
            if not isinstance(current, list) or index >= len(current):
                return None
            current = current[index]

    if current is None or isinstance(current, (dict, list)):
        return None
    if isinstance(current, bool):
        value = "true" if current else "false"
    else:
        value = str(current)
    return value or None


def resolve_parent_id(document, parent_map):
    """
    Look up the parent id for ``document`` using its type's mapped path.

    Data problems are logged and answered with None so the write can go
    ahead without a parent link.
    """
    if document.doc_type not in parent_map:
        return None

    path = parent_map[document.doc_type]
    if not path:
        logger.error("Parent map has empty value. id=%s type=%s",
                     document.id, document.doc_type)
        return None

    parent_id = select_token(document.source, path)
    if parent_id is None:
        logger.error("Unable to get parent id. id=%s path=%s", document.id, path)
    return parent_id


def parse_version(version, default=1):
    try:
        return int(version)
    except (TypeError, ValueError):
        return default
