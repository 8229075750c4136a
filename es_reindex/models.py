# models.py
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from es_reindex.config import DEFAULT_DOC_TYPE, DEFAULT_TIMESTAMP_FIELD


@dataclass(frozen=True)
class ParentMapping:
    """Where to find the parent document id inside a document of ``doc_type``."""

    doc_type: str
    path: str


@dataclass
class MigrationRequest:
    source_index: str
    destination_index: str
    alias: Optional[str] = None
    delete_source_when_done: bool = False
    timestamp_field: str = DEFAULT_TIMESTAMP_FIELD
    catch_up_since: Optional[datetime] = None
    parent_mappings: List[ParentMapping] = field(default_factory=list)

    def __post_init__(self):
        seen = set()
        for mapping in self.parent_mappings:
            if mapping.doc_type in seen:
                raise ValueError(f"Duplicate parent mapping for type '{mapping.doc_type}'")
            seen.add(mapping.doc_type)
        if not self.timestamp_field:
            self.timestamp_field = DEFAULT_TIMESTAMP_FIELD

    @property
    def parent_map(self) -> Dict[str, str]:
        return {m.doc_type: m.path for m in self.parent_mappings}


@dataclass
class Document:
    id: str
    doc_type: str
    version: Any
    source: Dict[str, Any]

    @classmethod
    def from_hit(cls, hit):
        return cls(
            id=hit["_id"],
            doc_type=hit.get("_type", DEFAULT_DOC_TYPE),
            version=hit.get("_version"),
            source=hit.get("_source") or {},
        )


@dataclass(frozen=True)
class ScanFilter:
    """Match-all, or ``timestamp_field > since`` when both are set."""

    timestamp_field: Optional[str] = None
    since: Optional[datetime] = None

    @property
    def is_match_all(self):
        return self.since is None or not self.timestamp_field

    def to_query(self):
        if self.is_match_all:
            return {"match_all": {}}
        return {"range": {self.timestamp_field: {"gt": self.since.isoformat()}}}


@dataclass
class ScrollCursor:
    scroll_id: str
    # first page comes back with the opening search
    pending: List[Document] = field(default_factory=list)

    def drained(self):
        return replace(self, pending=[])


@dataclass
class WriteRequest:
    index: str
    doc_id: str
    source: Dict[str, Any]
    doc_type: Optional[str] = None
    version: Any = None
    parent: Optional[str] = None


@dataclass
class ItemResult:
    doc_id: str
    ok: bool
    status: Optional[int] = None
    error: Optional[str] = None


@dataclass
class WriteResult:
    ok: bool
    error: Optional[str] = None
    cause: Optional[BaseException] = None
    items: List[ItemResult] = field(default_factory=list)


@dataclass(frozen=True)
class AliasBinding:
    alias: str
    index: str


@dataclass(frozen=True)
class ProgressEvent:
    percent: int
    message: Optional[str] = None


@dataclass
class PassSuccess:
    total: int = 0
    completed: int = 0


@dataclass
class PassFailure:
    source_index: str
    destination_index: str
    completed: int
    message: str
    cause: Optional[BaseException] = None


PassResult = Union[PassSuccess, PassFailure]
