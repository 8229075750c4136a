"""
Shared pytest fixtures for the reindex tests.

- store: a fresh in-memory FakeDocumentStore
- orchestrator: MigrationOrchestrator over that store with a frozen clock
- progress: a recording progress callback
"""

import pytest

from es_reindex.reindexer import MigrationOrchestrator
from tests.fakes import NOW, FakeDocumentStore


class ProgressRecorder:
    def __init__(self):
        self.events = []

    async def __call__(self, percent, message):
        self.events.append((percent, message))

    @property
    def percents(self):
        return [p for p, _ in self.events]

    @property
    def messages(self):
        return [m for _, m in self.events if m]


@pytest.fixture
def store() -> FakeDocumentStore:
    """Create a fresh FakeDocumentStore for each test."""
    return FakeDocumentStore()


@pytest.fixture
def orchestrator(store) -> MigrationOrchestrator:
    return MigrationOrchestrator(store, clock=lambda: NOW)


@pytest.fixture
def progress() -> ProgressRecorder:
    return ProgressRecorder()
