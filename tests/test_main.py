"""Tests for the es-reindex command line."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from es_reindex import main as cli
from es_reindex.errors import MigrationError
from es_reindex.models import ParentMapping


class TestParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args(["--source", "a", "--dest", "b"])
        assert args.source == "a"
        assert args.dest == "b"
        assert args.alias is None
        assert args.delete_old is False
        assert args.timestamp_field == "_timestamp"
        assert args.since is None
        assert args.parent_map == []

    def test_all_options(self):
        args = cli.build_parser().parse_args([
            "--source", "a", "--dest", "b", "--alias", "events", "--delete-old",
            "--timestamp-field", "updated", "--since", "2026-01-01T10:00:00",
            "--parent-map", "event=$.stack_id", "--parent-map", "stack=project.id",
        ])
        assert args.delete_old is True
        assert args.since == datetime(2026, 1, 1, 10, tzinfo=timezone.utc)
        assert args.parent_map == [
            ParentMapping("event", "$.stack_id"), ParentMapping("stack", "project.id")]

    def test_bad_parent_map(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--source", "a", "--dest", "b", "--parent-map", "event"])


class TestMain:
    def test_success(self):
        with patch.object(cli, "run", new=AsyncMock()) as run:
            assert cli.main(["--source", "a", "--dest", "b"]) == 0
        run.assert_awaited_once()

    def test_migration_error_exit_code(self):
        error = MigrationError("boom", source_index="a", destination_index="b", completed=3)
        with patch.object(cli, "run", new=AsyncMock(side_effect=error)):
            assert cli.main(["--source", "a", "--dest", "b"]) == 1

    def test_duplicate_parent_maps_are_rejected(self):
        with patch.object(cli, "create_client") as create_client:
            code = cli.main(["--source", "a", "--dest", "b",
                             "--parent-map", "event=x", "--parent-map", "event=y"])
        assert code == 1
        create_client.assert_not_called()
