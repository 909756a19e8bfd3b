import json

import pytest

from productlobby_insights import __main__ as cli
from productlobby_insights.db import Database


class InMemoryDatabase(Database):
    def init(self, connection_string=None, create_tables=True):
        super().init("sqlite://", create_tables)


@pytest.fixture
def memory_db(monkeypatch):
    database = InMemoryDatabase()
    monkeypatch.setattr(cli, "db", database)
    return database


class TestRunDigest:
    def test_weekly_run_without_creators(self, memory_db, capsys):
        assert cli.run_digest() == 0

        output = json.loads(capsys.readouterr().out)
        assert output["total"] == 0
        assert output["errors"] == ["No creators with active campaigns found"]
        assert not memory_db.initialized

    def test_unknown_creator_exits_with_failure(self, memory_db, capsys):
        assert cli.run_digest("missing-creator") == 1
        assert json.loads(capsys.readouterr().out)["reason"] == "Creator not found"

    def test_digest_command(self, memory_db, capsys):
        with pytest.raises(SystemExit) as exit_info:
            cli.main(["digest"])
        assert exit_info.value.code == 0
