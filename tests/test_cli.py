"""Tests for ``pipeline.cli``."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeDatabase, VALID_ID
from migration_config import AppConfig
from pipeline import cli
from pipeline.common.base_pipeline import OutcomeCounters
from pipeline.common.resolver import IdentifierPolicy
from pipeline.errors import DatabaseConnectionError, ReferenceTableError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "migration.yaml"
    path.write_text("database:\n  host: db.test\npipeline:\n  separator: ','\n")
    return path


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def mock_connect(fake_db):
    with patch("pipeline.cli.connect") as mocked:
        mocked.return_value.__enter__.return_value = fake_db
        yield mocked


class TestParser:
    def test_stage_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_load_requires_file(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["load"])

    def test_defaults_do_not_override_config(self):
        args = cli.build_parser().parse_args(["transform"])
        assert args.verbose is None
        assert args.host is None


class TestResolveConfig:
    def test_flags_override_file(self, config_file):
        args = cli.build_parser().parse_args(
            ["--config", str(config_file), "export", "-f", "out.csv", "-s", ";", "--host", "cli.host", "-v"]
        )
        config = cli.resolve_config(args)

        assert config.database["host"] == "cli.host"
        assert config.pipeline["separator"] == ";"
        assert config.pipeline["export_file"] == "out.csv"
        assert config.pipeline["verbose"] is True

    def test_file_value_kept_without_flag(self, config_file):
        args = cli.build_parser().parse_args(["--config", str(config_file), "disperse"])
        config = cli.resolve_config(args)

        assert config.database["host"] == "db.test"
        assert config.identifier_policy == "contains"


class TestRunStage:
    def test_uses_configured_separator_and_policy(self, fake_db):
        config = AppConfig()
        config.pipeline.update(separator=";", identifier_policy="exact", export_file="out.csv")

        with patch("pipeline.cli.run_export", return_value=OutcomeCounters()) as export, \
                patch("pipeline.cli.run_disperse", return_value=OutcomeCounters()) as disperse:
            cli.run_stage("export", fake_db, config)
            cli.run_stage("disperse", fake_db, config)

        export.assert_called_once_with(fake_db, "out.csv", separator=";", verbose=False)
        assert disperse.call_args.kwargs["policy"] is IdentifierPolicy.EXACT

    def test_unknown_stage(self, fake_db):
        with pytest.raises(ValueError, match="Unknown stage"):
            cli.run_stage("compact", fake_db, AppConfig())


class TestMain:
    def test_transform_summary(self, config_file, mock_connect, capsys):
        with patch("pipeline.cli.run_transform", return_value=OutcomeCounters(stored=3, errored=1)) as run:
            code = cli.main(["--config", str(config_file), "transform"])

        assert code == 0
        assert capsys.readouterr().out == "Lines:3\tErrors:1\n"
        run.assert_called_once()
        db_config = mock_connect.call_args.args[0]
        assert db_config.host == "db.test"

    def test_disperse_summary_includes_ignored(self, config_file, mock_connect, fake_db, capsys):
        fake_db.tables = {
            "company": [{"id": VALID_ID, "name": "Acme"}],
            "cargo": [
                {
                    "id": "t1", "company_name": "Acme", "company_id": "?", "amount": 1.0,
                    "status": "paid", "created_at": None, "updated_at": None,
                },
                {
                    "id": "t2", "company_name": "Globex", "company_id": "?", "amount": 1.0,
                    "status": "paid", "created_at": None, "updated_at": None,
                },
            ],
        }

        code = cli.main(["--config", str(config_file), "disperse"])

        assert code == 0
        assert capsys.readouterr().out == "Lines:1\tErrors:0\tIgnored:1\n"

    def test_identifier_policy_flag(self, config_file, mock_connect):
        with patch("pipeline.cli.run_disperse", return_value=OutcomeCounters()) as run:
            cli.main(["--config", str(config_file), "disperse", "--identifier-policy", "exact"])

        assert run.call_args.kwargs["policy"] is IdentifierPolicy.EXACT

    def test_load_passes_options(self, config_file, mock_connect, fake_db):
        with patch("pipeline.cli.run_load", return_value=OutcomeCounters()) as run:
            cli.main(["--config", str(config_file), "load", "-f", "in.csv", "-s", "|", "--header"])

        run.assert_called_once_with(
            fake_db, "in.csv", separator="|", header=True, date_format="%Y-%m-%d", verbose=False,
        )

    def test_fatal_error_exit_code(self, config_file, mock_connect, capsys):
        with patch("pipeline.cli.run_disperse", side_effect=ReferenceTableError("company missing")):
            code = cli.main(["--config", str(config_file), "disperse"])

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_connection_failure(self, config_file):
        with patch("pipeline.cli.connect", side_effect=DatabaseConnectionError("refused")):
            assert cli.main(["--config", str(config_file), "transform"]) == 1

    def test_bad_separator(self, config_file, mock_connect):
        assert cli.main(["--config", str(config_file), "load", "-f", "x.csv", "-s", "::"]) == 2
        mock_connect.assert_not_called()

    def test_missing_config(self, tmp_path, mock_connect):
        assert cli.main(["--config", str(tmp_path / "absent.yaml"), "transform"]) == 2
