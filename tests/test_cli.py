"""Tests for the score-library command line."""

from pathlib import Path

import pytest
from loguru import logger

from score_library import cli
from score_library.context import LibraryContext
from score_library.core.config import Config, LibraryConfig, LoggingConfig
from score_library.domain.library import sqlite_repository


@pytest.fixture
def config(tmp_path, monkeypatch):
    cfg = Config(
        library=LibraryConfig(data_dir=str(tmp_path / "library")),
        logging=LoggingConfig(log_file=str(tmp_path / "logs" / "cli.log")),
    )
    monkeypatch.setattr(cli, "load_config", lambda: cfg)
    monkeypatch.setattr(cli, "ensure_directories", lambda config: None)
    yield cfg
    logger.remove()


def run_cli(*argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(list(argv))
    return exc_info.value.code


def open_local_repo(config):
    return sqlite_repository(
        Path(config.library.data_dir) / config.library.database_file
    ).open()


class TestLocalCommands:
    """Local library commands."""

    def test_no_subcommand_prints_help(self, config, capsys) -> None:
        assert run_cli() == 0
        assert "usage: score-library" in capsys.readouterr().out

    def test_init_without_remote(self, config, capsys) -> None:
        assert run_cli("init") == 0

        out = capsys.readouterr().out
        assert "Local library ready" in out
        assert "Remote catalog not configured" in out

    def test_add_and_list(self, config, capsys) -> None:
        assert run_cli("add-composer", "Bach", "--period", "Baroque") == 0
        composer = open_local_repo(config).list_composers()[0]

        assert run_cli("add-work", composer.id, "Mass in B minor", "--year", "1749") == 0
        assert run_cli("add-recording", composer.id, "Goldberg", "--performer", "Gould") == 0
        assert run_cli("composers") == 0

        out = capsys.readouterr().out
        assert "Added composer Bach" in out
        assert "Local composers" in out
        listed = open_local_repo(config).list_composers()[0]
        assert (listed.sheet_music_count, listed.recording_count) == (1, 1)

    def test_add_work_with_file(self, config, tmp_path) -> None:
        score = tmp_path / "mass.pdf"
        score.write_bytes(b"%PDF")
        run_cli("add-composer", "Bach")
        repo = open_local_repo(config)
        composer = repo.list_composers()[0]

        assert run_cli("add-work", composer.id, "Mass", "--file", str(score)) == 0

        work = repo.list_works(composer.id)[0]
        assert work.file_url == f"SML/sheets/{work.id}.pdf"

    def test_attach_and_usage(self, config, tmp_path, capsys) -> None:
        image = tmp_path / "bach.png"
        image.write_bytes(b"png" * 100)
        run_cli("add-composer", "Bach")
        composer = open_local_repo(config).list_composers()[0]

        assert run_cli("attach", "composer", composer.id, str(image)) == 0
        assert run_cli("usage") == 0

        out = capsys.readouterr().out
        assert "Attached" in out
        assert "avatar" in out
        assert "300 B" in out

    def test_show_missing_composer(self, config, capsys) -> None:
        assert run_cli("show", "nope") == 1
        assert "Composer not found: nope" in capsys.readouterr().out

    def test_attach_missing_file(self, config, capsys) -> None:
        run_cli("add-composer", "Bach")
        composer = open_local_repo(config).list_composers()[0]

        assert run_cli("attach", "composer", composer.id, "/no/such/file.png") == 1
        assert "File not found" in capsys.readouterr().out

    def test_add_composer_with_missing_image_creates_nothing(self, config, capsys) -> None:
        assert run_cli("add-composer", "Bach", "--image", "/no/such/bach.png") == 1

        assert "File not found: /no/such/bach.png" in capsys.readouterr().out
        assert open_local_repo(config).list_composers() == []

    def test_add_work_and_recording_with_missing_file_create_nothing(self, config) -> None:
        run_cli("add-composer", "Bach")
        composer = open_local_repo(config).list_composers()[0]

        assert run_cli("add-work", composer.id, "Mass", "--file", "/no/such/mass.pdf") == 1
        assert (
            run_cli("add-recording", composer.id, "Mass", "--file", "/no/such/mass.mp3")
            == 1
        )

        repo = open_local_repo(config)
        assert repo.list_works(composer.id) == []
        assert repo.list_recordings(composer.id) == []

    def test_delete_composer(self, config) -> None:
        run_cli("add-composer", "Bach")
        composer = open_local_repo(config).list_composers()[0]

        assert run_cli("delete-composer", composer.id) == 0

        assert open_local_repo(config).list_composers() == []


class TestRemoteCommands:
    """push/pull/remote with in-memory remote stores."""

    @pytest.fixture
    def context(self, config, local_repo, local_assets, remote_repo, remote_assets, monkeypatch):
        ctx = LibraryContext(
            config=config,
            local_repo=local_repo,
            local_assets=local_assets,
            remote_repo=remote_repo,
            remote_assets=remote_assets,
        )
        monkeypatch.setattr(LibraryContext, "create", classmethod(lambda cls, cfg: ctx))
        return ctx

    def test_push_without_remote(self, config, capsys) -> None:
        run_cli("add-composer", "Bach")
        composer = open_local_repo(config).list_composers()[0]

        assert run_cli("push", composer.id) == 1
        assert "Remote store is not configured" in capsys.readouterr().out

    def test_push_then_pull(self, context, capsys) -> None:
        composer = context.local_repo.create_composer("Bach")
        context.local_repo.create_work(composer.id, "Mass")

        assert run_cli("push", composer.id) == 0

        context.remote_repo.open()
        remote = context.remote_repo.list_composers()[0]
        assert (remote.name, remote.sheet_music_count) == ("Bach", 1)

        assert run_cli("remote", "list") == 0
        assert run_cli("remote", "show", remote.id) == 0
        assert run_cli("pull", remote.id) == 0

        context.local_repo.open()
        names = sorted(c.name for c in context.local_repo.list_composers())
        assert names == ["Bach", "Bach (copy)"]
        out = capsys.readouterr().out
        assert "Remote composers" in out
        assert "Done: pull" in out

    def test_pull_unknown(self, context, capsys) -> None:
        assert run_cli("pull", "nope") == 1
        assert "Could not fetch remote composer nope" in capsys.readouterr().out
