"""Unit tests for the cgmirror command-line entry point."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

from cgmirror import __version__, cli
from cgmirror.github import GitHubAPIError, GitHubRepositoryClient
from cgmirror.sync import (
    DEFAULT_CONCURRENCY,
    RepositorySyncError,
    RunReport,
    SyncOutcome,
    SyncRunError,
)
from tests.helpers.fakes import FakeGitRunner, make_repo

if typ.TYPE_CHECKING:
    from cgmirror.github import RemoteRepository


def _parse(*argv: str) -> cli.SyncConfig:
    return cli.parse_config(cli._build_parser().parse_args(list(argv)))


class _StaticLister:
    def __init__(self, repos: list[RemoteRepository]) -> None:
        self.repos = repos
        self.accounts: list[str] = []

    async def fetch_all(self, account: str) -> list[RemoteRepository]:
        self.accounts.append(account)
        return self.repos


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli, "configure_logging", lambda level, **_: (str(level).upper(), False)
    )


def test_parse_config_defaults() -> None:
    """Only the database, account, and mirror root are required."""
    config = _parse("-d", "catalog.db", "octo", "/srv/git")

    assert config == cli.SyncConfig(
        account="octo",
        mirror_root=Path("/srv/git"),
        database=Path("catalog.db"),
    )
    assert config.concurrency == DEFAULT_CONCURRENCY
    assert config.database_url == "sqlite+aiosqlite:///catalog.db"


def test_parse_config_reads_options() -> None:
    """Optional flags populate the run configuration."""
    config = _parse(
        "--database",
        "catalog.db",
        "--cgitrc",
        "/etc/cgitrc.base",
        "--skip-larger-than",
        "1.5 GiB",
        "--concurrency",
        "3",
        "octo",
        "/srv/git",
    )

    assert config.cgitrc_template == Path("/etc/cgitrc.base")
    assert config.max_size_bytes == int(1.5 * 1024**3)
    assert config.concurrency == 3


@pytest.mark.parametrize(
    "argv",
    [
        ["octo", "/srv/git"],
        ["-d", "catalog.db", "octo"],
        ["-d", "catalog.db", "--skip-larger-than", "huge", "octo", "/srv/git"],
        ["-d", "catalog.db", "--concurrency", "0", "octo", "/srv/git"],
    ],
)
def test_usage_errors_exit_64(argv: list[str]) -> None:
    """Invalid command lines exit with EX_USAGE."""
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == cli.EX_USAGE


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    """-V prints the package version."""
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-V"])

    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_listing_failure_exits_70(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A failed repository listing aborts the run before any mirroring."""

    async def _fail(self: GitHubRepositoryClient, account: str) -> list[object]:
        raise GitHubAPIError.http_error(503, f"/users/{account}/repos")

    monkeypatch.setattr(GitHubRepositoryClient, "fetch_all", _fail)
    database = tmp_path / "catalog.db"

    code = cli.main(["-d", str(database), "octo", str(tmp_path / "mirrors")])

    assert code == cli.EX_SOFTWARE
    assert "unable to list repositories" in capsys.readouterr().err
    assert not database.exists()


def test_successful_run_exits_0(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """An account with nothing to mirror succeeds."""

    async def _empty(self: GitHubRepositoryClient, account: str) -> list[object]:
        return []

    monkeypatch.setattr(GitHubRepositoryClient, "fetch_all", _empty)

    code = cli.main(["-d", str(tmp_path / "catalog.db"), "octo", str(tmp_path)])

    assert code == cli.EX_OK


def test_failed_repositories_exit_70(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Every per-repository error is printed and the exit code is 70."""
    errors = [
        RepositorySyncError("reef", RuntimeError("x")),
        RepositorySyncError("kelp", RuntimeError("y")),
    ]

    async def _run_sync(config: cli.SyncConfig, lister: object) -> RunReport:
        raise SyncRunError(errors)

    monkeypatch.setattr(cli, "run_sync", _run_sync)

    code = cli.main(["-d", str(tmp_path / "catalog.db"), "octo", str(tmp_path)])

    assert code == cli.EX_SOFTWARE
    stderr = capsys.readouterr().err
    assert "error: reef: x" in stderr
    assert "error: kelp: y" in stderr


@pytest.mark.asyncio
async def test_run_sync_initialises_catalog(tmp_path: Path) -> None:
    """run_sync creates the catalog schema even for an empty listing."""
    config = cli.SyncConfig(
        account="octo", mirror_root=tmp_path, database=tmp_path / "catalog.db"
    )
    lister = _StaticLister([])

    report = await cli.run_sync(config, lister)

    assert lister.accounts == ["octo"]
    assert report.results == []
    assert set(report.counts.values()) == {0}
    assert report.counts[SyncOutcome.CREATED] == 0
    engine = create_engine(f"sqlite:///{config.database}")
    try:
        assert "repositories" in inspect(engine).get_table_names()
    finally:
        engine.dispose()


@pytest.mark.asyncio
async def test_run_sync_raises_with_every_failure(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Failed repositories surface together after the others are mirrored."""
    git = FakeGitRunner(fail_on={("fetch", "reef.git"), ("fetch", "tide.git")})
    monkeypatch.setattr(cli, "GitCommandRunner", lambda: git)
    config = cli.SyncConfig(
        account="octo", mirror_root=tmp_path, database=tmp_path / "catalog.db"
    )
    lister = _StaticLister(
        [make_repo(1, "reef"), make_repo(2, "kelp"), make_repo(3, "tide")]
    )

    with pytest.raises(SyncRunError) as excinfo:
        await cli.run_sync(config, lister)

    assert sorted(error.name for error in excinfo.value.errors) == ["reef", "tide"]
    assert (tmp_path / "kelp.git" / "HEAD").is_file()
