"""Command-line entry point: mirror a GitHub account for cgit."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import os
import sys
import typing as typ
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from cgmirror import __version__
from cgmirror.catalog import Catalog, init_catalog_storage
from cgmirror.common.size import SizeParseError, parse_size
from cgmirror.github import FetchError, GitHubClientConfig, GitHubRepositoryClient
from cgmirror.logging import (
    configure_logging,
    get_logger,
    log_exception,
    log_info,
    log_warning,
)
from cgmirror.mirror import GitCommandRunner, MetadataProjector, MirrorOperator
from cgmirror.sync import (
    DEFAULT_CONCURRENCY,
    Orchestrator,
    SyncRunError,
    Synchronizer,
    SynchronizerConfig,
)

if typ.TYPE_CHECKING:
    from cgmirror.github import RepositoryLister
    from cgmirror.sync import RunReport

logger = get_logger(__name__)

# sysexits(3) codes
EX_OK = 0
EX_USAGE = 64
EX_SOFTWARE = 70


@dataclasses.dataclass(frozen=True, slots=True)
class SyncConfig:
    """Settings for one synchronisation run, as given on the command line."""

    account: str
    mirror_root: Path
    database: Path
    cgitrc_template: Path | None = None
    max_size_bytes: int | None = None
    concurrency: int = DEFAULT_CONCURRENCY

    @property
    def database_url(self) -> str:
        """Return the SQLAlchemy URL for the catalog database."""
        return f"sqlite+aiosqlite:///{self.database}"


class _UsageError(Exception):
    """Raised for invalid command-line input."""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with ``EX_USAGE`` on bad input."""

    def error(self, message: str) -> typ.NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="cgmirror",
        description=__doc__,
        usage="%(prog)s [options] -d DATABASE ACCOUNT MIRROR_ROOT",
    )
    parser.add_argument("account", help="GitHub user whose repositories to mirror")
    parser.add_argument("mirror_root", type=Path, help="directory holding the mirrors")
    parser.add_argument(
        "-d",
        "--database",
        type=Path,
        required=True,
        help="SQLite catalog file path (created if missing)",
    )
    parser.add_argument(
        "--cgitrc",
        type=Path,
        default=None,
        help="base cgitrc file to copy into newly mirrored repositories",
    )
    parser.add_argument(
        "--skip-larger-than",
        metavar="SIZE",
        default=None,
        help="skip repositories larger than SIZE (e.g. 500M, 2GiB)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=(
            "number of repositories to synchronise at once "
            f"(default {DEFAULT_CONCURRENCY})"
        ),
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("CGMIRROR_LOG_LEVEL", "INFO"),
        help="log level (default from CGMIRROR_LOG_LEVEL, else INFO)",
    )
    parser.add_argument("-V", "--version", action="version", version=__version__)
    return parser


def parse_config(args: argparse.Namespace) -> SyncConfig:
    """Validate parsed arguments and build a :class:`SyncConfig`.

    Raises
    ------
    _UsageError
        If the size threshold or concurrency is invalid.

    """
    max_size_bytes: int | None = None
    if args.skip_larger_than is not None:
        try:
            max_size_bytes = parse_size(args.skip_larger_than)
        except SizeParseError as exc:
            msg = f"unable to parse max repository size {args.skip_larger_than!r}"
            raise _UsageError(msg) from exc

    if args.concurrency < 1:
        msg = f"--concurrency must be at least 1, got {args.concurrency}"
        raise _UsageError(msg)

    return SyncConfig(
        account=args.account,
        mirror_root=args.mirror_root,
        database=args.database,
        cgitrc_template=args.cgitrc,
        max_size_bytes=max_size_bytes,
        concurrency=args.concurrency,
    )


async def run_sync(config: SyncConfig, lister: RepositoryLister) -> RunReport:
    """Fetch the account's repositories and synchronise them.

    Raises
    ------
    FetchError
        If the repository listing fails; nothing is synchronised.
    sqlalchemy.exc.SQLAlchemyError
        If the catalog database cannot be opened or initialised.
    SyncRunError
        If any repository failed; carries every per-repository error.

    """
    repos = await lister.fetch_all(config.account)

    engine = create_async_engine(config.database_url)
    try:
        await init_catalog_storage(engine)
        catalog = Catalog(async_sessionmaker(engine, expire_on_commit=False))
        synchronizer = Synchronizer(
            catalog,
            MirrorOperator(GitCommandRunner(), cgitrc_template=config.cgitrc_template),
            MetadataProjector(),
            SynchronizerConfig(
                mirror_root=config.mirror_root,
                max_size_bytes=config.max_size_bytes,
            ),
        )
        orchestrator = Orchestrator(synchronizer, concurrency=config.concurrency)
        return await orchestrator.run_or_raise(config.account, repos)
    finally:
        await engine.dispose()


async def _main_async(config: SyncConfig) -> int:
    async with GitHubRepositoryClient(GitHubClientConfig.from_env()) as client:
        try:
            report = await run_sync(config, client)
        except FetchError as exc:
            log_exception(logger, "Unable to list repositories", exc)
            print(f"error: unable to list repositories: {exc}", file=sys.stderr)
            return EX_SOFTWARE
        except SQLAlchemyError as exc:
            log_exception(logger, "Unable to open catalog", exc)
            print(
                f"error: unable to open catalog {config.database}: {exc}",
                file=sys.stderr,
            )
            return EX_SOFTWARE
        except SyncRunError as exc:
            for error in exc.errors:
                print(f"error: {error}", file=sys.stderr)
            return EX_SOFTWARE

    log_info(logger, "Synchronised %d repositories", len(report.results))
    return EX_OK


def main(argv: list[str] | None = None) -> int:
    """Mirror every repository of a GitHub account.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 64 for usage errors, 70 when the listing
        fails or any repository fails to synchronise.

    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = parse_config(args)
    except _UsageError as exc:
        parser.error(str(exc))

    level, invalid = configure_logging(args.log_level)
    if invalid:
        log_warning(
            logger, "Invalid log level %r, falling back to %s", args.log_level, level
        )

    return asyncio.run(_main_async(config))


if __name__ == "__main__":
    raise SystemExit(main())
