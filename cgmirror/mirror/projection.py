"""Project remote metadata onto files cgit reads from a mirror.

cgit shows a repository's description from the ``description`` file and
orders repositories by "idle" time. That time comes from the modification
time of the default branch ref, or of ``packed-refs`` once refs are packed,
or, when neither is present, from the contents of the agefile
``info/web/last-modified``.
"""

from __future__ import annotations

import os
import typing as typ

from cgmirror.common.time import parse_rfc3339
from cgmirror.logging import get_logger, log_debug, log_warning

from .errors import ProjectionError

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

DESCRIPTION_FILE = "description"
PACKED_REFS_FILE = "packed-refs"
AGE_FILE = "info/web/last-modified"


def _read_description(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").rstrip("\n")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise ProjectionError(path, str(exc)) from exc


def _touch(path: Path, timestamp: float) -> bool:
    """Set atime and mtime on ``path``; return False when it does not exist."""
    try:
        os.utime(path, (timestamp, timestamp))
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise ProjectionError(path, str(exc)) from exc
    return True


class MetadataProjector:
    """Write description and age metadata into a bare mirror."""

    def reconcile_description(self, mirror: Path, description: str | None) -> bool:
        """Rewrite the description file when it differs from ``description``.

        A missing or blank description empties the file. Returns True when
        the file was written.

        Raises
        ------
        ProjectionError
            If the file cannot be read or written.

        """
        path = mirror / DESCRIPTION_FILE
        wanted = (description or "").strip()
        if _read_description(path) == wanted:
            return False

        try:
            path.write_text(f"{wanted}\n" if wanted else "", encoding="utf-8")
        except OSError as exc:
            raise ProjectionError(path, str(exc)) from exc
        log_debug(logger, "Updated description for %s", mirror)
        return True

    def project_timestamp(
        self, mirror: Path, default_branch: str, updated_at: str
    ) -> Path:
        """Make ``updated_at`` the age cgit reports for ``mirror``.

        Tries, in order, the default branch ref file, ``packed-refs``, and the
        agefile. A later target is used only when the earlier one does not
        exist; any other filesystem error is raised. cgit prefers the agefile
        over ref times, so a stale agefile is removed once a ref carries the
        timestamp. Returns the path that now carries the timestamp.

        An ``updated_at`` that is not RFC 3339 cannot be set as a file time.
        It goes to the agefile verbatim only when the mirror has no refs yet;
        otherwise file times are left alone and the agefile is removed.

        Raises
        ------
        ProjectionError
            If a target exists but cannot be updated, or the agefile cannot be
            written or removed.

        """
        targets = (
            mirror / "refs" / "heads" / default_branch,
            mirror / PACKED_REFS_FILE,
        )
        parsed = parse_rfc3339(updated_at)
        if parsed is None:
            existing = next((target for target in targets if target.exists()), None)
            if existing is None:
                return self._write_age_file(mirror, updated_at)
            log_warning(
                logger, "Ignoring unparsable timestamp %r for %s", updated_at, mirror
            )
            self._remove_age_file(mirror)
            return existing

        timestamp = parsed.timestamp()
        for target in targets:
            if _touch(target, timestamp):
                self._remove_age_file(mirror)
                return target

        return self._write_age_file(mirror, updated_at)

    def _remove_age_file(self, mirror: Path) -> None:
        path = mirror / AGE_FILE
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise ProjectionError(path, str(exc)) from exc

    def _write_age_file(self, mirror: Path, updated_at: str) -> Path:
        path = mirror / AGE_FILE
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(updated_at, encoding="utf-8")
        except OSError as exc:
            raise ProjectionError(path, str(exc)) from exc
        return path
