"""Repository synchronisation engine.

The engine classifies each remote repository as new, changed, unchanged, or
skipped, updates its local mirror and catalog record accordingly, and does
so for a whole account concurrently.

Usage
-----
Synchronise every repository of an account::

    from cgmirror.sync import Orchestrator, Synchronizer, SynchronizerConfig

    synchronizer = Synchronizer(
        catalog,
        MirrorOperator(GitCommandRunner()),
        MetadataProjector(),
        SynchronizerConfig(mirror_root=Path("/srv/git")),
    )
    report = await Orchestrator(synchronizer).run("octocat", repos)
    for error in report.errors:
        print(error)

"""

from cgmirror.sync.errors import RepositorySyncError, SyncError, SyncRunError
from cgmirror.sync.models import RunReport, SkipReason, SyncOutcome, SyncResult
from cgmirror.sync.observability import ErrorCategory, SyncEventLogger, categorize_error
from cgmirror.sync.orchestrator import DEFAULT_CONCURRENCY, Orchestrator
from cgmirror.sync.synchronizer import Synchronizer, SynchronizerConfig, is_oversize

__all__ = [
    "DEFAULT_CONCURRENCY",
    "ErrorCategory",
    "Orchestrator",
    "RepositorySyncError",
    "RunReport",
    "SkipReason",
    "SyncError",
    "SyncEventLogger",
    "SyncOutcome",
    "SyncResult",
    "SyncRunError",
    "Synchronizer",
    "SynchronizerConfig",
    "categorize_error",
    "is_oversize",
]
