"""Data transfer objects for the repository catalog."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    from cgmirror.github.models import RemoteRepository


@dataclasses.dataclass(slots=True, frozen=True)
class CatalogRecord:
    """What the last run saw of one remote repository.

    ``default_branch`` is optional because catalogs written before branch
    tracking have no value for it; such records always reconcile the branch
    on their next refresh.
    """

    id: int
    name: str
    description: str | None
    default_branch: str | None
    updated_at: str

    @classmethod
    def from_remote(cls, repo: RemoteRepository) -> CatalogRecord:
        """Build the record to store after mirroring ``repo``."""
        return cls(
            id=repo.id,
            name=repo.name,
            description=repo.description,
            default_branch=repo.default_branch,
            updated_at=repo.effective_updated_at,
        )
