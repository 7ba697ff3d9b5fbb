"""Typed models for GitHub repository listings."""

from __future__ import annotations

import msgspec

from cgmirror.common.time import latest_timestamp


class RemoteRepository(msgspec.Struct, frozen=True, kw_only=True):
    """A repository as reported by ``GET /users/{account}/repos``.

    Only the fields needed for mirroring are decoded; everything else in the
    GitHub payload is ignored.
    """

    id: int
    name: str
    description: str | None = None
    fork: bool = False
    clone_url: str
    default_branch: str = "master"
    size: int = 0
    updated_at: str
    pushed_at: str | None = None

    @property
    def effective_updated_at(self) -> str:
        """Return the later of the update and push times."""
        return latest_timestamp(self.updated_at, self.pushed_at)

    @property
    def description_text(self) -> str:
        """Return the description, or an empty string when unset."""
        return self.description or ""


_PAGE_DECODER = msgspec.json.Decoder(list[RemoteRepository])


def decode_repository_page(payload: bytes) -> list[RemoteRepository]:
    """Decode one page of the repository listing.

    Raises
    ------
    msgspec.ValidationError
        If an entry is missing a required field or has the wrong type.
    msgspec.DecodeError
        If the payload is not JSON.

    """
    return _PAGE_DECODER.decode(payload)
