"""cgmirror: keep bare git mirrors of a GitHub account in sync for cgit."""

from __future__ import annotations

__version__ = "0.1.0"
