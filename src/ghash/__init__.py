from __future__ import annotations

from .errors import GhashError, NotFoundError, RepositoryAccessError, UsageError
from .resolver import MIN_LENGTH, common_prefix_len, resolve, resolve_from, shorten_all
from .sources import IdentifierSource, MemorySource, RepositorySource

__version__ = "0.1.0"

__all__ = [
    "GhashError",
    "IdentifierSource",
    "MIN_LENGTH",
    "MemorySource",
    "NotFoundError",
    "RepositoryAccessError",
    "RepositorySource",
    "common_prefix_len",
    "resolve",
    "resolve_from",
    "shorten_all",
    "UsageError",
]
