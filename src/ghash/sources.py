from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Protocol, Set

from loguru import logger

from .repo import GitRepo


class IdentifierSource(Protocol):
    def list_all(self) -> Set[str]:
        """
        Every identifier currently known to the backing store, in no
        particular order. Raises RepositoryAccessError when the store
        cannot be read.
        """
        ...


@dataclass(frozen=True)
class MemorySource:
    ids: FrozenSet[str] = field(default_factory=frozenset)

    @staticmethod
    def of(ids: Iterable[str]) -> "MemorySource":
        return MemorySource(ids=frozenset(ids))

    def list_all(self) -> Set[str]:
        return set(self.ids)


@dataclass
class RepositorySource:
    repo: GitRepo

    def list_all(self) -> Set[str]:
        ids = self.repo.object_ids()
        if not ids:
            logger.debug(f"{self.repo.git_dir}: object store is empty")
        return ids
