from __future__ import annotations


class GhashError(Exception):
    pass


class RepositoryAccessError(GhashError):
    """
    The object store could not be located or read.
    """


class NotFoundError(GhashError, LookupError):
    def __init__(self, target: str) -> None:
        super().__init__(f"identifier '{target}' not found")
        self.target = target


class UsageError(GhashError, ValueError):
    """
    Bad input from the command line or environment.
    """
