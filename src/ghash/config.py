from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

from .errors import UsageError
from .repo import GitRepo
from .resolver import MIN_LENGTH

ENV_MIN_LENGTH = "GHASH_MIN_LENGTH"
ENV_DIR = "GHASH_DIR"


def _parse_min_length(raw: str, origin: str) -> int:
    try:
        n = int(raw.strip())
    except ValueError:
        raise UsageError(f"{origin}: expected an integer, got {raw!r}") from None
    if n < 1:
        raise UsageError(f"{origin}: must be at least 1, got {n}")
    return n


@dataclass(frozen=True)
class Settings:
    repo_path: Path
    min_length: Optional[int] = None
    verbose: bool = False

    def effective_min_length(self, repo: Optional[GitRepo] = None) -> int:
        """
        Explicit setting first, then the repository's core.abbrev when it
        is a number, then the default floor. core.abbrev below the floor
        is raised to it.
        """
        if self.min_length is not None:
            return self.min_length
        if repo is not None:
            abbrev = repo.config_value("core", "abbrev")
            if abbrev and abbrev.strip().isdecimal():
                n = int(abbrev.strip())
                if n < MIN_LENGTH:
                    logger.warning(f"core.abbrev={n} is below {MIN_LENGTH}, using {MIN_LENGTH}")
                    return MIN_LENGTH
                logger.debug(f"using core.abbrev={n}")
                return n
        return MIN_LENGTH


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    *,
    repo_path: Optional[Path] = None,
    min_length: Optional[int] = None,
    verbose: bool = False,
) -> Settings:
    env = os.environ if environ is None else environ

    if min_length is None and env.get(ENV_MIN_LENGTH, "").strip():
        min_length = _parse_min_length(env[ENV_MIN_LENGTH], ENV_MIN_LENGTH)
    elif min_length is not None:
        min_length = _parse_min_length(str(min_length), "--min-length")

    if repo_path is None:
        raw_dir = env.get(ENV_DIR, "").strip()
        repo_path = Path(raw_dir) if raw_dir else Path.cwd()

    return Settings(repo_path=repo_path, min_length=min_length, verbose=verbose)
