from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Set

from loguru import logger

from .errors import RepositoryAccessError
from .objects import iter_object_ids, store_loose_object

GIT_DIR = ".git"
GITDIR_PREFIX = "gitdir:"


def _is_git_dir(path: Path) -> bool:
    return (path / "HEAD").is_file() and (path / "objects").is_dir()


def _read_gitfile(path: Path) -> Path:
    """
    A `.git` file (worktrees, submodules) points at the real git dir.
    """
    try:
        text = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise RepositoryAccessError(f"Cannot read {path}: {e}") from e
    if not text.startswith(GITDIR_PREFIX):
        raise RepositoryAccessError(f"Invalid gitfile format: {path}")
    target = Path(text[len(GITDIR_PREFIX) :].strip())
    if not target.is_absolute():
        target = path.parent / target
    return target.resolve()


@dataclass
class GitRepo:
    root: Path
    git_dir: Path

    # ----------------------------
    # Paths
    # ----------------------------

    @property
    def objects_dir(self) -> Path:
        return self.git_dir / "objects"

    @property
    def config_file(self) -> Path:
        return self.git_dir / "config"

    # ----------------------------
    # Setup / discover
    # ----------------------------

    @staticmethod
    def open(git_dir: Path, root: Optional[Path] = None) -> "GitRepo":
        git_dir = git_dir.resolve()
        if not _is_git_dir(git_dir):
            raise RepositoryAccessError(f"Not a git repository: {git_dir}")
        return GitRepo(root=(root or git_dir).resolve(), git_dir=git_dir)

    @staticmethod
    def discover(start: Optional[Path] = None) -> "GitRepo":
        env_dir = os.environ.get("GIT_DIR", "").strip()
        if env_dir:
            base = (start or Path.cwd()).resolve()
            git_dir = Path(env_dir)
            if not git_dir.is_absolute():
                git_dir = base / git_dir
            return GitRepo.open(git_dir, root=base)

        cur = (start or Path.cwd()).resolve()
        if not cur.exists():
            raise RepositoryAccessError(f"No such directory: {cur}")
        for p in [cur] + list(cur.parents):
            dot_git = p / GIT_DIR
            if dot_git.is_file():
                return GitRepo.open(_read_gitfile(dot_git), root=p)
            if dot_git.is_dir():
                return GitRepo.open(dot_git, root=p)
            # bare repository
            if _is_git_dir(p):
                return GitRepo.open(p)
        raise RepositoryAccessError(f"Not a git repository (or any of the parent directories): {cur}")

    @staticmethod
    def init(root: Path, *, bare: bool = False, object_format: str = "sha1") -> "GitRepo":
        """
        Minimal on-disk layout: HEAD, config, objects/, refs/heads/.
        """
        root = root.resolve()
        git_dir = root if bare else root / GIT_DIR
        (git_dir / "objects" / "info").mkdir(parents=True, exist_ok=True)
        (git_dir / "objects" / "pack").mkdir(parents=True, exist_ok=True)
        (git_dir / "refs" / "heads").mkdir(parents=True, exist_ok=True)

        head = git_dir / "HEAD"
        if not head.exists():
            head.write_text("ref: refs/heads/main\n", encoding="utf-8")

        config = git_dir / "config"
        if not config.exists():
            version = 0 if object_format == "sha1" else 1
            lines = [
                "[core]",
                f"\trepositoryformatversion = {version}",
                f"\tbare = {str(bare).lower()}",
            ]
            if version:
                lines += ["[extensions]", f"\tobjectformat = {object_format}"]
            config.write_text("\n".join(lines) + "\n", encoding="utf-8")

        return GitRepo(root=root, git_dir=git_dir)

    # ----------------------------
    # Config
    # ----------------------------

    def read_config(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(strict=False, allow_no_value=True, interpolation=None)
        if self.config_file.exists():
            try:
                with self.config_file.open(encoding="utf-8") as f:
                    parser.read_file(f)
            except (OSError, UnicodeDecodeError, configparser.Error) as e:
                raise RepositoryAccessError(f"Cannot read {self.config_file}: {e}") from e
        return parser

    def config_value(self, section: str, key: str) -> Optional[str]:
        parser = self.read_config()
        if not parser.has_section(section):
            return None
        return parser.get(section, key, fallback=None)

    @property
    def hash_len(self) -> int:
        fmt = (self.config_value("extensions", "objectformat") or "sha1").strip().lower()
        return 64 if fmt == "sha256" else 40

    # ----------------------------
    # Objects
    # ----------------------------

    def object_ids(self) -> Set[str]:
        ids = set(iter_object_ids(self.objects_dir, hash_len=self.hash_len))
        logger.debug(f"{self.git_dir}: {len(ids)} objects")
        return ids

    def store_object(self, kind: str, data: bytes) -> str:
        return store_loose_object(self.objects_dir, kind, data, hash_len=self.hash_len)
