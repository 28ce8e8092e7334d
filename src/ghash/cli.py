from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from . import __version__
from .config import Settings, load_settings
from .errors import NotFoundError, RepositoryAccessError, UsageError
from .repo import GitRepo
from .resolver import resolve_from, shorten_all
from .sources import RepositorySource

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2
EXIT_FATAL = 128

STDIN_MARKER = "-"


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _read_target(arg: str) -> str:
    if arg == STDIN_MARKER:
        arg = sys.stdin.read()
    target = arg.strip()
    if not target:
        raise UsageError("empty hash")
    return target


def _open_source(settings: Settings) -> tuple[GitRepo, RepositorySource]:
    repo = GitRepo.discover(settings.repo_path)
    logger.debug(f"repository: {repo.git_dir}")
    return repo, RepositorySource(repo)


# ----------------------------
# Commands
# ----------------------------

def cmd_short(args: argparse.Namespace, settings: Settings) -> int:
    target = _read_target(args.hash)
    repo, source = _open_source(settings)
    print(resolve_from(source, target, min_length=settings.effective_min_length(repo)))
    return EXIT_OK


def cmd_all(args: argparse.Namespace, settings: Settings) -> int:
    repo, source = _open_source(settings)
    shorts = shorten_all(source.list_all(), min_length=settings.effective_min_length(repo))
    for oid in sorted(shorts):
        print(f"{shorts[oid]} {oid}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ghash",
        description="Print the shortest unambiguous prefix of a git object id",
    )
    p.add_argument(
        "hash",
        nargs="?",
        help="Full object id to shorten, or '-' to read it from stdin",
    )
    p.add_argument(
        "-C",
        dest="path",
        default=None,
        help="Run as if started in PATH (default: $GHASH_DIR or the current directory)",
    )
    p.add_argument(
        "--min-length",
        type=int,
        default=None,
        help="Never abbreviate below N characters (default: $GHASH_MIN_LENGTH, core.abbrev, or 4)",
    )
    p.add_argument(
        "--all",
        action="store_true",
        help="Print '<short> <full>' for every object in the repository",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.all == bool(args.hash):
        parser.error("give exactly one of HASH or --all")

    try:
        settings = load_settings(
            repo_path=Path(args.path) if args.path else None,
            min_length=args.min_length,
            verbose=args.verbose,
        )
        if args.all:
            return cmd_all(args, settings)
        return cmd_short(args, settings)
    except NotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except RepositoryAccessError as e:
        print(f"fatal: {e}", file=sys.stderr)
        return EXIT_FATAL
    except UsageError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
