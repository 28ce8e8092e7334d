from __future__ import annotations

from bisect import bisect_left
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from loguru import logger

from .errors import NotFoundError

if TYPE_CHECKING:
    from .sources import IdentifierSource

# git never abbreviates below four characters
MIN_LENGTH = 4


def common_prefix_len(a: str, b: str) -> int:
    n = 0
    for ca, cb in zip(a, b):
        if ca != cb:
            break
        n += 1
    return n


def _check_min_length(min_length: int) -> None:
    if min_length < 1:
        raise ValueError(f"min_length must be at least 1, got {min_length}")


def _prefix_len(ids: List[str], idx: int, min_length: int) -> int:
    """
    Length of the shortest prefix of ids[idx] that differs from both
    sort-adjacent neighbours, floored at min_length and capped at the
    identifier's own length.
    """
    target = ids[idx]
    left: Optional[str] = ids[idx - 1] if idx > 0 else None
    right: Optional[str] = ids[idx + 1] if idx + 1 < len(ids) else None

    common_left = common_prefix_len(left, target) if left is not None else 0
    common_right = common_prefix_len(right, target) if right is not None else 0

    needed = max(max(common_left, common_right) + 1, min_length)
    return min(needed, len(target))


def resolve(identifiers: Iterable[str], target: str, *, min_length: int = MIN_LENGTH) -> str:
    """
    Shortest prefix of `target` that no other identifier shares.

    `identifiers` may be in any order; a sorted copy is taken. `target` is
    lowercased and must be an exact member, otherwise NotFoundError.
    """
    _check_min_length(min_length)
    target = target.lower()
    ids = sorted(identifiers)

    idx = bisect_left(ids, target)
    if idx == len(ids) or ids[idx] != target:
        raise NotFoundError(target)

    n = _prefix_len(ids, idx, min_length)
    logger.debug(f"resolved {target} among {len(ids)} ids -> {n} chars")
    return target[:n]


def shorten_all(identifiers: Iterable[str], *, min_length: int = MIN_LENGTH) -> Dict[str, str]:
    """
    Map every identifier to its shortest unambiguous prefix, using a
    single sort for the whole set.
    """
    _check_min_length(min_length)
    ids = sorted(identifiers)
    out: Dict[str, str] = {}
    for idx, oid in enumerate(ids):
        out[oid] = oid[: _prefix_len(ids, idx, min_length)]
    return out


def resolve_from(source: "IdentifierSource", target: str, *, min_length: int = MIN_LENGTH) -> str:
    return resolve(source.list_all(), target, min_length=min_length)
