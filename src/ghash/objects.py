from __future__ import annotations

import hashlib
import struct
import zlib
from pathlib import Path
from typing import Iterator, List

from loguru import logger

from .errors import RepositoryAccessError

HEX_DIGITS = frozenset("0123456789abcdef")

PACK_IDX_MAGIC = b"\377tOc"
_FANOUT_ENTRIES = 256


def is_hex(s: str) -> bool:
    return bool(s) and all(c in HEX_DIGITS for c in s)


def hash_hex(data: bytes, *, hash_len: int = 40) -> str:
    algo = hashlib.sha256 if hash_len == 64 else hashlib.sha1
    return algo(data).hexdigest()


def fanout_path(objects_dir: Path, oid: str) -> Path:
    return objects_dir / oid[:2] / oid[2:]


def store_loose_object(objects_dir: Path, kind: str, data: bytes, *, hash_len: int = 40) -> str:
    """
    Stores a loose object the way git does: zlib("<kind> <size>\\0<data>"),
    addressed by the hash of the uncompressed bytes.
    Returns oid.
    """
    raw = f"{kind} {len(data)}".encode("ascii") + b"\0" + data
    oid = hash_hex(raw, hash_len=hash_len)
    path = fanout_path(objects_dir, oid)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.write_bytes(zlib.compress(raw))
    return oid


def iter_loose_ids(objects_dir: Path, *, hash_len: int = 40) -> Iterator[str]:
    if not objects_dir.is_dir():
        return
    try:
        for sub in objects_dir.iterdir():
            # skip info/, pack/ and anything else that isn't a fanout dir
            if len(sub.name) != 2 or not is_hex(sub.name) or not sub.is_dir():
                continue
            for p in sub.iterdir():
                name = p.name
                if len(name) == hash_len - 2 and is_hex(name) and p.is_file():
                    yield sub.name + name
    except OSError as e:
        raise RepositoryAccessError(f"Cannot read objects in {objects_dir}: {e}") from e


def parse_pack_index(raw: bytes, *, hash_len: int = 40, source: str = "<idx>") -> List[str]:
    """
    Object names listed in a pack .idx file.

    v2: magic, version, 256 fanout words, then the sorted names.
    v1: 256 fanout words, then (4-byte offset, name) records.
    """
    name_size = hash_len // 2
    fanout_size = 4 * _FANOUT_ENTRIES

    if raw[:4] == PACK_IDX_MAGIC:
        if len(raw) < 8:
            raise RepositoryAccessError(f"Truncated pack index: {source}")
        (version,) = struct.unpack(">I", raw[4:8])
        if version != 2:
            raise RepositoryAccessError(f"Unsupported pack index version {version}: {source}")
        base = 8
        stride = name_size
        skip = 0
    else:
        base = 0
        stride = 4 + name_size
        skip = 4

    if len(raw) < base + fanout_size:
        raise RepositoryAccessError(f"Truncated pack index: {source}")
    (count,) = struct.unpack(">I", raw[base + fanout_size - 4 : base + fanout_size])

    start = base + fanout_size
    end = start + count * stride
    if len(raw) < end:
        raise RepositoryAccessError(f"Truncated pack index: {source} ({count} objects)")

    names = []
    for off in range(start, end, stride):
        names.append(raw[off + skip : off + skip + name_size].hex())
    return names


def iter_packed_ids(objects_dir: Path, *, hash_len: int = 40) -> Iterator[str]:
    pack_dir = objects_dir / "pack"
    if not pack_dir.is_dir():
        return
    try:
        idx_files = sorted(pack_dir.glob("*.idx"))
    except OSError as e:
        raise RepositoryAccessError(f"Cannot list packs in {pack_dir}: {e}") from e

    for idx in idx_files:
        try:
            raw = idx.read_bytes()
        except OSError as e:
            raise RepositoryAccessError(f"Cannot read pack index {idx}: {e}") from e
        names = parse_pack_index(raw, hash_len=hash_len, source=str(idx))
        logger.debug(f"{idx.name}: {len(names)} objects")
        yield from names


def read_alternates(objects_dir: Path) -> List[Path]:
    path = objects_dir / "info" / "alternates"
    if not path.exists():
        return []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise RepositoryAccessError(f"Cannot read {path}: {e}") from e

    out: List[Path] = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        alt = Path(line)
        if not alt.is_absolute():
            alt = objects_dir / alt
        out.append(alt.resolve())
    return out


def iter_object_ids(objects_dir: Path, *, hash_len: int = 40) -> Iterator[str]:
    """
    Every object id reachable from objects_dir: loose, packed, and those of
    any alternates (each directory visited once).
    """
    seen = set()
    stack = [objects_dir.resolve()]
    while stack:
        d = stack.pop()
        if d in seen:
            continue
        seen.add(d)
        yield from iter_loose_ids(d, hash_len=hash_len)
        yield from iter_packed_ids(d, hash_len=hash_len)
        stack.extend(read_alternates(d))
