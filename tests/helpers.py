from __future__ import annotations

import hashlib
import struct
from pathlib import Path
from typing import List

from ghash.objects import PACK_IDX_MAGIC
from ghash.repo import GitRepo


def _fanout(names: List[bytes]) -> bytes:
    counts = [0] * 256
    for n in names:
        counts[n[0]] += 1
    out = b""
    total = 0
    for c in counts:
        total += c
        out += struct.pack(">I", total)
    return out


def make_idx_v2(hex_names: List[str]) -> bytes:
    names = sorted(bytes.fromhex(h) for h in hex_names)
    body = PACK_IDX_MAGIC + struct.pack(">I", 2) + _fanout(names)
    body += b"".join(names)
    body += b"\0\0\0\0" * len(names)  # crc32
    body += b"".join(struct.pack(">I", 12 + i) for i in range(len(names)))
    width = len(names[0]) if names else 20
    return body + b"\0" * (2 * width)


def make_idx_v1(hex_names: List[str]) -> bytes:
    names = sorted(bytes.fromhex(h) for h in hex_names)
    body = _fanout(names)
    body += b"".join(struct.pack(">I", 12 + i) + n for i, n in enumerate(names))
    width = len(names[0]) if names else 20
    return body + b"\0" * (2 * width)


def fake_ids(count: int, *, seed: str = "ghash") -> List[str]:
    return [hashlib.sha1(f"{seed}-{i}".encode()).hexdigest() for i in range(count)]


def write_pack(repo: GitRepo, name: str, data: bytes) -> Path:
    path = repo.objects_dir / "pack" / f"pack-{name}.idx"
    path.write_bytes(data)
    return path
