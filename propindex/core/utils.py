import json
import re
from typing import Any

# Outward code may end in a letter (SW1A, EC1A) as in central London districts
UK_POSTCODE = re.compile(r"^[A-Z]{1,2}\d{1,2}[A-Z]?\s?\d[A-Z]{2}$", re.IGNORECASE | re.ASCII)

def normalize_postcode(postcode: str) -> str:
    """
    Form used for cache keys and the upstream call:
    - drop all whitespace
    - uppercase
    """
    return re.sub(r"\s+", "", postcode).upper()

def canonical_key(fields: dict[str, Any], prefix: str = "sales") -> str:
    """Field-order-stable serialization so equal requests share a cache slot."""
    return f"{prefix}:" + json.dumps(fields, sort_keys=True, separators=(",", ":"))

def fnv1a_32(s: str) -> int:
    """Deterministic, fast hash for seed generation."""
    h = 0x811c9dc5
    for c in s.encode("utf-8"):
        h ^= c
        h = (h * 0x01000193) & 0xFFFFFFFF
    return h

def seeded_rand(seed: int, n: int = 1) -> list[float]:
    """
    Stateless pseudo-random generator (Mulberry32-like) so
    same seed → same outputs without storing PRNG state.
    """
    out = []
    t = (seed + 0x6D2B79F5) & 0xFFFFFFFF
    for _ in range(n):
        t = (t ^ (t >> 15)) * (t | 1) & 0xFFFFFFFF
        t ^= t + ((t ^ (t >> 7)) * (t | 61) & 0xFFFFFFFF)
        r = ((t ^ (t >> 14)) & 0xFFFFFFFF) / 4294967296.0
        out.append(r)
    return out
