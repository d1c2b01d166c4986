"""Seeded noise generators for diamond-square runs."""

from __future__ import annotations

import hashlib

import numpy as np

NOISE_KEY = "diamond-square"


def derive_seed(seed: int, key: str = NOISE_KEY) -> int:
    """Hash a user seed and a stage label into a 64-bit generator seed.

    Neighbouring user seeds (0, 1, 2, ...) end up far apart in PCG64 seed
    space.
    """

    if not key:
        raise ValueError("key must be non-empty")
    payload = f"{int(seed) & ((1 << 64) - 1)}:{key}".encode("utf-8")
    digest = hashlib.blake2b(payload, digest_size=8, person=b"dsquare-noise").digest()
    return int.from_bytes(digest, byteorder="big", signed=False)


def engine_generator(seed: int) -> np.random.Generator:
    """Generator used for the subdivision noise of a seeded run."""

    return np.random.Generator(np.random.PCG64(np.uint64(derive_seed(seed))))
