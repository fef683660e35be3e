"""Embedding vector validation and BLOB codec.

Vectors are stored as little-endian float32 bytes and bound to SQL
statements as parameters.  ``cosine_distance`` is registered on the store
connection as a deterministic SQL function.
"""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np


class InvalidEmbeddingError(ValueError):
    """Raised when a vector has the wrong dimension or non-finite components."""


def validate_vector(vector: object, dimension: int) -> list[float] | None:
    """Return ``vector`` as a list of floats, or None if it is unusable.

    A usable vector is a list/tuple of exactly ``dimension`` finite numbers.
    """
    if not isinstance(vector, (list, tuple)) or len(vector) != dimension:
        return None
    values: list[float] = []
    for component in vector:
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            return None
        if not math.isfinite(component):
            return None
        values.append(float(component))
    return values


def encode_vector(vector: Sequence[float], dimension: int) -> bytes:
    """Encode ``vector`` to float32 bytes.

    Raises
    ------
    InvalidEmbeddingError
        If the vector fails ``validate_vector``.
    """
    values = validate_vector(list(vector), dimension)
    if values is None:
        raise InvalidEmbeddingError(
            f"Invalid embedding: expected {dimension} finite numbers, got {len(vector)}"
        )
    return np.asarray(values, dtype="<f4").tobytes()


def decode_vector(blob: bytes) -> np.ndarray:
    """Decode float32 bytes produced by ``encode_vector``."""
    return np.frombuffer(blob, dtype="<f4")


def cosine_distance(left: bytes | None, right: bytes | None) -> float | None:
    """SQL function: ``1 - cosine_similarity`` of two encoded vectors.

    Returns NULL for missing, mismatched or zero-norm inputs.
    """
    if left is None or right is None:
        return None
    a = decode_vector(left)
    b = decode_vector(right)
    if a.shape != b.shape:
        return None
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return None
    return 1.0 - float(np.dot(a, b)) / norm


__all__ = [
    "InvalidEmbeddingError",
    "cosine_distance",
    "decode_vector",
    "encode_vector",
    "validate_vector",
]
