# dagrad/core/vecops.py
"""
Elementwise arithmetic over equal-length 1-D float arrays.

Two forms per operation:
    add(a, b, out=None)  -> writes a+b into `out` (or a fresh array) and returns it
    iadd(acc, b)         -> acc += b in place, returns acc

The kernel knows nothing about graphs. Floating-point errors (x/0, 0/0, ...)
are silenced so that inf/NaN simply propagate.
"""

from __future__ import annotations
from typing import Optional

import numpy as np

from ..config import get_config
from .errors import ShapeError


def as_vector(values, dtype=None) -> np.ndarray:
    """
    Coerce a caller value (scalar, list/tuple, ndarray) into a fresh 1-D,
    contiguous array of the configured dtype.
    """
    if isinstance(values, bool) or not isinstance(values, (int, float, list, tuple, np.ndarray, np.number)):
        raise TypeError(
            f"node values must be numeric (int, float, list, tuple, ndarray), "
            f"but got {type(values)}"
        )
    if dtype is None:
        dtype = get_config().dtype
    arr = np.array(values, dtype=dtype, copy=True)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ShapeError(f"node values must be 1-D, got shape {arr.shape}")
    if arr.size == 0:
        raise ShapeError("node values must be non-empty")
    return np.ascontiguousarray(arr)


def zeros(n: int, dtype=None) -> np.ndarray:
    return np.zeros(n, dtype=dtype if dtype is not None else get_config().dtype)


def ones(n: int, dtype=None) -> np.ndarray:
    return np.ones(n, dtype=dtype if dtype is not None else get_config().dtype)


def check_same_length(a: np.ndarray, b: np.ndarray, what: str = "operands"):
    if a.shape[0] != b.shape[0]:
        raise ShapeError(f"{what} must have equal length, got {a.shape[0]} and {b.shape[0]}")


def _fresh(ufunc, a, b, out: Optional[np.ndarray]):
    check_same_length(a, b)
    with np.errstate(all="ignore"):
        if out is None:
            return ufunc(a, b)
        check_same_length(a, out, "operands and output")
        return ufunc(a, b, out=out)


def _inplace(ufunc, acc, b):
    check_same_length(acc, b)
    with np.errstate(all="ignore"):
        ufunc(acc, b, out=acc)
    return acc


def add(a, b, out=None): return _fresh(np.add, a, b, out)
def sub(a, b, out=None): return _fresh(np.subtract, a, b, out)
def mul(a, b, out=None): return _fresh(np.multiply, a, b, out)
def div(a, b, out=None): return _fresh(np.divide, a, b, out)

def iadd(acc, b): return _inplace(np.add, acc, b)
def isub(acc, b): return _inplace(np.subtract, acc, b)
def imul(acc, b): return _inplace(np.multiply, acc, b)
def idiv(acc, b): return _inplace(np.divide, acc, b)
