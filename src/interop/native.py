"""Calling native C code from Python through ctypes.

The C standard library and maths library stand in for "a second language":
symbols are looked up at runtime, given explicit argument/return types, and
numpy buffers are handed over as raw pointers without copying.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import logging
from functools import lru_cache
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


class InteropError(RuntimeError):
    """A native library or symbol could not be resolved."""


@lru_cache(maxsize=None)
def load_library(name: str) -> ctypes.CDLL:
    path = ctypes.util.find_library(name)
    if path is None:
        raise InteropError(f"Shared library {name!r} not found on this system.")
    logger.debug("Loading shared library %s from %s", name, path)
    try:
        return ctypes.CDLL(path)
    except OSError as exc:
        raise InteropError(f"Could not load shared library {name!r} ({path}): {exc}") from exc


def c_function(lib: ctypes.CDLL, symbol: str, argtypes: Sequence, restype):
    try:
        fn = getattr(lib, symbol)
    except AttributeError as exc:
        raise InteropError(f"Symbol {symbol!r} not found in {lib._name}") from exc
    fn.argtypes = list(argtypes)
    fn.restype = restype
    return fn


def libm_cos(x: float) -> float:
    cos = c_function(load_library("m"), "cos", [ctypes.c_double], ctypes.c_double)
    return cos(float(x))


def libm_pow(x: float, y: float) -> float:
    pow_ = c_function(load_library("m"), "pow", [ctypes.c_double, ctypes.c_double], ctypes.c_double)
    return pow_(float(x), float(y))


def _as_c_doubles(arr) -> np.ndarray:
    a = np.ascontiguousarray(arr, dtype=np.float64)
    if a.ndim != 1:
        raise ValueError(f"Expected a 1D array; got shape {a.shape}")
    return a


def c_array_sum(arr) -> float:
    """Sum a float64 array by reading its buffer through a ctypes ``double*``.

    The pointer aliases the numpy buffer (no copy); elements are read from
    Python one at a time.
    """

    a = _as_c_doubles(arr)
    ptr = a.ctypes.data_as(ctypes.POINTER(ctypes.c_double))
    total = 0.0
    for i in range(a.size):
        total += ptr[i]
    return total


_CMP_DOUBLE = ctypes.CFUNCTYPE(ctypes.c_int, ctypes.POINTER(ctypes.c_double), ctypes.POINTER(ctypes.c_double))


@_CMP_DOUBLE
def _compare_doubles(a, b) -> int:
    x, y = a[0], b[0]
    return (x > y) - (x < y)


def _is_sortable_buffer(a) -> bool:
    return (
        isinstance(a, np.ndarray)
        and a.dtype == np.float64
        and a.ndim == 1
        and a.flags["C_CONTIGUOUS"]
        and a.flags["WRITEABLE"]
    )


def c_qsort(arr, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Sort with libc ``qsort`` using a Python comparator callback.

    Without ``out``, ``arr`` itself is sorted in place and must be a writable
    contiguous 1D float64 array. With ``out``, ``arr`` is copied into ``out``
    and ``out`` is sorted instead, leaving ``arr`` untouched. The sorted buffer
    is returned.
    """

    if out is None:
        if not _is_sortable_buffer(arr):
            raise ValueError("arr must be a writable contiguous 1D float64 array to sort in place; pass out= otherwise")
        out = arr
    else:
        if not _is_sortable_buffer(out):
            raise ValueError("out must be a writable contiguous 1D float64 array")
        src = np.asarray(arr, dtype=np.float64)
        if src.shape != out.shape:
            raise ValueError(f"arr shape {src.shape} does not match out shape {out.shape}")
        if src is not out:
            np.copyto(out, src)

    qsort = c_function(
        load_library("c"),
        "qsort",
        [ctypes.c_void_p, ctypes.c_size_t, ctypes.c_size_t, _CMP_DOUBLE],
        None,
    )
    qsort(out.ctypes.data_as(ctypes.c_void_p), out.size, out.itemsize, _compare_doubles)
    return out
