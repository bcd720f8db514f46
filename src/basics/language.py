from __future__ import annotations

import math
from dataclasses import dataclass
from functools import singledispatch
from typing import List

import numpy as np


@dataclass(frozen=True)
class Circle:
    radius: float


@dataclass(frozen=True)
class Rectangle:
    width: float
    height: float


@dataclass(frozen=True)
class Square:
    side: float


def _check_non_negative(**dims: float) -> None:
    bad = {k: v for k, v in dims.items() if v < 0}
    if bad:
        raise ValueError(f"Shape dimensions must be non-negative; got {bad}")


@singledispatch
def area(shape) -> float:
    """Area of a shape, selected by the shape's type."""

    raise TypeError(f"No area method registered for {type(shape).__name__}")


@area.register
def _(shape: Circle) -> float:
    _check_non_negative(radius=shape.radius)
    return math.pi * shape.radius**2


@area.register
def _(shape: Rectangle) -> float:
    _check_non_negative(width=shape.width, height=shape.height)
    return shape.width * shape.height


@area.register
def _(shape: Square) -> float:
    _check_non_negative(side=shape.side)
    return shape.side**2


@singledispatch
def describe(value) -> str:
    return f"{type(value).__name__} value"


@describe.register
def _(value: bool) -> str:
    return f"boolean {value}"


@describe.register
def _(value: int) -> str:
    parity = "even" if value % 2 == 0 else "odd"
    return f"{parity} integer {value}"


@describe.register
def _(value: float) -> str:
    if math.isnan(value):
        return "float NaN"
    return f"float {value:g}"


@describe.register
def _(value: str) -> str:
    return f"string of length {len(value)}"


@describe.register
def _(value: list) -> str:
    return f"list of {len(value)} items"


@describe.register
def _(value: np.ndarray) -> str:
    return f"{value.dtype} array with shape {value.shape}"


def collatz_length(n: int) -> int:
    if n < 1:
        raise ValueError(f"collatz_length expects n >= 1; got {n}")
    steps = 0
    while n != 1:
        n = n // 2 if n % 2 == 0 else 3 * n + 1
        steps += 1
    return steps


def fibonacci(n: int) -> List[int]:
    if n < 0:
        raise ValueError(f"fibonacci expects n >= 0; got {n}")
    out: List[int] = []
    a, b = 0, 1
    for _ in range(n):
        out.append(a)
        a, b = b, a + b
    return out
