"""Fixed-scale decimal arithmetic for monetary and asset quantities.

Every operation returns a ``Decimal`` quantized to ``SCALE`` fractional digits
so sums over long transaction logs stay reproducible. Inputs may be
``Decimal``, ``int`` or base-10 strings as they appear in the bot's logs.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Iterable, Union

getcontext().prec = 28

SCALE = 8
QUANTUM = Decimal(1).scaleb(-SCALE)
ZERO = Decimal("0").quantize(QUANTUM)

DecimalLike = Union[Decimal, int, str]


def to_decimal(value: DecimalLike) -> Decimal:
    """Convert ``value`` to ``Decimal`` without binary float expansion."""

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (bool, float)):
        raise ValueError(f"Not a decimal quantity: {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal quantity: {value!r}") from exc
    else:
        raise ValueError(f"Not a decimal quantity: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite decimal quantity: {value!r}")
    return result


def _fix(value: Decimal) -> Decimal:
    return value.quantize(QUANTUM, rounding=ROUND_HALF_UP)


def add(a: DecimalLike, b: DecimalLike) -> Decimal:
    return _fix(to_decimal(a) + to_decimal(b))


def subtract(a: DecimalLike, b: DecimalLike) -> Decimal:
    return _fix(to_decimal(a) - to_decimal(b))


def multiply(a: DecimalLike, b: DecimalLike) -> Decimal:
    return _fix(to_decimal(a) * to_decimal(b))


def divide(a: DecimalLike, b: DecimalLike) -> Decimal:
    """Divide ``a`` by ``b``; a zero denominator yields zero."""

    denominator = to_decimal(b)
    if denominator == 0:
        return ZERO
    return _fix(to_decimal(a) / denominator)


def total(values: Iterable[DecimalLike]) -> Decimal:
    """Fold ``add`` over ``values`` starting from zero."""

    result = ZERO
    for value in values:
        result = add(result, value)
    return result


__all__ = [
    "SCALE",
    "ZERO",
    "DecimalLike",
    "to_decimal",
    "add",
    "subtract",
    "multiply",
    "divide",
    "total",
]
