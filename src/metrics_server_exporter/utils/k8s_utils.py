import math
from decimal import Decimal, InvalidOperation
from typing import Union

_BINARY_SUFFIXES = {
    "Ki": Decimal(1024),
    "Mi": Decimal(1024) ** 2,
    "Gi": Decimal(1024) ** 3,
    "Ti": Decimal(1024) ** 4,
    "Pi": Decimal(1024) ** 5,
    "Ei": Decimal(1024) ** 6,
}
_DECIMAL_SUFFIXES = {
    "n": Decimal("0.000000001"),
    "u": Decimal("0.000001"),
    "m": Decimal("0.001"),
    "k": Decimal(1000),
    "M": Decimal(1000) ** 2,
    "G": Decimal(1000) ** 3,
    "T": Decimal(1000) ** 4,
    "P": Decimal(1000) ** 5,
    "E": Decimal(1000) ** 6,
}

Quantity = Union[str, int, float, Decimal]

# Largest magnitude the cluster stores in a quantity (int64).
MAX_QUANTITY = Decimal(2**63 - 1)


def _checked(value: Decimal, quantity) -> Decimal:
    if not value.is_finite() or abs(value) > MAX_QUANTITY:
        raise ValueError(f"quantity out of range: {quantity!r}")
    return value


def parse_quantity(quantity: Quantity) -> Decimal:
    """
    Parse a Kubernetes resource quantity ("250m", "4Gi", "1.5", "1e3") to a Decimal
    in base units (cores for CPU, bytes for memory).

    Raises:
        ValueError: If the quantity is not a valid Kubernetes quantity, is not
            finite, or exceeds the int64 range.
    """
    if isinstance(quantity, bool):
        raise ValueError(f"invalid quantity: {quantity!r}")
    if isinstance(quantity, (int, float, Decimal)):
        return _checked(Decimal(str(quantity)), quantity)
    if not isinstance(quantity, str):
        raise ValueError(f"invalid quantity type: {type(quantity).__name__}")

    text = quantity.strip()
    number, multiplier = text, Decimal(1)
    if text[-2:] in _BINARY_SUFFIXES:
        number, multiplier = text[:-2], _BINARY_SUFFIXES[text[-2:]]
    elif text[-1:] in _DECIMAL_SUFFIXES:
        number, multiplier = text[:-1], _DECIMAL_SUFFIXES[text[-1:]]

    try:
        value = Decimal(number)
    except InvalidOperation as e:
        raise ValueError(f"invalid quantity: {quantity!r}") from e
    return _checked(_checked(value, quantity) * multiplier, quantity)


def milli_value(quantity: Quantity) -> int:
    """Quantity in milli-units, rounded up (1 core == 1000)."""
    return math.ceil(parse_quantity(quantity) * 1000)


def kilo_value(quantity: Quantity) -> int:
    """Quantity scaled to kilo-units (1000-based), rounded up."""
    return math.ceil(parse_quantity(quantity) / 1000)
