"""Human-readable byte size parsing for command-line thresholds."""

from __future__ import annotations

import re

_SIZE_PATTERN = re.compile(
    r"^\s*(?P<number>\d+(?:\.\d+)?|\.\d+)\s*(?P<unit>[a-z]*)\s*$",
    re.IGNORECASE,
)

_DECIMAL_PREFIXES = {"": 0, "k": 1, "m": 2, "g": 3, "t": 4, "p": 5, "e": 6}


class SizeParseError(ValueError):
    """Raised when a byte size string cannot be interpreted."""

    def __init__(self, value: str) -> None:
        """Record the rejected input."""
        self.value = value
        super().__init__(f"unable to parse size {value!r}")


def _unit_multiplier(unit: str, value: str) -> int:
    lowered = unit.lower()
    if lowered.endswith("b"):
        lowered = lowered[:-1]

    if lowered.endswith("i"):
        prefix = lowered[:-1]
        if prefix not in _DECIMAL_PREFIXES or not prefix:
            raise SizeParseError(value)
        return 1024 ** _DECIMAL_PREFIXES[prefix]

    if lowered not in _DECIMAL_PREFIXES:
        raise SizeParseError(value)
    return 1000 ** _DECIMAL_PREFIXES[lowered]


def parse_size(value: str) -> int:
    """Parse a byte size such as ``10k``, ``1.5 MB`` or ``2GiB`` into bytes.

    Decimal prefixes (``k``, ``M``, ``G`` ...) are powers of 1000 and binary
    prefixes (``Ki``, ``Mi``, ``Gi`` ...) powers of 1024. A bare number, or a
    number followed by ``B``, is a count of bytes.

    Raises
    ------
    SizeParseError
        If the string is not a recognised size.

    Examples
    --------
    >>> parse_size("500")
    500
    >>> parse_size("1.5 MB")
    1500000
    >>> parse_size("2KiB")
    2048

    """
    match = _SIZE_PATTERN.match(value)
    if match is None:
        raise SizeParseError(value)

    multiplier = _unit_multiplier(match.group("unit"), value)
    number = match.group("number")
    if "." in number:
        return int(float(number) * multiplier)
    return int(number) * multiplier
