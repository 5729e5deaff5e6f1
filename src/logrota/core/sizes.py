"""Human size strings such as ``10M`` to byte counts, and back."""

from __future__ import annotations

import re
from typing import Final

from .errors import InvalidSizeFormat

_MULTIPLIERS: Final[dict[str, int]] = {
    "": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
}

_SIZE_RE = re.compile(r"^(?P<number>[0-9]+)(?P<suffix>[KkMmGg]?)$")


def parse_size(text: str) -> int:
    """Parse ``<digits>[K|M|G]`` into bytes using binary multiples.

    >>> parse_size("5K")
    5120
    >>> parse_size("512")
    512

    Raises:
        InvalidSizeFormat: If the numeric prefix is not an integer or the
            suffix is unknown.
    """
    if not isinstance(text, str):
        raise InvalidSizeFormat(f"Invalid size format: {text!r}", value=text)
    match = _SIZE_RE.match(text.strip())
    if match is None:
        raise InvalidSizeFormat(f"Invalid size format: {text!r}", value=text)
    return int(match.group("number")) * _MULTIPLIERS[match.group("suffix").upper()]


def format_size(num_bytes: int) -> str:
    """Render a byte count the way ``status()`` prints it (``18B``, ``1.5K``)."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    for suffix in ("K", "M", "G"):
        num_bytes_f = num_bytes / _MULTIPLIERS[suffix]
        if num_bytes_f < 1024 or suffix == "G":
            return f"{num_bytes_f:.1f}{suffix}"
    return f"{num_bytes}B"  # pragma: no cover - loop always returns
