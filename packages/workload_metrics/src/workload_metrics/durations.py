"""Prometheus duration literals (``5m``, ``1h30m``, ``250ms``).

Units must appear largest first and at most once, matching the PromQL lexer.
"""

from __future__ import annotations

import re

from whenever import TimeDelta

_UNIT_MILLISECONDS: dict[str, int] = {
    "y": 365 * 24 * 3600 * 1000,
    "w": 7 * 24 * 3600 * 1000,
    "d": 24 * 3600 * 1000,
    "h": 3600 * 1000,
    "m": 60 * 1000,
    "s": 1000,
    "ms": 1,
}

_DURATION_RE = re.compile(
    r"^(?:(?P<y>\d+)y)?(?:(?P<w>\d+)w)?(?:(?P<d>\d+)d)?(?:(?P<h>\d+)h)?"
    r"(?:(?P<m>\d+)m(?!s))?(?:(?P<s>\d+)s)?(?:(?P<ms>\d+)ms)?\Z",
    re.ASCII,
)


def parse_duration(text: str) -> TimeDelta:
    """Parse a PromQL duration literal into a positive TimeDelta.

    Raises:
        ValueError: if the literal is empty, malformed or zero.
    """
    match = _DURATION_RE.match(text)
    if not text or match is None:
        raise ValueError(f"invalid duration {text!r}")

    total_ms = sum(
        int(amount) * _UNIT_MILLISECONDS[unit]
        for unit, amount in match.groupdict().items()
        if amount is not None
    )
    if total_ms <= 0:
        raise ValueError(f"duration {text!r} must be greater than zero")
    return TimeDelta(milliseconds=total_ms)
