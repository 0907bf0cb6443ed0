"""Parsing of Go-style duration strings such as ``3m`` or ``1h30m``."""

import re
from datetime import timedelta

UNIT_TO_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
MIN_NONZERO_DURATION = timedelta(microseconds=1)


def parse_duration(value: str) -> timedelta:
    """Parse a duration made of signed decimal numbers with unit suffixes.

    Accepts Go duration syntax as used by the ``--expire`` flag:
    ``"300ms"``, ``"-1.5h"``, ``"2h45m"``. A bare ``"0"`` is the only unitless
    value allowed. A non-zero duration shorter than the microsecond resolution
    of ``timedelta`` is rounded away from zero to one microsecond.

    Raises:
        ValueError: If the string is not a valid duration

    """
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration '{value}'")

    seconds = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration '{value}'")
        number, unit = match.groups()
        seconds += float(number) * UNIT_TO_SECONDS[unit]
        pos = match.end()

    duration = timedelta(seconds=sign * seconds)
    if seconds and not duration:
        return MIN_NONZERO_DURATION if sign > 0 else -MIN_NONZERO_DURATION
    return duration
