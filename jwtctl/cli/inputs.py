"""Argument conversions shared by the jwtctl commands."""

import argparse
import re
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

_JSON_OBJECT = TypeAdapter(dict[str, Any])

_ISO_DURATION = re.compile(
    r"^(?P<sign>[-+]?)P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)


class UsageError(Exception):
    """Raised when command-line input cannot be turned into parameters."""


def parse_duration(text: str) -> timedelta:
    """Parse an ISO-8601 duration such as ``PT2H30M`` or ``P1DT12H``.

    Raises:
        argparse.ArgumentTypeError: malformed or non-positive duration.
    """
    match = _ISO_DURATION.match(text.strip())
    if match is None or text.strip().upper().endswith(("P", "T")):
        raise argparse.ArgumentTypeError(
            f"invalid duration '{text}' (format: PnDTnHnMn.nS, ex: PT10H = 10 hours)"
        )
    duration = timedelta(
        days=int(match["days"] or 0),
        hours=int(match["hours"] or 0),
        minutes=int(match["minutes"] or 0),
        seconds=float(match["seconds"] or 0),
    )
    if match["sign"] == "-":
        duration = -duration
    if duration <= timedelta(0):
        raise argparse.ArgumentTypeError("Duration must be positive")
    return duration


def load_json_object(path: Path, label: str) -> dict[str, Any]:
    """Read a JSON object from ``path``."""
    if not path.exists():
        raise UsageError(f"Unable to find file at path {path}")
    try:
        return _JSON_OBJECT.validate_json(path.read_bytes())
    except (OSError, ValidationError) as exc:
        raise UsageError(f"Unable to parse {label} file") from exc


def pairs_to_dict(pairs: list[list[str]] | None) -> dict[str, str]:
    """Turn repeated ``NAME VALUE`` options into an ordered mapping."""
    return {name: value for name, value in pairs or []}
