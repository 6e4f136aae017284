"""Shared utilities.

``esc()`` HTML-escapes any data-supplied string (brand, product and
category names) before it is placed into annotation markup. The number
helpers coerce loosely typed table cells into finite floats.
"""

from __future__ import annotations

import html
import math
from typing import Any


def esc(value: Any) -> str:
    """Return an HTML-escaped string representation of *value*.

    Escapes ``&``, ``<``, ``>``, and both single and double quotes so
    the result is safe in element text or attribute values.
    """
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a table cell to a finite non-negative float.

    Missing, unparseable, non-finite and negative values become
    *default*.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        out = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(out) or out < 0:
        return default
    return out


def optional_number(value: Any) -> float | None:
    """Like ``to_number`` but returns None for missing or zero values."""
    out = to_number(value)
    return out if out else None


def money(value: Any) -> str:
    """Format a price as whole dollars, e.g. ``$25``."""
    return f"${to_number(value):.0f}"
