"""Field normalizers for German-locale bank statement text.

Pure functions turning the date and amount tokens found in statement text
into canonical values:

- ``normalize_date``: ``D[D].M[M].YYYY`` anywhere in the input -> ``YYYY-MM-DD``.
- ``normalize_amount``: ``"-1.234,56 EUR"`` -> ``Decimal("-1234.56")``.

Neither function raises on bad input. An unparseable date becomes today's
date (read it as "unknown date", not as a fact) and an unparseable amount
becomes ``0.00``.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_DATE_RE = re.compile(r"(\d{1,2})\.(\d{1,2})\.(\d{4})")


def normalize_date(value: str | None) -> str:
    """Return the first ``D[D].M[M].YYYY`` date in ``value`` as ISO-8601.

    Day and month are zero-padded; the year is used verbatim. When nothing
    matches, or the match is not a real calendar date (``31.02.2024``), the
    current process date is returned instead.
    """

    if value:
        m = _DATE_RE.search(value)
        if m:
            day, month, year = m.groups()
            iso = f"{year}-{month.zfill(2)}-{day.zfill(2)}"
            try:
                date.fromisoformat(iso)
            except ValueError:
                pass
            else:
                return iso
    return date.today().isoformat()


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_CENT = Decimal("0.01")
_ZERO = Decimal("0.00")

_CURRENCY_RE = re.compile(r"EURO|EUR?|€", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
# Longest numeric prefix, mirroring how lenient float parsers read "12,50abc".
_LEADING_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)")


def normalize_amount(value: str | None) -> Decimal:
    """Parse a locale-formatted amount into a signed ``Decimal`` with cents.

    - Currency markers (``EUR``, ``EURO``, ``€``) and all whitespace are removed.
    - With both ``.`` and ``,`` present, ``.`` is a thousands separator and
      ``,`` the decimal point; with only ``,`` it is the decimal point.
    - A leading ``-`` makes the result negative; ``+`` or no sign yields the
      magnitude as positive.
    - Anything unparseable yields ``Decimal("0.00")``.
    """

    if not value:
        return _ZERO

    cleaned = _WHITESPACE_RE.sub("", _CURRENCY_RE.sub("", value))
    negative = cleaned.startswith("-")
    if cleaned[:1] in ("-", "+"):
        cleaned = cleaned[1:]

    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".", 1)

    m = _LEADING_NUMBER_RE.match(cleaned)
    if not m:
        return _ZERO
    try:
        magnitude = abs(Decimal(m.group(0)))
    except InvalidOperation:
        return _ZERO

    magnitude = magnitude.quantize(_CENT, rounding=ROUND_HALF_UP)
    if magnitude == 0:
        return _ZERO
    return -magnitude if negative else magnitude


def format_amount(d: Decimal) -> str:
    """Render ``d`` with exactly two decimals and an ASCII dot."""

    q = d.quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{q:.2f}"


__all__ = ["normalize_date", "normalize_amount", "format_amount"]
