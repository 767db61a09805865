"""Bank statement layouts described as data.

A :class:`BankFormat` carries everything the extractor needs to know about one
bank's export: where a transaction block starts, how to find its date and
trailing amount, and which leftovers to strip. Supporting a new bank means
registering another ``BankFormat``; the splitting and extraction code in
``statement_analysis.extract`` stays untouched.

Registered formats
------------------
- ``ing``: ING-DiBa exports. A block starts at a ``D.M.YYYY`` date followed
  by a transaction-type keyword (``Ueberweisung``, ``Lastschrift``, ...).
  Layout per block: date/type line, counterparty line (``Von X`` / ``An X``),
  purpose line, further detail lines, amount line (``-125,50 EUR``).
- ``generic``: any export where each transaction starts on a line beginning
  with a date. Used when no bank signature is recognised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .logging_setup import get_logger

_logger = get_logger("statement_analysis.formats")

_DATE_TOKEN = r"\d{1,2}\.\d{1,2}\.(?:\d{4}|\d{2})"


@dataclass(frozen=True, slots=True)
class BankFormat:
    """Block-boundary signature and field patterns for one export layout.

    Attributes
    ----------
    format_id:
        Registry key (``"ing"``).
    source_account:
        Identifier stamped on every transaction extracted with this format.
    block_boundary:
        Zero-width (lookahead) pattern marking the start of a transaction.
    date_field:
        Pattern for the leading date token; group 1 is the date text.
    amount_field:
        Pattern for the trailing amount token, anchored at the block end;
        group 1 is the amount text.
    currency_residue:
        Optional leftover currency marker removed (first occurrence) after the
        date and amount tokens are cut out.
    recipient_prefix:
        Optional prefix stripped from the chosen recipient line.
    signature:
        Optional pattern recognising this bank anywhere in the raw text; used
        by :func:`detect_bank_format`.
    min_block_length:
        Blocks shorter than this (after trimming) are headers, footers or
        trailing fragments and are discarded.
    """

    format_id: str
    source_account: str
    block_boundary: re.Pattern[str]
    date_field: re.Pattern[str]
    amount_field: re.Pattern[str]
    currency_residue: re.Pattern[str] | None = None
    recipient_prefix: re.Pattern[str] | None = None
    signature: re.Pattern[str] | None = None
    min_block_length: int = 20


ING_TRANSACTION_TYPES: tuple[str, ...] = (
    "Ueberweisung",
    "Lastschrift",
    "Entgelt",
    "Gutschrift",
    "Dauerauftrag",
    "Kartentransaktion",
)

_AMOUNT_FIELD = re.compile(r"([-+]?[\d,.]+(?:[,.]\d{2})?)\s*EUR?\s*$", re.IGNORECASE)
_LEADING_DATE = re.compile(rf"^({_DATE_TOKEN})")
# Whole-word only: "EU" inside DEUTSCHE or Steuer is not a currency marker.
_CURRENCY_RESIDUE = re.compile(r"\bEUR?\b|€", re.IGNORECASE)

ING = BankFormat(
    format_id="ing",
    source_account="ING-DiBa",
    block_boundary=re.compile(
        rf"(?={_DATE_TOKEN}\s+(?:{'|'.join(ING_TRANSACTION_TYPES)}))"
    ),
    date_field=_LEADING_DATE,
    amount_field=_AMOUNT_FIELD,
    currency_residue=_CURRENCY_RESIDUE,
    recipient_prefix=re.compile(r"^(?:Von|An)\s+"),
    signature=re.compile(r"ING[-\s]?DiBa|INGDDEFFXXX|ING Bank", re.IGNORECASE),
)

GENERIC = BankFormat(
    format_id="generic",
    source_account="Imported",
    block_boundary=re.compile(rf"(?=^{_DATE_TOKEN}\s)", re.MULTILINE),
    date_field=_LEADING_DATE,
    amount_field=_AMOUNT_FIELD,
    currency_residue=_CURRENCY_RESIDUE,
)

# Detection order matters: the first matching signature wins.
BANK_FORMATS: dict[str, BankFormat] = {fmt.format_id: fmt for fmt in (ING, GENERIC)}

DEFAULT_FORMAT_ID = GENERIC.format_id


def get_bank_format(format_id: str) -> BankFormat:
    """Return the registered format for ``format_id`` (case-insensitive)."""

    key = format_id.strip().lower().replace(" ", "_")
    try:
        return BANK_FORMATS[key]
    except KeyError:
        known = ", ".join(sorted(BANK_FORMATS))
        raise ValueError(f"unknown bank format: {format_id!r} (known: {known})") from None


def detect_bank_format(raw_text: str) -> str:
    """Return the id of the first format whose signature occurs in ``raw_text``.

    Falls back to ``"generic"`` when no bank signature is found.
    """

    for fmt in BANK_FORMATS.values():
        if fmt.signature is not None and fmt.signature.search(raw_text or ""):
            _logger.debug("detected bank format %s", fmt.format_id)
            return fmt.format_id
    return DEFAULT_FORMAT_ID


def resolve_bank_format(bank_format: str | BankFormat, raw_text: str = "") -> BankFormat:
    """Turn a ``bank_format`` argument into a :class:`BankFormat`.

    Accepts a :class:`BankFormat` instance (returned as is), ``"auto"`` to
    detect the layout from ``raw_text``, or a registered id. Raises
    ``ValueError`` for unknown ids.
    """

    if isinstance(bank_format, BankFormat):
        return bank_format
    if bank_format.strip().lower() == "auto":
        return BANK_FORMATS[detect_bank_format(raw_text)]
    return get_bank_format(bank_format)


__all__ = [
    "BankFormat",
    "BANK_FORMATS",
    "DEFAULT_FORMAT_ID",
    "GENERIC",
    "ING",
    "ING_TRANSACTION_TYPES",
    "detect_bank_format",
    "get_bank_format",
    "resolve_bank_format",
]
