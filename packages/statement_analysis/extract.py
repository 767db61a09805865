"""Statement block extraction: raw export text -> normalized transactions.

Algorithm (identical for every :class:`~statement_analysis.formats.BankFormat`):

1. Split the full text on the format's zero-width block boundary so each
   block still starts with its date/type signature.
2. Discard blocks shorter than ``min_block_length`` after trimming.
3. Match the leading date token and the trailing amount token.
4. Cut both tokens (and one residual currency marker) out of the block and
   split the rest into non-empty lines.
5. Recipient = 2nd line if present, else the 1st; purpose = 3rd line if
   present, else the 2nd. This mirrors the date/type, counterparty, purpose
   layout banks print and is known to degrade on statements that deviate
   from it.
6. Emit a transaction only when recipient, date and amount are all present.

Nothing here raises on malformed text: unusable blocks are dropped and the
result may simply be empty.
"""

from __future__ import annotations

from .formats import BankFormat, resolve_bank_format
from .logging_setup import get_logger
from .models import NormalizedTransaction
from .normalizers import normalize_amount, normalize_date

_logger = get_logger("statement_analysis.extract")


def split_blocks(raw_text: str, fmt: BankFormat) -> list[str]:
    """Split ``raw_text`` into trimmed transaction blocks for ``fmt``."""

    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    blocks: list[str] = []
    for fragment in fmt.block_boundary.split(text):
        block = fragment.strip()
        if len(block) < fmt.min_block_length:
            continue
        blocks.append(block)
    return blocks


def parse_block(block: str, fmt: BankFormat) -> NormalizedTransaction | None:
    """Extract one transaction from a trimmed block, or ``None`` if incomplete."""

    date_match = fmt.date_field.search(block)
    amount_match = fmt.amount_field.search(block)
    if not date_match or not amount_match:
        return None

    date_token = date_match.group(1)
    amount_token = amount_match.group(1)

    remainder = block.replace(date_match.group(0), "", 1)
    remainder = remainder.replace(amount_match.group(0), "", 1)
    if fmt.currency_residue is not None:
        remainder = fmt.currency_residue.sub("", remainder, count=1)
    remainder = remainder.strip()

    lines = [line for line in remainder.split("\n") if line.strip()]
    recipient = (lines[1] if len(lines) > 1 else lines[0] if lines else "").strip()
    purpose = (lines[2] if len(lines) > 2 else lines[1] if len(lines) > 1 else "").strip()

    if recipient and fmt.recipient_prefix is not None:
        recipient = fmt.recipient_prefix.sub("", recipient, count=1).strip()

    if not (recipient and date_token and amount_token):
        return None

    return NormalizedTransaction(
        date=normalize_date(date_token),
        amount=normalize_amount(amount_token),
        description=purpose,
        recipient=recipient,
        source_account=fmt.source_account,
    )


def extract_transactions(
    raw_text: str | None, bank_format: str | BankFormat = "auto"
) -> list[NormalizedTransaction]:
    """Split a bank export into blocks and extract one transaction per block.

    Parameters
    ----------
    raw_text:
        Full text of one statement (PDF text layer, OCR output, paste).
    bank_format:
        A registered format id (``"ing"``, ``"generic"``), ``"auto"`` to
        detect it from the text, or a :class:`BankFormat` instance.

    Returns
    -------
    list[NormalizedTransaction]
        Transactions in statement order; empty when nothing parses or the
        format id is unknown. Never raises for malformed text.
    """

    if not raw_text:
        return []

    try:
        fmt = resolve_bank_format(bank_format, raw_text)
    except ValueError as e:
        _logger.warning("%s; no transactions extracted", e)
        return []

    blocks = split_blocks(raw_text, fmt)
    out: list[NormalizedTransaction] = []
    for block in blocks:
        tx = parse_block(block, fmt)
        if tx is None:
            _logger.debug("dropped incomplete block: %r", block[:60])
            continue
        out.append(tx)

    _logger.debug(
        "format=%s blocks=%d extracted=%d dropped=%d",
        fmt.format_id,
        len(blocks),
        len(out),
        len(blocks) - len(out),
    )
    return out


__all__ = ["extract_transactions", "parse_block", "split_blocks"]
