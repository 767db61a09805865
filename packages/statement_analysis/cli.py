"""CLI for the ``statement_analysis`` package.

Thin Typer front end over :mod:`statement_analysis.api` for local use: read a
statement's text from a file, extract its transactions, optionally label them
and print JSON to stdout. Environment variables are loaded from a local
``.env`` via ``python-dotenv`` before any command runs:

- ``STATEMENT_ANALYSIS_LOG_LEVEL``: log level (default ``INFO``).
- ``SA_LABEL_MAX_WORKERS``: default worker count for ``label``.
- ``SA_RULES_FILE``: default custom rule file for ``label``.

Command handlers (``cmd_*``) return a process exit code so they can be called
directly from tests or other entry points.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from .api import extract_transactions, label_transactions
from .formats import BANK_FORMATS, resolve_bank_format
from .logging_setup import configure_logging, get_logger
from .models import CategoryRule, LabeledTransaction, LabelingStats, NormalizedTransaction
from .normalizers import format_amount
from .rules import DEFAULT_RULES, load_rules_file, merge_rules

_logger = get_logger("statement_analysis.cli")

_MAX_WORKERS_CAP = 32


# ---- Small module-level helpers ----------------------------------------------


def _resolve_max_workers(requested: int | None, n_items: int) -> int:
    """Resolve the worker count for labeling.

    An explicit ``requested`` value wins; otherwise ``SA_LABEL_MAX_WORKERS`` is
    honoured when it parses as a positive integer. The result is capped to
    ``n_items`` and to 32 and is never below 1.
    """

    workers = requested
    if workers is None:
        env_workers = os.getenv("SA_LABEL_MAX_WORKERS")
        try:
            workers = int(env_workers) if env_workers else None
        except ValueError:
            workers = None
    if workers is None or workers < 1:
        return 1
    return max(1, min(workers, n_items, _MAX_WORKERS_CAP))


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _transaction_json(tx: NormalizedTransaction | LabeledTransaction) -> dict[str, Any]:
    row = asdict(tx)
    row["amount"] = format_amount(tx.amount)
    return row


def _stats_json(stats: LabelingStats) -> dict[str, Any]:
    row = asdict(stats)
    row["categories"] = list(stats.categories)
    row["categories_found"] = stats.categories_found
    return row


def _resolve_rules(rules_path: Path | None) -> tuple[CategoryRule, ...]:
    if rules_path is None:
        env_path = os.getenv("SA_RULES_FILE")
        rules_path = Path(env_path) if env_path else None
    if rules_path is None:
        return DEFAULT_RULES
    return merge_rules(load_rules_file(rules_path))


def _extract_from_file(text_path: Path, bank_format: str) -> list[NormalizedTransaction]:
    raw_text = _read_text(text_path)
    fmt = resolve_bank_format(bank_format, raw_text)
    _logger.info("extracting %s with format %s", text_path, fmt.format_id)
    return extract_transactions(raw_text, fmt)


# ---- Command handlers ----------------------------------------------------------


def cmd_formats() -> int:
    for fmt in BANK_FORMATS.values():
        print(f"{fmt.format_id}\t{fmt.source_account}")
    return 0


def cmd_extract(text_path: Path, *, bank_format: str = "auto") -> int:
    """Print the transactions extracted from ``text_path`` as a JSON array."""

    try:
        transactions = _extract_from_file(text_path, bank_format)
    except FileNotFoundError:
        print(f"Error: File not found: {text_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {text_path}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Error: '{text_path}' is not UTF-8 text: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps([_transaction_json(t) for t in transactions], indent=2, ensure_ascii=False))
    return 0


def cmd_label(
    text_path: Path,
    *,
    bank_format: str = "auto",
    rules_path: Path | None = None,
    workers: int | None = None,
) -> int:
    """Extract and label ``text_path``; print labeled rows and stats as JSON."""

    try:
        rules = _resolve_rules(rules_path)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Error: Failed to load rules: {e}", file=sys.stderr)
        return 1

    try:
        transactions = _extract_from_file(text_path, bank_format)
    except FileNotFoundError:
        print(f"Error: File not found: {text_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {text_path}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Error: '{text_path}' is not UTF-8 text: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    batch = label_transactions(
        transactions,
        rules=rules,
        concurrency=_resolve_max_workers(workers, len(transactions)),
    )
    payload = {
        "labeled": [_transaction_json(t) for t in batch.labeled],
        "stats": _stats_json(batch.stats),
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Extract and categorize transactions from bank statement text. "
        "Loads settings from a local .env before running."
    ),
)

TextPathArg = Annotated[
    Path, typer.Argument(help="Path to a UTF-8 text file holding one statement's text.")
]
FormatOpt = Annotated[
    str,
    typer.Option(
        "--format",
        "-f",
        help="Bank format id (see `formats`), or 'auto' to detect it from the text.",
    ),
]


@app.callback()
def _root(
    log_level: Annotated[
        str | None, typer.Option(help="Override STATEMENT_ANALYSIS_LOG_LEVEL.")
    ] = None,
) -> None:
    load_dotenv()
    configure_logging(log_level)


@app.command("formats")
def formats_cmd() -> None:
    """List the registered bank formats."""

    raise typer.Exit(cmd_formats())


@app.command("extract")
def extract_cmd(text_path: TextPathArg, bank_format: FormatOpt = "auto") -> None:
    """Extract normalized transactions and print them as JSON."""

    raise typer.Exit(cmd_extract(text_path, bank_format=bank_format))


@app.command("label")
def label_cmd(
    text_path: TextPathArg,
    bank_format: FormatOpt = "auto",
    rules: Annotated[
        Path | None,
        typer.Option(help="JSON file with extra category rules (falls back to SA_RULES_FILE)."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(help="Classification worker threads (falls back to SA_LABEL_MAX_WORKERS)."),
    ] = None,
) -> None:
    """Extract, label and print transactions with labeling statistics."""

    raise typer.Exit(
        cmd_label(text_path, bank_format=bank_format, rules_path=rules, workers=workers)
    )


if __name__ == "__main__":  # pragma: no cover
    app()
