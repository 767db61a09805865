"""Public API for the ``statement_analysis`` package.

The two operations a host application needs:

- :func:`extract_transactions` turns one bank export's raw text into
  :class:`~statement_analysis.models.NormalizedTransaction` records.
- :func:`label_transactions` classifies those records and returns them with
  aggregate :class:`~statement_analysis.models.LabelingStats`.

Both degrade instead of failing on bad data: unparseable fields fall back to
defaults, incomplete blocks are dropped and unmatched transactions become
``"Other"`` with confidence 0. Obtaining the text (PDF, OCR, upload) and
persisting or displaying results is the caller's job.
"""

from __future__ import annotations

from .extract import extract_transactions
from .labeling import label_transactions

__all__ = ["extract_transactions", "label_transactions"]
