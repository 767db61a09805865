"""Batch labeling: classify a collection and summarise the outcome.

``label_transactions`` returns one :class:`LabeledTransaction` per input in
input order. A record only receives ``category`` when its classification is
confident enough to auto-assign; everything else keeps the suggestion and is
flagged for review.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import partial

from .classify import classify_transaction, to_percent
from .logging_setup import get_logger
from .models import (
    CategoryRule,
    LabeledTransaction,
    LabelingBatch,
    LabelingStats,
    NormalizedTransaction,
)
from .pmap import p_map
from .rules import DEFAULT_RULES

_logger = get_logger("statement_analysis.labeling")


def label_transaction(
    tx: NormalizedTransaction, rules: Sequence[CategoryRule] = DEFAULT_RULES
) -> LabeledTransaction:
    result = classify_transaction(tx, rules)
    return LabeledTransaction(
        date=tx.date,
        amount=tx.amount,
        description=tx.description,
        recipient=tx.recipient,
        source_account=tx.source_account,
        category=result.category if result.auto_assign else None,
        suggested_category=result.category,
        confidence=result.confidence_percent,
        needs_review=result.needs_review or not result.auto_assign,
        auto_labeled=result.auto_assign,
    )


def compute_labeling_stats(labeled: Sequence[LabeledTransaction]) -> LabelingStats:
    """Counts and percentages over ``labeled``; 0 percent for an empty batch."""

    total = len(labeled)
    auto_assigned = sum(1 for t in labeled if t.auto_labeled)
    needs_review = sum(1 for t in labeled if t.needs_review)
    # dict preserves first-appearance order
    categories = tuple(dict.fromkeys(t.suggested_category for t in labeled))
    return LabelingStats(
        total=total,
        auto_assigned=auto_assigned,
        auto_assigned_percent=to_percent(auto_assigned / total) if total else 0,
        needs_review=needs_review,
        needs_review_percent=to_percent(needs_review / total) if total else 0,
        categories=categories,
    )


def label_transactions(
    transactions: Iterable[NormalizedTransaction],
    *,
    rules: Sequence[CategoryRule] = DEFAULT_RULES,
    concurrency: int = 1,
) -> LabelingBatch:
    """Label ``transactions`` and compute their :class:`LabelingStats`.

    ``concurrency`` > 1 classifies on a bounded thread pool; output order is
    always the input order.
    """

    labeled = tuple(
        p_map(transactions, partial(label_transaction, rules=rules), concurrency=concurrency)
    )
    stats = compute_labeling_stats(labeled)
    _logger.info(
        "labeled %d transactions: %d auto-assigned (%d%%), %d need review (%d%%)",
        stats.total,
        stats.auto_assigned,
        stats.auto_assigned_percent,
        stats.needs_review,
        stats.needs_review_percent,
    )
    return LabelingBatch(labeled=labeled, stats=stats)


__all__ = ["compute_labeling_stats", "label_transaction", "label_transactions"]
