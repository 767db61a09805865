from __future__ import annotations

from decimal import Decimal

import pytest

from statement_analysis import (
    CategoryRule,
    LabeledTransaction,
    LabelingStats,
    NormalizedTransaction,
    compute_labeling_stats,
    extract_transactions,
    label_transaction,
    label_transactions,
)

from tests.helpers.statements import make_tx

_PETS = (CategoryRule.from_sources("Pets", ["fressnapf"], 0.95),)


def _pets_and_others() -> list[NormalizedTransaction]:
    # P = confidently matched, O = unmatched (Other at 0)
    layout = "POPPOPPOPP"
    return [
        make_tx(recipient="Fressnapf" if c == "P" else "XYZ QWV", amount=f"-{i + 10}.00")
        for i, c in enumerate(layout)
    ]


def test_label_transaction_auto_assigned() -> None:
    tx = make_tx(description="Futter", recipient="Fressnapf", amount="-20.00", date="2025-03-01")
    assert label_transaction(tx, _PETS) == LabeledTransaction(
        date="2025-03-01",
        amount=Decimal("-20.00"),
        description="Futter",
        recipient="Fressnapf",
        source_account="Test",
        category="Pets",
        suggested_category="Pets",
        confidence=95,
        needs_review=False,
        auto_labeled=True,
    )


def test_label_transaction_below_auto_assign_keeps_only_suggestion() -> None:
    # Income at 0.7: not reviewable by score alone but not auto-assigned either.
    labeled = label_transaction(make_tx(recipient="XYZ QWV", amount="600.00"))
    assert labeled.category is None
    assert labeled.suggested_category == "Income"
    assert labeled.confidence == 70
    assert labeled.auto_labeled is False
    assert labeled.needs_review is True


def test_label_transactions_stats() -> None:
    batch = label_transactions(_pets_and_others(), rules=_PETS)

    assert batch.stats == LabelingStats(
        total=10,
        auto_assigned=7,
        auto_assigned_percent=70,
        needs_review=3,
        needs_review_percent=30,
        categories=("Pets", "Other"),
    )
    assert batch.stats.categories_found == 2
    assert [t.category for t in batch.labeled] == [
        "Pets", None, "Pets", "Pets", None, "Pets", "Pets", None, "Pets", "Pets"
    ]


def test_label_transactions_preserves_order_with_concurrency() -> None:
    txs = _pets_and_others() * 5
    sequential = label_transactions(txs, rules=_PETS)
    parallel = label_transactions(txs, rules=_PETS, concurrency=4)
    assert parallel == sequential
    assert [t.amount for t in parallel.labeled] == [t.amount for t in txs]


def test_label_transactions_accepts_any_iterable() -> None:
    batch = label_transactions(iter(_pets_and_others()), rules=_PETS, concurrency=3)
    assert batch.stats.total == 10


def test_label_transactions_empty() -> None:
    batch = label_transactions([])
    assert batch.labeled == ()
    assert batch.stats == LabelingStats(
        total=0,
        auto_assigned=0,
        auto_assigned_percent=0,
        needs_review=0,
        needs_review_percent=0,
        categories=(),
    )
    assert batch.stats.categories_found == 0


def test_label_transactions_rejects_bad_concurrency() -> None:
    with pytest.raises(ValueError, match="positive integer"):
        label_transactions([make_tx()], concurrency=0)


def test_stats_percentages_round_half_up() -> None:
    # 1 of 8 auto-assigned = 12.5% -> 13
    labeled = [label_transaction(make_tx(recipient="Fressnapf"), _PETS)] + [
        label_transaction(make_tx(recipient="XYZ QWV"), _PETS) for _ in range(7)
    ]
    stats = compute_labeling_stats(labeled)
    assert stats.auto_assigned_percent == 13
    assert stats.needs_review_percent == 88


def test_stats_categories_in_first_appearance_order(ing_statement_text: str) -> None:
    batch = label_transactions(extract_transactions(ing_statement_text, "ing"))
    assert batch.stats.categories == ("Income", "Housing & Utilities", "Food & Groceries")
