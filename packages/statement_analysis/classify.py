"""Rule-based classification of a single normalized transaction.

Pipeline (each step is a pure function returning a new result):

1. :func:`score_patterns` scores every rule against the lowercased
   ``description + recipient`` text. A rule scores
   ``base_confidence * matched / total`` when at least one pattern matches;
   the highest score wins and ties keep the earlier rule.
2. :func:`adjust_by_amount` applies the large/small amount overrides.
3. :func:`adjust_by_direction` penalises expense-typical categories on
   incoming money.
4. The decision step derives the percentage and the auto-assign /
   needs-review flags.

Steps 2 and 3 are listed in ``ADJUSTMENTS``; their order is significant.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal

from .models import CategoryRule, ClassificationResult, NormalizedTransaction
from .rules import DEFAULT_RULES

OTHER = "Other"
INCOME = "Income"
HOUSING_AND_UTILITIES = "Housing & Utilities"
BANK_FEES = "Bank Fees"

EXPENSE_CATEGORIES: frozenset[str] = frozenset({"Shopping", "Food & Groceries", "Transportation"})

AUTO_ASSIGN_THRESHOLD = 0.8
REVIEW_THRESHOLD = 0.7

_LARGE_AMOUNT = Decimal("500")
_SMALL_AMOUNT = Decimal("5")
_INCOME_FLOOR = 0.7
_LARGE_DEBIT_CONFIDENCE = 0.6
_SMALL_DEBIT_CONFIDENCE = 0.5
_DIRECTION_PENALTY = 0.3

type Adjustment = Callable[[NormalizedTransaction, ClassificationResult], ClassificationResult]


def to_percent(value: float) -> int:
    """Round ``value * 100`` half-up to an integer percentage."""

    return int(Decimal(repr(value * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _match_text(tx: NormalizedTransaction) -> str:
    return f"{tx.description} {tx.recipient}".lower()


def score_patterns(
    tx: NormalizedTransaction, rules: Sequence[CategoryRule] = DEFAULT_RULES
) -> ClassificationResult:
    """Return the best pattern-based match, or ``Other`` at confidence 0."""

    text = _match_text(tx)
    best = ClassificationResult(category=OTHER, confidence=0.0)
    for rule in rules:
        matched = [p for p in rule.patterns if p.search(text)]
        if not matched:
            continue
        score = rule.base_confidence * (len(matched) / len(rule.patterns))
        # Strictly greater: on equal scores the earlier rule stays.
        if score > best.confidence:
            best = ClassificationResult(
                category=rule.category,
                confidence=score,
                reasons=tuple(p.pattern for p in matched),
            )
    return best


def adjust_by_amount(
    tx: NormalizedTransaction, result: ClassificationResult
) -> ClassificationResult:
    """Large credits become income; unmatched large/tiny debits get a guess."""

    amount = tx.amount
    magnitude = abs(amount)

    if magnitude > _LARGE_AMOUNT:
        if amount > 0:
            confidence = max(result.confidence, _INCOME_FLOOR)
            result = replace(result, category=INCOME, confidence=confidence)
        elif result.category == OTHER:
            result = replace(
                result, category=HOUSING_AND_UTILITIES, confidence=_LARGE_DEBIT_CONFIDENCE
            )

    if magnitude < _SMALL_AMOUNT and amount < 0 and result.category == OTHER:
        result = replace(result, category=BANK_FEES, confidence=_SMALL_DEBIT_CONFIDENCE)

    return result


def adjust_by_direction(
    tx: NormalizedTransaction, result: ClassificationResult
) -> ClassificationResult:
    """Incoming money rarely belongs to an expense category; lower confidence."""

    if tx.amount > 0 and result.category in EXPENSE_CATEGORIES:
        return replace(result, confidence=result.confidence * _DIRECTION_PENALTY)
    return result


ADJUSTMENTS: tuple[Adjustment, ...] = (adjust_by_amount, adjust_by_direction)


def _decide(result: ClassificationResult) -> ClassificationResult:
    return replace(
        result,
        confidence_percent=to_percent(result.confidence),
        auto_assign=result.confidence > AUTO_ASSIGN_THRESHOLD,
        needs_review=result.confidence < REVIEW_THRESHOLD,
    )


def classify_transaction(
    tx: NormalizedTransaction, rules: Sequence[CategoryRule] = DEFAULT_RULES
) -> ClassificationResult:
    """Classify ``tx`` against ``rules``; deterministic and side-effect free."""

    result = score_patterns(tx, rules)
    for adjust in ADJUSTMENTS:
        result = adjust(tx, result)
    return _decide(result)


__all__ = [
    "ADJUSTMENTS",
    "AUTO_ASSIGN_THRESHOLD",
    "EXPENSE_CATEGORIES",
    "OTHER",
    "REVIEW_THRESHOLD",
    "adjust_by_amount",
    "adjust_by_direction",
    "classify_transaction",
    "score_patterns",
    "to_percent",
]
