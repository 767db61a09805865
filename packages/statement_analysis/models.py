"""Data models for ``statement_analysis``.

Every record is a frozen, slotted dataclass: values are created fresh per
call and never mutated afterwards. Corrections (for example the amount and
direction adjustments applied during classification) produce new instances
via :func:`dataclasses.replace`.

The pydantic models at the bottom describe the on-disk shape of custom rule
files and are only used while loading them (see ``rules.load_rules_file``).
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """A single transaction as it leaves the statement extractor.

    ``date`` is always a complete ``YYYY-MM-DD`` string and ``amount`` a
    cent-precision ``Decimal`` whose sign is the debit (-) / credit (+)
    indicator.
    """

    date: str
    amount: Decimal
    description: str
    recipient: str
    source_account: str


@dataclass(frozen=True, slots=True)
class LabeledTransaction:
    """A :class:`NormalizedTransaction` merged with its classification.

    ``category`` is only set when the classification was confident enough to
    auto-assign; otherwise it stays ``None`` pending manual review.
    ``confidence`` is the rounded integer percentage.
    """

    date: str
    amount: Decimal
    description: str
    recipient: str
    source_account: str
    category: str | None
    suggested_category: str
    confidence: int
    needs_review: bool
    auto_labeled: bool


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryRule:
    """One row of the rule table: compiled patterns, a label and a base score."""

    patterns: tuple[re.Pattern[str], ...]
    category: str
    base_confidence: float

    def __post_init__(self) -> None:
        if not self.patterns:
            raise ValueError(f"CategoryRule {self.category!r} needs at least one pattern")
        if not 0.0 < self.base_confidence <= 1.0:
            raise ValueError(
                f"CategoryRule {self.category!r}: base_confidence must be within (0, 1]"
            )

    @classmethod
    def from_sources(
        cls, category: str, sources: Sequence[str], base_confidence: float
    ) -> CategoryRule:
        """Build a rule from raw regex sources, compiled case-insensitively."""

        return cls(
            patterns=tuple(re.compile(s, re.IGNORECASE) for s in sources),
            category=category,
            base_confidence=base_confidence,
        )


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Outcome of classifying one transaction.

    ``confidence`` lives in ``[0, 1]``; ``confidence_percent`` is its rounded
    percentage. ``reasons`` holds the source text of every pattern of the
    winning pattern rule that matched; amount adjustments relabel the
    category but keep them. Empty when no pattern matched.
    """

    category: str
    confidence: float
    auto_assign: bool = False
    needs_review: bool = True
    reasons: tuple[str, ...] = ()
    confidence_percent: int = 0


# ---------------------------------------------------------------------------
# Batch output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LabelingStats:
    total: int
    auto_assigned: int
    auto_assigned_percent: int
    needs_review: int
    needs_review_percent: int
    categories: tuple[str, ...]

    @property
    def categories_found(self) -> int:
        return len(self.categories)


@dataclass(frozen=True, slots=True)
class LabelingBatch:
    """Labeled transactions in input order plus their aggregate statistics."""

    labeled: tuple[LabeledTransaction, ...]
    stats: LabelingStats


# ---------------------------------------------------------------------------
# Custom rule files (validated on load)
# ---------------------------------------------------------------------------


class RuleModel(BaseModel):
    """A single rule entry in a custom rule file."""

    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    category: str
    patterns: list[str]
    base_confidence: float

    @field_validator("category")
    @classmethod
    def _category_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("category must be non-empty")
        return v

    @field_validator("patterns")
    @classmethod
    def _patterns_compile(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("patterns must contain at least one expression")
        for source in v:
            try:
                re.compile(source)
            except re.error as e:
                raise ValueError(f"invalid pattern {source!r}: {e}") from e
        return v

    @field_validator("base_confidence", mode="before")
    @classmethod
    def _confidence_in_range(cls, v: object) -> float:
        # Strict mode rejects ints for floats; JSON authors write 1 as often as 1.0.
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("base_confidence must be a number")
        fv = float(v)
        if 0.0 < fv <= 1.0:
            return fv
        raise ValueError("base_confidence must be within (0, 1]")


class RuleFileModel(BaseModel):
    """Top-level schema for a custom rule file."""

    model_config = ConfigDict(strict=True, extra="forbid")

    rules: list[RuleModel]


__all__ = [
    "NormalizedTransaction",
    "LabeledTransaction",
    "CategoryRule",
    "ClassificationResult",
    "LabelingStats",
    "LabelingBatch",
    "RuleModel",
    "RuleFileModel",
]
