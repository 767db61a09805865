"""Public interface for the ``statement_analysis`` package.

This module only re-exports the stable import surface: the API functions,
the building blocks they are made of, and the public models.
"""

from .api import extract_transactions, label_transactions
from .classify import classify_transaction
from .formats import (
    BANK_FORMATS,
    BankFormat,
    detect_bank_format,
    get_bank_format,
    resolve_bank_format,
)
from .labeling import compute_labeling_stats, label_transaction
from .models import (
    CategoryRule,
    ClassificationResult,
    LabeledTransaction,
    LabelingBatch,
    LabelingStats,
    NormalizedTransaction,
)
from .normalizers import format_amount, normalize_amount, normalize_date
from .rules import DEFAULT_RULES, load_rules_file, merge_rules

__all__ = [
    # API
    "extract_transactions",
    "label_transactions",
    # Building blocks
    "classify_transaction",
    "compute_labeling_stats",
    "detect_bank_format",
    "format_amount",
    "get_bank_format",
    "label_transaction",
    "load_rules_file",
    "merge_rules",
    "normalize_amount",
    "normalize_date",
    "resolve_bank_format",
    # Data
    "BANK_FORMATS",
    "DEFAULT_RULES",
    # Models / types
    "BankFormat",
    "CategoryRule",
    "ClassificationResult",
    "LabeledTransaction",
    "LabelingBatch",
    "LabelingStats",
    "NormalizedTransaction",
]
