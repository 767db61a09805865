# ruff: noqa: E501
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from statement_analysis import (
    DEFAULT_RULES,
    CategoryRule,
    classify_transaction,
    load_rules_file,
    merge_rules,
)

from tests.helpers.statements import make_tx


def _write(tmp_path: Path, payload: Any) -> Path:
    p = tmp_path / "rules.json"
    p.write_text(json.dumps(payload), encoding="utf-8")
    return p


def test_default_rules_table() -> None:
    assert [r.category for r in DEFAULT_RULES] == [
        "Food & Groceries",
        "Transportation",
        "Housing & Utilities",
        "Health & Fitness",
        "Insurance",
        "Subscriptions",
        "Entertainment",
        "Shopping",
        "Income",
        "Bank Fees",
    ]
    assert all(p.flags & re.IGNORECASE for r in DEFAULT_RULES for p in r.patterns)


def test_load_rules_file(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "rules": [
                {"category": " Pets ", "patterns": ["fressnapf", "tierarzt"], "base_confidence": 0.9},
                {"category": "Donations", "patterns": ["spende"], "base_confidence": 1},
            ]
        },
    )
    rules = load_rules_file(path)

    assert [r.category for r in rules] == ["Pets", "Donations"]
    assert [p.pattern for p in rules[0].patterns] == ["fressnapf", "tierarzt"]
    assert rules[1].base_confidence == 1.0
    assert rules[0].patterns[0].search("FRESSNAPF Filiale")


@pytest.mark.parametrize(
    "entry",
    [
        {"category": "", "patterns": ["x"], "base_confidence": 0.9},
        {"category": "Pets", "patterns": [], "base_confidence": 0.9},
        {"category": "Pets", "patterns": ["("], "base_confidence": 0.9},
        {"category": "Pets", "patterns": ["x"], "base_confidence": 0},
        {"category": "Pets", "patterns": ["x"], "base_confidence": 1.5},
        {"category": "Pets", "patterns": ["x"], "base_confidence": "0.9"},
        {"category": "Pets", "patterns": ["x"], "base_confidence": True},
        {"category": "Pets", "patterns": "x", "base_confidence": 0.9},
        {"category": "Pets", "patterns": ["x"], "base_confidence": 0.9, "weight": 2},
        {"category": "Pets", "patterns": ["x"]},
    ],
)
def test_load_rules_file_rejects_invalid_entries(tmp_path: Path, entry: dict[str, Any]) -> None:
    with pytest.raises(ValidationError):
        load_rules_file(_write(tmp_path, {"rules": [entry]}))


def test_load_rules_file_rejects_bad_top_level(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        load_rules_file(_write(tmp_path, [{"category": "Pets"}]))
    with pytest.raises(ValidationError):
        load_rules_file(_write(tmp_path, {"rules": [], "version": 2}))


def test_load_rules_file_invalid_json(tmp_path: Path) -> None:
    p = tmp_path / "rules.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_rules_file(p)


def test_load_rules_file_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules_file(tmp_path / "missing.json")


def test_merge_rules_order() -> None:
    custom = (CategoryRule.from_sources("Pets", ["fressnapf"], 0.9),)

    merged = merge_rules(custom)
    assert merged[0] is custom[0]
    assert merged[1:] == DEFAULT_RULES

    appended = merge_rules(custom, prepend=False)
    assert appended[-1] is custom[0]
    assert appended[:-1] == DEFAULT_RULES


def test_prepended_custom_rule_wins_ties() -> None:
    # Same patterns and base as the built-in grocery rule, so both score equally.
    groceries = DEFAULT_RULES[0]
    custom = (
        CategoryRule(patterns=groceries.patterns, category="Supermarket", base_confidence=0.9),
    )
    tx = make_tx(recipient="REWE")

    assert classify_transaction(tx, merge_rules(custom)).category == "Supermarket"
    assert classify_transaction(tx, merge_rules(custom, prepend=False)).category == (
        "Food & Groceries"
    )


def test_category_rule_validation() -> None:
    with pytest.raises(ValueError, match="at least one pattern"):
        CategoryRule(patterns=(), category="Empty", base_confidence=0.5)
    with pytest.raises(ValueError, match="base_confidence"):
        CategoryRule.from_sources("Bad", ["x"], 0.0)
