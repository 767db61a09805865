"""Pytest configuration shared by the whole suite.

Puts the workspace ``packages/`` directory (and the repo root, for
``tests.helpers``) on ``sys.path`` and keeps tests hermetic with respect to the
environment variables the CLI reads.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
# `packages/` precedes the repo root so local packages resolve first.
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

from tests.helpers.statements import ING_STATEMENT_TEXT  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop settings a developer's shell or ``.env`` might leak into tests."""

    for var in ("SA_LABEL_MAX_WORKERS", "SA_RULES_FILE", "STATEMENT_ANALYSIS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def ing_statement_text() -> str:
    return ING_STATEMENT_TEXT
