"""Category rule table.

``DEFAULT_RULES`` is the ordered, immutable rule table used by the
classification engine. Order only matters as the last-resort tie-break: when
two rules score the same, the one listed first wins.

Patterns are matched case-insensitively against the lowercased
``description + " " + recipient`` text. Several patterns intentionally
overlap between rules (``versicherung`` appears under both housing and
insurance); the scoring in ``statement_analysis.classify`` resolves that.

Custom rules can be loaded from a JSON file::

    {"rules": [{"category": "Pets", "patterns": ["fressnapf", "tierarzt"],
                "base_confidence": 0.9}]}
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import CategoryRule, RuleFileModel

_logger = get_logger("statement_analysis.rules")

_R = CategoryRule.from_sources

DEFAULT_RULES: tuple[CategoryRule, ...] = (
    _R(
        "Food & Groceries",
        (
            # Supermarkets
            r"rewe|aldi|aldis|aldi süd|aldi nord",
            r"edeka|netto|penny|kaufland|real",
            r"lidl|norma|famila|markant",
            r"combi|hit|globus|tegut",
            # Fresh food
            r"alfrisch|frisch|fresh|bio|organic",
            r"supermarkt|markt|food|lebensmittel|groceries",
            # Restaurants & fast food
            r"mcdonald|burger king|kfc|subway|pizza|döner",
            r"restaurant|cafe|bistro|bäcker|metzger|fleisch",
            r"coors.*bäcker|dankt.*food",
        ),
        0.9,
    ),
    _R(
        "Transportation",
        (
            r"tankstelle|shell|esso|aral|jet|total",
            r"db |deutsche bahn|hvv|mvv|vgn|vrr",
            r"taxi|uber|bolt|miles|sixt",
            r"parking|parkhaus|parkschein",
        ),
        0.9,
    ),
    _R(
        "Housing & Utilities",
        (
            r"miete|wohnung|nebenkosten|hausgeld",
            r"stadtwerke|energie|gas|strom|wasser",
            r"internet|telekom|vodafone|o2|1und1",
            r"versicherung|insurance|haftpflicht",
        ),
        0.95,
    ),
    _R(
        "Health & Fitness",
        (
            r"apotheke|pharmacy|arzt|zahnarzt",
            r"fitness|gym|sport|mcfit|clever fit|benefit fitness",
            r"medizin|medicine|behandlung",
        ),
        0.9,
    ),
    _R(
        "Insurance",
        (
            r"krankenkasse|techniker|barmer|aok|dak",
            r"versicherung|insurance|haftpflicht|kasko",
            r"allianz|signal iduna|ergo|axa",
        ),
        0.95,
    ),
    _R(
        "Subscriptions",
        (
            r"netflix|spotify|amazon prime|amznprime|disney",
            r"paypal.*subscription|abo|mitgliedschaft",
            r"google|apple|microsoft.*subscription",
            r"claude\.ai|anthropic",
        ),
        0.9,
    ),
    _R(
        "Entertainment",
        (
            r"kino|cinema|theater|konzert",
            r"steam|playstation|xbox|nintendo",
            r"ticket|event|show",
        ),
        0.85,
    ),
    _R(
        "Shopping",
        (
            r"amazon(?!.*prime)|ebay|zalando|otto",
            r"paypal(?!.*subscription)|klarna|riverty",
            r"h&m|zara|c&a|media markt|saturn",
        ),
        0.85,
    ),
    _R(
        "Income",
        (
            r"lohn|gehalt|salary|income|arbeitgeber",
            r"rente|pension|sozial|arbeitslosengeld",
            r"rückzahlung|refund|erstattung",
        ),
        0.95,
    ),
    _R(
        "Bank Fees",
        (
            r"gebühr|fee|zinsen|interest",
            r"überweisung.*gebühr|transaction.*fee",
            r"kontoführung|account.*fee",
        ),
        0.9,
    ),
)


def load_rules_file(path: str | PathLike[str]) -> tuple[CategoryRule, ...]:
    """Load and validate a custom rule file.

    Raises ``ValueError`` for unreadable JSON and
    ``pydantic.ValidationError`` for entries that do not match the schema
    (empty category, bad regex, confidence outside ``(0, 1]``).
    """

    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"rule file {p} is not valid JSON: {e}") from e

    try:
        parsed = RuleFileModel.model_validate(payload)
    except ValidationError:
        _logger.error("rule file %s failed validation", p)
        raise

    rules = tuple(
        _R(entry.category, entry.patterns, entry.base_confidence) for entry in parsed.rules
    )
    _logger.info("loaded %d custom rules from %s", len(rules), p)
    return rules


def merge_rules(
    custom: Sequence[CategoryRule],
    base: Sequence[CategoryRule] = DEFAULT_RULES,
    *,
    prepend: bool = True,
) -> tuple[CategoryRule, ...]:
    """Return a new ordered rule table combining ``custom`` and ``base``.

    With ``prepend`` (the default) custom rules come first and therefore win
    ties against built-in rules.
    """

    if prepend:
        return (*custom, *base)
    return (*base, *custom)


__all__ = ["DEFAULT_RULES", "load_rules_file", "merge_rules"]
