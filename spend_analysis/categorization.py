"""Rule-based category classification.

A :class:`Categorizer` evaluates an ordered list of :class:`CategoryRule`
entries against lower-cased text and returns the label of the first rule whose
predicate matches, or ``"Other"``. Order matters: several patterns overlap
(a grocery keyword must win over the generic "market" catch-all that
shopping rules would otherwise claim).

Predicates only need a ``matches(text) -> bool`` method, so a regex, an exact
keyword set or any other classifier can back a rule without changes to the
evaluator.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple, Protocol, runtime_checkable

OTHER = "Other"

TAXONOMY: tuple[str, ...] = (
    "Groceries",
    "Restaurants",
    "Shopping/Retail",
    "Subscriptions",
    "Transport/Fuel",
    "Travel",
    "Health/Pharmacy",
    "Entertainment",
    "Education",
    "Services",
    "Utilities",
    OTHER,
)


@runtime_checkable
class RulePredicate(Protocol):
    def matches(self, text: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class PatternPredicate:
    """Matches when ``pattern`` is found anywhere in the text."""

    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str) -> PatternPredicate:
        return cls(re.compile(pattern, re.IGNORECASE))

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True, slots=True)
class KeywordPredicate:
    """Matches when any keyword appears in the text as a whole word."""

    keywords: frozenset[str]

    @classmethod
    def of(cls, keywords: Iterable[str]) -> KeywordPredicate:
        return cls(frozenset(k.strip().lower() for k in keywords if k.strip()))

    def matches(self, text: str) -> bool:
        words = set(re.findall(r"[a-z0-9&']+", text.lower()))
        return not self.keywords.isdisjoint(words)


class CategoryRule(NamedTuple):
    label: str
    predicate: RulePredicate


# Reference rule order. Patterns see lower-cased text.
DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        "Groceries",
        PatternPredicate.compile(
            r"grocery|grocer|supermarket|\bmarket\b(?!place)|trader\s*joe|whole\s*foods"
            r"|kroger|safeway|aldi\b|publix|wegmans|h-e-b|\bheb\b|food\s*lion|stop\s*&\s*shop"
        ),
    ),
    CategoryRule(
        "Restaurants",
        PatternPredicate.compile(
            r"restaurant|\bbars?\b|cafe|coffee|pizza|wings|chicken|chipotle|grubhub"
            r"|uber\s*eats|doordash|dining|starbucks|mcdonald"
        ),
    ),
    CategoryRule(
        "Shopping/Retail",
        PatternPredicate.compile(
            r"retail|shopping|store|department|target|walmart|shein|uniqlo|\bh&m\b"
            r"|clothing|fashion|apparel|jewelry|fragrance|marketplace"
            r"|internet\s*purchase|online|amazon|merchandise"
        ),
    ),
    CategoryRule(
        "Subscriptions",
        PatternPredicate.compile(
            r"subscription|spotify|netflix|\bprime\b|membership|service\s*fee|streaming"
        ),
    ),
    CategoryRule(
        "Transport/Fuel",
        PatternPredicate.compile(
            r"fuel|\bgas\b|gasoline|shell|exxon|exxonmobil|citgo|transport|taxi|rideshare"
            r"|lyft|\buber\b|metro|train|amtrak|nouria|parking|tolls?\b"
        ),
    ),
    CategoryRule(
        "Travel",
        PatternPredicate.compile(
            r"hotel|lodging|airline|flight|delta|southwest|jetblue|booking|airbnb|travel"
        ),
    ),
    CategoryRule(
        "Health/Pharmacy",
        PatternPredicate.compile(
            r"pharmacy|\bcvs\b|walgreens|health|clinic|medical|drugstore|dental|doctor"
        ),
    ),
    CategoryRule(
        "Entertainment",
        PatternPredicate.compile(
            r"entertainment|cinema|movie|concert|\bevents?\b|gametime|\blime\b|theatre|theater"
        ),
    ),
    CategoryRule(
        "Education",
        PatternPredicate.compile(
            r"education|school|tuition|course|\bbooks?\b|mcgraw|wall\s*street\s*prep"
        ),
    ),
    CategoryRule(
        "Services",
        PatternPredicate.compile(r"services?\b|barber|repair|\bvip\b|business\s*services"),
    ),
    CategoryRule(
        "Utilities",
        PatternPredicate.compile(
            r"utility|utilities|electric|water|internet\s*bill|phone\s*bill|mobile\s*bill"
        ),
    ),
)


class Categorizer:
    """First-match-wins evaluator over an ordered rule list."""

    def __init__(self, rules: Sequence[CategoryRule] = DEFAULT_RULES) -> None:
        for rule in rules:
            if rule.label not in TAXONOMY:
                raise ValueError(f"rule label outside taxonomy: {rule.label!r}")
        self._rules: tuple[CategoryRule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[CategoryRule, ...]:
        return self._rules

    def categorize(self, text: str | None) -> str:
        s = (text or "").lower()
        for rule in self._rules:
            if rule.predicate.matches(s):
                return rule.label
        return OTHER


_DEFAULT_CATEGORIZER = Categorizer()


def categorize(text: str | None) -> str:
    """Map raw category (or merchant) text to one taxonomy label."""

    return _DEFAULT_CATEGORIZER.categorize(text)


__all__ = [
    "DEFAULT_RULES",
    "OTHER",
    "TAXONOMY",
    "Categorizer",
    "CategoryRule",
    "KeywordPredicate",
    "PatternPredicate",
    "RulePredicate",
    "categorize",
]
