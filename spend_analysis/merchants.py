"""Merchant name canonicalization.

Card and bank exports describe the same merchant in many ways::

    APPLE PAY AMZN MKTP US*2K4Y12AB3
    AMAZON.COM AMZN.COM/BILL WA
    TST* JOE'S PIZZA BROOKLYN NY

:func:`clean_description` turns such text into a short, stable, human-readable
label ("Amazon", "Joes Pizza") so that per-merchant aggregates group the
variants together. The function is pure and total: it never raises and always
returns a non-empty label, at worst ``"(No Description)"``.

Cleaning an already-clean label returns it unchanged.
"""

from __future__ import annotations

import re
import unicodedata

from .models import NO_DESCRIPTION

# ---------------------------------------------------------------------------
# Payment-aggregator noise
# ---------------------------------------------------------------------------

_WALLET_RE = re.compile(
    r"\b(?:apple\s*pay|appl\s*pay|apl\s*pay|aplpay|applepay|apple\s*py)\b",
    re.IGNORECASE,
)
# Processor prefixes are only recognized with their literal ``*`` marker.
_PROCESSOR_RE = re.compile(
    r"(?:^|(?<=\s))(?:pp|sq|sqsp|tst|bt|olo|dd)\s*\*\s*",
    re.IGNORECASE,
)
_PEER_PAYMENT_RE = re.compile(
    r"\b(?:venmo|zelle|paypal|cash\s*app|square\s*cash)\b",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Location and reference suffixes
# ---------------------------------------------------------------------------

_STATE_CODES: tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA", "HI", "ID",
    "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO",
    "MT", "NE", "NV", "NH", "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA",
    "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)  # fmt: skip
# Codes that double as words at the end of a business name ("BLUE BOTTLE CO",
# "DINER IN"); these only count as a state after a comma.
_WORDLIKE_STATE_CODES = frozenset(
    {"CO", "DE", "HI", "IN", "LA", "MA", "ME", "OH", "OK", "OR", "PA"}
)
_ANY_STATE = "|".join(_STATE_CODES)
_BARE_STATE = "|".join(c for c in _STATE_CODES if c not in _WORDLIKE_STATE_CODES)
# The city token and the state are upper case, as in raw exports; a mixed-case
# label such as "Joes Pizza NY" is left alone.
_CITY_STATE_RE = re.compile(
    rf"\s+[^\s,a-z]+(?:\s*,\s*(?:{_ANY_STATE})|\s+(?:{_BARE_STATE}))\.?\s*$"
)
_STORE_NUMBER_RE = re.compile(r"^(?:#|no\.?)?\d{2,5}$", re.IGNORECASE)
_NUMBER_MARKER_RE = re.compile(r"^(?:#|no\.?)$", re.IGNORECASE)
_INNER_APOSTROPHE_RE = re.compile(r"(?<=\w)['’](?=\w)")
_NON_LETTER_RE = re.compile(r"[\W\d_]+")
_PUNCT_RE = re.compile(r"[\W_]+")

# ---------------------------------------------------------------------------
# Brand canonicalization
# ---------------------------------------------------------------------------

# Applied in order to letters-and-spaces text; a later rule sees the output of
# earlier ones.
_BRAND_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), brand)
    for pattern, brand in (
        (
            r"\b(?:amzn|amazon)(?:\s+(?:mktp|mktplace|marketplace|mkt|com|digital|prime|"
            r"retail|us|bill|web\s+services|services))*\b",
            "Amazon",
        ),
        (
            r"\bwal\s*mart(?:\s+(?:supercenter|super\s+center|store|com|grocery))*\b"
            r"|\bwm\s+supercenter\b",
            "Walmart",
        ),
        (r"\bstarbucks(?:\s+(?:store|coffee|corp))*\b|\bsbux\b", "Starbucks"),
        (r"\bmc\s*donald\s*s?\b", "McDonald's"),
        (r"\btarget(?:\s+(?:com|store))+\b", "Target"),
        (r"\bwhole\s*foods?(?:\s+(?:market|mkt))*\b|\bwfm\b", "Whole Foods"),
        (r"\btrader\s*joe\s*s?\b", "Trader Joe's"),
        (r"\bcostco(?:\s+(?:whse|wholesale|gas))*\b", "Costco"),
        (r"\buber\s*eats\b", "Uber Eats"),
        (r"\buber(?:\s+(?:trip|trips|technologies|help|com|bv))*\b", "Uber"),
        (r"\blyft(?:\s+(?:ride|rides))*\b", "Lyft"),
        (r"\bdoor\s*dash(?:\s+(?:dashpass|com))*\b", "DoorDash"),
        (r"\bgrub\s*hub(?:\s+com)?\b", "Grubhub"),
        (r"\bnetflix(?:\s+com)?\b", "Netflix"),
        (r"\bspotify(?:\s+(?:usa|us|ab))?\b", "Spotify"),
        (r"\bapple\s+com(?:\s+bill)?\b|\bitunes(?:\s+com)?\b", "Apple"),
        (r"\bcvs(?:\s+(?:pharmacy|store))*\b", "CVS"),
        (r"\bwalgreens?(?:\s+store)?\b", "Walgreens"),
        (r"\bshell(?:\s+(?:oil|service\s+station))*\b", "Shell"),
        (r"\bexxon\s*mobil\b|\bexxon\b", "ExxonMobil"),
        (r"\bchipotle(?:\s+(?:mex|mexican\s+grill|online))*\b", "Chipotle"),
        (r"\bchick\s*fil\s*a\b", "Chick-fil-A"),
        (r"\bh\s+m\b", "H&M"),
        (r"\bairbnb(?:\s+(?:inc|com))*\b", "Airbnb"),
    )
)

# Exact spellings restored after title-casing.
_PRESERVED_SPELLINGS: tuple[str, ...] = (
    "CVS",
    "McDonald's",
    "DoorDash",
    "ExxonMobil",
    "Chick-fil-A",
    "H&M",
    "IKEA",
    "eBay",
    "USPS",
    "UPS",
    "BP",
    "KFC",
)
_PRESERVED_RES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(rf"(?<!\w){re.escape(b)}(?!\w)", re.IGNORECASE), b)
    for b in _PRESERVED_SPELLINGS
)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def _collapse(s: str) -> str:
    return " ".join(s.split())


def _strip_payment_tokens(s: str) -> str:
    s = _WALLET_RE.sub(" ", s)
    s = _PROCESSOR_RE.sub(" ", s)
    s = _PEER_PAYMENT_RE.sub(" ", s)
    return _collapse(s)


def _strip_location(s: str) -> str:
    return _CITY_STATE_RE.sub("", s).strip()


def _strip_trailing_refs(s: str) -> str:
    """Drop trailing store numbers and reference codes, repeatedly."""

    tokens = s.replace("*", " ").split()
    while tokens:
        last = tokens[-1]
        if _STORE_NUMBER_RE.match(last) or sum(ch.isdigit() for ch in last) >= 3:
            tokens.pop()
            if tokens and _NUMBER_MARKER_RE.match(tokens[-1]):
                tokens.pop()
            continue
        break
    return " ".join(tokens)


def _letters_only(s: str) -> str:
    s = _INNER_APOSTROPHE_RE.sub("", s)
    return _collapse(_NON_LETTER_RE.sub(" ", s))


def _canonicalize_brands(s: str) -> str:
    for pattern, brand in _BRAND_RULES:
        s = pattern.sub(brand, s)
    return _collapse(s)


def _title_case(s: str) -> str:
    titled = " ".join(w[:1].upper() + w[1:].lower() for w in s.split(" "))
    for pattern, spelling in _PRESERVED_RES:
        titled = pattern.sub(spelling, titled)
    return titled


def _dedupe_adjacent(s: str) -> str:
    out: list[str] = []
    for w in s.split():
        if out and out[-1].casefold() == w.casefold():
            continue
        out.append(w)
    return " ".join(out)


def _minimal_clean(s: str) -> str:
    return _collapse(_PUNCT_RE.sub(" ", s))


def clean_description(raw: str | None) -> str:
    """Return the canonical merchant label for a raw description.

    Steps, in order: Unicode NFKC; strip wallet/processor/peer-payment
    tokens; strip a trailing ``city ST`` suffix; strip trailing store numbers
    and reference codes; reduce to letters and single spaces; canonicalize
    brand spellings; title-case (restoring preserved brand spellings);
    collapse repeated words. A degenerate result (one character, or just
    "the") falls back to the original text with punctuation removed.
    """

    if raw is None:
        return NO_DESCRIPTION
    original = unicodedata.normalize("NFKC", str(raw)).strip()
    if original == NO_DESCRIPTION:
        return NO_DESCRIPTION

    s = _strip_payment_tokens(original)
    s = _strip_location(s)
    s = _strip_trailing_refs(s)
    s = _letters_only(s)
    if not s:
        return NO_DESCRIPTION

    s = _canonicalize_brands(s)
    s = _title_case(s)
    s = _dedupe_adjacent(s)

    if len(s) <= 1 or s.casefold() == "the":
        fallback = _minimal_clean(original)
        return fallback or NO_DESCRIPTION
    return s


__all__ = ["clean_description"]
