import pytest

from spend_analysis.categorization import (
    DEFAULT_RULES,
    OTHER,
    TAXONOMY,
    Categorizer,
    CategoryRule,
    KeywordPredicate,
    PatternPredicate,
    RulePredicate,
    categorize,
)


@pytest.mark.parametrize(
    ("text", "bucket"),
    [
        ("Groceries", "Groceries"),
        ("Farmers Market", "Groceries"),
        ("Restaurant-Bar & Café", "Restaurants"),
        ("Uber Eats", "Restaurants"),
        ("Merchandise & Supplies-Internet Purchase", "Shopping/Retail"),
        ("Amazon Marketplace", "Shopping/Retail"),
        ("Netflix", "Subscriptions"),
        ("Transportation-Taxis & Coach", "Transport/Fuel"),
        ("Uber", "Transport/Fuel"),
        ("Gas station", "Transport/Fuel"),
        ("Hotel", "Travel"),
        ("Walgreens", "Health/Pharmacy"),
        ("Movie tickets", "Entertainment"),
        ("Tuition", "Education"),
        ("Barber", "Services"),
        ("Electric company", "Utilities"),
    ],
)
def test_categorize_maps_text_to_taxonomy(text, bucket):
    assert categorize(text) == bucket


@pytest.mark.parametrize("text", [None, "", "zzz", "(Uncategorized)"])
def test_categorize_falls_back_to_other(text):
    assert categorize(text) == OTHER


def test_categorize_is_case_insensitive():
    assert categorize("GROCERY") == categorize("grocery") == "Groceries"


def test_first_matching_rule_wins():
    # Both a grocery and a shopping keyword; groceries come first.
    assert categorize("Whole Foods online store") == "Groceries"


def test_every_default_rule_label_is_in_taxonomy():
    assert all(rule.label in TAXONOMY for rule in DEFAULT_RULES)
    assert all(isinstance(rule.predicate, RulePredicate) for rule in DEFAULT_RULES)


def test_custom_categorizer_with_keyword_predicate():
    c = Categorizer(
        [
            CategoryRule("Travel", KeywordPredicate.of(["hotel", "flight"])),
            CategoryRule("Groceries", PatternPredicate.compile(r"\bfarm")),
        ]
    )
    assert c.categorize("Marriott Hotel downtown") == "Travel"
    # Keywords match whole words only.
    assert c.categorize("hotels.com") == OTHER
    assert c.categorize("Farmstand") == "Groceries"
    assert isinstance(c.rules[0].predicate, RulePredicate)


def test_categorizer_rejects_labels_outside_taxonomy():
    with pytest.raises(ValueError):
        Categorizer([CategoryRule("Snacks", KeywordPredicate.of(["chips"]))])
