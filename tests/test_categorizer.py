"""Tests for vendor categorization."""

import logging

import pytest

from expense_insights.models.category import (
    DEFAULT_RULES,
    OTHER_CATEGORY,
    CategoryRule,
    RuleTable,
)
from expense_insights.processing.categorizer import Categorizer, categorize


class TestCategorizer:
    """Tests for Categorizer with the built-in rules."""

    @pytest.fixture
    def categorizer(self) -> Categorizer:
        return Categorizer()

    @pytest.mark.parametrize(
        "vendor,expected",
        [
            ("swiggy", "Food"),
            ("  NETFLIX  ", "Entertainment"),
            ("Amazon Fresh", "Groceries"),
            ("amazon", "Shopping"),
            ("Blinkit", "Groceries"),
            ("Instamart", "Groceries"),
        ],
    )
    def test_exact_match(self, categorizer: Categorizer, vendor: str, expected: str) -> None:
        assert categorizer.categorize(vendor) == expected

    @pytest.mark.parametrize(
        "vendor,expected",
        [
            ("UBER TRIP 1234", "Transport"),
            ("Amazon Pay India", "Shopping"),
            ("Apollo Pharmacy Koramangala", "Health"),
            ("Spotify AB", "Entertainment"),
        ],
    )
    def test_containment_match(self, categorizer: Categorizer, vendor: str, expected: str) -> None:
        assert categorizer.categorize(vendor) == expected

    def test_first_declared_keyword_wins(self, categorizer: Categorizer) -> None:
        """Food is declared before Groceries, so swiggy beats instamart."""
        assert categorizer.categorize("Swiggy Instamart") == "Food"

    def test_short_keywords_match_inside_words(self, categorizer: Categorizer) -> None:
        """Containment is plain substring matching, not word matching."""
        assert categorizer.categorize("Coca Cola") == "Transport"  # "ola"
        assert categorizer.categorize("David's Bakery") == "Utilities"  # "vi"

    def test_unmatched_is_other(self, categorizer: Categorizer) -> None:
        assert categorizer.categorize("Corner Hardware") == OTHER_CATEGORY

    @pytest.mark.parametrize("vendor", [None, "", "   "])
    def test_empty_is_other(self, categorizer: Categorizer, vendor) -> None:
        assert categorizer.categorize(vendor) == OTHER_CATEGORY

    def test_list_mappings_is_read_only(self, categorizer: Categorizer) -> None:
        mappings = categorizer.list_mappings()
        assert mappings["zomato"] == "Food"
        with pytest.raises(TypeError):
            mappings["zomato"] = "Other"  # type: ignore[index]

    def test_list_mappings_keeps_declared_order(self, categorizer: Categorizer) -> None:
        keywords = list(categorizer.list_mappings())
        assert keywords[0] == "swiggy"
        assert keywords.index("blinkit") < keywords.index("big bazaar")
        assert len(keywords) == len(DEFAULT_RULES)

    def test_categories_include_other(self, categorizer: Categorizer) -> None:
        categories = categorizer.categories
        assert categories[0] == "Food"
        assert categories[-1] == OTHER_CATEGORY
        assert "Finance" in categories

    def test_module_level_helper(self) -> None:
        assert categorize("Zomato Order") == "Food"


class TestRuleTable:
    """Tests for custom rule tables."""

    def test_exact_match_beats_earlier_containment(self) -> None:
        table = RuleTable([CategoryRule("foo", "A"), CategoryRule("foobar", "B")])
        categorizer = Categorizer(table)
        assert categorizer.categorize("FooBar") == "B"
        assert categorizer.categorize("foobar ltd") == "A"

    def test_duplicate_keyword_takes_last_category(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.WARNING, logger="expense_insights")
        table = RuleTable([
            CategoryRule("acme", "A"),
            CategoryRule("zen", "C"),
            CategoryRule("ACME ", "B"),
        ])

        assert len(table) == 2
        assert table.lookup("acme") == "B"
        assert [r.keyword for r in table] == ["acme", "zen"]
        assert Categorizer(table).categorize("Acme Zen Store") == "B"
        assert "acme" in caplog.text

    def test_default_rules_have_no_duplicates(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="expense_insights")
        assert len(RuleTable.default()) == len(DEFAULT_RULES)
        assert caplog.text == ""

    def test_rule_normalizes_keyword(self) -> None:
        rule = CategoryRule("  Big Bazaar ", " Groceries ")
        assert rule.keyword == "big bazaar"
        assert rule.category == "Groceries"

    @pytest.mark.parametrize("keyword,category", [("", "Food"), ("swiggy", "  ")])
    def test_rule_rejects_empty_values(self, keyword: str, category: str) -> None:
        with pytest.raises(ValueError):
            CategoryRule(keyword, category)

    def test_rule_from_dict(self) -> None:
        rule = CategoryRule.from_dict({"keyword": "Zepto", "category": "Groceries"})
        assert rule == CategoryRule("zepto", "Groceries")
