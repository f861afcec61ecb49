"""Vendor categorizer using the static keyword rule table."""

from typing import Mapping, Optional

from expense_insights.models.category import OTHER_CATEGORY, RuleTable
from expense_insights.utils.logging_config import get_logger

logger = get_logger(__name__)


class Categorizer:
    """Maps a free-text vendor name to a category.

    Matching, in order:
    1. Exact match of the normalized vendor name against a keyword
    2. First keyword, in declared order, contained in the vendor name
    3. "Other"

    Step 2 is first-declared, not longest, match: "coca cola" contains
    "ola" and lands in Transport. Rule order is part of the behavior.
    """

    def __init__(self, rule_table: Optional[RuleTable] = None):
        """Initialize categorizer.

        Args:
            rule_table: Rules to match against. Defaults to the built-in table.
        """
        self.rule_table = rule_table if rule_table is not None else RuleTable.default()

    def categorize(self, vendor_name: Optional[str]) -> str:
        """Categorize a vendor name.

        Args:
            vendor_name: Raw vendor string (case and surrounding whitespace
                are ignored).

        Returns:
            The matched category, or "Other".
        """
        if not vendor_name or not vendor_name.strip():
            return OTHER_CATEGORY

        normalized = vendor_name.strip().lower()

        exact = self.rule_table.lookup(normalized)
        if exact is not None:
            logger.debug(f"Exact rule match for {vendor_name!r}: {exact}")
            return exact

        for rule in self.rule_table:
            if rule.keyword in normalized:
                logger.debug(
                    f"Keyword '{rule.keyword}' matched {vendor_name!r}: {rule.category}"
                )
                return rule.category

        return OTHER_CATEGORY

    def list_mappings(self) -> Mapping[str, str]:
        """Return the read-only keyword -> category mapping."""
        return self.rule_table.mappings

    @property
    def categories(self) -> list[str]:
        """Known categories including the fallback."""
        known = self.rule_table.categories
        if OTHER_CATEGORY not in known:
            known.append(OTHER_CATEGORY)
        return known


def categorize(vendor_name: Optional[str], rule_table: Optional[RuleTable] = None) -> str:
    """Convenience function to categorize one vendor name.

    Args:
        vendor_name: Raw vendor string.
        rule_table: Optional rule table (defaults to the built-in rules).

    Returns:
        The matched category, or "Other".
    """
    return Categorizer(rule_table).categorize(vendor_name)
