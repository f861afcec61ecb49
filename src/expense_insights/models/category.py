"""Vendor categorization rule models.

The rule table is built once at startup and never changes while the process
runs. Rule order matters: containment matching returns the first rule in
declared order whose keyword appears in the vendor name, not the longest.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from expense_insights.utils.logging_config import get_logger

logger = get_logger(__name__)

OTHER_CATEGORY = "Other"


@dataclass(frozen=True)
class CategoryRule:
    """Immutable keyword -> category pair.

    Attributes:
        keyword: Lowercase, stripped keyword matched against vendor names.
        category: Category assigned when the keyword matches.
    """

    keyword: str
    category: str

    def __post_init__(self) -> None:
        keyword = (self.keyword or "").strip().lower()
        category = (self.category or "").strip()
        if not keyword:
            raise ValueError("CategoryRule keyword must not be empty")
        if not category:
            raise ValueError(f"CategoryRule '{keyword}' has an empty category")
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "keyword", keyword)
        object.__setattr__(self, "category", category)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "CategoryRule":
        """Create a CategoryRule from a dictionary (e.g., from YAML config)."""
        return cls(keyword=str(data["keyword"]), category=str(data["category"]))


def _rules(category: str, *keywords: str) -> list[CategoryRule]:
    return [CategoryRule(keyword, category) for keyword in keywords]


# Built-in rule table, in declared order.
# "blinkit" is declared with the Food block but maps to Groceries.
DEFAULT_RULES: tuple[CategoryRule, ...] = tuple(
    _rules(
        "Food",
        "swiggy", "zomato", "dominos", "mcdonalds", "kfc", "subway",
        "burger king", "pizza hut", "starbucks", "cafe coffee day",
    )
    + _rules("Groceries", "blinkit")
    + _rules(
        "Groceries",
        "big bazaar", "dmart", "reliance fresh", "more supermarket", "zepto",
        "instamart", "amazon fresh", "grofers", "bigbasket",
    )
    + _rules(
        "Transport",
        "uber", "ola", "rapido", "irctc", "indian railways", "indigo",
        "air india", "spicejet", "makemytrip", "goibibo",
    )
    + _rules(
        "Utilities",
        "bescom", "bwssb", "tata power", "adani electricity", "jio", "airtel",
        "vi", "bsnl", "hathway", "act fibernet",
    )
    + _rules(
        "Entertainment",
        "netflix", "amazon prime", "hotstar", "disney", "spotify",
        "youtube premium", "bookmyshow", "pvr", "inox", "sony liv",
    )
    + _rules(
        "Shopping",
        "amazon", "flipkart", "myntra", "ajio", "nykaa", "meesho", "snapdeal",
    )
    + _rules(
        "Health",
        "apollo pharmacy", "medplus", "1mg", "pharmeasy", "netmeds",
        "cult.fit", "curefit", "lybrate",
    )
    + _rules(
        "Education",
        "udemy", "coursera", "unacademy", "byju", "vedantu", "upgrad",
    )
    + _rules(
        "Finance",
        "zerodha", "groww", "paytm money", "hdfc bank", "sbi", "icici", "lic",
    )
)


class RuleTable:
    """Read-only, ordered collection of categorization rules.

    A keyword declared more than once takes the category of its last
    declaration but keeps the position of its first, so exact and
    containment matching always agree.
    """

    def __init__(self, rules: Iterable[CategoryRule]):
        exact: dict[str, str] = {}
        for rule in rules:
            previous = exact.get(rule.keyword)
            if previous is not None and previous != rule.category:
                logger.warning(
                    f"Keyword '{rule.keyword}' declared again: {previous} replaced by {rule.category}"
                )
            exact[rule.keyword] = rule.category

        self._rules = tuple(CategoryRule(keyword, category) for keyword, category in exact.items())
        self._exact = MappingProxyType(exact)

    @classmethod
    def default(cls) -> "RuleTable":
        return cls(DEFAULT_RULES)

    @property
    def rules(self) -> tuple[CategoryRule, ...]:
        return self._rules

    @property
    def mappings(self) -> Mapping[str, str]:
        """Keyword -> category view, in declared order."""
        return self._exact

    @property
    def categories(self) -> list[str]:
        """Distinct categories in first-declared order."""
        seen: dict[str, None] = {}
        for rule in self._rules:
            seen.setdefault(rule.category, None)
        return list(seen)

    def lookup(self, keyword: str) -> str | None:
        """Return the category for an exact keyword, if declared."""
        return self._exact.get(keyword)

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({len(self._rules)} rules, {len(self.categories)} categories)"
