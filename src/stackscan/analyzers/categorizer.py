"""Rule-based dependency categorization.

Each ecosystem has an ordered decision list of keyword rules. A dependency is
assigned to the first rule whose keywords occur as a substring of its
lower-cased name; dependencies matching no rule go to ``other``.

Rule order and keyword tables are plain data: extend them here without
touching the matching algorithm.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from stackscan.models.analysis import CategoryMap
from stackscan.models.dependency import CanonicalDependency, Ecosystem

# Catch-all category for unmatched dependencies
FALLBACK_CATEGORY = "other"


@dataclass(frozen=True)
class CategoryRule:
    """Keyword rule mapping matching dependency names to a category.

    Attributes:
        category: Category label assigned on match
        keywords: Lower-case substrings that trigger the rule
    """

    category: str
    keywords: tuple[str, ...]

    def matches(self, name: str) -> bool:
        """Return True if any keyword occurs in the lower-cased name."""
        return any(keyword in name for keyword in self.keywords)


# =============================================================================
# Rule tables (order is precedence)
# =============================================================================

NODE_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        "framework",
        ("react", "vue", "angular", "next", "nuxt", "express", "koa", "fastify", "nest"),
    ),
    CategoryRule(
        "testing",
        ("jest", "mocha", "chai", "cypress", "playwright", "vitest", "ava", "karma"),
    ),
    CategoryRule("bundler", ("webpack", "rollup", "parcel", "vite", "esbuild", "babel")),
    CategoryRule("linter", ("eslint", "prettier", "tslint", "stylelint")),
    CategoryRule("typescript", ("typescript", "@types")),
    CategoryRule(
        "utilities",
        ("lodash", "moment", "axios", "chalk", "commander", "dotenv", "uuid"),
    ),
)

PYTHON_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        "web_framework",
        ("django", "flask", "fastapi", "pyramid", "tornado", "aiohttp", "sanic"),
    ),
    CategoryRule("testing", ("pytest", "unittest", "nose", "coverage", "tox", "mock")),
    CategoryRule(
        "database",
        ("sqlalchemy", "django-orm", "psycopg2", "pymongo", "redis", "peewee"),
    ),
    CategoryRule("async", ("asyncio", "aiohttp", "celery", "dramatiq", "rq")),
    CategoryRule(
        "data_science",
        (
            "numpy",
            "pandas",
            "scipy",
            "scikit-learn",
            "tensorflow",
            "pytorch",
            "matplotlib",
        ),
    ),
    CategoryRule(
        "utilities",
        ("requests", "click", "pyyaml", "python-dotenv", "pillow", "beautifulsoup4"),
    ),
)

RULES_BY_ECOSYSTEM: dict[Ecosystem, tuple[CategoryRule, ...]] = {
    Ecosystem.NODE: NODE_RULES,
    Ecosystem.PYTHON: PYTHON_RULES,
}

# Section titles used by the summary document
CATEGORY_TITLES: dict[Ecosystem, dict[str, str]] = {
    Ecosystem.NODE: {
        "framework": "Frameworks",
        "testing": "Testing Tools",
        "bundler": "Build Tools & Bundlers",
        "linter": "Linting & Code Style",
        "typescript": "TypeScript",
        "utilities": "Utilities",
        FALLBACK_CATEGORY: "Other Dependencies",
    },
    Ecosystem.PYTHON: {
        "web_framework": "Web Frameworks",
        "testing": "Testing Tools",
        "database": "Database & ORM",
        "async": "Async & Task Queue",
        "data_science": "Data Science & ML",
        "utilities": "Utilities",
        FALLBACK_CATEGORY: "Other Dependencies",
    },
}


def categorize(
    dependencies: Iterable[CanonicalDependency],
    rules: tuple[CategoryRule, ...],
) -> CategoryMap:
    """Assign every dependency to exactly one category.

    Args:
        dependencies: Dependencies to categorize
        rules: Ordered rules; the first match wins

    Returns:
        Category label -> dependency names, in rule order, empty categories omitted
    """
    buckets: CategoryMap = {rule.category: [] for rule in rules}
    buckets.setdefault(FALLBACK_CATEGORY, [])

    for dep in dependencies:
        name = dep.match_name
        category = next(
            (rule.category for rule in rules if rule.matches(name)),
            FALLBACK_CATEGORY,
        )
        buckets[category].append(dep.name)

    return {category: names for category, names in buckets.items() if names}


class RuleBasedCategorizer:
    """Categorizes dependencies of one ecosystem with a fixed rule list."""

    def __init__(self, rules: tuple[CategoryRule, ...]) -> None:
        self.rules = rules

    def categorize(self, dependencies: Iterable[CanonicalDependency]) -> CategoryMap:
        """Categorize dependencies using this categorizer's rules."""
        return categorize(dependencies, self.rules)


def categorizer_for(ecosystem: Ecosystem) -> RuleBasedCategorizer:
    """Get the rule-based categorizer for an ecosystem."""
    return RuleBasedCategorizer(RULES_BY_ECOSYSTEM[ecosystem])


def category_title(ecosystem: Ecosystem, category: str) -> str:
    """Get the display title of a category.

    Unknown categories fall back to the label with underscores replaced.
    """
    return CATEGORY_TITLES[ecosystem].get(category, category.replace("_", " ").title())
