"""Deterministic analyzers for stackscan.

This module provides:
- Manifest reading and parsing (package.json, requirements.txt)
- Rule-based dependency categorization

The orchestrating DependencyAnalyzer lives in stackscan.analyzers.dependency.
"""

from stackscan.analyzers.categorizer import (
    FALLBACK_CATEGORY,
    NODE_RULES,
    PYTHON_RULES,
    CategoryRule,
    RuleBasedCategorizer,
    categorize,
    categorizer_for,
)
from stackscan.analyzers.manifest import (
    MANIFEST_FILES,
    ManifestError,
    ManifestMissingError,
    ManifestUnparseableError,
    detect_ecosystems,
    load_dependencies,
    parse_node_manifest,
    parse_python_requirements,
)

__all__ = [
    "CategoryRule",
    "FALLBACK_CATEGORY",
    "MANIFEST_FILES",
    "ManifestError",
    "ManifestMissingError",
    "ManifestUnparseableError",
    "NODE_RULES",
    "PYTHON_RULES",
    "RuleBasedCategorizer",
    "categorize",
    "categorizer_for",
    "detect_ecosystems",
    "load_dependencies",
    "parse_node_manifest",
    "parse_python_requirements",
]
