"""stackscan data models.

This module exports all core entities used throughout the application:
- CanonicalDependency: Single parsed dependency declaration
- DependencyKind: Runtime vs development dependency
- Ecosystem: Node or Python
- EcosystemStack: Dependencies, categories and description of one ecosystem
- TechStackSnapshot: Aggregated analysis result
- AnalysisWarning: Non-fatal problems encountered during analysis
- LLMConfig: Completion service configuration
"""

from stackscan.models.analysis import (
    AnalysisWarning,
    CategoryMap,
    EcosystemStack,
    TechStackSnapshot,
)
from stackscan.models.dependency import CanonicalDependency, DependencyKind, Ecosystem
from stackscan.models.llm_config import VALID_PROVIDERS, LLMConfig

__all__ = [
    "AnalysisWarning",
    "CanonicalDependency",
    "CategoryMap",
    "DependencyKind",
    "Ecosystem",
    "EcosystemStack",
    "LLMConfig",
    "TechStackSnapshot",
    "VALID_PROVIDERS",
]
