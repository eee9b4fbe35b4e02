"""Analysis result entities.

This module contains entities related to analysis results:
- AnalysisWarning: Non-fatal degradation encountered during analysis
- EcosystemStack: Parsed, categorized and described dependencies of one ecosystem
- TechStackSnapshot: Aggregated result of one analysis run
"""

from dataclasses import dataclass, field
from typing import Any

from stackscan.models.dependency import CanonicalDependency, Ecosystem

# Category label -> ordered dependency names
CategoryMap = dict[str, list[str]]


@dataclass(frozen=True)
class AnalysisWarning:
    """Non-fatal problem encountered during analysis.

    Attributes:
        component: Component that degraded (manifest, description)
        message: Warning description
        ecosystem: Ecosystem the warning applies to
        file_path: Manifest that caused the warning (if applicable)
    """

    component: str
    message: str
    ecosystem: Ecosystem | None = None
    file_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "component": self.component,
            "message": self.message,
            "ecosystem": self.ecosystem.value if self.ecosystem else None,
            "file_path": self.file_path,
        }


@dataclass(frozen=True)
class EcosystemStack:
    """Dependencies of a single ecosystem with their categories.

    Attributes:
        dependencies: Parsed dependencies in manifest order
        categories: Category label -> dependency names
        description: AI-generated overview, None when unavailable
    """

    dependencies: tuple[CanonicalDependency, ...] = ()
    categories: CategoryMap = field(default_factory=dict)
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "dependencies": [d.to_dict() for d in self.dependencies],
            "categories": {k: list(v) for k, v in self.categories.items()},
        }
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class TechStackSnapshot:
    """Result of one analysis run.

    Built fresh by the analyzer and never modified afterwards.

    Attributes:
        ecosystems_present: Ecosystems whose manifest was found
        node: Node.js stack (None when package.json is absent)
        python: Python stack (None when requirements.txt is absent)
        warnings: Non-fatal problems surfaced to the caller
    """

    ecosystems_present: frozenset[Ecosystem] = frozenset()
    node: EcosystemStack | None = None
    python: EcosystemStack | None = None
    warnings: tuple[AnalysisWarning, ...] = ()

    @property
    def detected(self) -> bool:
        """Return True if at least one manifest was found."""
        return bool(self.ecosystems_present)

    @property
    def project_type(self) -> str:
        """Return node, python, both or unknown."""
        if len(self.ecosystems_present) > 1:
            return "both"
        if Ecosystem.NODE in self.ecosystems_present:
            return "node"
        if Ecosystem.PYTHON in self.ecosystems_present:
            return "python"
        return "unknown"

    def stacks(self) -> list[tuple[Ecosystem, EcosystemStack]]:
        """Return present stacks in processing order (Node first)."""
        result: list[tuple[Ecosystem, EcosystemStack]] = []
        if self.node is not None:
            result.append((Ecosystem.NODE, self.node))
        if self.python is not None:
            result.append((Ecosystem.PYTHON, self.python))
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data: dict[str, Any] = {"type": self.project_type}
        for ecosystem, stack in self.stacks():
            data[ecosystem.value] = stack.to_dict()
        if self.warnings:
            data["warnings"] = [w.to_dict() for w in self.warnings]
        return data
