"""Canonical dependency entities.

This module contains the entities produced by manifest parsing:
- Ecosystem: Package ecosystem a manifest belongs to
- DependencyKind: Runtime vs development dependency
- CanonicalDependency: Single parsed dependency declaration
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Ecosystem(Enum):
    """Package ecosystem detected from a manifest file."""

    NODE = "node"
    PYTHON = "python"


class DependencyKind(Enum):
    """Dependency group a Node package was declared in."""

    RUNTIME = "runtime"
    DEVELOPMENT = "development"


@dataclass(frozen=True)
class CanonicalDependency:
    """Single dependency declaration in canonical form.

    Attributes:
        name: Package identifier as declared (case preserved)
        version: Bare version string ("" when unknown)
        kind: Dependency group for Node packages, None for Python
        constraint: Version operator for Python requirements (e.g. "==", "~=")
    """

    name: str
    version: str = ""
    kind: DependencyKind | None = None
    constraint: str | None = None

    def __post_init__(self) -> None:
        """Validate that the dependency has a name."""
        if not self.name or not self.name.strip():
            raise ValueError("Dependency name cannot be empty")

    @property
    def match_name(self) -> str:
        """Lower-cased name used for keyword matching."""
        return self.name.lower()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {"name": self.name, "version": self.version}
        if self.kind is not None:
            data["kind"] = self.kind.value
        if self.constraint is not None:
            data["constraint"] = self.constraint
        return data
