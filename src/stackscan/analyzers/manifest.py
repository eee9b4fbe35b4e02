"""Dependency manifest reading and parsing.

Converts manifest content into canonical dependency records:
- package.json (Node.js): dependencies, then devDependencies
- requirements.txt (Python): one requirement per line

Reading from disk is kept separate from parsing so the parsers operate on
already-decoded content.
"""

import json
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from stackscan.models.dependency import CanonicalDependency, DependencyKind, Ecosystem
from stackscan.utils.logging import get_logger

_logger = get_logger(__name__)

# Manifest file name per ecosystem
MANIFEST_FILES: dict[Ecosystem, str] = {
    Ecosystem.NODE: "package.json",
    Ecosystem.PYTHON: "requirements.txt",
}

# package.json dependency groups, in output order
_NODE_GROUPS: tuple[tuple[str, DependencyKind], ...] = (
    ("dependencies", DependencyKind.RUNTIME),
    ("devDependencies", DependencyKind.DEVELOPMENT),
)

# Range characters removed from npm version strings
_NODE_VERSION_STRIP = re.compile(r"[\^~>=<\s]")

# name, operator, version; two-character operators are tried first
_REQUIREMENT_PATTERN = re.compile(r"^([A-Za-z0-9\-_.]+)(?:([<>=!~]=|[<>])(.+))?$")


class ManifestError(Exception):
    """Base exception for manifest problems."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class ManifestMissingError(ManifestError):
    """Raised when a manifest file does not exist."""


class ManifestUnparseableError(ManifestError):
    """Raised when manifest content is structurally invalid."""


# =============================================================================
# Parsing
# =============================================================================


def normalize_node_version(version: str) -> str:
    """Strip npm range operators and whitespace from a version string.

    Examples:
        >>> normalize_node_version("^17.0.0")
        '17.0.0'
        >>> normalize_node_version(">= 1.2 < 2")
        '1.22'
    """
    return _NODE_VERSION_STRIP.sub("", version)


def parse_node_manifest(raw: Mapping[str, Any]) -> list[CanonicalDependency]:
    """Parse a decoded package.json object.

    Args:
        raw: Decoded package.json content

    Returns:
        Runtime dependencies followed by development dependencies

    Raises:
        ManifestUnparseableError: If a dependency group is not an object or a
            version is not a string
    """
    if not isinstance(raw, Mapping):
        raise ManifestUnparseableError("package.json must contain a JSON object")

    dependencies: list[CanonicalDependency] = []

    for group, kind in _NODE_GROUPS:
        entries = raw.get(group)
        if entries is None:
            continue
        if not isinstance(entries, Mapping):
            raise ManifestUnparseableError(
                f"'{group}' must be an object, got {type(entries).__name__}"
            )

        for name, version in entries.items():
            if not isinstance(version, str):
                raise ManifestUnparseableError(
                    f"Version of '{name}' in '{group}' must be a string"
                )
            try:
                dependencies.append(
                    CanonicalDependency(
                        name=name,
                        version=normalize_node_version(version),
                        kind=kind,
                    )
                )
            except ValueError as e:
                raise ManifestUnparseableError(f"Invalid entry in '{group}': {e}") from e

    return dependencies


def parse_requirement_line(line: str) -> CanonicalDependency:
    """Parse a single requirements.txt line.

    Lines that do not match ``name[op version]`` are kept whole as the name
    with an empty version.

    Examples:
        >>> parse_requirement_line("numpy~=1.20.0")
        CanonicalDependency(name='numpy', version='1.20.0', kind=None, constraint='~=')
    """
    line = line.strip()
    match = _REQUIREMENT_PATTERN.match(line)

    if not match:
        return CanonicalDependency(name=line)

    name, constraint, version = match.groups()
    return CanonicalDependency(
        name=name,
        version=(version or "").strip(),
        constraint=constraint,
    )


def parse_python_requirements(lines: Iterable[str]) -> list[CanonicalDependency]:
    """Parse requirement lines into canonical dependencies.

    Comment and blank lines are expected to be removed by the reader.

    Args:
        lines: Requirement lines

    Returns:
        One dependency per line, in order
    """
    return [parse_requirement_line(line) for line in lines]


# =============================================================================
# File access
# =============================================================================


def detect_ecosystems(project_path: Path) -> frozenset[Ecosystem]:
    """Detect which ecosystems have a manifest in the project directory.

    Args:
        project_path: Project root directory

    Returns:
        Ecosystems whose manifest file exists (empty if none)
    """
    present = frozenset(
        ecosystem
        for ecosystem, filename in MANIFEST_FILES.items()
        if (project_path / filename).is_file()
    )
    _logger.debug(
        "Detected ecosystems in %s: %s",
        project_path,
        ", ".join(sorted(e.value for e in present)) or "none",
    )
    return present


def _read_manifest_text(file_path: Path) -> str:
    """Read a manifest as UTF-8, mapping I/O failures onto manifest errors."""
    try:
        return file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestMissingError(f"{file_path.name} not found at {file_path}", file_path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestUnparseableError(f"Error reading {file_path.name}: {e}", file_path) from e


def read_package_json(file_path: Path) -> dict[str, Any]:
    """Read and decode a package.json file.

    Raises:
        ManifestMissingError: If the file does not exist
        ManifestUnparseableError: If the file is unreadable or not valid JSON
    """
    if not file_path.is_file():
        raise ManifestMissingError(f"package.json not found at {file_path}", file_path)

    content = _read_manifest_text(file_path)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestUnparseableError(
            f"Error reading package.json: {e}", file_path
        ) from e

    if not isinstance(data, dict):
        raise ManifestUnparseableError("package.json must contain a JSON object", file_path)
    return data


def read_requirements(file_path: Path) -> list[str]:
    """Read requirement lines, dropping blank lines and comments.

    Raises:
        ManifestMissingError: If the file does not exist
        ManifestUnparseableError: If the file is unreadable or not UTF-8
    """
    if not file_path.is_file():
        raise ManifestMissingError(f"requirements.txt not found at {file_path}", file_path)

    content = _read_manifest_text(file_path)
    lines = (line.strip() for line in content.splitlines())
    return [line for line in lines if line and not line.startswith("#")]


def load_dependencies(project_path: Path, ecosystem: Ecosystem) -> list[CanonicalDependency]:
    """Read and parse the manifest of one ecosystem.

    Args:
        project_path: Project root directory
        ecosystem: Ecosystem whose manifest to load

    Returns:
        Parsed dependencies

    Raises:
        ManifestMissingError: If the manifest is absent
        ManifestUnparseableError: If the manifest is structurally invalid
    """
    file_path = project_path / MANIFEST_FILES[ecosystem]

    if ecosystem is Ecosystem.NODE:
        try:
            dependencies = parse_node_manifest(read_package_json(file_path))
        except ManifestUnparseableError as e:
            e.path = e.path or file_path
            raise
    else:
        dependencies = parse_python_requirements(read_requirements(file_path))

    _logger.debug("Parsed %s: %d dependencies", file_path.name, len(dependencies))
    return dependencies
