"""Tech stack analysis orchestration.

Runs the deterministic steps first (manifest parsing, rule-based
categorization), then asks the completion client for a description of each
ecosystem. Problems that only affect one ecosystem are recorded as warnings
on the snapshot instead of aborting the run.
"""

from pathlib import Path

from stackscan.analyzers.categorizer import categorizer_for
from stackscan.analyzers.manifest import (
    MANIFEST_FILES,
    ManifestMissingError,
    ManifestUnparseableError,
    detect_ecosystems,
    load_dependencies,
)
from stackscan.llm.client import CompletionClient, LLMError
from stackscan.models.analysis import AnalysisWarning, EcosystemStack, TechStackSnapshot
from stackscan.models.dependency import CanonicalDependency, Ecosystem
from stackscan.templates.renderer import SummaryRenderer
from stackscan.utils.logging import get_logger

_logger = get_logger(__name__)

# Ecosystems are always processed in this order
PROCESSING_ORDER: tuple[Ecosystem, ...] = (Ecosystem.NODE, Ecosystem.PYTHON)


class DependencyAnalyzer:
    """Analyzes the dependency manifests of one project.

    Usage:
        analyzer = DependencyAnalyzer(Path("."), client)
        snapshot = await analyzer.analyze()
        print(analyzer.generate_summary(snapshot))

    Without a client, no descriptions are generated and no warning is recorded.
    """

    def __init__(
        self,
        project_path: Path,
        client: CompletionClient | None = None,
        output_format: str = "markdown",
    ) -> None:
        """Initialize the analyzer.

        Args:
            project_path: Project root directory
            client: Completion client for descriptions (None disables AI)
            output_format: Markup requested for generated descriptions
        """
        self.project_path = project_path
        self.client = client
        self.output_format = output_format

    async def analyze(self) -> TechStackSnapshot:
        """Detect, parse, categorize and describe every ecosystem present.

        Returns:
            Immutable snapshot of the analysis
        """
        present = detect_ecosystems(self.project_path)
        if not present:
            _logger.info("No recognized dependency files found in %s", self.project_path)
            return TechStackSnapshot()

        warnings: list[AnalysisWarning] = []
        stacks: dict[Ecosystem, EcosystemStack] = {}

        for ecosystem in PROCESSING_ORDER:
            if ecosystem not in present:
                continue
            stack = await self._analyze_ecosystem(ecosystem, warnings)
            if stack is not None:
                stacks[ecosystem] = stack

        return TechStackSnapshot(
            ecosystems_present=frozenset(stacks),
            node=stacks.get(Ecosystem.NODE),
            python=stacks.get(Ecosystem.PYTHON),
            warnings=tuple(warnings),
        )

    async def _analyze_ecosystem(
        self,
        ecosystem: Ecosystem,
        warnings: list[AnalysisWarning],
    ) -> EcosystemStack | None:
        """Analyze one ecosystem, appending any degradation to warnings.

        Returns:
            The ecosystem's stack, or None if its manifest disappeared
        """
        manifest = self.project_path / MANIFEST_FILES[ecosystem]

        try:
            dependencies = load_dependencies(self.project_path, ecosystem)
        except ManifestMissingError:
            _logger.debug("%s vanished before it could be read", manifest)
            return None
        except ManifestUnparseableError as e:
            _logger.warning("Could not parse %s: %s", manifest.name, e)
            warnings.append(
                AnalysisWarning(
                    component="manifest",
                    message=str(e),
                    ecosystem=ecosystem,
                    file_path=str(e.path or manifest),
                )
            )
            dependencies = []

        categories = categorizer_for(ecosystem).categorize(dependencies)
        _logger.info(
            "%s: %d dependencies in %d categories",
            manifest.name,
            len(dependencies),
            len(categories),
        )

        description = await self._describe(ecosystem, dependencies, categories, warnings)

        return EcosystemStack(
            dependencies=tuple(dependencies),
            categories=categories,
            description=description,
        )

    async def _describe(
        self,
        ecosystem: Ecosystem,
        dependencies: list[CanonicalDependency],
        categories: dict[str, list[str]],
        warnings: list[AnalysisWarning],
    ) -> str | None:
        """Generate a best-effort description; failures become warnings."""
        if self.client is None:
            return None

        try:
            return await self.client.generate_description(
                ecosystem,
                dependencies,
                categories,
                self.output_format,
            )
        except LLMError as e:
            _logger.warning("Could not describe %s stack: %s", ecosystem.value, e)
            warnings.append(
                AnalysisWarning(
                    component="description",
                    message=str(e),
                    ecosystem=ecosystem,
                )
            )
            return None

    def generate_summary(self, snapshot: TechStackSnapshot) -> str:
        """Render the snapshot as the markdown summary document."""
        return SummaryRenderer().render(snapshot)
