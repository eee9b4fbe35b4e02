"""Summary document renderer.

Renders a TechStackSnapshot to markdown using the packaged Jinja2 template.
Output is deterministic: the same snapshot always produces the same text.
"""

import logging
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from stackscan.analyzers.categorizer import category_title
from stackscan.models.analysis import EcosystemStack, TechStackSnapshot
from stackscan.models.dependency import Ecosystem
from stackscan.renderers.filters import collapse_blank_lines

logger = logging.getLogger(__name__)

# Section heading per ecosystem
ECOSYSTEM_TITLES: dict[Ecosystem, str] = {
    Ecosystem.NODE: "Node.js Dependencies",
    Ecosystem.PYTHON: "Python Dependencies",
}


class SummaryRenderer:
    """Renders the human-readable tech stack summary.

    Usage:
        renderer = SummaryRenderer()
        markdown = renderer.render(snapshot)
    """

    def __init__(self, template_name: str = "summary.md.j2") -> None:
        """Initialize the renderer.

        Args:
            template_name: Template file inside the stackscan.templates package
        """
        self.template_name = template_name
        self._env = Environment(
            loader=PackageLoader("stackscan", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, snapshot: TechStackSnapshot) -> str:
        """Render a snapshot to markdown.

        Args:
            snapshot: Analysis result

        Returns:
            Markdown document ending with a single newline

        Raises:
            ValueError: If the template cannot be loaded or rendered
        """
        try:
            template = self._env.get_template(self.template_name)
        except Exception as e:
            logger.error("Failed to load template %s: %s", self.template_name, e)
            raise ValueError(f"Template not found: {self.template_name}") from e

        context = self._build_context(snapshot)

        try:
            rendered = template.render(**context)
        except Exception as e:
            logger.error("Template rendering failed: %s", e)
            raise ValueError(f"Template rendering failed: {e}") from e

        return collapse_blank_lines(rendered) + "\n"

    def _build_context(self, snapshot: TechStackSnapshot) -> dict[str, Any]:
        """Build the template rendering context."""
        return {
            "detected": snapshot.detected,
            "stacks": [
                self._stack_context(ecosystem, stack)
                for ecosystem, stack in snapshot.stacks()
            ],
        }

    @staticmethod
    def _stack_context(ecosystem: Ecosystem, stack: EcosystemStack) -> dict[str, Any]:
        sections = [
            {"title": category_title(ecosystem, category), "members": members}
            for category, members in stack.categories.items()
            if members
        ]
        return {
            "title": ECOSYSTEM_TITLES[ecosystem],
            "description": stack.description,
            "sections": sections,
            "empty": not stack.dependencies,
        }
