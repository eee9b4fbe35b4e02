"""Output formatting with optional AI-driven filtering.

Renders technology lists and category maps as bulleted text, a markdown
document, a single comma-joined line or JSON. When a focus area or a
technology focus is requested, the completion client narrows the list first.
Filtering is best-effort: any failure falls back to the unfiltered list.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from stackscan.llm.client import CompletionClient
from stackscan.llm.prompts import build_focus_area_prompt, build_tech_focus_prompt
from stackscan.models.dependency import CanonicalDependency
from stackscan.renderers.filters import extract_bullet_items, extract_major_version

logger = logging.getLogger(__name__)


class OutputFormat(Enum):
    """Supported output formats."""

    TEXT = "text"
    MARKDOWN = "markdown"
    INLINE = "inline"
    JSON = "json"


@dataclass(frozen=True)
class FormatStyle:
    """Markup used by a text-like output format.

    Attributes:
        subheader: Prefix for category headings
        bullet: Prefix for list items
    """

    subheader: str
    bullet: str


FORMAT_STYLES: dict[OutputFormat, FormatStyle] = {
    OutputFormat.TEXT: FormatStyle(subheader="", bullet="• "),
    OutputFormat.MARKDOWN: FormatStyle(subheader="## ", bullet="- "),
    OutputFormat.INLINE: FormatStyle(subheader="", bullet=""),
}

# Focus areas accepted by the focus-area filter
FOCUS_AREAS = frozenset({"frontend", "backend", "fullstack"})

# Related package keywords used to pre-filter before asking the model
TECH_FOCUS_MAP: dict[str, tuple[str, ...]] = {
    "angular": (
        "@angular",
        "angular",
        "rxjs",
        "zone.js",
        "typescript",
        "@ngrx",
        "jasmine",
        "karma",
        "@angular-devkit",
        "@angular-cli",
        "angular-cli",
    ),
    "react": (
        "react",
        "@types/react",
        "redux",
        "@reduxjs/toolkit",
        "react-router",
        "react-query",
        "recoil",
        "next.js",
        "gatsby",
        "styled-components",
        "emotion",
        "material-ui",
        "@mui",
        "react-testing-library",
        "jest",
    ),
    "vue": (
        "vue",
        "vuex",
        "vue-router",
        "nuxt",
        "vuetify",
        "@vue",
        "vuepress",
        "vue-cli",
        "@vue/cli",
        "vue-test-utils",
    ),
    "node": (
        "express",
        "nest",
        "fastify",
        "koa",
        "prisma",
        "typeorm",
        "sequelize",
        "mongoose",
        "mongodb",
        "postgresql",
        "mysql",
        "redis",
        "@nestjs",
        "@types/express",
        "@types/node",
        "nodemon",
        "pm2",
        "jest",
        "supertest",
    ),
    "python": (
        "django",
        "flask",
        "fastapi",
        "sqlalchemy",
        "alembic",
        "pytest",
        "celery",
        "pandas",
        "numpy",
        "scipy",
        "scikit-learn",
        "tensorflow",
        "pytorch",
    ),
}


@dataclass(frozen=True)
class FormatterOptions:
    """Options controlling filtering and version display.

    Attributes:
        show_versions: Append "(vMAJOR)" to technologies with a known version
        focus_area: Keep only frontend, backend or fullstack technologies
        tech_focus: Keep only technologies related to a named technology
        dependencies: Parsed dependencies used for version lookup
    """

    show_versions: bool = False
    focus_area: str | None = None
    tech_focus: str | None = None
    dependencies: Sequence[CanonicalDependency] = field(default_factory=tuple)

    @property
    def wants_filtering(self) -> bool:
        """Return True if a focus area or technology focus is set."""
        return bool(self.focus_area or self.tech_focus)


def narrow_by_tech_focus(technologies: list[str], tech_focus: str) -> list[str]:
    """Keep technologies related to a known technology.

    Unknown technologies leave the list unchanged.

    Examples:
        >>> narrow_by_tech_focus(["react", "express", "jest"], "React")
        ['react', 'jest']
    """
    keywords = TECH_FOCUS_MAP.get(tech_focus.lower())
    if keywords is None:
        return list(technologies)
    return [
        tech
        for tech in technologies
        if any(keyword in tech.lower() for keyword in keywords)
    ]


class OutputFormatter:
    """Formats technology lists and category maps.

    Usage:
        formatter = OutputFormatter(client)
        text = await formatter.render_categories(categories, OutputFormat.TEXT, options)

    Without a client, focus options are ignored and output is unfiltered.
    """

    def __init__(self, client: CompletionClient | None = None) -> None:
        self.client = client

    async def render(
        self,
        content: str,
        fmt: OutputFormat = OutputFormat.MARKDOWN,
        options: FormatterOptions | None = None,
    ) -> str:
        """Render the technologies listed as bullets in content.

        Args:
            content: Text whose bullet lines name technologies
            fmt: Output format; JSON passes content through unchanged
            options: Filtering and version options

        Returns:
            Rendered technologies
        """
        if fmt is OutputFormat.JSON:
            return content

        options = options or FormatterOptions()
        style = FORMAT_STYLES[fmt]

        technologies = await self._filter_technologies(extract_bullet_items(content), options)
        items = [self._format_item(tech, options) for tech in technologies]

        if fmt is OutputFormat.INLINE:
            return ", ".join(items)
        return "\n".join(f"{style.bullet}{item}" for item in items)

    async def render_categories(
        self,
        categories: Mapping[str, Sequence[str]],
        fmt: OutputFormat = OutputFormat.MARKDOWN,
        options: FormatterOptions | None = None,
    ) -> str:
        """Render a category map, filtered and re-partitioned by category.

        Args:
            categories: Category label -> technology names (not modified)
            fmt: Output format; JSON serializes the map unchanged
            options: Filtering and version options

        Returns:
            Rendered categories in input order, empty categories dropped
        """
        if fmt is OutputFormat.JSON:
            return json.dumps({k: list(v) for k, v in categories.items()}, indent=2)

        options = options or FormatterOptions()
        style = FORMAT_STYLES[fmt]

        all_techs = [tech for members in categories.values() for tech in members]
        kept = set(await self._filter_technologies(all_techs, options))

        sections: list[str] = []
        inline_items: list[str] = []
        for category, members in categories.items():
            items = [self._format_item(m.strip(), options) for m in members if m in kept]
            if not items:
                continue
            if fmt is OutputFormat.INLINE:
                inline_items.extend(items)
                continue
            title = category.replace("_", " ")
            lines = [f"{style.subheader}{title}"]
            lines.extend(f"{style.bullet}{item}" for item in items)
            sections.append("\n".join(lines))

        if fmt is OutputFormat.INLINE:
            return ", ".join(inline_items)
        return "\n\n".join(sections).strip()

    async def _filter_technologies(
        self,
        technologies: list[str],
        options: FormatterOptions,
    ) -> list[str]:
        """Narrow technologies by focus area or technology focus.

        The model's answer replaces the working set only when it names at
        least one candidate. Any failure returns the unfiltered list.
        """
        if not options.wants_filtering:
            return technologies
        if self.client is None:
            logger.debug("No completion client configured, skipping technology filter")
            return technologies

        working = list(technologies)
        try:
            if options.focus_area:
                prompt = build_focus_area_prompt(working, options.focus_area)
            else:
                working = narrow_by_tech_focus(working, options.tech_focus or "")
                prompt = build_tech_focus_prompt(working, options.tech_focus or "")

            answer = await self.client.filter_technologies(prompt)
        except Exception as e:
            logger.warning("Failed to filter technologies: %s", e)
            return technologies

        selected = set(answer)
        filtered = [tech for tech in working if tech in selected]
        if filtered:
            return filtered

        logger.debug("Technology filter returned no known candidates, keeping %d", len(working))
        return working

    @staticmethod
    def _format_item(tech: str, options: FormatterOptions) -> str:
        """Format a technology name with an optional major version suffix."""
        if not options.show_versions:
            return tech
        dep = next((d for d in options.dependencies if d.name == tech), None)
        major = extract_major_version(dep.version) if dep else ""
        return f"{tech} (v{major})" if major else tech
