"""LLM prompt templates for tech stack analysis.

Templates use ``{{placeholder}}`` tokens rendered by ``format_prompt``.
Prompts are always built from the deterministic analysis data; the model is
only asked to describe, categorize or filter what the manifests declare.
"""

import json
from collections.abc import Iterable, Mapping

from stackscan.models.dependency import CanonicalDependency, Ecosystem

# =============================================================================
# System prompts
# =============================================================================

DESCRIPTION_SYSTEM_PROMPT = (
    "You are a technical expert who specializes in analyzing project dependencies "
    "and providing clear, concise descriptions of tech stacks."
)

CATEGORIZATION_SYSTEM_PROMPT = (
    "You are a technical expert who specializes in categorizing software dependencies."
)

FILTER_SYSTEM_PROMPT = (
    "You are a technical expert who filters lists of software dependencies. "
    "You answer with a JSON array of dependency names and nothing else."
)

# =============================================================================
# User prompt templates
# =============================================================================

NODE_ANALYSIS_PROMPT = """Analyze the following Node.js project dependencies and provide insights about:
1. The main frameworks and libraries used
2. The development and build tooling
3. Testing and quality assurance tools with testing frameworks
4. Any notable patterns or architectural choices suggested by the dependencies

Dependencies:
{{dependencies}}

Categories detected so far:
{{categories}}

Please provide a professional summary in {{format}} format that would be suitable for a project description or CV.
Keep it concise: a short paragraph per point, no more."""

PYTHON_ANALYSIS_PROMPT = """Analyze the following Python project dependencies and provide insights about:
1. The main frameworks and libraries used
2. Data processing and storage capabilities
3. Testing and development tools
4. Any notable patterns or architectural choices suggested by the dependencies

Dependencies:
{{dependencies}}

Categories detected so far:
{{categories}}

Please provide a professional summary in {{format}} format that would be suitable for a project description or CV.
Keep it concise: a short paragraph per point, no more."""

CATEGORIZATION_PROMPT = """Categorize the following dependencies into meaningful groups:
{{dependencies}}

Group them into appropriate categories such as:
- Frontend Frameworks
- Backend Frameworks
- Testing Tools
- Build Tools
- Database
- Utilities
etc.

Consider the following guidelines:
1. Create logical groupings based on primary purpose
2. Place multi-purpose libraries in their most common use case
3. Create new categories if needed for specialized tools
4. Ensure each dependency is categorized appropriately

Return the categorization as a JSON object where each key is a category and the value is an array of dependency names."""

FOCUS_AREA_PROMPT = """Filter and return ONLY the dependencies from the list below that are relevant to {{focusArea}} development.

Dependencies:
{{dependencies}}

The focus area is one of: frontend, backend, or fullstack.
- frontend: UI frameworks, styling, client-side state, bundlers and browser tooling
- backend: servers, APIs, databases, ORMs, queues and server-side runtimes
- fullstack: everything that belongs to frontend or backend

Return the result as a JSON array of dependency names copied exactly from the list.
NO descriptions. NO explanations. NO categories. Only the JSON array."""

TECH_FOCUS_PROMPT = """Filter and return ONLY the dependencies from the list below that belong to the {{techFocus}} ecosystem.

Dependencies:
{{dependencies}}

Include:
- Core libraries and frameworks of {{techFocus}}
- Testing tools commonly used with {{techFocus}}
- Development tools built for {{techFocus}}
- Related ecosystem packages (state management, routing, styling, typings)

Return the result as a JSON array of dependency names copied exactly from the list.
NO descriptions. NO explanations. NO categories. Only the JSON array."""

ANALYSIS_PROMPTS: dict[Ecosystem, str] = {
    Ecosystem.NODE: NODE_ANALYSIS_PROMPT,
    Ecosystem.PYTHON: PYTHON_ANALYSIS_PROMPT,
}


def format_prompt(template: str, variables: Mapping[str, str]) -> str:
    """Render a template by replacing every ``{{name}}`` occurrence.

    Placeholders without a matching variable are left untouched.

    Args:
        template: Template text
        variables: Placeholder name -> replacement text

    Returns:
        Rendered prompt

    Examples:
        >>> format_prompt("{{a}} and {{a}} but {{b}}", {"a": "x"})
        'x and x but {{b}}'
    """
    prompt = template
    for key, value in variables.items():
        prompt = prompt.replace("{{" + key + "}}", value)
    return prompt


def format_dependency_list(dependencies: Iterable[CanonicalDependency]) -> str:
    """Format dependencies as a JSON list of name/version objects."""
    return json.dumps(
        [{"name": d.name, "version": d.version} for d in dependencies],
        indent=2,
    )


def build_description_prompt(
    ecosystem: Ecosystem,
    dependencies: Iterable[CanonicalDependency],
    categories: Mapping[str, list[str]] | None = None,
    output_format: str = "markdown",
) -> str:
    """Build the user prompt asking for a description of one ecosystem's stack.

    Args:
        ecosystem: Ecosystem the dependencies belong to
        dependencies: Parsed dependencies
        categories: Rule-based categories, if already computed
        output_format: Markup the answer should use

    Returns:
        Rendered prompt
    """
    return format_prompt(
        ANALYSIS_PROMPTS[ecosystem],
        {
            "dependencies": format_dependency_list(dependencies),
            "categories": json.dumps(dict(categories or {}), indent=2),
            "format": output_format,
        },
    )


def build_categorization_prompt(dependencies: Iterable[CanonicalDependency]) -> str:
    """Build the prompt asking the model to group dependencies."""
    return format_prompt(
        CATEGORIZATION_PROMPT,
        {"dependencies": format_dependency_list(dependencies)},
    )


def build_focus_area_prompt(technologies: list[str], focus_area: str) -> str:
    """Build the prompt filtering technologies by frontend/backend/fullstack."""
    return format_prompt(
        FOCUS_AREA_PROMPT,
        {"dependencies": json.dumps(technologies), "focusArea": focus_area},
    )


def build_tech_focus_prompt(technologies: list[str], tech_focus: str) -> str:
    """Build the prompt filtering technologies by a named technology."""
    return format_prompt(
        TECH_FOCUS_PROMPT,
        {"dependencies": json.dumps(technologies), "techFocus": tech_focus},
    )
