"""Output rendering for stackscan.

Provides the OutputFormatter for category maps and technology lists, plus
small text transforms shared with the summary template.
"""

from stackscan.renderers.filters import (
    collapse_blank_lines,
    extract_bullet_items,
    extract_major_version,
    markdown_to_plain_text,
)
from stackscan.renderers.formatter import (
    FOCUS_AREAS,
    TECH_FOCUS_MAP,
    FormatterOptions,
    OutputFormat,
    OutputFormatter,
)

__all__ = [
    "FOCUS_AREAS",
    "FormatterOptions",
    "OutputFormat",
    "OutputFormatter",
    "TECH_FOCUS_MAP",
    "collapse_blank_lines",
    "extract_bullet_items",
    "extract_major_version",
    "markdown_to_plain_text",
]
