"""Text transforms for rendered output.

Small pure functions shared by the summary template and the output
formatter: blank-line cleanup, markdown to plain text conversion, bullet
extraction and version shortening.
"""

import re

# Glyphs that mark a bullet line in rendered or AI-generated text
BULLET_GLYPHS: tuple[str, ...] = ("•", "-", "*")

_HEADING_MARKER = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


def collapse_blank_lines(text: str) -> str:
    """Collapse runs of blank lines to a single blank line and trim the ends.

    Examples:
        >>> collapse_blank_lines("a\\n\\n\\n\\nb\\n\\n")
        'a\\n\\nb'
    """
    return _EXCESS_BLANK_LINES.sub("\n\n", text).strip()


def markdown_to_plain_text(markdown: str) -> str:
    """Convert the summary document to plain text.

    Heading markers are removed and blank lines dropped, so each heading is
    directly followed by its content.

    Examples:
        >>> markdown_to_plain_text("# Title\\n\\n## Section\\nreact, vue")
        'Title\\nSection\\nreact, vue'
    """
    text = _HEADING_MARKER.sub("", markdown)
    lines = [line for line in text.split("\n") if line.strip()]
    return "\n".join(lines)


def extract_bullet_items(content: str) -> list[str]:
    """Extract technology names from bullet lines.

    Only lines starting with a recognized bullet glyph qualify; the first word
    after the glyph is taken as the name, so version suffixes are dropped.

    Examples:
        >>> extract_bullet_items("Header\\n• react (v17)\\n- vue\\nFooter")
        ['react', 'vue']
    """
    items: list[str] = []
    for line in content.split("\n"):
        stripped = line.strip()
        if not stripped.startswith(BULLET_GLYPHS):
            continue
        words = stripped[1:].split()
        if words:
            items.append(words[0])
    return items


def extract_major_version(version: str | None) -> str:
    """Return the first dot-delimited segment of a version string.

    Examples:
        >>> extract_major_version("17.0.2")
        '17'
        >>> extract_major_version("")
        ''
    """
    if not version:
        return ""
    return version.strip().split(".")[0]
