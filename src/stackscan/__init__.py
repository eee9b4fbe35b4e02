"""stackscan - Dependency-driven tech stack summaries.

stackscan reads a project's dependency manifests (package.json,
requirements.txt), sorts every dependency into a category and renders a
summary of the resulting tech stack for people or tools.

Core principles:
- Rules-First: Categorization is deterministic keyword matching
- Best-Effort AI: Descriptions and filters degrade instead of failing
- Explicit Configuration: Credentials and retry policy are injected, never global
"""

__version__ = "0.1.0"
__author__ = "stackscan Contributors"
