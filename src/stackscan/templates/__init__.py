"""Jinja2 templates for the tech stack summary document."""

from stackscan.templates.renderer import SummaryRenderer

__all__ = ["SummaryRenderer"]
