"""
Output module - separates rendering from graph computation.

Provides multiple output formats:
- render_text: plain terminal report of the tour
- render_json: stable JSON schema for the rendering collaborator
- render_dot: Graphviz graph with the tour highlighted
"""

from qualwizard.output.renderers import (
    OutputFormat,
    render,
    render_dot,
    render_json,
    render_text,
)
from qualwizard.output.schema import WizardResultSchema, get_json_schema

__all__ = [
    "OutputFormat",
    "render",
    "render_text",
    "render_json",
    "render_dot",
    "WizardResultSchema",
    "get_json_schema",
]
