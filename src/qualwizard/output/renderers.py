"""
Output renderers for the wizard graph and tour.

Separates presentation logic from the graph algorithms. JSON output goes
through the schema.py Pydantic models.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from qualwizard.output.schema import SCHEMA_VERSION, WizardResultSchema

if TYPE_CHECKING:
    from qualwizard.wizard.models import Link
    from qualwizard.wizard.wizard import Wizard


class OutputFormat(str, Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"
    DOT = "dot"


def render(wizard: "Wizard", format: OutputFormat = OutputFormat.TEXT) -> str:
    """Render the wizard graph and tour in the specified format."""
    if format == OutputFormat.TEXT:
        return render_text(wizard)
    elif format == OutputFormat.JSON:
        return render_json(wizard)
    elif format == OutputFormat.DOT:
        return render_dot(wizard)
    else:
        raise ValueError(f"Unknown output format: {format}")


def to_schema(wizard: "Wizard") -> WizardResultSchema:
    data = wizard.to_dict()
    return WizardResultSchema.model_validate({"version": SCHEMA_VERSION, **data})


def render_json(wizard: "Wizard", indent: int = 2) -> str:
    return to_schema(wizard).model_dump_json(indent=indent)


def _format_value(link: "Link") -> str:
    if link.value is None:
        return "pending"
    return f"{link.value:g}"


def render_text(wizard: "Wizard") -> str:
    """Render the tour as plain text, one step per line."""
    lines: list[str] = []
    lines.append("=" * 60)
    lines.append("Index Suggestion Wizard")
    lines.append("=" * 60)
    lines.append("")
    lines.append(f"Database: {wizard.database}")
    lines.append(f"Nodes: {len(wizard.qual_nodes)} qual(s), {len(wizard.links)} link(s)")
    pending = len(wizard.unresolved_links)
    if pending:
        lines.append(f"Pending suggestions: {pending} link(s)")
    lines.append("")

    if not wizard.shortest_path:
        lines.append("No quals to visit.")
        return "\n".join(lines)

    lines.append("-" * 60)
    lines.append(f"Tour ({wizard.solver.name})")
    lines.append("-" * 60)
    for step, link in enumerate(wizard.shortest_path, 1):
        marker = "=" if link.samerel else ">"
        lines.append(f"{step:3d}. {marker} {link.target.label or link.target.id}")
        lines.append(f"       value: {_format_value(link)}")
        if link.overlap:
            shared = ", ".join(
                f"{entry.relname or entry.relid}.{entry.attname or entry.attnum}"
                for entry in link.overlap
            )
            lines.append(f"       shared: {shared}")
        if link.missing:
            lines.append(f"       missing: {', '.join(q.label for q in link.missing)}")

    lines.append("")
    lines.append(f"Total distance: {wizard.tour_distance():g}")
    return "\n".join(lines)


def _dot_id(node_id: object) -> str:
    return '"' + str(node_id).replace('"', '\\"') + '"'


def render_dot(wizard: "Wizard") -> str:
    """Render the graph in Graphviz DOT, with tour links in bold."""
    tour_links = {id(link) for link in wizard.shortest_path}
    lines = ["digraph wizard {", "  rankdir=LR;"]
    for node in wizard.nodes:
        shape = "doublecircle" if node.is_start else "box"
        label = (node.label or str(node.id)).replace('"', '\\"')
        lines.append(f'  {_dot_id(node.id)} [shape={shape}, label="{label}"];')
    for link in wizard.links:
        style = "bold" if id(link) in tour_links else "dashed"
        lines.append(
            f"  {_dot_id(link.source.id)} -> {_dot_id(link.target.id)} "
            f'[label="{_format_value(link)}", style={style}];'
        )
    lines.append("}")
    return "\n".join(lines)
