"""Pure text projections of a specification document."""

from datetime import datetime
from html import escape
from typing import List

from .models import OutputFormat, TechnicalSpecification


def format_section_name(key: str) -> str:
    """``technical_requirements`` -> ``Technical Requirements``."""
    return " ".join(word[:1].upper() + word[1:] for word in key.split("_") if word)


def format_timestamp(value: datetime) -> str:
    return f"{value.day}.{value.month}.{value.year} {value.hour}:{value.minute:02d}"


def _metadata_line(spec: TechnicalSpecification) -> str:
    meta = spec.metadata
    return (
        f"Version: {meta.version} | "
        f"Status: {meta.status.value} | "
        f"Progress: {int(meta.progress_percentage)}% | "
        f"Updated: {format_timestamp(meta.updated_at)}"
    )


def render_markdown(spec: TechnicalSpecification) -> str:
    lines: List[str] = [f"# {spec.title}", ""]

    for key, body in spec.sections.items():
        if body.strip():
            lines.extend([f"## {format_section_name(key)}", "", body, ""])

    lines.append("---")
    lines.append(f"*{_metadata_line(spec)}*")

    if spec.generation_steps:
        lines.extend(["", "### Generation history:"])
        for index, step in enumerate(spec.generation_steps, start=1):
            lines.append(f"{index}. {step}")

    return "\n".join(lines) + "\n"


def render_confluence(spec: TechnicalSpecification) -> str:
    """Render as Confluence storage-format HTML."""
    parts: List[str] = [f"<h1>{escape(spec.title)}</h1>"]

    for key, body in spec.sections.items():
        if body.strip():
            parts.append(f"<h2>{escape(format_section_name(key))}</h2>")
            for paragraph in body.strip().split("\n\n"):
                parts.append(f"<p>{escape(paragraph)}</p>")

    parts.append("<hr />")
    parts.append(f"<p><em>{escape(_metadata_line(spec))}</em></p>")

    if spec.generation_steps:
        parts.append("<h3>Generation history</h3>")
        items = "".join(f"<li>{escape(step)}</li>" for step in spec.generation_steps)
        parts.append(f"<ol>{items}</ol>")

    return "\n".join(parts) + "\n"


def render(spec: TechnicalSpecification, output_format: OutputFormat = OutputFormat.MARKDOWN) -> str:
    if output_format == OutputFormat.CONFLUENCE:
        return render_confluence(spec)
    return render_markdown(spec)
