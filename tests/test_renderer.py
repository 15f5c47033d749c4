"""
Tests for the markdown and Confluence projections of a specification.
"""

from datetime import datetime

from specdraft_api.agent.models import (
    OutputFormat, SpecMetadata, SpecStatus, TechnicalSpecification
)
from specdraft_api.agent.renderer import (
    format_section_name, format_timestamp, render, render_confluence, render_markdown
)


def sample_spec(steps=None):
    return TechnicalSpecification(
        title="Todo service",
        sections={
            "overview": "A small todo service.",
            "goals": "   ",
            "acceptance_criteria": "Users can add <items> & remove them.",
        },
        metadata=SpecMetadata(
            created_at=datetime(2024, 3, 1, 8, 0),
            updated_at=datetime(2024, 3, 5, 9, 7),
            status=SpecStatus.GENERATING,
            progress_percentage=85.71,
        ),
        generation_steps=steps if steps is not None else [
            "Generated section: overview",
            "Generated section: acceptance_criteria",
        ],
    )


class TestHelpers:

    def test_format_section_name(self):
        assert format_section_name("acceptance_criteria") == "Acceptance Criteria"
        assert format_section_name("overview") == "Overview"

    def test_format_timestamp_pads_minutes_only(self):
        assert format_timestamp(datetime(2024, 3, 5, 9, 7)) == "5.3.2024 9:07"
        assert format_timestamp(datetime(2024, 12, 25, 18, 30)) == "25.12.2024 18:30"


class TestRenderMarkdown:
    """Test suite for render_markdown."""

    def test_structure(self):
        output = render_markdown(sample_spec())

        assert output.startswith("# Todo service\n")
        assert "## Overview\n\nA small todo service." in output
        assert "## Acceptance Criteria" in output
        assert "## Goals" not in output
        assert "*Version: 1.0.0 | Status: generating | Progress: 85% | Updated: 5.3.2024 9:07*" in output

    def test_history_numbered_in_order(self):
        output = render_markdown(sample_spec())

        history = output.split("### Generation history:")[1]
        assert "1. Generated section: overview" in history
        assert "2. Generated section: acceptance_criteria" in history
        assert history.index("1.") < history.index("2.")

    def test_history_omitted_without_steps(self):
        assert "Generation history" not in render_markdown(sample_spec(steps=[]))

    def test_rendering_is_pure(self):
        spec = sample_spec()
        snapshot = spec.model_dump()

        render_markdown(spec)
        render_confluence(spec)

        assert spec.model_dump() == snapshot


class TestRenderConfluence:
    """Test suite for render_confluence."""

    def test_escapes_html(self):
        output = render_confluence(sample_spec())

        assert output.startswith("<h1>Todo service</h1>")
        assert "<h2>Acceptance Criteria</h2>" in output
        assert "&lt;items&gt; &amp; remove" in output
        assert "<h2>Goals</h2>" not in output
        assert "<ol><li>Generated section: overview</li>" in output

    def test_dispatch(self):
        spec = sample_spec()

        assert render(spec, OutputFormat.CONFLUENCE) == render_confluence(spec)
        assert render(spec, OutputFormat.MARKDOWN) == render_markdown(spec)
        assert render(spec) == render_markdown(spec)
