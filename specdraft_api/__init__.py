"""Specdraft orchestrator: agent-driven technical specification drafting."""

__version__ = "0.1.0"
