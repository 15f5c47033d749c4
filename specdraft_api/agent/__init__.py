"""
Agent-driven specification drafting.

The executor owns the document and applies agent actions; the controller
sequences one build request at a time against it. The controller, the
generation collaborator and the HTTP router are imported from their own
modules.
"""

from .errors import ActionOutcome, AgentError, CollaboratorFailure, InvalidActionError
from .executor import ActionExecutor, DEFAULT_SECTIONS, REQUIRED_SECTIONS, TOTAL_SECTIONS
from .models import *
from .observers import Observable
from .renderer import render, render_confluence, render_markdown

__all__ = [
    'ActionExecutor',
    'ActionOutcome',
    'AgentError',
    'CollaboratorFailure',
    'InvalidActionError',
    'Observable',
    'DEFAULT_SECTIONS',
    'REQUIRED_SECTIONS',
    'TOTAL_SECTIONS',
    'render',
    'render_confluence',
    'render_markdown',
]
