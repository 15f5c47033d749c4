"""
Action executor for agent-driven specification drafting.

The executor owns the current specification document and is its only
writer. Each call to ``execute_action`` applies one typed directive,
replaces the document with a new value, appends an audit step and
recomputes the coarse completion progress.
"""

from typing import Awaitable, Callable, Dict, List, Optional

from ..logging import get_agent_logger
from .errors import InvalidActionError
from .models import (
    ActionType, AgentAction, SpecStatus, TechnicalSpecification, clamp_percentage
)
from .observers import Observable


logger = get_agent_logger("executor")

DEFAULT_STEP_MESSAGE = "Executing action..."
COMPLETED_STEP_MESSAGE = "Generation complete"

# Ordered skeleton used by create_structure
DEFAULT_SECTIONS: Dict[str, str] = {
    "overview": "Project overview",
    "goals": "Goals and objectives",
    "requirements": "Functional requirements",
    "technical_requirements": "Technical requirements",
    "acceptance_criteria": "Acceptance criteria",
    "timeline": "Timeline",
    "resources": "Resources",
}

# Must match len(DEFAULT_SECTIONS)
TOTAL_SECTIONS = 7
COMPLETION_THRESHOLD = 90.0

REQUIRED_SECTIONS = ("overview", "requirements", "acceptance_criteria")

_REQUIRED_FIELDS: Dict[ActionType, tuple] = {
    ActionType.GENERATE_CONTENT: ("section", "content"),
    ActionType.UPDATE_SECTION: ("section", "content"),
}


class ActionExecutor(Observable):
    """
    Applies agent actions to the owned specification document.

    Listeners are notified when an action starts (step message published)
    and when it finishes (document and progress published), as well as on
    ``update_spec`` and ``reset_progress``.
    """

    def __init__(self, spec: Optional[TechnicalSpecification] = None):
        super().__init__()
        self._current_spec = spec or TechnicalSpecification.empty()
        self._progress = 0.0
        self._current_step: Optional[str] = None
        self._handlers: Dict[ActionType, Callable[[AgentAction], Awaitable[str]]] = {
            ActionType.GENERATE_CONTENT: self._generate_content,
            ActionType.VALIDATE_REQUIREMENTS: self._validate_requirements,
            ActionType.SUGGEST_IMPROVEMENTS: self._suggest_improvements,
            ActionType.CREATE_STRUCTURE: self._create_structure,
            ActionType.UPDATE_SECTION: self._update_section,
        }

    @property
    def current_spec(self) -> TechnicalSpecification:
        return self._current_spec

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def current_step(self) -> Optional[str]:
        return self._current_step

    async def execute_action(self, action: AgentAction) -> str:
        """
        Apply one action to the current specification.

        Args:
            action: The directive to apply

        Returns:
            Human-readable description of the outcome

        Raises:
            InvalidActionError: If fields required by the action type are missing
        """
        self._current_step = action.progress_message or DEFAULT_STEP_MESSAGE
        self.notify_listeners()

        self._check_required_fields(action)
        result = await self._handlers[action.type](action)
        logger.debug(f"Action {action.type.value}: {result}")

        self._update_progress()
        self.notify_listeners()
        return result

    def _check_required_fields(self, action: AgentAction) -> None:
        missing = [
            name for name in _REQUIRED_FIELDS.get(action.type, ())
            if getattr(action, name) is None
        ]
        if missing:
            raise InvalidActionError(action.type, missing)

    async def _generate_content(self, action: AgentAction) -> str:
        spec = self._current_spec.with_sections({action.section: action.content})
        spec = spec.with_step(f"Generated section: {action.section}")
        self._current_spec = spec.with_metadata(
            spec.metadata.touched().with_status(SpecStatus.GENERATING)
        )
        return f'Section "{action.section}" generated'

    async def _validate_requirements(self, action: AgentAction) -> str:
        sections = self._current_spec.sections
        missing: List[str] = [
            key for key in REQUIRED_SECTIONS
            if not (sections.get(key) or "").strip()
        ]

        if not missing:
            self._current_spec = self._current_spec.with_step("Validation passed")
            return "All required sections are present"

        self._current_spec = self._current_spec.with_step(
            f"Validation issues found: {len(missing)}"
        )
        return f"Missing required sections: {', '.join(missing)}"

    async def _suggest_improvements(self, action: AgentAction) -> str:
        suggestions = action.suggestions or []
        self._current_spec = self._current_spec.with_step(
            f"Suggested improvements: {len(suggestions)}"
        )
        return "; ".join(suggestions)

    async def _create_structure(self, action: AgentAction) -> str:
        spec = self._current_spec.with_sections(DEFAULT_SECTIONS, overwrite=False)
        spec = spec.with_step("Base structure created")
        self._current_spec = spec.with_metadata(
            spec.metadata.touched().with_status(SpecStatus.GENERATING)
        )
        return "Specification structure created"

    async def _update_section(self, action: AgentAction) -> str:
        spec = self._current_spec.with_sections({action.section: action.content})
        spec = spec.with_step(f"Updated section: {action.section}")
        self._current_spec = spec.touched()
        return f'Section "{action.section}" updated'

    def apply_template_updates(self, updates: Dict[str, str]) -> None:
        """Bulk-merge section bodies, overwriting existing keys."""
        spec = self._current_spec.with_sections(updates)
        spec = spec.with_step(f"Applied template updates: {len(updates)}")
        self._current_spec = spec.touched()
        logger.debug(f"Applied {len(updates)} template section updates")

    def _update_progress(self) -> None:
        self._progress = clamp_percentage(
            len(self._current_spec.sections) / TOTAL_SECTIONS * 100
        )
        metadata = self._current_spec.metadata

        if self._progress >= COMPLETION_THRESHOLD:
            metadata = metadata.with_status(SpecStatus.COMPLETED).with_progress(100.0)
            self._current_step = COMPLETED_STEP_MESSAGE
        elif metadata.status != SpecStatus.COMPLETED:
            metadata = metadata.with_progress(self._progress)

        self._current_spec = self._current_spec.with_metadata(metadata)

    def update_spec(self, spec: TechnicalSpecification) -> None:
        """Replace the owned document outright."""
        self._current_spec = spec
        self.notify_listeners()

    def reset_progress(self) -> None:
        """Clear the transient progress display; the document is untouched."""
        self._progress = 0.0
        self._current_step = None
        self.notify_listeners()
