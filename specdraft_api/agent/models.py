"""
Pydantic models for agent-driven specification drafting.

This module defines the specification document under construction, the
typed actions the generation agent emits, and the response envelope that
bundles them. Every model is frozen: mutation happens through the ``with_*``
builders, which return a new value with freshly copied containers.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SpecStatus(str, Enum):
    """Lifecycle status of a specification document."""
    DRAFT = "draft"
    GENERATING = "generating"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [SpecStatus.DRAFT, SpecStatus.GENERATING, SpecStatus.COMPLETED]


class ActionType(str, Enum):
    """Mutation directives understood by the action executor."""
    GENERATE_CONTENT = "generate_content"
    VALIDATE_REQUIREMENTS = "validate_requirements"
    SUGGEST_IMPROVEMENTS = "suggest_improvements"
    CREATE_STRUCTURE = "create_structure"
    UPDATE_SECTION = "update_section"


class OutputFormat(str, Enum):
    """Output formats a specification can be requested and rendered in."""
    MARKDOWN = "markdown"
    CONFLUENCE = "confluence"

    @property
    def display_name(self) -> str:
        return {
            OutputFormat.MARKDOWN: "Markdown",
            OutputFormat.CONFLUENCE: "Confluence Storage Format",
        }[self]

    @property
    def file_extension(self) -> str:
        return {
            OutputFormat.MARKDOWN: "md",
            OutputFormat.CONFLUENCE: "html",
        }[self]

    @classmethod
    def default(cls) -> "OutputFormat":
        return cls.MARKDOWN


def clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


class SpecMetadata(BaseModel):
    """Metadata for a specification document."""
    model_config = ConfigDict(frozen=True)

    created_at: datetime
    updated_at: datetime
    version: str = "1.0.0"
    status: SpecStatus = SpecStatus.DRAFT
    progress_percentage: float = Field(
        default=0.0, validation_alias=AliasChoices("progress_percentage", "progressPercentage")
    )

    @field_validator('progress_percentage', mode='before')
    @classmethod
    def clamp_progress(cls, v):
        """Keep progress within [0, 100]."""
        return clamp_percentage(v)

    def touched(self, now: Optional[datetime] = None) -> "SpecMetadata":
        """Return a copy stamped with ``now``, never moving ``updated_at`` back."""
        now = now or datetime.now()
        return self.model_copy(update={"updated_at": max(now, self.updated_at)})

    def with_status(self, status: SpecStatus) -> "SpecMetadata":
        """Return a copy with ``status`` advanced; backward moves are ignored."""
        if status.rank <= self.status.rank:
            return self
        return self.model_copy(update={"status": status})

    def with_progress(self, percentage: float) -> "SpecMetadata":
        return self.model_copy(update={"progress_percentage": clamp_percentage(percentage)})


class TechnicalSpecification(BaseModel):
    """The specification document under construction."""
    model_config = ConfigDict(frozen=True)

    title: str
    sections: Dict[str, str] = Field(default_factory=dict)
    metadata: SpecMetadata
    generation_steps: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("generation_steps", "generationSteps")
    )

    @field_validator('sections')
    @classmethod
    def validate_section_keys(cls, v):
        """Section keys must be non-empty strings."""
        for key in v:
            if not key or not key.strip():
                raise ValueError("Section keys must be non-empty strings")
        return v

    @classmethod
    def empty(cls) -> "TechnicalSpecification":
        now = datetime.now()
        return cls(
            title="New technical specification",
            sections={},
            metadata=SpecMetadata(created_at=now, updated_at=now),
            generation_steps=[],
        )

    def with_sections(self, updates: Dict[str, str], overwrite: bool = True) -> "TechnicalSpecification":
        """Return a copy with ``updates`` merged into the sections.

        With ``overwrite=False`` existing keys win and ``updates`` only fill gaps.
        """
        if overwrite:
            merged = {**self.sections, **updates}
        else:
            merged = {**updates, **self.sections}
        return self._replace(sections=merged)

    def with_step(self, step: str) -> "TechnicalSpecification":
        return self._replace(generation_steps=[*self.generation_steps, step])

    def with_metadata(self, metadata: SpecMetadata) -> "TechnicalSpecification":
        return self._replace(metadata=metadata)

    def touched(self, now: Optional[datetime] = None) -> "TechnicalSpecification":
        return self.with_metadata(self.metadata.touched(now))

    def _replace(self, **changes: Any) -> "TechnicalSpecification":
        # Re-validate so the section key invariant also holds for derived values
        data = {
            "title": self.title,
            "sections": dict(self.sections),
            "metadata": self.metadata,
            "generation_steps": list(self.generation_steps),
        }
        data.update(changes)
        return TechnicalSpecification(**data)


class AgentAction(BaseModel):
    """One typed mutation directive produced by the generation agent."""
    model_config = ConfigDict(frozen=True)

    type: ActionType
    section: Optional[str] = None
    content: Optional[str] = None
    suggestions: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    progress_message: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("progress_message", "progressMessage")
    )

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        """Accept both ``generate_content`` and ``generateContent`` spellings."""
        if isinstance(v, str) and v not in ActionType._value2member_map_:
            snake = "".join(f"_{c.lower()}" if c.isupper() else c for c in v)
            return snake.lstrip("_")
        return v


class AgentResponse(BaseModel):
    """One reply of the generation agent."""
    model_config = ConfigDict(frozen=True)

    user_message: str = Field(validation_alias=AliasChoices("user_message", "userMessage"))
    actions: Optional[List[AgentAction]] = None
    specification_sections: Optional[Dict[str, str]] = Field(
        default=None,
        validation_alias=AliasChoices("specification_sections", "specificationSections"),
    )


class GenerationRequest(BaseModel):
    """Input handed to the generation collaborator."""
    model_config = ConfigDict(frozen=True)

    raw_requirements: str
    changes: Optional[str] = None
    template_content: Optional[str] = None
    format: OutputFormat = OutputFormat.MARKDOWN
