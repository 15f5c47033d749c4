from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .agent.errors import ActionOutcome
from .agent.models import OutputFormat, TechnicalSpecification


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    timestamp: datetime


class BedrockModelsResponse(BaseModel):
    models: list[str]


# Agent drafting schemas
class AgentRequest(BaseModel):
    raw_requirements: str = Field(..., description="Raw requirements text to draft from")
    changes: str | None = Field(None, description="Optional change request for the current draft")
    template_content: str | None = Field(None, description="Optional template the draft should follow")
    format: OutputFormat | None = Field(None, description="Output format; the configured preference when omitted")


class AgentStateResponse(BaseModel):
    specification: TechnicalSpecification
    is_processing: bool
    error: str | None = None
    progress: float = Field(ge=0.0, le=100.0)
    current_step: str | None = None
    user_message: str | None = None
    outcomes: list[ActionOutcome] = Field(default_factory=list)


class RenderedSpecResponse(BaseModel):
    format: OutputFormat
    file_extension: str
    content: str
