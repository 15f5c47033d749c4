"""
Generation collaborator for the agent controller.

The controller depends only on the ``GenerationClient`` protocol: one
awaitable call that turns a ``GenerationRequest`` into an ``AgentResponse``
or raises. ``BedrockGenerationClient`` is the production implementation.
"""

import asyncio
import json
import re
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from pydantic import ValidationError

from ..aws import AWSClient, BedrockInvocationError
from ..config import AgentSettings
from ..logging import get_agent_logger
from .errors import CollaboratorFailure
from .models import AgentResponse, GenerationRequest, OutputFormat


logger = get_agent_logger("generation")

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


@runtime_checkable
class GenerationClient(Protocol):
    async def generate(self, request: GenerationRequest) -> AgentResponse:  # pragma: no cover - protocol definition
        ...


SYSTEM_PROMPT = """You are an assistant that drafts technical specifications section by section.
Reply with a single JSON object and nothing else, using this shape:

{{
  "user_message": "short note for the user about what you did",
  "actions": [
    {{"type": "<action type>", "section": "<section key>", "content": "<section body>",
      "suggestions": ["..."], "progress_message": "<what is happening>"}}
  ],
  "specification_sections": {{"<section key>": "<section body>"}}
}}

Action types:
- create_structure: lay out the base sections (overview, goals, requirements,
  technical_requirements, acceptance_criteria, timeline, resources)
- generate_content: write a section; requires section and content
- update_section: rewrite an existing section; requires section and content
- validate_requirements: check that overview, requirements and acceptance_criteria are filled
- suggest_improvements: list improvement ideas in suggestions

Section keys are snake_case. Section bodies are written in {format_label}.
"actions" and "specification_sections" may be omitted.
{template_block}"""


def _format_label(output_format: OutputFormat) -> str:
    if output_format == OutputFormat.CONFLUENCE:
        return f"HTML ({output_format.display_name})"
    return output_format.display_name


def build_system_prompt(request: GenerationRequest) -> str:
    template = (request.template_content or "").strip()
    if template:
        template_block = f"\nFollow this template for structure and headings:\n{template}\n"
    else:
        template_block = "\nNo template is active; choose the structure yourself.\n"
    return SYSTEM_PROMPT.format(
        format_label=_format_label(request.format),
        template_block=template_block,
    )


def build_user_prompt(request: GenerationRequest) -> str:
    parts = [f"Raw requirements:\n{request.raw_requirements.strip()}"]
    if request.changes and request.changes.strip():
        parts.append(f"Requested changes:\n{request.changes.strip()}")
    return "\n\n".join(parts)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply, tolerating code fences and chatter."""
    candidates = []
    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1))
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    raise CollaboratorFailure("Agent reply does not contain a JSON object")


def parse_agent_response(text: str) -> AgentResponse:
    if not text or not text.strip():
        raise CollaboratorFailure("Agent reply is empty")
    payload = extract_json_object(text)
    try:
        return AgentResponse.model_validate(payload)
    except ValidationError as e:
        raise CollaboratorFailure(f"Malformed agent response: {e}", cause=e) from e


class BedrockGenerationClient:
    """Generation collaborator backed by an AWS Bedrock chat model."""

    def __init__(self, aws_client: AWSClient, settings: Optional[AgentSettings] = None):
        self._aws = aws_client
        self._settings = settings or AgentSettings()

    @property
    def model_id(self) -> str:
        return self._settings.generation_model

    async def generate(self, request: GenerationRequest) -> AgentResponse:
        system_prompt = build_system_prompt(request)
        user_prompt = build_user_prompt(request)
        logger.info(
            f"Requesting agent response from {self.model_id} "
            f"({len(request.raw_requirements)} chars, format={request.format.value})"
        )

        try:
            # boto3 is blocking; keep the event loop free while the model runs
            text = await asyncio.to_thread(
                self._aws.converse_text,
                self.model_id,
                system_prompt,
                user_prompt,
                self._settings.max_tokens,
                self._settings.temperature,
            )
        except BedrockInvocationError as e:
            raise CollaboratorFailure(str(e), cause=e) from e

        response = parse_agent_response(text)
        logger.info(
            f"Agent returned {len(response.actions or [])} actions and "
            f"{len(response.specification_sections or {})} section updates"
        )
        return response

