"""
FastAPI router for agent-driven specification drafting.

Exposes the single controller owned by the application: submitting a build
request, reading the current document and controller state, rendering the
document and starting over.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..aws import AWSClient
from ..config import get_settings
from ..logging import get_agent_logger
from ..schemas import AgentRequest, AgentStateResponse, RenderedSpecResponse
from .controller import AgentController
from .generation import BedrockGenerationClient
from .models import OutputFormat

logger = get_agent_logger("router")

router = APIRouter(prefix="/agent", tags=["agent"])


@lru_cache(maxsize=1)
def get_agent_controller() -> AgentController:
    """Build the application-wide controller from settings."""
    settings = get_settings()
    client = BedrockGenerationClient(AWSClient(settings.aws), settings.agent)
    return AgentController(client, preferred_format=settings.preferred_format)


AgentControllerDep = Annotated[AgentController, Depends(get_agent_controller)]


def _state_response(controller: AgentController) -> AgentStateResponse:
    return AgentStateResponse(
        specification=controller.current_spec,
        is_processing=controller.is_processing,
        error=controller.error,
        progress=controller.progress,
        current_step=controller.current_step,
        user_message=controller.current_user_message,
        outcomes=controller.last_outcomes,
    )


@router.get("/spec", response_model=AgentStateResponse)
def get_spec(controller: AgentControllerDep) -> AgentStateResponse:
    """Return the current document together with the controller state."""
    return _state_response(controller)


@router.post("/requests", response_model=AgentStateResponse)
async def submit_request(
    request: AgentRequest,
    controller: AgentControllerDep,
) -> AgentStateResponse:
    """
    Run one drafting request and return the resulting state.

    Raises:
        HTTPException: 422 for blank requirements, 409 while another request is in flight
    """
    if not request.raw_requirements.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="raw_requirements must not be blank"
        )
    if controller.is_processing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A drafting request is already in progress"
        )

    logger.info(f"Handling agent request: {request.raw_requirements[:50]}...")
    await controller.handle_request(
        request.raw_requirements,
        changes=request.changes,
        template_content=request.template_content,
        format=request.format,
    )
    if controller.error:
        logger.warning(f"Agent request finished with error: {controller.error}")
    return _state_response(controller)


@router.post("/reset", response_model=AgentStateResponse)
def reset_spec(controller: AgentControllerDep) -> AgentStateResponse:
    if controller.is_processing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot reset while a drafting request is in progress"
        )
    controller.reset_specification()
    return _state_response(controller)


@router.get("/spec/render", response_model=RenderedSpecResponse)
def render_spec(
    controller: AgentControllerDep,
    format: Optional[OutputFormat] = Query(None),
) -> RenderedSpecResponse:
    output_format = format or get_settings().preferred_format
    return RenderedSpecResponse(
        format=output_format,
        file_extension=output_format.file_extension,
        content=controller.format_spec_for_output(output_format),
    )
