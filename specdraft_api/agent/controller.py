"""
Agent controller for specification drafting requests.

Serialises build requests against one ``ActionExecutor``: at most one
request is in flight per controller, the generation collaborator is called
once per request, and the returned actions are applied strictly in order.
"""

import logging
from typing import List, Optional
from uuid import uuid4

from ..logging import get_agent_logger, log_agent_operation
from .errors import ActionOutcome, InvalidActionError
from .executor import ActionExecutor
from .generation import GenerationClient
from .models import (
    AgentAction, AgentResponse, GenerationRequest, OutputFormat, TechnicalSpecification
)
from .observers import Observable
from .renderer import render


logger = get_agent_logger("controller")


class AgentController(Observable):
    """
    Drives one executor through agent responses and exposes aggregate state.

    States are ``idle`` and ``processing``; ``handle_request`` while
    processing is a no-op.
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        preferred_format: OutputFormat = OutputFormat.MARKDOWN,
        executor: Optional[ActionExecutor] = None,
    ):
        super().__init__()
        self._generation_client = generation_client
        self._preferred_format = preferred_format
        self._executor = executor or ActionExecutor(TechnicalSpecification.empty())
        self._is_processing = False
        self._error: Optional[str] = None
        self._current_user_message: Optional[str] = None
        self._last_outcomes: List[ActionOutcome] = []
        # Relay executor step and progress changes to controller listeners
        self._executor.subscribe(self.notify_listeners)

    @property
    def executor(self) -> ActionExecutor:
        return self._executor

    @property
    def current_spec(self) -> TechnicalSpecification:
        return self._executor.current_spec

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def progress(self) -> float:
        return self._executor.progress

    @property
    def current_step(self) -> Optional[str]:
        return self._executor.current_step

    @property
    def current_user_message(self) -> Optional[str]:
        return self._current_user_message

    @property
    def last_outcomes(self) -> List[ActionOutcome]:
        return list(self._last_outcomes)

    async def handle_request(
        self,
        raw_requirements: str,
        changes: Optional[str] = None,
        template_content: Optional[str] = None,
        format: Optional[OutputFormat] = None,
    ) -> None:
        """
        Run one build request end to end.

        Blank requirements and requests arriving while another one is in
        flight are ignored. Collaborator failures end up in ``error``;
        mutations already applied for earlier actions are kept.
        """
        if not raw_requirements.strip() or self._is_processing:
            return

        request_id = uuid4().hex[:8]
        self._set_processing(True)
        self._clear_error()
        self._executor.reset_progress()

        try:
            request = GenerationRequest(
                raw_requirements=raw_requirements,
                changes=changes,
                template_content=template_content,
                format=format or self._preferred_format,
            )
            log_agent_operation(logger, "Sending agent request", request_id=request_id)
            response = await self._generation_client.generate(request)
            await self._process_response(response, request_id)
        except Exception as e:
            logger.error(f"Agent request {request_id} failed: {e}")
            self._set_error(f"An error occurred: {e}")
        finally:
            self._set_processing(False)

    async def _process_response(self, response: AgentResponse, request_id: str) -> None:
        self._current_user_message = response.user_message
        self.notify_listeners()

        self._last_outcomes = []
        for action in response.actions or []:
            outcome = await self._run_action(action, request_id)
            self._last_outcomes.append(outcome)

        if response.specification_sections is not None:
            self._executor.apply_template_updates(response.specification_sections)

        failed = sum(1 for outcome in self._last_outcomes if not outcome.success)
        log_agent_operation(
            logger,
            f"Processed {len(self._last_outcomes)} actions ({failed} failed)",
            request_id=request_id,
        )
        self.notify_listeners()

    async def _run_action(self, action: AgentAction, request_id: str) -> ActionOutcome:
        # Failures stay local to the action; the batch keeps going
        try:
            result = await self._executor.execute_action(action)
        except InvalidActionError as e:
            log_agent_operation(
                logger, f"Rejected action: {e}", request_id=request_id,
                action_type=action.type.value, level=logging.WARNING,
            )
            return ActionOutcome(action_type=action.type, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Action {action.type.value} failed")
            return ActionOutcome(action_type=action.type, success=False, error=str(e))

        log_agent_operation(
            logger, f"Action {action.type.value}: {result}", request_id=request_id,
            action_type=action.type.value, section=action.section, level=logging.DEBUG,
        )
        return ActionOutcome(action_type=action.type, success=True, result=result)

    def reset_specification(self) -> None:
        """Start over from an empty draft. Callers must not reset mid-request."""
        self._executor.update_spec(TechnicalSpecification.empty())
        self._current_user_message = None
        self._last_outcomes = []
        self._clear_error()
        self.notify_listeners()

    def format_spec_for_output(self, output_format: Optional[OutputFormat] = None) -> str:
        return render(self.current_spec, output_format or self._preferred_format)

    def _set_processing(self, processing: bool) -> None:
        self._is_processing = processing
        self.notify_listeners()

    def _set_error(self, error: str) -> None:
        self._error = error
        self.notify_listeners()

    def _clear_error(self) -> None:
        self._error = None
        self.notify_listeners()
