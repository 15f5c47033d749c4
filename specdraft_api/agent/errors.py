"""Error types raised and absorbed by the agent executor and controller."""

from typing import Iterable, Optional

from pydantic import BaseModel

from .models import ActionType


class AgentError(Exception):
    """Base error for agent drafting failures."""


class InvalidActionError(AgentError):
    """Raised when an action lacks the fields its type requires."""

    def __init__(self, action_type: ActionType, missing_fields: Iterable[str]):
        self.action_type = action_type
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"{action_type.value} requires fields: {', '.join(self.missing_fields)}"
        )


class CollaboratorFailure(AgentError):
    """Raised when the generation backend fails or returns an unusable reply."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class ActionOutcome(BaseModel):
    """Result of executing one action in a response batch."""
    action_type: ActionType
    success: bool
    result: Optional[str] = None
    error: Optional[str] = None
