from __future__ import annotations

from typing import Any, cast

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from .config import AWSSettings


class BedrockInvocationError(RuntimeError):
    """Raised when a Bedrock runtime call fails or returns no text."""


class AWSClient:
    """Lightweight wrapper around boto3 for the Bedrock calls the agent needs.

    Uses default credential/provider chain if explicit profile/region are not provided.
    """

    def __init__(self, settings: AWSSettings):
        self._settings = settings
        self._session = boto3.Session(
            profile_name=settings.profile_name or None,
            region_name=settings.region_name or None,
        )

    @property
    def region(self) -> str | None:
        return cast(str | None, getattr(self._session, "region_name", None))

    @property
    def profile(self) -> str | None:
        # boto3 does not expose profile on the session publicly; use provided config
        return self._settings.profile_name

    def _client(self, service: str) -> BaseClient:
        return self._session.client(service)

    def list_bedrock_models(self) -> list[str]:
        """Return a simple list of Bedrock model IDs.

        Uses the control-plane service 'bedrock' and the operation
        list_foundation_models. Returns an empty list if unavailable.
        """
        try:
            bedrock = self._client("bedrock")
            resp: dict[str, Any] = bedrock.list_foundation_models()
            summaries = resp.get("modelSummaries") or []
            models: list[str] = []
            for item in summaries:
                mid = item.get("modelId") if isinstance(item, dict) else None
                if isinstance(mid, str):
                    models.append(mid)
            return models
        except (BotoCoreError, NoCredentialsError, ClientError):
            return []

    def converse_text(
        self,
        model_id: str,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ) -> str:
        """Run one Bedrock Converse turn and return the concatenated reply text.

        Unlike the listing helper this does not degrade quietly: generation
        callers need to tell a failed call from an empty answer.
        """
        try:
            runtime = self._client("bedrock-runtime")
            resp: dict[str, Any] = runtime.converse(
                modelId=model_id,
                system=[{"text": system_prompt}],
                messages=[{"role": "user", "content": [{"text": user_prompt}]}],
                inferenceConfig={"maxTokens": max_tokens, "temperature": temperature},
            )
        except (BotoCoreError, NoCredentialsError, ClientError) as exc:
            raise BedrockInvocationError(f"Bedrock converse failed: {exc}") from exc

        message = (resp.get("output") or {}).get("message") or {}
        blocks = message.get("content") or []
        texts = [
            block["text"] for block in blocks
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        ]
        if not texts:
            raise BedrockInvocationError("Bedrock returned no text content")
        return "".join(texts)
