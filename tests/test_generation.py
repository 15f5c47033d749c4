"""
Tests for the Bedrock-backed generation collaborator and reply parsing.
"""

import json
from unittest.mock import Mock

import pytest

from specdraft_api.agent.errors import CollaboratorFailure
from specdraft_api.agent.generation import (
    BedrockGenerationClient, GenerationClient, build_system_prompt, build_user_prompt,
    parse_agent_response
)
from specdraft_api.agent.models import ActionType, GenerationRequest, OutputFormat
from specdraft_api.aws import AWSClient, BedrockInvocationError
from specdraft_api.config import AgentSettings


REPLY = {
    "user_message": "Created the structure and the overview",
    "actions": [
        {"type": "create_structure", "progress_message": "Laying out sections"},
        {"type": "generate_content", "section": "overview", "content": "A todo app"},
    ],
    "specification_sections": {"timeline": "Two sprints"},
}


class TestParseAgentResponse:
    """Test suite for parse_agent_response."""

    def test_plain_json(self):
        response = parse_agent_response(json.dumps(REPLY))

        assert response.user_message == REPLY["user_message"]
        assert [a.type for a in response.actions] == [
            ActionType.CREATE_STRUCTURE, ActionType.GENERATE_CONTENT
        ]
        assert response.specification_sections == {"timeline": "Two sprints"}

    def test_fenced_json_with_chatter(self):
        text = f"Here is the plan:\n```json\n{json.dumps(REPLY, indent=2)}\n```\nLet me know."

        response = parse_agent_response(text)

        assert len(response.actions) == 2

    def test_empty_reply(self):
        with pytest.raises(CollaboratorFailure, match="empty"):
            parse_agent_response("   ")

    def test_no_json_object(self):
        with pytest.raises(CollaboratorFailure, match="JSON"):
            parse_agent_response("I could not help with that.")

    def test_schema_mismatch(self):
        with pytest.raises(CollaboratorFailure, match="Malformed"):
            parse_agent_response(json.dumps({"actions": [{"type": "drop_table"}]}))


class TestPrompts:
    """Test suite for prompt construction."""

    def test_system_prompt_mentions_format_and_template(self):
        request = GenerationRequest(
            raw_requirements="reqs",
            template_content="## Overview\n## {Custom}",
            format=OutputFormat.CONFLUENCE,
        )

        prompt = build_system_prompt(request)

        assert "Confluence" in prompt
        assert "## {Custom}" in prompt
        assert "generate_content" in prompt

    def test_system_prompt_without_template(self):
        prompt = build_system_prompt(GenerationRequest(raw_requirements="reqs"))

        assert "Markdown" in prompt
        assert "No template is active" in prompt

    def test_user_prompt_includes_changes(self):
        prompt = build_user_prompt(GenerationRequest(
            raw_requirements="  Build a todo app  ", changes="Add due dates"
        ))

        assert "Build a todo app" in prompt
        assert "Add due dates" in prompt

    def test_user_prompt_skips_blank_changes(self):
        prompt = build_user_prompt(GenerationRequest(raw_requirements="reqs", changes="  "))

        assert "Requested changes" not in prompt


class TestBedrockGenerationClient:
    """Test suite for BedrockGenerationClient."""

    @pytest.fixture
    def aws_client(self):
        return Mock(spec=AWSClient)

    @pytest.fixture
    def settings(self):
        return AgentSettings(generation_model="test-model", max_tokens=512, temperature=0.0)

    def test_satisfies_protocol(self, aws_client, settings):
        assert isinstance(BedrockGenerationClient(aws_client, settings), GenerationClient)

    @pytest.mark.asyncio
    async def test_generate_parses_reply(self, aws_client, settings):
        aws_client.converse_text.return_value = json.dumps(REPLY)
        client = BedrockGenerationClient(aws_client, settings)

        response = await client.generate(GenerationRequest(raw_requirements="Build a todo app"))

        assert response.user_message == REPLY["user_message"]
        args = aws_client.converse_text.call_args.args
        assert args[0] == "test-model"
        assert "Build a todo app" in args[2]
        assert args[3:] == (512, 0.0)

    @pytest.mark.asyncio
    async def test_backend_error_becomes_collaborator_failure(self, aws_client, settings):
        aws_client.converse_text.side_effect = BedrockInvocationError("throttled")
        client = BedrockGenerationClient(aws_client, settings)

        with pytest.raises(CollaboratorFailure, match="throttled") as exc_info:
            await client.generate(GenerationRequest(raw_requirements="reqs"))

        assert isinstance(exc_info.value.cause, BedrockInvocationError)

    @pytest.mark.asyncio
    async def test_malformed_reply_becomes_collaborator_failure(self, aws_client, settings):
        aws_client.converse_text.return_value = "not json at all"
        client = BedrockGenerationClient(aws_client, settings)

        with pytest.raises(CollaboratorFailure):
            await client.generate(GenerationRequest(raw_requirements="reqs"))
