"""Shared fixtures: a patched Anthropic client and agent configs"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from runtime.agent_config import AgentConfig


def fake_response(text, input_tokens=10, output_tokens=20, blocks=None):
    """Build an object shaped like an Anthropic Messages API response"""
    content = blocks if blocks is not None else [SimpleNamespace(type="text", text=text)]
    return SimpleNamespace(
        content=content,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
        model="claude-test",
        stop_reason="end_turn",
    )


@pytest.fixture
def mock_create():
    """Patch anthropic.Anthropic; yields the messages.create mock"""
    with patch("runtime.completion_client.anthropic.Anthropic") as anthropic_cls:
        create = anthropic_cls.return_value.messages.create
        create.return_value = fake_response("No structured output here.")
        yield create


@pytest.fixture
def config():
    return AgentConfig(api_key="test-key", name="Test Agent")


def reply_with(create, *texts):
    """Make successive messages.create calls return the given texts"""
    if len(texts) == 1:
        create.return_value = fake_response(texts[0])
    else:
        create.side_effect = [fake_response(text) for text in texts]
