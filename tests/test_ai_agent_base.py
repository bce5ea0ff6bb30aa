import asyncio
import json

import pytest

from conftest import fake_response, reply_with
from agents.agent_types import (
    AgentConfigurationError, AgentNotActiveError, AgentRole, Message, MessageKind
)
from agents.ai_agent_base import AIAgentBase
from runtime.agent_config import AgentConfig


class EchoAgent(AIAgentBase):
    """Minimal agent: every analysis is a plain AI decision"""

    role = AgentRole.FAMILY
    description = "test agent"

    def __init__(self, config):
        super().__init__(config)
        self.analysed = []

    def create_system_prompt(self) -> str:
        return "You are a test agent."

    async def process_ai_analysis(self, message):
        self.analysed.append(message.kind_value)
        analysis = await self.make_ai_decision("Analyze", message.content)
        return self.respond(analysis.model_dump())


class FailingAgent(EchoAgent):
    async def process_ai_analysis(self, message):
        raise RuntimeError("handler exploded")


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def agent(mock_create, config):
    agent = EchoAgent(config)
    run(agent.start())
    return agent


class TestConstruction:
    def test_missing_api_key(self, mock_create):
        with pytest.raises(AgentConfigurationError):
            EchoAgent(AgentConfig(api_key=""))

    def test_configuration_error_is_value_error(self, mock_create):
        with pytest.raises(ValueError):
            EchoAgent(AgentConfig(api_key=None))

    def test_defaults(self, mock_create, config):
        agent = EchoAgent(config)
        assert agent.model == "claude-3-opus-20240229"
        assert agent.max_tokens == 4096
        assert agent.temperature == 0.7
        assert agent.system_prompt == "You are a test agent."
        assert agent.id.startswith("echoagent-")
        assert agent.name == "Test Agent"

    def test_system_prompt_override(self, mock_create):
        agent = EchoAgent(AgentConfig(api_key="k", system_prompt="Custom"))
        assert agent.system_prompt == "Custom"
        assert agent.name == "EchoAgent"


class TestLifecycle:
    def test_process_before_start(self, mock_create, config):
        agent = EchoAgent(config)
        with pytest.raises(AgentNotActiveError):
            run(agent.process_message(Message.create("query", {})))
        assert len(agent.history) == 0

    def test_process_after_stop(self, agent):
        run(agent.stop())
        with pytest.raises(AgentNotActiveError):
            run(agent.process_message(Message.create("query", {})))

    def test_listeners_notified(self, mock_create, config):
        agent = EchoAgent(config)
        events = []

        async def listener(event, payload):
            events.append((event, payload))

        agent.add_listener(listener)
        run(agent.start())
        run(agent.stop())
        agent.remove_listener(listener)
        run(agent.start())

        payload = {"agent_id": agent.id, "role": "family"}
        assert events == [("agent:started", payload), ("agent:stopped", payload)]

    def test_failed_message_keeps_agent_active(self, mock_create, config):
        agent = FailingAgent(config)
        run(agent.start())
        with pytest.raises(RuntimeError, match="handler exploded"):
            run(agent.process_message(Message.create("query", {})))
        assert agent.is_active


class TestDispatch:
    @pytest.mark.parametrize("kind", ["query", "command", "event", "unknown-kind"])
    def test_routes_to_domain_analysis(self, agent, kind):
        response = run(agent.process_message(Message.create(kind, {"x": 1})))
        assert response.success
        assert agent.analysed == [kind]

    def test_history_appended_twice(self, agent):
        message = Message.create("query", {"topic": "x"})
        response = run(agent.process_message(message))

        assert len(agent.history) == 2
        request, reply = agent.history.entries
        assert request.role == "user"
        assert json.loads(request.content)["id"] == message.id
        assert reply.role == "assistant"
        assert json.loads(reply.content)["agent_id"] == response.agent_id

    def test_handler_failure_leaves_orphan_request(self, mock_create, config):
        agent = FailingAgent(config)
        run(agent.start())
        with pytest.raises(RuntimeError):
            run(agent.process_message(Message.create("query", {})))
        assert [e.role for e in agent.history.entries] == ["user"]

    def test_upstream_errors_propagate(self, agent, mock_create):
        mock_create.side_effect = ConnectionError("network down")
        with pytest.raises(ConnectionError):
            run(agent.process_message(Message.create("query", {})))

    def test_proposal_recommended_above_threshold(self, agent, mock_create):
        reply_with(mock_create, '{"analysis": "solid", "confidence": 0.71, "recommendations": ["go"]}')
        response = run(agent.process_message(Message.create("proposal", {"proposal": "p"})))

        assert response.data["decision"] == "recommended"
        assert response.data["confidence"] == 0.71
        assert response.data["recommendations"] == ["go"]
        assert response.data["proposal_id"].startswith("prop-")
        assert agent.analysed == []

    def test_proposal_needs_review_at_threshold(self, agent, mock_create):
        reply_with(mock_create, '{"analysis": "meh", "confidence": 0.7, "recommendations": []}')
        response = run(agent.process_message(Message.create("proposal", {"proposal": "p"})))
        assert response.data["decision"] == "needs-review"

    def test_proposal_prose_reply_needs_review(self, agent, mock_create):
        reply_with(mock_create, "I am not sure.")
        response = run(agent.process_message(Message.create("proposal", "p")))
        assert response.data["confidence"] == 0.7
        assert response.data["decision"] == "needs-review"

    def test_report_returns_insights(self, agent, mock_create):
        reply_with(mock_create, '["one", "two", "three"]')
        response = run(agent.process_message(Message.create("report", {"week": 1})))

        assert response.data["insights"] == ["one", "two", "three"]
        assert response.data["report_id"].startswith("report-")
        assert response.role == AgentRole.FAMILY


class TestModelCalls:
    def test_decision_request_shape(self, agent, mock_create):
        for i in range(8):
            agent.history.append("user" if i % 2 == 0 else "assistant", f"turn {i}")

        reply_with(mock_create, '{"analysis":"ok","confidence":0.9,"recommendations":["a","b"]}')
        result = run(agent.make_ai_decision("Decide", {"k": "v"}))

        assert result.confidence == 0.9
        assert result.recommendations == ["a", "b"]

        kwargs = mock_create.call_args.kwargs
        assert kwargs["model"] == "claude-3-opus-20240229"
        assert kwargs["max_tokens"] == 4096
        assert kwargs["temperature"] == 0.7
        assert kwargs["system"] == "You are a test agent."

        messages = kwargs["messages"]
        assert len(messages) == 6
        assert [m["content"] for m in messages[:5]] == [f"turn {i}" for i in range(3, 8)]
        assert messages[-1] == {"role": "user", "content": 'Decide\n\nContext:\n{\n  "k": "v"\n}'}

    def test_decision_without_context(self, agent, mock_create):
        run(agent.make_ai_decision("Just the prompt"))
        assert mock_create.call_args.kwargs["messages"] == [{"role": "user", "content": "Just the prompt"}]

    def test_decision_prose_reply(self, agent, mock_create):
        reply_with(mock_create, "Try this:\n- read\n- write")
        result = run(agent.make_ai_decision("Decide"))
        assert result.confidence == 0.7
        assert result.analysis == "Try this:\n- read\n- write"
        assert result.recommendations == ["read", "write"]

    def test_decision_with_no_text_block(self, agent, mock_create):
        mock_create.return_value = fake_response("", blocks=[])
        result = run(agent.make_ai_decision("Decide"))
        assert result.analysis == ""
        assert result.recommendations == []

    def test_insights_request_shape(self, agent, mock_create):
        agent.history.append("user", "earlier")
        reply_with(mock_create, "Insight: improve X\nInsight: improve Y")
        insights = run(agent.generate_insights({"score": 3}, "grades"))

        assert insights == ["Insight: improve X", "Insight: improve Y"]
        kwargs = mock_create.call_args.kwargs
        assert kwargs["max_tokens"] == 1024
        assert kwargs["temperature"] == 0.5
        assert len(kwargs["messages"]) == 1
        assert "Analyze this grades data" in kwargs["messages"][0]["content"]
        assert "JSON array" in kwargs["messages"][0]["content"]

    def test_insights_temperature_ignores_config(self, mock_create):
        agent = EchoAgent(AgentConfig(api_key="k", temperature=0.1))
        run(agent.generate_insights([], "x"))
        assert mock_create.call_args.kwargs["temperature"] == 0.5

    def test_token_usage_tracked(self, agent, mock_create):
        run(agent.make_ai_decision("one"))
        run(agent.make_ai_decision("two"))
        assert agent.client.usage.to_dict() == {"input": 20, "output": 40, "total": 60, "requests": 2}


class TestStatus:
    def test_inactive_uptime_zero(self, mock_create, config):
        agent = EchoAgent(config)
        status = agent.get_status()
        assert status.is_active is False
        assert status.stats["uptime"] == 0

    def test_snapshot(self, agent):
        agent.store_context("a", 1)
        agent.store_context("b", 2)
        agent.store_context("a", 3)
        run(agent.process_message(Message.create("query", {})))

        status = agent.get_status().to_dict()
        assert status["is_active"] is True
        assert status["role"] == "family"
        assert status["stats"]["uptime"] >= 0
        assert status["stats"]["conversation_length"] == 2
        assert status["stats"]["context_items"] == 2
        assert status["stats"]["model"] == "claude-3-opus-20240229"
        assert status["metadata"] == {"ai_enabled": True, "model": "claude-3-opus-20240229", "temperature": 0.7}

    def test_context_items_never_decrease(self, agent):
        counts = []
        for key in ["a", "b", "a", "c", "b"]:
            agent.store_context(key, key)
            counts.append(agent.get_status().stats["context_items"])
        assert counts == [1, 2, 2, 3, 3]
        assert agent.get_context("c") == "c"
        assert agent.get_all_context() == {"a": "a", "b": "b", "c": "c"}


def test_message_create_coerces_known_kinds():
    assert Message.create("report").kind is MessageKind.REPORT
    assert Message.create("mystery").kind == "mystery"
