"""
AI Agent Base

Foundation for Claude-backed agents. Provides:
- Lifecycle (start/stop) with listener notifications
- Message dispatch by message kind
- AI decisions and insights with best-effort structured parsing
- Bounded conversation history and an in-memory context store
- Status reporting

Subclasses supply the system prompt and the domain analysis handler.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

from agents.agent_memory import ContextStore, ConversationHistory
from agents.agent_types import (
    AgentConfigurationError, AgentNotActiveError, AgentResponse, AgentRole,
    AgentStatus, AnalysisResult, Message, MessageKind
)
from agents.response_parsing import parse_analysis, parse_insights
from runtime.agent_config import AgentConfig
from runtime.completion_client import CompletionClient

logger = logging.getLogger(__name__)

Listener = Callable[[str, Dict[str, Any]], Awaitable[None]]

DECISION_HISTORY_TURNS = 5
INSIGHTS_MAX_TOKENS = 1024
INSIGHTS_TEMPERATURE = 0.5
RECOMMEND_THRESHOLD = 0.7

PROPOSAL_PROMPT = "Evaluate this proposal and provide detailed analysis with pros, cons, and recommendations"


def now_ms() -> int:
    return int(time.time() * 1000)


class AIAgentBase(ABC):
    """
    Abstract base class for AI-powered agents.

    Subclasses must set `role` and `description` and implement
    create_system_prompt() and process_ai_analysis().
    """

    role: AgentRole
    description: str = ""

    def __init__(self, config: AgentConfig):
        """
        Initialize the agent.

        Args:
            config: Agent configuration with a resolved API key

        Raises:
            AgentConfigurationError: If no API key was supplied
        """
        if not config.api_key:
            raise AgentConfigurationError(
                "Anthropic API key is required for AI agents. Resolve ANTHROPIC_API_KEY before constructing the agent."
            )

        self.config = config
        self.id = f"{type(self).__name__.lower()}-{now_ms()}"
        self.name = config.name or type(self).__name__
        self.is_active = False

        self.client = CompletionClient(api_key=config.api_key)
        self.model = config.model
        self.max_tokens = config.max_tokens
        self.temperature = config.temperature
        self.system_prompt = config.system_prompt or self.create_system_prompt()

        self.history = ConversationHistory()
        self.context = ContextStore()
        self._listeners: List[Listener] = []

    @abstractmethod
    def create_system_prompt(self) -> str:
        """Return the default system prompt for this agent"""

    @abstractmethod
    async def process_ai_analysis(self, message: Message) -> AgentResponse:
        """Domain-specific handling for a message"""

    # Lifecycle

    def add_listener(self, listener: Listener) -> None:
        """Register an async callback for lifecycle events"""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _emit(self, event: str) -> None:
        payload = {"agent_id": self.id, "role": self.role.value}
        for listener in list(self._listeners):
            await listener(event, payload)

    async def start(self) -> None:
        self.is_active = True
        await self._emit("agent:started")
        logger.info(f"AI-AGENT: {self.name} started")

    async def stop(self) -> None:
        self.is_active = False
        await self._emit("agent:stopped")
        logger.info(f"AI-AGENT: {self.name} stopped")

    # Dispatch

    async def process_message(self, message: Message) -> AgentResponse:
        """
        Process one message and return the agent's response.

        The message is recorded in history before dispatch and the response
        after it, so a failing handler leaves only the request entry behind.

        Raises:
            AgentNotActiveError: If the agent has not been started
        """
        if not self.is_active:
            raise AgentNotActiveError(f"{self.name} is not active")

        logger.debug(f"AI-AGENT: {self.name} processing {message.kind_value} message {message.id}")

        self.history.append("user", json.dumps(message.to_dict(), default=str))

        handlers = {
            MessageKind.QUERY: self.handle_query,
            MessageKind.COMMAND: self.handle_command,
            MessageKind.PROPOSAL: self.handle_proposal,
            MessageKind.EVENT: self.handle_event,
            MessageKind.REPORT: self.handle_report,
        }
        handler = handlers.get(message.kind, self.process_ai_analysis)

        try:
            result = await handler(message)
        except Exception as e:
            logger.error(f"AI-AGENT: {self.name} error processing message {message.id}: {e}")
            raise

        self.history.append("assistant", json.dumps(result.to_dict(), default=str))
        return result

    async def handle_query(self, message: Message) -> AgentResponse:
        return await self.process_ai_analysis(message)

    async def handle_command(self, message: Message) -> AgentResponse:
        return await self.process_ai_analysis(message)

    async def handle_event(self, message: Message) -> AgentResponse:
        return await self.process_ai_analysis(message)

    async def handle_proposal(self, message: Message) -> AgentResponse:
        analysis = await self.make_ai_decision(PROPOSAL_PROMPT, message.content)

        return self.respond({
            "proposal_id": f"prop-{now_ms()}",
            "analysis": analysis.analysis,
            "confidence": analysis.confidence,
            "recommendations": analysis.recommendations,
            "decision": "recommended" if analysis.confidence > RECOMMEND_THRESHOLD else "needs-review",
        })

    async def handle_report(self, message: Message) -> AgentResponse:
        insights = await self.generate_insights(message.content, "report")

        return self.respond({
            "report_id": f"report-{now_ms()}",
            "insights": insights,
        })

    def respond(self, data: Any = None, success: bool = True, error: Optional[str] = None) -> AgentResponse:
        """Build a response stamped with this agent's id and role"""
        return AgentResponse(success=success, agent_id=self.id, role=self.role, data=data, error=error)

    # Model calls

    async def complete(self, prompt: str, max_tokens: Optional[int] = None,
                       temperature: Optional[float] = None, history_turns: int = 0) -> str:
        """
        Send `prompt` to the model and return the reply text.

        Args:
            prompt: User prompt
            max_tokens: Token budget (defaults to the configured budget)
            temperature: Sampling temperature (defaults to the configured value)
            history_turns: How many recent history entries to send before the prompt
        """
        messages = self.history.as_messages(history_turns)
        messages.append({"role": "user", "content": prompt})

        completion = await self.client.complete(
            system=self.system_prompt,
            messages=messages,
            model=self.model,
            max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
            temperature=temperature if temperature is not None else self.temperature,
        )
        return completion.text

    async def make_ai_decision(self, prompt: str, context: Any = None) -> AnalysisResult:
        """
        Ask the model for an analysis.

        Never raises on malformed output: a reply without a usable JSON object
        becomes a plain-text analysis with the default confidence.
        """
        full_prompt = prompt
        if context is not None:
            full_prompt = f"{prompt}\n\nContext:\n{json.dumps(context, indent=2, default=str)}"

        text = await self.complete(full_prompt, history_turns=DECISION_HISTORY_TURNS)
        return parse_analysis(text)

    async def generate_insights(self, data: Any, topic: str) -> List[str]:
        """Ask the model for up to five actionable insights about `data`"""
        prompt = (
            f"Analyze this {topic} data and provide key insights:\n"
            f"{json.dumps(data, indent=2, default=str)}\n\n"
            "Provide 3-5 specific, actionable insights in a JSON array format."
        )

        text = await self.complete(prompt, max_tokens=INSIGHTS_MAX_TOKENS, temperature=INSIGHTS_TEMPERATURE)
        return parse_insights(text)

    # Context memory

    def store_context(self, key: str, value: Any) -> None:
        self.context.set(key, value)

    def get_context(self, key: str) -> Any:
        return self.context.get(key)

    def get_all_context(self) -> Dict[str, Any]:
        return self.context.all()

    # Status

    def uptime_ms(self) -> int:
        if not self.is_active:
            return 0
        created_ms = int(self.id.rsplit('-', 1)[1])
        return now_ms() - created_ms

    def get_status(self) -> AgentStatus:
        return AgentStatus(
            id=self.id,
            name=self.name,
            role=self.role,
            is_active=self.is_active,
            stats={
                "uptime": self.uptime_ms(),
                "conversation_length": len(self.history),
                "context_items": len(self.context),
                "model": self.model,
            },
            metadata={
                "ai_enabled": True,
                "model": self.model,
                "temperature": self.temperature,
            },
        )
