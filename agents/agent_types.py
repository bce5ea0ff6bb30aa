"""
Agent Types

Shared message, response and analysis structures used by every AI agent:
- Message / MessageKind: the caller-facing envelope and its dispatch tag
- AgentResponse: what process_message() hands back
- AnalysisResult: normalized output of a model decision
- AgentStatus: read-only status snapshot
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class AgentError(Exception):
    """Base class for agent errors"""


class AgentConfigurationError(AgentError, ValueError):
    """Raised at construction when the agent cannot be configured"""


class AgentNotActiveError(AgentError, RuntimeError):
    """Raised when a message reaches an agent that has not been started"""


class AgentRole(str, Enum):
    """Agent role options"""
    BUREAUCRACY = "bureaucracy"
    FAMILY = "family"


class MessageKind(str, Enum):
    """Message kinds understood by the dispatcher"""
    QUERY = "query"
    COMMAND = "command"
    PROPOSAL = "proposal"
    EVENT = "event"
    REPORT = "report"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """
    Incoming agent message.

    `kind` is normally a MessageKind; any other string is accepted and is
    routed to the agent's generic analysis handler.
    """
    id: str
    sender: str
    recipient: str
    kind: Union[MessageKind, str]
    content: Any = None
    timestamp: datetime = field(default_factory=_utcnow)
    priority: Optional[str] = None  # low | medium | high
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def create(cls, kind: Union[MessageKind, str], content: Any = None,
               sender: str = "user", recipient: str = "agent", **kwargs) -> 'Message':
        """Build a message with a generated id"""
        if isinstance(kind, str) and not isinstance(kind, MessageKind):
            try:
                kind = MessageKind(kind)
            except ValueError:
                pass
        message_id = f"msg-{int(time.time() * 1000)}"
        return cls(id=message_id, sender=sender, recipient=recipient,
                   kind=kind, content=content, **kwargs)

    @property
    def kind_value(self) -> str:
        return self.kind.value if isinstance(self.kind, MessageKind) else str(self.kind)

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary for serialization"""
        return {
            "id": self.id,
            "from": self.sender,
            "to": self.recipient,
            "type": self.kind_value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "priority": self.priority,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class AgentResponse:
    """Standard response produced once per processed message"""
    success: bool
    agent_id: str
    role: AgentRole
    data: Any = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert response to dictionary for serialization"""
        return {
            "success": self.success,
            "data": self.data,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
            "agent_id": self.agent_id,
            "role": self.role.value,
        }


class AnalysisResult(BaseModel):
    """Structured result of an AI decision"""
    analysis: str = Field(..., description="Free-text analysis")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence score")
    recommendations: List[str] = Field(default_factory=list, description="Ordered recommendations")
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional extras such as reasoning, sources, estimated_time, complexity"
    )

    def meta(self, key: str, default: Any = None) -> Any:
        """Read a metadata key, tolerating a missing metadata block"""
        return (self.metadata or {}).get(key, default)


@dataclass
class HistoryEntry:
    """A single conversation turn"""
    role: str  # "user" (requester) or "assistant" (responder)
    content: str

    def to_message(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class AgentStatus:
    """Point-in-time status snapshot of an agent"""
    id: str
    name: str
    role: AgentRole
    is_active: bool
    stats: Dict[str, Any]
    metadata: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        status = {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "is_active": self.is_active,
            "stats": self.stats,
            "metadata": self.metadata,
        }
        status.update(self.extra)
        return status
