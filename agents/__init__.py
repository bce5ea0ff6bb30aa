"""
AI agents backed by the Anthropic Messages API.

- AIAgentBase: lifecycle, message dispatch, AI decisions and insights
- BureaucracyAgent: homework, emails, negotiations, school policies
- FamilyAgent: family-counseling prompts
"""

from agents.agent_types import (
    AgentConfigurationError, AgentError, AgentNotActiveError, AgentResponse,
    AgentRole, AgentStatus, AnalysisResult, Message, MessageKind
)
from agents.ai_agent_base import AIAgentBase
from agents.bureaucracy_agent import BureaucracyAgent
from agents.family_agent import FamilyAgent

AGENT_CLASSES = {
    AgentRole.BUREAUCRACY.value: BureaucracyAgent,
    AgentRole.FAMILY.value: FamilyAgent,
}

__all__ = [
    'AIAgentBase',
    'BureaucracyAgent',
    'FamilyAgent',
    'AGENT_CLASSES',
    'AgentConfigurationError',
    'AgentError',
    'AgentNotActiveError',
    'AgentResponse',
    'AgentRole',
    'AgentStatus',
    'AnalysisResult',
    'Message',
    'MessageKind',
]
