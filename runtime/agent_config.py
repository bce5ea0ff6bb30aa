"""
Agent Configuration

Loads agent settings from config/agents.yaml and resolves the Anthropic
credential from the environment. The credential is resolved by the caller and
passed in explicitly; agents never read the environment themselves.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-opus-20240229"
DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), '..', 'config', 'agents.yaml')


@dataclass
class AgentConfig:
    """Configuration for an AI agent"""
    api_key: str
    name: Optional[str] = None
    description: Optional[str] = None

    # Hints carried for callers; the agent core does not act on them
    max_concurrent_tasks: Optional[int] = None
    timeout: Optional[float] = None

    model: str = DEFAULT_MODEL
    max_tokens: int = 4096
    temperature: float = 0.7
    system_prompt: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def resolve_api_key(api_key: Optional[str] = None, env_file: str = '.env.local') -> Optional[str]:
    """
    Resolve the Anthropic API key.

    An explicit key wins; otherwise ANTHROPIC_API_KEY is read after loading
    `env_file` (if present).
    """
    if api_key:
        return api_key
    load_dotenv(env_file, override=True)
    return os.getenv("ANTHROPIC_API_KEY")


def _default_config() -> Dict[str, Any]:
    """Get default configuration if YAML loading fails"""
    return {
        'default': {
            'model': DEFAULT_MODEL,
            'max_tokens': 4096,
            'temperature': 0.7,
        },
        'agents': {}
    }


def load_yaml_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load agent configuration from YAML file"""
    config_path = config_path or DEFAULT_CONFIG_PATH
    try:
        with open(config_path, 'r', encoding='utf-8') as file:
            config = yaml.safe_load(file) or {}
            logger.info(f"AGENT-CONFIG: Loaded configuration from {config_path}")
            return config
    except FileNotFoundError:
        logger.warning(f"AGENT-CONFIG: Configuration file {config_path} not found. Using defaults.")
        return _default_config()
    except yaml.YAMLError as e:
        logger.error(f"AGENT-CONFIG: Error parsing YAML configuration: {e}. Using defaults.")
        return _default_config()


def load_agent_config(agent_key: str, api_key: str, config_path: Optional[str] = None,
                      **overrides) -> AgentConfig:
    """
    Build an AgentConfig for one agent.

    Settings are merged in order: `default` block, the agent's block under
    `agents`, then explicit keyword overrides (None values are ignored).

    Args:
        agent_key: Agent block name in the YAML file (e.g. "bureaucracy")
        api_key: Resolved Anthropic API key
        config_path: Optional path to an alternate YAML file
        **overrides: Field values that take precedence over the file

    Returns:
        AgentConfig with unknown keys dropped
    """
    yaml_config = load_yaml_config(config_path)

    config_dict: Dict[str, Any] = dict(yaml_config.get('default') or {})
    agent_block = (yaml_config.get('agents') or {}).get(agent_key) or {}
    config_dict.update(agent_block)
    config_dict.update({key: value for key, value in overrides.items() if value is not None})

    known = {f.name for f in fields(AgentConfig)} - {'api_key'}
    unknown = set(config_dict) - known
    if unknown:
        logger.warning(f"AGENT-CONFIG: Ignoring unknown keys for {agent_key}: {', '.join(sorted(unknown))}")

    return AgentConfig(
        api_key=api_key,
        **{key: value for key, value in config_dict.items() if key in known}
    )
