"""
Response Parsing

Best-effort extraction of structured data from free-form model output.

Model replies are prose that may or may not embed JSON. Structured parsing is
tried first; when it fails the line heuristics below take over, so callers
always get a usable value back.
"""

import json
import logging
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from agents.agent_types import AnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.7
MAX_RECOMMENDATIONS = 5
MAX_INSIGHTS = 5

# "- item", "• item", "* item" or "12. item"
_LIST_MARKER = re.compile(r'^(?:[-•*]|\d+\.)\s+')
_SENTENCE_END = re.compile(r'[.!?]')

ACTION_PHRASES = (
    "try to", "consider", "practice", "schedule", "plan",
    "talk about", "express", "listen to", "spend time",
)


def _span(text: str, opener: str, closer: str) -> Optional[str]:
    """Greedy substring from the first opener to the last closer"""
    start = text.find(opener)
    end = text.rfind(closer) + 1
    if start != -1 and end > start:
        return text[start:end]
    return None


def extract_json_object(text: str) -> Optional[Any]:
    """Parse the first {...} span of `text`, or None"""
    candidate = _span(text, '{', '}')
    if candidate is None:
        return None
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        logger.debug("PARSER: Found braces but no valid JSON object")
        return None


def extract_json_array(text: str) -> Optional[Any]:
    """Parse the first [...] span of `text`, or None"""
    candidate = _span(text, '[', ']')
    if candidate is None:
        return None
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        logger.debug("PARSER: Found brackets but no valid JSON array")
        return None


def extract_recommendations(text: str, limit: int = MAX_RECOMMENDATIONS) -> List[str]:
    """
    Pull bullet or numbered list items out of `text`.

    Args:
        text: Raw model output
        limit: Maximum number of items to return

    Returns:
        Item texts with their markers stripped, in order of appearance
    """
    recommendations = []
    for line in text.split('\n'):
        match = _LIST_MARKER.match(line)
        if match:
            recommendations.append(line[match.end():].strip())
    return recommendations[:limit]


def extract_action_items(text: str, limit: int = MAX_RECOMMENDATIONS) -> List[str]:
    """Sentences of `text` that contain an action phrase, trimmed, in order"""
    items = []
    for sentence in _SENTENCE_END.split(text):
        if any(phrase in sentence.lower() for phrase in ACTION_PHRASES):
            items.append(sentence.strip())
    return items[:limit]


def non_empty_lines(text: str, limit: int = MAX_INSIGHTS) -> List[str]:
    """Trimmed non-empty lines of `text`, capped at `limit`"""
    return [line.strip() for line in text.split('\n') if line.strip()][:limit]


def parse_analysis(text: str) -> AnalysisResult:
    """
    Turn a decision reply into an AnalysisResult.

    An embedded JSON object is used when it validates as an AnalysisResult;
    otherwise the whole reply becomes the analysis with the default confidence
    and recommendations taken from its list items.
    """
    parsed = extract_json_object(text)
    if isinstance(parsed, dict):
        try:
            return AnalysisResult.model_validate(parsed)
        except ValidationError as e:
            logger.warning(f"PARSER: JSON object did not match analysis shape ({e.error_count()} errors), using text")

    return AnalysisResult(
        analysis=text,
        confidence=DEFAULT_CONFIDENCE,
        recommendations=extract_recommendations(text),
    )


def parse_insights(text: str) -> List[str]:
    """
    Turn an insights reply into at most five strings.

    An embedded JSON array wins; otherwise the reply's non-empty lines are used.
    """
    parsed = extract_json_array(text)
    if isinstance(parsed, list):
        insights = [item if isinstance(item, str) else json.dumps(item) for item in parsed]
        return insights[:MAX_INSIGHTS]

    return non_empty_lines(text)
