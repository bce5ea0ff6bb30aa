"""
Family Agent

AI agent for family dynamics: relationship advice, conflict resolution and
mediation, emotional support, family health assessments, traditions,
milestones and family-time scheduling.

Keeps an in-memory store of family units (seeded with one sample family)
plus the emotional and conflict pattern models used by the rule-based
helpers. Model replies are free-form counseling text.
"""

import copy
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from agents.agent_types import AgentResponse, AgentRole, AgentStatus, Message, MessageKind
from agents.ai_agent_base import AIAgentBase, now_ms
from agents.response_parsing import extract_action_items
from runtime.agent_config import AgentConfig

logger = logging.getLogger(__name__)

CRITICAL_URGENCY_KEYWORDS = ("harm", "danger", "emergency", "crisis")
HIGH_URGENCY_KEYWORDS = ("severe", "unbearable", "desperate", "cant cope", "can't cope")

PROFESSIONAL_HELP_INDICATORS = (
    "violence", "abuse", "addiction", "severe depression",
    "suicidal", "suicide", "eating disorder", "trauma",
)

DEFAULT_COPING_STRATEGIES = [
    "Deep breathing exercises",
    "Talk to a trusted family member",
    "Engage in self-care activities",
    "Journal about feelings",
    "Seek professional support if needed",
]

RELATIONSHIP_RESOURCES = [
    "Family communication workshop",
    "Relationship strengthening activities guide",
    "Conflict resolution techniques",
]

EMOTIONAL_SUPPORT_RESOURCES = [
    "Family therapy resources",
    "Emotional regulation techniques",
    "Communication skills workshops",
    "Support group information",
    "Crisis hotline numbers",
]

GENERAL_RESOURCES = [
    "Family communication guides",
    "Conflict resolution worksheets",
    "Emotional intelligence resources",
    "Family activity ideas",
    "Professional counseling options",
]

RESOLUTION_STEPS = [
    "Create safe space for discussion",
    "Establish ground rules",
    "Share perspectives using I-statements",
    "Identify common ground",
    "Brainstorm solutions together",
    "Agree on action steps",
    "Schedule follow-up",
]

WARNING_SIGNS = [
    "Communication breakdown",
    "Escalating tension",
    "Withdrawal patterns",
    "Repeated unresolved issues",
]

EMOTIONAL_DYNAMICS = {
    "primary_emotions": ["frustration", "hurt", "misunderstanding"],
    "underlying_needs": ["recognition", "respect", "connection"],
    "communication_blocks": ["defensiveness", "assumption-making"],
    "healing_opportunities": ["shared vulnerability", "active listening"],
}

FAMILY_SUPPORT_ACTIONS = [
    "Schedule one-on-one time",
    "Create emotional check-in routine",
    "Plan comforting activities together",
]

WELLNESS_ACTION_PLAN = [
    "Schedule weekly family check-ins",
    "Implement appreciation rituals",
    "Plan monthly one-on-one time between members",
    "Create conflict resolution protocol",
    "Establish emotional support practices",
]

PRIORITY_ACTIVITIES = [
    "Weekly family dinner",
    "One-on-one parent-child time",
    "Monthly family adventure",
    "Daily connection moments",
]

SCHEDULING_TIPS = [
    "Start with one activity and build",
    "Be flexible with timing",
    "Focus on quality over quantity",
    "Include everyone in planning",
]

SCHEDULE_CONFLICT_ANALYSIS = {
    "conflicts": [],
    "recommendations": ["Consider alternating weeks", "Use shared calendar"],
    "flexibility_score": 75,
}

FLEXIBILITY_OPTIONS = {
    "alternative_times": ["Weekend mornings", "After dinner", "Sunday afternoons"],
    "virtual_options": ["Video calls for distant members", "Online games together"],
    "quick_connections": ["5-minute check-ins", "Goodnight rituals", "Meal prep together"],
}

EVENT_SUPPORT = {
    "birth": "Celebrate new life while supporting exhausted parents",
    "death": "Provide grief support and honor memories together",
    "graduation": "Celebrate achievement and navigate transitions",
    "wedding": "Joy celebration with family role adjustments",
    "divorce": "Support through difficult transition with compassion",
}

EVENT_ACTIONS = {
    "birth": ["Organize meal train for new parents", "Schedule sibling adjustment support", "Plan welcome celebration"],
    "graduation": ["Plan celebration gathering", "Create memory book", "Discuss future plans supportively"],
    "conflict": ["Schedule mediation session", "Implement cooling-off period", "Plan resolution activities"],
}

EVENT_IMPACT = {
    "immediate_impact": "Emotional adjustment needed",
    "long_term_considerations": ["Relationship dynamics shift", "New routines required"],
    "support_duration": "3-6 months active support recommended",
}

MEDIATION_GROUND_RULES = [
    "One person speaks at a time",
    "Use I-statements",
    "No interrupting",
    "Focus on solutions",
    "Respect all feelings",
]

MEDIATION_PHASES = [
    "Opening & ground rules",
    "Each person shares perspective",
    "Identify common ground",
    "Brainstorm solutions",
    "Create agreement",
    "Plan follow-up",
]

HEALING_ACTIVITIES = [
    "Forgiveness ritual",
    "Shared positive memory",
    "Future visioning together",
    "Trust-building exercise",
]

TRADITION_STEPS = [
    "Discuss with all family members",
    "Choose inaugural date",
    "Prepare necessary materials",
    "Document the first occurrence",
    "Plan for adaptation over time",
]

TRADITION_SUCCESS_FACTORS = [
    "Consistent participation",
    "Flexibility in execution",
    "Meaningful rituals",
    "Memory documentation",
]

MEMORY_PRESERVATION = [
    "Create photo/video montage",
    "Write letters to future self",
    "Plant commemorative tree/garden",
    "Start new tradition",
]

RELATIONSHIP_WEEKLY_ACTIONS = [
    "Quality time commitment",
    "Appreciation expression",
    "Active listening practice",
    "Shared activity",
]

RELATIONSHIP_MONTHLY_GOALS = [
    "Deep conversation",
    "New experience together",
    "Conflict resolution check-in",
    "Relationship celebration",
]

COMMAND_FOLLOW_UP = ["Monitor implementation", "Gather feedback", "Adjust as needed"]


@dataclass
class EmotionalState:
    current: str
    intensity: int  # 0-10
    triggers: List[str] = field(default_factory=list)
    support_needs: List[str] = field(default_factory=list)


@dataclass
class ConflictRecord:
    id: str
    issue: str
    resolution: str
    outcome: str  # resolved | ongoing | escalated
    lessons_learned: List[str] = field(default_factory=list)


@dataclass
class Relationship:
    member_id: str
    type: str
    quality: int  # 0-100
    dynamics: List[str] = field(default_factory=list)
    conflict_history: List[ConflictRecord] = field(default_factory=list)


@dataclass
class FamilyMember:
    id: str
    name: str
    role: str
    age: int
    emotional_state: EmotionalState
    personality: List[str] = field(default_factory=list)
    relationships: Dict[str, Relationship] = field(default_factory=dict)
    preferences: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Tradition:
    id: str
    name: str
    frequency: str
    significance: str
    next_occurrence: datetime
    participants: List[str] = field(default_factory=list)
    emotional_impact: int = 5


@dataclass
class FamilyValue:
    name: str
    priority: int
    alignment_score: int
    expression: List[str] = field(default_factory=list)


@dataclass
class FamilyHealth:
    communication_score: float
    conflict_resolution_score: float
    emotional_support_score: float
    tradition_adherence_score: float
    overall_harmony: float
    last_assessed: datetime


@dataclass
class FamilyUnit:
    id: str
    name: str
    health_metrics: FamilyHealth
    members: Dict[str, FamilyMember] = field(default_factory=dict)
    traditions: List[Tradition] = field(default_factory=list)
    values: List[FamilyValue] = field(default_factory=list)
    schedule: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class EmotionalPattern:
    triggers: List[str]
    healthy_expressions: List[str]
    coping_strategies: List[str]


@dataclass
class ConflictPattern:
    signs: List[str]
    interventions: List[str]
    prevention_strategies: List[str]


@dataclass
class Milestone:
    id: str
    family_id: Optional[str]
    type: str
    description: str
    recorded_at: datetime


def _dump(data: Any) -> str:
    return json.dumps(data, default=str)


def _mentions(data: Any, keywords) -> bool:
    text = _dump(data).lower()
    return any(keyword in text for keyword in keywords)


# Family health scoring

def communication_score(family: FamilyUnit) -> float:
    score = 70
    if any("communication" in value.name.lower() for value in family.values):
        score += 10
    for member in family.members.values():
        if member.emotional_state.current in ("happy", "content"):
            score += 5
    return min(100, score)


def conflict_resolution_score(family: FamilyUnit) -> float:
    score = 65
    for member in family.members.values():
        for relationship in member.relationships.values():
            history = relationship.conflict_history
            if history:
                resolved = len([c for c in history if c.outcome == "resolved"])
                score += resolved / len(history) * 20
    return min(100, max(0, score))


def emotional_support_score(family: FamilyUnit) -> float:
    score = 75
    for member in family.members.values():
        if not member.emotional_state.support_needs:
            score += 5
        elif member.emotional_state.intensity < 5:
            score += 3
    return min(100, score)


def tradition_score(family: FamilyUnit, now: Optional[datetime] = None) -> float:
    if not family.traditions:
        return 0
    now = now or datetime.now(timezone.utc)
    active = len([t for t in family.traditions if t.next_occurrence > now])
    return min(100, active / len(family.traditions) * 100)


def calculate_health_metrics(family: FamilyUnit, now: Optional[datetime] = None) -> FamilyHealth:
    """Recompute all four scores; overall harmony is their mean"""
    now = now or datetime.now(timezone.utc)
    scores = [
        communication_score(family),
        conflict_resolution_score(family),
        emotional_support_score(family),
        tradition_score(family, now),
    ]
    return FamilyHealth(
        communication_score=scores[0],
        conflict_resolution_score=scores[1],
        emotional_support_score=scores[2],
        tradition_adherence_score=scores[3],
        overall_harmony=sum(scores) / len(scores),
        last_assessed=now,
    )


def family_strengths(family: FamilyUnit) -> List[str]:
    metrics = family.health_metrics
    strengths = []
    if metrics.communication_score > 70:
        strengths.append("Strong communication patterns")
    if len(family.traditions) > 3:
        strengths.append("Rich tradition culture")
    if metrics.emotional_support_score > 80:
        strengths.append("Excellent emotional support system")
    return strengths


def family_growth_areas(family: FamilyUnit) -> List[str]:
    metrics = family.health_metrics
    areas = []
    if metrics.conflict_resolution_score < 60:
        areas.append("Conflict resolution skills")
    if metrics.communication_score < 70:
        areas.append("Open communication practices")
    return areas


class FamilyAgent(AIAgentBase):
    """Agent for family dynamics with emotional intelligence"""

    role = AgentRole.FAMILY
    description = "AI-powered agent specializing in family dynamics, emotional intelligence, and relationship harmony"

    def __init__(self, config: AgentConfig):
        super().__init__(config)
        self.families: Dict[str, FamilyUnit] = {}
        self.emotional_patterns: Dict[str, EmotionalPattern] = {}
        self.conflict_patterns: Dict[str, ConflictPattern] = {}
        self.milestones: List[Milestone] = []
        self.sessions_by_topic: Dict[str, int] = {}

        self._initialize_patterns()
        self._create_sample_family()
        self.store_context("families", self.families)

        logger.info(f"FAMILY-AGENT: {self.name} initialized with {len(self.families)} families")

    def create_system_prompt(self) -> str:
        return """You are an AI Family Dynamics Specialist with deep expertise in:

1. **Emotional Intelligence**: Understanding and managing emotions within family relationships
2. **Conflict Resolution**: Mediating disputes with empathy and fairness
3. **Tradition Management**: Preserving meaningful traditions while adapting to change
4. **Relationship Counseling**: Strengthening bonds between family members
5. **Life Transitions**: Supporting families through major life events
6. **Communication Enhancement**: Improving how family members express needs and feelings
7. **Cultural Sensitivity**: Respecting diverse family structures and values

Your approach is:
- Empathetic and non-judgmental
- Solution-focused while validating emotions
- Aware of generational differences
- Sensitive to power dynamics
- Protective of vulnerable family members
- Encouraging of healthy boundaries

When analyzing family situations:
1. Consider emotional undercurrents
2. Identify unmet needs
3. Recognize behavior patterns
4. Suggest actionable improvements
5. Celebrate strengths and progress

Always prioritize the emotional well-being and harmony of the family unit while respecting individual autonomy."""

    def _initialize_patterns(self) -> None:
        self.emotional_patterns["anger"] = EmotionalPattern(
            triggers=["unmet expectations", "feeling unheard", "boundary violations"],
            healthy_expressions=["I feel frustrated when...", "I need some time to cool down"],
            coping_strategies=["deep breathing", "physical exercise", "journaling"],
        )
        self.emotional_patterns["sadness"] = EmotionalPattern(
            triggers=["loss", "disappointment", "loneliness"],
            healthy_expressions=["I'm feeling down about...", "I need support with..."],
            coping_strategies=["talking to loved ones", "self-care activities", "professional help"],
        )
        self.emotional_patterns["anxiety"] = EmotionalPattern(
            triggers=["uncertainty", "change", "conflict"],
            healthy_expressions=["I'm worried about...", "I need reassurance that..."],
            coping_strategies=["mindfulness", "planning", "breaking down problems"],
        )

        self.conflict_patterns["communication-breakdown"] = ConflictPattern(
            signs=["silent treatment", "yelling", "dismissiveness"],
            interventions=["active listening exercises", "I-statements practice", "family meetings"],
            prevention_strategies=["regular check-ins", "appreciation rituals", "clear expectations"],
        )
        self.conflict_patterns["generational-clash"] = ConflictPattern(
            signs=["value disagreements", "lifestyle criticism", "control issues"],
            interventions=["perspective-taking exercises", "compromise negotiation", "boundary setting"],
            prevention_strategies=["cultural bridge-building", "shared activities", "mutual respect practices"],
        )

    def _create_sample_family(self) -> None:
        now = datetime.now(timezone.utc)
        self.families["family-1"] = FamilyUnit(
            id="family-1",
            name="The Johnsons",
            members={
                "parent1": FamilyMember(
                    id="member-1",
                    name="Sarah Johnson",
                    role="parent",
                    age=42,
                    personality=["caring", "organized", "sometimes anxious"],
                    emotional_state=EmotionalState(
                        current="stressed",
                        intensity=6,
                        triggers=["work-life balance", "teen behavior"],
                        support_needs=["validation", "practical help"],
                    ),
                    preferences={"communication": "direct but gentle", "conflict-style": "collaborative"},
                ),
            },
            traditions=[
                Tradition(
                    id="tradition-1",
                    name="Sunday Family Dinners",
                    frequency="weekly",
                    participants=["all"],
                    significance="Connection and communication time",
                    next_occurrence=now + timedelta(days=7),
                    emotional_impact=8,
                ),
            ],
            values=[
                FamilyValue(
                    name="Open Communication",
                    priority=9,
                    expression=["family meetings", "no-phone dinner time"],
                    alignment_score=75,
                ),
            ],
            health_metrics=FamilyHealth(
                communication_score=75,
                conflict_resolution_score=68,
                emotional_support_score=82,
                tradition_adherence_score=90,
                overall_harmony=78.75,
                last_assessed=now,
            ),
        )

    async def process_ai_analysis(self, message: Message) -> AgentResponse:
        content = message.content if isinstance(message.content, dict) else {}

        if message.kind == MessageKind.QUERY:
            return self.respond(await self._handle_query(content, message.content))
        if message.kind == MessageKind.COMMAND:
            return self.respond(await self._handle_command(content))
        if message.kind == MessageKind.EVENT:
            return self.respond(await self.process_family_event(content))

        return self.respond(await self.general_family_query(message.content))

    def _count(self, topic: str) -> None:
        self.sessions_by_topic[topic] = self.sessions_by_topic.get(topic, 0) + 1
        self.store_context("last_topic", topic)

    async def _handle_query(self, content: Dict[str, Any], raw: Any) -> Dict[str, Any]:
        topic = content.get("topic")
        data = content.get("data") or {}

        if topic == "relationship-advice":
            return await self.provide_relationship_advice(data)
        if topic == "conflict-resolution":
            return await self.suggest_conflict_resolution(data)
        if topic == "emotional-support":
            return await self.provide_emotional_support(data)
        if topic == "family-health":
            return await self.assess_family_health(data.get("family_id"))
        if topic == "tradition-planning":
            return await self.create_tradition(data)
        if topic == "milestone-celebration":
            return await self.track_milestone(data)

        return await self.general_family_query(raw)

    async def _handle_command(self, content: Dict[str, Any]) -> Dict[str, Any]:
        action = content.get("action")
        data = content.get("data") or {}

        if action == "schedule-family-time":
            return await self.schedule_family_time(data)
        if action == "mediate-conflict":
            return await self.mediate_conflict(data)
        if action == "create-tradition":
            return await self.create_tradition(data)
        if action == "track-milestone":
            return await self.track_milestone(data)
        if action == "strengthen-relationship":
            return await self.strengthen_relationship(data)

        analysis = await self.make_ai_decision(
            f"Execute this family-related command with care and wisdom: {action}",
            data
        )
        return {
            "success": True,
            "action": action,
            **analysis.model_dump(),
            "follow_up_actions": list(COMMAND_FOLLOW_UP),
        }

    # Counseling

    async def provide_relationship_advice(self, data: Any) -> Dict[str, Any]:
        self._count("relationship-advice")
        prompt = f"""A family member is seeking relationship advice:
{_dump(data)}

Provide empathetic, actionable advice that:
1. Validates their feelings
2. Identifies underlying needs
3. Suggests specific communication strategies
4. Recommends activities to strengthen the relationship
5. Addresses any red flags with appropriate resources

Format as a caring, supportive response."""

        advice = await self.complete(prompt, max_tokens=1024, temperature=0.7)

        return {
            "success": True,
            "advice": advice,
            "action_items": extract_action_items(advice),
            "resources": list(RELATIONSHIP_RESOURCES),
            "follow_up_recommended": True,
        }

    async def suggest_conflict_resolution(self, data: Any) -> Dict[str, Any]:
        self._count("conflict-resolution")
        prompt = f"""Analyze this family conflict and provide resolution strategies:
{_dump(data)}

Consider:
1. Each party's perspective and emotional needs
2. Power dynamics and vulnerabilities
3. Cultural and generational factors
4. Past conflict patterns
5. Win-win solutions

Provide a structured conflict resolution plan with specific steps."""

        plan = await self.complete(prompt, max_tokens=1500, temperature=0.6)

        return {
            "success": True,
            "resolution_plan": plan,
            "emotional_analysis": copy.deepcopy(EMOTIONAL_DYNAMICS),
            "mediation_steps": list(RESOLUTION_STEPS),
            "conflict_patterns": self.matching_conflict_patterns(data),
            "warning_signs_flagged": list(WARNING_SIGNS),
            "professional_help_recommended": self.needs_professional_help(data),
        }

    async def mediate_conflict(self, data: Any) -> Dict[str, Any]:
        self._count("mediate-conflict")
        prompt = f"""Mediate this family conflict with wisdom and fairness:
{_dump(data)}

Approach with:
1. Neutral, non-judgmental stance
2. Validation of all perspectives
3. Focus on underlying needs
4. Creative problem-solving
5. Future-oriented solutions

Create a mediation process that heals relationships while addressing issues."""

        mediation = await self.complete(prompt, max_tokens=2000, temperature=0.6)

        return {
            "success": True,
            "mediation_process": mediation,
            "ground_rules": list(MEDIATION_GROUND_RULES),
            "phases": list(MEDIATION_PHASES),
            "healing_activities": list(HEALING_ACTIVITIES),
            "professional_help_recommended": self.needs_professional_help(data),
        }

    async def provide_emotional_support(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._count("emotional-support")
        prompt = f"""A family member needs emotional support:
{_dump(data)}

Provide compassionate support that:
1. Acknowledges and validates their emotions
2. Offers coping strategies
3. Suggests family support mechanisms
4. Identifies when professional help might be needed
5. Provides hope and encouragement

Be warm, understanding, and practical."""

        support = await self.complete(prompt, max_tokens=1024, temperature=0.8)

        return {
            "success": True,
            "emotional_support": support,
            "coping_strategies": self.coping_strategies(data.get("emotion")),
            "family_support_actions": list(FAMILY_SUPPORT_ACTIONS),
            "resources": list(EMOTIONAL_SUPPORT_RESOURCES),
            "urgency_level": self.emotional_urgency(data),
            "professional_help_recommended": self.needs_professional_help(data),
        }

    async def strengthen_relationship(self, data: Any) -> Dict[str, Any]:
        self._count("strengthen-relationship")
        prompt = f"""Create a plan to strengthen this family relationship:
{_dump(data)}

Develop specific, actionable strategies that:
1. Address current challenges
2. Build on existing strengths
3. Create positive shared experiences
4. Improve communication patterns
5. Deepen emotional connection

Consider both immediate actions and long-term practices."""

        plan = await self.complete(prompt, max_tokens=1500, temperature=0.7)

        return {
            "success": True,
            "strengthening_plan": plan,
            "action_items": extract_action_items(plan),
            "weekly_actions": list(RELATIONSHIP_WEEKLY_ACTIONS),
            "monthly_goals": list(RELATIONSHIP_MONTHLY_GOALS),
            "progress_tracking": "Monthly relationship health assessments",
        }

    # Family units

    async def assess_family_health(self, family_id: Optional[str]) -> Dict[str, Any]:
        if not family_id:
            return {"success": False, "error": "Family ID required for health assessment"}

        family = self.families.get(family_id)
        if family is None:
            logger.warning(f"FAMILY-AGENT: Family {family_id} not found")
            return {"success": False, "error": "Family not found"}

        self._count("family-health")
        snapshot = {
            "values": [asdict(value) for value in family.values],
            "recent_events": family.schedule[-5:],
            "traditions": [asdict(tradition) for tradition in family.traditions],
            "metrics": asdict(family.health_metrics),
        }
        prompt = f"""Assess the health of this family unit:
{_dump(snapshot)}

Provide:
1. Overall health assessment
2. Strengths to celebrate
3. Areas for improvement
4. Specific recommendations
5. Warning signs to monitor"""

        assessment = await self.complete(prompt, max_tokens=1500, temperature=0.5)

        family.health_metrics = calculate_health_metrics(family)
        logger.info(f"FAMILY-AGENT: {family.name} harmony now {family.health_metrics.overall_harmony:.1f}")

        return {
            "success": True,
            "assessment": assessment,
            "metrics": asdict(family.health_metrics),
            "strengths": family_strengths(family),
            "growth_areas": family_growth_areas(family),
            "action_plan": list(WELLNESS_ACTION_PLAN),
            "next_check_in": (datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
        }

    async def create_tradition(self, data: Any) -> Dict[str, Any]:
        self._count("tradition-planning")
        prompt = f"""Help create a meaningful family tradition:
{_dump(data)}

Consider:
1. Family values and interests
2. Feasibility and sustainability
3. Inclusivity for all members
4. Emotional significance
5. Flexibility for growth

Design a tradition that will strengthen family bonds over time."""

        plan = await self.complete(prompt, max_tokens=1024, temperature=0.8)

        return {
            "success": True,
            "tradition_plan": plan,
            "implementation_steps": list(TRADITION_STEPS),
            "success_factors": list(TRADITION_SUCCESS_FACTORS),
        }

    async def track_milestone(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._count("milestone")
        prompt = f"""Record and celebrate this family milestone:
{_dump(data)}

Create a meaningful way to:
1. Honor the achievement/transition
2. Include all family members
3. Create lasting memories
4. Mark growth and change
5. Strengthen family bonds

Provide both immediate and long-term commemoration ideas."""

        celebration = await self.complete(prompt, max_tokens=1024, temperature=0.7)

        milestone = Milestone(
            id=f"milestone-{now_ms()}-{len(self.milestones)}",
            family_id=data.get("family_id"),
            type=data.get("type", "general"),
            description=data.get("description", ""),
            recorded_at=datetime.now(timezone.utc),
        )
        self.milestones.append(milestone)

        return {
            "success": True,
            "milestone_recorded": True,
            "milestone_id": milestone.id,
            "celebration_plan": celebration,
            "memory_preservation": list(MEMORY_PRESERVATION),
            "family_reflection": "Schedule time to reflect on growth as a family",
        }

    async def schedule_family_time(self, data: Any) -> Dict[str, Any]:
        self._count("schedule-family-time")
        prompt = f"""Help schedule family time considering:
{_dump(data)}

Factors to consider:
1. Each member's availability and preferences
2. Emotional needs and current stress levels
3. Relationship dynamics that need attention
4. Balance of activities (fun, meaningful, necessary)
5. Realistic time commitments

Create an optimal schedule that strengthens family bonds."""

        schedule = await self.complete(prompt, max_tokens=1024, temperature=0.6)

        return {
            "success": True,
            "proposed_schedule": schedule,
            "conflict_analysis": copy.deepcopy(SCHEDULE_CONFLICT_ANALYSIS),
            "priority_activities": list(PRIORITY_ACTIVITIES),
            "flexibility_options": copy.deepcopy(FLEXIBILITY_OPTIONS),
            "implementation_tips": list(SCHEDULING_TIPS),
        }

    # Events and general queries

    async def process_family_event(self, content: Dict[str, Any]) -> Dict[str, Any]:
        event_type = content.get("event_type", "unknown")
        self._count(f"event:{event_type}")
        prompt = f"""Process this family event with emotional intelligence:
Event Type: {event_type}
Data: {_dump(content.get("data"))}

Consider emotional impact, family dynamics, and provide supportive guidance."""

        guidance = await self.complete(prompt, max_tokens=1024, temperature=0.7)

        return {
            "success": True,
            "event_processed": event_type,
            "guidance": guidance,
            "emotional_support": EVENT_SUPPORT.get(event_type, "Provide emotional presence and support"),
            "suggested_actions": list(EVENT_ACTIONS.get(event_type, ["Assess needs", "Provide support", "Plan follow-up"])),
            "family_impact_assessment": copy.deepcopy(EVENT_IMPACT),
        }

    async def general_family_query(self, content: Any) -> Dict[str, Any]:
        self._count("general")
        prompt = f"""Answer this family-related query with expertise and empathy:
{_dump(content)}

Provide practical, actionable advice that considers emotional well-being and family dynamics."""

        answer = await self.complete(prompt, max_tokens=1500, temperature=0.7)

        return {
            "success": True,
            "response": answer,
            "additional_resources": list(GENERAL_RESOURCES),
        }

    # Rule-based helpers

    def coping_strategies(self, emotion: Any) -> List[str]:
        pattern = self.emotional_patterns.get(emotion.lower()) if isinstance(emotion, str) else None
        if pattern is None:
            return list(DEFAULT_COPING_STRATEGIES)
        return list(pattern.coping_strategies)

    def matching_conflict_patterns(self, data: Any) -> Dict[str, Dict[str, List[str]]]:
        """Known conflict patterns whose signs appear in `data`"""
        return {
            name: asdict(pattern)
            for name, pattern in self.conflict_patterns.items()
            if _mentions(data, pattern.signs)
        }

    @staticmethod
    def emotional_urgency(data: Any) -> str:
        """critical / high on keyword matches, otherwise medium"""
        if _mentions(data, CRITICAL_URGENCY_KEYWORDS):
            return "critical"
        if _mentions(data, HIGH_URGENCY_KEYWORDS):
            return "high"
        return "medium"

    @staticmethod
    def needs_professional_help(data: Any) -> bool:
        return _mentions(data, PROFESSIONAL_HELP_INDICATORS)

    def get_status(self) -> AgentStatus:
        status = super().get_status()
        families = list(self.families.values())
        harmony = sum(f.health_metrics.overall_harmony for f in families) / len(families) if families else 0

        status.extra = {
            "family_stats": {
                "families": len(families),
                "total_members": sum(len(f.members) for f in families),
                "average_family_harmony": round(harmony),
                "active_interventions": len(self.conflict_patterns),
                "emotional_patterns_tracked": len(self.emotional_patterns),
                "milestones": len(self.milestones),
                "sessions": sum(self.sessions_by_topic.values()),
                "sessions_by_topic": dict(self.sessions_by_topic),
            },
            "capabilities": [
                "Relationship advice",
                "Conflict resolution and mediation",
                "Emotional support",
                "Family health assessment",
                "Tradition and milestone planning",
                "Family time scheduling",
            ],
        }
        return status
