"""
Bureaucracy Agent

AI agent for academic and organizational paperwork:
- Homework tracking and status summaries
- Email drafting from templates or with the model
- Teacher negotiation strategies
- Policy interpretation and analysis
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from agents.agent_types import AgentResponse, AgentRole, AgentStatus, Message, MessageKind
from agents.ai_agent_base import AIAgentBase, now_ms
from runtime.agent_config import AgentConfig

logger = logging.getLogger(__name__)

HOMEWORK_DONE_STATES = ("submitted", "graded")


@dataclass
class HomeworkAssignment:
    id: str
    subject: str
    title: str
    due_date: datetime
    requirements: List[str] = field(default_factory=list)
    status: str = "pending"  # pending | in_progress | submitted | graded
    grade: Optional[str] = None
    teacher_notes: Optional[str] = None


@dataclass
class EmailTemplate:
    id: str
    type: str  # excuse | extension_request | clarification | complaint | praise
    subject: str
    body: str
    tone: str  # formal | professional | friendly | apologetic


@dataclass
class TeacherNegotiation:
    id: str
    teacher_name: str
    subject: str
    issue_type: str  # grade_dispute | extension | extra_credit | makeup_work
    status: str  # pending | negotiating | resolved | rejected
    strategy: str
    outcome: Optional[str] = None


@dataclass
class Policy:
    id: str
    name: str
    content: str
    category: str
    department: str
    effective_date: str
    version: Optional[str] = None
    rules: List[str] = field(default_factory=list)
    exceptions: List[str] = field(default_factory=list)


EXTENSION_REQUEST_BODY = """Dear [Teacher Name],

I hope this email finds you well. I am writing to request an extension for [Assignment Name] originally due on [Due Date].

[Reason for extension - be specific but concise]

I understand the importance of meeting deadlines and take full responsibility for this situation. I have already completed [percentage]% of the assignment and am committed to submitting quality work.

Would it be possible to submit the assignment by [Proposed New Date]? I am happy to provide any additional documentation if needed.

Thank you for considering my request. I greatly appreciate your understanding and look forward to your response.

Best regards,
[Your Name]"""

GRADE_CLARIFICATION_BODY = """Dear [Teacher Name],

I hope you're having a good day. I recently received my grade for [Assignment/Test Name] and would appreciate some clarification on the assessment.

I noticed that I received [Grade/Points] for [Specific Section/Question]. Based on my understanding of the rubric/requirements, I believed my response addressed [Specific Points].

Could we schedule a brief meeting to review my work? I'm eager to understand where I can improve and ensure I'm meeting your expectations for future assignments.

I'm available [List 2-3 time slots] but am happy to work around your schedule.

Thank you for your time and feedback.

Sincerely,
[Your Name]"""

TEMPLATE_EMAIL_TIPS = [
    "Send during business hours for better response rate",
    "Follow up after 48-72 hours if no response",
    "Keep copies of all correspondence",
]

NEGOTIATION_NEXT_STEPS = [
    "Schedule meeting with teacher",
    "Prepare supporting documents",
    "Practice key talking points",
    "Have alternative proposals ready",
]

DEFAULT_POLICY_RISKS = [
    "Ensure full compliance",
    "Maintain documentation",
    "Follow proper channels",
]


def _parse_due_date(value: Any) -> datetime:
    """Accept a datetime or an ISO-8601 string; naive values are taken as UTC"""
    if isinstance(value, datetime):
        due = value
    else:
        text = str(value)
        # fromisoformat only accepts a trailing "Z" from Python 3.11
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        due = datetime.fromisoformat(text)
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    return due


def _content(message: Message) -> Dict[str, Any]:
    return message.content if isinstance(message.content, dict) else {}


class BureaucracyAgent(AIAgentBase):
    """Agent for homework, emails, teacher negotiations and school policies"""

    role = AgentRole.BUREAUCRACY
    description = "AI-powered agent for managing organizational structures, academic bureaucracy, and formal processes"

    def __init__(self, config: AgentConfig):
        super().__init__(config)

        self.homework: Dict[str, HomeworkAssignment] = {}
        self.email_templates: Dict[str, EmailTemplate] = {}
        self.negotiations: Dict[str, TeacherNegotiation] = {}
        self.policies: Dict[str, Policy] = {}

        self._initialize_bureaucracy()

    def create_system_prompt(self) -> str:
        return """You are an expert bureaucracy navigation agent specializing in academic and organizational management. Your expertise includes:

1. **Homework Management**: Track assignments, deadlines, requirements, and optimize completion strategies
2. **Email Composition**: Draft professional, persuasive emails for various academic situations (extensions, clarifications, complaints)
3. **Teacher Negotiations**: Develop strategies for grade disputes, extension requests, and extra credit opportunities
4. **Policy Interpretation**: Analyze school policies to find legitimate interpretations and compliance strategies
5. **Document Generation**: Create formal reports, applications, and procedural documents

Key principles:
- Always maintain professional and respectful communication
- Find creative but legitimate solutions within policy boundaries
- Prioritize academic success while managing workload efficiently
- Build positive relationships with teachers and administrators

Always respond with structured JSON when possible, including:
- analysis: Your detailed analysis
- confidence: Confidence level (0-1)
- recommendations: Array of actionable recommendations
- metadata: Any additional context or data"""

    def _initialize_bureaucracy(self) -> None:
        self.policies["late-submission"] = Policy(
            id="late-submission",
            name="Late Submission Policy",
            content="Standard policy for late assignment submissions",
            category="academic",
            department="academics",
            effective_date="2024-01-01",
            version="2.1",
            rules=[
                "10% deduction per day late",
                "Maximum 50% deduction",
                "Medical exceptions with documentation",
                "Technical issues require IT confirmation",
            ],
            exceptions=["Documented illness", "Family emergency", "School-approved activities"],
        )
        self.policies["academic-integrity"] = Policy(
            id="academic-integrity",
            name="Academic Integrity Policy",
            content="Comprehensive policy for academic honesty and integrity",
            category="academic",
            department="academics",
            effective_date="2024-01-01",
            version="3.0",
            rules=[
                "Original work required",
                "Proper citations mandatory",
                "Collaboration must be approved",
                "AI assistance must be disclosed",
            ],
        )

        self.email_templates["extension-request"] = EmailTemplate(
            id="extension-request",
            type="extension_request",
            subject="Extension Request for [Assignment Name]",
            body=EXTENSION_REQUEST_BODY,
            tone="professional",
        )
        self.email_templates["grade-clarification"] = EmailTemplate(
            id="grade-clarification",
            type="clarification",
            subject="Clarification on [Assignment/Test Name] Grade",
            body=GRADE_CLARIFICATION_BODY,
            tone="professional",
        )

        self.store_context("policies", self.policies)
        self.store_context("email_templates", self.email_templates)

        logger.info(f"BUREAUCRACY-AGENT: {self.name} initialized with {len(self.policies)} policies")

    async def process_ai_analysis(self, message: Message) -> AgentResponse:
        if message.kind == MessageKind.QUERY:
            return self.respond(await self._handle_query(_content(message)))
        if message.kind == MessageKind.COMMAND:
            return self.respond(await self._handle_command(_content(message)))

        analysis = await self.make_ai_decision(
            "Analyze this bureaucracy-related request and provide guidance",
            {"message": message.to_dict()}
        )
        return self.respond(analysis.model_dump())

    async def _handle_query(self, content: Dict[str, Any]) -> Dict[str, Any]:
        topic = content.get("topic")
        data = content.get("data") or {}

        if topic == "homework-status":
            return await self.get_homework_status()
        if topic == "email-draft":
            return await self.generate_email(data)
        if topic == "negotiation-strategy":
            return await self.create_negotiation_strategy(data)
        if topic == "policy-interpretation":
            return await self.interpret_policy(data)

        analysis = await self.make_ai_decision(
            f"Provide guidance for this bureaucracy-related query: {topic}",
            data
        )
        return {"success": True, "topic": topic, **analysis.model_dump()}

    async def _handle_command(self, content: Dict[str, Any]) -> Dict[str, Any]:
        action = content.get("action")
        data = content.get("data") or {}

        if action == "track-homework":
            return self.track_homework(data)
        if action == "send-email":
            return await self.prepare_email(data)
        if action == "start-negotiation":
            return self.start_negotiation(data)
        if action == "analyze-policy":
            return await self.analyze_policy(data)

        result = await self.make_ai_decision(
            f"Execute this bureaucracy-related command: {action}",
            data
        )
        return {"success": True, "action": action, **result.model_dump()}

    # Homework

    def track_homework(self, data: Dict[str, Any]) -> Dict[str, Any]:
        homework = HomeworkAssignment(
            id=f"hw-{now_ms()}-{len(self.homework)}",
            subject=data.get("subject", ""),
            title=data.get("title", ""),
            due_date=_parse_due_date(data["due_date"]),
            requirements=list(data.get("requirements") or []),
        )
        self.homework[homework.id] = homework
        self.store_context("latest_homework", homework)

        logger.info(f"BUREAUCRACY-AGENT: Tracking homework {homework.id} due {homework.due_date.isoformat()}")

        return {
            "success": True,
            "homework_id": homework.id,
            "tracked": True,
            "reminders": self.calculate_reminders(homework.due_date),
        }

    @staticmethod
    def calculate_reminders(due_date: datetime, now: Optional[datetime] = None) -> List[str]:
        """Planning/start/review reminders counted back from the due date"""
        now = now or datetime.now(timezone.utc)
        days_until_due = (due_date - now).total_seconds() / 86400

        reminders = []
        if days_until_due > 7:
            reminders.append(f"Initial planning: {(due_date - timedelta(days=7)).strftime('%Y-%m-%d')}")
        if days_until_due > 3:
            reminders.append(f"Start working: {(due_date - timedelta(days=3)).strftime('%Y-%m-%d')}")
        reminders.append(f"Final review: {(due_date - timedelta(days=1)).strftime('%Y-%m-%d')}")
        return reminders

    async def get_homework_status(self) -> Dict[str, Any]:
        assignments = list(self.homework.values())
        now = datetime.now(timezone.utc)

        upcoming = sorted(
            (hw for hw in assignments if hw.status not in HOMEWORK_DONE_STATES),
            key=lambda hw: hw.due_date
        )
        overdue = [hw for hw in upcoming if hw.due_date < now]
        pending = [hw for hw in upcoming if hw.due_date >= now]
        graded = [hw for hw in assignments if hw.status == "graded"]

        insights = await self.generate_insights(
            {
                "overdue": [asdict(hw) for hw in overdue],
                "pending": [asdict(hw) for hw in pending],
                "completed": [asdict(hw) for hw in graded],
            },
            "homework status"
        )

        return {
            "success": True,
            "summary": {
                "total": len(assignments),
                "pending": len(pending),
                "overdue": len(overdue),
                "submitted": len([hw for hw in assignments if hw.status == "submitted"]),
                "graded": len(graded),
            },
            "urgent": [asdict(hw) for hw in overdue + pending[:3]],
            "insights": insights,
            "recommendations": self.homework_recommendations(upcoming),
        }

    @staticmethod
    def homework_recommendations(assignments: List[HomeworkAssignment]) -> List[str]:
        recommendations = []

        if len(assignments) > 3:
            recommendations.append("Focus on assignments due within 48 hours first")

        subjects = {hw.subject for hw in assignments}
        if len(subjects) < len(assignments):
            recommendations.append("Batch similar subject assignments for efficiency")

        # Sunday (6) or Monday (0)
        if any(hw.due_date.weekday() in (6, 0) for hw in assignments):
            recommendations.append("Plan weekend work for Monday deadlines")

        return recommendations

    # Email

    async def generate_email(self, data: Dict[str, Any]) -> Dict[str, Any]:
        email_type = data.get("type")
        context = data.get("context") or {}
        template = self.email_templates.get(email_type)

        if template is None or context.get("custom_needed"):
            tone = context.get("tone", "professional")
            analysis = await self.make_ai_decision(
                f"Generate a professional {email_type} email for the following situation",
                {
                    "recipient": data.get("recipient"),
                    "context": context,
                    "tone": tone,
                    "urgency": context.get("urgency", "normal"),
                }
            )

            email = analysis.meta("email") or {
                "subject": f"Regarding {context.get('topic', email_type)}",
                "body": analysis.analysis,
            }
            return {
                "success": True,
                "email": {**email, "tone": tone, "custom_generated": True},
                "tips": analysis.recommendations,
                "confidence": analysis.confidence,
            }

        return {
            "success": True,
            "email": asdict(template),
            "customizable": True,
            "tips": list(TEMPLATE_EMAIL_TIPS),
        }

    async def prepare_email(self, data: Dict[str, Any]) -> Dict[str, Any]:
        email_result = await self.generate_email(data)

        return {
            "success": True,
            "email": {
                "to": data.get("recipient"),
                **email_result["email"],
                "scheduled": data.get("send_time", "immediate"),
                "tracking": True,
            },
            "warnings": self.email_warnings(data),
            "tips": email_result.get("tips", []),
        }

    @staticmethod
    def email_warnings(data: Dict[str, Any], now: Optional[datetime] = None) -> List[str]:
        now = now or datetime.now()
        warnings = []

        if data.get("urgency") == "high" and now.hour >= 22:
            warnings.append("Late night emails may not get immediate response")

        if data.get("tone") in ("complaint", "angry"):
            warnings.append("Consider cooling off period before sending")

        return warnings

    # Negotiation

    async def create_negotiation_strategy(self, data: Dict[str, Any]) -> Dict[str, Any]:
        analysis = await self.make_ai_decision(
            "Create a detailed negotiation strategy for the following academic situation",
            {
                "teacher": data.get("teacher"),
                "subject": data.get("subject"),
                "goal": data.get("goal"),
                "context": data.get("context") or {},
                "constraints": data.get("constraints") or [],
            }
        )

        negotiation = TeacherNegotiation(
            id=f"neg-{now_ms()}-{len(self.negotiations)}",
            teacher_name=data.get("teacher", ""),
            subject=data.get("subject", ""),
            issue_type=data.get("goal", ""),
            status="pending",
            strategy=analysis.analysis,
        )
        self.negotiations[negotiation.id] = negotiation

        return {
            "success": True,
            "negotiation_id": negotiation.id,
            "strategy": negotiation.strategy,
            "tactics": analysis.recommendations,
            "confidence": analysis.confidence,
            "key_points": analysis.meta("key_points", []),
        }

    def start_negotiation(self, data: Dict[str, Any]) -> Dict[str, Any]:
        negotiation_id = data.get("negotiation_id")
        negotiation = self.negotiations.get(negotiation_id)

        if negotiation is None:
            logger.warning(f"BUREAUCRACY-AGENT: Negotiation {negotiation_id} not found")
            return {"success": False, "error": "Negotiation not found"}

        negotiation.status = "negotiating"
        self.store_context("active_negotiation", negotiation)

        return {
            "success": True,
            "negotiation_id": negotiation_id,
            "status": "started",
            "next_steps": list(NEGOTIATION_NEXT_STEPS),
        }

    # Policy

    async def interpret_policy(self, data: Dict[str, Any]) -> Dict[str, Any]:
        policy_id = data.get("policy_id")
        policy = self.policies.get(policy_id)
        policy_text = data.get("policy_text")

        if policy is None and not policy_text:
            return {"success": False, "error": "Policy not found and no policy text provided"}

        policy_view = asdict(policy) if policy else {"id": "custom", "text": policy_text}
        analysis = await self.make_ai_decision(
            "Analyze this academic policy for the given situation and provide interpretation with compliance strategies",
            {
                "policy": policy_view,
                "situation": data.get("situation"),
                "objective": data.get("objective", "Find compliant solution"),
            }
        )

        return {
            "success": True,
            "analysis": {
                "policy_id": policy_id if policy else "custom",
                "interpretation": analysis.analysis,
                "exceptions": analysis.meta("exceptions", []),
                "compliance": analysis.meta("compliant") is not False,
                "recommendations": analysis.recommendations,
            },
            "confidence": analysis.confidence,
            "policy": policy_view,
        }

    async def analyze_policy(self, data: Dict[str, Any]) -> Dict[str, Any]:
        policy_name = data.get("policy_name")
        objective = data.get("objective")

        analysis = await self.make_ai_decision(
            f'Analyze policy "{policy_name}" for objective: {objective}',
            {
                "available_policies": list(self.policies.keys()),
                "context": data.get("context") or {},
            }
        )

        return {
            "success": True,
            "analysis": {
                "policy": policy_name,
                "objective": objective,
                "interpretation": analysis.analysis,
                "compliance": analysis.meta("compliant") is not False,
                "opportunities": analysis.recommendations,
                "risks": analysis.meta("risks") or list(DEFAULT_POLICY_RISKS),
                "confidence": analysis.confidence,
            },
        }

    def get_status(self) -> AgentStatus:
        status = super().get_status()
        status.extra = {
            "bureaucracy_stats": {
                "homework_assignments": len(self.homework),
                "active_negotiations": len([n for n in self.negotiations.values() if n.status == "negotiating"]),
                "email_templates": len(self.email_templates),
                "policies": len(self.policies),
            },
            "capabilities": [
                "Homework deadline management",
                "Professional email composition",
                "Teacher negotiation strategies",
                "Policy interpretation",
                "Academic compliance guidance",
            ],
        }
        return status
