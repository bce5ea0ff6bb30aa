import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from conftest import reply_with
from agents.agent_types import Message
from agents.family_agent import (
    ConflictRecord, EmotionalState, FamilyAgent, FamilyHealth, FamilyMember, FamilyUnit,
    FamilyValue, Relationship, Tradition, calculate_health_metrics, family_growth_areas,
    family_strengths, RESOLUTION_STEPS
)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def agent(mock_create, config):
    agent = FamilyAgent(config)
    run(agent.start())
    return agent


def send(agent, kind, content):
    return run(agent.process_message(Message.create(kind, content)))


def last_request(mock_create):
    return mock_create.call_args.kwargs


def settings(mock_create):
    request = last_request(mock_create)
    return request["max_tokens"], request["temperature"]


def member(current="calm", intensity=3, support_needs=None, relationships=None):
    return FamilyMember(
        id="m", name="Alex", role="child", age=12,
        emotional_state=EmotionalState(current=current, intensity=intensity, support_needs=support_needs or []),
        relationships=relationships or {},
    )


def family(members=None, traditions=None, values=None):
    return FamilyUnit(
        id="f", name="Test Family",
        health_metrics=FamilyHealth(0, 0, 0, 0, 0, datetime.now(timezone.utc)),
        members=members or {},
        traditions=traditions or [],
        values=values or [],
    )


class TestSetup:
    def test_sample_family_seeded(self, agent):
        johnsons = agent.families["family-1"]
        assert johnsons.name == "The Johnsons"
        assert johnsons.members["parent1"].name == "Sarah Johnson"
        assert johnsons.health_metrics.overall_harmony == 78.75
        assert agent.get_context("families") is agent.families
        assert set(agent.conflict_patterns) == {"communication-breakdown", "generational-clash"}

    def test_status(self, agent):
        send(agent, "query", {"topic": "relationship-advice"})
        send(agent, "query", {"topic": "relationship-advice"})
        send(agent, "event", {"event_type": "move"})

        status = agent.get_status().to_dict()
        stats = status["family_stats"]
        assert stats["families"] == 1
        assert stats["total_members"] == 1
        assert stats["average_family_harmony"] == 79
        assert stats["active_interventions"] == 2
        assert stats["emotional_patterns_tracked"] == 3
        assert stats["sessions"] == 3
        assert stats["sessions_by_topic"] == {"relationship-advice": 2, "event:move": 1}
        assert status["stats"]["context_items"] == 2
        assert status["stats"]["conversation_length"] == 6
        assert agent.get_context("last_topic") == "event:move"


class TestSafetyChecks:
    @pytest.mark.parametrize("data, expected", [
        ({"note": "said they might harm themselves"}, "critical"),
        ({"note": "this is an emergency"}, "critical"),
        ({"note": "family crisis after the move"}, "critical"),
        ({"note": "the pain is unbearable"}, "high"),
        ({"note": "I cant cope anymore"}, "high"),
        ({"note": "I can't cope anymore"}, "high"),
        ({"note": "a bit sad lately", "intensity": 9}, "medium"),
        ({}, "medium"),
    ])
    def test_emotional_urgency(self, data, expected):
        assert FamilyAgent.emotional_urgency(data) == expected

    @pytest.mark.parametrize("data, expected", [
        ({"note": "my teen says they feel suicidal"}, True),
        ({"note": "talked about suicide"}, True),
        ({"note": "argument turned to violence"}, True),
        ({"history": "past trauma"}, True),
        ({"note": "signs of an eating disorder"}, True),
        ({"note": "showing severe depression"}, True),
        ({"note": "struggling with addiction"}, True),
        ({"note": "disagree about chores"}, False),
    ])
    def test_needs_professional_help(self, data, expected):
        assert FamilyAgent.needs_professional_help(data) is expected


class TestCounseling:
    def test_relationship_advice_action_sentences(self, agent, mock_create):
        reply_with(mock_create, "You sound tired. Try to talk at dinner! Consider a weekly walk? It helps.")
        response = send(agent, "query", {"topic": "relationship-advice", "data": {"who": "siblings"}})

        assert response.data["action_items"] == ["Try to talk at dinner", "Consider a weekly walk"]
        assert response.data["follow_up_recommended"] is True
        assert settings(mock_create) == (1024, 0.7)
        assert len(last_request(mock_create)["messages"]) == 1

    def test_conflict_resolution(self, agent, mock_create):
        response = send(agent, "query", {
            "topic": "conflict-resolution",
            "data": {"description": "yelling at dinner turned to violence"},
        })

        assert response.data["professional_help_recommended"] is True
        assert response.data["mediation_steps"] == RESOLUTION_STEPS
        assert response.data["warning_signs_flagged"][0] == "Communication breakdown"
        assert list(response.data["conflict_patterns"]) == ["communication-breakdown"]
        assert "underlying_needs" in response.data["emotional_analysis"]
        assert settings(mock_create) == (1500, 0.6)

    def test_mediate_conflict(self, agent, mock_create):
        response = send(agent, "command", {"action": "mediate-conflict", "data": {"parties": ["mom", "teen"]}})

        assert response.data["ground_rules"][0] == "One person speaks at a time"
        assert response.data["phases"][-1] == "Plan follow-up"
        assert response.data["professional_help_recommended"] is False
        assert settings(mock_create) == (2000, 0.6)

    def test_emotional_support(self, agent, mock_create):
        response = send(agent, "query", {
            "topic": "emotional-support",
            "data": {"emotion": "Anxiety", "note": "feels desperate"},
        })

        assert response.data["coping_strategies"] == ["mindfulness", "planning", "breaking down problems"]
        assert response.data["urgency_level"] == "high"
        assert "Crisis hotline numbers" in response.data["resources"]
        assert settings(mock_create) == (1024, 0.8)

    def test_unknown_emotion_gets_default_strategies(self, agent):
        assert agent.coping_strategies("boredom")[0] == "Deep breathing exercises"
        assert agent.coping_strategies(None)[-1] == "Seek professional support if needed"

    def test_strengthen_relationship(self, agent, mock_create):
        reply_with(mock_create, "Plan a monthly outing. Keep it light.")
        response = send(agent, "command", {"action": "strengthen-relationship", "data": {"pair": "dad-son"}})

        assert response.data["action_items"] == ["Plan a monthly outing"]
        assert response.data["weekly_actions"][0] == "Quality time commitment"
        assert settings(mock_create) == (1500, 0.7)


class TestFamilyHealth:
    def test_assessment_recomputes_metrics(self, agent, mock_create):
        response = send(agent, "query", {"topic": "family-health", "data": {"family_id": "family-1"}})

        metrics = response.data["metrics"]
        assert metrics["communication_score"] == 80
        assert metrics["conflict_resolution_score"] == 65
        assert metrics["emotional_support_score"] == 75
        assert metrics["tradition_adherence_score"] == 100
        assert metrics["overall_harmony"] == 80
        assert response.data["strengths"] == ["Strong communication patterns"]
        assert response.data["growth_areas"] == []
        assert agent.families["family-1"].health_metrics.overall_harmony == 80
        assert settings(mock_create) == (1500, 0.5)
        assert "Open Communication" in last_request(mock_create)["messages"][-1]["content"]

    def test_assessment_requires_family_id(self, agent, mock_create):
        response = send(agent, "query", {"topic": "family-health"})
        assert response.data == {"success": False, "error": "Family ID required for health assessment"}
        mock_create.assert_not_called()

    def test_assessment_unknown_family(self, agent, mock_create):
        response = send(agent, "query", {"topic": "family-health", "data": {"family_id": "family-9"}})
        assert response.data == {"success": False, "error": "Family not found"}
        mock_create.assert_not_called()

    def test_scores_from_members_and_conflicts(self):
        conflicts = [
            ConflictRecord(id="c1", issue="curfew", resolution="talked", outcome="resolved"),
            ConflictRecord(id="c2", issue="phone", resolution="", outcome="ongoing"),
        ]
        members = {
            "a": member(current="happy", relationships={"b": Relationship("b", "sibling", 60, conflict_history=conflicts)}),
            "b": member(current="content", intensity=8, support_needs=["space"]),
        }
        unit = family(members=members, values=[FamilyValue(name="Honesty", priority=5, alignment_score=50)])

        metrics = calculate_health_metrics(unit)
        assert metrics.communication_score == 80
        assert metrics.conflict_resolution_score == 75
        assert metrics.emotional_support_score == 80
        assert metrics.tradition_adherence_score == 0

    def test_expired_traditions_lower_score(self):
        now = datetime(2026, 10, 17, tzinfo=timezone.utc)
        traditions = [
            Tradition(id=str(i), name="t", frequency="weekly", significance="",
                      next_occurrence=now + timedelta(days=1 if i % 2 else -1))
            for i in range(4)
        ]
        assert calculate_health_metrics(family(traditions=traditions), now=now).tradition_adherence_score == 50

    def test_strengths_and_growth_areas(self):
        unit = family(traditions=[None] * 4)
        unit.health_metrics = FamilyHealth(65, 55, 85, 100, 76, datetime.now(timezone.utc))

        assert family_strengths(unit) == ["Rich tradition culture", "Excellent emotional support system"]
        assert family_growth_areas(unit) == ["Conflict resolution skills", "Open communication practices"]


class TestTraditionsAndMilestones:
    @pytest.mark.parametrize("kind, content", [
        ("query", {"topic": "tradition-planning", "data": {"idea": "game night"}}),
        ("command", {"action": "create-tradition", "data": {"idea": "game night"}}),
    ])
    def test_create_tradition(self, agent, mock_create, kind, content):
        response = send(agent, kind, content)
        assert response.data["tradition_plan"] == "No structured output here."
        assert response.data["implementation_steps"][0] == "Discuss with all family members"
        assert settings(mock_create) == (1024, 0.8)

    @pytest.mark.parametrize("kind, content", [
        ("query", {"topic": "milestone-celebration", "data": {"type": "graduation", "family_id": "family-1"}}),
        ("command", {"action": "track-milestone", "data": {"type": "graduation", "family_id": "family-1"}}),
    ])
    def test_track_milestone(self, agent, mock_create, kind, content):
        response = send(agent, kind, content)
        assert response.data["milestone_recorded"] is True
        assert agent.milestones[-1].type == "graduation"
        assert agent.milestones[-1].id == response.data["milestone_id"]
        assert settings(mock_create) == (1024, 0.7)


class TestSchedulingAndEvents:
    def test_schedule_family_time(self, agent, mock_create):
        response = send(agent, "command", {"action": "schedule-family-time", "data": {"members": 4}})

        assert response.data["priority_activities"][0] == "Weekly family dinner"
        assert response.data["conflict_analysis"]["flexibility_score"] == 75
        assert "virtual_options" in response.data["flexibility_options"]
        assert settings(mock_create) == (1024, 0.6)

    def test_known_event(self, agent, mock_create):
        response = send(agent, "event", {"event_type": "birth", "data": {"due": "spring"}})

        assert response.data["event_processed"] == "birth"
        assert response.data["emotional_support"] == "Celebrate new life while supporting exhausted parents"
        assert response.data["suggested_actions"][0] == "Organize meal train for new parents"
        assert "Event Type: birth" in last_request(mock_create)["messages"][-1]["content"]

    def test_unknown_event(self, agent):
        response = send(agent, "event", {"event_type": "move"})
        assert response.data["suggested_actions"] == ["Assess needs", "Provide support", "Plan follow-up"]
        assert response.data["family_impact_assessment"]["support_duration"] == "3-6 months active support recommended"


class TestFallbacks:
    def test_unknown_command_uses_decision(self, agent, mock_create):
        reply_with(mock_create, '{"analysis": "Hold a family meeting", "confidence": 0.75, "recommendations": []}')
        response = send(agent, "command", {"action": "plan-holiday", "data": {"where": "lake"}})

        assert response.data["action"] == "plan-holiday"
        assert response.data["analysis"] == "Hold a family meeting"
        assert response.data["follow_up_actions"] == ["Monitor implementation", "Gather feedback", "Adjust as needed"]
        assert "Context:" in last_request(mock_create)["messages"][-1]["content"]

    def test_plain_text_query_is_general(self, agent, mock_create):
        response = send(agent, "query", "How do we split chores?")

        assert response.data["response"] == "No structured output here."
        assert "Professional counseling options" in response.data["additional_resources"]
        assert '"How do we split chores?"' in last_request(mock_create)["messages"][-1]["content"]
        assert settings(mock_create) == (1500, 0.7)

    def test_proposal_uses_shared_handler(self, agent, mock_create):
        reply_with(mock_create, '{"analysis": "Good idea", "confidence": 0.95, "recommendations": ["Try it"]}')
        response = send(agent, "proposal", {"proposal": "Weekly game night"})

        assert response.data["decision"] == "recommended"
        assert agent.sessions_by_topic == {}
