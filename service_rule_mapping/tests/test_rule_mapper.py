"""
Unit tests for program rule mapping.
"""

import pytest
from prometheus_client import CollectorRegistry
from structlog.testing import capture_logs

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import EngineModelError, MissingReferenceError
from shared.metrics import MetricsCollector
from shared.test_helpers import TestDataFactory
from service_rule_mapping.app.mapping.actions import ActionMapper
from service_rule_mapping.app.mapping.rules import RuleMapper
from service_rule_mapping.app.models.engine import (
    Rule, RuleActionDisplayText, RuleActionShowWarning
)
from service_rule_mapping.app.models.persisted import ProgramRuleActionType


class TestRuleMapper:
    """Test cases for RuleMapper."""

    @pytest.fixture
    def mapper(self):
        """Create RuleMapper instance."""
        return RuleMapper(ActionMapper())

    @pytest.fixture
    def stage(self):
        """Birth program stage."""
        return TestDataFactory.create_program_stages()["birth"]

    def _broken_rule(self, uid="rule-broken"):
        action = TestDataFactory.create_action(
            uid="action-broken", action_type=ProgramRuleActionType.HIDEPROGRAMSTAGE, program_rule_uid=uid
        )
        return TestDataFactory.create_rule(uid=uid, name="Broken", actions=[action])

    def test_map_rule(self, mapper, stage):
        """Test a rule keeps its condition, priority, stage and actions."""
        program_rule = TestDataFactory.create_rule(program_stage=stage)

        result = mapper.map_rule(program_rule)

        assert result.ok
        assert result.source_uid == "rule-1"
        rule = result.value
        assert rule.condition == "#{weight} < 2500"
        assert rule.priority == 1
        assert rule.program_stage == stage.uid
        assert rule.name == "Low birth weight"
        assert rule.actions == (RuleActionShowWarning(content="Weight is low", data="", field="Weight is low"),)

    def test_rule_without_stage(self, mapper):
        """Test a rule outside any stage gets an empty stage."""
        rule = mapper.map_rule(TestDataFactory.create_rule()).value

        assert rule.program_stage == ""

    def test_rule_without_priority(self, mapper):
        """Test the priority is optional."""
        rule = mapper.map_rule(TestDataFactory.create_rule(priority=None)).value

        assert rule.priority is None

    def test_action_order_is_preserved(self, mapper):
        """Test actions keep their persisted order."""
        actions = [
            TestDataFactory.create_action(uid="a-1", content="first"),
            TestDataFactory.create_action(uid="a-2", action_type=ProgramRuleActionType.DISPLAYTEXT, content="second"),
        ]

        rule = mapper.map_rule(TestDataFactory.create_rule(actions=actions)).value

        assert isinstance(rule.actions, tuple)
        assert [type(action) for action in rule.actions] == [RuleActionShowWarning, RuleActionDisplayText]

    def test_rule_with_unmappable_action_is_skipped(self, mapper):
        """Test one bad action drops the whole rule."""
        result = mapper.map_rule(self._broken_rule())

        assert not result.ok
        assert result.source_uid == "rule-broken"

    def test_rule_with_blank_display_is_kept(self, mapper):
        """Test a display action with empty content and data does not drop its rule."""
        action = TestDataFactory.create_action(action_type=ProgramRuleActionType.DISPLAYTEXT, content="", data="")

        result = mapper.map_rule(TestDataFactory.create_rule(actions=[action]))

        assert result.ok
        assert isinstance(result.value.actions[0], RuleActionDisplayText)

    def test_rule_without_condition_is_skipped(self, mapper):
        """Test a missing condition drops the rule."""
        assert not mapper.map_rule(TestDataFactory.create_rule(condition=None)).ok

    def test_batch_keeps_order_and_drops_failures(self, mapper):
        """Test failures only remove the failing rule."""
        program_rules = [
            TestDataFactory.create_rule(uid="rule-1", name="First"),
            self._broken_rule(),
            TestDataFactory.create_rule(uid="rule-3", name="Third"),
        ]

        rules = mapper.map_rules(program_rules)

        assert [rule.name for rule in rules] == ["First", "Third"]

    def test_none_rule_is_skipped(self, mapper):
        """Test a null rule is skipped."""
        assert not mapper.map_rule(None).ok
        assert mapper.map_rules([None, TestDataFactory.create_rule()])[0].name == "Low birth weight"

    def test_idempotent(self, mapper, stage):
        """Test mapping the same input twice gives equal output."""
        program_rules = [TestDataFactory.create_rule(program_stage=stage), self._broken_rule()]

        assert mapper.map_rules(program_rules) == mapper.map_rules(program_rules)

    def test_missing_reference_is_not_swallowed(self):
        """Test a missing reference raised by an action propagates."""

        class FailingActionMapper(ActionMapper):
            def map_action(self, action):
                raise MissingReferenceError("doesNotExist")

        mapper = RuleMapper(FailingActionMapper())

        with pytest.raises(MissingReferenceError):
            mapper.map_rules([TestDataFactory.create_rule()])

    def test_skip_is_logged(self):
        """Test skipped rules are logged with their uid."""
        mapper = RuleMapper()

        with capture_logs() as cap_logs:
            mapper.map_rule(self._broken_rule())

        assert cap_logs[0]["event"] == "Invalid rule action in ProgramRule"
        assert cap_logs[0]["log_level"] == "debug"
        assert cap_logs[0]["rule_uid"] == "rule-broken"

    def test_outcome_metrics(self):
        """Test mapped and skipped rules are counted."""
        registry = CollectorRegistry()
        mapper = RuleMapper(metrics=MetricsCollector("rule_mapping", registry))

        mapper.map_rules([TestDataFactory.create_rule(), self._broken_rule()])

        assert registry.get_sample_value("mapping_items_total", {"entity": "rule", "outcome": "mapped"}) == 1.0
        assert registry.get_sample_value("mapping_items_total", {"entity": "rule", "outcome": "skipped"}) == 1.0


class TestRule:
    """Test cases for the engine Rule model."""

    def test_actions_become_tuple(self):
        """Test list actions are frozen into a tuple."""
        action = RuleActionShowWarning(content="x", data="", field="")
        rule = Rule(program_stage="", priority=None, condition="true", actions=[action])

        assert rule.actions == (action,)

    def test_rejects_non_actions(self):
        """Test actions must be engine actions."""
        with pytest.raises(EngineModelError):
            Rule(program_stage="", priority=None, condition="true", actions=["not an action"])

    def test_rejects_missing_condition(self):
        """Test the condition must be a string."""
        with pytest.raises(EngineModelError):
            Rule(program_stage="", priority=None, condition=None)
