"""
Program rule mapping.
"""

from typing import Iterable, List, Optional

from shared.errors import MissingReferenceError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..models.engine import Rule
from ..models.persisted import ProgramRule
from .actions import ActionMapper
from .result import MappingResult, successes


class RuleMapper:
    """Maps persisted program rules to engine rules.

    Any failure while mapping a rule's actions or building the rule drops
    the whole rule. Other rules in the batch are unaffected.
    """

    def __init__(self, action_mapper: Optional[ActionMapper] = None, metrics: Optional[MetricsCollector] = None):
        self.action_mapper = action_mapper or ActionMapper()
        self.metrics = metrics
        self.logger = get_logger("rule_mapping.rules")

    def map_rule(self, program_rule: ProgramRule) -> MappingResult[Rule]:
        """Map one rule, skipping it if any of its actions cannot be mapped."""
        if program_rule is None:
            return MappingResult.skip("rule is None")

        try:
            rule_actions = tuple(self.action_mapper.map_action(action) for action in program_rule.actions)

            rule = Rule(
                program_stage=program_rule.program_stage.uid if program_rule.program_stage is not None else "",
                priority=program_rule.priority,
                condition=program_rule.condition,
                actions=rule_actions,
                name=program_rule.name
            )
        except MissingReferenceError:
            raise
        except Exception as e:
            self.logger.debug("Invalid rule action in ProgramRule", rule_uid=program_rule.uid, error=str(e))
            self._record("skipped")
            return MappingResult.skip(str(e), source_uid=program_rule.uid)

        self._record("mapped")
        return MappingResult.success(rule, source_uid=program_rule.uid)

    def map_rules(self, program_rules: Iterable[ProgramRule]) -> List[Rule]:
        """Map a batch of rules, dropping the ones that fail, in input order."""
        return successes(self.map_rule(program_rule) for program_rule in program_rules)

    def _record(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_mapping("rule", outcome)
