"""
Rule entity mapper service.

Entry points used by the rule evaluation engine and the import pipeline to
obtain engine rules, variables, item stores and runtime values.
"""

from contextlib import contextmanager, nullcontext
from typing import Dict, Iterable, Iterator, List, Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import RuleMappingException
from shared.logging import clear_context, set_program_context, set_session_id
from shared.metrics import MetricsCollector

from .mapping.actions import ActionMapper
from .mapping.item_store import ItemStoreBuilder
from .mapping.rules import RuleMapper
from .mapping.runtime import RuntimeContextMapper
from .mapping.value_types import ValueTypeCache
from .mapping.variables import VariableMapper
from .models.engine import Rule, RuleEnrollment, RuleEvent, RuleVariable
from .models.persisted import (
    Enrollment, Event, Program, ProgramRule, ProgramRuleVariable
)
from .stores.base import ConstantStore, DataElementStore, Localizer, RuleStore, VariableStore


class RuleEntityMapperService(BaseService):
    """Translates persisted program rule entities into engine models.

    Every public call runs in its own mapping session with a fresh value
    type cache, so no data element lookups leak between calls.
    """

    def __init__(
        self,
        rule_store: RuleStore,
        variable_store: VariableStore,
        data_element_store: DataElementStore,
        constant_store: ConstantStore,
        localizer: Localizer,
        config: Optional[ServiceConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        super().__init__("rule_mapping", config=config, metrics=metrics)

        self.rule_store = rule_store
        self.variable_store = variable_store
        self.data_element_store = data_element_store
        self.constant_store = constant_store
        self.localizer = localizer

        self.rule_mapper = RuleMapper(ActionMapper(), self.metrics)
        self.item_store_builder = ItemStoreBuilder(data_element_store, constant_store, localizer)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def map_rules(self, program: Optional[Program] = None) -> List[Rule]:
        """Map all rules, or the rules of one program."""
        if program is None:
            program_rules = self.rule_store.all_rules()
        else:
            program_rules = self.rule_store.rules_for_program(program)

        with self._session("map_rules", program):
            rules = self.rule_mapper.map_rules(program_rules)

        self.logger.info("Program rules mapped", total=len(program_rules), mapped=len(rules))
        return rules

    def map_rule_definitions(self, program_rules: Iterable[ProgramRule]) -> List[Rule]:
        with self._session("map_rules"):
            return self.rule_mapper.map_rules(program_rules)

    def map_rule(self, program_rule: ProgramRule) -> Optional[Rule]:
        with self._session("map_rule"):
            return self.rule_mapper.map_rule(program_rule).value

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def map_variables(self, program: Optional[Program] = None) -> List[RuleVariable]:
        """Map all rule variables, or the variables of one program."""
        if program is None:
            variables = self.variable_store.all_variables()
        else:
            variables = self.variable_store.variables_for_program(program)

        with self._session("map_variables", program) as cache:
            rule_variables = VariableMapper(cache, self.metrics).map_variables(variables)

        self.logger.info("Program rule variables mapped", total=len(variables), mapped=len(rule_variables))
        return rule_variables

    def map_variable_definitions(self, variables: Iterable[ProgramRuleVariable]) -> List[RuleVariable]:
        with self._session("map_variables") as cache:
            return VariableMapper(cache, self.metrics).map_variables(variables)

    def build_item_store(self, variables: Iterable[ProgramRuleVariable]) -> Dict[str, str]:
        with self._session("build_item_store"):
            return self.item_store_builder.build(variables)

    # ------------------------------------------------------------------
    # Runtime values
    # ------------------------------------------------------------------

    def map_enrollment(self, enrollment: Optional[Enrollment]) -> Optional[RuleEnrollment]:
        program = enrollment.program if enrollment is not None else None
        with self._session("map_enrollment", program) as cache:
            return RuntimeContextMapper(cache).map_enrollment(enrollment)

    def map_events(self, events: Iterable[Event], excluding: Optional[Event] = None) -> List[RuleEvent]:
        with self._session("map_events") as cache:
            return RuntimeContextMapper(cache).map_events(events, excluding)

    def map_event(self, event: Optional[Event]) -> Optional[RuleEvent]:
        with self._session("map_event") as cache:
            return RuntimeContextMapper(cache).map_event(event)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @contextmanager
    def _session(self, operation: str, program: Optional[Program] = None) -> Iterator[ValueTypeCache]:
        set_session_id()
        set_program_context(program.uid if program is not None else None)
        cache = ValueTypeCache(self.data_element_store, self.metrics)

        if self.metrics:
            timer = self.metrics.time_operation("mapping_duration_seconds", operation=operation)
        else:
            timer = nullcontext()

        try:
            with timer:
                yield cache
        except RuleMappingException as e:
            self.logger.error("Mapping failed", operation=operation, code=e.code, message=e.message, details=e.details)
            if self.metrics:
                self.metrics.record_error(e.code)
            raise
        finally:
            self.logger.debug(
                "Mapping session finished",
                operation=operation,
                cached_value_types=len(cache),
                cache_hits=cache.hits,
                cache_misses=cache.misses
            )
            clear_context()
