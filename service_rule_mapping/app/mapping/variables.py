"""
Program rule variable mapping.
"""

from typing import Iterable, List, Optional

from shared.errors import MalformedDefinitionError, MissingReferenceError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..models.engine import (
    RuleValueType, RuleVariable, RuleVariableAttribute, RuleVariableCalculatedValue,
    RuleVariableCurrentEvent, RuleVariableNewestEvent, RuleVariableNewestStageEvent,
    RuleVariablePreviousEvent
)
from ..models.persisted import ProgramRuleVariable, ProgramRuleVariableSourceType, ValueType
from .result import MappingResult, successes
from .value_types import ValueTypeCache, to_rule_value_type

DATA_ELEMENT_SOURCE_TYPES = frozenset({
    ProgramRuleVariableSourceType.DATAELEMENT_CURRENT_EVENT,
    ProgramRuleVariableSourceType.DATAELEMENT_PREVIOUS_EVENT,
    ProgramRuleVariableSourceType.DATAELEMENT_NEWEST_EVENT_PROGRAM,
    ProgramRuleVariableSourceType.DATAELEMENT_NEWEST_EVENT_PROGRAM_STAGE,
})


class VariableMapper:
    """Maps persisted program rule variables to engine variables."""

    def __init__(self, value_type_cache: ValueTypeCache, metrics: Optional[MetricsCollector] = None):
        self.value_type_cache = value_type_cache
        self.metrics = metrics
        self.logger = get_logger("rule_mapping.variables")

    def map_variable(self, variable: ProgramRuleVariable) -> MappingResult[RuleVariable]:
        """Map one variable, skipping it if it cannot be mapped.

        A dangling data element reference is not skipped: the
        MissingReferenceError propagates to the caller.
        """
        if variable is None:
            return MappingResult.skip("variable is None")

        try:
            rule_variable = self._to_rule_variable(variable)
        except MissingReferenceError:
            raise
        except Exception as e:
            self.logger.debug("Invalid ProgramRuleVariable", variable_uid=variable.uid, error=str(e))
            self._record("skipped")
            return MappingResult.skip(str(e), source_uid=variable.uid)

        if rule_variable is None:
            self.logger.debug(
                "Unsupported source type for ProgramRuleVariable",
                variable_uid=variable.uid,
                source_type=variable.source_type
            )
            self._record("skipped")
            return MappingResult.skip(f"unsupported source type {variable.source_type}", source_uid=variable.uid)

        self._record("mapped")
        return MappingResult.success(rule_variable, source_uid=variable.uid)

    def map_variables(self, variables: Iterable[ProgramRuleVariable]) -> List[RuleVariable]:
        """Map a batch of variables, dropping the ones that fail, in input order."""
        return successes(self.map_variable(variable) for variable in variables if variable is not None)

    def _to_rule_variable(self, variable: ProgramRuleVariable) -> Optional[RuleVariable]:
        source_type = variable.source_type

        if source_type == ProgramRuleVariableSourceType.CALCULATED_VALUE:
            return RuleVariableCalculatedValue(
                name=variable.name,
                value_type=RuleValueType.TEXT,
                field=""
            )

        if source_type == ProgramRuleVariableSourceType.TEI_ATTRIBUTE:
            if variable.attribute is None:
                raise MalformedDefinitionError(
                    "Attribute variable has no attribute",
                    details={"variable_uid": variable.uid}
                )
            return RuleVariableAttribute(
                name=variable.name,
                value_type=to_rule_value_type(variable.attribute.value_type),
                tracked_entity_attribute=variable.attribute.uid
            )

        if source_type not in DATA_ELEMENT_SOURCE_TYPES:
            return None

        data_element_uid = variable.bound_data_element_uid
        if not data_element_uid:
            raise MalformedDefinitionError(
                "Data element variable has no data element",
                details={"variable_uid": variable.uid}
            )
        value_type = to_rule_value_type(self._data_element_value_type(variable))

        if source_type == ProgramRuleVariableSourceType.DATAELEMENT_CURRENT_EVENT:
            return RuleVariableCurrentEvent(
                name=variable.name, value_type=value_type, data_element=data_element_uid
            )

        if source_type == ProgramRuleVariableSourceType.DATAELEMENT_PREVIOUS_EVENT:
            return RuleVariablePreviousEvent(
                name=variable.name, value_type=value_type, data_element=data_element_uid
            )

        if source_type == ProgramRuleVariableSourceType.DATAELEMENT_NEWEST_EVENT_PROGRAM:
            return RuleVariableNewestEvent(
                name=variable.name, value_type=value_type, data_element=data_element_uid
            )

        if variable.program_stage is None:
            raise MalformedDefinitionError(
                "Stage variable has no program stage",
                details={"variable_uid": variable.uid}
            )
        return RuleVariableNewestStageEvent(
            name=variable.name,
            value_type=value_type,
            data_element=data_element_uid,
            program_stage=variable.program_stage.uid
        )

    def _data_element_value_type(self, variable: ProgramRuleVariable) -> Optional[ValueType]:
        # A loaded element carries its type; a bare uid goes through the cache.
        if variable.data_element is not None:
            return variable.data_element.value_type
        return self.value_type_cache.resolve(variable.bound_data_element_uid)

    def _record(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_mapping("variable", outcome)
