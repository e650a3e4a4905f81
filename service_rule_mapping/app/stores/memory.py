"""
In-memory collaborator stores.

Used by tests and by callers that already hold the persisted records in
memory. Each store keeps the insertion order of its records.
"""

from typing import Dict, Iterable, List, Optional

from shared.logging import get_logger
from ..models.persisted import (
    Constant, DataElement, Program, ProgramRule, ProgramRuleVariable
)


class InMemoryRuleStore:
    """Rule store backed by a list."""

    def __init__(self, rules: Optional[Iterable[ProgramRule]] = None):
        self.rules: List[ProgramRule] = list(rules or [])

    def add(self, rule: ProgramRule) -> None:
        self.rules.append(rule)

    def all_rules(self) -> List[ProgramRule]:
        return list(self.rules)

    def rules_for_program(self, program: Program) -> List[ProgramRule]:
        return [
            rule for rule in self.rules
            if rule.program is not None and rule.program.uid == program.uid
        ]


class InMemoryVariableStore:
    """Variable store backed by a list."""

    def __init__(self, variables: Optional[Iterable[ProgramRuleVariable]] = None):
        self.variables: List[ProgramRuleVariable] = list(variables or [])

    def add(self, variable: ProgramRuleVariable) -> None:
        self.variables.append(variable)

    def all_variables(self) -> List[ProgramRuleVariable]:
        return list(self.variables)

    def variables_for_program(self, program: Program) -> List[ProgramRuleVariable]:
        return [
            variable for variable in self.variables
            if variable.program is not None and variable.program.uid == program.uid
        ]


class InMemoryDataElementStore:
    """Data element store keyed by uid.

    ``lookups`` counts calls to :meth:`by_id` so callers can check how often
    the backing store was hit.
    """

    def __init__(self, data_elements: Optional[Iterable[DataElement]] = None):
        self.data_elements: Dict[str, DataElement] = {
            data_element.uid: data_element for data_element in (data_elements or [])
        }
        self.lookups = 0

    def add(self, data_element: DataElement) -> None:
        self.data_elements[data_element.uid] = data_element

    def by_id(self, uid: str) -> Optional[DataElement]:
        self.lookups += 1
        return self.data_elements.get(uid)


class InMemoryConstantStore:
    """Constant store backed by a list."""

    def __init__(self, constants: Optional[Iterable[Constant]] = None):
        self.constants: List[Constant] = list(constants or [])

    def all_constants(self) -> List[Constant]:
        return list(self.constants)


class DictLocalizer:
    """Localizer backed by a message dictionary.

    Unknown tokens resolve to the token itself.
    """

    def __init__(self, messages: Optional[Dict[str, str]] = None):
        self.messages: Dict[str, str] = dict(messages or {})
        self.logger = get_logger("rule_mapping.localizer")

    def string(self, token: str) -> str:
        message = self.messages.get(token)
        if message is None:
            self.logger.debug("No message for token", token=token)
            return token
        return message
