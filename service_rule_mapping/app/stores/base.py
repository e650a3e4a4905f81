"""
Collaborator store contracts consumed by the mapping service.

Implementations are expected to be synchronous and free of side effects.
"""

from typing import List, Optional, Protocol, runtime_checkable

from ..models.persisted import (
    Constant, DataElement, Program, ProgramRule, ProgramRuleVariable
)


@runtime_checkable
class RuleStore(Protocol):
    """Source of persisted program rules."""

    def all_rules(self) -> List[ProgramRule]:
        ...

    def rules_for_program(self, program: Program) -> List[ProgramRule]:
        ...


@runtime_checkable
class VariableStore(Protocol):
    """Source of persisted program rule variables."""

    def all_variables(self) -> List[ProgramRuleVariable]:
        ...

    def variables_for_program(self, program: Program) -> List[ProgramRuleVariable]:
        ...


@runtime_checkable
class DataElementStore(Protocol):
    """Lookup of data elements by uid."""

    def by_id(self, uid: str) -> Optional[DataElement]:
        """Return the data element, or None when it does not exist."""
        ...


@runtime_checkable
class ConstantStore(Protocol):
    """Source of program rule constants."""

    def all_constants(self) -> List[Constant]:
        ...


@runtime_checkable
class Localizer(Protocol):
    """Message lookup for environment variable descriptions."""

    def string(self, token: str) -> str:
        ...
