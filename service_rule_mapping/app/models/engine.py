"""
Engine-side rule models consumed by the rule evaluation engine.

Every class here is a frozen dataclass. Construction checks the invariants
of the variant, so an instance that exists is fully formed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from shared.errors import EngineModelError


class RuleValueType(str, Enum):
    """Semantic value type seen by the evaluation engine."""
    BOOLEAN = "BOOLEAN"
    NUMERIC = "NUMERIC"
    TEXT = "TEXT"


class DisplayLocation(str, Enum):
    """Where a display action renders."""
    FEEDBACK = "feedback"
    INDICATORS = "indicators"


class RuleEnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class RuleEventStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    SCHEDULE = "SCHEDULE"
    SKIPPED = "SKIPPED"
    VISITED = "VISITED"
    OVERDUE = "OVERDUE"


# Environment variable tokens understood by the evaluation engine.
ENV_VARIABLES = (
    "current_date",
    "event_date",
    "event_count",
    "event_id",
    "event_status",
    "due_date",
    "enrollment_date",
    "enrollment_id",
    "enrollment_count",
    "enrollment_status",
    "incident_date",
    "tei_count",
    "program_stage_id",
    "program_stage_name",
    "program_name",
    "org_unit",
    "org_unit_code",
    "completed_date",
    "environment",
    "value_count",
    "zero_pos_value_count",
)


def _require(value: Optional[str], field_name: str, owner: str) -> None:
    if not value:
        raise EngineModelError(
            f"{owner} requires a non-empty {field_name}",
            details={"entity": owner, "field": field_name}
        )


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleAction:
    """Base class of the engine action variants."""


@dataclass(frozen=True)
class RuleActionAssign(RuleAction):
    content: str
    data: str
    field: str

    def __post_init__(self):
        if not self.content and not self.field:
            raise EngineModelError(
                "Either content or field must be set on an assign action",
                details={"entity": "RuleActionAssign"}
            )


@dataclass(frozen=True)
class RuleActionCreateEvent(RuleAction):
    content: str
    data: str
    program_stage: str


@dataclass(frozen=True)
class RuleActionDisplayKeyValuePair(RuleAction):
    content: str
    data: str
    location: DisplayLocation

    def __post_init__(self):
        if self.content is None and self.data is None:
            raise EngineModelError(
                "Content and data must not both be null",
                details={"entity": "RuleActionDisplayKeyValuePair"}
            )
        object.__setattr__(self, "content", self.content or "")
        object.__setattr__(self, "data", self.data or "")

    @classmethod
    def for_feedback(cls, content: Optional[str], data: Optional[str]) -> "RuleActionDisplayKeyValuePair":
        return cls(content=content, data=data, location=DisplayLocation.FEEDBACK)

    @classmethod
    def for_indicators(cls, content: Optional[str], data: Optional[str]) -> "RuleActionDisplayKeyValuePair":
        return cls(content=content, data=data, location=DisplayLocation.INDICATORS)


@dataclass(frozen=True)
class RuleActionDisplayText(RuleAction):
    content: str
    data: str
    location: DisplayLocation

    def __post_init__(self):
        if self.content is None and self.data is None:
            raise EngineModelError(
                "Content and data must not both be null",
                details={"entity": "RuleActionDisplayText"}
            )
        object.__setattr__(self, "content", self.content or "")
        object.__setattr__(self, "data", self.data or "")

    @classmethod
    def for_feedback(cls, content: Optional[str], data: Optional[str]) -> "RuleActionDisplayText":
        return cls(content=content, data=data, location=DisplayLocation.FEEDBACK)

    @classmethod
    def for_indicators(cls, content: Optional[str], data: Optional[str]) -> "RuleActionDisplayText":
        return cls(content=content, data=data, location=DisplayLocation.INDICATORS)


@dataclass(frozen=True)
class RuleActionHideField(RuleAction):
    content: str
    field: str


@dataclass(frozen=True)
class RuleActionHideProgramStage(RuleAction):
    program_stage: str

    def __post_init__(self):
        _require(self.program_stage, "program_stage", "RuleActionHideProgramStage")


@dataclass(frozen=True)
class RuleActionHideSection(RuleAction):
    program_stage_section: str

    def __post_init__(self):
        _require(self.program_stage_section, "program_stage_section", "RuleActionHideSection")


@dataclass(frozen=True)
class RuleActionShowError(RuleAction):
    content: str
    data: str
    field: str


@dataclass(frozen=True)
class RuleActionShowWarning(RuleAction):
    content: str
    data: str
    field: str


@dataclass(frozen=True)
class RuleActionSetMandatoryField(RuleAction):
    field: str


@dataclass(frozen=True)
class RuleActionWarningOnCompletion(RuleAction):
    content: str
    data: str
    field: str


@dataclass(frozen=True)
class RuleActionErrorOnCompletion(RuleAction):
    content: str
    data: str
    field: str


@dataclass(frozen=True)
class RuleActionSendMessage(RuleAction):
    notification: str
    data: str


@dataclass(frozen=True)
class RuleActionScheduleMessage(RuleAction):
    notification: str
    data: str


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleVariable:
    """Base class of the engine variable variants."""
    name: str
    value_type: RuleValueType

    def __post_init__(self):
        _require(self.name, "name", type(self).__name__)
        if not isinstance(self.value_type, RuleValueType):
            raise EngineModelError(
                f"Unsupported value type {self.value_type!r}",
                details={"entity": type(self).__name__}
            )


@dataclass(frozen=True)
class RuleVariableCalculatedValue(RuleVariable):
    field: str = ""


@dataclass(frozen=True)
class RuleVariableAttribute(RuleVariable):
    tracked_entity_attribute: str = ""

    def __post_init__(self):
        super().__post_init__()
        _require(self.tracked_entity_attribute, "tracked_entity_attribute", type(self).__name__)


@dataclass(frozen=True)
class _DataElementVariable(RuleVariable):
    data_element: str = ""

    def __post_init__(self):
        super().__post_init__()
        _require(self.data_element, "data_element", type(self).__name__)


@dataclass(frozen=True)
class RuleVariableCurrentEvent(_DataElementVariable):
    pass


@dataclass(frozen=True)
class RuleVariablePreviousEvent(_DataElementVariable):
    pass


@dataclass(frozen=True)
class RuleVariableNewestEvent(_DataElementVariable):
    pass


@dataclass(frozen=True)
class RuleVariableNewestStageEvent(_DataElementVariable):
    program_stage: str = ""

    def __post_init__(self):
        super().__post_init__()
        _require(self.program_stage, "program_stage", type(self).__name__)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """Engine rule: condition plus ordered actions."""
    program_stage: str
    priority: Optional[int]
    condition: str
    actions: Tuple[RuleAction, ...] = ()
    name: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.condition, str):
            raise EngineModelError("Rule condition must be a string", details={"name": self.name})
        if not isinstance(self.actions, tuple):
            object.__setattr__(self, "actions", tuple(self.actions))
        for action in self.actions:
            if not isinstance(action, RuleAction):
                raise EngineModelError(
                    f"Unsupported rule action {action!r}",
                    details={"name": self.name}
                )


# ---------------------------------------------------------------------------
# Runtime values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleAttributeValue:
    tracked_entity_attribute: str
    value: str


@dataclass(frozen=True)
class RuleDataValue:
    event_date: Optional[datetime]
    program_stage: str
    data_element: str
    value: str


@dataclass(frozen=True)
class RuleEnrollment:
    enrollment: str
    incident_date: Optional[datetime]
    enrollment_date: Optional[datetime]
    status: RuleEnrollmentStatus
    organisation_unit: str
    organisation_unit_code: str
    attribute_values: Tuple[RuleAttributeValue, ...] = field(default_factory=tuple)
    program_name: str = ""


@dataclass(frozen=True)
class RuleEvent:
    event: str
    program_stage: str
    status: RuleEventStatus
    event_date: Optional[datetime]
    due_date: Optional[datetime]
    organisation_unit: str
    organisation_unit_code: str
    data_values: Tuple[RuleDataValue, ...] = field(default_factory=tuple)
    program_stage_name: str = ""
