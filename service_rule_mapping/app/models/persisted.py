"""
Persisted-side program rule data models.

Only the subset of the program/tracked-entity domain that the mapping reads
is modelled here. Instances are supplied by the collaborator stores and are
never mutated by the mappers.
"""

from typing import Optional, List
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ValueType(str, Enum):
    """Declared value type of a data element or tracked entity attribute."""
    TEXT = "TEXT"
    LONG_TEXT = "LONG_TEXT"
    LETTER = "LETTER"
    PHONE_NUMBER = "PHONE_NUMBER"
    EMAIL = "EMAIL"
    BOOLEAN = "BOOLEAN"
    TRUE_ONLY = "TRUE_ONLY"
    DATE = "DATE"
    DATETIME = "DATETIME"
    TIME = "TIME"
    NUMBER = "NUMBER"
    UNIT_INTERVAL = "UNIT_INTERVAL"
    PERCENTAGE = "PERCENTAGE"
    INTEGER = "INTEGER"
    INTEGER_POSITIVE = "INTEGER_POSITIVE"
    INTEGER_NEGATIVE = "INTEGER_NEGATIVE"
    INTEGER_ZERO_OR_POSITIVE = "INTEGER_ZERO_OR_POSITIVE"
    TRACKER_ASSOCIATE = "TRACKER_ASSOCIATE"
    USERNAME = "USERNAME"
    COORDINATE = "COORDINATE"
    ORGANISATION_UNIT = "ORGANISATION_UNIT"
    AGE = "AGE"
    URL = "URL"
    FILE_RESOURCE = "FILE_RESOURCE"
    IMAGE = "IMAGE"

    @property
    def is_boolean(self) -> bool:
        return self in BOOLEAN_TYPES

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC_TYPES


BOOLEAN_TYPES = frozenset({ValueType.BOOLEAN, ValueType.TRUE_ONLY})

NUMERIC_TYPES = frozenset({
    ValueType.NUMBER,
    ValueType.UNIT_INTERVAL,
    ValueType.PERCENTAGE,
    ValueType.INTEGER,
    ValueType.INTEGER_POSITIVE,
    ValueType.INTEGER_NEGATIVE,
    ValueType.INTEGER_ZERO_OR_POSITIVE,
})


class ProgramRuleActionType(str, Enum):
    """Program rule action kinds."""
    ASSIGN = "ASSIGN"
    CREATEEVENT = "CREATEEVENT"
    DISPLAYKEYVALUEPAIR = "DISPLAYKEYVALUEPAIR"
    DISPLAYTEXT = "DISPLAYTEXT"
    HIDEFIELD = "HIDEFIELD"
    HIDEPROGRAMSTAGE = "HIDEPROGRAMSTAGE"
    HIDESECTION = "HIDESECTION"
    SHOWERROR = "SHOWERROR"
    SHOWWARNING = "SHOWWARNING"
    SETMANDATORYFIELD = "SETMANDATORYFIELD"
    WARNINGONCOMPLETE = "WARNINGONCOMPLETE"
    ERRORONCOMPLETE = "ERRORONCOMPLETE"
    SENDMESSAGE = "SENDMESSAGE"
    SCHEDULEMESSAGE = "SCHEDULEMESSAGE"


class ProgramRuleVariableSourceType(str, Enum):
    """Where a program rule variable takes its value from."""
    CALCULATED_VALUE = "CALCULATED_VALUE"
    TEI_ATTRIBUTE = "TEI_ATTRIBUTE"
    DATAELEMENT_CURRENT_EVENT = "DATAELEMENT_CURRENT_EVENT"
    DATAELEMENT_PREVIOUS_EVENT = "DATAELEMENT_PREVIOUS_EVENT"
    DATAELEMENT_NEWEST_EVENT_PROGRAM = "DATAELEMENT_NEWEST_EVENT_PROGRAM"
    DATAELEMENT_NEWEST_EVENT_PROGRAM_STAGE = "DATAELEMENT_NEWEST_EVENT_PROGRAM_STAGE"


class ProgramStatus(str, Enum):
    """Enrollment status."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class EventStatus(str, Enum):
    """Event status."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    VISITED = "VISITED"
    SCHEDULE = "SCHEDULE"
    OVERDUE = "OVERDUE"
    SKIPPED = "SKIPPED"


@dataclass
class Program:
    """Program owning rules, variables and enrollments."""
    uid: str
    name: str


@dataclass
class ProgramStage:
    """Program stage."""
    uid: str
    name: str = ""


@dataclass
class ProgramStageSection:
    """Section of a program stage form."""
    uid: str
    name: str = ""


@dataclass
class OrganisationUnit:
    """Organisation unit an enrollment or event is registered at."""
    uid: str
    code: Optional[str] = None
    name: Optional[str] = None


@dataclass
class DataElement:
    """Data element captured on events."""
    uid: str
    name: str
    value_type: Optional[ValueType] = ValueType.TEXT
    form_name: Optional[str] = None
    display_name: Optional[str] = None
    display_form_name: Optional[str] = None


@dataclass
class TrackedEntityAttribute:
    """Attribute captured on tracked entity instances."""
    uid: str
    name: str
    value_type: Optional[ValueType] = ValueType.TEXT
    display_name: Optional[str] = None
    display_form_name: Optional[str] = None


@dataclass
class Constant:
    """Program rule constant."""
    uid: str
    name: str
    value: float = 0.0
    display_name: Optional[str] = None
    display_form_name: Optional[str] = None


@dataclass
class ProgramRuleAction:
    """Persisted program rule action."""
    uid: str
    action_type: ProgramRuleActionType
    content: Optional[str] = None
    data: Optional[str] = None
    data_element: Optional[DataElement] = None
    attribute: Optional[TrackedEntityAttribute] = None
    location: Optional[str] = None
    template_uid: Optional[str] = None
    program_stage: Optional[ProgramStage] = None
    program_stage_section: Optional[ProgramStageSection] = None
    program_rule_uid: Optional[str] = None

    def has_data_element(self) -> bool:
        return self.data_element is not None

    def has_tracked_entity_attribute(self) -> bool:
        return self.attribute is not None

    def has_content(self) -> bool:
        return bool(self.content)


@dataclass
class ProgramRule:
    """Persisted program rule."""
    uid: str
    name: str
    condition: Optional[str]
    priority: Optional[int] = None
    program: Optional[Program] = None
    program_stage: Optional[ProgramStage] = None
    actions: List[ProgramRuleAction] = field(default_factory=list)
    description: Optional[str] = None


@dataclass
class ProgramRuleVariable:
    """Persisted program rule variable."""
    uid: str
    name: str
    source_type: ProgramRuleVariableSourceType
    display_name: Optional[str] = None
    program: Optional[Program] = None
    attribute: Optional[TrackedEntityAttribute] = None
    data_element: Optional[DataElement] = None
    data_element_uid: Optional[str] = None
    program_stage: Optional[ProgramStage] = None

    @property
    def bound_data_element_uid(self) -> Optional[str]:
        """Uid of the bound data element, loaded or referenced."""
        if self.data_element is not None:
            return self.data_element.uid
        return self.data_element_uid


@dataclass
class TrackedEntityAttributeValue:
    """Raw attribute value held by a tracked entity instance."""
    attribute: TrackedEntityAttribute
    value: Optional[str] = None


@dataclass
class TrackedEntityInstance:
    """Tracked entity instance and its attribute values."""
    uid: str
    attribute_values: List[TrackedEntityAttributeValue] = field(default_factory=list)


@dataclass
class EventDataValue:
    """Raw data value captured on an event."""
    data_element: str
    value: Optional[str] = None
    value_type: Optional[ValueType] = None


@dataclass
class Enrollment:
    """Enrollment of a tracked entity instance into a program."""
    uid: str
    program: Program
    incident_date: Optional[datetime] = None
    enrollment_date: Optional[datetime] = None
    status: ProgramStatus = ProgramStatus.ACTIVE
    organisation_unit: Optional[OrganisationUnit] = None
    tracked_entity_instance: Optional[TrackedEntityInstance] = None


@dataclass
class Event:
    """Event captured within a program stage."""
    uid: str
    program_stage: ProgramStage
    status: EventStatus = EventStatus.ACTIVE
    execution_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    organisation_unit: Optional[OrganisationUnit] = None
    data_values: List[EventDataValue] = field(default_factory=list)
