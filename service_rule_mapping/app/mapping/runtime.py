"""
Runtime context mapping: enrollments and events to engine values.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from shared.errors import MalformedDefinitionError, StatusMappingError
from ..models.engine import (
    RuleAttributeValue, RuleDataValue, RuleEnrollment, RuleEnrollmentStatus,
    RuleEvent, RuleEventStatus
)
from ..models.persisted import (
    Enrollment, Event, EventDataValue, EventStatus, OrganisationUnit,
    ProgramStatus, TrackedEntityAttributeValue
)
from .value_types import ValueTypeCache, coerce_value

ENROLLMENT_STATUS_MAP: Dict[ProgramStatus, RuleEnrollmentStatus] = {
    ProgramStatus.ACTIVE: RuleEnrollmentStatus.ACTIVE,
    ProgramStatus.COMPLETED: RuleEnrollmentStatus.COMPLETED,
    ProgramStatus.CANCELLED: RuleEnrollmentStatus.CANCELLED,
}

EVENT_STATUS_MAP: Dict[EventStatus, RuleEventStatus] = {
    EventStatus.ACTIVE: RuleEventStatus.ACTIVE,
    EventStatus.COMPLETED: RuleEventStatus.COMPLETED,
    EventStatus.VISITED: RuleEventStatus.VISITED,
    EventStatus.SCHEDULE: RuleEventStatus.SCHEDULE,
    EventStatus.OVERDUE: RuleEventStatus.OVERDUE,
    EventStatus.SKIPPED: RuleEventStatus.SKIPPED,
}


def to_rule_enrollment_status(status: ProgramStatus) -> RuleEnrollmentStatus:
    try:
        return ENROLLMENT_STATUS_MAP[status]
    except (KeyError, TypeError):
        raise StatusMappingError(status, "enrollment") from None


def to_rule_event_status(status: EventStatus) -> RuleEventStatus:
    try:
        return EVENT_STATUS_MAP[status]
    except (KeyError, TypeError):
        raise StatusMappingError(status, "event") from None


def _org_unit_fields(organisation_unit: Optional[OrganisationUnit]) -> Tuple[str, str]:
    if organisation_unit is None:
        return "", ""
    return organisation_unit.uid or "", organisation_unit.code or ""


class RuntimeContextMapper:
    """Maps enrollments and events to the engine's runtime containers."""

    def __init__(self, value_type_cache: ValueTypeCache):
        self.value_type_cache = value_type_cache

    def map_enrollment(self, enrollment: Optional[Enrollment]) -> Optional[RuleEnrollment]:
        if enrollment is None:
            return None

        organisation_unit, organisation_unit_code = _org_unit_fields(enrollment.organisation_unit)

        attribute_values: Tuple[RuleAttributeValue, ...] = ()
        if enrollment.tracked_entity_instance is not None:
            attribute_values = tuple(
                self._to_attribute_value(attribute_value)
                for attribute_value in enrollment.tracked_entity_instance.attribute_values
                if attribute_value is not None
            )

        return RuleEnrollment(
            enrollment=enrollment.uid,
            incident_date=enrollment.incident_date,
            enrollment_date=enrollment.enrollment_date,
            status=to_rule_enrollment_status(enrollment.status),
            organisation_unit=organisation_unit,
            organisation_unit_code=organisation_unit_code,
            attribute_values=attribute_values,
            program_name=enrollment.program.name
        )

    def map_events(self, events: Iterable[Event], excluding: Optional[Event] = None) -> List[RuleEvent]:
        """Map every event except the one being evaluated, in input order."""
        excluded_uid = excluding.uid if excluding is not None else None

        return [
            self.map_event(event)
            for event in events
            if event is not None and not (excluded_uid is not None and event.uid == excluded_uid)
        ]

    def map_event(self, event: Optional[Event]) -> Optional[RuleEvent]:
        if event is None:
            return None

        organisation_unit, organisation_unit_code = _org_unit_fields(event.organisation_unit)
        event_date = event.execution_date if event.execution_date is not None else event.due_date

        data_values = tuple(
            RuleDataValue(
                event_date=event_date,
                program_stage=event.program_stage.uid,
                data_element=data_value.data_element,
                value=self._event_data_value(data_value)
            )
            for data_value in event.data_values
            if data_value is not None
        )

        return RuleEvent(
            event=event.uid,
            program_stage=event.program_stage.uid,
            status=to_rule_event_status(event.status),
            event_date=event_date,
            due_date=event.due_date,
            organisation_unit=organisation_unit,
            organisation_unit_code=organisation_unit_code,
            data_values=data_values,
            program_stage_name=event.program_stage.name or ""
        )

    def _to_attribute_value(self, attribute_value: TrackedEntityAttributeValue) -> RuleAttributeValue:
        attribute = attribute_value.attribute
        if attribute is None:
            raise MalformedDefinitionError("Attribute value has no attribute")

        return RuleAttributeValue(
            tracked_entity_attribute=attribute.uid,
            value=coerce_value(attribute_value.value, attribute.value_type)
        )

    def _event_data_value(self, data_value: EventDataValue) -> str:
        value_type = data_value.value_type
        if value_type is None:
            value_type = self.value_type_cache.resolve(data_value.data_element)
        return coerce_value(data_value.value, value_type)
