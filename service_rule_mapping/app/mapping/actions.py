"""
Program rule action mapping.
"""

from typing import Optional

from shared.errors import MalformedDefinitionError
from shared.logging import get_logger
from ..models.engine import (
    DisplayLocation, RuleAction, RuleActionAssign, RuleActionCreateEvent,
    RuleActionDisplayKeyValuePair, RuleActionDisplayText, RuleActionErrorOnCompletion,
    RuleActionHideField, RuleActionHideProgramStage, RuleActionHideSection,
    RuleActionScheduleMessage, RuleActionSendMessage, RuleActionSetMandatoryField,
    RuleActionShowError, RuleActionShowWarning, RuleActionWarningOnCompletion
)
from ..models.persisted import ProgramRuleAction, ProgramRuleActionType


def _text(value: Optional[str]) -> str:
    return value if value is not None else ""


class ActionMapper:
    """Maps persisted program rule actions to engine actions.

    Mapping an action never skips it: structural problems raise, and the
    rule mapper decides what to do with the owning rule.
    """

    def __init__(self):
        self.logger = get_logger("rule_mapping.actions")

    def map_action(self, action: ProgramRuleAction) -> RuleAction:
        """Map one action. Unknown action types map to an assign action."""
        action_type = action.action_type
        content = _text(action.content)
        data = _text(action.data)

        if action_type == ProgramRuleActionType.ASSIGN:
            return RuleActionAssign(
                content=content, data=data, field=self.get_assigned_parameter_for_assign(action)
            )

        elif action_type == ProgramRuleActionType.CREATEEVENT:
            if action.program_stage is not None:
                program_stage = action.program_stage.uid
            else:
                program_stage = _text(action.location)
            return RuleActionCreateEvent(content=content, data=data, program_stage=program_stage)

        elif action_type in (ProgramRuleActionType.DISPLAYTEXT, ProgramRuleActionType.DISPLAYKEYVALUEPAIR):
            return self.get_location_based_display_action(action)

        elif action_type == ProgramRuleActionType.HIDEFIELD:
            return RuleActionHideField(content=content, field=self.get_assigned_parameter(action))

        elif action_type == ProgramRuleActionType.HIDEPROGRAMSTAGE:
            if action.program_stage is None:
                raise MalformedDefinitionError(
                    "Hide program stage action has no program stage",
                    details={"action_uid": action.uid}
                )
            return RuleActionHideProgramStage(program_stage=action.program_stage.uid)

        elif action_type == ProgramRuleActionType.HIDESECTION:
            if action.program_stage_section is None:
                raise MalformedDefinitionError(
                    "Hide section action has no section",
                    details={"action_uid": action.uid}
                )
            return RuleActionHideSection(program_stage_section=action.program_stage_section.uid)

        elif action_type == ProgramRuleActionType.SHOWERROR:
            return RuleActionShowError(content=content, data=data, field=self.get_assigned_parameter(action))

        elif action_type == ProgramRuleActionType.SHOWWARNING:
            return RuleActionShowWarning(content=content, data=data, field=self.get_assigned_parameter(action))

        elif action_type == ProgramRuleActionType.SETMANDATORYFIELD:
            return RuleActionSetMandatoryField(field=self.get_assigned_parameter(action))

        elif action_type == ProgramRuleActionType.WARNINGONCOMPLETE:
            return RuleActionWarningOnCompletion(
                content=content, data=data, field=self.get_assigned_parameter(action)
            )

        elif action_type == ProgramRuleActionType.ERRORONCOMPLETE:
            return RuleActionErrorOnCompletion(
                content=content, data=data, field=self.get_assigned_parameter(action)
            )

        elif action_type == ProgramRuleActionType.SENDMESSAGE:
            return RuleActionSendMessage(notification=_text(action.template_uid), data=data)

        elif action_type == ProgramRuleActionType.SCHEDULEMESSAGE:
            return RuleActionScheduleMessage(notification=_text(action.template_uid), data=data)

        else:
            self.logger.debug(
                "Unknown action type, mapping as assign",
                action_uid=action.uid,
                action_type=action_type
            )
            return RuleActionAssign(content=content, data=data, field=self.get_assigned_parameter(action))

    def get_assigned_parameter(self, action: ProgramRuleAction) -> str:
        """Target of an action: data element, attribute, or literal content."""
        if action.has_data_element():
            return action.data_element.uid

        if action.has_tracked_entity_attribute():
            return action.attribute.uid

        if action.has_content():
            return action.content

        self._warn_missing_target(action)
        return ""

    def get_assigned_parameter_for_assign(self, action: ProgramRuleAction) -> str:
        """Target of an assign action. Content alone leaves it parameterless."""
        if action.has_data_element():
            return action.data_element.uid

        if action.has_tracked_entity_attribute():
            return action.attribute.uid

        if action.has_content():
            return ""

        self._warn_missing_target(action)
        return ""

    def get_location_based_display_action(self, action: ProgramRuleAction) -> RuleAction:
        """Display text or key/value pair, for indicators or feedback."""
        if action.action_type == ProgramRuleActionType.DISPLAYTEXT:
            variant = RuleActionDisplayText
        else:
            variant = RuleActionDisplayKeyValuePair

        if action.location == DisplayLocation.INDICATORS.value:
            return variant.for_indicators(action.content, action.data)

        return variant.for_feedback(action.content, action.data)

    def _warn_missing_target(self, action: ProgramRuleAction) -> None:
        self.logger.warning(
            "No location found for ProgramRuleAction",
            action_uid=action.uid,
            action_type=action.action_type,
            program_rule=action.program_rule_uid
        )
