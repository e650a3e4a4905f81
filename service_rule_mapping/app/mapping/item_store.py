"""
Item store: the name -> description table used by condition tooling.
"""

from typing import Dict, Iterable, Optional, Sequence

from shared.errors import MalformedDefinitionError, MissingReferenceError
from shared.logging import get_logger
from ..models.engine import ENV_VARIABLES
from ..models.persisted import DataElement, ProgramRuleVariable, ProgramRuleVariableSourceType
from ..stores.base import ConstantStore, DataElementStore, Localizer
from .variables import DATA_ELEMENT_SOURCE_TYPES


def first_non_empty(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


class ItemStoreBuilder:
    """Builds descriptions for variables, constants and environment variables."""

    def __init__(
        self,
        data_element_store: DataElementStore,
        constant_store: ConstantStore,
        localizer: Localizer,
        env_variables: Sequence[str] = ENV_VARIABLES,
    ):
        self.data_element_store = data_element_store
        self.constant_store = constant_store
        self.localizer = localizer
        self.env_variables = tuple(env_variables)
        self.logger = get_logger("rule_mapping.item_store")

    def build(self, variables: Iterable[ProgramRuleVariable]) -> Dict[str, str]:
        item_store: Dict[str, str] = {}

        for variable in variables:
            if variable is None:
                continue
            key = first_non_empty(variable.name, variable.display_name)
            try:
                description = self.describe_variable(variable)
            except MalformedDefinitionError as e:
                self.logger.debug("No description for ProgramRuleVariable", variable_uid=variable.uid, error=e.message)
                continue
            if key is None or description is None:
                self.logger.debug(
                    "No item store entry for ProgramRuleVariable",
                    variable_uid=variable.uid,
                    source_type=variable.source_type
                )
                continue
            item_store[key] = description

        for constant in self.constant_store.all_constants():
            item_store[constant.uid] = first_non_empty(
                constant.display_name, constant.display_form_name, constant.name
            ) or ""

        for token in self.env_variables:
            item_store[token] = self.localizer.string(token)

        return item_store

    def describe_variable(self, variable: ProgramRuleVariable) -> Optional[str]:
        """Description of one variable, or None for an unsupported source type."""
        source_type = variable.source_type

        if source_type == ProgramRuleVariableSourceType.CALCULATED_VALUE:
            return first_non_empty(variable.display_name, variable.name)

        if source_type == ProgramRuleVariableSourceType.TEI_ATTRIBUTE:
            attribute = variable.attribute
            if attribute is None:
                raise MalformedDefinitionError(
                    "Attribute variable has no attribute", details={"variable_uid": variable.uid}
                )
            return first_non_empty(attribute.display_name, attribute.display_form_name, attribute.name)

        if source_type in DATA_ELEMENT_SOURCE_TYPES:
            data_element = self._bound_data_element(variable)
            return first_non_empty(data_element.display_form_name, data_element.form_name, data_element.name)

        return None

    def _bound_data_element(self, variable: ProgramRuleVariable) -> DataElement:
        if variable.data_element is not None:
            return variable.data_element

        if not variable.data_element_uid:
            raise MalformedDefinitionError(
                "Data element variable has no data element", details={"variable_uid": variable.uid}
            )

        data_element = self.data_element_store.by_id(variable.data_element_uid)
        if data_element is None:
            raise MissingReferenceError(variable.data_element_uid, details={"variable_uid": variable.uid})
        return data_element
