"""
Value type resolution and the default value policy.
"""

from typing import Dict, Optional

from shared.errors import MissingReferenceError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..models.engine import RuleValueType
from ..models.persisted import ValueType
from ..stores.base import DataElementStore


def to_rule_value_type(value_type: Optional[ValueType]) -> RuleValueType:
    """Collapse a declared value type to the engine's semantic type."""
    if value_type is None:
        return RuleValueType.TEXT

    if not isinstance(value_type, ValueType):
        try:
            value_type = ValueType(value_type)
        except ValueError:
            return RuleValueType.TEXT

    if value_type.is_boolean:
        return RuleValueType.BOOLEAN

    if value_type.is_numeric:
        return RuleValueType.NUMERIC

    return RuleValueType.TEXT


def default_value(value_type: Optional[ValueType]) -> str:
    """Value substituted for a missing raw value of the given type."""
    rule_value_type = to_rule_value_type(value_type)

    if rule_value_type == RuleValueType.BOOLEAN:
        return "false"

    if rule_value_type == RuleValueType.NUMERIC:
        return "0"

    return ""


def coerce_value(value: Optional[str], value_type: Optional[ValueType]) -> str:
    """Pass a present value through, otherwise apply the default for its type."""
    if value is not None:
        return value
    return default_value(value_type)


class ValueTypeCache:
    """Memoizes data element uid -> declared value type for one mapping session.

    Each uid is looked up in the backing store at most once. A uid that the
    store does not know raises :class:`MissingReferenceError`, and nothing
    is cached for it.
    """

    def __init__(self, data_element_store: DataElementStore, metrics: Optional[MetricsCollector] = None):
        self.data_element_store = data_element_store
        self.metrics = metrics
        self.logger = get_logger("rule_mapping.value_type_cache")
        self._value_types: Dict[str, Optional[ValueType]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._value_types)

    def __contains__(self, uid: str) -> bool:
        return uid in self._value_types

    def resolve(self, data_element_uid: str) -> Optional[ValueType]:
        """Return the declared value type of a data element."""
        if data_element_uid in self._value_types:
            self.hits += 1
            self._record("hit")
            return self._value_types[data_element_uid]

        self.misses += 1
        self._record("miss")

        data_element = self.data_element_store.by_id(data_element_uid)
        if data_element is None:
            self.logger.error("DataElement was not found", data_element=data_element_uid)
            raise MissingReferenceError(data_element_uid)

        self._value_types[data_element_uid] = data_element.value_type
        return data_element.value_type

    def _record(self, result: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("value_type_lookups_total", result=result)
