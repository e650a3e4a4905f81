"""
Unit tests for item store construction.
"""

import pytest
from structlog.testing import capture_logs

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import MissingReferenceError
from shared.test_helpers import TestDataFactory, TestEnvironment
from service_rule_mapping.app.mapping.item_store import ItemStoreBuilder, first_non_empty
from service_rule_mapping.app.models.engine import ENV_VARIABLES
from service_rule_mapping.app.models.persisted import (
    Constant, ProgramRuleVariable, ProgramRuleVariableSourceType
)
from service_rule_mapping.app.stores.memory import DictLocalizer, InMemoryConstantStore


class TestFirstNonEmpty:
    """Test cases for first_non_empty."""

    def test_skips_empty_values(self):
        """Test None and empty strings are skipped."""
        assert first_non_empty(None, "", "b", "c") == "b"

    def test_all_empty(self):
        """Test None when nothing is set."""
        assert first_non_empty(None, "") is None


class TestItemStoreBuilder:
    """Test cases for ItemStoreBuilder."""

    @pytest.fixture
    def builder(self, data_element_store):
        """Create ItemStoreBuilder instance."""
        return ItemStoreBuilder(
            data_element_store,
            InMemoryConstantStore(TestDataFactory.create_constants()),
            DictLocalizer(TestEnvironment.get_env_variable_messages()),
        )

    def test_variable_descriptions(self, builder):
        """Test each variable is described by its bound entity."""
        item_store = builder.build(TestDataFactory.create_variables())

        assert item_store["risk_score"] == "Risk score"
        assert item_store["age"] == "Age"
        assert item_store["weight"] == "Weight in grams"
        assert item_store["previous_bcg"] == "BCG dose"
        assert item_store["latest_comment"] == "MCH Comment"
        assert item_store["birth_weight"] == "Weight in grams"

    def test_constant_descriptions(self, builder):
        """Test constants are keyed by uid."""
        item_store = builder.build([])

        assert item_store["bCqvfPR02Im"] == "Pi constant"
        assert item_store["Gfd3ppDfq8E"] == "Low weight"

    def test_environment_variables(self, builder):
        """Test every environment variable token is present."""
        item_store = builder.build([])

        assert all(token in item_store for token in ENV_VARIABLES)
        assert item_store["current_date"] == "Current date"
        assert item_store["event_count"] == "event_count"

    def test_size(self, builder):
        """Test the store holds variables, constants and env variables."""
        item_store = builder.build(TestDataFactory.create_variables())

        assert len(item_store) == 6 + 2 + len(ENV_VARIABLES)

    def test_variable_key_falls_back_to_display_name(self, builder):
        """Test a nameless variable is keyed by its display name."""
        variable = ProgramRuleVariable(
            uid="var-x",
            name="",
            display_name="Display key",
            source_type=ProgramRuleVariableSourceType.CALCULATED_VALUE,
        )

        assert builder.build([variable])["Display key"] == "Display key"

    def test_calculated_value_prefers_display_name(self, builder):
        """Test calculated values use the display name before the name."""
        variables = TestDataFactory.create_variables()[:1]
        variables[0].display_name = None

        assert builder.build(variables)["risk_score"] == "risk_score"

    def test_variable_without_association_is_skipped(self, builder):
        """Test a variable missing its attribute is left out."""
        variable = ProgramRuleVariable(
            uid="var-broken",
            name="broken",
            source_type=ProgramRuleVariableSourceType.TEI_ATTRIBUTE,
        )

        assert "broken" not in builder.build([variable])

    def test_unsupported_source_type_is_skipped(self, builder):
        """Test a variable with an unknown source type is left out."""
        variable = ProgramRuleVariable(uid="var-odd", name="odd", source_type="DATAELEMENT_ELSEWHERE")

        assert "odd" not in builder.build([variable])

    def test_unsupported_source_type_is_logged(self, builder):
        """Test a variable left out for its source type is logged at debug."""
        variable = ProgramRuleVariable(uid="var-odd", name="odd", source_type="DATAELEMENT_ELSEWHERE")

        with capture_logs() as cap_logs:
            builder.build([variable])

        entries = [entry for entry in cap_logs if entry["event"] == "No item store entry for ProgramRuleVariable"]
        assert len(entries) == 1
        assert entries[0]["log_level"] == "debug"
        assert entries[0]["variable_uid"] == "var-odd"
        assert entries[0]["source_type"] == "DATAELEMENT_ELSEWHERE"

    def test_dangling_data_element_raises(self, builder):
        """Test a referenced data element that does not exist raises."""
        variable = ProgramRuleVariable(
            uid="var-missing",
            name="missing",
            source_type=ProgramRuleVariableSourceType.DATAELEMENT_CURRENT_EVENT,
            data_element_uid="doesNotExist",
        )

        with pytest.raises(MissingReferenceError):
            builder.build([variable])

    def test_later_categories_overwrite(self, data_element_store):
        """Test constants and env variables win key collisions."""
        builder = ItemStoreBuilder(
            data_element_store,
            InMemoryConstantStore([Constant(uid="current_date", name="Shadow")]),
            DictLocalizer({"current_date": "Current date"}),
        )
        variable = ProgramRuleVariable(
            uid="var-c",
            name="current_date",
            source_type=ProgramRuleVariableSourceType.CALCULATED_VALUE,
        )

        assert builder.build([variable])["current_date"] == "Current date"

    def test_constant_without_names(self, data_element_store):
        """Test a constant with no names gets an empty description."""
        builder = ItemStoreBuilder(
            data_element_store,
            InMemoryConstantStore([Constant(uid="c-1", name="")]),
            DictLocalizer({}),
            env_variables=(),
        )

        assert builder.build([]) == {"c-1": ""}
