"""
Shared fixtures for Rule Mapping Service unit tests.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.test_helpers import TestDataFactory
from service_rule_mapping.app.stores.memory import InMemoryDataElementStore


@pytest.fixture
def data_elements():
    """Test data elements keyed by short name."""
    return TestDataFactory.create_data_elements()


@pytest.fixture
def attributes():
    """Test tracked entity attributes keyed by short name."""
    return TestDataFactory.create_attributes()


@pytest.fixture
def data_element_store(data_elements):
    """In-memory data element store holding the test data elements."""
    return InMemoryDataElementStore(data_elements.values())
