"""
Shared test fixtures: API test client, a fresh domain library, and
temporarily registered calculators.
"""

import pytest
from fastapi.testclient import TestClient

from calc_engine.calculators import registry
from calc_engine.calculators.material_lookup import DomainLibrary
from calc_engine.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def library():
    """Domain library over the shipped tables."""
    return DomainLibrary()


@pytest.fixture
def temporary_calculator():
    """
    Register calculators for one test only. The registry has no public
    removal, so teardown drops the test's ids from the backing dict.
    """
    added = []

    def _register(definition):
        registry.register(definition)
        added.append(definition.id)
        return definition

    yield _register
    for calculator_id in added:
        registry.CALCULATOR_REGISTRY.pop(calculator_id, None)
