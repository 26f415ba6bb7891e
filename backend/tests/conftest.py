import pytest

from fundrisk.parameters.registry import ParameterRegistry
from fundrisk.services.narrative_service import set_narrative_client


@pytest.fixture(autouse=True)
def _reset_state():
    """Fresh parameter registry and no narrative collaborator for every test."""
    ParameterRegistry.reset()
    set_narrative_client(None)
    yield
    ParameterRegistry.reset()
    set_narrative_client(None)
