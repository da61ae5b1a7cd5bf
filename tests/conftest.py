import pytest

from .fixtures import SIMPLE_SCRIPT, FakeScriptStore


@pytest.fixture
def store():
    return FakeScriptStore({("Interface", "onInit"): SIMPLE_SCRIPT})
