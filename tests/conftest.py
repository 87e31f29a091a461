import pytest

from vegscan.rules.reference import ReferenceData


@pytest.fixture(autouse=True)
def _reset_reference_data():
    ReferenceData.reset()
    yield
    ReferenceData.reset()
