import pytest

from .fakes import RecordingSender


@pytest.fixture
def sender():
    return RecordingSender()
