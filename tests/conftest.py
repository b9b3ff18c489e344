import pytest

from kvlet import repository


@pytest.fixture
def repo():
    """A fresh in-memory repository with an in-memory working tree."""
    return repository()
