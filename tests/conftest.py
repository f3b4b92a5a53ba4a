"""Shared pytest fixtures for holiday planner tests."""

import pytest

from holiday_planner.repository import HolidayRepository
from holiday_planner.store import DocumentStore
from holiday_planner.view_model import HolidayViewModel


@pytest.fixture
def store():
    """In-memory document store; closed after the test."""
    s = DocumentStore()
    yield s
    s.close()


@pytest.fixture
def file_store(tmp_path):
    """Document store persisted to a temporary JSON file."""
    path = tmp_path / "holidays.json"
    s = DocumentStore(path)
    yield s, path
    s.close()


@pytest.fixture
def repo(store):
    return HolidayRepository(store)


@pytest.fixture
def view_model(repo, store):
    vm = HolidayViewModel(repo)
    store.flush(timeout=2)
    yield vm
    vm.close()
