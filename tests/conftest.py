"""Shared fixtures for the task calendar tests."""
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from taskcal.tasks import CalendarService, SlotPersistence, TaskStore  # noqa: E402


@pytest.fixture
def store():
    return TaskStore()


@pytest.fixture
def persistence(tmp_path):
    return SlotPersistence(tmp_path / "data")


@pytest.fixture
def service(persistence, tmp_path):
    svc = CalendarService(persistence, export_dir=tmp_path / "exports")
    svc.initialize()
    yield svc
    svc.close()
