from datetime import datetime

import pytest

from focusflow.app import FocusFlowApp
from focusflow.models import Task
from storage.kv_store import KeyValueStore

# Wednesday
NOW = datetime(2026, 10, 14, 10, 30)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def kv(tmp_path):
    return KeyValueStore(directory=str(tmp_path / "data"))


@pytest.fixture
def app(tmp_path):
    return FocusFlowApp(data_dir=str(tmp_path / "data"), clock=lambda: NOW)


@pytest.fixture
def make_task():
    counter = {"n": 0}

    def _make(title: str = "Task", **fields):
        counter["n"] += 1
        fields.setdefault("id", f"t{counter['n']}")
        fields.setdefault("created_at", NOW)
        return Task(title=title, **fields)

    return _make
