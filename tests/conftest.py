# tests/conftest.py
import os, sys
# lägg till projektroten (mappen som innehåller "fixit") först i sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from fixit.services.notifications import NotificationChannel, NotificationDispatcher
from fixit.services.repair_service import IdGenerator, RepairService
from fixit.services.repair_store import RepairStore


class RecordingChannel(NotificationChannel):
    def __init__(self, name="fake", fail=False):
        self.name = name
        self.fail = fail
        self.sent = []

    def send(self, text):
        if self.fail:
            raise RuntimeError(f"{self.name} is down")
        self.sent.append(text)


class FrozenClock:
    """Klocka som står still tills testet flyttar den."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "repairs.json"


@pytest.fixture
def upload_dir(tmp_path):
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def store(ledger_path):
    return RepairStore(ledger_path)


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def service(store, upload_dir, channel):
    return RepairService(
        store,
        dispatcher=NotificationDispatcher([channel]),
        upload_dir=upload_dir,
        id_generator=IdGenerator(clock=FrozenClock()),
        now=lambda: "2024-05-01T12:00:00.000Z",
    )


ALICE = {
    "name": "Alice",
    "device": "Phone",
    "issue": "Cracked screen",
    "contact": "555-1",
    "method": "drop-off",
}
