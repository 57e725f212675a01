import itertools
from datetime import datetime, timedelta, timezone

import pytest

from api import ContactAPI
from db import LocalStorage
from models import ContactRecord, Status
from store import ContactStore


class TickingClock:
    """Returns a moment one minute later on every call."""
    def __init__(self, start=datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)):
        self._ticks = itertools.count()
        self.start = start

    def __call__(self):
        return self.start + timedelta(minutes=next(self._ticks))


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "contacts.db"))


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(storage, clock):
    s = ContactStore(storage, key="portfolioContacts", clock=clock)
    s.load()
    return s


@pytest.fixture
def api(store, clock):
    return ContactAPI(store, failure_probability=0.0, create_delay=0, mutate_delay=0,
                      sleep=lambda seconds: None, clock=clock)


@pytest.fixture
def form_data():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "",
        "company": "",
        "subject": "consultation",
        "message": "I would like to talk about engines.",
    }


@pytest.fixture
def make_contact():
    ids = itertools.count(1)

    def _make(**overrides) -> ContactRecord:
        fields = dict(
            id=next(ids),
            first_name="Jane",
            last_name="Doe",
            email="jane@example.com",
            subject="other",
            message="Hello there",
            timestamp="2026-10-17T09:30:00.000Z",
            status=Status.NEW,
        )
        fields.update(overrides)
        return ContactRecord(**fields)
    return _make
