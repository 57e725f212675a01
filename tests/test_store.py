import json

import pytest

from db import LocalStorage
from errors import StorageUnavailable
from models import Status
from store import ContactStore


def test_load_empty_storage(store):
    assert store.get_all() == []
    assert not store.degraded


def test_insert_puts_newest_first(store, make_contact):
    a = make_contact(first_name="A")
    b = make_contact(first_name="B")
    store.insert(a)
    store.insert(b)
    assert [c.first_name for c in store.get_all()] == ["B", "A"]


def test_insert_rejects_duplicate_id(store, make_contact):
    store.insert(make_contact(id=7))
    with pytest.raises(ValueError):
        store.insert(make_contact(id=7))
    assert len(store.get_all()) == 1


def test_get_all_returns_a_copy(store, make_contact):
    store.insert(make_contact())
    contacts = store.get_all()
    contacts.clear()
    assert len(store.get_all()) == 1


def test_remove(store, make_contact):
    a, b = make_contact(), make_contact()
    store.insert(a)
    store.insert(b)
    assert store.remove(a.id) is True
    assert store.get_all() == [b]


def test_remove_unknown_id_is_a_noop(store, storage, make_contact):
    store.insert(make_contact())
    before = store.get_all()
    stored = storage.get_item("portfolioContacts")
    assert store.remove(999) is False
    assert store.get_all() == before
    assert storage.get_item("portfolioContacts") == stored


def test_update_status_sets_updated_at(store, make_contact):
    c = make_contact()
    store.insert(c)
    assert store.update_status(c.id, "read") is True
    first_update = store.get(c.id).updated_at
    assert store.get(c.id).status is Status.READ
    assert first_update

    assert store.update_status(c.id, Status.READ) is True
    assert store.get(c.id).status is Status.READ
    assert store.get(c.id).updated_at > first_update


def test_update_status_unknown_id(store):
    assert store.update_status(12345, "replied") is False


def test_update_status_rejects_unknown_status(store, make_contact):
    c = make_contact()
    store.insert(c)
    with pytest.raises(ValueError):
        store.update_status(c.id, "archived")
    assert store.get(c.id).status is Status.NEW


def test_round_trip_through_storage(store, storage, make_contact):
    store.insert(make_contact(phone="+14155551234", company="Acme"))
    store.insert(make_contact(message='He said "hi"'))
    store.update_status(store.get_all()[1].id, "replied")

    reloaded = ContactStore(storage, key="portfolioContacts")
    assert reloaded.load() == store.get_all()


def test_saved_blob_is_a_json_array(store, storage, make_contact):
    c = make_contact(id=1700000000000)
    store.insert(c)
    blob = json.loads(storage.get_item("portfolioContacts"))
    assert blob == [{
        "id": 1700000000000,
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@example.com",
        "subject": "other",
        "message": "Hello there",
        "timestamp": "2026-10-17T09:30:00.000Z",
        "status": "new",
    }]


@pytest.mark.parametrize("blob", ["{not json", '{"id": 1}', "null", "42"])
def test_unparsable_blob_loads_empty(storage, blob):
    storage.set_item("portfolioContacts", blob)
    s = ContactStore(storage, key="portfolioContacts")
    assert s.load() == []


def test_unreadable_entries_are_skipped(storage):
    good = {"id": 1, "firstName": "A", "lastName": "B", "email": "a@b.co",
            "subject": "other", "message": "m", "timestamp": "2026-01-01T00:00:00.000Z",
            "status": "read"}
    storage.set_item("portfolioContacts", json.dumps([good, {"id": 2}, "junk",
                                                      dict(good, id=3, status="deleted")]))
    s = ContactStore(storage, key="portfolioContacts")
    assert [c.id for c in s.load()] == [1]


def test_next_id_is_strictly_increasing(storage):
    s = ContactStore(storage, millis=lambda: 1000)
    assert [s.next_id() for _ in range(3)] == [1000, 1001, 1002]


def test_next_id_skips_past_loaded_ids(storage, make_contact):
    s = ContactStore(storage, key="portfolioContacts", millis=lambda: 5)
    s.insert(make_contact(id=50))
    reloaded = ContactStore(storage, key="portfolioContacts", millis=lambda: 5)
    reloaded.load()
    assert reloaded.next_id() == 51


def test_write_failure_keeps_memory_and_degrades(store, storage, make_contact, monkeypatch):
    def broken(key, value):
        raise StorageUnavailable("disk full")

    monkeypatch.setattr(storage, "set_item", broken)
    c = make_contact()
    store.insert(c)
    assert store.get_all() == [c]
    assert store.degraded
    assert "disk full" in str(store.storage_error)

    monkeypatch.undo()
    store.update_status(c.id, "read")
    assert not store.degraded
    assert ContactStore(storage, key="portfolioContacts").load() == store.get_all()


def test_unreadable_storage_starts_empty_and_degraded(tmp_path):
    # a directory cannot be opened as a database file
    s = ContactStore(LocalStorage(str(tmp_path)))
    assert s.load() == []
    assert s.degraded


def test_legacy_blob_saves_back_unchanged(storage):
    legacy = [{
        "id": 1729157400000,
        "firstName": "Old",
        "lastName": "Browser",
        "email": "old@example.com",
        "phone": "",
        "company": "",
        "subject": "collaboration",
        "message": "Saved by the web widget",
        "timestamp": "2024-10-17T09:30:00.000Z",
        "status": "read",
        "updatedAt": "2024-10-18T10:00:00.000Z",
        "newsletter": "on",
    }]
    storage.set_item("portfolioContacts", json.dumps(legacy))
    s = ContactStore(storage, key="portfolioContacts")
    s.load()
    s.save()
    assert json.loads(storage.get_item("portfolioContacts")) == legacy


@pytest.mark.parametrize("bad", [
    {"firstName": None},
    {"message": 42},
    {"id": "17"},
    {"id": True},
    {"phone": 4155551234},
])
def test_entries_with_wrong_types_are_skipped(storage, bad):
    good = {"id": 1, "firstName": "A", "lastName": "B", "email": "a@b.co",
            "subject": "other", "message": "m", "timestamp": "2026-01-01T00:00:00.000Z",
            "status": "new"}
    storage.set_item("portfolioContacts", json.dumps([good, {**good, "id": 3, **bad}]))
    s = ContactStore(storage, key="portfolioContacts")
    assert [c.id for c in s.load()] == [1]
