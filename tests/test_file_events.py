"""Tests for the JSON file event store."""

import json

import pytest

from vertical.adapters.file_events import FileEventStore, StorageError
from vertical.core.events import CalendarEvent, EventNotFoundError, InvalidEventError


@pytest.fixture
def store(tmp_path):
    return FileEventStore(tmp_path / "data" / "events.json")


def make_event(**kwargs) -> CalendarEvent:
    values = {"id": "", "title": "Dentist", "event_date": "2025-04-15"}
    values.update(kwargs)
    return CalendarEvent(**values)


class TestFileEventStore:
    def test_missing_file_is_empty(self, store):
        assert store.list_events() == []
        assert store.get("nope") is None

    def test_create_assigns_id_and_timestamps(self, store):
        created = store.create(make_event(id="client-id"))
        assert created.id and created.id != "client-id"
        assert created.created_at is not None
        assert created.created_at == created.updated_at
        assert store.path.exists()

    def test_create_persists(self, store):
        created = store.create(make_event())
        reloaded = FileEventStore(store.path)
        assert reloaded.list_events() == [created]
        assert reloaded.get(created.id) == created

    def test_create_normalizes_range(self, store):
        created = store.create(
            make_event(event_end_date="2025-04-20", recurring_type="weekly", recurring_interval=2)
        )
        assert created.recurring_type == "none"
        assert created.recurring_interval is None

    def test_create_rejects_invalid(self, store):
        with pytest.raises(InvalidEventError):
            store.create(make_event(title=""))
        with pytest.raises(InvalidEventError):
            store.create(make_event(event_date="15/04/2025"))
        assert not store.path.exists()

    def test_list_keeps_insertion_order(self, store):
        titles = ["B", "A", "C"]
        for title in titles:
            store.create(make_event(title=title))
        assert [e.title for e in store.list_events()] == titles

    def test_update_merges_changes(self, store):
        created = store.create(make_event())
        updated = store.update(created.id, {"title": "Dentist (moved)", "event_date": "2025-04-16"})
        assert updated.title == "Dentist (moved)"
        assert updated.event_date == "2025-04-16"
        assert updated.created_at == created.created_at
        assert store.get(created.id).title == "Dentist (moved)"

    def test_update_cannot_change_id(self, store):
        created = store.create(make_event())
        updated = store.update(created.id, {"id": "other", "title": "X"})
        assert updated.id == created.id

    def test_update_renormalizes(self, store):
        created = store.create(make_event(recurring_type="weekly"))
        assert created.recurring_interval == 1
        updated = store.update(created.id, {"event_end_date": "2025-04-18"})
        assert updated.recurring_type == "none"
        assert updated.recurring_interval is None

    def test_update_unknown_id(self, store):
        store.create(make_event())
        with pytest.raises(EventNotFoundError):
            store.update("missing", {"title": "X"})

    def test_update_requires_changes(self, store):
        created = store.create(make_event())
        with pytest.raises(InvalidEventError):
            store.update(created.id, {"id": created.id})

    def test_delete(self, store):
        keep = store.create(make_event(title="Keep"))
        drop = store.create(make_event(title="Drop"))
        assert store.delete(drop.id) is True
        assert store.delete(drop.id) is False
        assert store.list_events() == [keep]

    def test_corrupt_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        with pytest.raises(StorageError):
            store.list_events()

    def test_non_array_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"events": []}))
        with pytest.raises(StorageError):
            store.list_events()

    def test_reads_externally_written_records(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            json.dumps(
                [
                    {"id": "5", "title": "Trip", "event_date": "2025-06-06", "event_end_date": "2025-06-16"},
                    "garbage",
                ]
            )
        )
        events = store.list_events()
        assert len(events) == 1
        assert events[0].end is not None
