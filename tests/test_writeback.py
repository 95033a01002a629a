"""Tests for writing calendar changes back into frontmatter."""

from datetime import date
from typing import Any

import pytest

from viewday.errors import StoreError, WriteConflictError
from viewday.sync.writeback import WriteBack
from viewday.vault.store import MemoryStore


@pytest.fixture
def writeback(memory_store: MemoryStore) -> WriteBack:
    return WriteBack(memory_store)


class FailingStore(MemoryStore):
    def __init__(self, error: Exception, notes: dict[str, dict[str, Any]]):
        super().__init__(notes)
        self.error = error

    def mutate_metadata(self, path, mutate):
        self.read_metadata(path)
        raise self.error


def test_reschedule_timed_value(writeback: WriteBack, memory_store: MemoryStore):
    result = writeback.reschedule("B.md", "start_date", "2024-03-02T14:00")

    assert result.success
    meta = memory_store.read_metadata("B.md")
    assert meta == {"start_date": "2024-03-02T14:00", "duration_minutes": 90}


def test_reschedule_plain_date_is_stored_as_date(writeback: WriteBack, memory_store: MemoryStore):
    writeback.reschedule("A.md", "do_date", "2024-03-09")
    assert memory_store.read_metadata("A.md")["do_date"] == date(2024, 3, 9)


def test_clear_blanks_the_date(writeback: WriteBack, memory_store: MemoryStore):
    result = writeback.reschedule("A.md", "do_date", None)

    assert result.success
    assert memory_store.read_metadata("A.md") == {"do_date": ""}


def test_reschedule_with_duration(writeback: WriteBack, memory_store: MemoryStore):
    writeback.reschedule("B.md", "start_date", "2024-03-02T14:00", duration=45.0)
    meta = memory_store.read_metadata("B.md")
    assert meta["duration_minutes"] == 45
    assert isinstance(meta["duration_minutes"], int)


def test_duration_goes_to_the_field_in_use():
    store = MemoryStore({"n.md": {"start": "2024-03-01T09:00", "duration": 30, "tags": ["x"]}})
    WriteBack(store).reschedule("n.md", "start", "2024-03-01T10:00", duration="60")

    assert store.read_metadata("n.md") == {"start": "2024-03-01T10:00", "duration": 60, "tags": ["x"]}


def test_reschedule_does_not_touch_other_keys():
    store = MemoryStore({"n.md": {"do_date": "2024-03-01", "status": "open", "viewday_links": ["e"]}})
    WriteBack(store).reschedule("n.md", "do_date", "2024-03-05T08:00")

    meta = store.read_metadata("n.md")
    assert meta["status"] == "open"
    assert meta["viewday_links"] == ["e"]
    assert "duration_minutes" not in meta


def test_link_creates_list(writeback: WriteBack, memory_store: MemoryStore):
    writeback.link("A.md", "evt-9")
    assert memory_store.read_metadata("A.md")["viewday_links"] == ["evt-9"]


def test_link_twice_keeps_one(writeback: WriteBack, memory_store: MemoryStore):
    writeback.link("A.md", "evt-9")
    writeback.link("A.md", "evt-9")
    assert memory_store.read_metadata("A.md")["viewday_links"] == ["evt-9"]


def test_link_upgrades_scalar(writeback: WriteBack, memory_store: MemoryStore):
    writeback.link("linked.md", "evt-2")
    assert memory_store.read_metadata("linked.md")["viewday_links"] == ["evt-1", "evt-2"]


def test_link_same_as_scalar(writeback: WriteBack, memory_store: MemoryStore):
    writeback.link("linked.md", "evt-1")
    assert memory_store.read_metadata("linked.md")["viewday_links"] == ["evt-1"]


def test_unlink_scalar_gives_empty_list(writeback: WriteBack, memory_store: MemoryStore):
    result = writeback.unlink("linked.md", "evt-1")
    assert result.success
    assert memory_store.read_metadata("linked.md")["viewday_links"] == []


def test_unlink_other_scalar_is_kept(writeback: WriteBack, memory_store: MemoryStore):
    writeback.unlink("linked.md", "evt-2")
    assert memory_store.read_metadata("linked.md")["viewday_links"] == "evt-1"


def test_unlink_from_list():
    store = MemoryStore({"n.md": {"viewday_links": ["a", "b", "a"]}})
    WriteBack(store).unlink("n.md", "a")
    assert store.read_metadata("n.md")["viewday_links"] == ["b"]


def test_unlink_without_field_is_noop(writeback: WriteBack, memory_store: MemoryStore):
    result = writeback.unlink("A.md", "evt-1")
    assert result.success
    assert "viewday_links" not in memory_store.read_metadata("A.md")


def test_missing_document_is_not_found(writeback: WriteBack):
    for result in (
        writeback.reschedule("nope.md", "do_date", "2024-03-01"),
        writeback.link("nope.md", "e"),
        writeback.unlink("nope.md", "e"),
    ):
        assert result.status == "not_found"
        assert not result.success
        assert "nope.md" in result.error


@pytest.mark.parametrize("error", [WriteConflictError("A.md"), StoreError("broken yaml"), OSError("disk full")])
def test_store_failures_are_reported(error: Exception):
    store = FailingStore(error, {"A.md": {"do_date": "2024-03-01"}})
    result = WriteBack(store).reschedule("A.md", "do_date", "2024-03-02")

    assert result.status == "failed"
    assert result.error == str(error)
    assert store.read_metadata("A.md") == {"do_date": "2024-03-01"}
