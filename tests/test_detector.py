"""Tests for unscheduled note detection."""

from viewday.models import Document, Rule
from viewday.sync.detector import find_unscheduled


def test_strict_mode_needs_an_empty_key():
    rule = Rule(id="do", property="do_date")
    docs = [
        Document("blank.md", {"do_date": ""}),
        Document("null.md", {"do_date": None}),
        Document("absent.md", {"other": 1}),
        Document("dated.md", {"do_date": "2024-03-01"}),
    ]
    items = find_unscheduled(docs, [rule])
    assert [i.path for i in items] == ["blank.md", "null.md"]


def test_relaxed_mode_accepts_missing_key():
    rule = Rule(id="tasks", property="due", folder_scope="Tasks")
    docs = [Document("Tasks/x.md", {"title": "no due"})]

    items = find_unscheduled(docs, [rule])
    assert len(items) == 1
    item = items[0]
    assert item.path == "Tasks/x.md"
    assert item.basename == "x"
    assert item.folder == "Tasks"
    assert item.source_id == "tasks"
    assert item.property == "due"


def test_relaxed_mode_excludes_scheduled_and_out_of_scope():
    rule = Rule(id="tasks", property="due", folder_scope="Tasks")
    docs = [
        Document("Tasks/dated.md", {"due": "2024-03-01"}),
        Document("Tasks/blank.md", {"due": "  "}),
        Document("Other/x.md", {}),
    ]
    assert [i.path for i in find_unscheduled(docs, [rule])] == ["Tasks/blank.md"]


def test_inactive_rules_can_be_checked():
    rule = Rule(id="do", property="do_date", active=False)
    assert len(find_unscheduled([Document("a.md", {"do_date": ""})], [rule])) == 1


def test_first_matching_rule_wins():
    rules = [
        Rule(id="first", property="due", folder_scope="Tasks", color="red"),
        Rule(id="second", property="do_date", color="blue"),
    ]
    docs = [Document("Tasks/x.md", {"do_date": ""})]

    items = find_unscheduled(docs, rules)
    assert len(items) == 1
    assert items[0].source_id == "first"
    assert items[0].source_color == "red"


def test_duration_is_carried():
    rule = Rule(id="do", property="do_date")
    docs = [
        Document("a.md", {"do_date": "", "duration_minutes": 45}),
        Document("b.md", {"do_date": "", "duration": "20"}),
        Document("c.md", {"do_date": "", "duration": "a while"}),
    ]
    assert [i.duration for i in find_unscheduled(docs, [rule])] == [45, 20, None]


def test_root_folder_and_wire_form():
    rule = Rule(id="do", property="do_date", color="#abc")
    item = find_unscheduled([Document("a.md", {"do_date": None})], [rule])[0]
    assert item.to_dict() == {
        "path": "a.md",
        "basename": "a",
        "folder": "/",
        "sourceId": "do",
        "property": "do_date",
        "sourceColor": "#abc",
    }


def test_no_rules_no_items(memory_store):
    assert find_unscheduled(memory_store.documents(), []) == []
