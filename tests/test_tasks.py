from datetime import date

import pytest

from coursegrade.core.errors import ConflictOrRace, InvalidInput, NotFound, Unauthorized
from coursegrade.models.group import FinalGroup
from coursegrade.services import groups, task_grading, tasks


def _new(db, seed, user="student1", **payload):
    payload.setdefault("title", "Task")
    return tasks.create_task(db, seed["group"], seed[user], payload)


def test_create_task_defaults(db, seed):
    task = _new(db, seed, title="  Write docs ", assignee_ids=[seed["student2"], seed["student2"]])

    assert task.title == "Write docs"
    assert task.status == "todo"
    assert task.priority == "medium"
    assert task.created_by.id == seed["student1"]
    assert [a.user_id for a in task.assignees] == [seed["student2"]]
    assert task.assignees[0].assigned_by.id == seed["student1"]


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "   "},
        {"title": "ok", "priority": "urgent"},
    ],
)
def test_create_task_rejects_bad_input(db, seed, payload):
    with pytest.raises(InvalidInput):
        tasks.create_task(db, seed["group"], seed["student1"], payload)


def test_assignees_must_be_members(db, seed):
    with pytest.raises(InvalidInput):
        _new(db, seed, assignee_ids=[seed["student4"]])


def test_outsider_cannot_touch_group_tasks(db, seed):
    task = _new(db, seed)

    with pytest.raises(Unauthorized):
        _new(db, seed, user="student4")
    with pytest.raises(Unauthorized):
        tasks.get_task(db, task.id, seed["student4"])
    with pytest.raises(Unauthorized):
        tasks.list_group_tasks(db, seed["group"], seed["student4"])


def test_member_moves_task_through_board(db, seed):
    task = _new(db, seed)

    for status in ("in_progress", "done", "todo"):
        task = tasks.update_task_status(db, task.id, status, seed["student2"])
        assert task.status == status

    with pytest.raises(InvalidInput):
        tasks.update_task_status(db, task.id, "archived", seed["student2"])


def test_grading_statuses_cannot_be_set_by_hand(db, seed):
    task = _new(db, seed)

    for status in ("graded", "appeal"):
        with pytest.raises(InvalidInput):
            tasks.update_task_status(db, task.id, status, seed["student1"])


def test_graded_task_is_frozen_for_members(db, seed, make_task):
    task = make_task()
    task_grading.grade_task(db, task.id, seed["student1"], seed["admin"], 10, 10)

    with pytest.raises(InvalidInput):
        tasks.update_task_status(db, task.id, "todo", seed["student1"])

    # other fields are still editable
    task = tasks.update_task(db, task.id, seed["student1"], {"description": "final notes"})
    assert task.description == "final notes"
    assert task.status == "graded"


def test_update_task_fields(db, seed):
    task = _new(db, seed)
    task = tasks.update_task(
        db,
        task.id,
        seed["student3"],
        {"title": "Renamed", "priority": "high", "due_date": date(2030, 1, 31), "commit_link": ""},
    )

    assert task.title == "Renamed"
    assert task.priority == "high"
    assert task.due_date == date(2030, 1, 31)
    assert task.commit_link is None

    with pytest.raises(InvalidInput):
        tasks.update_task(db, task.id, seed["student3"], {"title": ""})


def test_delete_assigned_task_requires_assignee(db, seed):
    task = _new(db, seed, assignee_ids=[seed["student2"]])

    with pytest.raises(Unauthorized):
        tasks.delete_task(db, task.id, seed["student1"])

    tasks.delete_task(db, task.id, seed["student2"])
    with pytest.raises(NotFound):
        tasks.load_task(db, task.id)


def test_delete_unassigned_task_requires_owner(db, seed):
    task = _new(db, seed, user="student2")

    with pytest.raises(Unauthorized):
        tasks.delete_task(db, task.id, seed["student2"])

    tasks.delete_task(db, task.id, seed["student1"])
    assert tasks.list_group_tasks(db, seed["group"], seed["student1"]) == []


def test_filter_by_assignee(db, seed):
    mine = _new(db, seed, title="mine", assignee_ids=[seed["student1"]])
    _new(db, seed, title="theirs", assignee_ids=[seed["student2"]])
    _new(db, seed, title="nobody")

    all_tasks = tasks.list_group_tasks(db, seed["group"], seed["student1"])

    assert len(tasks.filter_tasks(all_tasks)) == 3
    assert [t.id for t in tasks.filter_tasks(all_tasks, [seed["student1"]])] == [mine.id]
    assert len(tasks.filter_tasks(all_tasks, [seed["student1"], seed["student2"]])) == 2


def test_sort_by_priority_and_due_date(db, seed):
    low = _new(db, seed, title="low", priority="low", due_date=date(2030, 3, 1))
    high = _new(db, seed, title="high", priority="high")
    medium = _new(db, seed, title="medium", priority="medium", due_date=date(2030, 1, 1))

    all_tasks = tasks.list_group_tasks(db, seed["group"], seed["student1"])

    by_priority = tasks.sort_tasks(all_tasks, "priority")
    assert [t.id for t in by_priority] == [high.id, medium.id, low.id]

    by_due = tasks.sort_tasks(all_tasks, "dueDate")
    assert [t.id for t in by_due] == [medium.id, low.id, high.id]


def test_sort_by_score(db, seed, make_task):
    top = make_task(title="top")
    bottom = make_task(title="bottom")
    ungraded = make_task(title="ungraded", assignees=("student2",))
    task_grading.grade_task(db, top.id, seed["student1"], seed["admin"], 9, 10)
    task_grading.grade_task(db, bottom.id, seed["student1"], seed["admin"], 2, 10)

    all_tasks = tasks.list_group_tasks(db, seed["group"], seed["student1"])

    assert [t.id for t in tasks.sort_tasks(all_tasks, "score-desc")] == [
        top.id,
        bottom.id,
        ungraded.id,
    ]
    assert [t.id for t in tasks.sort_tasks(all_tasks, "score-asc")][0] == ungraded.id


def test_unknown_sort_option(db, seed):
    with pytest.raises(InvalidInput):
        tasks.sort_tasks([], "alphabetical")


def test_board_groups_by_status(db, seed):
    _new(db, seed, title="a")
    b = _new(db, seed, title="b")
    tasks.update_task_status(db, b.id, "done", seed["student1"])

    board = tasks.group_tasks_by_status(tasks.list_group_tasks(db, seed["group"], seed["student1"]))

    assert {status: len(items) for status, items in board.items()} == {"todo": 1, "done": 1}


def test_task_endpoints(client, auth, seed):
    headers = auth("student1@example.com")
    group_id = seed["group"]

    r = client.post(
        f"/final/groups/{group_id}/tasks",
        headers=headers,
        json={"title": "Login page", "priority": "high", "assignee_ids": [seed["student2"]]},
    )
    assert r.status_code == 201, r.text
    task_id = r.json()["id"]
    assert r.json()["assignees"][0]["user"]["id"] == seed["student2"]

    r = client.patch(
        f"/final/groups/{group_id}/tasks/{task_id}/status",
        headers=headers,
        json={"status": "graded"},
    )
    assert r.status_code == 400
    assert r.json()["kind"] == "invalid_input"

    r = client.put(
        f"/final/groups/{group_id}/tasks/{task_id}/assign",
        headers=headers,
        json={"assignee_ids": [seed["student1"], seed["student3"]]},
    )
    assert r.status_code == 200
    assert sorted(a["user"]["id"] for a in r.json()["assignees"]) == sorted(
        [seed["student1"], seed["student3"]]
    )

    r = client.get(
        f"/final/groups/{group_id}/tasks",
        headers=headers,
        params={"assignee_ids": [seed["student3"]], "sort_by": "priority"},
    )
    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == [task_id]

    r = client.get(f"/final/groups/{group_id}/tasks", headers=headers, params={"sort_by": "nope"})
    assert r.status_code == 400

    r = client.get(f"/final/groups/{group_id}/tasks/board", headers=headers)
    assert r.status_code == 200
    assert list(r.json()) == ["todo"]

    r = client.get(f"/final/groups/{group_id}/tasks/{task_id}", headers=auth("student4@example.com"))
    assert r.status_code == 403

    r = client.delete(f"/final/groups/{group_id}/tasks/{task_id}", headers=headers)
    assert r.status_code == 204

    r = client.get(f"/final/groups/{group_id}/tasks/{task_id}", headers=headers)
    assert r.status_code == 404


def test_task_from_other_group_is_not_found(client, auth, seed, db):
    other = groups.create_group(db, seed["student1"], "Team Beta")
    task = tasks.create_task(db, other.id, seed["student1"], {"title": "elsewhere"})

    r = client.get(
        f"/final/groups/{seed['group']}/tasks/{task.id}", headers=auth("student1@example.com")
    )
    assert r.status_code == 404


def test_join_and_leave_group(db, seed):
    group = groups.join_group(db, seed["group"], seed["student4"])
    assert seed["student4"] in {m.user_id for m in group.members}

    with pytest.raises(ConflictOrRace):
        groups.join_group(db, seed["group"], seed["student4"])

    groups.leave_group(db, seed["group"], seed["student1"])
    owners = [m.user_id for m in groups.get_group(db, seed["group"]).members if m.role == "owner"]
    assert owners == [seed["student2"]]

    with pytest.raises(NotFound):
        groups.leave_group(db, seed["group"], seed["student1"])


def test_last_member_leaving_removes_group(db, seed):
    solo = groups.create_group(db, seed["student4"], "  Solo  ")
    assert solo.name == "Solo"
    assert [m.role for m in solo.members] == ["owner"]

    groups.leave_group(db, solo.id, seed["student4"])
    assert db.query(FinalGroup).filter(FinalGroup.id == solo.id).first() is None


def test_group_endpoints(client, auth, seed):
    headers = auth("student4@example.com")

    r = client.get("/final/groups/mine", headers=headers)
    assert r.json() == []

    r = client.post(f"/final/groups/{seed['group']}/join", headers=headers)
    assert r.status_code == 200
    assert len(r.json()["members"]) == 4

    r = client.post(f"/final/groups/{seed['group']}/join", headers=headers)
    assert r.status_code == 409

    r = client.post(f"/final/groups/{seed['group']}/leave", headers=headers)
    assert r.status_code == 204


def test_leaving_group_unassigns_member(db, seed, make_task):
    task = make_task(assignees=("student2",))

    groups.leave_group(db, seed["group"], seed["student2"])

    assert tasks.load_task(db, task.id).assignees == []
    with pytest.raises(InvalidInput):
        task_grading.grade_task(db, task.id, seed["student2"], seed["admin"], 5, 10)

    # unassigned now, so the owner may delete it
    tasks.delete_task(db, task.id, seed["student1"])
    with pytest.raises(NotFound):
        tasks.load_task(db, task.id)


def test_leaving_ungraded_assignee_completes_grading(db, seed, make_task):
    task = make_task(assignees=("student1", "student2"))
    task_grading.grade_task(db, task.id, seed["student1"], seed["admin"], 8, 10)
    assert tasks.load_task(db, task.id).status == "done"

    groups.leave_group(db, seed["group"], seed["student2"])

    task = tasks.load_task(db, task.id)
    assert [a.user_id for a in task.assignees] == [seed["student1"]]
    assert task.status == "graded"


def test_leaving_other_group_keeps_assignments(db, seed, make_task):
    task = make_task(assignees=("student2",))
    other = groups.create_group(db, seed["student2"], "Team Beta")
    groups.join_group(db, other.id, seed["student3"])

    groups.leave_group(db, other.id, seed["student2"])

    assert [a.user_id for a in tasks.load_task(db, task.id).assignees] == [seed["student2"]]
