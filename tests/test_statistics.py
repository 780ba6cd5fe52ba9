import pytest

from coursegrade.services import statistics, task_grading


@pytest.mark.parametrize(
    "done,total,expected",
    [(0, 0, 0.0), (1, 3, 33.33), (2, 3, 66.67), (4, 4, 100.0)],
)
def test_completion_rate(done, total, expected):
    assert statistics.completion_rate(done, total) == expected


def test_average_score_is_percentage_of_max():
    assert statistics.average_score(24, 30) == 80.0
    assert statistics.average_score(0, 0) == 0.0


def test_grading_stats(db, seed, make_task):
    admin = seed["admin"]
    graded = make_task(title="graded", assignees=("student1",))
    task_grading.grade_task(db, graded.id, seed["student1"], admin, 8, 10)

    waiting = make_task(title="waiting", assignees=("student1", "student2"))
    task_grading.grade_task(db, waiting.id, seed["student2"], admin, 4, 10)

    make_task(title="open", status="in_progress")
    make_task(title="fresh", status="todo")

    stats = statistics.get_grading_stats(db, seed["group"])

    assert stats["total_tasks"] == 4
    assert stats["graded_tasks"] == 1
    assert stats["pending_tasks"] == 1
    assert stats["total_grades"] == 2
    assert stats["average_score"] == 60.0
    assert stats["completion_rate"] == 25.0
    assert stats["status_counts"] == {
        "todo": 1,
        "in_progress": 1,
        "done": 1,
        "graded": 1,
        "appeal": 0,
    }


def test_stats_for_empty_group(db, seed):
    stats = statistics.get_grading_stats(db, seed["group"])
    assert stats["total_tasks"] == 0
    assert stats["completion_rate"] == 0.0
    assert stats["average_score"] == 0.0


def test_student_performance_orders_by_average(db, seed, make_task):
    admin = seed["admin"]
    first = make_task(title="A", assignees=("student1", "student2"))
    second = make_task(title="B", assignees=("student1",))
    task_grading.grade_task(db, first.id, seed["student1"], admin, 4, 10)
    task_grading.grade_task(db, first.id, seed["student2"], admin, 9, 10)
    task_grading.grade_task(db, second.id, seed["student1"], admin, 6, 10)

    rows = statistics.get_student_performance(db)

    assert [r["student_id"] for r in rows] == [seed["student2"], seed["student1"]]
    assert rows[1]["total_points"] == 10
    assert rows[1]["tasks_graded"] == 2
    assert rows[1]["average_points"] == 5.0
    assert rows[0]["student_email"] == "student2@example.com"


def test_group_summary_sums_task_points(db, seed, make_task):
    admin = seed["admin"]
    first = make_task(title="A", assignees=("student1",))
    second = make_task(title="B", assignees=("student1",))
    task_grading.grade_task(db, first.id, seed["student1"], admin, 7, 10)
    task_grading.grade_task(db, second.id, seed["student1"], admin, 3, 5, "short")

    summary = statistics.get_student_group_summary(db, seed["student1"], seed["group"])

    assert summary["total_points"] == 10
    assert summary["total_max_points"] == 15
    assert summary["graded_task_count"] == 2
    assert {line["task_title"] for line in summary["task_grades"]} == {"A", "B"}

    assert statistics.get_student_group_summary(db, seed["student2"], seed["group"]) is None


def test_group_final_grades_skip_ungraded_members(client, auth, seed, db, make_task):
    task = make_task(assignees=("student2",))
    task_grading.grade_task(db, task.id, seed["student2"], seed["admin"], 9, 10)

    r = client.get(
        f"/admin/final/groups/{seed['group']}/final-grades",
        headers=auth("admin@example.com"),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert [row["student_id"] for row in body] == [seed["student2"]]
    assert body[0]["student_name"] == "Student 2"
    assert body[0]["total_points"] == 9

    r = client.get("/admin/final/groups/999999/final-grades", headers=auth("admin@example.com"))
    assert r.status_code == 404


def test_stats_endpoint(client, auth, seed, make_task):
    make_task()
    r = client.get("/admin/final/grading/stats", headers=auth("admin@example.com"))
    assert r.status_code == 200
    assert r.json()["pending_tasks"] == 1
    assert r.json()["completion_rate"] == 100.0
