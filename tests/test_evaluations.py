import pytest

from coursegrade.core.errors import InvalidInput, Unauthorized
from coursegrade.services import evaluations, groups


def _scores(w1, w2, w3, w4):
    return {"week1_score": w1, "week2_score": w2, "week3_score": w3, "week4_score": w4}


def test_upsert_creates_with_total(db, seed):
    ev = evaluations.upsert_evaluation(
        db,
        seed["group"],
        seed["student1"],
        seed["admin"],
        {**_scores(50, 100, 100, 50), "week1_feedback": "  great start ", "feedback": ""},
    )

    assert ev.total_score == 300
    assert ev.week1_feedback == "great start"
    assert ev.feedback is None
    assert ev.evaluator_id == seed["admin"]

    details = evaluations.to_details(ev)
    assert details["max_score"] == 450
    assert [w["max_score"] for w in details["weekly_breakdown"]] == [50, 100, 150, 150]
    assert details["weekly_breakdown"][2]["score"] == 100


def test_partial_update_keeps_other_weeks(db, seed):
    evaluations.upsert_evaluation(
        db, seed["group"], seed["student1"], seed["admin"], _scores(40, 80, 120, 120)
    )

    ev = evaluations.upsert_evaluation(
        db,
        seed["group"],
        seed["student1"],
        seed["admin"],
        {"week4_score": 150, "week4_tasks_completed": 6},
    )

    assert (ev.week1_score, ev.week2_score, ev.week3_score, ev.week4_score) == (40, 80, 120, 150)
    assert ev.week4_tasks_completed == 6
    assert ev.total_score == 390
    assert len(evaluations.list_evaluations(db)) == 1


@pytest.mark.parametrize(
    "data",
    [
        {"week1_score": 51},
        {"week2_score": -1},
        {"week3_score": 151},
        {"week4_github_contributions": -2},
        {"week5_score": 10},
    ],
)
def test_invalid_weekly_data_rejected(db, seed, data):
    with pytest.raises(InvalidInput):
        evaluations.upsert_evaluation(db, seed["group"], seed["student1"], seed["admin"], data)

    assert evaluations.get_student_evaluation(db, seed["group"], seed["student1"]) is None


def test_week_maximum_is_accepted(db, seed):
    ev = evaluations.upsert_evaluation(
        db, seed["group"], seed["student2"], seed["admin"], _scores(50, 100, 150, 150)
    )
    assert ev.total_score == 450


def test_non_member_cannot_be_evaluated(db, seed):
    with pytest.raises(Unauthorized):
        evaluations.upsert_evaluation(
            db, seed["group"], seed["student4"], seed["admin"], _scores(10, 10, 10, 10)
        )


def test_summary_averages(db, seed):
    evaluations.upsert_evaluation(
        db, seed["group"], seed["student1"], seed["admin"], _scores(50, 100, 100, 50)
    )
    evaluations.upsert_evaluation(
        db, seed["group"], seed["student2"], seed["admin"], _scores(30, 70, 50, 50)
    )

    summary = evaluations.get_evaluation_summary(db)

    assert summary["total_students"] == 3
    assert summary["distinct_students"] == 3
    assert summary["evaluated_students"] == 2
    assert summary["average_score"] == 250
    assert summary["weekly_averages"] == {"week1": 40, "week2": 85, "week3": 75, "week4": 50}


def test_summary_rounds_half_up(db, seed):
    evaluations.upsert_evaluation(
        db, seed["group"], seed["student1"], seed["admin"], _scores(1, 0, 0, 0)
    )
    evaluations.upsert_evaluation(
        db, seed["group"], seed["student2"], seed["admin"], _scores(2, 0, 0, 0)
    )

    summary = evaluations.get_evaluation_summary(db)
    assert summary["weekly_averages"]["week1"] == 2
    assert summary["average_score"] == 2


def test_empty_summary(db):
    summary = evaluations.get_evaluation_summary(db)
    assert summary["evaluated_students"] == 0
    assert summary["average_score"] == 0
    assert summary["weekly_averages"]["week3"] == 0


def test_students_for_evaluation_flags_evaluated(db, seed):
    evaluations.upsert_evaluation(
        db, seed["group"], seed["student2"], seed["admin"], _scores(10, 10, 10, 10)
    )

    rows = evaluations.get_students_for_evaluation(db)

    assert [r["user_id"] for r in rows] == [seed["student1"], seed["student2"], seed["student3"]]
    assert [r["has_evaluation"] for r in rows] == [False, True, False]
    assert {r["group_name"] for r in rows} == {"Team Alpha"}


def test_evaluation_endpoints(client, auth, seed):
    admin = auth("admin@example.com")

    r = client.post(
        "/admin/final/evaluations",
        headers=admin,
        json={"group_id": seed["group"], "user_id": seed["student3"], "week1_score": 45},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_score"] == 45
    assert body["student"]["email"] == "student3@example.com"
    assert body["group"]["name"] == "Team Alpha"

    r = client.post(
        "/admin/final/evaluations",
        headers=admin,
        json={"group_id": seed["group"], "user_id": seed["student3"], "week1_score": 60},
    )
    assert r.status_code == 400
    assert r.json()["kind"] == "invalid_input"

    r = client.get(f"/admin/final/evaluations/{seed['group']}/{seed['student3']}", headers=admin)
    assert r.status_code == 200
    assert r.json()["weekly_breakdown"][0]["score"] == 45

    r = client.get(f"/admin/final/evaluations/{seed['group']}/{seed['student1']}", headers=admin)
    assert r.status_code == 404

    r = client.get("/admin/final/evaluations/summary", headers=admin)
    assert r.status_code == 200
    assert r.json()["evaluated_students"] == 1

    r = client.get("/admin/final/evaluations", headers=auth("student1@example.com"))
    assert r.status_code == 403


def test_summary_counts_memberships_and_distinct_students(db, seed):
    groups.create_group(db, seed["student1"], "Team Beta")

    summary = evaluations.get_evaluation_summary(db)

    assert summary["total_students"] == 4
    assert summary["distinct_students"] == 3
    assert summary["total_students"] == summary["distinct_students"] + 1
