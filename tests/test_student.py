from datetime import time

import pytest

from campus_portal.models.enums import Day, UserRole
from campus_portal.models.quiz import Test, Question


@pytest.fixture
def quiz(db_session, faculty, make_section):
    """A two-question test on a Monday section; max two attempts."""
    section = make_section(faculty)
    test = Test(section_id=section.id, name="Quiz 1", description="Warm-up", max_attempts=2, slug="quiz-one")
    db_session.add(test)
    db_session.flush()
    db_session.add_all([
        Question(test_id=test.id, question="2 + 2 = ?", options=["3", "4", "5", "6"], answer=2),
        Question(test_id=test.id, question="3 * 3 = ?", options=["9", "6", "33", "0"], answer=1),
    ])
    db_session.commit()
    db_session.refresh(test)
    return test


def test_enroll_and_list(client, student_headers, faculty, make_section, db_session):
    section = make_section(faculty)
    r = client.post("/student/schedules", json={"section_id": section.id}, headers=student_headers)
    assert r.status_code == 201
    assert r.json()["section"]["id"] == section.id

    mine = client.get("/student/schedules", headers=student_headers).json()
    assert [s["section_id"] for s in mine] == [section.id]

    browse = client.get("/student/sections", headers=student_headers).json()
    assert browse[0]["is_enrolled"] is True
    assert browse[0]["enrolled_count"] == 1
    assert browse[0]["schedule_id"] == mine[0]["id"]


def test_enroll_twice(client, student_headers, faculty, make_section):
    section = make_section(faculty)
    client.post("/student/schedules", json={"section_id": section.id}, headers=student_headers)
    r = client.post("/student/schedules", json={"section_id": section.id}, headers=student_headers)
    assert r.status_code == 400


def test_enroll_unknown_section(client, student_headers):
    assert client.post("/student/schedules", json={"section_id": 999}, headers=student_headers).status_code == 404


def test_full_section(client, student_headers, faculty, make_user, make_room, make_section, enroll):
    section = make_section(faculty, room=make_room(max_capacity=1))
    enroll(make_user(), section)

    r = client.post("/student/schedules", json={"section_id": section.id}, headers=student_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Section is full"


def test_timetable_clash(client, student, student_headers, make_user, make_section, enroll):
    first = make_section(make_user(UserRole.FACULTY), code="A")
    enroll(student, first)
    overlapping = make_section(make_user(UserRole.FACULTY), code="B", start=time(10, 0), end=time(11, 0))

    r = client.post("/student/schedules", json={"section_id": overlapping.id}, headers=student_headers)
    assert r.status_code == 409
    assert r.json()["detail"]["conflict_section_id"] == first.id


def test_same_time_on_another_day_is_fine(client, student, student_headers, make_user, make_section, enroll):
    enroll(student, make_section(make_user(UserRole.FACULTY), code="A"))
    tuesday = make_section(make_user(UserRole.FACULTY), code="B", day=Day.TUESDAY)
    r = client.post("/student/schedules", json={"section_id": tuesday.id}, headers=student_headers)
    assert r.status_code == 201


def test_drop_own_schedule_only(client, student, student_headers, make_user, faculty, make_section, enroll, auth_headers):
    row = enroll(student, make_section(faculty))
    stranger = auth_headers(make_user())

    assert client.delete(f"/student/schedules/{row.id}", headers=stranger).status_code == 404
    assert client.delete(f"/student/schedules/{row.id}", headers=student_headers).json() == {"success": True}
    assert client.get("/student/schedules", headers=student_headers).json() == []


def test_class_detail_needs_enrollment(client, student, student_headers, quiz, enroll):
    r = client.get(f"/student/classes/{quiz.section_id}", headers=student_headers)
    assert r.status_code == 403

    row = enroll(student, quiz.section)
    detail = client.get(f"/student/classes/{quiz.section_id}", headers=student_headers).json()
    assert detail["schedule_id"] == row.id
    assert [t["slug"] for t in detail["tests"]] == ["quiz-one"]


def test_start_hides_answers(client, student, student_headers, quiz, enroll):
    enroll(student, quiz.section)
    r = client.post(f"/student/classes/{quiz.section_id}/tests/{quiz.id}/start", headers=student_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["enrollment_test"]["status"] == "IN_PROGRESS"
    assert data["enrollment_test"]["attempts"] == 0
    assert len(data["test"]["questions"]) == 2
    assert all("answer" not in q for q in data["test"]["questions"])


def test_start_requires_enrollment(client, student_headers, quiz):
    r = client.post(f"/student/classes/{quiz.section_id}/tests/{quiz.id}/start", headers=student_headers)
    assert r.status_code == 403


def test_submit_scores_and_counts_attempts(client, student, student_headers, quiz, enroll):
    enroll(student, quiz.section)
    started = client.post(
        f"/student/classes/{quiz.section_id}/tests/{quiz.id}/start", headers=student_headers,
    ).json()
    et_id = started["enrollment_test"]["id"]

    r = client.post(
        "/student/submit-quiz",
        json={"test_id": quiz.id, "enrollment_test_id": et_id, "answers": [2, 3]},
        headers=student_headers,
    )
    assert r.status_code == 200
    assert r.json() == {"success": True, "score": 1, "total": 2, "attempts": 1, "status": "ATTEMPTED"}

    # second and last attempt
    client.post(f"/student/classes/{quiz.section_id}/tests/{quiz.id}/start", headers=student_headers)
    r = client.post(
        "/student/submit-quiz",
        json={"test_id": quiz.id, "enrollment_test_id": et_id, "answers": [2, 1]},
        headers=student_headers,
    )
    assert r.json()["score"] == 2
    assert r.json()["attempts"] == 2

    again = client.post(
        "/student/submit-quiz",
        json={"test_id": quiz.id, "enrollment_test_id": et_id, "answers": [2, 1]},
        headers=student_headers,
    )
    assert again.status_code == 400
    restart = client.post(f"/student/classes/{quiz.section_id}/tests/{quiz.id}/start", headers=student_headers)
    assert restart.status_code == 400


def test_blank_answers_score_nothing(client, student, student_headers, quiz, enroll):
    enroll(student, quiz.section)
    et_id = client.post(
        f"/student/classes/{quiz.section_id}/tests/{quiz.id}/start", headers=student_headers,
    ).json()["enrollment_test"]["id"]

    r = client.post(
        "/student/submit-quiz",
        json={"test_id": quiz.id, "enrollment_test_id": et_id, "answers": [None]},
        headers=student_headers,
    )
    assert r.json()["score"] == 0


def test_cannot_submit_for_another_student(client, student, quiz, enroll, make_user, auth_headers, student_headers):
    enroll(student, quiz.section)
    et_id = client.post(
        f"/student/classes/{quiz.section_id}/tests/{quiz.id}/start", headers=student_headers,
    ).json()["enrollment_test"]["id"]

    r = client.post(
        "/student/submit-quiz",
        json={"test_id": quiz.id, "enrollment_test_id": et_id, "answers": [2, 1]},
        headers=auth_headers(make_user()),
    )
    assert r.status_code == 404


def test_schedule_lists_section_tests(client, student, student_headers, quiz, enroll):
    enroll(student, quiz.section)
    mine = client.get("/student/schedules", headers=student_headers).json()
    assert [t["id"] for t in mine[0]["section_tests"]] == [quiz.id]
    assert mine[0]["tests"] == []
