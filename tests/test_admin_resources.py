from campus_portal.models.enums import UserRole


# ---------- courses ----------

def test_course_crud(client, admin_headers):
    r = client.post("/admin/courses", json={"name": "Physics", "code": "phy 201"}, headers=admin_headers)
    assert r.status_code == 201
    course = r.json()
    assert course["code"] == "PHY-201"

    dup = client.post("/admin/courses", json={"name": "Physics II", "code": "PHY-201"}, headers=admin_headers)
    assert dup.status_code == 400

    found = client.get("/admin/courses?keyword=phys", headers=admin_headers).json()
    assert [c["id"] for c in found] == [course["id"]]

    upd = client.put(f"/admin/courses/{course['id']}", json={"name": "Physics I"}, headers=admin_headers)
    assert upd.status_code == 200
    assert upd.json()["name"] == "Physics I"

    assert client.delete(f"/admin/courses/{course['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/admin/courses/{course['id']}", headers=admin_headers).status_code == 404


def test_course_with_sections_cannot_be_deleted(client, admin_headers, faculty, make_section):
    section = make_section(faculty)
    r = client.delete(f"/admin/courses/{section.course_id}", headers=admin_headers)
    assert r.status_code == 409


# ---------- rooms ----------

def test_room_crud(client, admin_headers):
    r = client.post("/admin/rooms", json={"no": "B-12", "max_capacity": 30}, headers=admin_headers)
    assert r.status_code == 201
    room = r.json()

    assert client.post("/admin/rooms", json={"no": "B-12", "max_capacity": 10}, headers=admin_headers).status_code == 400

    upd = client.put(f"/admin/rooms/{room['id']}", json={"max_capacity": 45}, headers=admin_headers)
    assert upd.json()["max_capacity"] == 45

    assert client.delete(f"/admin/rooms/{room['id']}", headers=admin_headers).status_code == 200
    assert client.get("/admin/rooms", headers=admin_headers).json() == []


def test_room_capacity_must_be_positive(client, admin_headers):
    r = client.post("/admin/rooms", json={"no": "X-1", "max_capacity": 0}, headers=admin_headers)
    assert r.status_code == 422
    assert "max_capacity" in r.json()["field_errors"]


def test_room_in_use_cannot_be_deleted(client, admin_headers, faculty, make_section):
    section = make_section(faculty)
    assert client.delete(f"/admin/rooms/{section.room_id}", headers=admin_headers).status_code == 409


# ---------- time slots ----------

def test_time_slots(client, admin_headers):
    for body in (
        {"label": "P2", "day": "TUESDAY", "start_time": "10:00", "end_time": "11:00"},
        {"label": "P1", "day": "MONDAY", "start_time": "09:00", "end_time": "10:00"},
    ):
        assert client.post("/admin/time-slots", json=body, headers=admin_headers).status_code == 201

    slots = client.get("/admin/time-slots", headers=admin_headers).json()
    assert [s["label"] for s in slots] == ["P1", "P2"]

    r = client.delete(f"/admin/time-slots/{slots[0]['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert len(client.get("/admin/time-slots", headers=admin_headers).json()) == 1


# ---------- users ----------

def test_create_and_list_users(client, admin, admin_headers):
    r = client.post(
        "/admin/users",
        json={"name": "Prof X", "email": "prof@app.com", "password": "password123", "role": "FACULTY"},
        headers=admin_headers,
    )
    assert r.status_code == 201
    assert r.json()["role"] == "FACULTY"

    listing = client.get("/admin/users?role=FACULTY", headers=admin_headers).json()
    assert listing["total"] == 1
    assert listing["items"][0]["email"] == "prof@app.com"

    everyone = client.get("/admin/users", headers=admin_headers).json()
    assert everyone["total"] == 2


def test_update_user(client, admin_headers, make_user):
    user = make_user()
    other = make_user()

    r = client.put(f"/admin/users/{user.id}", json={"is_active": False, "name": "Renamed"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["is_active"] is False
    assert r.json()["name"] == "Renamed"

    clash = client.put(f"/admin/users/{user.id}", json={"email": other.email}, headers=admin_headers)
    assert clash.status_code == 409


def test_teaching_faculty_keeps_role(client, admin_headers, faculty, make_section):
    make_section(faculty)
    r = client.put(f"/admin/users/{faculty.id}", json={"role": "STUDENT"}, headers=admin_headers)
    assert r.status_code == 409
    assert client.delete(f"/admin/users/{faculty.id}", headers=admin_headers).status_code == 409


def test_enrolled_student_keeps_role(client, admin_headers, student, faculty, make_section, enroll):
    enroll(student, make_section(faculty))
    r = client.put(f"/admin/users/{student.id}", json={"role": "FACULTY"}, headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "Student still has enrollments"


def test_student_without_enrollments_can_change_role(client, admin_headers, student):
    r = client.put(f"/admin/users/{student.id}", json={"role": "FACULTY"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["role"] == "FACULTY"


def test_admin_cannot_delete_self(client, admin, admin_headers):
    assert client.delete(f"/admin/users/{admin.id}", headers=admin_headers).status_code == 400


def test_delete_student(client, admin_headers, student, faculty, make_section, enroll):
    enroll(student, make_section(faculty))
    assert client.delete(f"/admin/users/{student.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/admin/users/{student.id}", headers=admin_headers).status_code == 404


# ---------- roster import ----------

def test_roster_import_csv(client, admin_headers, make_user):
    existing = make_user(email="taken@app.com")
    csv = (
        "Name,Email,Password\n"
        "Ann Lee,ann@app.com,password123\n"
        f"Old One,{existing.email},password123\n"
        "Bad Mail,not-an-email,password123\n"
        "Short,short@app.com,abc\n"
    )
    r = client.post(
        "/admin/users/import",
        files={"file": ("roster.csv", csv.encode("utf-8"), "text/csv")},
        headers=admin_headers,
    )
    assert r.status_code == 200
    data = r.json()
    assert data["inserted"] == 1
    assert data["skipped_existing"] == 1
    assert len(data["errors"]) == 2

    students = client.get("/admin/users?email=ann@app.com", headers=admin_headers).json()
    assert students["items"][0]["role"] == "STUDENT"


def test_roster_import_skips_overlong_password(client, admin_headers):
    csv = (
        "Name,Email,Password\n"
        "Ann Lee,ann@app.com,password123\n"
        f"Long One,long@app.com,{'x' * 80}\n"
    )
    r = client.post(
        "/admin/users/import",
        files={"file": ("roster.csv", csv.encode("utf-8"), "text/csv")},
        headers=admin_headers,
    )
    assert r.status_code == 200
    data = r.json()
    assert data["inserted"] == 1
    assert data["errors"] == ["line 3: password longer than 72 bytes"]

    assert client.get("/admin/users?email=ann@app.com", headers=admin_headers).json()["total"] == 1
    assert client.get("/admin/users?email=long@app.com", headers=admin_headers).json()["total"] == 0


def test_roster_import_rejects_other_files(client, admin_headers):
    r = client.post(
        "/admin/users/import",
        files={"file": ("roster.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )
    assert r.status_code == 400


# ---------- student schedules ----------

def test_admin_views_and_drops_student_schedule(client, admin_headers, student, faculty, make_section, enroll):
    row = enroll(student, make_section(faculty))

    schedules = client.get(f"/admin/students/{student.id}/schedules", headers=admin_headers).json()
    assert [s["id"] for s in schedules] == [row.id]

    r = client.delete(f"/admin/students/{student.id}/schedules/{row.id}", headers=admin_headers)
    assert r.json() == {"success": True}
    assert client.get(f"/admin/students/{student.id}/schedules", headers=admin_headers).json() == []


def test_schedules_only_for_students(client, admin_headers, make_user):
    prof = make_user(UserRole.FACULTY)
    assert client.get(f"/admin/students/{prof.id}/schedules", headers=admin_headers).status_code == 400
