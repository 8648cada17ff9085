from config import ADMIN_TOKEN


def _register_admin(client):
    client.post(
        "/api/auth/register",
        json={
            "email": "principal@example.com",
            "password": "secret123",
            "first_name": "Ada",
            "last_name": "Principal",
            "role": "admin",
            "admin_token": ADMIN_TOKEN,
        },
    )
    login = client.post(
        "/api/auth/login",
        json={"email": "principal@example.com", "password": "secret123"},
    ).json()
    return {"Authorization": f"Bearer {login['token']}"}


def test_admin_builds_school_structure(client, make_user):
    headers = _register_admin(client)

    resp = client.post("/api/schools", json={"name": "Lakeside High"}, headers=headers)
    assert resp.status_code == 201
    school = resp.json()
    assert school["school_code"].startswith("LAK")
    assert len(school["school_code"]) == 7

    me = client.get("/api/auth/me", headers=headers).json()["user"]
    assert me["school_id"] == school["id"]

    level = client.post(
        f"/api/schools/{school['id']}/levels",
        json={"name": "Grade 10", "order_index": 10},
        headers=headers,
    ).json()
    section = client.post(
        f"/api/schools/{school['id']}/sections",
        json={"level_id": level["id"], "name": "Einstein"},
        headers=headers,
    ).json()
    assert section["level_name"] == "Grade 10"

    teacher = make_user("teacher", school_id=school["id"], first_name="Tom", last_name="Hart")
    resp = client.post(
        f"/api/schools/{school['id']}/sections/{section['id']}/teachers",
        json={"teacher_id": teacher.user_id},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["school_year"] == "2025"
    assert resp.json()["teacher_name"] == "Tom Hart"

    listed = client.get(
        f"/api/schools/{school['id']}/sections/{section['id']}/teachers", headers=headers
    ).json()["assignments"]
    assert [a["teacher_id"] for a in listed] == [teacher.user_id]

    lookup = client.get(f"/api/schools/by-code/{school['school_code']}")
    assert lookup.status_code == 200
    assert lookup.json()["name"] == "Lakeside High"


def test_only_teachers_can_be_assigned(client, school, section, make_user, auth_headers):
    developer = make_user("developer")
    student = make_user("student", school_id=school.id)
    resp = client.post(
        f"/api/schools/{school.id}/sections/{section.id}/teachers",
        json={"teacher_id": student.user_id},
        headers=auth_headers(developer),
    )
    assert resp.status_code == 400


def test_teachers_cannot_create_schools(client, teacher, auth_headers):
    resp = client.post("/api/schools", json={"name": "Rogue"}, headers=auth_headers(teacher))
    assert resp.status_code == 403


def test_admin_of_other_school_cannot_add_levels(client, school, make_user, auth_headers):
    outsider = make_user("admin")
    resp = client.post(
        f"/api/schools/{school.id}/levels",
        json={"name": "Grade 1"},
        headers=auth_headers(outsider),
    )
    assert resp.status_code == 403


def test_unknown_school_code_lookup(client):
    assert client.get("/api/schools/by-code/NOPE1234").status_code == 404
